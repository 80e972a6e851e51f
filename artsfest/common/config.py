from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    app_name: str = "Arts Fest Registration"
    debug: bool = False
    database_url: str = "sqlite:///./artsfest.db"
    registry_backend: Literal["sql", "memory"] = "sql"
    auto_create_tables: bool = True  # Use Alembic migrations in production
    seed_on_startup: bool = True
    code_issue_attempts: int = 5
    cors_origins: List[str] = ["*"]
    max_upload_size_mb: int = 5
    allowed_upload_extensions: List[str] = [".png", ".jpg", ".jpeg", ".gif", ".webp"]

    # Backblaze B2 Storage
    b2_endpoint: str = "https://s3.eu-central-003.backblazeb2.com"
    b2_bucket_name: str = "artsfest-uploads"
    b2_key_id: str = ""
    b2_application_key: str = ""
    b2_region: str = "eu-central-003"
    b2_key_prefix: str = "artsfest_"


@lru_cache
def get_settings() -> Settings:
    return Settings()
