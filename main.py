import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from artsfest.common.config import get_settings
from artsfest.common import file_router
from artsfest.common.db import create_tables, session_scope
from artsfest.registration.registry import SqlRegistry, get_memory_registry
from artsfest.registration.routers import public as registration_public, reports as registration_reports
from artsfest.registration.seed import seed_registry


settings = get_settings()

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.registry_backend == "memory":
        if settings.seed_on_startup:
            seed_registry(get_memory_registry())
    else:
        if settings.auto_create_tables:
            create_tables()
        if settings.seed_on_startup:
            with session_scope() as session:
                seed_registry(SqlRegistry(session))
    logger.info(f"{settings.app_name} started with {settings.registry_backend} registry")
    yield


app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers - all under /api prefix
app.include_router(registration_public.router, prefix="/api", tags=["registration"])
app.include_router(registration_reports.router, prefix="/api/reports", tags=["reports"])
app.include_router(file_router.router, prefix="/api/files", tags=["files"])


@app.get("/api/health", tags=["system"])
def health() -> dict:
    """Health check endpoint that pings the database when the SQL registry is in use."""
    if settings.registry_backend == "memory":
        return {"status": "ok", "database": "not used"}

    from sqlalchemy import text
    from artsfest.common.db import get_sync_engine

    try:
        with get_sync_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        db_status = f"error: {str(e)}"

    return {"status": "ok", "database": db_status}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
