import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

# Settings are cached on first use, so these must be set before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REGISTRY_BACKEND"] = "sql"

import main  # noqa: E402
from artsfest.common.db import Base, build_engine  # noqa: E402
from artsfest.registration import models  # noqa: E402,F401
from artsfest.registration.registry import InMemoryRegistry, SqlRegistry, get_registry  # noqa: E402
from artsfest.registration.seed import seed_registry  # noqa: E402


@pytest.fixture
def memory_registry():
    registry = InMemoryRegistry()
    seed_registry(registry)
    return registry


@pytest.fixture
def sql_registry():
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    registry = SqlRegistry(session)
    seed_registry(registry)
    yield registry
    session.close()
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def registry(request):
    """Runs a test once per registry backend."""
    return request.getfixturevalue(f"{request.param}_registry")


@pytest.fixture
def client(memory_registry):
    main.app.dependency_overrides[get_registry] = lambda: memory_registry
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def sql_client(sql_registry):
    main.app.dependency_overrides[get_registry] = lambda: sql_registry
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()
