"""
Test configuration and fixtures.

Provides:
- In-memory SQLite database, schema created and dropped per test
- HTTPX AsyncClient bound to the same session as the test
"""
import os
from typing import AsyncGenerator, Generator

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.orm import Session

# Point the app at an in-memory database before anything imports settings
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["ENV"] = "test"
os.environ["INTERNAL_SECRET"] = "test-internal-secret"

from mapping_service.main import app
from mapping_service.core.deps import get_db
from mapping_service.db.base import Base
from mapping_service.db.session import engine, SessionLocal
import mapping_service.db.models  # noqa: F401


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Fresh schema per test.

    App code commits and rolls back freely, so isolation comes from
    recreating the tables rather than from an outer transaction.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """Create AsyncClient whose requests share the test session."""
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as c:
        yield c

    app.dependency_overrides.clear()
