"""Fixtures for exercising the FastAPI app against an in-memory SQLite database."""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("JWT_SECRET", "test-secret-that-is-at-least-32-bytes-long")
os.environ.setdefault("JWT_EXPIRE_MINUTES", "60")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from apps.api.core.auth import create_token, hash_password
from apps.api.core.dashboard_cache import invalidate_dashboard
from apps.api.core.deps import get_db
from apps.api.main import app
from reviewhub.db.base import Base
from reviewhub.db.models import UserRole
from reviewhub.services import profiles
from tests.conftest import enable_sqlite_savepoints


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    invalidate_dashboard()
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(session_factory):
    with session_factory() as session:
        admin = profiles.register_user(
            session,
            name="Admin",
            email="admin@example.com",
            password_hash=hash_password("admin-password"),
            role=UserRole.ADMIN,
        )
        session.commit()
        token = create_token(admin.id, admin.role.value)
    return {"Authorization": f"Bearer {token}"}


def register(client, email="alice@example.com", name="Alice", password="secret-pw"):
    response = client.post(
        "/auth/register", json={"email": email, "name": name, "password": password}
    )
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
