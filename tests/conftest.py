"""Shared fixtures and factory helpers for the ReviewHub test suite.

Uses an in-memory SQLite database, so no running Postgres is required.
Each test gets a completely fresh database (function-scoped engine).
"""

import pytest
from sqlalchemy import BigInteger, create_engine, event
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.orm import Session


# SQLite only auto-increments columns declared as `INTEGER PRIMARY KEY`.
# The models use `BigInteger` which renders as `BIGINT`, disabling auto-ID.
# Override the type for the sqlite dialect so all BigInteger columns
# become `INTEGER`, restoring auto-increment behaviour in tests.
@compiles(BigInteger, "sqlite")
def _sqlite_bigint(type_, compiler, **kwargs):  # noqa: ARG001
    return "INTEGER"

from reviewhub.db.base import Base
from reviewhub.db.crud import ReviewCRUD
from reviewhub.db.models import ReviewStatus, UserRole
from reviewhub.services import Actor, categories, profiles


def enable_sqlite_savepoints(engine):
    """Let SQLAlchemy emit BEGIN itself so SAVEPOINTs nest inside the outer transaction."""

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):  # noqa: ARG001
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


# ---------------------------------------------------------------------------
# Core fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def session():
    """Provide a fresh, isolated in-memory SQLite session for each test."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(engine)
    with Session(engine, autoflush=False) as sess:
        yield sess
    engine.dispose()


# ---------------------------------------------------------------------------
# Factory helpers (plain functions, not fixtures, so tests can call them
# with custom arguments easily)
# ---------------------------------------------------------------------------


def make_user(
    session,
    email="alice@example.com",
    name="Alice",
    password_hash="hashed_pw",
    role=UserRole.GUEST,
    **kwargs,
):
    return profiles.register_user(
        session,
        name=name,
        email=email,
        password_hash=password_hash,
        role=role,
        **kwargs,
    )


def make_admin(session, email="admin@example.com", name="Admin", **kwargs):
    return make_user(session, email=email, name=name, role=UserRole.ADMIN, **kwargs)


def make_category(session, name="Electronics"):
    return categories.create_category(session, name)


def make_review(
    session,
    author,
    category,
    title="Noise-cancelling headphones",
    description="Comfortable and the battery lasts a week.",
    rating=4,
    status=ReviewStatus.PUBLISHED,
    **kwargs,
):
    return ReviewCRUD.create(
        session,
        user_id=author.id,
        category_id=category.id,
        title=title,
        description=description,
        rating=rating,
        status=status,
        **kwargs,
    )


def actor_for(user):
    return Actor.from_user(user)
