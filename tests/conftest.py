"""Pytest configuration and fixtures."""

import os
from uuid import UUID

import pytest
from sqlalchemy import insert

from accounts.modules.user_management.dependencies import create_user_repository
from accounts.modules.user_management.infrastructure.database.models import users_table
from accounts.shared.config.settings import Settings
from accounts.shared.core.security import build_credential_hasher
from accounts.shared.infrastructure.database.connection import (
    connect,
    create_schema,
    dispose,
    drop_schema,
)

SEEDED_USER_ID = UUID("a74f9b43-8a49-4d97-8270-9879d37c600d")
SEEDED_EMAIL = "test@myemail.com"
SEEDED_PASSWORD = "dev_only_pass"


@pytest.fixture
def settings(tmp_path):
    """Test settings: PostgreSQL when TEST_DATABASE_URL is set, SQLite otherwise."""
    database_url = os.getenv("TEST_DATABASE_URL") or f"sqlite+aiosqlite:///{tmp_path / 'accounts.db'}"
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        DATABASE_URL=database_url,
        TEST_DATABASE_URL=database_url,
        PASSWORD_HASH_SECRET="mysecret",
        # Cheap parameters; production defaults are exercised in test_security
        ARGON2_TIME_COST=1,
        ARGON2_MEMORY_COST=1024,
        HASH_WORKERS=2,
        HASH_MAX_PENDING=8,
    )


@pytest.fixture
async def engine(settings):
    """Engine with a freshly created schema."""
    engine = await connect(settings)
    await drop_schema(engine)
    await create_schema(engine)

    yield engine

    await drop_schema(engine)
    await dispose(engine)


@pytest.fixture
def hasher(settings):
    hasher = build_credential_hasher(settings)
    yield hasher
    hasher.pool.shutdown()


@pytest.fixture
def repository(engine, settings, hasher):
    return create_user_repository(engine, settings, hasher=hasher)


@pytest.fixture
async def seeded_user(engine, hasher):
    """Insert the well-known development user directly, bypassing the repository."""
    digest = await hasher.hash_password(SEEDED_PASSWORD)
    async with engine.begin() as conn:
        await conn.execute(
            insert(users_table).values(id=SEEDED_USER_ID, email=SEEDED_EMAIL, hash=digest)
        )
    return SEEDED_USER_ID
