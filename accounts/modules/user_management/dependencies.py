# 📄 File: accounts/modules/user_management/dependencies.py
# 🧭 Purpose (Layman Explanation):
# Puts the account store's pieces together: the database connections, the password
# hasher and its helpers, and the repository that uses both.
# 🧪 Purpose (Technical Summary):
# Wiring helpers that build a UserRepositoryImpl from an engine and settings, sharing
# one immutable hashing configuration and one CPU worker pool per process.
# 🔗 Dependencies:
# accounts.shared.config.settings, accounts.shared.core.security,
# accounts.shared.infrastructure.database.connection
# 🔄 Connected Modules / Calls From:
# Application startup code and test fixtures

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from accounts.modules.user_management.infrastructure.database.user_repository_impl import (
    UserRepositoryImpl,
)
from accounts.shared.config.settings import Settings, get_settings
from accounts.shared.core.security import CredentialHasher, build_credential_hasher
from accounts.shared.infrastructure.database.connection import create_session_factory

logger = logging.getLogger(__name__)


def create_user_repository(
    engine: AsyncEngine,
    settings: Optional[Settings] = None,
    hasher: Optional[CredentialHasher] = None
) -> UserRepositoryImpl:
    """
    Build a user repository on an existing engine.

    Args:
        engine: Engine returned by accounts.shared.infrastructure.database.connection.connect
        settings: Settings to derive the hasher from; defaults to get_settings()
        hasher: Pre-built hasher to share between repositories

    Returns:
        UserRepositoryImpl
    """
    if hasher is None:
        hasher = build_credential_hasher(settings or get_settings())
        logger.debug("Built credential hasher for user repository")
    return UserRepositoryImpl(create_session_factory(engine), hasher)


__all__ = ["create_user_repository"]
