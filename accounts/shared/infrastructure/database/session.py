# 📄 File: accounts/shared/infrastructure/database/session.py
#
# 🧭 Purpose (Layman Explanation):
# Makes sure every account operation is all-or-nothing: either every change is saved
# together, or, if anything goes wrong, none of them are.
#
# 🧪 Purpose (Technical Summary):
# Async SQLAlchemy session management with one transaction per operation, commit on
# success, rollback on any failure (including cancellation), and translation of raw
# SQLAlchemy errors into the stable domain error vocabulary.
#
# 🔗 Dependencies:
# - sqlalchemy.ext.asyncio (AsyncSession, async_sessionmaker)
# - accounts/shared/infrastructure/database/errors.py (constraint classification)
# - accounts/shared/core/exceptions.py (domain errors)
#
# 🔄 Connected Modules / Calls From:
# - User repository implementation (every CRUD operation)

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from accounts.shared.core.exceptions import (
    AccountsError,
    ReadError,
    StorageError,
    TransactionError,
    WriteError,
)
from accounts.shared.infrastructure.database.errors import classify

logger = logging.getLogger(__name__)


class DatabaseSessionManager:
    """
    Hands out sessions that each wrap exactly one transaction.

    Domain errors raised inside the block roll the transaction back and
    propagate unchanged; SQLAlchemy errors are classified and re-raised
    as the StorageError subclass chosen by the caller.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(
        self,
        operation: str,
        error_class: Type[StorageError] = WriteError,
        read_only: bool = False,
    ) -> AsyncIterator[AsyncSession]:
        """
        Open a session and a transaction for one repository operation.

        Args:
            operation: Name recorded in error details and logs
            error_class: StorageError raised for unclassified statement failures
            read_only: Roll back instead of committing at the end

        Yields:
            AsyncSession: Session with an open transaction

        Raises:
            TransactionError: If the transaction cannot be opened or committed
        """
        async with self._session_factory() as session:
            try:
                await session.begin()
            except SQLAlchemyError as e:
                logger.error(f"Could not open transaction for {operation}: {e}")
                raise TransactionError(operation=operation, constraint=classify(e).value) from e

            try:
                yield session
            except AccountsError:
                await session.rollback()
                raise
            except SQLAlchemyError as e:
                await session.rollback()
                kind = classify(e)
                logger.error(
                    f"Database error during {operation}, transaction rolled back "
                    f"(constraint: {kind.value})"
                )
                raise error_class(operation=operation, constraint=kind.value) from e
            except BaseException:
                # Includes cancellation; nothing of this operation may persist
                await session.rollback()
                raise

            try:
                if read_only:
                    await session.rollback()
                else:
                    await session.commit()
            except SQLAlchemyError as e:
                logger.error(f"Could not finish transaction for {operation}: {e}")
                raise TransactionError(operation=operation, constraint=classify(e).value) from e

    def read_only(self, operation: str):
        """Transaction for lookups; unclassified failures become ReadError."""
        return self.transaction(operation, error_class=ReadError, read_only=True)


__all__ = ["DatabaseSessionManager"]
