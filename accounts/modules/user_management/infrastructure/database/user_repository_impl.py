# 📄 File: accounts/modules/user_management/infrastructure/database/user_repository_impl.py
# 🧭 Purpose (Layman Explanation):
# This file does the actual database work for user accounts: creating new users,
# finding them, changing their email or password, deleting them and checking passwords.
#
# 🧪 Purpose (Technical Summary):
# Concrete implementation of the UserRepository interface using SQLAlchemy Core
# statements on an async session, one transaction per operation, with storage errors
# classified and translated into domain errors before leaving the repository.
#
# 🔗 Dependencies:
# - accounts.modules.user_management.domain.repositories.user_repository (interface)
# - accounts.modules.user_management.domain.models.user (domain model)
# - accounts.modules.user_management.infrastructure.database.models (users table)
# - accounts.shared.infrastructure.database.session (transaction scope)
# - accounts.shared.core.security (credential hasher)
#
# 🔄 Connected Modules / Calls From:
# - Application services and HTTP handlers (outside this package)
# - Dependency wiring at application startup

"""
User Repository Implementation

Maps between the ``users`` table and the domain ``User`` entity.

Password hashing never runs while a database connection is held: digests
are computed before a write transaction opens, and a password change is
applied with an UPDATE guarded on the digest that was verified, so a
concurrent password change makes the later update fail instead of
silently overwriting it.
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

from pydantic import ValidationError
from sqlalchemy import Column, Update, delete, insert, select, update
from sqlalchemy.engine import RowMapping
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from accounts.modules.user_management.domain.models.user import UpdateUser, User
from accounts.modules.user_management.domain.repositories.user_repository import UserRepository
from accounts.modules.user_management.infrastructure.database.models import USER_COLUMNS, users_table
from accounts.shared.core.exceptions import (
    AccountsError,
    AlreadyExists,
    CannotDeleteReferenced,
    CredentialFailure,
    DataIntegrityError,
    InvalidArgument,
    NotFound,
    WriteError,
)
from accounts.shared.core.security import CredentialHasher
from accounts.shared.infrastructure.database.errors import ConstraintKind, classify
from accounts.shared.infrastructure.database.session import DatabaseSessionManager

logger = logging.getLogger(__name__)

Assignment = Tuple[Column, Any]


class UserRepositoryImpl(UserRepository):
    """
    SQLAlchemy implementation of the UserRepository interface.

    Holds no connection between calls; each operation checks one out of
    the engine pool for the lifetime of its transaction.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        hasher: CredentialHasher
    ):
        """
        Initialize the user repository.

        Args:
            session_factory: Factory bound to the shared engine
            hasher: Credential hasher with its own CPU worker pool
        """
        self._sessions = DatabaseSessionManager(session_factory)
        self._hasher = hasher

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_user(self, user_id: UUID) -> User:
        async with self._sessions.read_only("get_user") as session:
            row = await self._fetch_by_id(session, user_id)

        if row is None:
            logger.debug(f"User not found: {user_id}")
            raise self._not_found(user_id)
        return self._to_domain(row, "get_user")

    async def get_user_by_email(self, email: str) -> User:
        async with self._sessions.read_only("get_user_by_email") as session:
            result = await session.execute(
                select(*USER_COLUMNS).where(users_table.c.email == email)
            )
            row = result.mappings().one_or_none()

        if row is None:
            logger.debug("User not found by email")
            raise NotFound("User not found", resource_type="user")
        return self._to_domain(row, "get_user_by_email")

    async def list_users(self) -> List[User]:
        async with self._sessions.read_only("list_users") as session:
            result = await session.execute(
                select(*USER_COLUMNS).order_by(users_table.c.created_at, users_table.c.id)
            )
            rows = result.mappings().all()

        users = [self._to_domain(row, "list_users") for row in rows]
        logger.debug(f"Retrieved {len(users)} users")
        return users

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_user(self, email: str, password: str) -> User:
        email = email.strip()
        if not email:
            raise InvalidArgument("Email must not be empty", field="email")

        # Hash before the transaction opens: a hashing failure writes nothing
        digest = await self._hasher.hash_password(password)
        new_id = uuid4()

        statement = (
            insert(users_table)
            .values(id=new_id, email=email, hash=digest)
            .returning(*USER_COLUMNS)
        )
        async with self._sessions.transaction("create_user") as session:
            try:
                result = await session.execute(statement)
            except IntegrityError as e:
                raise self._translate_write_error(e, "create_user", email=email) from e
            row = result.mappings().one()

        logger.info(f"Created user with ID: {new_id}")
        return self._to_domain(row, "create_user")

    async def update_user(self, user_id: UUID, update: UpdateUser) -> User:
        if update.is_empty:
            # Nothing to assign: no statement is issued
            return await self.get_user(user_id)

        assignments: List[Assignment] = []
        expected_hash: Optional[str] = None

        if update.email is not None:
            assignments.append((users_table.c.email, update.email))

        if update.password is not None:
            current = await self.get_user(user_id)
            await self._hasher.verify_password(update.password.old_password, current.hash)
            new_digest = await self._hasher.hash_password(update.password.new_password)
            assignments.append((users_table.c.hash, new_digest))
            expected_hash = current.hash

        statement = self.build_update_statement(user_id, assignments, expected_hash)

        async with self._sessions.transaction("update_user") as session:
            try:
                result = await session.execute(statement)
            except IntegrityError as e:
                raise self._translate_write_error(e, "update_user", email=update.email) from e
            row = result.mappings().one_or_none()

            if row is None:
                if await self._fetch_by_id(session, user_id) is None:
                    raise self._not_found(user_id)
                # The digest changed after it was verified
                logger.warning(f"Concurrent password change detected for user {user_id}")
                raise CredentialFailure()

        logger.info(
            f"Updated user {user_id}: "
            f"{', '.join(column.name for column, _ in assignments)}"
        )
        return self._to_domain(row, "update_user")

    async def delete_user(self, user_id: UUID) -> User:
        statement = (
            delete(users_table)
            .where(users_table.c.id == user_id)
            .returning(*USER_COLUMNS)
        )
        async with self._sessions.transaction("delete_user") as session:
            try:
                result = await session.execute(statement)
            except IntegrityError as e:
                raise self._translate_write_error(e, "delete_user", user_id=user_id) from e
            row = result.mappings().one_or_none()

        if row is None:
            logger.debug(f"User not found for deletion: {user_id}")
            raise self._not_found(user_id)

        logger.info(f"Deleted user: {user_id}")
        return self._to_domain(row, "delete_user")

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    async def verify_user_password(self, email: str, password: str) -> None:
        # The lookup's connection is released before verification starts
        user = await self.get_user_by_email(email)
        try:
            await self._hasher.verify_password(password, user.hash)
        except CredentialFailure:
            logger.warning(f"Password verification failed for user {user.id}")
            raise

    async def hash_password(self, password: str) -> str:
        return await self._hasher.hash_password(password)

    async def verify_password(self, password: str, digest: str) -> None:
        await self._hasher.verify_password(password, digest)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def build_update_statement(
        user_id: UUID,
        assignments: Sequence[Assignment],
        expected_hash: Optional[str] = None
    ) -> Update:
        """
        Render (column, value) pairs into one parameterized UPDATE ... RETURNING.

        Every value is a bound parameter. ``expected_hash`` adds a guard so
        the row only changes if its digest is still the one verified.

        Raises:
            ValueError: If there is nothing to assign
        """
        if not assignments:
            raise ValueError("An update needs at least one assignment")

        conditions = [users_table.c.id == user_id]
        if expected_hash is not None:
            conditions.append(users_table.c.hash == expected_hash)

        return (
            update(users_table)
            .where(*conditions)
            .values({column: value for column, value in assignments})
            .returning(*USER_COLUMNS)
        )

    @staticmethod
    async def _fetch_by_id(session: AsyncSession, user_id: UUID) -> Optional[RowMapping]:
        result = await session.execute(
            select(*USER_COLUMNS).where(users_table.c.id == user_id)
        )
        return result.mappings().one_or_none()

    @staticmethod
    def _to_domain(row: RowMapping, operation: str) -> User:
        try:
            return User.model_validate(dict(row))
        except ValidationError as e:
            logger.error(f"Stored user row failed validation during {operation}")
            raise DataIntegrityError(
                f"Stored user {row.get('id')} is invalid",
                operation=operation
            ) from e

    @staticmethod
    def _not_found(user_id: UUID) -> NotFound:
        return NotFound(
            f"User not found: {user_id}",
            resource_type="user",
            resource_id=str(user_id)
        )

    @staticmethod
    def _translate_write_error(
        error: IntegrityError,
        operation: str,
        email: Optional[str] = None,
        user_id: Optional[UUID] = None
    ) -> AccountsError:
        """Specialize constraint violations the calling operation can expect."""
        kind = classify(error)

        if kind is ConstraintKind.UNIQUE_VIOLATION and email is not None:
            logger.warning(f"{operation} failed - email already exists")
            return AlreadyExists(email)
        if kind is ConstraintKind.FOREIGN_KEY_VIOLATION and user_id is not None:
            logger.warning(f"{operation} failed - user {user_id} is still referenced")
            return CannotDeleteReferenced(str(user_id))

        logger.error(f"Database error during {operation} (constraint: {kind.value})")
        return WriteError(operation=operation, constraint=kind.value)


__all__ = ["UserRepositoryImpl"]
