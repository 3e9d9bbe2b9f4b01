# 📄 File: accounts/modules/user_management/domain/repositories/user_repository.py
# 🧭 Purpose (Layman Explanation):
# Defines the contract for how to save, find, change and delete user accounts and check their passwords, without saying which database does the work
# 🧪 Purpose (Technical Summary):
# Repository interface for User entities following the Repository pattern; every operation is atomic and reports failures with the shared error vocabulary
# 🔗 Dependencies:
# Domain models (User, UpdateUser), typing, abc, uuid
# 🔄 Connected Modules / Calls From:
# Application services, infrastructure implementations, HTTP handlers

from abc import ABC, abstractmethod
from typing import List
from uuid import UUID

from ..models.user import UpdateUser, User


class UserRepository(ABC):
    """
    Repository interface for User entity data access operations.

    Implementation Notes:
    - Each operation runs in its own transaction and either fully
      commits or fully rolls back
    - Methods return domain entities (User), not database models
    - Raw storage errors never escape; see accounts.shared.core.exceptions
    """

    @abstractmethod
    async def get_user(self, user_id: UUID) -> User:
        """
        Get user by ID.

        Raises:
            NotFound: If no user has this ID
            ReadError: If the lookup fails
        """

    @abstractmethod
    async def get_user_by_email(self, email: str) -> User:
        """
        Get user by email address.

        Raises:
            NotFound: If no user has this email
            ReadError: If the lookup fails
        """

    @abstractmethod
    async def list_users(self) -> List[User]:
        """
        List all users in a stable order. Empty list when there are none.

        Raises:
            ReadError: If the lookup fails
        """

    @abstractmethod
    async def create_user(self, email: str, password: str) -> User:
        """
        Create a new user with a freshly hashed password.

        Raises:
            AlreadyExists: If the email is taken
            InvalidArgument: If email or password is empty
            WriteError: If the insert fails otherwise
        """

    @abstractmethod
    async def update_user(self, user_id: UUID, update: UpdateUser) -> User:
        """
        Apply a partial update and return the resulting record.

        A password change requires ``update.password.old_password`` to
        match the stored hash.

        A unique violation on the new email is reported as AlreadyExists,
        the same as on insert, rather than as a plain WriteError.

        Raises:
            NotFound: If no user has this ID
            CredentialFailure: If old_password does not match
            AlreadyExists: If the new email is taken
            WriteError: If the update fails otherwise
        """

    @abstractmethod
    async def delete_user(self, user_id: UUID) -> User:
        """
        Hard delete a user and return the removed record.

        Raises:
            NotFound: If no user has this ID
            CannotDeleteReferenced: If other rows reference the user
            WriteError: If the delete fails otherwise
        """

    @abstractmethod
    async def verify_user_password(self, email: str, password: str) -> None:
        """
        Check a user's password.

        Raises:
            NotFound: If no user has this email
            CredentialFailure: If the password does not match
        """

    @abstractmethod
    async def hash_password(self, password: str) -> str:
        """Hash a password with the repository's credential configuration"""

    @abstractmethod
    async def verify_password(self, password: str, digest: str) -> None:
        """
        Check a password against a digest.

        Raises:
            CredentialFailure: If the password does not match or the digest is malformed
        """
