# 📄 File: accounts/modules/user_management/infrastructure/database/models.py
# 🧭 Purpose (Layman Explanation):
# This file describes how user accounts are laid out in the database table: which
# columns exist, which must be filled in, and which must be unique.
#
# 🧪 Purpose (Technical Summary):
# SQLAlchemy ORM model for the users table. The unique constraint on email and the
# not-null constraints on email/hash are what the error taxonomy relies on.
#
# 🔗 Dependencies:
# - SQLAlchemy ORM
# - accounts.shared.infrastructure.database.connection (declarative Base)
#
# 🔄 Connected Modules / Calls From:
# - user_repository_impl.py (CRUD statements)
# - accounts.shared.infrastructure.database.connection.create_schema

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, String, Text, Uuid, false, func

from accounts.shared.infrastructure.database.connection import Base


# =============================================================================
# USER MODEL
# =============================================================================

class UserModel(Base):
    """
    SQLAlchemy model for user accounts.

    - id: UUID primary key generated by the application
    - email: unique, not null
    - hash: Argon2id PHC string, not null
    - is_admin: defaults to false on the server
    - created_at / updated_at: server timestamps, updated_at refreshed on UPDATE
    """
    __tablename__ = "users"

    id = Column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid4,
        nullable=False,
        comment="Unique identifier for each user"
    )
    email = Column(
        String(255),
        unique=True,
        nullable=False,
        comment="Login email address"
    )
    hash = Column(
        Text,
        nullable=False,
        comment="Keyed Argon2id password digest"
    )
    is_admin = Column(
        Boolean,
        nullable=False,
        server_default=false(),
        comment="Administrator flag"
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="Account creation date"
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
        comment="Last modification date"
    )

    def __repr__(self) -> str:
        return f"<UserModel(id={self.id}, email={self.email})>"


users_table = UserModel.__table__

# Column set returned by every INSERT/UPDATE/DELETE ... RETURNING
USER_COLUMNS = (
    users_table.c.id,
    users_table.c.email,
    users_table.c.hash,
    users_table.c.is_admin,
    users_table.c.created_at,
    users_table.c.updated_at,
)


__all__ = [
    "UserModel",
    "USER_COLUMNS",
    "users_table",
]
