# 📄 File: accounts/modules/user_management/domain/models/user.py
# 🧭 Purpose (Layman Explanation):
# Defines what a "user" is in the account store - an id, a login email, a scrambled password and a couple of timestamps - plus the shape of a request to change some of it
# 🧪 Purpose (Technical Summary):
# Pydantic domain models for the User entity and partial-update requests; credential fields are excluded from serialization
# 🔗 Dependencies:
# pydantic, datetime, typing, uuid
# 🔄 Connected Modules / Calls From:
# user_repository.py, user_repository_impl.py, API layer serializers

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class User(BaseModel):
    """
    Persisted account record.

    - id (UUID): generated at creation, never reassigned
    - email (str): unique login identifier
    - hash (str): Argon2id digest; never serialized outward
    - is_admin (bool): privilege flag; never serialized outward, never updatable
    - created_at / updated_at (datetime): server-assigned timestamps
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: UUID
    email: str
    hash: str = Field(exclude=True, repr=False)
    is_admin: bool = Field(default=False, exclude=True)
    created_at: datetime
    updated_at: datetime

    @field_validator('hash')
    @classmethod
    def validate_hash(cls, v: str) -> str:
        """A persisted user always has a credential digest"""
        if not v:
            raise ValueError('Password hash is required')
        return v


class PasswordUpdate(BaseModel):
    """Current password asserted by the caller and the replacement"""

    old_password: str
    new_password: str

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        if not v:
            raise ValueError('New password must not be empty')
        return v


class UpdateUser(BaseModel):
    """
    Partial update request. Only the attributes that are set change;
    an update with neither set leaves the record untouched.
    """

    email: Optional[str] = None
    password: Optional[PasswordUpdate] = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        email = v.strip()
        if not email:
            raise ValueError('Email must not be empty')
        return email

    @property
    def is_empty(self) -> bool:
        return self.email is None and self.password is None
