"""
Core utilities: error vocabulary, credential hashing and the CPU worker pool.
"""

from .exceptions import (
    AccountsError,
    AlreadyExists,
    CannotDeleteReferenced,
    ConnectionError,
    CredentialFailure,
    DataIntegrityError,
    InvalidArgument,
    NotFound,
    ReadError,
    StorageError,
    TaskDispatchFailure,
    TransactionError,
    WriteError,
)
from .security import CredentialHasher, HashingConfig, build_credential_hasher
from .workers import CpuWorkerPool

__all__ = [
    "AccountsError",
    "AlreadyExists",
    "CannotDeleteReferenced",
    "ConnectionError",
    "CpuWorkerPool",
    "CredentialFailure",
    "CredentialHasher",
    "DataIntegrityError",
    "HashingConfig",
    "InvalidArgument",
    "NotFound",
    "ReadError",
    "StorageError",
    "TaskDispatchFailure",
    "TransactionError",
    "WriteError",
    "build_credential_hasher",
]
