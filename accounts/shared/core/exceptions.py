# 📄 File: accounts/shared/core/exceptions.py
# 🧭 Purpose (Layman Explanation):
# Defines the small, fixed set of error types the account store reports, so callers
# get a clear "not found" or "already exists" instead of a cryptic database message.
# 🧪 Purpose (Technical Summary):
# Custom exception hierarchy providing specific error types with HTTP status codes,
# error details, and serialization for the API layer that consumes the repository.
# 🔗 Dependencies:
# FastAPI HTTPException, typing, HTTP status constants
# 🔄 Connected Modules / Calls From:
# User repository, credential hasher, worker pool, database connection and session helpers

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class AccountsError(Exception):
    """
    Base exception class for the account store.
    All custom exceptions should inherit from this class.
    """

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.error_code = error_code or self.__class__.__name__.upper()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
                "status_code": self.status_code
            }
        }

    def to_http_exception(self) -> HTTPException:
        """Convert to FastAPI HTTPException."""
        return HTTPException(
            status_code=self.status_code,
            detail=self.to_dict()["error"]
        )


# =============================================================================
# STORAGE EXCEPTIONS
# =============================================================================

class StorageError(AccountsError):
    """
    Common parent of failures raised while talking to the database.
    Carries the operation name and the classified constraint kind, never
    the driver's own error text.
    """

    default_message = "Database error"
    default_code = "DATABASE_ERROR"

    def __init__(
        self,
        message: Optional[str] = None,
        operation: Optional[str] = None,
        constraint: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if operation:
            details["operation"] = operation
        if constraint:
            details["constraint"] = constraint

        super().__init__(
            message=message or self.default_message,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details,
            error_code=self.default_code
        )


class ConnectionError(StorageError):
    """Raised when the connection pool cannot be created or reached."""

    default_message = "Failed to connect to the database"
    default_code = "CONNECTION_ERROR"


class TransactionError(StorageError):
    """Raised when a transaction cannot be opened, committed or rolled back."""

    default_message = "Transaction failed"
    default_code = "TRANSACTION_ERROR"


class ReadError(StorageError):
    """Raised when reading from the database fails."""

    default_message = "Reading from the database failed"
    default_code = "READ_ERROR"


class WriteError(StorageError):
    """Raised when writing to the database fails."""

    default_message = "Writing to the database failed"
    default_code = "WRITE_ERROR"


class DataIntegrityError(StorageError):
    """Raised when a stored row violates the account model invariants."""

    default_message = "Data integrity error"
    default_code = "DATA_INTEGRITY_ERROR"


# =============================================================================
# RESOURCE EXCEPTIONS
# =============================================================================

class NotFound(AccountsError):
    """
    Exception raised when requested resource is not found.
    """

    def __init__(
        self,
        message: str = "Resource not found",
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id

        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            details=details,
            error_code="NOT_FOUND"
        )


class AlreadyExists(AccountsError):
    """
    Exception raised when attempting to create duplicate resources.
    Used for unique constraint violations.
    """

    def __init__(
        self,
        value: str,
        field: str = "email",
        resource_type: str = "user",
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        details["resource_type"] = resource_type
        details["field"] = field
        details["value"] = value
        self.value = value

        super().__init__(
            message=f"Entity already exists: {value}",
            status_code=status.HTTP_409_CONFLICT,
            details=details,
            error_code="ALREADY_EXISTS"
        )


class CannotDeleteReferenced(AccountsError):
    """
    Exception raised when a row cannot be removed because other rows point at it.
    """

    def __init__(
        self,
        resource_id: str,
        resource_type: str = "user",
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        details["resource_type"] = resource_type
        details["resource_id"] = resource_id
        self.resource_id = resource_id

        super().__init__(
            message=f'Cannot delete entity "{resource_id}" with active references to it',
            status_code=status.HTTP_409_CONFLICT,
            details=details,
            error_code="CANNOT_DELETE_REFERENCED"
        )


class InvalidArgument(AccountsError):
    """
    Exception raised for input that can never be stored.
    """

    def __init__(
        self,
        message: str = "Invalid argument",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if field:
            details["field"] = field

        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details,
            error_code="INVALID_ARGUMENT"
        )


# =============================================================================
# CREDENTIAL EXCEPTIONS
# =============================================================================

class CredentialFailure(AccountsError):
    """
    Exception raised when a password cannot be verified or hashed.

    A wrong password and an unreadable digest both surface as this error
    with the same message; the distinction is only logged.
    """

    def __init__(self, message: str = "Credential verification failed"):
        super().__init__(
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code="CREDENTIAL_FAILURE"
        )


class TaskDispatchFailure(AccountsError):
    """
    Exception raised when CPU-bound work cannot be handed to the worker pool.
    """

    def __init__(
        self,
        message: str = "Failed to dispatch task to worker pool",
        task: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        if not details:
            details = {}

        if task:
            details["task"] = task

        super().__init__(
            message=message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details,
            error_code="TASK_DISPATCH_FAILURE"
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def exception_to_dict(exception: Exception) -> Dict[str, Any]:
    """
    Convert any exception to the error dictionary format.

    Unknown exceptions are reported generically so that internal details
    do not leak to API consumers.
    """
    if isinstance(exception, AccountsError):
        return exception.to_dict()

    return {
        "error": {
            "code": "INTERNAL_SERVER_ERROR",
            "message": "An unexpected error occurred",
            "details": {},
            "status_code": status.HTTP_500_INTERNAL_SERVER_ERROR
        }
    }


__all__ = [
    "AccountsError",
    "StorageError",
    "ConnectionError",
    "TransactionError",
    "ReadError",
    "WriteError",
    "DataIntegrityError",
    "NotFound",
    "AlreadyExists",
    "CannotDeleteReferenced",
    "InvalidArgument",
    "CredentialFailure",
    "TaskDispatchFailure",
    "exception_to_dict",
]
