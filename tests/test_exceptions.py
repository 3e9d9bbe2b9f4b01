"""Error vocabulary tests."""

import pytest
from fastapi import HTTPException

from accounts.shared.core.exceptions import (
    AlreadyExists,
    CannotDeleteReferenced,
    ConnectionError,
    CredentialFailure,
    InvalidArgument,
    NotFound,
    StorageError,
    TaskDispatchFailure,
    WriteError,
    exception_to_dict,
)


def test_already_exists_carries_value():
    error = AlreadyExists("test@myemail.com")

    assert error.value == "test@myemail.com"
    assert error.message == "Entity already exists: test@myemail.com"
    assert error.status_code == 409
    assert error.details["field"] == "email"


def test_cannot_delete_referenced_carries_id():
    error = CannotDeleteReferenced("a74f9b43-8a49-4d97-8270-9879d37c600d")

    assert error.resource_id == "a74f9b43-8a49-4d97-8270-9879d37c600d"
    assert "active references" in error.message
    assert error.status_code == 409


def test_storage_errors_hide_driver_text():
    error = WriteError(operation="create_user", constraint="unique_violation")

    assert isinstance(error, StorageError)
    assert error.message == "Writing to the database failed"
    assert error.to_dict() == {
        "error": {
            "code": "WRITE_ERROR",
            "message": "Writing to the database failed",
            "details": {"operation": "create_user", "constraint": "unique_violation"},
            "status_code": 500,
        }
    }


def test_connection_error_is_storage_error():
    error = ConnectionError(operation="connect")

    assert isinstance(error, StorageError)
    assert error.error_code == "CONNECTION_ERROR"


@pytest.mark.parametrize(
    "error, status_code",
    [
        (NotFound("User not found", resource_type="user"), 404),
        (InvalidArgument("Password must not be empty", field="password"), 400),
        (CredentialFailure(), 401),
        (TaskDispatchFailure(task="_hash_sync"), 503),
    ],
)
def test_to_http_exception(error, status_code):
    http_error = error.to_http_exception()

    assert isinstance(http_error, HTTPException)
    assert http_error.status_code == status_code
    assert http_error.detail["code"] == error.error_code


def test_exception_to_dict_unknown_error():
    """Test unexpected exceptions are reported without their message."""
    data = exception_to_dict(RuntimeError("secret internals"))

    assert data["error"]["code"] == "INTERNAL_SERVER_ERROR"
    assert "secret internals" not in str(data)


def test_exception_to_dict_known_error():
    assert exception_to_dict(CredentialFailure())["error"]["code"] == "CREDENTIAL_FAILURE"
