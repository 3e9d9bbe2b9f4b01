"""Storage error classification tests."""

import sqlite3

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from accounts.shared.infrastructure.database.errors import ConstraintKind, classify, error_code


class FakeDriverError(Exception):
    """Driver exception carrying a vendor code the way asyncpg and psycopg do."""

    def __init__(self, message="driver error", **codes):
        super().__init__(message)
        for name, value in codes.items():
            setattr(self, name, value)


def wrap(orig):
    return IntegrityError("INSERT INTO users ...", {}, orig)


@pytest.mark.parametrize(
    "sqlstate, expected",
    [
        ("23505", ConstraintKind.UNIQUE_VIOLATION),
        ("23503", ConstraintKind.FOREIGN_KEY_VIOLATION),
        ("23502", ConstraintKind.NOT_NULL_VIOLATION),
        ("23514", ConstraintKind.CHECK_VIOLATION),
        ("42501", ConstraintKind.INSUFFICIENT_PRIVILEGE),
        ("40001", ConstraintKind.OTHER),
        ("23P01", ConstraintKind.OTHER),
    ],
)
def test_classify_postgres_sqlstate(sqlstate, expected):
    assert classify(wrap(FakeDriverError(sqlstate=sqlstate))) is expected


def test_classify_psycopg_pgcode():
    assert classify(wrap(FakeDriverError(pgcode="23505"))) is ConstraintKind.UNIQUE_VIOLATION


def test_classify_code_on_chained_driver_error():
    """Test the code is found on the raw driver error behind an adapted one."""
    raw = FakeDriverError(sqlstate="23503")
    adapted = FakeDriverError("adapted")
    adapted.__cause__ = raw

    assert classify(wrap(adapted)) is ConstraintKind.FOREIGN_KEY_VIOLATION


def test_classify_real_sqlite_unique_violation():
    """Test classification of an error raised by the sqlite3 driver itself."""
    conn = sqlite3.connect(":memory:")
    try:
        conn.execute("CREATE TABLE users (email TEXT UNIQUE)")
        conn.execute("INSERT INTO users VALUES ('test@myemail.com')")
        with pytest.raises(sqlite3.IntegrityError) as exc_info:
            conn.execute("INSERT INTO users VALUES ('test@myemail.com')")
    finally:
        conn.close()

    assert classify(wrap(exc_info.value)) is ConstraintKind.UNIQUE_VIOLATION


@pytest.mark.parametrize(
    "code, expected",
    [
        (2067, ConstraintKind.UNIQUE_VIOLATION),
        (1555, ConstraintKind.UNIQUE_VIOLATION),
        (787, ConstraintKind.FOREIGN_KEY_VIOLATION),
        (1299, ConstraintKind.NOT_NULL_VIOLATION),
        (275, ConstraintKind.CHECK_VIOLATION),
        (19, ConstraintKind.OTHER),
    ],
)
def test_classify_sqlite_extended_codes(code, expected):
    assert classify(wrap(FakeDriverError(sqlite_errorcode=code))) is expected


def test_classify_without_code():
    """Test connectivity failures carry no code and are OTHER."""
    error = OperationalError("SELECT 1", {}, ConnectionRefusedError("connection refused"))

    assert error_code(error) is None
    assert classify(error) is ConstraintKind.OTHER


def test_classify_non_database_error():
    assert classify(ValueError("not a database error")) is ConstraintKind.OTHER


def test_classify_message_text_is_ignored():
    """Test only the code decides; a message mentioning a constraint does not."""
    error = wrap(FakeDriverError("duplicate key value violates unique constraint"))

    assert classify(error) is ConstraintKind.OTHER
