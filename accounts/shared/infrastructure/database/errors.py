# 📄 File: accounts/shared/infrastructure/database/errors.py
#
# 🧭 Purpose (Layman Explanation):
# Reads the short code the database attaches to a failed write ("this email is taken",
# "this field can't be empty") and turns it into one of a few plain categories.
#
# 🧪 Purpose (Technical Summary):
# Pure, total classification of storage errors into constraint kinds by exact
# match of the vendor error code (PostgreSQL SQLSTATE, SQLite extended result code).
#
# 🔗 Dependencies:
# - sqlalchemy.exc (DBAPIError wrapper carrying the driver exception)
#
# 🔄 Connected Modules / Calls From:
# - accounts.shared.infrastructure.database.session (transaction error translation)
# - User repository implementation (operation-specific error mapping)

from enum import Enum
from typing import Dict, Optional, Union

from sqlalchemy.exc import DBAPIError


class ConstraintKind(str, Enum):
    """Storage error categories the rest of the system is allowed to see"""
    UNIQUE_VIOLATION = "unique_violation"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    NOT_NULL_VIOLATION = "not_null_violation"
    CHECK_VIOLATION = "check_violation"
    INSUFFICIENT_PRIVILEGE = "insufficient_privilege"
    OTHER = "other"


# PostgreSQL SQLSTATE codes
NOT_NULL_VIOLATION = "23502"
FOREIGN_KEY_VIOLATION = "23503"
UNIQUE_VIOLATION = "23505"
CHECK_VIOLATION = "23514"
INSUFFICIENT_PRIVILEGE = "42501"

POSTGRES_CODES: Dict[str, ConstraintKind] = {
    NOT_NULL_VIOLATION: ConstraintKind.NOT_NULL_VIOLATION,
    FOREIGN_KEY_VIOLATION: ConstraintKind.FOREIGN_KEY_VIOLATION,
    UNIQUE_VIOLATION: ConstraintKind.UNIQUE_VIOLATION,
    CHECK_VIOLATION: ConstraintKind.CHECK_VIOLATION,
    INSUFFICIENT_PRIVILEGE: ConstraintKind.INSUFFICIENT_PRIVILEGE,
}

# SQLite extended result codes (local development and tests)
SQLITE_CODES: Dict[int, ConstraintKind] = {
    275: ConstraintKind.CHECK_VIOLATION,         # SQLITE_CONSTRAINT_CHECK
    787: ConstraintKind.FOREIGN_KEY_VIOLATION,   # SQLITE_CONSTRAINT_FOREIGNKEY
    1299: ConstraintKind.NOT_NULL_VIOLATION,     # SQLITE_CONSTRAINT_NOTNULL
    1555: ConstraintKind.UNIQUE_VIOLATION,       # SQLITE_CONSTRAINT_PRIMARYKEY
    2067: ConstraintKind.UNIQUE_VIOLATION,       # SQLITE_CONSTRAINT_UNIQUE
}


def _driver_code(error: BaseException) -> Optional[Union[str, int]]:
    """Return the vendor error code attached to a driver exception, if any."""
    for attribute in ("sqlstate", "pgcode", "sqlite_errorcode"):
        code = getattr(error, attribute, None)
        if code is not None:
            return code
    return None


def error_code(error: BaseException) -> Optional[Union[str, int]]:
    """
    Extract the vendor error code from a storage error.

    SQLAlchemy wraps driver exceptions in ``DBAPIError``; the adapted
    driver error lives in ``orig`` and the raw driver error is usually
    chained as its ``__cause__``.
    """
    candidates = []
    if isinstance(error, DBAPIError):
        candidates.append(error.orig)
        if error.orig is not None:
            candidates.append(error.orig.__cause__)
    candidates.append(error)
    candidates.append(error.__cause__)

    for candidate in candidates:
        if candidate is None:
            continue
        code = _driver_code(candidate)
        if code is not None:
            return code
    return None


def classify(error: BaseException) -> ConstraintKind:
    """
    Map any exception to exactly one ConstraintKind.

    Errors without a code (connectivity failures, non-database errors)
    and unknown codes are ConstraintKind.OTHER.
    """
    code = error_code(error)
    if isinstance(code, str):
        return POSTGRES_CODES.get(code, ConstraintKind.OTHER)
    if isinstance(code, int):
        return SQLITE_CODES.get(code, ConstraintKind.OTHER)
    return ConstraintKind.OTHER


__all__ = [
    "ConstraintKind",
    "POSTGRES_CODES",
    "SQLITE_CODES",
    "classify",
    "error_code",
]
