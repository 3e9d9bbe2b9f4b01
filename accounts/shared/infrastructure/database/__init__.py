"""
Database infrastructure: engine and pool creation, per-operation
transactions and storage error classification.
"""

from .connection import Base, connect, create_schema, create_session_factory, dispose
from .errors import ConstraintKind, classify
from .session import DatabaseSessionManager

__all__ = [
    "Base",
    "ConstraintKind",
    "DatabaseSessionManager",
    "classify",
    "connect",
    "create_schema",
    "create_session_factory",
    "dispose",
]
