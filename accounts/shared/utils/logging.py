# 📄 File: accounts/shared/utils/logging.py

# 🧭 Purpose (Layman Explanation):
# Sets up how the account store writes its log lines, in a structured format that
# monitoring tools can read, tagged with an id that ties together one caller's work.

# 🧪 Purpose (Technical Summary):
# Structured logging with JSON formatting (python-json-logger), a correlation id carried
# in a context variable, and one-time root logger configuration driven by settings.

# 🔗 Dependencies:
# - python-json-logger: JSON log formatting
# - logging: Python standard logging
# - contextvars: correlation id tracking across awaits

# 🔄 Connected Modules / Calls From:
# Used by: application startup (setup_logging), callers that want to tag a unit of work
# (log_context); every module logs through logging.getLogger(__name__)

import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Iterator, Optional
from uuid import uuid4

from pythonjsonlogger.json import JsonFormatter

from accounts.shared.config.settings import get_settings

# Context variable for tying log lines to one caller's unit of work
correlation_id_var: ContextVar[str] = ContextVar('correlation_id', default='')

_logging_configured = False

TEXT_FORMAT = '%(timestamp)s - %(name)s - %(levelname)s - %(message)s'
JSON_FORMAT = '%(timestamp)s %(levelname)s %(name)s %(message)s'


class ContextualFormatter(logging.Formatter):
    """
    Formatter that adds the correlation id, hostname and service name
    to every record before rendering it.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.hostname = os.uname().nodename if hasattr(os, 'uname') else 'unknown'
        self.service_name = 'accounts'

    def format(self, record):
        record.correlation_id = correlation_id_var.get('')
        record.hostname = self.hostname
        record.service = self.service_name
        record.timestamp = datetime.now(timezone.utc).isoformat()
        return super().format(record)


class JSONFormatter(JsonFormatter):
    """
    JSON formatter for structured logging.

    Outputs one JSON object per record with a consistent set of keys
    for log aggregation tools. Extra keyword fields passed through
    ``extra=`` are merged into the object.
    """

    def __init__(self):
        super().__init__(JSON_FORMAT)
        self.hostname = os.uname().nodename if hasattr(os, 'uname') else 'unknown'

    def add_fields(self, log_record, record, message_dict):
        record.timestamp = datetime.now(timezone.utc).isoformat()
        super().add_fields(log_record, record, message_dict)
        log_record['service'] = 'accounts'
        log_record['hostname'] = self.hostname
        correlation_id = correlation_id_var.get('')
        if correlation_id:
            log_record['correlation_id'] = correlation_id


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    enable_console: bool = True
) -> logging.Logger:
    """
    Configure the root logger once.

    Args:
        log_level: Overrides LOG_LEVEL from settings
        log_format: 'json' or 'text'; overrides LOG_FORMAT from settings
        enable_console: Attach a stdout handler

    Returns:
        The "accounts" logger
    """
    global _logging_configured

    if _logging_configured:
        return logging.getLogger("accounts")

    settings = get_settings()
    log_level = log_level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    if log_format.lower() == 'json':
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = ContextualFormatter(TEXT_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Engine echo is controlled by DEBUG; keep driver chatter down otherwise
    logging.getLogger('sqlalchemy.engine').setLevel(
        logging.INFO if settings.DEBUG else logging.WARNING
    )
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    _logging_configured = True
    return logging.getLogger("accounts")


@contextmanager
def log_context(correlation_id: Optional[str] = None) -> Iterator[str]:
    """
    Tag every log line emitted inside the block with a correlation id.

    Args:
        correlation_id: Identifier to use; a UUID4 is generated if omitted

    Yields:
        The correlation id in effect
    """
    if correlation_id is None:
        correlation_id = str(uuid4())

    token = correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        correlation_id_var.reset(token)


__all__ = [
    "ContextualFormatter",
    "JSONFormatter",
    "correlation_id_var",
    "log_context",
    "setup_logging",
]
