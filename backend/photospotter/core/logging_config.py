"""
Structured JSON Logging Configuration

Provides centralized logging configuration with:
- JSON formatted output for machine parsing
- Request ID tracking via contextvars
- File rotation (100MB max per file)
- Configurable log levels via environment
"""
import logging
import logging.handlers
import os
import contextvars
import re
from datetime import datetime, timezone
from typing import Optional
from pythonjsonlogger import jsonlogger

from photospotter.core.config import settings

# Context variable for request ID propagation
request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    'request_id', default=None
)

# Application version (can be overridden)
APP_VERSION = "1.0.0"

# Log directory configuration
LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(__file__))), 'data', 'logs')


class RequestIdFilter(logging.Filter):
    """
    Logging filter that adds request_id to all log records.

    Uses contextvars to access the current request's ID, so every log line
    written while reconciling or ingesting for a request can be correlated.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        return True


class SanitizingFilter(logging.Filter):
    """
    Filter that flattens line breaks and masks guest contact details.

    Guest names, emails, and phone numbers arrive from multipart forms. They
    must not forge extra log entries, and only the last digits of a phone
    number or the domain of an email address are written out.
    """

    LINE_BREAK = re.compile(r"\r\n|\r|\n")
    EMAIL = re.compile(r"[^\s@<>\"']+@([^\s@<>\"']+\.[A-Za-z]{2,})")
    PHONE = re.compile(r"\+?\d[\d\s().-]{6,}(\d{4})\b")

    def _sanitize(self, value: str) -> str:
        value = self.LINE_BREAK.sub(" ", value)
        value = self.EMAIL.sub(r"***@\1", value)
        return self.PHONE.sub(r"***\1", value)

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = self._sanitize(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._sanitize(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """
    Custom JSON formatter that adds standard fields to all log entries.

    Output format:
    {
        "timestamp": "2025-11-23T10:30:00.000Z",
        "level": "INFO",
        "message": "Photo match created",
        "module": "match_service",
        "request_id": "uuid-here",
        "logger": "photospotter.services.match_service",
        ...extra fields...
    }
    """

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        if not log_record.get('timestamp'):
            log_record['timestamp'] = datetime.now(timezone.utc).isoformat()

        log_record['level'] = record.levelname
        log_record['module'] = record.module
        log_record['logger'] = record.name
        log_record['request_id'] = getattr(record, 'request_id', '-')

        if record.funcName:
            log_record['function'] = record.funcName

        if 'message' not in log_record:
            log_record['message'] = record.getMessage()


def setup_logging(
    log_level: Optional[str] = None,
    log_dir: Optional[str] = None,
    app_version: Optional[str] = None
) -> logging.Logger:
    """
    Configure application-wide logging with JSON format and rotation.

    Args:
        log_level: Override log level (default from settings.LOG_LEVEL)
        log_dir: Override log directory (default: backend/data/logs)
        app_version: Application version to include in startup logs

    Returns:
        Root logger configured for the application
    """
    global APP_VERSION

    level = getattr(logging, (log_level or settings.LOG_LEVEL).upper(), logging.INFO)
    directory = log_dir or LOG_DIR
    if app_version:
        APP_VERSION = app_version

    os.makedirs(directory, exist_ok=True)

    json_formatter = CustomJsonFormatter(
        '%(timestamp)s %(level)s %(name)s %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(json_formatter)
    console_handler.addFilter(RequestIdFilter())
    console_handler.addFilter(SanitizingFilter())
    root_logger.addHandler(console_handler)

    # Max 100MB per file, keep 7 rotated files
    file_handler = logging.handlers.RotatingFileHandler(
        os.path.join(directory, 'photospotter.log'),
        maxBytes=100 * 1024 * 1024,
        backupCount=7,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(json_formatter)
    file_handler.addFilter(RequestIdFilter())
    file_handler.addFilter(SanitizingFilter())
    root_logger.addHandler(file_handler)

    # boto3 logs every request at INFO/DEBUG
    logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('httpx').setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the application's configuration.

    Args:
        name: Logger name (typically __name__ from the calling module)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def set_request_id(request_id: Optional[str]) -> contextvars.Token:
    """Set the request ID for the current context and return the reset token."""
    return request_id_var.set(request_id)


def get_request_id() -> Optional[str]:
    """Get the current request ID from context, or None outside a request."""
    return request_id_var.get()


def clear_request_id(token: contextvars.Token) -> None:
    """Reset the request ID context using the token from set_request_id."""
    request_id_var.reset(token)
