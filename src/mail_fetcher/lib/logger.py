"""Structured logging with secret and PII sanitization for Mail Fetcher."""

import logging
import re
from typing import Any, Dict, Optional

from mail_fetcher.lib.config.app_config import AppConfig

# Package logger; module loggers propagate to it
ROOT_LOGGER_NAME = "mail_fetcher"


class PIISanitizer:
    """Sanitize personally identifiable information and secrets from log messages."""

    # Regex patterns for PII detection
    EMAIL_PATTERN = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b")
    BEARER_PATTERN = re.compile(r"(Bearer\s+)[^\s\x01]+")
    TOKEN_PATTERN = re.compile(r"(ya29\.[a-zA-Z0-9_-]+)")
    SECRET_FIELD_PATTERN = re.compile(
        r"((?:access_token|refresh_token|client_secret)[\"']?\s*[=:]\s*[\"']?)[^\s&\"',}]+"
    )
    CODE_PARAM_PATTERN = re.compile(r"([?&]code=)[^&\s]+")

    @classmethod
    def sanitize_email(cls, text: str) -> str:
        """Replace email addresses with sanitized version."""
        return cls.EMAIL_PATTERN.sub(lambda m: f"***@{m.group(0).split('@')[1]}", text)

    @classmethod
    def sanitize_bearer(cls, text: str) -> str:
        """Replace bearer tokens with masked version."""
        return cls.BEARER_PATTERN.sub(r"\1***", text)

    @classmethod
    def sanitize_token(cls, text: str) -> str:
        """Replace Google OAuth tokens with masked version."""
        return cls.TOKEN_PATTERN.sub("ya29.***", text)

    @classmethod
    def sanitize_secret_fields(cls, text: str) -> str:
        """Mask values of token, secret and authorization code fields."""
        text = cls.SECRET_FIELD_PATTERN.sub(r"\1***", text)
        return cls.CODE_PARAM_PATTERN.sub(r"\1***", text)

    @classmethod
    def sanitize(cls, text: str) -> str:
        """Apply all sanitization rules to text."""
        if not isinstance(text, str):
            text = str(text)

        text = cls.sanitize_email(text)
        text = cls.sanitize_bearer(text)
        text = cls.sanitize_token(text)
        text = cls.sanitize_secret_fields(text)

        return text


class SanitizingFormatter(logging.Formatter):
    """Custom formatter that sanitizes PII from log records."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with PII sanitization."""
        # Sanitize the message
        if isinstance(record.msg, str):
            record.msg = PIISanitizer.sanitize(record.msg)

        # Sanitize args if present
        if record.args:
            sanitized_args = tuple(
                PIISanitizer.sanitize(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
            record.args = sanitized_args

        return super().format(record)


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[str] = None,
) -> logging.Logger:
    """
    Set up a logger with PII sanitization.

    Calling it again on a configured logger only changes its level.

    Args:
        name: Logger name (defaults to the package logger)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        Configured logger instance
    """
    app_config = AppConfig.from_env()
    logger = logging.getLogger(name)

    # Set log level
    log_level = level or app_config.log_level
    logger.setLevel(getattr(logging, log_level.upper()))

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    # Create formatter with PII sanitization
    formatter = SanitizingFormatter(
        fmt=app_config.log_format,
        datefmt=app_config.log_date_format,
    )

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger that reports through the package logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        setup_logger(ROOT_LOGGER_NAME)
    return logging.getLogger(name)


class StructuredLogger:
    """
    Structured logger for retrieval runs.

    Appends ``key=value`` context fields to every message.
    """

    def __init__(self, name: str):
        """
        Initialize structured logger.

        Args:
            name: Logger name
        """
        self.logger = get_logger(name)
        self.context: Dict[str, Any] = {}

    def set_context(self, **kwargs: Any) -> None:
        """Set context fields for all subsequent log messages."""
        self.context.update(kwargs)

    def clear_context(self) -> None:
        """Clear all context fields."""
        self.context.clear()

    def _format_message(self, message: str, **kwargs: Any) -> str:
        """Format message with context and additional fields."""
        fields = {**self.context, **kwargs}
        if fields:
            field_str = " | ".join(f"{k}={v}" for k, v in fields.items())
            return f"{message} | {field_str}"
        return message

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with context."""
        self.logger.debug(self._format_message(message, **kwargs))

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message with context."""
        self.logger.info(self._format_message(message, **kwargs))

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with context."""
        self.logger.warning(self._format_message(message, **kwargs))

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message with context."""
        self.logger.error(self._format_message(message, **kwargs))

    def log_fetch_progress(self, message_id: int, processed: int, total: int) -> None:
        """Log progress of the fetch loop."""
        self.debug(
            "Message written",
            message_id=message_id,
            processed=processed,
            total=total,
            progress=f"{(processed/total*100):.1f}%" if total > 0 else "0%",
        )


def get_structured_logger(name: str) -> StructuredLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        StructuredLogger instance
    """
    return StructuredLogger(name)
