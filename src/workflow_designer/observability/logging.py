"""Structured JSON logging with editing-session context."""
import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from workflow_designer.config import get_settings


CONTEXT_FIELDS = ("session_id", "definition_id", "node_id")


class SessionContextFilter(logging.Filter):
    """Add session context to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Add default context fields if not present."""
        for name in CONTEXT_FIELDS:
            if not hasattr(record, name):
                setattr(record, name, None)
        return True


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with standardized field names."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        """Add custom fields to the log record."""
        super().add_fields(log_record, record, message_dict)

        if not log_record.get("timestamp"):
            log_record["timestamp"] = self.formatTime(record, self.datefmt)

        log_record["level"] = record.levelname
        log_record["logger"] = record.name

        # Drop empty context so lines stay short
        for name in CONTEXT_FIELDS:
            if not getattr(record, name, None):
                log_record.pop(name, None)


def setup_logging() -> None:
    """Configure logging for the designer."""
    settings = get_settings()

    handler = logging.StreamHandler(sys.stderr)
    if settings.json_logs:
        formatter: logging.Formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    else:
        formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    handler.setFormatter(formatter)
    handler.addFilter(SessionContextFilter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(settings.log_level)

    # Reduce noise from third-party libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


class ContextLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges per-call extra with the adapter context."""

    def process(self, msg: Any, kwargs: Any) -> tuple[Any, Any]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(name: str, **context: Any) -> logging.LoggerAdapter:
    """
    Get a logger with session context support.

    Args:
        name: Logger name (typically __name__)
        **context: Fields attached to every record

    Returns:
        LoggerAdapter that can accept session context in extra dict
    """
    logger = logging.getLogger(name)
    return ContextLoggerAdapter(logger, extra=context)


def with_session_context(
    session_id: str | None = None,
    definition_id: str | None = None,
    node_id: str | None = None,
    **kwargs: Any,
) -> dict[str, Any]:
    """
    Create an extra dict with session context for logging.

    Args:
        session_id: Editing session ID
        definition_id: Workflow definition ID
        node_id: Node ID
        **kwargs: Additional context fields

    Returns:
        Dict to pass as extra parameter to logger methods
    """
    extra = kwargs.copy()
    if session_id:
        extra["session_id"] = session_id
    if definition_id:
        extra["definition_id"] = definition_id
    if node_id:
        extra["node_id"] = node_id
    return extra
