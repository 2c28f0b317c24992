"""
Structlog configuration for the medflow storage service.

JSON output (serialized with orjson) for production, colored console output
for local development.
"""

import logging
import sys
from typing import Any, Dict

import orjson
import structlog

SERVICE_NAME = "medflow-storage"


def orjson_serializer(obj: Any, **kwargs) -> str:
    """
    Serialize a log event with orjson.

    Args:
        obj: Object to serialize
        **kwargs: Additional arguments (ignored for compatibility)

    Returns:
        JSON string
    """
    # orjson returns bytes, structlog expects str
    return orjson.dumps(obj, option=orjson.OPT_UTC_Z).decode()


def add_service_name(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Add the service name to every log entry."""
    event_dict["service"] = _service_name
    return event_dict


def add_module_info(
    logger: Any, method_name: str, event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Promote the bound logger_name to a top-level module field."""
    logger_name = event_dict.pop("logger_name", None)
    if logger_name:
        event_dict["module"] = logger_name
    return event_dict


_service_name = SERVICE_NAME


def configure_structlog(
    service_name: str = SERVICE_NAME,
    log_level: int = logging.INFO,
    log_format: str = "json",
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        service_name: Name of the service for log identification
        log_level: Logging level to set
        log_format: "json" for production output, "console" for development
    """
    global _service_name
    _service_name = service_name

    shared_processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        add_service_name,
        add_module_info,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer(serializer=orjson_serializer)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove all existing handlers to prevent duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # Structlog renders the full line, the handler only prints it
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Bound logger instance
    """
    logger = structlog.get_logger(name)
    if name:
        logger = logger.bind(logger_name=name)
    return logger
