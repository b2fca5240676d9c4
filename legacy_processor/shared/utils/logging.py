"""Structured logging configuration using structlog."""

import logging
import sys
from typing import Any

import structlog

QUIET_LOGGERS = ("aiokafka", "httpx", "httpcore")


def add_message_position(
    logger: Any, method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Add a ``topic:partition:offset`` field for lines logged while a message is bound."""
    if "topic" in event_dict and "offset" in event_dict:
        event_dict["message_position"] = (
            f"{event_dict['topic']}:{event_dict.get('partition', '-')}:{event_dict['offset']}"
        )
    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool = True,
    service_name: str = "legacy-challenge-processor",
    service_version: str | None = None,
) -> None:
    """
    Configure structured logging for the processor.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, output JSON; if False, output colored console format
        service_name: Name of the service for log context
        service_version: Version bound next to the service name, if given
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )
    # client libraries log every fetch and request at INFO
    for noisy in QUIET_LOGGERS:
        logging.getLogger(noisy).setLevel(max(logging.WARNING, getattr(logging, level.upper())))

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        add_message_position,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_format:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=True),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)
    if service_version:
        structlog.contextvars.bind_contextvars(service_version=service_version)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Optional logger name (usually __name__)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def bind_message_context(topic: str, **kwargs: Any) -> None:
    """
    Bind Kafka message context to all subsequent log entries.

    Call this before handling a message so every log line emitted while
    processing it carries the topic and offset information.

    Args:
        topic: Topic the message was read from
        **kwargs: Additional context to bind (partition, offset, ...)
    """
    context = {"topic": topic}
    context.update({k: v for k, v in kwargs.items() if v is not None})
    structlog.contextvars.bind_contextvars(**context)


def clear_message_context(*keys: str) -> None:
    """Remove message context bound by :func:`bind_message_context`."""
    structlog.contextvars.unbind_contextvars("topic", *keys)
