"""
Shared logging configuration for the Redis learning project.
"""

import sys
import structlog
import logging
import uuid
from typing import Any, Dict, Optional
from contextvars import ContextVar

# Context variables for correlating log lines of one run
run_id_var: ContextVar[Optional[str]] = ContextVar('run_id', default=None)
section_var: ContextVar[Optional[str]] = ContextVar('section', default=None)

_app_name: Optional[str] = None


def configure_logging(app_name: str, log_level: str = "info", log_format: str = "console") -> None:
    """Configure structured logging for the application."""
    global _app_name
    _app_name = app_name

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        add_app_context,
        add_correlation_context,
    ]

    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def add_app_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add the application name to log events."""
    if _app_name:
        event_dict["app"] = _app_name
    return event_dict


def add_correlation_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add run and section context to log events."""
    run_id = run_id_var.get()
    if run_id:
        event_dict["run_id"] = run_id

    section = section_var.get()
    if section:
        event_dict["section"] = section

    return event_dict


def set_run_id(run_id: Optional[str] = None) -> str:
    """Set run ID in context."""
    if run_id is None:
        run_id = uuid.uuid4().hex[:12]
    run_id_var.set(run_id)
    return run_id


def set_section(section: Optional[str]) -> None:
    """Set the example section currently running."""
    section_var.set(section)


def clear_context():
    """Clear all context variables."""
    run_id_var.set(None)
    section_var.set(None)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
