"""Structured logging configuration for coliving reports.

Every event logged while a report is being generated carries the report
kind and user id, bound through structlog context variables by
`report_context`. Calculation steps, record fetches and export events
therefore need no explicit report fields of their own.
"""

import functools
import logging
import sys
from typing import Any, Callable, Literal, Optional, TypeVar

import structlog

from .config import ReportingConfig, get_config

F = TypeVar("F", bound=Callable[..., Any])


def report_context(report: str) -> Callable[[F], F]:
    """Bind `report` and the caller's user id for the duration of a call.

    Decorates generator methods whose first argument after self is the
    user id. The previous context is restored when the call returns or
    raises.
    """

    def decorator(method: F) -> F:
        @functools.wraps(method)
        def wrapper(self, user_id, *args, **kwargs):
            with structlog.contextvars.bound_contextvars(report=report, user_id=user_id):
                return method(self, user_id, *args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def _environment_stamper(env: str) -> structlog.types.Processor:
    def add_environment(logger, method_name, event_dict):
        event_dict.setdefault("env", env)
        return event_dict

    return add_environment


def configure_logging(
    level: Optional[Literal["DEBUG", "INFO", "WARNING", "ERROR"]] = None,
    format: Optional[Literal["json", "console"]] = None,
    config: Optional[ReportingConfig] = None,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to config.
        format: Output format (json or console). Defaults to config.
        config: Reporting configuration; loaded from the environment if omitted.
    """
    config = config or get_config()
    log_level = level or config.log_level
    log_format = format or config.log_format

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level),
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        _environment_stamper(config.env),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if log_format == "json":
        # Decimal amounts and dates in event fields are rendered as strings.
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(default=str),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=sys.stdout.isatty(),
                exception_formatter=structlog.dev.plain_traceback,
            )
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
