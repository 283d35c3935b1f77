"""Logfire setup and structured logging helpers.

Modules log through ``logging.getLogger(__name__)``; once ``configure_logfire``
has run, those records are forwarded to Logfire. Service functions wrap their
work in ``span`` so ledger writes and status moves show up as traces.
"""

import logging

import logfire
from fastapi import FastAPI

from src.core.config import settings


def configure_logfire() -> None:
    """Configure Logfire and route standard library logging through it."""
    logfire.configure(
        token=settings.logfire_token,
        service_name="sprintledger",
        service_version="0.1.0",
        environment=settings.environment,
        send_to_logfire="if-token-present",
    )
    logging.basicConfig(handlers=[logfire.LogfireLoggingHandler()], level=logging.INFO)
    logging.getLogger(__name__).info("Logfire configured")


def instrument_fastapi(app: FastAPI) -> None:
    logfire.instrument_fastapi(app)


def span(name: str) -> logfire.LogfireSpan:
    """Open a Logfire span named after the service function, e.g. "ledger_service.set_daily_value"."""
    return logfire.span(name)


def log_with_context(logger: logging.Logger, level: str, message: str, **context: object) -> None:
    """Log at the named level with the keyword arguments attached as extra fields."""
    getattr(logger, level.lower())(message, extra=context)


def log_with_task_context(
    logger: logging.Logger,
    level: str,
    message: str,
    task_id: str | None = None,
    **extra: object,
) -> None:
    """Like log_with_context, with the task id first when one is known."""
    context = {"task_id": task_id, **extra} if task_id else extra
    log_with_context(logger, level, message, **context)
