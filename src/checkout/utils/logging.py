"""Logging configuration for the Checkout domain."""

import logging
import os
import sys

import structlog


def configure_logging(level: str | None = None) -> None:
    """Configure stdlib logging and structlog for the checkout service.

    The level defaults to ``CHECKOUT_LOG_LEVEL`` (``INFO`` when unset).
    Production renders JSON lines; every other environment gets the console
    renderer.
    """
    level_name = (level or os.environ.get("CHECKOUT_LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    if os.environ.get("PROTEAN_ENV") == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=False,
    )

    # Suppress noisy library loggers
    logging.getLogger("protean").setLevel(logging.WARNING)
    logging.getLogger("stripe").setLevel(logging.WARNING)


def get_logger(name: str):
    return structlog.get_logger(name)
