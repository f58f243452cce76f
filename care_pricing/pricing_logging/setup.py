"""Logging setup for the estimator and its CLI."""

import logging
import sys
from typing import TextIO

from .context import ContextFilter
from .filters import DefaultCorrelationFilter, PIIFilter
from .formatters import DevFormatter, JSONFormatter

# HTTP client loggers log every request at INFO; a quote fetches five lists.
QUIET_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    level: str = "INFO",
    json_output: bool = False,
    environment: str = "development",
    stream: TextIO | None = None,
) -> logging.Handler:
    """Route all logging through one handler on the root logger.

    Logs go to stderr unless another stream is given, keeping stdout free
    for the quote the CLI prints.
    """
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(JSONFormatter(environment) if json_output else DevFormatter())
    for log_filter in (PIIFilter(), DefaultCorrelationFilter(), ContextFilter()):
        handler.addFilter(log_filter)

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handler


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
