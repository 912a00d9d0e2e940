"""structlog setup for check-ajp.

Log events go to stderr so that stdout carries only the plugin output.
"""

from __future__ import annotations

import logging
import sys

import structlog


def level_for(verbosity: int) -> int:
    """Map the ``-v`` count to a log level.

    The first two levels of verbosity only dump the response, so logging
    stays at WARNING until ``-vvv``.
    """
    if verbosity >= 3:
        return logging.DEBUG
    return logging.WARNING


def configure_logging(verbosity: int = 0, colors: bool = False) -> None:
    """Configure structlog for command-line use.

    Args:
        verbosity: Number of ``-v`` flags given
        colors: Whether the console renderer may use colors
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=colors),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_for(verbosity)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )
