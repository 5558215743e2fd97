"""Structlog configuration for the coordinator.

Probe events go to stdout, rendered for humans on a terminal and as JSON
lines everywhere else.
"""

import logging
import os
import sys

import structlog


def _wants_console(json_output: bool | None) -> bool:
    if json_output is not None:
        return not json_output
    if os.environ.get("FORCE_COLOR", "").lower() in ("1", "true", "yes"):
        return True
    return sys.stdout.isatty()


def configure_logging(debug: bool = False, *, json_output: bool | None = None) -> None:
    """Configure structlog processors and level filtering.

    Args:
        debug: Emit debug-level probe events (cache hits, resolution steps)
        json_output: Force JSON (True) or console (False) rendering; by
            default the console renderer is used on a TTY or when
            FORCE_COLOR is set
    """
    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if _wants_console(json_output):
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors.extend(
            [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.INFO
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
