"""
Logging for Sales Analytics Reporting

structlog over the standard library root logger, rendered as JSON or as a
console view. A report run binds its evaluation date and input sizes as
context variables, so every event emitted while the run is in progress
carries them without each module passing them along.
"""

import logging
import sys
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterator, List, Optional

import structlog
from structlog.stdlib import ProcessorFormatter

from sales_analytics.config.settings import get_settings

# Chatty library loggers, kept at WARNING unless running at DEBUG
QUIET_LOGGERS = ("sqlalchemy.engine", "faker")


def _shared_processors() -> List:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(log_format: str):
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
) -> None:
    """
    Route structlog and stdlib logging through one stdout handler.

    Args:
        log_level: Override of LOG_LEVEL (DEBUG, INFO, WARNING, ERROR)
        log_format: Override of LOG_FORMAT (json or text)
    """
    settings = get_settings()
    level_name = (log_level or settings.monitoring.log_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    log_format = log_format or settings.monitoring.log_format

    processors = _shared_processors()
    structlog.configure(
        processors=processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        ProcessorFormatter(processor=_renderer(log_format), foreign_pre_chain=processors)
    )

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    library_level = level if level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=level_name,
        format=log_format,
        environment=settings.app_env,
    )


@contextmanager
def run_context(evaluated_at: date, row_counts: Dict[str, int]) -> Iterator[None]:
    """
    Bind a report run's evaluation date and extent sizes to every log event.

    Previous values of the same keys are restored on exit.

    Example:
        with run_context(date(2024, 1, 1), snapshot.row_counts):
            logger.info("Computing report")  # carries evaluated_at, sales_rows, ...
    """
    context = {"evaluated_at": str(evaluated_at)}
    context.update({f"{extent}_rows": rows for extent, rows in row_counts.items()})
    with structlog.contextvars.bound_contextvars(**context):
        yield
