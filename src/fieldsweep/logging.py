"""
Structured logging configuration using structlog.

Development gets colored console lines, every other environment one JSON
object per line. Logs go to stderr so `fieldsweep run ... > out.txt`
captures only the report.

Module loggers are lazy: they read the structlog configuration on first
use, so `get_logger()` at import time is safe even though the CLI only
calls `configure_logging()` once the command starts.

Inside `experiment_context()` every log line carries the experiment name
and id, including lines from the index, matcher and scorers.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import IO, Any

import structlog
from structlog.types import Processor

from fieldsweep.config import Settings, get_settings

# Standard library loggers of our dependencies, capped at WARNING
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "sentence_transformers", "urllib3")


def build_processors(json_output: bool) -> list[Processor]:
    """Processor chain ending in a JSON or a console renderer."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if json_output:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    return processors


def configure_logging(settings: Settings | None = None, stream: IO[str] | None = None) -> None:
    """
    Configure structlog and the standard library root logger.

    Args:
        settings: Source of log_level and environment; defaults to get_settings()
        stream: Where log lines go; defaults to stderr
    """
    settings = settings or get_settings()
    stream = stream or sys.stderr
    level = logging.getLevelName(settings.log_level.upper())

    structlog.configure(
        processors=build_processors(json_output=settings.environment != "development"),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=stream, level=level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def experiment_context(experiment: str, experiment_id: str) -> Iterator[None]:
    """Tag every log line emitted inside the block with the experiment."""
    with structlog.contextvars.bound_contextvars(
        experiment=experiment,
        experiment_id=experiment_id,
    ):
        yield


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """
    Get a lazy logger with optional initial context.

    Args:
        name: Optional logger name (typically __name__)
        **initial_context: Key-value pairs to bind to all log messages

    Example:
        logger = get_logger(__name__, component="runner")
        logger.info("combination_complete", combination="title + body", score=0.71)
    """
    return structlog.get_logger(name, **initial_context)
