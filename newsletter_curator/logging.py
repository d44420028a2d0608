"""Structured logging for Newsletter Curator.

Every curation stage emits one summary line built with
``log_processing_stage``; per-article problems that are absorbed rather than
raised (malformed records, normalization errors, scoring fallbacks) are logged
at WARNING with ``article_context`` so the offending article can be found.
"""

import json
import logging
import sys
import time
from pathlib import Path
from typing import Any

import structlog
from structlog import processors, stdlib

from .config import get_settings

TITLE_PREVIEW_LENGTH = 60


def setup_logging(
    log_level: str | None = None,
    json_logging: bool | None = None,
    log_file: Path | None = None
) -> None:
    """Configure structlog on top of the standard library logging module.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR; falls back to settings
        json_logging: Render JSON lines instead of console output
        log_file: Also append log lines to this file
    """
    settings = get_settings()
    level = getattr(logging, (log_level or settings.log_level).upper())
    if json_logging is None:
        json_logging = settings.json_logging

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level, force=True)

    renderer = (
        processors.JSONRenderer(serializer=json.dumps, ensure_ascii=False)
        if json_logging
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            stdlib.add_logger_name,
            stdlib.add_log_level,
            stdlib.PositionalArgumentsFormatter(),
            processors.TimeStamper(fmt="iso", utc=True),
            processors.StackInfoRenderer(),
            processors.format_exc_info,
            renderer,
        ],
        wrapper_class=stdlib.BoundLogger,
        logger_factory=stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


def article_context(article: Any) -> dict[str, Any]:
    """Identify an article in a log line by its URL and a title preview."""
    return {
        "url": getattr(article, "url", ""),
        "title": (getattr(article, "title", "") or "")[:TITLE_PREVIEW_LENGTH],
    }


def log_processing_stage(
    stage: str,
    input_count: int,
    output_count: int,
    duration: float | None = None,
    **kwargs: Any
) -> dict[str, Any]:
    """Build the summary fields logged at the end of a curation stage.

    Args:
        stage: Stage name (validate, dedupe, score, select, ...)
        input_count: Articles entering the stage
        output_count: Articles leaving the stage
        duration: Wall time in seconds
        **kwargs: Stage specific counters

    Returns:
        Event fields, including how many articles the stage dropped
    """
    log_data = {
        "stage": stage,
        "input_count": input_count,
        "output_count": output_count,
        "dropped": max(input_count - output_count, 0),
        **kwargs
    }

    if duration is not None:
        log_data["duration"] = round(duration, 4)

    return log_data


def log_error(
    error: Exception,
    context: str | None = None,
    **kwargs: Any
) -> dict[str, Any]:
    """Build the fields logged for an absorbed or re-raised exception.

    Args:
        error: The exception
        context: What was being attempted, e.g. ``normalize_title``
        **kwargs: Extra fields such as ``article_context(article)``

    Returns:
        Event fields
    """
    log_data = {
        "error_type": type(error).__name__,
        "error_message": str(error),
        **kwargs
    }

    if context:
        log_data["context"] = context

    return log_data


class PerformanceLogger:
    """Time a block and log whether it completed or failed.

    Extra keyword arguments are attached to every line, which keeps the batch
    size next to the timing::

        with PerformanceLogger("dedupe", logger, articles=len(batch)):
            ...
    """

    def __init__(self, operation: str, logger: structlog.stdlib.BoundLogger, **context: Any):
        self.operation = operation
        self.logger = logger
        self.context = context
        self.start_time: float | None = None
        self.duration: float | None = None

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = time.perf_counter()
        self.logger.debug("operation_started", operation=self.operation, **self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return
        self.duration = time.perf_counter() - self.start_time
        fields = {"operation": self.operation, "duration": round(self.duration, 4), **self.context}

        if exc_type is None:
            self.logger.info("operation_completed", **fields)
        else:
            self.logger.error(
                "operation_failed",
                error_type=exc_type.__name__,
                error_message=str(exc_val) if exc_val else None,
                **fields,
            )


# Initialize logging on module import
setup_logging()
