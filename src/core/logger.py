import logging
import os

import structlog
from dotenv import load_dotenv

load_dotenv()

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def resolve_log_level(name: str | None, default: int = logging.INFO) -> int:
    """Map a level name (case-insensitive) to a stdlib logging level."""
    if not name:
        return default
    return LOG_LEVELS.get(name.upper(), default)


def setup_logging(level: int | None = logging.INFO, colors: bool = True) -> None:
    """
    Configure structured logging for training runs.

    Trainers run in worker threads, so every event carries the thread name
    in addition to the usual level and timestamp.

    Args:
        level: The logging level to use. Defaults to INFO.
        colors: Whether the console renderer should emit ANSI colors.
    """
    logging.basicConfig(level=level)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.CallsiteParameterAdder(
            [structlog.processors.CallsiteParameter.THREAD_NAME]
        ),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.dev.ConsoleRenderer(
            colors=colors,
            exception_formatter=structlog.dev.plain_traceback,
            pad_event=40,
        ),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


setup_logging(level=resolve_log_level(os.getenv("LOG_LEVEL"), default=logging.DEBUG))
