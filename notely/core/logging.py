"""
Logging.

structlog on top of the standard logging module, configured from
config/settings/logging.yaml. Console records go to stderr so command
output on stdout stays clean; the optional JSONL file keeps every record
with the ``source`` it was logged from (cli, shell, api, sync, store,
services).

Usage:
    setup_logging(level="DEBUG", format_type="console")

    logger = get_logger(__name__)
    log_with_source(logger, "sync", "info", "Notes loaded", count=12)
"""

import logging
import sys
from functools import lru_cache
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import Processor

from notely.core.config import find_project_root, load_yaml_config

QUIET_LIBRARIES = ("httpx", "httpcore")


@lru_cache
def _logging_settings() -> dict[str, Any]:
    return load_yaml_config("logging.yaml")


def _log_path(configured: str) -> Path:
    path = Path(configured)
    return path if path.is_absolute() else find_project_root() / path


def _processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _formatter(format_type: str, processors: list[Processor]) -> logging.Formatter:
    if format_type == "console":
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    else:
        renderer = structlog.processors.JSONRenderer()
    return structlog.stdlib.ProcessorFormatter(processor=renderer, foreign_pre_chain=processors)


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the root logger.

    Arguments left as None fall back to logging.yaml. Calling again
    replaces the handlers installed by the previous call.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'console' for human-readable stderr, 'json' otherwise
        enable_console: Write records to stderr
        enable_file_logging: Write JSONL records to the rotating log file
    """
    settings = _logging_settings()
    handlers = settings["handlers"]
    level = level or settings["level"]
    format_type = format_type or settings["format"]
    if enable_console is None:
        enable_console = handlers["console"]["enabled"]
    if enable_file_logging is None:
        enable_file_logging = handlers["file"]["enabled"]

    processors = _processors()
    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.setLevel(level.upper())
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()

    if enable_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(_formatter(format_type, processors))
        root.addHandler(console_handler)

    if enable_file_logging:
        file_settings = handlers["file"]
        path = _log_path(file_settings["path"])
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            path,
            maxBytes=file_settings["max_bytes"],
            backupCount=file_settings["backup_count"],
            encoding="utf-8",
        )
        file_handler.setFormatter(_formatter("json", processors))
        root.addHandler(file_handler)

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log message at level with an explicit ``source`` field.

    Raises:
        AttributeError: If level is not a logger method
    """
    getattr(logger, level.lower())(message, source=source, **kwargs)
