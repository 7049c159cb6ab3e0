"""Structured logging helpers for the quillwork engine."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

__all__ = [
    "DocumentContextFilter",
    "document_logger",
    "setup_logging",
    "get_logger",
    "get_log_path",
    "resolve_level",
]

_DEFAULT_LOG_DIR = Path.home() / ".quillwork" / "logs"
_NOISY_LOGGERS: tuple[str, ...] = ("markdown_it", "quillwork.events")
_CONFIGURED = False
_LOG_PATH: Path | None = None
_NO_DOCUMENT = "-"


class DocumentContextFilter(logging.Filter):
    """Give every record a ``document_id`` so handlers can format it.

    Records logged through :func:`document_logger` carry the id of the
    document they concern; all others get ``"-"``.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "document_id"):
            record.document_id = _NO_DOCUMENT
        return True


def document_logger(logger: logging.Logger, document_id: str | None) -> logging.LoggerAdapter:
    """Return ``logger`` wrapped so its records name ``document_id``."""

    return logging.LoggerAdapter(logger, {"document_id": document_id or _NO_DOCUMENT})


def setup_logging(
    level: int | str = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Configure root logging with rotating file + optional console handlers."""

    global _CONFIGURED, _LOG_PATH
    if _CONFIGURED and not force and _LOG_PATH is not None:
        return _LOG_PATH

    level = resolve_level(level)
    target_dir = _resolve_log_dir(log_dir)
    target_dir.mkdir(parents=True, exist_ok=True)
    log_path = target_dir / "quillwork.log"

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(document_id)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    context_filter = DocumentContextFilter()

    handlers: list[logging.Handler] = []
    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(context_filter)
    handlers.append(file_handler)

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        console_handler.addFilter(context_filter)
        handlers.append(console_handler)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    _tune_external_loggers(level)

    _CONFIGURED = True
    _LOG_PATH = log_path
    return log_path


def get_logger(name: str) -> logging.Logger:
    """Return a module-specific logger."""

    return logging.getLogger(name)


def get_log_path() -> Path | None:
    """Return the currently configured log file if available."""

    return _LOG_PATH


def resolve_level(level: int | str) -> int:
    """Translate ``"debug"``/``"INFO"`` style names into logging levels."""

    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    if isinstance(resolved, int):
        return resolved
    return logging.INFO


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    env_override = os.environ.get("QUILLWORK_LOG_DIR")
    return Path(log_dir or env_override or _DEFAULT_LOG_DIR).expanduser()


def _tune_external_loggers(root_level: int) -> None:
    quiet_level = logging.WARNING if root_level < logging.WARNING else root_level
    for logger_name in _NOISY_LOGGERS:
        logging.getLogger(logger_name).setLevel(quiet_level)
