"""quillwork: a headless structured-document editing engine."""

from __future__ import annotations

from pathlib import Path

from .services.settings import Settings, load_settings
from .utils.ids import set_id_length
from .utils.logging import setup_logging

__all__ = ["__version__", "configure"]

__version__ = "0.1.0"


def configure(settings: Settings | None = None, *, log_dir: Path | str | None = None) -> Settings:
    """Apply process-wide settings: logging and id minting.

    Settings are loaded from disk (plus environment overrides) when none are
    given. Returns the settings in effect.
    """

    settings = settings or load_settings()
    setup_logging(settings.effective_log_level, log_dir=log_dir, force=True)
    set_id_length(settings.id_length)
    return settings
