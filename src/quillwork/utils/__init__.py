"""Shared utilities (logging, id minting)."""

from .ids import uuid
from .logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging", "uuid"]
