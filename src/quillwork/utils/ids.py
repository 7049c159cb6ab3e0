"""Identifier minting for nodes and annotations."""

from __future__ import annotations

import uuid as _uuid

__all__ = ["uuid", "set_id_length"]

_ID_LENGTH = 12


def set_id_length(length: int) -> None:
    """Configure how many hex characters minted ids carry."""

    global _ID_LENGTH
    _ID_LENGTH = max(6, min(32, int(length)))


def uuid(prefix: str | None = None) -> str:
    """Return a fresh id, ``"<prefix>-<hex>"`` when a node type is given."""

    token = _uuid.uuid4().hex[:_ID_LENGTH]
    if prefix:
        return f"{prefix}-{token}"
    return token
