"""Small utilities shared by the transform functions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping

from ...utils.ids import uuid
from ..errors import InvalidSelectionError, NotFoundError
from ..selection import ContainerSelection, NodeSelection, PropertySelection, Selection

if TYPE_CHECKING:  # pragma: no cover
    from ..nodes import Node
    from ..transaction import Transaction

__all__ = [
    "report_invalid_selection",
    "resolve_container_id",
    "require_container",
    "caret",
    "create_text_node",
]


def report_invalid_selection(logger: logging.Logger, command: str, selection: Selection | None) -> None:
    """Log the soft failure of a transform invoked without a usable selection."""

    error = InvalidSelectionError(
        message=f"Can not {command} without selection.",
        details={"command": command, "selection": repr(selection)},
    )
    logger.warning("%s", error)


def resolve_container_id(args: Mapping[str, Any]) -> str | None:
    container_id = args.get("container_id")
    if container_id:
        return container_id
    selection = args.get("selection")
    if isinstance(selection, (ContainerSelection, NodeSelection)):
        return selection.container_id
    return None


def require_container(tx: Transaction, args: Mapping[str, Any], command: str) -> Node:
    container_id = resolve_container_id(args)
    if not container_id:
        raise NotFoundError(message=f"{command} requires a container_id", path=None)
    return tx.get(container_id)


def caret(path: list[str] | tuple[str, ...], offset: int, selection: Selection | None) -> PropertySelection:
    """Collapsed property selection carrying the surface of ``selection``."""

    surface_id = selection.surface_id if selection is not None else None
    return PropertySelection(tuple(path), offset, offset, surface_id=surface_id)


def create_text_node(tx: Transaction, content: str = "", type_name: str | None = None) -> Node:
    text_type = type_name or tx.get_schema().get_default_text_type()
    return tx.create({"id": uuid(text_type), "type": text_type, "content": content})
