"""Type text at the selection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..annotation_helpers import inserted_text
from ..operations import Diff
from .delete_selection import delete_selection
from .helpers import caret, create_text_node, report_invalid_selection, require_container

if TYPE_CHECKING:  # pragma: no cover
    from ..transaction import Transaction

LOGGER = logging.getLogger(__name__)


def insert_text(tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
    """Insert ``args["text"]`` at the selection, replacing a range first.

    Annotations around the caret follow the rules of
    :func:`~quillwork.model.annotation_helpers.inserted_text`. When the caret
    sits on a non-text node a new text node holding the text is placed after
    it.
    """

    selection = args.get("selection")
    if selection is None or selection.is_null():
        report_invalid_selection(LOGGER, "insert text", selection)
        return args
    if selection.is_node_selection():
        return None
    args = dict(args)
    text = args.get("text") or ""
    if not selection.is_collapsed():
        args = delete_selection(tx, args)
        selection = args["selection"]
    start = selection.start
    if not start.is_property_coordinate():
        container = require_container(tx, args, "insert text")
        position = container.get_position(start.node_id)
        node = create_text_node(tx, text)
        container.show(node.id, position + 1)
        args["selection"] = caret(node.get_text_path(), len(text), selection)
        return args
    if text:
        tx.update(start.path, Diff("insert", start.offset, value=text))
        inserted_text(tx, start, len(text))
    args["selection"] = caret(start.path, start.offset + len(text), selection)
    return args
