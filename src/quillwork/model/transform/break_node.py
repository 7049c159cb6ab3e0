"""Split a text node at the caret (Enter)."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ...utils.ids import uuid
from ..annotation_helpers import transfer_annotations
from ..errors import NotFoundError
from ..operations import Diff
from .delete_selection import delete_selection
from .helpers import caret, create_text_node, report_invalid_selection, require_container

if TYPE_CHECKING:  # pragma: no cover
    from ..nodes import Node
    from ..transaction import Transaction

LOGGER = logging.getLogger(__name__)

# Breaking at the end of one of these yields the default text type.
_BREAK_TO_DEFAULT = ("heading",)


def break_node(tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
    """Split the text node under the caret in two.

    The node keeps the text before the caret; a new node right after it in
    the container receives the rest together with the annotations found
    there. The caret moves to the start of the new node. On a non-text node
    an empty text node is inserted after it instead.
    """

    selection = args.get("selection")
    if selection is None or selection.is_null():
        report_invalid_selection(LOGGER, "break", selection)
        return args
    if selection.is_node_selection():
        return None
    args = dict(args)
    if not selection.is_collapsed():
        args = delete_selection(tx, args)
        selection = args["selection"]
    container = require_container(tx, args, "break")
    args["container_id"] = container.id
    start = selection.start
    node = tx.get(start.node_id)
    position = container.get_position(node.id)
    if position < 0:
        raise NotFoundError(
            message=f"Node '{node.id}' is not part of container '{container.id}'",
            path=[container.id, "nodes"],
        )
    if start.is_property_coordinate() and node.is_text():
        new_node = _break_text_node(tx, node, start.offset)
    else:
        new_node = create_text_node(tx)
    container.show(new_node.id, position + 1)
    args["selection"] = caret(new_node.get_text_path(), 0, selection)
    args["node"] = new_node
    return args


def _break_text_node(tx: Transaction, node: Node, offset: int) -> Node:
    schema = tx.get_schema()
    text = node.get_text()
    tail = text[offset:]
    if not tail and any(schema.is_instance_of(node.type, name) for name in _BREAK_TO_DEFAULT):
        data = {"type": schema.get_default_text_type()}
    else:
        data = node.to_json()
        data.pop("id", None)
    data["id"] = uuid(data["type"])
    data["content"] = tail
    new_node = tx.create(data)
    if tail:
        transfer_annotations(tx, node.get_text_path(), offset, new_node.get_text_path(), 0)
        tx.update(node.get_text_path(), Diff("delete", offset, length=len(tail)))
    return new_node
