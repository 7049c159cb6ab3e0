"""Insert a block node at the selection."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..nodes import Node
from ..selection import ContainerSelection
from .break_node import break_node
from .delete_node import delete_node
from .delete_selection import delete_selection
from .helpers import report_invalid_selection, require_container

if TYPE_CHECKING:  # pragma: no cover
    from ..transaction import Transaction

LOGGER = logging.getLogger(__name__)


def insert_node(tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
    """Insert ``args["node"]`` into the container next to the caret.

    ``node`` is node data, a :class:`Node` or the id of an existing node. In
    the middle of a text node the node is broken first; at offset 0 of a
    non-empty text node the new node goes before it; an empty text node is
    replaced. The result selects the inserted node.
    """

    selection = args.get("selection")
    if selection is None or selection.is_null():
        report_invalid_selection(LOGGER, "insert node", selection)
        return args
    if selection.is_node_selection():
        return None
    args = dict(args)
    container = require_container(tx, args, "insert node")
    args["container_id"] = container.id
    if not selection.is_collapsed():
        args = delete_selection(tx, args)
        selection = args["selection"]

    node = _resolve_node(tx, args["node"])
    start = selection.start
    anchor = tx.get(start.node_id)
    position = container.get_position(anchor.id)
    if start.is_property_coordinate() and anchor.is_text():
        text = anchor.get_text()
        if not text:
            delete_node(tx, {"node_id": anchor.id})
        elif start.offset == 0:
            pass
        elif start.offset >= len(text):
            position += 1
        else:
            break_node(tx, {"selection": selection, "container_id": container.id})
            position += 1
    elif start.offset > 0:
        position += 1
    container.show(node.id, position)

    args["node"] = node
    args["selection"] = ContainerSelection(
        container.id,
        (node.id,),
        0,
        (node.id,),
        1,
        surface_id=selection.surface_id,
    )
    return args


def _resolve_node(tx: Transaction, spec: Any) -> Node:
    if isinstance(spec, str):
        return tx.get(spec)
    if isinstance(spec, Node):
        spec = spec.to_json()
    node_id = spec.get("id")
    if node_id and tx.contains(node_id):
        return tx.get(node_id)
    return tx.create(spec)
