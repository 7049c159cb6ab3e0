"""Change the type of the text node under a property selection."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Any

from ...utils.ids import uuid
from ..annotation_helpers import transfer_annotations
from ..errors import SchemaError
from .helpers import report_invalid_selection, require_container

if TYPE_CHECKING:  # pragma: no cover
    from ..transaction import Transaction

LOGGER = logging.getLogger(__name__)


def switch_text_type(tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
    """Replace the selected text node with a node built from ``args["data"]``.

    The new node takes the old node's place and content; annotations are
    moved over and the selection follows them.
    """

    selection = args.get("selection")
    if selection is None or selection.is_null():
        report_invalid_selection(LOGGER, "switch text type", selection)
        return args
    if not selection.is_property_selection():
        return None
    args = dict(args)
    data = dict(args["data"])
    new_type = data.get("type")
    schema = tx.get_schema()
    if not new_type or not schema.is_text_type(new_type):
        raise SchemaError(message=f"'{new_type}' is not a text type", node_type=new_type)
    node = tx.get(selection.node_id)
    if not node.is_text():
        LOGGER.warning("Can not switch type of non-text node %s", node.id)
        return args
    container = require_container(tx, args, "switch text type")
    position = container.get_position(node.id)

    data["id"] = uuid(new_type)
    data["content"] = node.get_text()
    new_node = tx.create(data)
    transfer_annotations(tx, node.get_text_path(), 0, new_node.get_text_path(), 0)
    container.hide(node.id)
    tx.delete(node.id)
    container.show(new_node.id, position)

    args["node"] = new_node
    args["container_id"] = container.id
    args["selection"] = replace(selection, path=tuple(new_node.get_text_path()))
    return args
