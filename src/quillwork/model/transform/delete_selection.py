"""Delete the selected content.

Property selections delete a character range. Container selections trim the
partially covered first and last text nodes, delete every node in between
and merge the two remaining halves. A collapsed selection deletes one
character in ``args["direction"]`` (``"left"`` or ``"right"``), merging with
the neighbouring node at a text boundary.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..annotation_helpers import deleted_text, transfer_annotations
from ..operations import Diff
from ..selection import ContainerSelection, PropertyFragment
from .delete_node import delete_node
from .helpers import caret, create_text_node, report_invalid_selection, resolve_container_id

if TYPE_CHECKING:  # pragma: no cover
    from ..nodes import Node
    from ..selection import Selection
    from ..transaction import Transaction

LOGGER = logging.getLogger(__name__)


def delete_selection(tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
    selection = args.get("selection")
    if selection is None or selection.is_null():
        report_invalid_selection(LOGGER, "delete", selection)
        return args
    if selection.is_node_selection():
        return None
    args = dict(args)
    if selection.is_collapsed():
        return _delete_character(tx, args, selection, args.get("direction"))
    if selection.is_property_selection():
        _delete_range(tx, selection.path, selection.start_offset, selection.end_offset)
        args["selection"] = caret(selection.path, selection.start_offset, selection)
        return args
    return _delete_container_range(tx, args, selection)


def _delete_range(tx: Transaction, path: Any, start: int, end: int) -> None:
    if end <= start:
        return
    tx.update(path, Diff("delete", start, length=end - start))
    deleted_text(tx, path, start, end)


def _merge_into(tx: Transaction, target: Node, source: Node) -> int:
    """Append the text of ``source`` to ``target``, delete ``source`` and return the join offset."""

    offset = len(target.get_text())
    text = source.get_text()
    if text:
        tx.update(target.get_text_path(), Diff("insert", offset, value=text))
    transfer_annotations(tx, source.get_text_path(), 0, target.get_text_path(), offset)
    delete_node(tx, {"node_id": source.id})
    return offset


# ----------------------------------------------------------------------
# Container ranges
# ----------------------------------------------------------------------


def _delete_container_range(tx: Transaction, args: dict[str, Any], selection: ContainerSelection) -> dict[str, Any]:
    container = tx.get(selection.container_id)
    fragments = selection.get_fragments(tx)
    if not fragments:
        args["selection"] = selection.collapse("left")
        return args
    insert_position = container.get_position(fragments[0].node_id)

    first = fragments[0] if isinstance(fragments[0], PropertyFragment) else None
    last = fragments[-1] if len(fragments) > 1 and isinstance(fragments[-1], PropertyFragment) else None
    for fragment in fragments:
        if fragment is first or fragment is last:
            continue
        delete_node(tx, {"node_id": fragment.node_id})

    if first is not None:
        _delete_range(tx, first.path, first.start_offset, first.end_offset)
    if last is not None:
        _delete_range(tx, last.path, last.start_offset, last.end_offset)

    if first is not None and last is not None:
        _merge_into(tx, tx.get(first.node_id), tx.get(last.node_id))
        args["selection"] = caret(first.path, first.start_offset, selection)
    elif first is not None:
        args["selection"] = caret(first.path, first.start_offset, selection)
    elif last is not None:
        args["selection"] = caret(last.path, 0, selection)
    else:
        node = create_text_node(tx)
        container.show(node.id, insert_position)
        args["selection"] = caret(node.get_text_path(), 0, selection)
    args["container_id"] = selection.container_id
    return args


# ----------------------------------------------------------------------
# Collapsed deletes
# ----------------------------------------------------------------------


def _delete_character(
    tx: Transaction,
    args: dict[str, Any],
    selection: Selection,
    direction: str | None,
) -> dict[str, Any]:
    if direction not in ("left", "right"):
        return args
    start = selection.start
    container_id = resolve_container_id(args)
    if not start.is_property_coordinate():
        return _delete_adjacent_node(tx, args, selection, container_id, direction)

    path = start.path
    offset = start.offset
    length = len(tx.get(path))
    if direction == "left" and offset > 0:
        _delete_range(tx, path, offset - 1, offset)
        args["selection"] = caret(path, offset - 1, selection)
        return args
    if direction == "right" and offset < length:
        _delete_range(tx, path, offset, offset + 1)
        args["selection"] = caret(path, offset, selection)
        return args
    if not container_id:
        return args

    # At a text boundary: join with the neighbour.
    container = tx.get(container_id)
    node = tx.get(start.node_id)
    position = container.get_position(node.id)
    neighbour_position = position - 1 if direction == "left" else position + 1
    if position < 0 or not 0 <= neighbour_position < len(container.nodes):
        return args
    neighbour = container.get_node_at(neighbour_position)
    if not neighbour.is_text():
        delete_node(tx, {"node_id": neighbour.id})
        return args
    if direction == "left":
        offset = _merge_into(tx, neighbour, node)
        args["selection"] = caret(neighbour.get_text_path(), offset, selection)
    else:
        offset = _merge_into(tx, node, neighbour)
        args["selection"] = caret(path, offset, selection)
    return args


def _delete_adjacent_node(
    tx: Transaction,
    args: dict[str, Any],
    selection: Selection,
    container_id: str | None,
    direction: str,
) -> dict[str, Any]:
    """Delete a non-text node when the caret sits against it."""

    start = selection.start
    targets_node = (direction == "left" and start.offset == 1) or (direction == "right" and start.offset == 0)
    if not container_id or not targets_node:
        return args
    container = tx.get(container_id)
    position = container.get_position(start.node_id)
    delete_node(tx, {"node_id": start.node_id})
    nodes = container.nodes
    if not nodes:
        node = create_text_node(tx)
        container.show(node.id, 0)
        args["selection"] = caret(node.get_text_path(), 0, selection)
        return args
    if position < len(nodes):
        neighbour = container.get_node_at(position)
        at_end = False
    else:
        neighbour = container.get_node_at(len(nodes) - 1)
        at_end = True
    if neighbour.is_text():
        offset = len(neighbour.get_text()) if at_end else 0
        args["selection"] = caret(neighbour.get_text_path(), offset, selection)
    else:
        args["selection"] = ContainerSelection(
            container_id,
            (neighbour.id,),
            1 if at_end else 0,
            surface_id=selection.surface_id,
        )
    return args
