"""Deep node copy between documents with id remapping."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ...utils.ids import uuid

if TYPE_CHECKING:  # pragma: no cover
    from ..document import Document
    from ..transaction import Transaction

__all__ = ["copy_node", "copy_annotations"]


def copy_node(
    source: Document,
    target: Document | Transaction,
    node_id: str,
    memo: dict[str, str] | None = None,
) -> str:
    """Copy ``node_id`` from ``source`` into ``target`` and return the copy's id.

    The copy keeps its id unless ``target`` already has it, in which case a
    type-prefixed id is minted. Children are copied first and the parent's
    child list rewritten to their ids. ``memo`` maps source ids to copy ids
    for the duration of one copy operation, so a child shared by several
    parents is copied once.
    """

    if memo is None:
        memo = {}
    if node_id in memo:
        return memo[node_id]
    node = source.get(node_id)
    data = node.to_json()
    if target.contains(node_id):
        data["id"] = uuid(node.type)
    memo[node_id] = data["id"]
    children_property = node.get_children_property()
    if children_property and data.get(children_property):
        data[children_property] = [
            copy_node(source, target, child_id, memo) for child_id in data[children_property]
        ]
    target.create(data)
    return data["id"]


def copy_annotations(
    source: Document,
    target: Document | Transaction,
    id_map: dict[str, str],
) -> list[str]:
    """Copy annotations anchored to the source ids of ``id_map`` onto the copies."""

    created: list[str] = []
    index = source.get_index("annotations")
    for source_id, copy_id in id_map.items():
        for anno in index.get(source_id):
            data: dict[str, Any] = anno.to_json()
            data["path"] = [copy_id, *data["path"][1:]]
            if target.contains(data["id"]):
                data["id"] = uuid(anno.type)
            created.append(target.create(data).id)
    return created
