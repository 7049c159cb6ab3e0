"""Delete a node together with its children."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover
    from ..transaction import Transaction


def delete_node(tx: Transaction, args: dict[str, Any]) -> dict[str, Any]:
    """Hide ``args["node_id"]`` from every container and delete it recursively.

    Annotations anchored to deleted nodes go with them.
    """

    node_id = args["node_id"]
    node = tx.get(node_id)
    for container in tx.get_containers(node_id):
        container.hide(node_id)
    for child_id in node.get_child_ids():
        if tx.contains(child_id):
            delete_node(tx, {"node_id": child_id})
    tx.delete(node_id)
    return args
