"""Live node handles backed by a document's node arena."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Iterator

from .errors import NotFoundError

if TYPE_CHECKING:  # pragma: no cover
    from .document import Document

__all__ = ["Node"]


class Node:
    """Handle onto one node's JSON-able data.

    Nodes never hold references to other nodes; relationships are ids or
    ``[node_id, property]`` paths resolved through :attr:`document`. Mutating
    helpers (``show``/``hide``) go through the document so they are recorded
    by the open transaction.
    """

    __slots__ = ("document", "_data")

    def __init__(self, document: Document, data: dict[str, Any]) -> None:
        self.document = document
        self._data = data

    # ------------------------------------------------------------------
    # Data access
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self._data["id"]

    @property
    def type(self) -> str:
        return self._data["type"]

    def get(self, name: str, default: Any = None) -> Any:
        return self._data.get(name, default)

    def __getitem__(self, name: str) -> Any:
        try:
            return self._data[name]
        except KeyError as exc:
            raise NotFoundError.for_path([self.id, name]) from exc

    def __contains__(self, name: object) -> bool:
        return name in self._data

    def keys(self) -> Iterator[str]:
        return iter(self._data.keys())

    def to_json(self) -> dict[str, Any]:
        """Return a deep copy of the node data, suitable for ``create``."""

        return copy.deepcopy(self._data)

    def _set_property(self, name: str, value: Any) -> None:
        self._data[name] = value

    # ------------------------------------------------------------------
    # Type queries
    # ------------------------------------------------------------------

    def is_instance_of(self, base_type: str) -> bool:
        return self.document.get_schema().is_instance_of(self.type, base_type)

    def is_text(self) -> bool:
        return self.is_instance_of("text")

    def is_annotation(self) -> bool:
        return self.is_instance_of("annotation")

    def is_container(self) -> bool:
        return self.is_instance_of("container")

    # ------------------------------------------------------------------
    # Text nodes
    # ------------------------------------------------------------------

    def get_text_path(self) -> list[str]:
        return [self.id, "content"]

    def get_text(self) -> str:
        return self._data.get("content", "")

    # ------------------------------------------------------------------
    # Annotations
    # ------------------------------------------------------------------

    @property
    def path(self) -> list[str]:
        return list(self._data.get("path") or [])

    @property
    def start_offset(self) -> int:
        return int(self._data.get("start_offset", 0))

    @property
    def end_offset(self) -> int:
        return int(self._data.get("end_offset", 0))

    # ------------------------------------------------------------------
    # Composite nodes
    # ------------------------------------------------------------------

    def get_children_property(self) -> str | None:
        return self.document.get_schema().children_property(self.type)

    def has_children(self) -> bool:
        prop = self.get_children_property()
        return bool(prop and self._data.get(prop))

    def get_child_ids(self) -> list[str]:
        prop = self.get_children_property()
        if not prop:
            return []
        return list(self._data.get(prop) or [])

    def get_children(self) -> list[Node]:
        return [self.document.get(child_id) for child_id in self.get_child_ids()]

    # ------------------------------------------------------------------
    # Containers
    # ------------------------------------------------------------------

    @property
    def nodes(self) -> list[str]:
        return list(self._data.get("nodes") or [])

    def get_position(self, node_id: str) -> int:
        """Return the index of ``node_id`` in this container, or -1."""

        try:
            return self.nodes.index(node_id)
        except ValueError:
            return -1

    def get_node_at(self, position: int) -> Node:
        return self.document.get(self.nodes[position])

    def get_nodes(self) -> list[Node]:
        return [self.document.get(node_id) for node_id in self.nodes]

    def show(self, node_id: str, position: int | None = None) -> None:
        """Insert ``node_id`` at ``position`` (default: end, clamped to bounds)."""

        size = len(self._data.get("nodes") or [])
        if position is None:
            position = size
        position = max(0, min(int(position), size))
        self.document.update([self.id, "nodes"], {"insert": {"offset": position, "value": [node_id]}})

    def hide(self, node_id: str) -> None:
        position = self.get_position(node_id)
        if position < 0:
            return
        self.document.update([self.id, "nodes"], {"delete": {"offset": position, "length": 1}})

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, type={self.type!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self._data == other._data

    __hash__ = None  # type: ignore[assignment]
