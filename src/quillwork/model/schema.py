"""Node type registry shared by a document and its snippets."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping

__all__ = [
    "NodeType",
    "Schema",
    "default_schema",
    "DEFAULT_TEXT_TYPE",
]

DEFAULT_TEXT_TYPE = "paragraph"


@dataclass(slots=True, frozen=True)
class NodeType:
    """Definition of a node type.

    ``properties`` maps attribute names to their default values; defaults are
    deep-copied into every created node. ``children_property`` names the id
    list holding child nodes for composite types.
    """

    name: str
    parent: str | None = "node"
    properties: Mapping[str, Any] = field(default_factory=dict)
    required: tuple[str, ...] = ()
    children_property: str | None = None

    def defaults(self) -> dict[str, Any]:
        return {key: copy.deepcopy(value) for key, value in self.properties.items()}


class Schema:
    """Read-only registry of node types with inheritance queries."""

    def __init__(
        self,
        name: str,
        node_types: Iterable[NodeType] = (),
        *,
        default_text_type: str = DEFAULT_TEXT_TYPE,
    ) -> None:
        self.name = name
        self._types: dict[str, NodeType] = {}
        self._default_text_type = default_text_type
        for node_type in node_types:
            self.add_node_type(node_type)

    def add_node_type(self, node_type: NodeType) -> None:
        self._types[node_type.name] = node_type

    def get_node_type(self, name: str) -> NodeType | None:
        return self._types.get(name)

    def has_type(self, name: str) -> bool:
        return name in self._types

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[NodeType]:
        return iter(self._types.values())

    def is_instance_of(self, type_name: str, base_type: str) -> bool:
        """Return True when ``type_name`` is ``base_type`` or derives from it.

        Unregistered types are never instances of anything.
        """

        seen: set[str] = set()
        current = self._types.get(type_name)
        while current is not None and current.name not in seen:
            if current.name == base_type:
                return True
            seen.add(current.name)
            if current.parent is None:
                return False
            current = self._types.get(current.parent)
        return False

    def get_default_text_type(self) -> str:
        return self._default_text_type

    def is_text_type(self, type_name: str) -> bool:
        return self.is_instance_of(type_name, "text")

    def is_annotation_type(self, type_name: str) -> bool:
        return self.is_instance_of(type_name, "annotation")

    def is_container_type(self, type_name: str) -> bool:
        return self.is_instance_of(type_name, "container")

    def children_property(self, type_name: str) -> str | None:
        """Return the child-id list property declared along the type chain."""

        current = self._types.get(type_name)
        while current is not None:
            if current.children_property:
                return current.children_property
            if current.parent is None:
                return None
            current = self._types.get(current.parent)
        return None

    def property_defaults(self, type_name: str) -> dict[str, Any]:
        """Collect defaults from the root of the type chain down to ``type_name``."""

        chain: list[NodeType] = []
        current = self._types.get(type_name)
        while current is not None and current not in chain:
            chain.append(current)
            current = self._types.get(current.parent) if current.parent else None
        defaults: dict[str, Any] = {}
        for node_type in reversed(chain):
            defaults.update(node_type.defaults())
        return defaults

    def required_properties(self, type_name: str) -> tuple[str, ...]:
        required: list[str] = []
        current = self._types.get(type_name)
        while current is not None:
            required.extend(name for name in current.required if name not in required)
            current = self._types.get(current.parent) if current.parent else None
        return tuple(required)


def default_schema(default_text_type: str = DEFAULT_TEXT_TYPE) -> Schema:
    """Return the schema used by documents that do not bring their own."""

    return Schema(
        "quillwork-article",
        (
            NodeType("node", parent=None),
            NodeType("text", properties={"content": ""}),
            NodeType("paragraph", parent="text"),
            NodeType("heading", parent="text", properties={"level": 1}),
            NodeType("codeblock", parent="text", properties={"language": ""}),
            NodeType("list-item", parent="text"),
            NodeType("container", properties={"nodes": []}, children_property="nodes"),
            NodeType("image", properties={"src": "", "title": ""}),
            NodeType("list", properties={"ordered": False, "items": []}, children_property="items"),
            NodeType("figure", properties={"children": []}, children_property="children"),
            NodeType(
                "annotation",
                properties={"path": [], "start_offset": 0, "end_offset": 0},
                required=("path",),
            ),
            NodeType("strong", parent="annotation"),
            NodeType("emphasis", parent="annotation"),
            NodeType("code", parent="annotation"),
            NodeType("link", parent="annotation", properties={"url": ""}),
        ),
        default_text_type=default_text_type,
    )
