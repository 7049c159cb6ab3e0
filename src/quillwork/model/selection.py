"""Selection value types.

A selection is one of four closed variants, tagged by :class:`SelectionType`:

* :class:`NullSelection` - nothing selected.
* :class:`PropertySelection` - caret or range inside one text property.
* :class:`ContainerSelection` - range spanning nodes of a container.
* :class:`NodeSelection` - a whole node inside a container.

Selections are immutable; every transform returns a new one. The optional
``surface_id`` is set by the editing layer and only ever copied along.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from .errors import InvalidSelectionError

if TYPE_CHECKING:  # pragma: no cover
    from .document import Document

__all__ = [
    "SelectionType",
    "Coordinate",
    "Selection",
    "NullSelection",
    "NULL_SELECTION",
    "PropertySelection",
    "ContainerSelection",
    "NodeSelection",
    "PropertyFragment",
    "NodeFragment",
    "selection_from_json",
]


class SelectionType(str, Enum):
    NULL = "null"
    PROPERTY = "property"
    CONTAINER = "container"
    NODE = "node"


@dataclass(slots=True, frozen=True)
class Coordinate:
    """A position: ``([node_id, property], offset)`` or ``([node_id], 0|1)``."""

    path: tuple[str, ...]
    offset: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", tuple(self.path))
        object.__setattr__(self, "offset", int(self.offset))

    @property
    def node_id(self) -> str:
        return self.path[0]

    def is_property_coordinate(self) -> bool:
        return len(self.path) == 2

    def is_node_coordinate(self) -> bool:
        return len(self.path) == 1


@dataclass(slots=True, frozen=True)
class PropertyFragment:
    """Part of a container selection lying inside one text property."""

    path: tuple[str, str]
    start_offset: int
    end_offset: int
    is_first: bool = False
    is_last: bool = False

    @property
    def node_id(self) -> str:
        return self.path[0]

    def is_partial(self, text_length: int) -> bool:
        return self.start_offset > 0 or self.end_offset < text_length


@dataclass(slots=True, frozen=True)
class NodeFragment:
    """A node fully covered by a container selection."""

    node_id: str
    is_first: bool = False
    is_last: bool = False


class Selection:
    """Behaviour shared by all selection variants."""

    __slots__ = ()

    @property
    def type(self) -> SelectionType:  # pragma: no cover - overridden
        raise NotImplementedError

    @property
    def surface_id(self) -> str | None:  # pragma: no cover - overridden
        return None

    def is_null(self) -> bool:
        return self.type is SelectionType.NULL

    def is_property_selection(self) -> bool:
        return self.type is SelectionType.PROPERTY

    def is_container_selection(self) -> bool:
        return self.type is SelectionType.CONTAINER

    def is_node_selection(self) -> bool:
        return self.type is SelectionType.NODE

    def is_collapsed(self) -> bool:
        return False

    def with_surface(self, surface_id: str | None) -> Selection:
        return self

    def to_json(self) -> dict[str, Any]:
        return {"type": self.type.value}


@dataclass(slots=True, frozen=True)
class NullSelection(Selection):
    """The empty selection."""

    @property
    def type(self) -> SelectionType:
        return SelectionType.NULL

    @property
    def surface_id(self) -> str | None:
        return None

    def is_collapsed(self) -> bool:
        return True

    def __bool__(self) -> bool:
        return False


NULL_SELECTION = NullSelection()


@dataclass(slots=True, frozen=True)
class PropertySelection(Selection):
    """Caret or range inside the text property at ``path``."""

    path: tuple[str, ...]
    start_offset: int
    end_offset: int | None = None
    reverse: bool = False
    surface_id: str | None = None

    def __post_init__(self) -> None:
        if len(self.path) != 2:
            raise InvalidSelectionError(message="Property selections require a [node_id, property] path")
        start = int(self.start_offset)
        end = start if self.end_offset is None else int(self.end_offset)
        if start < 0 or end < 0:
            raise InvalidSelectionError(message="Selection offsets must be non-negative")
        if end < start:
            start, end = end, start
        object.__setattr__(self, "path", tuple(self.path))
        object.__setattr__(self, "start_offset", start)
        object.__setattr__(self, "end_offset", end)

    @property
    def type(self) -> SelectionType:
        return SelectionType.PROPERTY

    @property
    def node_id(self) -> str:
        return self.path[0]

    @property
    def start(self) -> Coordinate:
        return Coordinate(self.path, self.start_offset)

    @property
    def end(self) -> Coordinate:
        return Coordinate(self.path, self.end_offset)

    def is_collapsed(self) -> bool:
        return self.start_offset == self.end_offset

    def collapse(self, direction: str = "left") -> PropertySelection:
        offset = self.start_offset if direction == "left" else self.end_offset
        return replace(self, start_offset=offset, end_offset=offset, reverse=False)

    def with_surface(self, surface_id: str | None) -> PropertySelection:
        return replace(self, surface_id=surface_id)

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.type.value,
            "path": list(self.path),
            "startOffset": self.start_offset,
            "endOffset": self.end_offset,
        }
        if self.reverse:
            payload["reverse"] = True
        if self.surface_id is not None:
            payload["surfaceId"] = self.surface_id
        return payload

    def __str__(self) -> str:
        return f"PropertySelection({'.'.join(self.path)}, {self.start_offset}, {self.end_offset})"


@dataclass(slots=True, frozen=True)
class ContainerSelection(Selection):
    """Range from ``start_path/start_offset`` to ``end_path/end_offset`` in a container.

    Paths are either text property paths or ``[node_id]`` for non-text nodes,
    where offset 0 is before and 1 after the node.
    """

    container_id: str
    start_path: tuple[str, ...]
    start_offset: int
    end_path: tuple[str, ...] | None = None
    end_offset: int | None = None
    reverse: bool = False
    surface_id: str | None = None

    def __post_init__(self) -> None:
        if not self.start_path:
            raise InvalidSelectionError(message="Container selections require a start path")
        end_path = self.start_path if self.end_path is None else self.end_path
        end_offset = self.start_offset if self.end_offset is None else self.end_offset
        start_path = tuple(self.start_path)
        end_path = tuple(end_path)
        start_offset = int(self.start_offset)
        end_offset = int(end_offset)
        if start_path == end_path and end_offset < start_offset:
            start_offset, end_offset = end_offset, start_offset
        object.__setattr__(self, "start_path", start_path)
        object.__setattr__(self, "end_path", end_path)
        object.__setattr__(self, "start_offset", start_offset)
        object.__setattr__(self, "end_offset", end_offset)

    @property
    def type(self) -> SelectionType:
        return SelectionType.CONTAINER

    @property
    def start(self) -> Coordinate:
        return Coordinate(self.start_path, self.start_offset)

    @property
    def end(self) -> Coordinate:
        return Coordinate(self.end_path, self.end_offset)  # type: ignore[arg-type]

    def is_collapsed(self) -> bool:
        return self.start_path == self.end_path and self.start_offset == self.end_offset

    def is_single_node(self) -> bool:
        return self.start_path[0] == self.end_path[0]  # type: ignore[index]

    def collapse(self, direction: str = "left") -> ContainerSelection:
        coor = self.start if direction == "left" else self.end
        return replace(
            self,
            start_path=coor.path,
            start_offset=coor.offset,
            end_path=coor.path,
            end_offset=coor.offset,
            reverse=False,
        )

    def with_surface(self, surface_id: str | None) -> ContainerSelection:
        return replace(self, surface_id=surface_id)

    def normalize(self, doc: Document) -> ContainerSelection:
        """Return the selection with its start before its end in ``doc``.

        A selection whose start lies after its end is flipped and its
        ``reverse`` flag toggled, so the anchor is not lost.
        """

        start_pos, end_pos = self._positions(doc)
        if end_pos >= start_pos:
            return self
        return replace(
            self,
            start_path=self.end_path,
            start_offset=self.end_offset,
            end_path=self.start_path,
            end_offset=self.start_offset,
            reverse=not self.reverse,
        )

    def get_node_ids(self, doc: Document) -> list[str]:
        """Return ids of every node touched by the selection, in order."""

        start_pos, end_pos = self._positions(doc)
        if end_pos < start_pos:
            start_pos, end_pos = end_pos, start_pos
        return doc.get(self.container_id).nodes[start_pos : end_pos + 1]

    def _positions(self, doc: Document) -> tuple[int, int]:
        container = doc.get(self.container_id)
        start_pos = container.get_position(self.start.node_id)
        end_pos = container.get_position(self.end.node_id)
        if start_pos < 0 or end_pos < 0:
            raise InvalidSelectionError(
                message="Selection does not resolve in its container",
                details={"container_id": self.container_id},
            )
        return start_pos, end_pos

    def get_fragments(self, doc: Document) -> list[PropertyFragment | NodeFragment]:
        """Split the selection into per-node fragments.

        Text nodes yield :class:`PropertyFragment` (possibly partial); other
        nodes yield :class:`NodeFragment` when fully covered.
        """

        ordered = self.normalize(doc)
        node_ids = ordered.get_node_ids(doc)
        fragments: list[PropertyFragment | NodeFragment] = []
        last_index = len(node_ids) - 1
        for index, node_id in enumerate(node_ids):
            node = doc.get(node_id)
            is_first = index == 0
            is_last = index == last_index
            if node.is_text():
                length = len(node.get_text())
                start = _text_offset(ordered.start, length) if is_first else 0
                end = _text_offset(ordered.end, length) if is_last else length
                fragments.append(
                    PropertyFragment(
                        tuple(node.get_text_path()), start, end, is_first=is_first, is_last=is_last
                    )
                )
                continue
            if is_first and ordered.start.offset > 0:
                continue
            if is_last and ordered.end.offset == 0:
                continue
            fragments.append(NodeFragment(node_id, is_first=is_first, is_last=is_last))
        return fragments

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.type.value,
            "containerId": self.container_id,
            "startPath": list(self.start_path),
            "startOffset": self.start_offset,
            "endPath": list(self.end_path or ()),
            "endOffset": self.end_offset,
        }
        if self.reverse:
            payload["reverse"] = True
        if self.surface_id is not None:
            payload["surfaceId"] = self.surface_id
        return payload

    def __str__(self) -> str:
        return (
            f"ContainerSelection({self.container_id}, {'.'.join(self.start_path)}:{self.start_offset}"
            f" -> {'.'.join(self.end_path or ())}:{self.end_offset})"
        )


@dataclass(slots=True, frozen=True)
class NodeSelection(Selection):
    """Whole-node selection inside ``container_id``."""

    container_id: str
    node_id: str
    surface_id: str | None = None

    @property
    def type(self) -> SelectionType:
        return SelectionType.NODE

    @property
    def start(self) -> Coordinate:
        return Coordinate((self.node_id,), 0)

    @property
    def end(self) -> Coordinate:
        return Coordinate((self.node_id,), 1)

    def to_container_selection(self) -> ContainerSelection:
        return ContainerSelection(
            self.container_id,
            (self.node_id,),
            0,
            (self.node_id,),
            1,
            surface_id=self.surface_id,
        )

    def with_surface(self, surface_id: str | None) -> NodeSelection:
        return replace(self, surface_id=surface_id)

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": self.type.value,
            "containerId": self.container_id,
            "nodeId": self.node_id,
        }
        if self.surface_id is not None:
            payload["surfaceId"] = self.surface_id
        return payload


def _text_offset(coor: Coordinate, length: int) -> int:
    if coor.is_property_coordinate():
        return max(0, min(coor.offset, length))
    return 0 if coor.offset == 0 else length


def selection_from_json(data: Mapping[str, Any] | Selection | None) -> Selection:
    """Build a selection from its wire shape (validated) or pass one through."""

    if data is None:
        return NULL_SELECTION
    if isinstance(data, Selection):
        return data
    from .wire import normalize_selection_spec, validate_selection_spec

    spec = normalize_selection_spec(data)
    errors = validate_selection_spec(spec)
    if errors:
        raise InvalidSelectionError(
            message=f"Invalid selection spec: {errors[0]}",
            details={"errors": errors},
        )
    kind = spec.get("type", "null")
    surface_id = spec.get("surfaceId")
    if kind == SelectionType.NULL.value:
        return NULL_SELECTION
    if kind == SelectionType.PROPERTY.value:
        return PropertySelection(
            tuple(spec["path"]),
            spec.get("startOffset", 0),
            spec.get("endOffset"),
            reverse=bool(spec.get("reverse", False)),
            surface_id=surface_id,
        )
    if kind == SelectionType.CONTAINER.value:
        return ContainerSelection(
            spec["containerId"],
            tuple(spec["startPath"]),
            spec.get("startOffset", 0),
            _maybe_tuple(spec.get("endPath")),
            spec.get("endOffset"),
            reverse=bool(spec.get("reverse", False)),
            surface_id=surface_id,
        )
    return NodeSelection(spec["containerId"], spec["nodeId"], surface_id=surface_id)


def _maybe_tuple(value: Sequence[str] | None) -> tuple[str, ...] | None:
    return None if value is None else tuple(value)
