"""Structural operations recorded by transactions.

Every mutation of a :class:`~quillwork.model.document.Document` is expressed
as an :class:`ObjectOperation`. Operations carry enough state to be inverted,
which is what rollback and undo/redo are built on.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Sequence

from .errors import InvalidOperationError, OutOfRangeError

__all__ = [
    "OpType",
    "Diff",
    "ObjectOperation",
    "apply_diff",
]


class OpType(str, Enum):
    """Kind of structural operation."""

    CREATE = "create"
    DELETE = "delete"
    UPDATE = "update"
    SET = "set"


@dataclass(slots=True)
class Diff:
    """Insert or delete against a string or list valued property.

    ``value`` holds the inserted value, or for deletions the removed value
    once the diff has been applied (needed for inversion).
    """

    kind: str
    offset: int
    value: Any = None
    length: int = 0

    def __post_init__(self) -> None:
        if self.kind not in ("insert", "delete"):
            raise InvalidOperationError(message=f"Unknown diff kind: {self.kind!r}")
        if self.kind == "insert" and self.value is not None:
            self.length = len(self.value)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | "Diff") -> "Diff":
        """Build a diff from ``{"insert": {...}}`` / ``{"delete": {...}}``."""

        if isinstance(payload, Diff):
            return payload
        if not isinstance(payload, Mapping) or len(payload) != 1:
            raise InvalidOperationError(
                message="Update payload must be a single 'insert' or 'delete' entry",
                details={"payload": repr(payload)},
            )
        kind, spec = next(iter(payload.items()))
        if not isinstance(spec, Mapping):
            raise InvalidOperationError(message=f"'{kind}' payload must be a mapping")
        try:
            offset = int(spec["offset"])
        except (KeyError, TypeError, ValueError) as exc:
            raise InvalidOperationError(message=f"'{kind}' payload requires an integer offset") from exc
        if kind == "insert":
            if "value" not in spec:
                raise InvalidOperationError(message="'insert' payload requires a value")
            return cls("insert", offset, value=spec["value"])
        if kind == "delete":
            try:
                length = int(spec["length"])
            except (KeyError, TypeError, ValueError) as exc:
                raise InvalidOperationError(message="'delete' payload requires an integer length") from exc
            return cls("delete", offset, length=length)
        raise InvalidOperationError(message=f"Unknown diff kind: {kind!r}")

    def invert(self) -> "Diff":
        if self.kind == "insert":
            return Diff("delete", self.offset, value=copy.deepcopy(self.value), length=self.length)
        return Diff("insert", self.offset, value=copy.deepcopy(self.value))

    def to_json(self) -> dict[str, Any]:
        if self.kind == "insert":
            return {"insert": {"offset": self.offset, "value": copy.deepcopy(self.value)}}
        return {"delete": {"offset": self.offset, "length": self.length}}


def apply_diff(current: Any, diff: Diff) -> Any:
    """Return ``current`` with ``diff`` applied; records removed values on deletes."""

    if isinstance(current, str):
        if diff.kind == "insert" and not isinstance(diff.value, str):
            raise InvalidOperationError(message="Only strings can be inserted into text")
    elif isinstance(current, list):
        pass
    else:
        raise InvalidOperationError(
            message="Updates require a string or list valued property",
            details={"value_type": type(current).__name__},
        )

    size = len(current)
    if diff.offset < 0 or diff.offset > size:
        raise OutOfRangeError(
            message=f"Offset {diff.offset} outside [0, {size}]",
            offset=diff.offset,
            size=size,
        )
    if diff.kind == "insert":
        if isinstance(current, str):
            return current[: diff.offset] + diff.value + current[diff.offset :]
        inserted = list(diff.value) if isinstance(diff.value, (list, tuple)) else [diff.value]
        diff.value = inserted
        diff.length = len(inserted)
        return current[: diff.offset] + inserted + current[diff.offset :]

    if diff.length < 0 or diff.offset + diff.length > size:
        raise OutOfRangeError(
            message=f"Deletion of {diff.length} at {diff.offset} exceeds length {size}",
            offset=diff.offset,
            length=diff.length,
            size=size,
        )
    end = diff.offset + diff.length
    diff.value = copy.deepcopy(current[diff.offset : end])
    return current[: diff.offset] + current[end:]


@dataclass(slots=True)
class ObjectOperation:
    """A single recorded mutation.

    Attributes:
        type: Operation kind.
        path: Node id (``create``/``delete``) or ``(node_id, property)``.
        val: Node data for create/delete, the new value for ``set``.
        original: Previous value for ``set``.
        diff: Structural edit for ``update``.
    """

    type: OpType
    path: tuple[str, ...]
    val: Any = None
    original: Any = None
    diff: Diff | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, data: Mapping[str, Any]) -> "ObjectOperation":
        return cls(OpType.CREATE, (data["id"],), val=copy.deepcopy(dict(data)))

    @classmethod
    def delete(cls, data: Mapping[str, Any]) -> "ObjectOperation":
        return cls(OpType.DELETE, (data["id"],), val=copy.deepcopy(dict(data)))

    @classmethod
    def update(cls, path: Sequence[str], diff: Diff) -> "ObjectOperation":
        return cls(OpType.UPDATE, tuple(path), diff=diff)

    @classmethod
    def set(cls, path: Sequence[str], value: Any, original: Any) -> "ObjectOperation":
        return cls(OpType.SET, tuple(path), val=copy.deepcopy(value), original=copy.deepcopy(original))

    @property
    def node_id(self) -> str:
        return self.path[0]

    def invert(self) -> "ObjectOperation":
        if self.type is OpType.CREATE:
            return ObjectOperation(OpType.DELETE, self.path, val=copy.deepcopy(self.val))
        if self.type is OpType.DELETE:
            return ObjectOperation(OpType.CREATE, self.path, val=copy.deepcopy(self.val))
        if self.type is OpType.SET:
            return ObjectOperation(
                OpType.SET, self.path, val=copy.deepcopy(self.original), original=copy.deepcopy(self.val)
            )
        assert self.diff is not None
        return ObjectOperation(OpType.UPDATE, self.path, diff=self.diff.invert())

    def to_json(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"type": self.type.value, "path": list(self.path)}
        if self.type in (OpType.CREATE, OpType.DELETE):
            payload["val"] = copy.deepcopy(self.val)
        elif self.type is OpType.SET:
            payload["val"] = copy.deepcopy(self.val)
            payload["original"] = copy.deepcopy(self.original)
        elif self.diff is not None:
            payload["diff"] = self.diff.to_json()
        return payload

    def __str__(self) -> str:
        return f"{self.type.value}:{'.'.join(self.path)}"
