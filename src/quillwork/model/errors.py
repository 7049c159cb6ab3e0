"""Error types raised by the document model.

Structural errors (:class:`NotFoundError`, :class:`DuplicateIdError`,
:class:`OutOfRangeError`, :class:`SchemaError`) abort the enclosing
transaction. :class:`InvalidSelectionError` is the soft member of the family:
transforms log it and hand their arguments back untouched instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Sequence


# -----------------------------------------------------------------------------
# Error Code Constants
# -----------------------------------------------------------------------------

class ErrorCode:
    """Constants for error codes carried by document errors."""

    NOT_FOUND = "not_found"
    DUPLICATE_ID = "duplicate_id"
    OUT_OF_RANGE = "out_of_range"
    UNKNOWN_TYPE = "unknown_type"
    INVALID_NODE = "invalid_node"
    INVALID_SELECTION = "invalid_selection"
    INVALID_OPERATION = "invalid_operation"


# -----------------------------------------------------------------------------
# Base Error Class
# -----------------------------------------------------------------------------

@dataclass
class DocumentError(Exception):
    """Base exception class for all document model errors.

    Attributes:
        error_code: Machine-readable error identifier.
        message: Human-readable error description.
        details: Additional structured error information.
    """

    error_code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    severity: ClassVar[str] = "error"

    def __post_init__(self) -> None:
        Exception.__init__(self, self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for logging or caller feedback."""
        result: dict[str, Any] = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = dict(self.details)
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# -----------------------------------------------------------------------------
# Structural Errors
# -----------------------------------------------------------------------------

@dataclass
class NotFoundError(DocumentError, LookupError):
    """Raised when an id or property path does not resolve in a document."""

    error_code: str = field(default=ErrorCode.NOT_FOUND)
    message: str = field(default="Node not found")
    details: dict[str, Any] = field(default_factory=dict)

    path: Sequence[str] | str | None = field(default=None)

    @classmethod
    def for_path(cls, path: Sequence[str] | str) -> "NotFoundError":
        label = path if isinstance(path, str) else ".".join(str(part) for part in path)
        return cls(message=f"Nothing found at '{label}'", details={"path": label}, path=path)


@dataclass
class DuplicateIdError(DocumentError):
    """Raised when a node is created with an id already present."""

    error_code: str = field(default=ErrorCode.DUPLICATE_ID)
    message: str = field(default="Node id already exists")
    details: dict[str, Any] = field(default_factory=dict)

    node_id: str | None = field(default=None)

    def __post_init__(self) -> None:
        if self.node_id and "node_id" not in self.details:
            self.details["node_id"] = self.node_id
        super().__post_init__()


@dataclass
class OutOfRangeError(DocumentError, IndexError):
    """Raised when an update offset or length falls outside a property's bounds."""

    error_code: str = field(default=ErrorCode.OUT_OF_RANGE)
    message: str = field(default="Offset out of range")
    details: dict[str, Any] = field(default_factory=dict)

    offset: int | None = field(default=None)
    length: int | None = field(default=None)
    size: int | None = field(default=None)

    def __post_init__(self) -> None:
        for key in ("offset", "length", "size"):
            value = getattr(self, key)
            if value is not None:
                self.details.setdefault(key, value)
        super().__post_init__()


@dataclass
class SchemaError(DocumentError):
    """Raised when node data references an unknown type or lacks required fields."""

    error_code: str = field(default=ErrorCode.UNKNOWN_TYPE)
    message: str = field(default="Node type is not registered in the schema")
    details: dict[str, Any] = field(default_factory=dict)

    node_type: str | None = field(default=None)


@dataclass
class InvalidOperationError(DocumentError):
    """Raised when a diff payload is malformed or targets an unsupported value."""

    error_code: str = field(default=ErrorCode.INVALID_OPERATION)
    message: str = field(default="Unsupported operation")
    details: dict[str, Any] = field(default_factory=dict)


# -----------------------------------------------------------------------------
# Soft Errors
# -----------------------------------------------------------------------------

@dataclass
class InvalidSelectionError(DocumentError):
    """Null, malformed or unresolvable selection handed to an operation."""

    error_code: str = field(default=ErrorCode.INVALID_SELECTION)
    message: str = field(default="Selection is null or does not resolve")
    details: dict[str, Any] = field(default_factory=dict)

    severity: ClassVar[str] = "warning"


__all__ = [
    "ErrorCode",
    "DocumentError",
    "NotFoundError",
    "DuplicateIdError",
    "OutOfRangeError",
    "SchemaError",
    "InvalidOperationError",
    "InvalidSelectionError",
]
