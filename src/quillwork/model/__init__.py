"""Document model: schema, nodes, selections, transactions and transforms."""

from .annotation_index import AnnotationIndex
from .clipboard import ClipboardImporter
from .document import Document
from .errors import (
    DocumentError,
    DuplicateIdError,
    ErrorCode,
    InvalidOperationError,
    InvalidSelectionError,
    NotFoundError,
    OutOfRangeError,
    SchemaError,
)
from .nodes import Node
from .operations import Diff, ObjectOperation, OpType
from .schema import NodeType, Schema, default_schema
from .selection import (
    NULL_SELECTION,
    ContainerSelection,
    Coordinate,
    NodeSelection,
    NullSelection,
    PropertySelection,
    Selection,
    SelectionType,
    selection_from_json,
)
from .session import DocumentChange, DocumentSession
from .transaction import Transaction, TransactionError, TransactionState

__all__ = [
    "AnnotationIndex",
    "ClipboardImporter",
    "ContainerSelection",
    "Coordinate",
    "Diff",
    "Document",
    "DocumentChange",
    "DocumentError",
    "DocumentSession",
    "DuplicateIdError",
    "ErrorCode",
    "InvalidOperationError",
    "InvalidSelectionError",
    "NULL_SELECTION",
    "Node",
    "NodeSelection",
    "NodeType",
    "NotFoundError",
    "NullSelection",
    "ObjectOperation",
    "OpType",
    "OutOfRangeError",
    "PropertySelection",
    "Schema",
    "SchemaError",
    "Selection",
    "SelectionType",
    "Transaction",
    "TransactionError",
    "TransactionState",
    "default_schema",
    "selection_from_json",
]
