"""Transaction scope for atomic document mutations.

A transaction applies operations to its document immediately (so reads
inside the transaction see every earlier write) and journals them. Leaving
the scope normally commits; leaving it through an exception replays the
inverse of the journal so no partial state survives.

Example:
    with Transaction(doc, selection=sel) as tx:
        tx.update(["p1", "content"], {"insert": {"offset": 0, "value": "Hi "}})
    change_ops = tx.ops
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum, auto
from typing import TYPE_CHECKING, Any, Callable, Mapping, Protocol, Sequence

from ..utils.logging import document_logger
from .operations import Diff, ObjectOperation
from .selection import NULL_SELECTION, Selection

if TYPE_CHECKING:  # pragma: no cover
    from .document import Document
    from .nodes import Node
    from .schema import Schema

LOGGER = logging.getLogger(__name__)

__all__ = [
    "TransactionState",
    "TransactionListener",
    "Transaction",
    "TransactionError",
    "Transformation",
]

Transformation = Callable[["Transaction", dict[str, Any]], "dict[str, Any] | None"]


# -----------------------------------------------------------------------------
# Transaction State
# -----------------------------------------------------------------------------


class TransactionState(Enum):
    """State of a transaction."""

    PENDING = auto()  # Not started
    ACTIVE = auto()  # Ops being applied and journaled
    COMMITTED = auto()  # Ops kept
    ROLLED_BACK = auto()  # Ops reverted
    FAILED = auto()  # Rollback itself failed


class TransactionListener(Protocol):
    """Callback for transaction events."""

    def on_transaction_started(self, transaction_id: str) -> None:
        """Called when a transaction starts."""
        ...

    def on_transaction_committed(self, transaction_id: str, ops: Sequence[ObjectOperation]) -> None:
        """Called when a transaction commits."""
        ...

    def on_transaction_rolled_back(self, transaction_id: str, reason: str | None) -> None:
        """Called when a transaction rolls back."""
        ...


# -----------------------------------------------------------------------------
# Transaction
# -----------------------------------------------------------------------------


@dataclass
class Transaction:
    """One atomic batch of node and annotation mutations against a document.

    ``before`` and ``after`` hold the selection (and the surface it belongs
    to) at the start and end of the transaction, which is what undo/redo
    restores.
    """

    document: Document
    selection: Selection = NULL_SELECTION
    info: dict[str, Any] = field(default_factory=dict)
    listener: TransactionListener | None = None

    transaction_id: str = field(default_factory=lambda: f"tx-{uuid.uuid4().hex[:12]}")
    state: TransactionState = TransactionState.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    committed_at: datetime | None = None
    rolled_back_at: datetime | None = None

    ops: list[ObjectOperation] = field(default_factory=list)
    before: dict[str, Any] = field(default_factory=dict)
    after: dict[str, Any] = field(default_factory=dict)

    @property
    def _log(self) -> logging.LoggerAdapter:
        return document_logger(LOGGER, self.document.document_id)

    # ------------------------------------------------------------------
    # Transaction Lifecycle
    # ------------------------------------------------------------------

    def begin(self) -> "Transaction":
        """Begin the transaction, taking the document's writer lock.

        Raises:
            TransactionError: If already started or another transaction holds the document.
        """
        if self.state != TransactionState.PENDING:
            raise TransactionError(
                f"Cannot begin: transaction is {self.state.name}",
                transaction_id=self.transaction_id,
            )
        if not self.document._acquire_writer():
            raise TransactionError(
                "Another transaction is already open on this document",
                transaction_id=self.transaction_id,
            )

        self.state = TransactionState.ACTIVE
        self.ops.clear()
        self.document._attach_journal(self.ops)
        self.before.setdefault("selection", self.selection)
        self.before.setdefault("surface_id", self.selection.surface_id)

        if self.listener:
            try:
                self.listener.on_transaction_started(self.transaction_id)
            except Exception:
                self._log.debug("Listener failed on transaction start", exc_info=True)

        self._log.debug("Transaction %s started on document %s", self.transaction_id, self.document.document_id)
        return self

    def commit(self) -> bool:
        """Keep every applied op and release the document.

        Raises:
            TransactionError: If transaction not active.
        """
        if self.state != TransactionState.ACTIVE:
            raise TransactionError(
                f"Cannot commit: transaction is {self.state.name}",
                transaction_id=self.transaction_id,
            )
        self._release()
        self.state = TransactionState.COMMITTED
        self.committed_at = datetime.now(timezone.utc)
        self.after.setdefault("selection", self.selection)
        self.after.setdefault("surface_id", self.before.get("surface_id"))

        if self.listener:
            try:
                self.listener.on_transaction_committed(self.transaction_id, list(self.ops))
            except Exception:
                self._log.debug("Listener failed on commit", exc_info=True)

        self._log.debug("Transaction %s committed (%d ops)", self.transaction_id, len(self.ops))
        return True

    def rollback(self, reason: str | None = None) -> bool:
        """Revert every applied op in reverse order.

        Returns:
            True if rolled back, False when the transaction was not active.
        """
        if self.state != TransactionState.ACTIVE:
            self._log.debug(
                "Cannot rollback: transaction %s is %s",
                self.transaction_id,
                self.state.name,
            )
            return False

        self.document._attach_journal(None)
        try:
            for op in reversed(self.ops):
                self.document.apply_op(op.invert())
        except Exception:
            self._log.error("Transaction %s could not be rolled back", self.transaction_id, exc_info=True)
            self.state = TransactionState.FAILED
            self._release()
            raise

        reverted = len(self.ops)
        self.ops.clear()
        self._release()
        self.state = TransactionState.ROLLED_BACK
        self.rolled_back_at = datetime.now(timezone.utc)

        if self.listener:
            try:
                self.listener.on_transaction_rolled_back(self.transaction_id, reason)
            except Exception:
                self._log.debug("Listener failed on rollback", exc_info=True)

        self._log.info(
            "Transaction %s rolled back %d ops: %s",
            self.transaction_id,
            reverted,
            reason or "no reason provided",
        )
        return True

    def _release(self) -> None:
        self.document._attach_journal(None)
        self.document._release_writer()

    def __enter__(self) -> "Transaction":
        return self.begin()

    def __exit__(self, exc_type, exc, tb) -> bool:
        if self.state != TransactionState.ACTIVE:
            return False
        if exc is not None:
            self.rollback(reason=f"{exc_type.__name__}: {exc}")
            return False
        self.commit()
        return False

    def apply(self, transformation: Transformation, args: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run ``transformation(tx, args)`` and adopt the selection it returns."""

        args = dict(args or {})
        args.setdefault("selection", self.selection)
        result = transformation(self, args)
        if result is None:
            result = args
        selection = result.get("selection")
        if isinstance(selection, Selection):
            self.selection = selection
        return result

    # ------------------------------------------------------------------
    # Document API
    # ------------------------------------------------------------------

    def _require_active(self) -> None:
        if self.state != TransactionState.ACTIVE:
            raise TransactionError(
                f"Transaction is {self.state.name}",
                transaction_id=self.transaction_id,
            )

    def create(self, data: Mapping[str, Any] | Node) -> Node:
        self._require_active()
        return self.document.create(data)

    def get(self, id_or_path: Sequence[str] | str) -> Any:
        return self.document.get(id_or_path)

    def contains(self, node_id: str) -> bool:
        return self.document.contains(node_id)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.document

    def update(self, path: Sequence[str], diff: Mapping[str, Any] | Diff) -> ObjectOperation:
        self._require_active()
        return self.document.update(path, diff)

    def set(self, path: Sequence[str], value: Any) -> ObjectOperation:
        self._require_active()
        return self.document.set(path, value)

    def delete(self, node_id: str) -> None:
        self._require_active()
        self.document.delete(node_id)

    def get_index(self, name: str) -> Any:
        return self.document.get_index(name)

    def get_schema(self) -> Schema:
        return self.document.get_schema()

    def get_containers(self, node_id: str) -> list[Node]:
        return self.document.get_containers(node_id)

    def new_instance(self) -> Document:
        """Return an empty sibling document for building fragments."""
        return self.document.new_instance()

    def create_selection(self, spec: Mapping[str, Any] | Selection | None) -> Selection:
        return self.document.create_selection(spec)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self.state == TransactionState.ACTIVE

    @property
    def op_count(self) -> int:
        return len(self.ops)

    def affected_paths(self) -> set[tuple[str, ...]]:
        return {op.path for op in self.ops}


# -----------------------------------------------------------------------------
# Transaction Errors
# -----------------------------------------------------------------------------


class TransactionError(Exception):
    """Base error for transaction lifecycle misuse."""

    def __init__(
        self,
        message: str,
        *,
        transaction_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.transaction_id = transaction_id
