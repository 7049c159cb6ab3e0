"""Document session: runs transactions and keeps undo/redo history."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

from ..events import DocumentChanged, EventBus, SelectionChanged, TransactionRolledBack
from ..services.settings import Settings
from ..utils.logging import document_logger
from .document import Document
from .operations import ObjectOperation
from .schema import default_schema
from .selection import NULL_SELECTION, Selection
from .transaction import Transaction, TransactionState, Transformation

LOGGER = logging.getLogger(__name__)

__all__ = ["DocumentChange", "DocumentSession"]


@dataclass(slots=True)
class DocumentChange:
    """Ops committed by one transaction plus the selections around them."""

    ops: list[ObjectOperation]
    before: dict[str, Any] = field(default_factory=dict)
    after: dict[str, Any] = field(default_factory=dict)
    info: dict[str, Any] = field(default_factory=dict)
    change_id: str = field(default_factory=lambda: f"change-{uuid.uuid4().hex[:12]}")
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def invert(self) -> "DocumentChange":
        """Return the change that reverts this one."""

        return DocumentChange(
            ops=[op.invert() for op in reversed(self.ops)],
            before=dict(self.after),
            after=dict(self.before),
            info=dict(self.info),
            change_id=self.change_id,
        )

    def is_affected(self, path: Sequence[str] | str) -> bool:
        """Tell whether any op touched ``path`` (a node id or property path)."""

        target = (path,) if isinstance(path, str) else tuple(path)
        for op in self.ops:
            if op.path[: len(target)] == target:
                return True
            if len(op.path) == 1 and target[:1] == op.path:
                return True
        return False


class DocumentSession:
    """Owns a document, its current selection and the change history.

    Every edit goes through :meth:`transaction`, which runs a transform
    inside a :class:`Transaction` and records the committed ops so they can
    be undone.
    """

    def __init__(
        self,
        document: Document,
        *,
        selection: Selection | Mapping[str, Any] | None = None,
        settings: Settings | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.document = document
        self.settings = settings or Settings()
        self.event_bus = event_bus or EventBus()
        self._log = document_logger(LOGGER, document.document_id)
        self._selection = document.create_selection(selection) if selection is not None else NULL_SELECTION
        self._done: list[DocumentChange] = []
        self._undone: list[DocumentChange] = []

    @classmethod
    def create(cls, settings: Settings | None = None, **kwargs: Any) -> "DocumentSession":
        """Start a session on an empty document built from ``settings``."""

        settings = settings or Settings()
        document = Document(default_schema(settings.default_text_type))
        return cls(document, settings=settings, **kwargs)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def get_selection(self) -> Selection:
        return self._selection

    def set_selection(self, selection: Selection | Mapping[str, Any] | None) -> Selection:
        """Replace the selection and announce it."""

        new_selection = self.document.create_selection(selection)
        previous = self._selection
        self._selection = new_selection
        if new_selection != previous:
            self.event_bus.publish(
                SelectionChanged(
                    document_id=self.document.document_id,
                    selection=new_selection,
                    previous=previous,
                )
            )
        return new_selection

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def transaction(
        self,
        transformation: Transformation,
        *,
        args: Mapping[str, Any] | None = None,
        info: Mapping[str, Any] | None = None,
        surface_id: str | None = None,
    ) -> DocumentChange | None:
        """Run ``transformation(tx, args)`` atomically against the document.

        Args:
            transformation: Callable receiving the transaction and an args
                dict holding at least the current ``selection``.
            args: Extra arguments merged into the args dict.
            info: Free-form metadata stored on the change.
            surface_id: Surface the edit originates from.

        Returns:
            The recorded change, or ``None`` when no ops were applied.

        Raises:
            DocumentError: Any structural error; the document is left as it
                was before the call.
        """

        tx = Transaction(self.document, selection=self._selection, info=dict(info or {}))
        if surface_id is not None:
            tx.before["surface_id"] = surface_id
        payload = dict(args or {})
        payload.setdefault("selection", self._selection)
        try:
            with tx:
                tx.apply(transformation, payload)
        except Exception as exc:
            if tx.state is TransactionState.ROLLED_BACK:
                self.event_bus.publish(
                    TransactionRolledBack(
                        document_id=self.document.document_id,
                        transaction_id=tx.transaction_id,
                        reason=str(exc),
                    )
                )
            raise

        if not tx.ops:
            self.set_selection(tx.selection)
            return None
        change = DocumentChange(ops=list(tx.ops), before=dict(tx.before), after=dict(tx.after), info=tx.info)
        self._record(change)
        self.set_selection(tx.selection)
        self._publish_change(change, "transaction")
        return change

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def can_undo(self) -> bool:
        return bool(self._done)

    def can_redo(self) -> bool:
        return bool(self._undone)

    def undo(self) -> DocumentChange | None:
        """Revert the most recent change; returns the applied inverse."""

        if not self._done:
            return None
        change = self._done.pop()
        inverse = change.invert()
        self._replay(inverse)
        self._undone.append(change)
        self._log.info("Undid change %s (%d ops)", change.change_id, len(change.ops))
        self._publish_change(inverse, "undo")
        return inverse

    def redo(self) -> DocumentChange | None:
        """Re-apply the most recently undone change."""

        if not self._undone:
            return None
        change = self._undone.pop()
        self._replay(change)
        self._done.append(change)
        self._log.info("Redid change %s (%d ops)", change.change_id, len(change.ops))
        self._publish_change(change, "redo")
        return change

    def clear_history(self) -> None:
        self._done.clear()
        self._undone.clear()

    def _record(self, change: DocumentChange) -> None:
        self._done.append(change)
        limit = max(0, int(self.settings.history_limit))
        while len(self._done) > limit:
            self._done.pop(0)
        self._undone.clear()

    def _replay(self, change: DocumentChange) -> None:
        with Transaction(self.document, selection=self._selection, info={"replay": change.change_id}):
            for op in change.ops:
                self.document.apply_op(op)
        selection = change.after.get("selection")
        self.set_selection(selection if isinstance(selection, Selection) else NULL_SELECTION)

    def _publish_change(self, change: DocumentChange, origin: str) -> None:
        self.event_bus.publish(
            DocumentChanged(document_id=self.document.document_id, change=change, origin=origin)
        )
