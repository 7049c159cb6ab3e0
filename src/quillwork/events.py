"""Event bus used to announce document and selection changes.

The engine itself never consumes these events; they exist so a rendering or
collaboration layer can follow committed changes without polling.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Generic,
    TypeVar,
    TYPE_CHECKING,
)
from weakref import WeakMethod, ref

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from typing import DefaultDict

    from .model.selection import Selection
    from .model.session import DocumentChange

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for all events published on an :class:`EventBus`."""

    pass


# =============================================================================
# Document Events
# =============================================================================


@dataclass(slots=True)
class DocumentChanged(Event):
    """Emitted after a transaction, undo or redo changed a document.

    Attributes:
        document_id: Identifier of the changed document.
        change: The applied change (ops plus before/after selection).
        origin: ``"transaction"``, ``"undo"`` or ``"redo"``.
    """

    document_id: str
    change: DocumentChange
    origin: str = "transaction"


@dataclass(slots=True)
class SelectionChanged(Event):
    """Emitted when a session's selection is replaced.

    Attributes:
        document_id: Identifier of the document the selection addresses.
        selection: The new selection.
        previous: The selection that was replaced.
    """

    document_id: str
    selection: Selection
    previous: Selection


@dataclass(slots=True)
class TransactionRolledBack(Event):
    """Emitted when a transaction was reverted after a structural error.

    Attributes:
        document_id: Identifier of the document the transaction targeted.
        transaction_id: Identifier of the reverted transaction.
        reason: Description of the error that caused the rollback.
    """

    document_id: str
    transaction_id: str
    reason: str


_QUIET_EVENT_TYPES: set[type] = {SelectionChanged}


class EventBus(Generic[E]):
    """A typed publish-subscribe event bus.

    Example::

        bus = EventBus()
        bus.subscribe(DocumentChanged, on_change)
        bus.publish(DocumentChanged(document_id="doc", change=change))

    Handlers are stored as weak references where possible (bound methods).
    The bus is not thread-safe; publish from the thread that owns the
    document session.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: DefaultDict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Register ``handler`` for events of exactly ``event_type``."""
        handler_ref = _HandlerRef.create(handler)
        self._handlers[event_type].append(handler_ref)
        logger.debug(
            "Subscribed handler %s to event type %s",
            _handler_name(handler),
            event_type.__name__,
        )

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Remove the first registration of ``handler``; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if handlers is None:
            return

        for i, handler_ref in enumerate(handlers):
            if handler_ref.matches(handler):
                handlers.pop(i)
                logger.debug(
                    "Unsubscribed handler %s from event type %s",
                    _handler_name(handler),
                    event_type.__name__,
                )
                return

    def publish(self, event: E) -> None:
        """Invoke every handler for ``event`` in registration order.

        A handler raising an exception is logged; the remaining handlers
        still run.
        """
        event_type = type(event)
        handlers = self._handlers.get(event_type)
        is_quiet = event_type in _QUIET_EVENT_TYPES

        if handlers is None:
            if not is_quiet:
                logger.debug("No handlers for event type %s", event_type.__name__)
            return

        if not is_quiet:
            logger.debug(
                "Publishing %s to %d handler(s)",
                event_type.__name__,
                len(handlers),
            )

        dead_indices: list[int] = []

        for i, handler_ref in enumerate(list(handlers)):
            handler = handler_ref.resolve()
            if handler is None:
                dead_indices.append(i)
                continue

            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s raised exception for event %s",
                    _handler_name(handler),
                    event_type.__name__,
                )

        for i in reversed(dead_indices):
            handlers.pop(i)

    def clear(self) -> None:
        self._handlers.clear()

    def handler_count(self, event_type: type[E] | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())


class _HandlerRef:
    """Weak reference for bound methods, strong reference for plain callables."""

    __slots__ = ("_ref", "_is_weak")

    def __init__(self, handler_ref: WeakMethod | ref | Handler, is_weak: bool) -> None:
        self._ref = handler_ref
        self._is_weak = is_weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
            try:
                return cls(WeakMethod(handler), is_weak=True)
            except TypeError:
                pass
        return cls(handler, is_weak=False)

    def resolve(self) -> Handler | None:
        if not self._is_weak:
            return self._ref  # type: ignore[return-value]
        return self._ref()  # type: ignore[operator]

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        if resolved is None:
            return False
        return resolved == handler


def _handler_name(handler: Any) -> str:
    if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
        cls_name = type(handler.__self__).__name__
        return f"{cls_name}.{handler.__func__.__name__}"
    if hasattr(handler, "__name__"):
        return handler.__name__
    return repr(handler)


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "DocumentChanged",
    "SelectionChanged",
    "TransactionRolledBack",
]
