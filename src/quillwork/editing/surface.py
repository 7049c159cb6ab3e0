"""Headless editing surfaces.

A surface turns editing commands (type, delete, enter, paste...) into
transactions on a :class:`~quillwork.model.session.DocumentSession`. Each
command method runs one transaction and returns the recorded change (or
``None`` when nothing changed). The ``_``-prefixed hooks decide which
transform handles which selection kind.

* :class:`Surface` treats every text property independently, like a form:
  Enter inserts a soft break and paste only inserts plain text.
* :class:`TextPropertyEditor` is a surface bound to one text property.
* :class:`ContainerEditor` edits the node list of a container.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from ..model.clipboard import ClipboardImporter
from ..model.document import Document
from ..model.selection import ContainerSelection, PropertySelection, Selection
from ..model.session import DocumentChange, DocumentSession
from ..model.transaction import Transaction, Transformation
from ..model.transform import (
    break_node,
    copy_selection,
    delete_selection,
    insert_node,
    insert_text,
    paste,
    switch_text_type,
)
from ..utils.ids import uuid

LOGGER = logging.getLogger(__name__)

__all__ = ["Surface", "TextPropertyEditor", "ContainerEditor"]

SOFT_BREAK = "\n"


class Surface:
    """Editing surface whose text properties are edited independently."""

    def __init__(self, session: DocumentSession, surface_id: str | None = None) -> None:
        self.session = session
        self.surface_id = surface_id or uuid("surface")

    @property
    def document(self) -> Document:
        return self.session.document

    def get_id(self) -> str:
        return self.surface_id

    def is_container_editor(self) -> bool:
        return False

    def transaction(
        self,
        transformation: Transformation,
        *,
        args: Mapping[str, Any] | None = None,
        info: Mapping[str, Any] | None = None,
    ) -> DocumentChange | None:
        """Run ``transformation`` through the session on behalf of this surface.

        The surface id is recorded as the change's origin and stamped on the
        resulting selection.
        """

        def run(tx: Transaction, run_args: dict[str, Any]) -> dict[str, Any] | None:
            self._prepare_args(run_args)
            result = transformation(tx, run_args)
            if result is not None:
                selection = result.get("selection")
                if isinstance(selection, Selection) and not selection.is_null():
                    result["selection"] = selection.with_surface(self.surface_id)
            return result

        return self.session.transaction(run, args=args, info=info, surface_id=self.surface_id)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def get_selection(self) -> Selection:
        return self.session.get_selection()

    def set_selection(self, selection: Selection | Mapping[str, Any] | None) -> Selection:
        """Select ``selection`` and associate it with this surface."""

        selection = self.document.create_selection(selection)
        if not selection.is_null():
            selection = selection.with_surface(self.surface_id)
        return self.session.set_selection(selection)

    def select_all(self) -> Optional[Selection]:
        """Extend a property selection over its whole text."""

        selection = self.get_selection()
        if not selection.is_property_selection():
            return None
        text = self.document.get(selection.path)
        return self.set_selection(PropertySelection(selection.path, 0, len(text)))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def insert_text(self, text: str) -> DocumentChange | None:
        return self.transaction(self._insert_text, args={"text": text})

    def delete(self, direction: str | None = None) -> DocumentChange | None:
        return self.transaction(self._delete, args={"direction": direction})

    def break_node(self) -> DocumentChange | None:
        return self.transaction(self._break)

    def soft_break(self) -> DocumentChange | None:
        return self.transaction(self._soft_break)

    def paste(self, text: str | None = None, *, doc: Document | None = None) -> DocumentChange | None:
        return self.transaction(self._paste, args={"text": text, "doc": doc})

    def copy(self) -> Document | None:
        """Return a snippet document holding the selected content."""

        return copy_selection(self.document, {"selection": self.get_selection()})["doc"]

    # ------------------------------------------------------------------
    # Transform hooks
    # ------------------------------------------------------------------

    def _prepare_args(self, args: dict[str, Any]) -> None:
        """Add surface specific arguments before a transform runs."""

    def _insert_text(self, tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
        selection = args["selection"]
        if selection.is_property_selection() or selection.is_container_selection():
            return insert_text(tx, args)
        return None

    def _delete(self, tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
        return delete_selection(tx, args)

    def _break(self, tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
        # No block structure inside a plain property.
        return self._soft_break(tx, args)

    def _soft_break(self, tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
        args["text"] = SOFT_BREAK
        return self._insert_text(tx, args)

    def _paste(self, tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
        # Plain text only; annotations of a pasted snippet are not kept here.
        if args.get("text"):
            return self._insert_text(tx, args)
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(surface_id={self.surface_id!r})"


class TextPropertyEditor(Surface):
    """Surface editing the single text property at ``path``."""

    def __init__(self, session: DocumentSession, surface_id: str | None, path: Sequence[str]) -> None:
        super().__init__(session, surface_id)
        self.path = tuple(path)

    def select_all(self) -> Selection:
        text = self.document.get(self.path)
        return self.set_selection(PropertySelection(self.path, 0, len(text)))


class ContainerEditor(Surface):
    """Surface editing the nodes of container ``container_id``."""

    def __init__(
        self,
        session: DocumentSession,
        surface_id: str | None,
        container_id: str,
        *,
        importer: ClipboardImporter | None = None,
    ) -> None:
        super().__init__(session, surface_id)
        self.container_id = container_id
        self.importer = importer or ClipboardImporter(
            session.document.get_schema(),
            markdown=session.settings.markdown_paste,
        )

    def is_container_editor(self) -> bool:
        return True

    def get_container_id(self) -> str:
        return self.container_id

    def get_container(self) -> Any:
        return self.document.get(self.container_id)

    def is_empty(self) -> bool:
        return not self.get_container().nodes

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select_all(self) -> Optional[Selection]:
        nodes = self.get_container().nodes
        if not nodes:
            return None
        selection = ContainerSelection(self.container_id, (nodes[0],), 0, (nodes[-1],), 1)
        return self.set_selection(selection)

    def select_first(self) -> Optional[Selection]:
        """Put the caret at the start of the first node."""

        nodes = self.get_container().nodes
        if not nodes:
            LOGGER.info("Container %s is empty; nothing to select", self.container_id)
            return None
        node = self.document.get(nodes[0])
        if node.is_text():
            return self.set_selection(PropertySelection(tuple(node.get_text_path()), 0))
        return self.set_selection(ContainerSelection(self.container_id, (node.id,), 0, (node.id,), 1))

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def insert_node(self, node: Mapping[str, Any] | str) -> DocumentChange | None:
        return self.transaction(self._insert_node, args={"node": node})

    def switch_type(self, data: Mapping[str, Any]) -> DocumentChange | None:
        return self.transaction(self._switch_type, args={"data": dict(data)})

    def paste(self, text: str | None = None, *, doc: Document | None = None) -> DocumentChange | None:
        if doc is None and text:
            doc = self.importer.import_text(text)
        return self.transaction(self._paste, args={"text": text, "doc": doc})

    def create_text(self) -> DocumentChange | None:
        """Append an empty default text node and put the caret into it."""

        def create(tx: Transaction, args: dict[str, Any]) -> dict[str, Any]:
            text_type = tx.get_schema().get_default_text_type()
            node = tx.create({"id": uuid(text_type), "type": text_type, "content": ""})
            tx.get(self.container_id).show(node.id)
            args["selection"] = PropertySelection(tuple(node.get_text_path()), 0)
            return args

        return self.transaction(create)

    # ------------------------------------------------------------------
    # Transform hooks
    # ------------------------------------------------------------------

    def _prepare_args(self, args: dict[str, Any]) -> None:
        args["container_id"] = self.container_id

    def _delete(self, tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
        selection = args["selection"]
        if selection.is_node_selection():
            args["selection"] = selection.to_container_selection()
        return delete_selection(tx, args)

    def _break(self, tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
        selection = args["selection"]
        if selection.is_property_selection() or selection.is_container_selection():
            return break_node(tx, args)
        return None

    def _insert_node(self, tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
        selection = args["selection"]
        if selection.is_property_selection() or selection.is_container_selection():
            return insert_node(tx, args)
        return None

    def _switch_type(self, tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
        if args["selection"].is_property_selection():
            return switch_text_type(tx, args)
        return None

    def _paste(self, tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
        selection = args["selection"]
        if selection.is_property_selection() or selection.is_container_selection():
            return paste(tx, args)
        return None
