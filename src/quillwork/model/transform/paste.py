"""Paste a snippet document or plain text at the selection.

Steps:

1. Without a snippet, plain text is turned into one (inside a container) or
   simply typed (inside a bare text property).
2. A non-collapsed selection is deleted first.
3. A leading text node of the snippet is merged into the text at the caret,
   annotations included.
4. Remaining nodes are copied into the container after the caret's node,
   breaking that node first when the caret is not at its end. Copies keep
   their ids unless the target already uses them.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from ...utils.ids import uuid
from ..annotation_helpers import copy_annotation_data, inserted_text
from ..errors import NotFoundError
from ..operations import Diff
from ..selection import ContainerSelection
from .break_node import break_node
from .copy_node import copy_annotations, copy_node
from .delete_selection import delete_selection
from .helpers import caret, report_invalid_selection, resolve_container_id
from .insert_text import insert_text

if TYPE_CHECKING:  # pragma: no cover
    from ..document import Document
    from ..transaction import Transaction

LOGGER = logging.getLogger(__name__)

__all__ = ["paste", "plain_text_to_document", "PARAGRAPH_SEPARATOR"]

PARAGRAPH_SEPARATOR = re.compile(r"\s*\n\s*\n")


def paste(tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
    selection = args.get("selection")
    if selection is None or selection.is_null():
        report_invalid_selection(LOGGER, "paste", selection)
        return args
    args = dict(args)
    if selection.is_node_selection():
        selection = args["selection"] = selection.to_container_selection()
    container_id = resolve_container_id(args)
    args["container_id"] = container_id

    snippet = args.get("doc")
    if snippet is None:
        if not container_id:
            return insert_text(tx, args)
        snippet = args["doc"] = plain_text_to_document(tx, args.get("text") or "")

    if not selection.is_collapsed():
        args["selection"] = delete_selection(tx, args)["selection"]

    node_ids = list(snippet.get(snippet.SNIPPET_ID).nodes)
    if not node_ids:
        return args
    first = snippet.get(node_ids[0])
    if first.is_text() and args["selection"].start.is_property_coordinate():
        args = _paste_annotated_text(tx, args, snippet, first.id)
        node_ids = node_ids[1:]
    if node_ids:
        if not container_id:
            LOGGER.warning("Dropping %d pasted block nodes outside a container", len(node_ids))
            return args
        args = _paste_document(tx, args, snippet, node_ids)
    return args


def plain_text_to_document(tx: Transaction | Document, text: str) -> Document:
    """Build a snippet with one default text node per paragraph of ``text``.

    Paragraphs are separated by blank lines. A single paragraph becomes the
    :attr:`~quillwork.model.document.Document.TEXT_SNIPPET_ID` node.
    """

    lines = PARAGRAPH_SEPARATOR.split(text)
    snippet = tx.new_instance()
    container = snippet.create({"type": "container", "id": snippet.SNIPPET_ID, "nodes": []})
    text_type = snippet.get_schema().get_default_text_type()
    if len(lines) == 1:
        node = snippet.create({"id": snippet.TEXT_SNIPPET_ID, "type": text_type, "content": text})
        container.show(node.id)
        return snippet
    for line in lines:
        node = snippet.create({"id": uuid(text_type), "type": text_type, "content": line})
        container.show(node.id)
    return snippet


def _paste_annotated_text(tx: Transaction, args: dict[str, Any], snippet: Document, node_id: str) -> dict[str, Any]:
    selection = args["selection"]
    start = selection.start
    source = snippet.get(node_id)
    text = source.get_text()
    if text:
        tx.update(start.path, Diff("insert", start.offset, value=text))
        inserted_text(tx, start, len(text))
    for anno in snippet.get_index("annotations").get(source.get_text_path()):
        data = copy_annotation_data(
            anno,
            start.path,
            anno.start_offset + start.offset,
            anno.end_offset + start.offset,
        )
        if tx.contains(data["id"]):
            data["id"] = uuid(anno.type)
        tx.create(data)
    args["selection"] = caret(start.path, start.offset + len(text), selection)
    return args


def _paste_document(tx: Transaction, args: dict[str, Any], snippet: Document, node_ids: list[str]) -> dict[str, Any]:
    selection = args["selection"]
    container = tx.get(args["container_id"])
    start = selection.start
    start_pos = container.get_position(start.node_id)
    if start_pos < 0:
        raise NotFoundError(
            message=f"Node '{start.node_id}' is not part of container '{container.id}'",
            path=[container.id, "nodes"],
        )
    if start.is_property_coordinate():
        if start.offset < len(tx.get(start.path)):
            break_node(tx, args)
        insert_pos = start_pos + 1
    else:
        insert_pos = start_pos + 1 if start.offset > 0 else start_pos

    memo: dict[str, str] = {}
    inserted: list[str] = []
    for node_id in node_ids:
        copy_id = copy_node(snippet, tx, node_id, memo)
        if copy_id in inserted:
            continue
        container.show(copy_id, insert_pos)
        insert_pos += 1
        inserted.append(copy_id)
    copy_annotations(snippet, tx, memo)
    LOGGER.debug("Pasted %d nodes into %s", len(inserted), container.id)

    args["selection"] = ContainerSelection(
        container.id,
        (inserted[0],),
        0,
        (inserted[-1],),
        1,
        surface_id=selection.surface_id,
    )
    return args
