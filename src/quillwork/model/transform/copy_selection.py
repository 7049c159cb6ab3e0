"""Extract the selected content into a snippet document."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..annotation_helpers import copy_annotation_data
from ..selection import ContainerSelection, NodeSelection, PropertyFragment
from .copy_node import copy_annotations, copy_node

if TYPE_CHECKING:  # pragma: no cover
    from ..document import Document
    from ..selection import PropertySelection

LOGGER = logging.getLogger(__name__)


def copy_selection(doc: Document, args: dict[str, Any]) -> dict[str, Any]:
    """Set ``args["doc"]`` to a snippet holding the selected content.

    The snippet's :attr:`Document.SNIPPET_ID` container lists copies of the
    covered nodes with their text clipped to the selection. Annotations are
    clipped the same way. A property selection yields a single
    :attr:`Document.TEXT_SNIPPET_ID` text node. Null and collapsed selections
    yield ``None``.
    """

    args = dict(args)
    selection = args.get("selection")
    if selection is None or selection.is_null() or selection.is_collapsed():
        args["doc"] = None
        return args
    if isinstance(selection, NodeSelection):
        selection = selection.to_container_selection()
    if isinstance(selection, ContainerSelection):
        args["doc"] = _copy_container_selection(doc, selection)
    else:
        args["doc"] = _copy_property_selection(doc, selection)
    return args


def _copy_property_selection(doc: Document, selection: PropertySelection) -> Document:
    snippet = doc.new_instance()
    container = snippet.create({"type": "container", "id": doc.SNIPPET_ID, "nodes": []})
    start = selection.start_offset
    end = selection.end_offset
    text = doc.get(selection.path)
    node = snippet.create(
        {
            "id": doc.TEXT_SNIPPET_ID,
            "type": doc.get_schema().get_default_text_type(),
            "content": text[start:end],
        }
    )
    container.show(node.id)
    _copy_clipped_annotations(doc, snippet, selection.path, start, end, node.get_text_path())
    return snippet


def _copy_container_selection(doc: Document, selection: ContainerSelection) -> Document:
    snippet = doc.new_instance()
    container = snippet.create({"type": "container", "id": doc.SNIPPET_ID, "nodes": []})
    for fragment in selection.get_fragments(doc):
        node = doc.get(fragment.node_id)
        if isinstance(fragment, PropertyFragment):
            data = node.to_json()
            data["content"] = node.get_text()[fragment.start_offset : fragment.end_offset]
            copy = snippet.create(data)
            container.show(copy.id)
            _copy_clipped_annotations(
                doc,
                snippet,
                fragment.path,
                fragment.start_offset,
                fragment.end_offset,
                copy.get_text_path(),
            )
            continue
        memo: dict[str, str] = {}
        copy_id = copy_node(doc, snippet, node.id, memo)
        copy_annotations(doc, snippet, memo)
        container.show(copy_id)
    LOGGER.debug("Copied %d nodes into snippet", len(container.nodes))
    return snippet


def _copy_clipped_annotations(
    doc: Document,
    snippet: Document,
    path: Any,
    start: int,
    end: int,
    new_path: list[str],
) -> None:
    for anno in doc.get_index("annotations").get(list(path), start, end):
        anno_start = max(anno.start_offset, start) - start
        anno_end = min(anno.end_offset, end) - start
        if anno_start == anno_end and anno.start_offset != anno.end_offset:
            continue
        snippet.create(copy_annotation_data(anno, new_path, anno_start, anno_end))
