"""Tests for the document transforms."""

from __future__ import annotations

import logging

import pytest

from quillwork.model.document import Document
from quillwork.model.errors import NotFoundError, SchemaError
from quillwork.model.selection import NULL_SELECTION, ContainerSelection, NodeSelection
from quillwork.model.transform import (
    break_node,
    copy_annotations,
    copy_node,
    copy_selection,
    create_annotation,
    delete_node,
    delete_selection,
    insert_node,
    insert_text,
    switch_text_type,
)


def _text(doc: Document, node_id: str) -> str:
    return doc.get([node_id, "content"])


def _body(doc: Document) -> list[str]:
    return doc.get(["body", "nodes"])


def _add_image(doc: Document, node_id: str = "img", position: int | None = None) -> None:
    doc.create({"id": node_id, "type": "image", "src": f"{node_id}.png"})
    if position is not None:
        doc.get("body").show(node_id, position)


# ---------------------------------------------------------------------------
# insert_text
# ---------------------------------------------------------------------------


def test_insert_text_at_caret(doc: Document, apply, sel) -> None:
    _, result = apply(doc, insert_text, sel.caret("p2", 6), text=" new")

    assert _text(doc, "p2") == "Second new paragraph"
    assert result["selection"] == sel.caret("p2", 10)


def test_insert_text_replaces_range(doc: Document, apply, sel) -> None:
    _, result = apply(doc, insert_text, sel.text_range("p1", 0, 5), text="Hi")

    assert _text(doc, "p1") == "Hi world"
    assert "s1" not in doc
    assert result["selection"] == sel.caret("p1", 2)


def test_insert_text_at_annotation_end_extends_it(doc: Document, apply, sel) -> None:
    apply(doc, insert_text, sel.caret("p1", 5), text="!")

    assert _text(doc, "p1") == "Hello! world"
    assert (doc.get("s1").start_offset, doc.get("s1").end_offset) == (0, 6)


def test_insert_text_after_block_node(doc: Document, apply) -> None:
    _add_image(doc, position=1)
    selection = ContainerSelection("body", ("img",), 1)

    _, result = apply(doc, insert_text, selection, text="caption")

    new_id = _body(doc)[2]
    assert _body(doc) == ["p1", "img", new_id, "p2", "p3"]
    assert _text(doc, new_id) == "caption"
    assert result["selection"].path == (new_id, "content")
    assert result["selection"].start_offset == 7


def test_insert_text_without_selection_warns(doc: Document, apply, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        tx, result = apply(doc, insert_text, NULL_SELECTION, text="x")

    assert tx.ops == []
    assert result["text"] == "x"
    assert "without selection" in caplog.text


def test_insert_text_ignores_node_selection(doc: Document, apply) -> None:
    _add_image(doc, position=0)

    tx, result = apply(doc, insert_text, NodeSelection("body", "img"), text="x")

    assert result is None
    assert tx.ops == []


# ---------------------------------------------------------------------------
# delete_selection
# ---------------------------------------------------------------------------


def test_delete_property_range(doc: Document, apply, sel) -> None:
    _, result = apply(doc, delete_selection, sel.text_range("p2", 0, 7))

    assert _text(doc, "p2") == "paragraph"
    assert result["selection"] == sel.caret("p2", 0)


def test_delete_container_range_merges_ends(doc: Document, apply, sel) -> None:
    _, result = apply(doc, delete_selection, sel.container_range("p1", 6, "p3", 2))

    assert _body(doc) == ["p1"]
    assert _text(doc, "p1") == "Hello ird"
    assert "p2" not in doc and "p3" not in doc
    assert doc.get("s1").end_offset == 5
    assert result["selection"] == sel.caret("p1", 6)
    assert result["container_id"] == "body"


def test_delete_container_range_moves_annotations_of_merged_node(doc: Document, apply, sel) -> None:
    doc.create({"id": "e1", "type": "emphasis", "path": ["p3", "content"], "start_offset": 2, "end_offset": 5})

    apply(doc, delete_selection, sel.container_range("p2", 6, "p3", 1))

    anno = doc.get("e1")
    assert _text(doc, "p2") == "Secondhird"
    assert anno.path == ["p2", "content"]
    assert (anno.start_offset, anno.end_offset) == (7, 10)


def test_delete_container_range_of_only_blocks_leaves_empty_text(doc: Document, apply) -> None:
    _add_image(doc, "img1")
    _add_image(doc, "img2")
    doc.create({"id": "gallery", "type": "container", "nodes": ["img1", "img2"]})
    selection = ContainerSelection("gallery", ("img1",), 0, ("img2",), 1)

    _, result = apply(doc, delete_selection, selection)

    [remaining] = doc.get(["gallery", "nodes"])
    assert doc.get(remaining).type == "paragraph"
    assert _text(doc, remaining) == ""
    assert result["selection"].path == (remaining, "content")


def test_delete_character(doc: Document, apply, sel) -> None:
    _, result = apply(doc, delete_selection, sel.caret("p1", 3), direction="left")

    assert _text(doc, "p1") == "Helo world"
    assert result["selection"] == sel.caret("p1", 2)
    assert doc.get("s1").end_offset == 4


@pytest.mark.parametrize(
    ("node_id", "offset", "direction"),
    [("p2", 0, "left"), ("p1", 11, "right")],
)
def test_delete_at_boundary_merges_neighbours(doc: Document, apply, sel, node_id, offset, direction) -> None:
    _, result = apply(doc, delete_selection, sel.caret(node_id, offset), direction=direction, container_id="body")

    assert _body(doc) == ["p1", "p3"]
    assert _text(doc, "p1") == "Hello worldSecond paragraph"
    assert result["selection"] == sel.caret("p1", 11)


def test_delete_at_boundary_without_container_is_noop(doc: Document, apply, sel) -> None:
    tx, _ = apply(doc, delete_selection, sel.caret("p2", 0), direction="left")

    assert tx.ops == []


def test_collapsed_delete_needs_direction(doc: Document, apply, sel) -> None:
    tx, result = apply(doc, delete_selection, sel.caret("p1", 3))

    assert tx.ops == []
    assert result["selection"] == sel.caret("p1", 3)


def test_delete_block_node_next_to_caret(doc: Document, apply) -> None:
    _add_image(doc, position=1)
    selection = ContainerSelection("body", ("img",), 1)

    _, result = apply(doc, delete_selection, selection, direction="left")

    assert "img" not in doc
    assert _body(doc) == ["p1", "p2", "p3"]
    assert result["selection"].path == ("p2", "content")
    assert result["selection"].start_offset == 0


# ---------------------------------------------------------------------------
# break_node
# ---------------------------------------------------------------------------


def test_break_splits_text_node(doc: Document, apply, sel) -> None:
    _, result = apply(doc, break_node, sel.caret("p2", 6), container_id="body")

    new_node = result["node"]
    assert _body(doc) == ["p1", "p2", new_node.id, "p3"]
    assert _text(doc, "p2") == "Second"
    assert new_node.get_text() == " paragraph"
    assert new_node.type == "paragraph"
    assert result["selection"].path == (new_node.id, "content")
    assert result["selection"].start_offset == 0


def test_break_inside_annotation_splits_it(doc: Document, apply, sel) -> None:
    _, result = apply(doc, break_node, sel.caret("p1", 2), container_id="body")

    new_id = result["node"].id
    assert (doc.get("s1").start_offset, doc.get("s1").end_offset) == (0, 2)
    [right] = doc.get_index("annotations").get([new_id, "content"])
    assert right.type == "strong"
    assert (right.start_offset, right.end_offset) == (0, 3)


def test_break_at_heading_end_creates_default_text(doc: Document, apply, sel) -> None:
    doc.create({"id": "h1", "type": "heading", "level": 2, "content": "Title"})
    doc.get("body").show("h1", 0)

    _, result = apply(doc, break_node, sel.caret("h1", 5), container_id="body")

    assert result["node"].type == "paragraph"
    assert _text(doc, "h1") == "Title"


def test_break_inside_heading_keeps_type(doc: Document, apply, sel) -> None:
    doc.create({"id": "h1", "type": "heading", "level": 2, "content": "Title"})
    doc.get("body").show("h1", 0)

    _, result = apply(doc, break_node, sel.caret("h1", 2), container_id="body")

    assert result["node"].type == "heading"
    assert result["node"].get("level") == 2
    assert result["node"].get_text() == "tle"


def test_break_after_block_node(doc: Document, apply) -> None:
    _add_image(doc, position=0)

    _, result = apply(doc, break_node, ContainerSelection("body", ("img",), 0))

    assert _body(doc)[:2] == ["img", result["node"].id]
    assert result["node"].get_text() == ""


def test_break_requires_container(doc: Document, apply, sel) -> None:
    with pytest.raises(NotFoundError):
        apply(doc, break_node, sel.caret("p1", 2))

    assert _text(doc, "p1") == "Hello world"


def test_break_node_outside_container(doc: Document, apply, sel) -> None:
    doc.create({"id": "loose", "type": "paragraph", "content": "abc"})

    with pytest.raises(NotFoundError):
        apply(doc, break_node, sel.caret("loose", 1), container_id="body")

    assert _text(doc, "loose") == "abc"


# ---------------------------------------------------------------------------
# insert_node
# ---------------------------------------------------------------------------

IMAGE = {"id": "img", "type": "image", "src": "a.png"}


def test_insert_node_in_middle_breaks_text(doc: Document, apply, sel) -> None:
    _, result = apply(doc, insert_node, sel.caret("p1", 5), node=IMAGE, container_id="body")

    body = _body(doc)
    assert body[:2] == ["p1", "img"]
    assert len(body) == 5
    assert _text(doc, "p1") == "Hello"
    assert _text(doc, body[2]) == " world"
    assert result["selection"] == ContainerSelection("body", ("img",), 0, ("img",), 1)


@pytest.mark.parametrize(
    ("node_id", "offset", "expected"),
    [
        ("p2", 0, ["p1", "img", "p2", "p3"]),
        ("p3", 5, ["p1", "p2", "p3", "img"]),
    ],
)
def test_insert_node_at_text_edges(doc: Document, apply, sel, node_id, offset, expected) -> None:
    apply(doc, insert_node, sel.caret(node_id, offset), node=IMAGE, container_id="body")

    assert _body(doc) == expected


def test_insert_node_replaces_empty_text(doc: Document, apply, sel) -> None:
    doc.create({"id": "p4", "type": "paragraph", "content": ""})
    doc.get("body").show("p4")

    apply(doc, insert_node, sel.caret("p4", 0), node=IMAGE, container_id="body")

    assert _body(doc) == ["p1", "p2", "p3", "img"]
    assert "p4" not in doc


def test_insert_existing_node_by_id(doc: Document, apply, sel) -> None:
    _add_image(doc)

    _, result = apply(doc, insert_node, sel.caret("p3", 5), node="img", container_id="body")

    assert _body(doc)[-1] == "img"
    assert result["node"].id == "img"


# ---------------------------------------------------------------------------
# switch_text_type
# ---------------------------------------------------------------------------


def test_switch_text_type(doc: Document, apply, sel) -> None:
    _, result = apply(
        doc,
        switch_text_type,
        sel.caret("p1", 2),
        data={"type": "heading", "level": 2},
        container_id="body",
    )

    heading = result["node"]
    assert "p1" not in doc
    assert _body(doc)[0] == heading.id
    assert heading.type == "heading"
    assert heading.get("level") == 2
    assert heading.get_text() == "Hello world"
    assert doc.get("s1").path == [heading.id, "content"]
    assert result["selection"] == sel.caret(heading.id, 2)


def test_switch_to_non_text_type_fails(doc: Document, apply, sel) -> None:
    with pytest.raises(SchemaError):
        apply(doc, switch_text_type, sel.caret("p1", 0), data={"type": "image"}, container_id="body")

    assert "p1" in doc


def test_switch_ignores_container_selection(doc: Document, apply, sel) -> None:
    _, result = apply(doc, switch_text_type, sel.container_range("p1", 0, "p1", 0), data={"type": "heading"})

    assert result is None


# ---------------------------------------------------------------------------
# create_annotation
# ---------------------------------------------------------------------------


def test_create_annotation(doc: Document, apply, sel) -> None:
    _, result = apply(doc, create_annotation, sel.text_range("p2", 0, 6), node={"type": "emphasis"})

    anno = result["result"]
    assert anno.path == ["p2", "content"]
    assert (anno.start_offset, anno.end_offset) == (0, 6)
    assert doc.get_index("annotations").get(["p2", "content"]) == [anno]


def test_create_annotation_on_collapsed_selection(doc: Document, apply, sel) -> None:
    tx, _ = apply(doc, create_annotation, sel.caret("p2", 3), node={"type": "emphasis"})

    assert tx.ops == []


def test_create_annotation_rejects_non_annotation_type(doc: Document, apply, sel) -> None:
    with pytest.raises(SchemaError):
        apply(doc, create_annotation, sel.text_range("p2", 0, 6), node={"type": "paragraph"})


# ---------------------------------------------------------------------------
# delete_node / copy_node
# ---------------------------------------------------------------------------


def _add_figure(doc: Document) -> None:
    _add_image(doc, "img1")
    doc.create({"id": "fig", "type": "figure", "children": ["img1"]})
    doc.get("body").show("fig")


def test_delete_node_is_recursive(doc: Document, apply) -> None:
    _add_figure(doc)

    apply(doc, delete_node, NULL_SELECTION, node_id="fig")

    assert "fig" not in doc and "img1" not in doc
    assert _body(doc) == ["p1", "p2", "p3"]


def test_delete_node_drops_annotations(doc: Document, apply) -> None:
    apply(doc, delete_node, NULL_SELECTION, node_id="p1")

    assert "s1" not in doc
    assert _body(doc) == ["p2", "p3"]


def test_copy_node_keeps_ids_in_fresh_document(doc: Document) -> None:
    target = doc.new_instance()

    copy_id = copy_node(doc, target, "p1")

    assert copy_id == "p1"
    assert target.get(["p1", "content"]) == "Hello world"


def test_copy_node_remaps_colliding_ids(doc: Document) -> None:
    _add_figure(doc)
    memo: dict[str, str] = {}

    copy_id = copy_node(doc, doc, "fig", memo)

    assert copy_id != "fig"
    assert copy_id.startswith("figure-")
    assert memo["img1"].startswith("image-")
    assert doc.get([copy_id, "children"]) == [memo["img1"]]


def test_copy_annotations_follow_copies(doc: Document) -> None:
    target = doc.new_instance()
    copy_node(doc, target, "p1")

    [anno_id] = copy_annotations(doc, target, {"p1": "p1"})

    assert anno_id == "s1"
    assert target.get("s1").path == ["p1", "content"]


# ---------------------------------------------------------------------------
# copy_selection
# ---------------------------------------------------------------------------


def test_copy_property_selection(doc: Document, sel) -> None:
    snippet = copy_selection(doc, {"selection": sel.text_range("p1", 3, 8)})["doc"]

    text_node = snippet.get(Document.TEXT_SNIPPET_ID)
    assert snippet.get([Document.SNIPPET_ID, "nodes"]) == [Document.TEXT_SNIPPET_ID]
    assert text_node.get_text() == "lo wo"
    [anno] = snippet.get_index("annotations").get(text_node.get_text_path())
    assert (anno.start_offset, anno.end_offset) == (0, 2)
    assert doc.get("s1").end_offset == 5


def test_copy_container_selection_clips_text(doc: Document, sel) -> None:
    snippet = copy_selection(doc, {"selection": sel.container_range("p1", 6, "p2", 6)})["doc"]

    assert snippet.get([Document.SNIPPET_ID, "nodes"]) == ["p1", "p2"]
    assert snippet.get(["p1", "content"]) == "world"
    assert snippet.get(["p2", "content"]) == "Second"
    assert "s1" not in snippet


def test_copy_node_selection(doc: Document) -> None:
    _add_figure(doc)

    snippet = copy_selection(doc, {"selection": NodeSelection("body", "fig")})["doc"]

    assert snippet.get([Document.SNIPPET_ID, "nodes"]) == ["fig"]
    assert snippet.get(["fig", "children"]) == ["img1"]


@pytest.mark.parametrize("selection", [NULL_SELECTION, None])
def test_copy_without_content(doc: Document, selection) -> None:
    assert copy_selection(doc, {"selection": selection})["doc"] is None


def test_copy_collapsed_selection(doc: Document, sel) -> None:
    assert copy_selection(doc, {"selection": sel.caret("p1", 2)})["doc"] is None
