"""Tests for selection value types."""

from __future__ import annotations

import pytest

from quillwork.model.document import Document
from quillwork.model.errors import InvalidSelectionError
from quillwork.model.selection import (
    NULL_SELECTION,
    ContainerSelection,
    NodeFragment,
    NodeSelection,
    PropertyFragment,
    PropertySelection,
    SelectionType,
    selection_from_json,
)


def test_null_selection() -> None:
    assert NULL_SELECTION.is_null()
    assert NULL_SELECTION.is_collapsed()
    assert not NULL_SELECTION
    assert NULL_SELECTION.to_json() == {"type": "null"}
    assert NULL_SELECTION.surface_id is None


def test_property_selection_normalizes_reversed_offsets() -> None:
    sel = PropertySelection(("p1", "content"), 5, 2)

    assert (sel.start_offset, sel.end_offset) == (2, 5)
    assert not sel.is_collapsed()
    assert sel.collapse("right").start_offset == 5
    assert sel.type is SelectionType.PROPERTY


def test_property_selection_validation() -> None:
    with pytest.raises(InvalidSelectionError):
        PropertySelection(("p1",), 0)
    with pytest.raises(InvalidSelectionError):
        PropertySelection(("p1", "content"), -1)


def test_surface_id_is_carried_not_checked() -> None:
    sel = PropertySelection(("p1", "content"), 1, surface_id="no-such-surface")

    moved = sel.collapse("left").with_surface("other")

    assert sel.surface_id == "no-such-surface"
    assert moved.surface_id == "other"
    assert sel.to_json()["surfaceId"] == "no-such-surface"


def test_property_selection_wire_shape() -> None:
    sel = PropertySelection(("p1", "content"), 0, 5)

    assert sel.to_json() == {"type": "property", "path": ["p1", "content"], "startOffset": 0, "endOffset": 5}


def test_container_selection_fragments(doc: Document) -> None:
    sel = ContainerSelection("body", ("p1", "content"), 6, ("p3", "content"), 2)

    fragments = sel.get_fragments(doc)

    assert fragments == [
        PropertyFragment(("p1", "content"), 6, 11, is_first=True, is_last=False),
        PropertyFragment(("p2", "content"), 0, 16, is_first=False, is_last=False),
        PropertyFragment(("p3", "content"), 0, 2, is_first=False, is_last=True),
    ]
    assert sel.get_node_ids(doc) == ["p1", "p2", "p3"]


def test_backward_container_selection_is_normalized(doc: Document) -> None:
    backward = ContainerSelection("body", ("p3", "content"), 2, ("p1", "content"), 6)

    ordered = backward.normalize(doc)

    assert ordered.start_path == ("p1", "content")
    assert ordered.start_offset == 6
    assert ordered.end_path == ("p3", "content")
    assert ordered.end_offset == 2
    assert ordered.reverse is True
    assert backward.get_fragments(doc) == [
        PropertyFragment(("p1", "content"), 6, 11, is_first=True, is_last=False),
        PropertyFragment(("p2", "content"), 0, 16, is_first=False, is_last=False),
        PropertyFragment(("p3", "content"), 0, 2, is_first=False, is_last=True),
    ]
    forward = ContainerSelection("body", ("p1", "content"), 6, ("p3", "content"), 2)
    assert forward.normalize(doc) is forward


def test_container_selection_skips_uncovered_non_text_nodes(doc: Document) -> None:
    doc.create({"id": "img", "type": "image", "src": "a.png"})
    doc.get("body").show("img", 1)
    sel = ContainerSelection("body", ("img",), 1, ("p2", "content"), 3)

    fragments = sel.get_fragments(doc)

    assert [fragment.node_id for fragment in fragments] == ["p2"]

    full = ContainerSelection("body", ("img",), 0, ("img",), 1)
    assert full.get_fragments(doc) == [NodeFragment("img", is_first=True, is_last=True)]


def test_container_selection_unresolvable(doc: Document) -> None:
    sel = ContainerSelection("body", ("ghost", "content"), 0)

    with pytest.raises(InvalidSelectionError):
        sel.get_fragments(doc)


def test_node_selection_as_container_range() -> None:
    sel = NodeSelection("body", "img", surface_id="main")

    as_range = sel.to_container_selection()

    assert as_range.start_path == ("img",)
    assert (as_range.start_offset, as_range.end_offset) == (0, 1)
    assert as_range.surface_id == "main"


def test_selection_from_json_accepts_both_key_styles() -> None:
    camel = selection_from_json(
        {"type": "container", "containerId": "body", "startPath": ["p1", "content"], "startOffset": 1}
    )
    snake = selection_from_json(
        {"type": "container", "container_id": "body", "start_path": ["p1", "content"], "start_offset": 1}
    )

    assert camel == snake
    assert camel.is_collapsed()


def test_selection_from_json_round_trip() -> None:
    sel = ContainerSelection("body", ("p1", "content"), 1, ("p2", "content"), 4, surface_id="s")

    assert selection_from_json(sel.to_json()) == sel
    assert selection_from_json(None) is NULL_SELECTION
    assert selection_from_json(sel) is sel


@pytest.mark.parametrize(
    "spec",
    [
        {"type": "bogus"},
        {"type": "property", "path": ["p1"], "startOffset": 0},
        {"type": "container", "startPath": ["p1", "content"], "startOffset": 0},
        {"type": "node", "containerId": "body"},
        {"type": "property", "path": ["p1", "content"], "startOffset": -2},
    ],
)
def test_selection_from_json_rejects_malformed(spec) -> None:
    with pytest.raises(InvalidSelectionError):
        selection_from_json(spec)
