"""Tests for the node arena."""

from __future__ import annotations

import pytest

from quillwork.model.document import Document
from quillwork.model.errors import DuplicateIdError, NotFoundError, OutOfRangeError, SchemaError


def test_get_resolves_nodes_and_properties(doc: Document) -> None:
    assert doc.get("p1").type == "paragraph"
    assert doc.get(["p1"]).id == "p1"
    assert doc.get(["p1", "content"]) == "Hello world"


@pytest.mark.parametrize("path", ["missing", ["missing", "content"], ["p1", "missing"], []])
def test_get_raises_not_found(doc: Document, path) -> None:
    with pytest.raises(NotFoundError):
        doc.get(path)


def test_create_fills_defaults_and_mints_ids(doc: Document) -> None:
    node = doc.create({"type": "heading"})

    assert node.id.startswith("heading-")
    assert node.get("content") == ""
    assert node.get("level") == 1
    assert doc.contains(node.id)


def test_create_rejects_duplicates(doc: Document) -> None:
    with pytest.raises(DuplicateIdError) as excinfo:
        doc.create({"id": "p1", "type": "paragraph"})

    assert excinfo.value.details["node_id"] == "p1"
    assert excinfo.value.to_dict()["error"] == "duplicate_id"


def test_create_rejects_unknown_types(doc: Document) -> None:
    with pytest.raises(SchemaError):
        doc.create({"id": "x", "type": "widget"})


def test_create_rejects_missing_required_property(doc: Document) -> None:
    with pytest.raises(SchemaError):
        doc.create({"id": "a", "type": "strong", "start_offset": 0, "end_offset": 1})


def test_annotation_range_is_checked(doc: Document) -> None:
    with pytest.raises(OutOfRangeError):
        doc.create({"type": "strong", "path": ["p3", "content"], "start_offset": 0, "end_offset": 50})
    with pytest.raises(NotFoundError):
        doc.create({"type": "strong", "path": ["nope", "content"], "start_offset": 0, "end_offset": 1})


def test_update_text_and_lists(doc: Document) -> None:
    doc.update(["p3", "content"], {"insert": {"offset": 5, "value": "!"}})
    doc.update(["body", "nodes"], {"delete": {"offset": 0, "length": 1}})

    assert doc.get(["p3", "content"]) == "Third!"
    assert doc.get(["body", "nodes"]) == ["p2", "p3"]


def test_update_out_of_range(doc: Document) -> None:
    with pytest.raises(OutOfRangeError):
        doc.update(["p3", "content"], {"insert": {"offset": 99, "value": "!"}})
    with pytest.raises(OutOfRangeError):
        doc.update(["p3", "content"], {"delete": {"offset": 3, "length": 10}})


def test_delete_cascades_annotations(doc: Document) -> None:
    doc.get("body").hide("p1")
    doc.delete("p1")

    assert not doc.contains("p1")
    assert not doc.contains("s1")
    assert "s1" not in doc.get_index("annotations")


def test_unknown_index(doc: Document) -> None:
    with pytest.raises(NotFoundError):
        doc.get_index("fulltext")


def test_get_containers(doc: Document) -> None:
    assert [node.id for node in doc.get_containers("p2")] == ["body"]
    assert doc.get_containers("s1") == []


def test_version_counts_applied_ops(doc: Document) -> None:
    before = doc.version

    doc.set(["p2", "content"], "Changed")

    assert doc.version == before + 1


def test_json_round_trip(doc: Document) -> None:
    payload = doc.to_json()

    restored = Document.from_json(payload, doc.get_schema())

    assert restored.to_json()["nodes"] == payload["nodes"]
    assert restored.get_index("annotations").get(["p1", "content"])[0].id == "s1"


def test_new_instance_shares_schema(doc: Document) -> None:
    fresh = doc.new_instance()

    assert fresh.get_schema() is doc.get_schema()
    assert len(fresh) == 0
