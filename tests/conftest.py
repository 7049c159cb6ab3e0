"""Shared pytest fixtures."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from quillwork.model.document import Document
from quillwork.model.schema import Schema, default_schema
from quillwork.model.selection import ContainerSelection, PropertySelection, Selection
from quillwork.model.session import DocumentSession
from quillwork.model.transaction import Transaction


def build_article(schema: Schema) -> Document:
    """Body container with three paragraphs; "Hello" in p1 is strong."""

    doc = Document(schema, document_id="doc-test")
    doc.create({"id": "p1", "type": "paragraph", "content": "Hello world"})
    doc.create({"id": "p2", "type": "paragraph", "content": "Second paragraph"})
    doc.create({"id": "p3", "type": "paragraph", "content": "Third"})
    doc.create({"id": "body", "type": "container", "nodes": ["p1", "p2", "p3"]})
    doc.create(
        {
            "id": "s1",
            "type": "strong",
            "path": ["p1", "content"],
            "start_offset": 0,
            "end_offset": 5,
        }
    )
    return doc


@pytest.fixture
def schema() -> Schema:
    return default_schema()


@pytest.fixture
def doc(schema: Schema) -> Document:
    return build_article(schema)


@pytest.fixture
def session(doc: Document) -> DocumentSession:
    return DocumentSession(doc)


@pytest.fixture
def apply() -> Callable[..., tuple[Transaction, Any]]:
    """Run a transform inside a committed transaction.

    Returns ``(tx, result)``.
    """

    def _apply(
        target: Document, transform: Callable, selection: Selection, /, **args: Any
    ) -> tuple[Transaction, Any]:
        payload = {"selection": selection, **args}
        with Transaction(target, selection=selection) as tx:
            result = transform(tx, payload)
        return tx, result

    return _apply


def caret(node_id: str, offset: int) -> PropertySelection:
    return PropertySelection((node_id, "content"), offset)


def text_range(node_id: str, start: int, end: int) -> PropertySelection:
    return PropertySelection((node_id, "content"), start, end)


def container_range(
    start_node: str,
    start_offset: int,
    end_node: str,
    end_offset: int,
    container_id: str = "body",
) -> ContainerSelection:
    return ContainerSelection(
        container_id,
        (start_node, "content"),
        start_offset,
        (end_node, "content"),
        end_offset,
    )


@pytest.fixture
def sel() -> Any:
    """Selection constructors: ``sel.caret``, ``sel.text_range``, ``sel.container_range``."""

    class _Selections:
        caret = staticmethod(caret)
        text_range = staticmethod(text_range)
        container_range = staticmethod(container_range)

    return _Selections()
