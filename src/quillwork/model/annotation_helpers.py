"""Keep annotations consistent with the text they decorate.

Text edits do not move annotations by themselves; transforms call these
helpers right after changing a text property.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from ..utils.ids import uuid
from .selection import Coordinate

if TYPE_CHECKING:  # pragma: no cover
    from .document import Document
    from .nodes import Node
    from .transaction import Transaction

__all__ = [
    "inserted_text",
    "deleted_text",
    "transfer_annotations",
    "copy_annotation_data",
]


def inserted_text(doc: Document | Transaction, coordinate: Coordinate, length: int) -> None:
    """Shift or extend annotations after ``length`` characters were inserted.

    An annotation starting at the insertion point is pushed right; one ending
    there grows to cover the inserted text.
    """

    if not length:
        return
    pos = coordinate.offset
    for anno in doc.get_index("annotations").get(list(coordinate.path)):
        start = anno.start_offset
        end = anno.end_offset
        new_start = start + length if pos <= start else start
        new_end = end + length if pos <= end else end
        if new_start != start:
            doc.set([anno.id, "start_offset"], new_start)
        if new_end != end:
            doc.set([anno.id, "end_offset"], new_end)


def deleted_text(doc: Document | Transaction, path: Sequence[str], start_offset: int, end_offset: int) -> None:
    """Shift, shrink or remove annotations after ``[start, end)`` was deleted."""

    if start_offset == end_offset:
        return
    length = end_offset - start_offset
    for anno in doc.get_index("annotations").get(list(path)):
        start = anno.start_offset
        end = anno.end_offset
        if end_offset <= start:
            new_start = start - length
            new_end = end - length
        else:
            new_start = start - min(length, start - start_offset) if start_offset <= start else start
            new_end = end - min(length, end - start_offset) if start_offset <= end else end
            if start != end and new_start == new_end:
                doc.delete(anno.id)
                continue
        if new_start != start:
            doc.set([anno.id, "start_offset"], new_start)
        if new_end != end:
            doc.set([anno.id, "end_offset"], new_end)


def transfer_annotations(
    doc: Document | Transaction,
    path: Sequence[str],
    offset: int,
    new_path: Sequence[str],
    new_offset: int,
) -> None:
    """Move annotations at or after ``offset`` on ``path`` onto ``new_path``.

    Annotations straddling ``offset`` are split: the left part stays, the
    right part is created on ``new_path`` under a fresh id.
    """

    for anno in doc.get_index("annotations").get(list(path)):
        start = anno.start_offset
        end = anno.end_offset
        if start >= offset:
            doc.set([anno.id, "path"], list(new_path))
            doc.set([anno.id, "start_offset"], new_offset + start - offset)
            doc.set([anno.id, "end_offset"], new_offset + end - offset)
        elif end > offset:
            doc.set([anno.id, "end_offset"], offset)
            data = copy_annotation_data(anno, new_path, new_offset, new_offset + end - offset)
            data["id"] = uuid(anno.type)
            doc.create(data)


def copy_annotation_data(anno: Node, path: Sequence[str], start_offset: int, end_offset: int) -> dict[str, Any]:
    """Return ``anno`` as JSON re-anchored onto ``path[start:end]``."""

    data = anno.to_json()
    data["path"] = list(path)
    data["start_offset"] = start_offset
    data["end_offset"] = end_offset
    return data
