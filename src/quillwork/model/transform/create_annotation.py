"""Annotate the selected text."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ...utils.ids import uuid
from ..errors import SchemaError
from .helpers import report_invalid_selection

if TYPE_CHECKING:  # pragma: no cover
    from ..transaction import Transaction

LOGGER = logging.getLogger(__name__)


def create_annotation(tx: Transaction, args: dict[str, Any]) -> dict[str, Any] | None:
    selection = args.get("selection")
    if selection is None or selection.is_null():
        report_invalid_selection(LOGGER, "create annotation", selection)
        return args
    if not selection.is_property_selection():
        return None
    if selection.is_collapsed():
        LOGGER.warning("Can not annotate a collapsed selection")
        return args
    args = dict(args)
    data = dict(args["node"])
    anno_type = data.get("type")
    if not anno_type or not tx.get_schema().is_annotation_type(anno_type):
        raise SchemaError(message=f"'{anno_type}' is not an annotation type", node_type=anno_type)
    data.setdefault("id", uuid(anno_type))
    data["path"] = list(selection.path)
    data["start_offset"] = selection.start_offset
    data["end_offset"] = selection.end_offset
    args["result"] = tx.create(data)
    return args
