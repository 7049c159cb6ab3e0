"""Editing transformations.

Every transform has the shape ``transform(tx, args) -> args | None``: it reads
``args["selection"]`` (plus transform specific keys), mutates the document
through the transaction and returns a new args dict carrying the resulting
selection. ``None`` means the transform does not handle that selection kind.
"""

from .break_node import break_node
from .copy_node import copy_annotations, copy_node
from .copy_selection import copy_selection
from .create_annotation import create_annotation
from .delete_node import delete_node
from .delete_selection import delete_selection
from .insert_node import insert_node
from .insert_text import insert_text
from .paste import PARAGRAPH_SEPARATOR, paste, plain_text_to_document
from .switch_text_type import switch_text_type

__all__ = [
    "PARAGRAPH_SEPARATOR",
    "break_node",
    "copy_annotations",
    "copy_node",
    "copy_selection",
    "create_annotation",
    "delete_node",
    "delete_selection",
    "insert_node",
    "insert_text",
    "paste",
    "plain_text_to_document",
    "switch_text_type",
]
