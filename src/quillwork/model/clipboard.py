"""Convert external clipboard text into snippet documents."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from markdown_it import MarkdownIt
from markdown_it.token import Token

from ..utils.ids import uuid
from .document import Document
from .nodes import Node
from .schema import Schema
from .transform.paste import plain_text_to_document

LOGGER = logging.getLogger(__name__)

__all__ = ["ClipboardImporter"]

_STRUCTURE_TOKENS = frozenset(
    {
        "heading_open",
        "fence",
        "code_block",
        "bullet_list_open",
        "ordered_list_open",
        "blockquote_open",
    }
)
_MARK_TYPES = {
    "strong_open": "strong",
    "em_open": "emphasis",
    "link_open": "link",
}
_CLOSE_TOKENS = {"strong_close": "strong", "em_close": "emphasis", "link_close": "link"}


@dataclass(slots=True)
class _InlineText:
    """Plain text of an inline run plus the annotation ranges found in it."""

    text: str = ""
    annotations: list[dict[str, Any]] = field(default_factory=list)


class ClipboardImporter:
    """Build a snippet document from pasted text.

    With ``markdown=True`` structured text (headings, code, lists, quotes or
    inline emphasis) is parsed with ``markdown-it-py``; anything else goes
    through the blank-line paragraph split used by paste.
    """

    def __init__(self, schema: Schema, *, markdown: bool = True) -> None:
        self.schema = schema
        self.markdown = markdown
        self._parser = MarkdownIt("commonmark")

    def import_text(self, text: str) -> Document:
        """Return a snippet document for ``text``."""

        text = text or ""
        if self.markdown:
            tokens = self._parser.parse(text)
            if self._has_structure(tokens):
                return self._convert_tokens(tokens)
        return plain_text_to_document(Document(self.schema), text)

    def check_quality(self, text: str) -> bool:
        """Tell whether ``text`` carries structure worth a markdown import."""

        return self._has_structure(self._parser.parse(text or ""))

    @staticmethod
    def _has_structure(tokens: Iterable[Token]) -> bool:
        for token in tokens:
            if token.type in _STRUCTURE_TOKENS:
                return True
            if token.type == "inline" and any(
                child.type in _MARK_TYPES or child.type == "code_inline" for child in token.children or ()
            ):
                return True
        return False

    # ------------------------------------------------------------------
    # Token conversion
    # ------------------------------------------------------------------

    def _convert_tokens(self, tokens: list[Token]) -> Document:
        snippet = Document(self.schema)
        container = snippet.create({"type": "container", "id": snippet.SNIPPET_ID, "nodes": []})
        default_type = self.schema.get_default_text_type()
        current_list: Optional[dict[str, Any]] = None
        list_depth = 0
        pending: Optional[dict[str, Any]] = None

        for token in tokens:
            kind = token.type
            if kind in ("bullet_list_open", "ordered_list_open"):
                list_depth += 1
                if current_list is None:
                    current_list = {"type": "list", "ordered": kind == "ordered_list_open", "items": []}
            elif kind in ("bullet_list_close", "ordered_list_close"):
                list_depth -= 1
                if list_depth == 0 and current_list is not None:
                    current_list["id"] = uuid("list")
                    container.show(snippet.create(current_list).id)
                    current_list = None
            elif kind == "heading_open":
                pending = {"type": "heading", "level": int(token.tag[1:] or 1)}
            elif kind == "paragraph_open":
                pending = {"type": "list-item" if list_depth else default_type}
            elif kind == "inline" and pending is not None:
                node = self._create_text(snippet, pending, self._convert_inline(token.children or []))
                if list_depth and current_list is not None:
                    current_list["items"].append(node.id)
                else:
                    container.show(node.id)
                pending = None
            elif kind in ("fence", "code_block"):
                data = {"type": "codeblock", "language": (token.info or "").strip()}
                node = self._create_text(snippet, data, _InlineText(token.content.rstrip("\n")))
                container.show(node.id)
        LOGGER.debug("Imported %d clipboard blocks", len(container.nodes))
        return snippet

    def _create_text(self, snippet: Document, data: dict[str, Any], inline: _InlineText) -> Node:
        data = dict(data)
        data["id"] = uuid(data["type"])
        data["content"] = inline.text
        node = snippet.create(data)
        for anno in inline.annotations:
            anno["id"] = uuid(anno["type"])
            anno["path"] = node.get_text_path()
            snippet.create(anno)
        return node

    def _convert_inline(self, children: list[Token]) -> _InlineText:
        result = _InlineText()
        parts: list[str] = []
        length = 0
        open_marks: list[dict[str, Any]] = []
        for child in children:
            kind = child.type
            if kind in _MARK_TYPES:
                mark: dict[str, Any] = {"type": _MARK_TYPES[kind], "start_offset": length}
                if kind == "link_open":
                    mark["url"] = str(child.attrGet("href") or "")
                open_marks.append(mark)
                continue
            if kind in _CLOSE_TOKENS:
                for index in range(len(open_marks) - 1, -1, -1):
                    if open_marks[index]["type"] == _CLOSE_TOKENS[kind]:
                        mark = open_marks.pop(index)
                        mark["end_offset"] = length
                        result.annotations.append(mark)
                        break
                continue
            if kind == "code_inline":
                value = child.content
                result.annotations.append(
                    {"type": "code", "start_offset": length, "end_offset": length + len(value)}
                )
            elif kind in ("softbreak", "hardbreak"):
                value = "\n"
            else:
                value = child.content
            parts.append(value)
            length += len(value)
        result.text = "".join(parts)
        return result
