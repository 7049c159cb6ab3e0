"""Secondary index mapping text property paths to their annotations."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from .nodes import Node

LOGGER = logging.getLogger(__name__)

__all__ = ["AnnotationIndex"]

PathKey = tuple[str, str]


class AnnotationIndex:
    """Index of annotations keyed by ``(node_id, property)``.

    The owning document keeps the index in sync: annotations are added when
    created, removed when deleted and re-keyed when their ``path`` is set.
    """

    def __init__(self) -> None:
        self._by_path: defaultdict[PathKey, dict[str, Node]] = defaultdict(dict)
        self._paths: dict[str, PathKey] = {}

    def add(self, anno: Node) -> None:
        key = _path_key(anno.path)
        if key is None:
            LOGGER.debug("Annotation %s has no usable path; not indexed", anno.id)
            return
        self._by_path[key][anno.id] = anno
        self._paths[anno.id] = key

    def remove(self, anno_id: str) -> None:
        key = self._paths.pop(anno_id, None)
        if key is None:
            return
        bucket = self._by_path.get(key)
        if bucket is not None:
            bucket.pop(anno_id, None)
            if not bucket:
                del self._by_path[key]

    def reindex(self, anno: Node) -> None:
        self.remove(anno.id)
        self.add(anno)

    def clear(self) -> None:
        self._by_path.clear()
        self._paths.clear()

    def __len__(self) -> int:
        return len(self._paths)

    def __contains__(self, anno_id: object) -> bool:
        return anno_id in self._paths

    def get(
        self,
        path: Sequence[str] | str,
        start: int | None = None,
        end: int | None = None,
        type: str | None = None,
    ) -> list[Node]:
        """Return annotations on ``path`` overlapping ``[start, end]``.

        ``path`` may be a bare node id, in which case annotations on every
        property of that node are returned. Range boundaries are inclusive,
        so an annotation ending exactly at ``start`` is reported.
        """

        if isinstance(path, str):
            annos = self.get_by_node(path)
        else:
            key = _path_key(path)
            annos = list(self._by_path.get(key, {}).values()) if key else []
        if start is not None:
            upper = start if end is None else end
            annos = [anno for anno in annos if anno.start_offset <= upper and anno.end_offset >= start]
        if type is not None:
            annos = [anno for anno in annos if anno.is_instance_of(type)]
        return sorted(annos, key=lambda anno: (anno.start_offset, anno.end_offset, anno.id))

    def get_by_node(self, node_id: str) -> list[Node]:
        result: list[Node] = []
        for (owner, _prop), bucket in self._by_path.items():
            if owner == node_id:
                result.extend(bucket.values())
        return sorted(result, key=lambda anno: (anno.start_offset, anno.end_offset, anno.id))


def _path_key(path: Sequence[str] | None) -> PathKey | None:
    if not path or len(path) != 2:
        return None
    return (str(path[0]), str(path[1]))
