"""Node arena with path addressing and secondary indexes."""

from __future__ import annotations

import copy
import logging
import threading
import uuid as _uuid
from typing import Any, Iterator, Mapping, Sequence

from ..utils.ids import uuid
from .annotation_index import AnnotationIndex
from .errors import DuplicateIdError, NotFoundError, OutOfRangeError, SchemaError
from .nodes import Node
from .operations import Diff, ObjectOperation, OpType, apply_diff
from .schema import Schema, default_schema
from .selection import Selection, selection_from_json
from .wire import validate_node_data

LOGGER = logging.getLogger(__name__)

__all__ = ["Document"]

PathLike = Sequence[str] | str


class Document:
    """Mapping from node id to node data, owning every node's lifecycle.

    All relationships are expressed through ids: containers list child ids,
    annotations point at ``[node_id, property]`` paths and selections address
    paths. Every mutation is an :class:`ObjectOperation` applied through
    :meth:`apply_op`; while a transaction is open the ops are appended to its
    journal.
    """

    SNIPPET_ID = "snippet"
    TEXT_SNIPPET_ID = "text-snippet"

    def __init__(self, schema: Schema | None = None, *, document_id: str | None = None) -> None:
        self.schema = schema or default_schema()
        self.document_id = document_id or _uuid.uuid4().hex
        self._nodes: dict[str, Node] = {}
        self._indexes: dict[str, Any] = {"annotations": AnnotationIndex()}
        self._journal: list[ObjectOperation] | None = None
        self._writer_lock = threading.Lock()
        self.version = 0

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_schema(self) -> Schema:
        return self.schema

    def get_index(self, name: str) -> Any:
        try:
            return self._indexes[name]
        except KeyError as exc:
            raise NotFoundError(message=f"Unknown index '{name}'", path=name) from exc

    def contains(self, node_id: str) -> bool:
        return node_id in self._nodes

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))

    def get_nodes(self) -> dict[str, Node]:
        return dict(self._nodes)

    def get(self, id_or_path: PathLike) -> Any:
        """Resolve a node (by id or ``[id]``) or a property value (``[id, prop]``)."""

        if isinstance(id_or_path, str):
            node = self._nodes.get(id_or_path)
            if node is None:
                raise NotFoundError.for_path(id_or_path)
            return node
        path = list(id_or_path)
        if not path or len(path) > 2:
            raise NotFoundError.for_path(path)
        node = self._nodes.get(path[0])
        if node is None:
            raise NotFoundError.for_path(path)
        if len(path) == 1:
            return node
        if path[1] not in node:
            raise NotFoundError.for_path(path)
        return node.get(path[1])

    def get_containers(self, node_id: str) -> list[Node]:
        """Return every container node currently listing ``node_id``."""

        schema = self.schema
        return [
            node
            for node in self._nodes.values()
            if schema.is_container_type(node.type) and node_id in (node.get("nodes") or ())
        ]

    def get_text_length(self, path: Sequence[str]) -> int:
        value = self.get(path)
        return len(value) if isinstance(value, str) else 0

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, data: Mapping[str, Any] | Node) -> Node:
        """Create a node from JSON data and return its live handle."""

        if isinstance(data, Node):
            data = data.to_json()
        payload = copy.deepcopy(dict(data))
        node_type = payload.get("type")
        if not node_type:
            raise SchemaError(message="Node data requires a 'type'", details={"data": repr(payload)})
        if not self.schema.has_type(node_type):
            raise SchemaError(message=f"Unknown node type '{node_type}'", node_type=node_type)
        if not payload.get("id"):
            payload["id"] = uuid(node_type)
        if payload["id"] in self._nodes:
            raise DuplicateIdError(message=f"Node '{payload['id']}' already exists", node_id=payload["id"])
        errors = validate_node_data(payload)
        if errors:
            raise SchemaError(message=f"Invalid node data: {errors[0]}", node_type=node_type, details={"errors": errors})
        for key, value in self.schema.property_defaults(node_type).items():
            payload.setdefault(key, value)
        missing = [name for name in self.schema.required_properties(node_type) if not payload.get(name)]
        if missing:
            raise SchemaError(
                message=f"Node '{payload['id']}' lacks required properties: {', '.join(missing)}",
                node_type=node_type,
            )
        if self.schema.is_annotation_type(node_type):
            self._check_annotation_range(payload)
        self.apply_op(ObjectOperation.create(payload))
        return self._nodes[payload["id"]]

    def update(self, path: Sequence[str], diff: Mapping[str, Any] | Diff) -> ObjectOperation:
        """Apply an ``insert``/``delete`` edit to a string or list property."""

        path = list(path)
        self.get(path)
        if len(path) != 2:
            raise NotFoundError(message="Updates require a [node_id, property] path", path=path)
        return self.apply_op(ObjectOperation.update(path, Diff.from_payload(diff)))

    def set(self, path: Sequence[str], value: Any) -> ObjectOperation:
        """Replace the value of a property."""

        path = list(path)
        if len(path) != 2:
            raise NotFoundError(message="set() requires a [node_id, property] path", path=path)
        node = self.get(path[0])
        original = node.get(path[1])
        return self.apply_op(ObjectOperation.set(path, value, original))

    def delete(self, node_id: str) -> None:
        """Delete a node; annotations anchored to it are deleted first."""

        node = self.get(node_id)
        if not node.is_annotation():
            for anno in self.get_index("annotations").get_by_node(node_id):
                self.apply_op(ObjectOperation.delete(anno.to_json()))
        self.apply_op(ObjectOperation.delete(node.to_json()))

    def apply_op(self, op: ObjectOperation) -> ObjectOperation:
        """Apply one operation to the arena and record it in the open journal."""

        annotations: AnnotationIndex = self._indexes["annotations"]
        if op.type is OpType.CREATE:
            node_id = op.path[0]
            if node_id in self._nodes:
                raise DuplicateIdError(message=f"Node '{node_id}' already exists", node_id=node_id)
            node = Node(self, copy.deepcopy(op.val))
            self._nodes[node_id] = node
            if self.schema.is_annotation_type(node.type):
                annotations.add(node)
        elif op.type is OpType.DELETE:
            node_id = op.path[0]
            if node_id not in self._nodes:
                raise NotFoundError.for_path(node_id)
            del self._nodes[node_id]
            annotations.remove(node_id)
        elif op.type is OpType.UPDATE:
            node = self.get(op.path[0])
            current = self.get(op.path)
            assert op.diff is not None
            node._set_property(op.path[1], apply_diff(current, op.diff))
        elif op.type is OpType.SET:
            node = self.get(op.path[0])
            node._set_property(op.path[1], copy.deepcopy(op.val))
            if op.path[1] == "path" and node.id in annotations:
                annotations.reindex(node)
        self.version += 1
        if self._journal is not None:
            self._journal.append(op)
        LOGGER.debug("Applied %s to document %s", op, self.document_id)
        return op

    def _check_annotation_range(self, payload: Mapping[str, Any]) -> None:
        path = payload["path"]
        text = self.get(path)
        start = int(payload.get("start_offset", 0))
        end = int(payload.get("end_offset", 0))
        size = len(text) if isinstance(text, (str, list)) else 0
        if not 0 <= start <= end <= size:
            raise OutOfRangeError(
                message=f"Annotation range [{start}, {end}] outside [0, {size}]",
                offset=start,
                length=end - start,
                size=size,
            )

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def _acquire_writer(self) -> bool:
        return self._writer_lock.acquire(blocking=False)

    def _release_writer(self) -> None:
        if self._writer_lock.locked():
            self._writer_lock.release()

    def is_locked(self) -> bool:
        return self._writer_lock.locked()

    def _attach_journal(self, journal: list[ObjectOperation] | None) -> None:
        self._journal = journal

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def new_instance(self) -> Document:
        """Return an empty document sharing this document's schema."""

        return Document(self.schema)

    def create_selection(self, spec: Mapping[str, Any] | Selection | None) -> Selection:
        return selection_from_json(spec)

    # ------------------------------------------------------------------
    # In-memory JSON
    # ------------------------------------------------------------------

    def to_json(self) -> dict[str, Any]:
        return {
            "schema": self.schema.name,
            "nodes": {node_id: node.to_json() for node_id, node in self._nodes.items()},
        }

    @classmethod
    def from_json(cls, payload: Mapping[str, Any], schema: Schema | None = None) -> Document:
        """Rebuild a document from :meth:`to_json` output."""

        doc = cls(schema)
        nodes = payload.get("nodes") or {}
        values = list(nodes.values()) if isinstance(nodes, Mapping) else list(nodes)
        annotations = [data for data in values if doc.schema.is_annotation_type(data.get("type", ""))]
        for data in values:
            if data not in annotations:
                doc.create(data)
        for data in annotations:
            doc.create(data)
        return doc

    def __repr__(self) -> str:
        return f"Document(id={self.document_id!r}, nodes={len(self._nodes)})"
