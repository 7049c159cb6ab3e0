"""JSON-schema validation for selection specs and node data."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

import jsonschema

__all__ = [
    "SELECTION_SCHEMA",
    "NODE_SCHEMA",
    "MAX_SCHEMA_ERRORS",
    "normalize_selection_spec",
    "validate_selection_spec",
    "validate_node_data",
]

MAX_SCHEMA_ERRORS = 10

_PATH = {"type": "array", "items": {"type": "string"}, "minItems": 1, "maxItems": 2}
_OFFSET = {"type": "integer", "minimum": 0}
_SURFACE = {"type": ["string", "null"]}

SELECTION_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["type"],
    "properties": {
        "type": {"enum": ["null", "property", "container", "node"]},
        "surfaceId": _SURFACE,
        "reverse": {"type": "boolean"},
    },
    "allOf": [
        {
            "if": {"properties": {"type": {"const": "property"}}},
            "then": {
                "required": ["path", "startOffset"],
                "properties": {
                    "path": {**_PATH, "minItems": 2},
                    "startOffset": _OFFSET,
                    "endOffset": {"type": ["integer", "null"], "minimum": 0},
                },
            },
        },
        {
            "if": {"properties": {"type": {"const": "container"}}},
            "then": {
                "required": ["containerId", "startPath", "startOffset"],
                "properties": {
                    "containerId": {"type": "string", "minLength": 1},
                    "startPath": _PATH,
                    "startOffset": _OFFSET,
                    "endPath": {**_PATH, "type": ["array", "null"]},
                    "endOffset": {"type": ["integer", "null"], "minimum": 0},
                },
            },
        },
        {
            "if": {"properties": {"type": {"const": "node"}}},
            "then": {
                "required": ["containerId", "nodeId"],
                "properties": {
                    "containerId": {"type": "string", "minLength": 1},
                    "nodeId": {"type": "string", "minLength": 1},
                },
            },
        },
    ],
}

NODE_SCHEMA: dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["type"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "type": {"type": "string", "minLength": 1},
        "content": {"type": "string"},
        "nodes": {"type": "array", "items": {"type": "string"}},
        "path": {"type": "array", "items": {"type": "string"}, "minItems": 2, "maxItems": 2},
        "start_offset": _OFFSET,
        "end_offset": _OFFSET,
    },
}

_SELECTION_ALIASES: Mapping[str, str] = {
    "container_id": "containerId",
    "start_path": "startPath",
    "start_offset": "startOffset",
    "end_path": "endPath",
    "end_offset": "endOffset",
    "node_id": "nodeId",
    "surface_id": "surfaceId",
}

_SELECTION_VALIDATOR = jsonschema.Draft202012Validator(SELECTION_SCHEMA)
_NODE_VALIDATOR = jsonschema.Draft202012Validator(NODE_SCHEMA)


def normalize_selection_spec(spec: Mapping[str, Any]) -> dict[str, Any]:
    """Return ``spec`` with snake_case keys mapped onto the camelCase wire names."""

    normalized: dict[str, Any] = {}
    for key, value in spec.items():
        target = _SELECTION_ALIASES.get(key, key)
        if isinstance(value, tuple):
            value = list(value)
        normalized[target] = value
    return normalized


def validate_selection_spec(spec: Any) -> list[str]:
    """Validate a selection wire payload and return any issues."""

    return _collect_errors(_SELECTION_VALIDATOR, spec)


def validate_node_data(data: Any) -> list[str]:
    """Validate node JSON (``{id, type, ...attributes}``) and return any issues."""

    return _collect_errors(_NODE_VALIDATOR, data)


def _collect_errors(validator: jsonschema.protocols.Validator, payload: Any) -> list[str]:
    errors: list[str] = []
    for issue in validator.iter_errors(payload):
        path = _format_schema_path(issue.absolute_path)
        msg = issue.message
        if path:
            msg = f"{path}: {msg}"
        errors.append(msg)
        if len(errors) >= MAX_SCHEMA_ERRORS:
            errors.append("Too many validation errors; stopping early.")
            break
    return errors


def _format_schema_path(path: Sequence[Any]) -> str:
    if not path:
        return ""
    components: list[str] = []
    for segment in path:
        if isinstance(segment, int):
            if components:
                components[-1] = f"{components[-1]}[{segment}]"
            else:
                components.append(f"[{segment}]")
        else:
            components.append(str(segment))
    return ".".join(filter(None, components))
