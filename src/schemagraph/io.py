# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Helpers for reading JSON instances and schemas from disk or raw bytes."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import cast

from .errors import SchemaGraphError
from .types import JSONValue, SchemaMapping


def parse_document(payload: str | bytes, *, context: str) -> JSONValue:
    """Decode ``payload`` as UTF-8 JSON.

    Args:
        payload: Raw document text or bytes.
        context: Human-readable origin (path or URI) used in error messages.

    Returns:
        JSONValue: Parsed JSON value.

    Raises:
        SchemaGraphError: If the payload is not valid UTF-8 JSON.
    """

    try:
        text = payload.decode("utf-8") if isinstance(payload, bytes) else payload
        value = cast(JSONValue, json.loads(text))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SchemaGraphError(f"{context}: failed to parse JSON: {exc}") from exc
    return _ensure_json_value(value, context=context)


def load_document(path: Path) -> JSONValue:
    """Load a JSON document (typically an instance) from disk.

    Args:
        path: Filesystem path to the JSON document.

    Returns:
        JSONValue: Parsed JSON value.

    Raises:
        FileNotFoundError: If the document is missing.
        SchemaGraphError: If the document cannot be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(path)
    return parse_document(path.read_bytes(), context=str(path))


def load_schema(path: Path) -> SchemaMapping:
    """Load a schema from disk and ensure it is a JSON object.

    Raises:
        FileNotFoundError: If the schema file is missing.
        SchemaGraphError: If the file cannot be parsed or is not a JSON object.
    """
    return ensure_json_object(load_document(path), context=str(path))


def ensure_json_object(value: JSONValue, *, context: str) -> SchemaMapping:
    """Return ``value`` as a JSON object, raising on type mismatch.

    Args:
        value: Parsed JSON payload.
        context: Human-readable origin used in error messages.

    Returns:
        SchemaMapping: ``value`` itself.

    Raises:
        SchemaGraphError: If ``value`` is not a mapping.
    """

    if not isinstance(value, Mapping):
        raise SchemaGraphError(f"{context}: expected a JSON object, got {type(value).__name__}")
    return value


def _ensure_json_value(value: JSONValue, *, context: str) -> JSONValue:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Mapping):
        for key, item in value.items():
            _ensure_json_value(item, context=f"{context}.{key}")
        return value
    if isinstance(value, Sequence):
        for item in value:
            _ensure_json_value(item, context=f"{context}[]")
        return value
    raise SchemaGraphError(f"{context}: value is not valid JSON")


__all__ = ["ensure_json_object", "load_document", "load_schema", "parse_document"]
