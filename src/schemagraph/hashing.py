# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Canonical serialisation and content hashes for anonymous schemas."""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence

from .types import ANON_URI_SCHEME, JSONValue


def _to_jsonable(value: object) -> JSONValue:
    """Convert mappings and sequences into plain ``dict``/``list`` trees."""

    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Mapping):
        return {str(key): _to_jsonable(item) for key, item in value.items()}
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        return [_to_jsonable(item) for item in value]
    return str(value)


def canonical_dumps(value: object) -> str:
    """Return the canonical JSON text for ``value``.

    Keys are sorted and separators carry no whitespace, so two structurally
    identical documents serialise identically regardless of key order.

    Args:
        value: JSON-compatible value.

    Returns:
        str: Canonical JSON text.
    """

    return json.dumps(_to_jsonable(value), sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def schema_digest(value: object) -> str:
    """Return the SHA-256 hex digest of ``value``'s canonical serialisation."""

    return hashlib.sha256(canonical_dumps(value).encode("utf-8")).hexdigest()


def anonymous_schema_id(schema: object) -> str:
    """Return the synthetic identifier used for a schema that declares none.

    Args:
        schema: Schema without ``id``/``$id``.

    Returns:
        str: Identifier of the form ``anon-schema://<digest>/#``.
    """

    return f"{ANON_URI_SCHEME}://{schema_digest(schema)}/#"


__all__ = ["anonymous_schema_id", "canonical_dumps", "schema_digest"]
