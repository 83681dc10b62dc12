# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for canonical serialisation and anonymous schema ids."""

from __future__ import annotations

from schemagraph.hashing import anonymous_schema_id, canonical_dumps, schema_digest


def test_canonical_dumps_sorts_keys_without_whitespace() -> None:
    assert canonical_dumps({"b": [1, {"d": 2, "c": 3}], "a": "é"}) == '{"a":"é","b":[1,{"c":3,"d":2}]}'


def test_digest_ignores_member_order() -> None:
    assert schema_digest({"type": "integer", "minimum": 0}) == schema_digest({"minimum": 0, "type": "integer"})
    assert schema_digest({"minimum": 0}) != schema_digest({"minimum": 1})


def test_anonymous_schema_id_shape() -> None:
    schema_id = anonymous_schema_id({"type": "string"})

    assert schema_id.startswith("anon-schema://")
    assert schema_id.endswith("/#")
    assert len(schema_id) == len("anon-schema://") + 64 + len("/#")
