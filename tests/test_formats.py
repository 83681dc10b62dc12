# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for custom ``format`` handlers."""

from __future__ import annotations

from schemagraph import SchemaEngine
from schemagraph.errors import FormatValidationError
from schemagraph.formats import GENERIC_FORMAT_DESCRIPTION, FormatHandlerRegistry


def _even(value: object, schema: object) -> str | None:
    if isinstance(value, int) and value % 2:
        return "odd number"
    return None


def test_string_result_becomes_description(engine: SchemaEngine) -> None:
    engine.add_format("even", _even)

    errors = engine.validate(3, {"format": "even"}) or []

    assert len(errors) == 1
    assert isinstance(errors[0], FormatValidationError)
    assert errors[0].description == "odd number"
    assert errors[0].attribute == "even"
    assert errors[0].instance_context == "#"


def test_none_result_means_valid(engine: SchemaEngine) -> None:
    engine.add_format("even", _even)

    assert engine.validate(4, {"format": "even"}) == []


def test_other_results_use_generic_description(engine: SchemaEngine) -> None:
    engine.add_format("never", lambda value, schema: False)

    errors = engine.validate("x", {"format": "never"}) or []

    assert [error.description for error in errors] == [GENERIC_FORMAT_DESCRIPTION]


def test_nested_format_errors_are_located(engine: SchemaEngine) -> None:
    engine.add_format("even", _even)
    schema = {"properties": {"n": {"format": "even"}, "list": {"items": {"format": "even"}}}}

    errors = engine.validate({"n": 1, "list": [2, 5]}, schema) or []

    assert sorted(error.instance_context for error in errors) == ["#/list/1", "#/n"]


def test_handler_receives_schema_node(engine: SchemaEngine) -> None:
    seen: list[object] = []

    def capture(value: object, schema: object) -> None:
        seen.append(schema)

    engine.add_format("capture", capture)
    node = {"format": "capture", "title": "node"}
    engine.validate({"a": 1}, {"properties": {"a": node}})

    assert seen == [node]


def test_custom_handler_overrides_builtin_format(engine: SchemaEngine) -> None:
    assert engine.validate("not-an-email", {"format": "email"}) != []

    engine.add_format("email", lambda value, schema: None)

    assert engine.validate("not-an-email", {"format": "email"}) == []


def test_registry_is_a_mapping() -> None:
    handlers = FormatHandlerRegistry()
    handlers.add("even", _even)
    handlers.add("even", _even)

    assert list(handlers) == ["even"]
    assert len(handlers) == 1
    assert "even" in handlers
