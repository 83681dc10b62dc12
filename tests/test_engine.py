# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for synchronous and callback validation through the engine."""

from __future__ import annotations

import asyncio
import logging

import pytest

from schemagraph import SchemaEngine
from schemagraph.engine import NO_SCHEMA_DESCRIPTION
from schemagraph.errors import (
    LoaderAsyncError,
    MissingSchemaError,
    UnsupportedDialectError,
    ValidationError,
)
from tests.support import MemoryLoader


def test_required_property_type_error_is_located(engine: SchemaEngine) -> None:
    schema = {"type": "object", "properties": {"n": {"type": "number"}}, "required": ["n"]}

    errors = engine.validate({"n": "x"}, schema)

    assert errors is not None
    assert len(errors) == 1
    assert errors[0].instance_context == "#/n"
    assert errors[0].keyword == "type"


def test_all_violations_are_collected(engine: SchemaEngine) -> None:
    schema = {"properties": {"a": {"type": "string"}, "b": {"minimum": 3}}}

    errors = engine.validate({"a": 1, "b": 1}, schema) or []

    assert sorted(error.instance_context for error in errors) == ["#/a", "#/b"]


def test_valid_instance_yields_no_errors(engine: SchemaEngine) -> None:
    assert engine.validate([1, 2], {"type": "array", "items": {"type": "integer"}}) == []


def test_unregistered_ref_is_one_structural_error(engine: SchemaEngine) -> None:
    errors = engine.validate({}, {"$ref": "other#/definitions/y"}) or []

    assert len(errors) == 1
    assert isinstance(errors[0], MissingSchemaError)
    assert "other#/definitions/y" in errors[0].description


def test_unregistered_remote_ref_mentions_async_loading(engine: SchemaEngine) -> None:
    errors = engine.validate({}, "http://example.com/nope.json") or []

    assert len(errors) == 1
    assert isinstance(errors[0], MissingSchemaError)
    assert "http://example.com/nope.json" in errors[0].description
    assert "asynchronously" in errors[0].description


def test_missing_schema_returns_single_error(engine: SchemaEngine) -> None:
    errors = engine.validate({"a": 1}, None) or []

    assert len(errors) == 1
    assert type(errors[0]) is ValidationError
    assert errors[0].description == NO_SCHEMA_DESCRIPTION
    assert errors[0].instance_context == "#"


def test_validate_by_registered_id(engine: SchemaEngine) -> None:
    engine.register({"id": "http://example.com/s.json", "type": "string"})

    assert len(engine.validate(1, "http://example.com/s.json") or []) == 1
    assert engine.validate("a", "http://example.com/s.json#") == []


def test_validate_by_fragment_id(engine: SchemaEngine) -> None:
    engine.register(
        {
            "id": "http://example.com/defs.json",
            "definitions": {"pos": {"minimum": 0}, "ref": {"$ref": "#/definitions/pos"}},
        },
    )

    errors = engine.validate(-1, "http://example.com/defs.json#/definitions/ref") or []

    assert [error.keyword for error in errors] == ["minimum"]


def test_anonymous_schemas_share_one_registry_entry(engine: SchemaEngine) -> None:
    engine.validate(1, {"type": "integer", "minimum": 0})
    engine.validate(1, {"minimum": 0, "type": "integer"})

    assert len(engine.registry) == 1
    assert engine.registry.base_uris[0].startswith("anon-schema://")


def test_unsupported_dialect_names_supported_set(engine: SchemaEngine) -> None:
    errors = engine.validate(1, {"$schema": "http://json-schema.org/draft-07/schema#"}) or []

    assert len(errors) == 1
    assert isinstance(errors[0], UnsupportedDialectError)
    assert "draft-07" in errors[0].description
    assert "http://json-schema.org/draft-04/schema#" in errors[0].description


@pytest.mark.parametrize(
    "dialect",
    [
        "http://json-schema.org/draft-04/schema#",
        "http://json-schema.org/draft-04/schema",
        "http://json-schema.org/schema#",
    ],
)
def test_draft04_dialect_aliases(engine: SchemaEngine, dialect: str) -> None:
    errors = engine.validate(1, {"$schema": dialect, "type": "string"}) or []

    assert [error.keyword for error in errors] == ["type"]


def test_sync_call_with_loader_prepends_misuse_error(caplog: pytest.LogCaptureFixture) -> None:
    loader = MemoryLoader({})
    engine = SchemaEngine(loader, discover_dialects=False)

    with caplog.at_level(logging.WARNING, logger="schemagraph.engine"):
        errors = engine.validate({}, {"$ref": "http://example.com/remote.json"}) or []

    assert len(errors) == 2
    assert isinstance(errors[0], LoaderAsyncError)
    assert isinstance(errors[1], MissingSchemaError)
    assert loader.calls == []
    assert "loader ignored" in caplog.text


def test_sync_call_with_loader_still_warns_when_valid() -> None:
    engine = SchemaEngine(MemoryLoader({}), discover_dialects=False)

    errors = engine.validate(1, {"type": "integer"}) or []

    assert [type(error) for error in errors] == [LoaderAsyncError]


def test_callback_is_not_reentrant_inside_running_loop(engine: SchemaEngine) -> None:
    async def scenario() -> tuple[list[object], object]:
        received: list[object] = []
        delivered = asyncio.get_running_loop().create_future()

        def callback(errors: object) -> None:
            received.append(errors)
            delivered.set_result(errors)

        result = engine.validate("x", {"type": "integer"}, callback)
        assert result is None
        snapshot = list(received)
        await asyncio.wait_for(delivered, timeout=1)
        return snapshot, received[0]

    snapshot, errors = asyncio.run(scenario())

    assert snapshot == []
    assert isinstance(errors, list)
    assert errors[0].keyword == "type"


def test_callback_without_running_loop_is_called_before_validate_returns(engine: SchemaEngine) -> None:
    received: list[object] = []

    engine.validate(1, {"type": "integer"}, received.append)

    assert received == [None]


def test_callback_fast_fail_is_delivered(engine: SchemaEngine) -> None:
    received: list[object] = []

    engine.validate(1, None, received.append)

    assert len(received) == 1
    errors = received[0]
    assert isinstance(errors, list)
    assert errors[0].description == NO_SCHEMA_DESCRIPTION


def test_callback_with_loader_fetches_before_validating(
    chain_documents: dict[str, object],
    chain_root: dict[str, object],
) -> None:
    loader = MemoryLoader(chain_documents)
    engine = SchemaEngine(loader, discover_dialects=False)
    received: list[object] = []

    engine.validate("not an integer", chain_root, received.append)

    assert loader.calls == [
        "http://example.com/b.json",
        "http://example.com/c.json",
        "http://example.com/d.json",
    ]
    assert len(received) == 1
    errors = received[0]
    assert isinstance(errors, list)
    assert [error.keyword for error in errors] == ["type"]


def test_callback_with_loader_inside_running_loop(
    chain_documents: dict[str, object],
    chain_root: dict[str, object],
) -> None:
    engine = SchemaEngine(MemoryLoader(chain_documents), discover_dialects=False)

    async def scenario() -> object:
        delivered = asyncio.get_running_loop().create_future()
        engine.validate(5, chain_root, delivered.set_result)
        return await asyncio.wait_for(delivered, timeout=1)

    assert asyncio.run(scenario()) is None


def test_engine_exposes_registry_operations(engine: SchemaEngine) -> None:
    engine.register({"id": "http://example.com/r.json", "items": {"$ref": "item.json"}})

    assert engine.is_registered("http://example.com/r.json")
    assert engine.get_missing_schemas() == ["http://example.com/item.json"]


def _faulty_format(value: object, schema: object) -> None:
    raise TypeError("handler fault")


def test_format_handler_fault_is_delivered_to_callback(engine: SchemaEngine) -> None:
    engine.add_format("faulty", _faulty_format)

    async def scenario() -> object:
        delivered = asyncio.get_running_loop().create_future()
        assert engine.validate(1, {"format": "faulty"}, delivered.set_result) is None
        return await asyncio.wait_for(delivered, timeout=1)

    errors = asyncio.run(scenario())

    assert isinstance(errors, list)
    assert len(errors) == 1
    assert type(errors[0]) is ValidationError
    assert "TypeError" in errors[0].description
    assert "handler fault" in errors[0].description
    assert errors[0].instance_context == "#"


def test_runner_fault_with_loader_still_reaches_callback() -> None:
    engine = SchemaEngine(MemoryLoader({}), discover_dialects=False)

    async def scenario() -> object:
        delivered = asyncio.get_running_loop().create_future()
        engine.validate("x", {"pattern": "("}, delivered.set_result)
        return await asyncio.wait_for(delivered, timeout=1)

    errors = asyncio.run(scenario())

    assert isinstance(errors, list)
    assert len(errors) == 1
    assert errors[0].description.startswith("validation aborted by ")


def test_sync_validation_reports_handler_fault(engine: SchemaEngine) -> None:
    engine.add_format("faulty", _faulty_format)

    errors = engine.validate({"a": 1}, {"properties": {"a": {"format": "faulty"}}}) or []

    assert [type(error) for error in errors] == [ValidationError]
    assert "handler fault" in errors[0].description
