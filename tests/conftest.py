# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from schemagraph import SchemaEngine
from schemagraph.types import JSONValue


@pytest.fixture
def engine() -> SchemaEngine:
    return SchemaEngine(discover_dialects=False)


@pytest.fixture
def chain_documents() -> dict[str, JSONValue]:
    """Documents forming the chain a.json -> b.json -> c.json -> d.json."""

    return {
        "http://example.com/b.json": {"id": "http://example.com/b.json", "$ref": "c.json"},
        "http://example.com/c.json": {"id": "http://example.com/c.json", "$ref": "d.json"},
        "http://example.com/d.json": {"id": "http://example.com/d.json", "type": "integer"},
    }


@pytest.fixture
def chain_root() -> dict[str, JSONValue]:
    return {"id": "http://example.com/a.json", "$ref": "b.json"}
