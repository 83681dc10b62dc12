# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for engine and loader settings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from schemagraph import EngineSettings, LoaderSettings, SchemaEngine
from schemagraph.config import DEFAULT_MAX_RECURSION
from schemagraph.errors import ConfigurationError
from schemagraph.types import DRAFT04_DIALECT


def test_engine_defaults() -> None:
    settings = EngineSettings()

    assert settings.max_recursion == DEFAULT_MAX_RECURSION == 5
    assert settings.default_dialect == DRAFT04_DIALECT
    assert settings.discover_dialects is True


def test_engine_rejects_negative_recursion() -> None:
    with pytest.raises(PydanticValidationError):
        EngineSettings(max_recursion=-1)


def test_max_recursion_assignment_is_validated() -> None:
    engine = SchemaEngine(discover_dialects=False)

    engine.max_recursion = 9
    assert engine.settings.max_recursion == 9

    with pytest.raises(PydanticValidationError):
        engine.max_recursion = -3


def test_engine_keyword_overrides() -> None:
    base = EngineSettings(max_recursion=2, discover_dialects=False)

    engine = SchemaEngine(settings=base, max_recursion=7)

    assert engine.max_recursion == 7
    assert engine.settings.discover_dialects is False
    assert base.max_recursion == 2


def test_engine_rejects_invalid_override() -> None:
    with pytest.raises(PydanticValidationError):
        SchemaEngine(max_recursion="many")


def test_engine_rejects_non_callable_loader() -> None:
    with pytest.raises(ConfigurationError):
        SchemaEngine("not a loader")  # type: ignore[arg-type]


def test_loader_settings_normalise_schemes() -> None:
    settings = LoaderSettings(allowed_schemes=("HTTPS", "https", "File"))

    assert settings.allowed_schemes == ("https", "file")


def test_loader_settings_reject_empty_schemes() -> None:
    with pytest.raises(PydanticValidationError):
        LoaderSettings(allowed_schemes=())


def test_loader_settings_reject_non_positive_timeout() -> None:
    with pytest.raises(PydanticValidationError):
        LoaderSettings(http_timeout=0)


def test_engine_rejects_misspelled_override() -> None:
    with pytest.raises(PydanticValidationError):
        SchemaEngine(max_recurson=1)

    with pytest.raises(PydanticValidationError):
        EngineSettings(max_recurson=1)
