# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the validation engine and bundled loaders."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types import DEFAULT_DIALECT

DEFAULT_MAX_RECURSION: Final[int] = 5
DEFAULT_HTTP_TIMEOUT: Final[float] = 30.0
DEFAULT_USER_AGENT: Final[str] = "schemagraph/1.0"
DEFAULT_ALLOWED_SCHEMES: Final[tuple[str, ...]] = ("http", "https", "file")


class EngineSettings(BaseModel):
    """Tunable behaviour of :class:`~schemagraph.engine.SchemaEngine`."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    max_recursion: int = Field(default=DEFAULT_MAX_RECURSION, ge=0)
    default_dialect: str = DEFAULT_DIALECT
    discover_dialects: bool = True


class LoaderSettings(BaseModel):
    """Transport settings for :class:`~schemagraph.loaders.UrlSchemaLoader`."""

    model_config = ConfigDict(frozen=True)

    http_timeout: float = Field(default=DEFAULT_HTTP_TIMEOUT, gt=0)
    user_agent: str = DEFAULT_USER_AGENT
    allowed_schemes: tuple[str, ...] = DEFAULT_ALLOWED_SCHEMES

    @field_validator("allowed_schemes")
    @classmethod
    def normalise_schemes(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        """Normalise scheme names to lower case and reject empty lists."""

        schemes = tuple(dict.fromkeys(scheme.lower() for scheme in value if scheme))
        if not schemes:
            raise ValueError("at least one URI scheme must be allowed")
        return schemes


__all__ = [
    "DEFAULT_ALLOWED_SCHEMES",
    "DEFAULT_HTTP_TIMEOUT",
    "DEFAULT_MAX_RECURSION",
    "DEFAULT_USER_AGENT",
    "EngineSettings",
    "LoaderSettings",
]
