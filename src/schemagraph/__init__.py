# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JSON Schema registry, ``$ref`` resolution and reference-graph closure."""

from __future__ import annotations

from . import loaders
from .config import EngineSettings, LoaderSettings
from .context import ValidationContext
from .dialects import DialectRegistry
from .engine import SchemaEngine
from .errors import (
    ConfigurationError,
    DepthExceededError,
    FormatValidationError,
    LoaderAsyncError,
    MissingSchemaError,
    ReferenceClosureError,
    SchemaGraphError,
    SchemaLoaderError,
    SchemaLoadFailure,
    UnsupportedDialectError,
    ValidationError,
)
from .loader import ReferenceLoader
from .registry import SchemaRegistry
from .types import DRAFT04_DIALECT, LATEST_DIALECT_ALIAS

__all__ = [
    "ConfigurationError",
    "DRAFT04_DIALECT",
    "DepthExceededError",
    "DialectRegistry",
    "EngineSettings",
    "FormatValidationError",
    "LATEST_DIALECT_ALIAS",
    "LoaderAsyncError",
    "LoaderSettings",
    "MissingSchemaError",
    "ReferenceClosureError",
    "ReferenceLoader",
    "SchemaEngine",
    "SchemaGraphError",
    "SchemaLoadFailure",
    "SchemaLoaderError",
    "SchemaRegistry",
    "UnsupportedDialectError",
    "ValidationContext",
    "ValidationError",
    "loaders",
]
