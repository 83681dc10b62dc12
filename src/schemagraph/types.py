# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared type aliases and constants for schema registration and validation."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Final, TypeAlias

JSONPrimitive: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONPrimitive | Sequence["JSONValue"] | Mapping[str, "JSONValue"]
SchemaMapping: TypeAlias = Mapping[str, JSONValue]

DRAFT04_DIALECT: Final[str] = "http://json-schema.org/draft-04/schema#"
LATEST_DIALECT_ALIAS: Final[str] = "http://json-schema.org/schema#"
DEFAULT_DIALECT: Final[str] = DRAFT04_DIALECT

ANON_URI_SCHEME: Final[str] = "anon-schema"
ROOT_POINTER: Final[str] = "#"

ID_KEYS: Final[tuple[str, ...]] = ("id", "$id")
REF_KEY: Final[str] = "$ref"
DIALECT_KEY: Final[str] = "$schema"

__all__ = [
    "ANON_URI_SCHEME",
    "DEFAULT_DIALECT",
    "DIALECT_KEY",
    "DRAFT04_DIALECT",
    "ID_KEYS",
    "JSONPrimitive",
    "JSONValue",
    "LATEST_DIALECT_ALIAS",
    "REF_KEY",
    "ROOT_POINTER",
    "SchemaMapping",
]
