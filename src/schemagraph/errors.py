# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Error records returned by validation and exceptions raised internally.

Validation failures are plain data: every public ``validate`` entry point
returns (or delivers) a list of :class:`ValidationError` records and never
raises them.  The exception classes at the bottom of this module are used
between collaborators (loaders, the reference loader, the registry) and are
converted into records before they reach the caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import ClassVar

from .types import JSONValue


@dataclass(frozen=True, slots=True)
class ValidationError:
    """Describe a single validation failure.

    Attributes:
        resolution_scope: Base URI in effect where the failure was detected.
        instance_context: JSON Pointer (``#/a/0``) locating the offending value.
        keyword: Schema keyword that produced the failure, when known.
        attribute: Keyword argument or format name involved, when known.
        value: Offending instance value.
        description: Human-readable explanation.
    """

    kind: ClassVar[str] = "ValidationError"

    resolution_scope: str | None = None
    instance_context: str | None = None
    keyword: str | None = None
    attribute: JSONValue | None = None
    value: object = None
    description: str = ""

    def rebase(self, prefix: str) -> ValidationError:
        """Return a copy whose instance context is nested under ``prefix``.

        Args:
            prefix: Instance context of the location the record was produced for.

        Returns:
            ValidationError: Record with the joined instance context.
        """

        if self.instance_context is None:
            return self
        return replace(self, instance_context=join_pointer(prefix, self.instance_context))

    def to_dict(self) -> dict[str, object]:
        """Return the record using the camelCase wire shape.

        Returns:
            dict[str, object]: Serialisable mapping describing the error.
        """

        payload: dict[str, object] = {
            "kind": self.kind,
            "resolutionScope": self.resolution_scope,
            "instanceContext": self.instance_context,
            "keyword": self.keyword,
            "value": self.value,
            "description": self.description,
        }
        if self.attribute is not None:
            payload["attribute"] = self.attribute
        return payload

    def __str__(self) -> str:
        location = self.instance_context or "#"
        if self.keyword:
            return f"{location}: {self.keyword}: {self.description}"
        return f"{location}: {self.description}"


@dataclass(frozen=True, slots=True)
class FormatValidationError(ValidationError):
    """Failure reported by a ``format`` check."""

    kind: ClassVar[str] = "FormatValidationError"


@dataclass(frozen=True, slots=True)
class LoaderAsyncError(ValidationError):
    """A loader was configured but ``validate`` was called synchronously."""

    kind: ClassVar[str] = "LoaderAsyncError"


@dataclass(frozen=True, slots=True)
class SchemaLoaderError(ValidationError):
    """A referenced schema could not be fetched by the loader."""

    kind: ClassVar[str] = "SchemaLoaderError"


@dataclass(frozen=True, slots=True)
class DepthExceededError(ValidationError):
    """Fetching referenced schemas would exceed the recursion ceiling."""

    kind: ClassVar[str] = "DepthExceededError"


@dataclass(frozen=True, slots=True)
class UnsupportedDialectError(ValidationError):
    """The schema declares a ``$schema`` no runner is registered for."""

    kind: ClassVar[str] = "UnsupportedDialectError"


@dataclass(frozen=True, slots=True)
class MissingSchemaError(ValidationError):
    """A ``$ref`` target is not available in the registry."""

    kind: ClassVar[str] = "MissingSchemaError"


def join_pointer(prefix: str, suffix: str) -> str:
    """Join two ``#``-rooted JSON Pointer fragments.

    Args:
        prefix: Outer pointer such as ``#/items/0``.
        suffix: Inner pointer relative to ``prefix`` such as ``#/name``.

    Returns:
        str: Combined pointer (``#/items/0/name``).
    """

    head = prefix.rstrip("/") if prefix not in ("", "#") else "#"
    tail = suffix[1:] if suffix.startswith("#") else suffix
    if not tail:
        return head
    if not tail.startswith("/"):
        tail = f"/{tail}"
    return f"{head}{tail}"


class SchemaGraphError(RuntimeError):
    """Base class for exceptions raised by schemagraph collaborators."""


class ConfigurationError(SchemaGraphError):
    """Raised when engine configuration is inconsistent."""


class SchemaLoadFailure(SchemaGraphError):
    """Raised by loaders when a referenced schema cannot be fetched."""

    def __init__(self, ref: str, message: str) -> None:
        """Create the failure for ``ref`` with a human-readable ``message``."""

        super().__init__(f"{ref}: {message}")
        self.ref = ref
        self.reason = message


class ReferenceClosureError(SchemaGraphError):
    """Raised when the reference graph cannot be closed before validation."""

    def __init__(self, records: Iterable[ValidationError]) -> None:
        """Capture the error records that end the closure attempt."""

        self.records: Sequence[ValidationError] = tuple(records)
        super().__init__("; ".join(record.description for record in self.records))


__all__ = [
    "ConfigurationError",
    "DepthExceededError",
    "FormatValidationError",
    "LoaderAsyncError",
    "MissingSchemaError",
    "ReferenceClosureError",
    "SchemaGraphError",
    "SchemaLoadFailure",
    "SchemaLoaderError",
    "UnsupportedDialectError",
    "ValidationError",
    "join_pointer",
]
