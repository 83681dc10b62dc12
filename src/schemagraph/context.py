# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Per-call bundle handed to dialect runners."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Protocol
from urllib.parse import urlsplit

from .errors import MissingSchemaError, ValidationError
from .resolution import resolve_reference
from .types import REF_KEY, ROOT_POINTER, JSONValue, SchemaMapping

if TYPE_CHECKING:
    from .formats import FormatHandler
    from .registry import SchemaRegistry

ActiveRef = tuple[str, int]
_REMOTE_SCHEMES = frozenset({"http", "https"})


class ValidateCallback(Protocol):
    """Signature of the engine callback used to validate dereferenced schemas."""

    def __call__(
        self,
        instance: object,
        schema: SchemaMapping,
        resolution_scope: str | None = None,
        instance_context: str | None = None,
        *,
        active_refs: frozenset[ActiveRef] = frozenset(),
    ) -> list[ValidationError]:
        """Validate ``instance`` against ``schema`` and return the error records."""


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Immutable inputs for one dialect runner invocation.

    Attributes:
        instance: Value being validated.
        schema: Schema node applied to ``instance``.
        resolution_scope: Base URI in effect for ``schema``.
        instance_context: JSON Pointer of ``instance`` in the top-level instance.
        registry: Shared schema registry.
        format_handlers: Shared custom ``format`` handlers keyed by name.
        validate: Engine callback used to validate dereferenced schemas.
        active_refs: ``$ref`` targets entered for the same instance along this call chain.
    """

    instance: object
    schema: SchemaMapping
    resolution_scope: str
    registry: SchemaRegistry
    format_handlers: Mapping[str, FormatHandler]
    validate: ValidateCallback
    instance_context: str = ROOT_POINTER
    active_refs: frozenset[ActiveRef] = field(default_factory=frozenset)

    def clone(self, **changes: object) -> ValidationContext:
        """Return a shallow copy with ``changes`` applied.

        Args:
            **changes: Field overrides for the derived context.

        Returns:
            ValidationContext: New context; ``self`` is left untouched.
        """

        return replace(self, **changes)

    def scope_of(self, node: object) -> str:
        """Return the resolution scope of ``node``, defaulting to this context's scope."""

        return self.registry.scope_for(node) or self.resolution_scope

    def follow_ref(
        self,
        ref: str,
        *,
        holder: SchemaMapping,
        instance: object,
        instance_context: str = ROOT_POINTER,
    ) -> list[ValidationError]:
        """Dereference ``ref`` and validate ``instance`` against its target.

        Args:
            ref: Raw ``$ref`` value.
            holder: Schema node containing the ``$ref``.
            instance: Value the referencing schema applies to.
            instance_context: Pointer reported for errors produced by the target.

        Returns:
            list[ValidationError]: Errors produced by the target schema, a single
            missing-schema record, or a single record for a circular reference.
        """

        target_uri = resolve_reference(self.scope_of(holder), ref)
        marker = (target_uri, id(instance))
        if marker in self.active_refs:
            return [
                ValidationError(
                    resolution_scope=self.resolution_scope,
                    instance_context=instance_context,
                    keyword=REF_KEY,
                    attribute=ref,
                    value=instance,
                    description=f"circular $ref {target_uri} does not consume the instance",
                ),
            ]
        target = self.registry.get_schema(target_uri)
        if not isinstance(target, Mapping):
            return [_missing_schema(target_uri, instance_context)]
        return self.validate(
            instance,
            target,
            target_uri,
            instance_context,
            active_refs=self.active_refs | {marker},
        )


def _missing_schema(target_uri: str, instance_context: str) -> ValidationError:
    description = f"schema not available: {target_uri}"
    if urlsplit(target_uri).scheme in _REMOTE_SCHEMES:
        description += (
            " [remote schemas are fetched only when validate() is called asynchronously with a loader]"
        )
    value: JSONValue = target_uri
    return MissingSchemaError(
        instance_context=instance_context,
        keyword=REF_KEY,
        value=value,
        description=description,
    )


__all__ = ["ActiveRef", "ValidateCallback", "ValidationContext"]
