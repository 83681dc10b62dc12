# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Public validation entry point orchestrating registry, loader and dialects."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Coroutine, Mapping
from typing import Any, TypeAlias, cast

from .config import EngineSettings
from .context import ActiveRef, ValidationContext
from .dialects import DialectRegistry
from .errors import (
    ConfigurationError,
    LoaderAsyncError,
    ReferenceClosureError,
    UnsupportedDialectError,
    ValidationError,
)
from .formats import FormatHandlerRegistry, FormatPredicate
from .hashing import anonymous_schema_id
from .loader import ReferenceLoader, SchemaLoader
from .registry import SchemaRegistry
from .resolution import resolve_uri, schema_id_of
from .types import DIALECT_KEY, REF_KEY, ROOT_POINTER, SchemaMapping

LOGGER = logging.getLogger(__name__)

ResultCallback: TypeAlias = Callable[[list[ValidationError] | None], object]

NO_SCHEMA_DESCRIPTION = "No schema provided for validation."
LOADER_IGNORED_DESCRIPTION = (
    "You provided a loader callback, but you are calling validate() synchronously. "
    "Your loader will be ignored and validation will fail if any missing $refs are encountered."
)


class SchemaEngine:
    """Validate JSON instances against a growing set of registered schemas.

    The engine owns one :class:`SchemaRegistry`, one format handler registry
    and (when a loader is supplied) one :class:`ReferenceLoader`.  All of them
    live as long as the engine and are shared by every ``validate`` call,
    which is how fetched schemas are cached and duplicate fetches avoided.
    """

    def __init__(
        self,
        loader: SchemaLoader | None = None,
        *,
        settings: EngineSettings | None = None,
        registry: SchemaRegistry | None = None,
        dialects: DialectRegistry | None = None,
        **overrides: object,
    ) -> None:
        """Create an engine.

        Args:
            loader: Optional callback-style or coroutine loader for missing refs.
            settings: Engine settings; defaults are used when omitted.
            registry: Registry to use instead of a fresh one.
            dialects: Dialect runners to use instead of the built-in set.
            **overrides: Individual :class:`EngineSettings` fields to override.

        Raises:
            ConfigurationError: If ``loader`` is not callable.
            pydantic.ValidationError: If a setting override is invalid.
        """

        if loader is not None and not callable(loader):
            raise ConfigurationError(f"loader must be callable, got {type(loader).__name__}")
        base = settings or EngineSettings()
        if overrides:
            base = EngineSettings.model_validate({**base.model_dump(), **overrides})
        self._settings = base
        self._registry = registry if registry is not None else SchemaRegistry()
        self._dialects = (
            dialects if dialects is not None else DialectRegistry.with_defaults(discover=base.discover_dialects)
        )
        self._formats = FormatHandlerRegistry()
        self._loader = loader
        self._reference_loader = ReferenceLoader(self._registry, loader) if loader is not None else None
        self._pending: set[asyncio.Task[None]] = set()

    @property
    def settings(self) -> EngineSettings:
        """Return the live settings model."""

        return self._settings

    @property
    def max_recursion(self) -> int:
        """Return the reference-closure depth ceiling."""

        return self._settings.max_recursion

    @max_recursion.setter
    def max_recursion(self, value: int) -> None:
        self._settings.max_recursion = value

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    @property
    def dialects(self) -> DialectRegistry:
        return self._dialects

    @property
    def format_handlers(self) -> FormatHandlerRegistry:
        return self._formats

    @property
    def loader(self) -> SchemaLoader | None:
        return self._loader

    def register(
        self,
        schema: SchemaMapping,
        resolution_scope: str | None = None,
        fallback_id: str | None = None,
    ) -> None:
        """Register ``schema`` and its sub-schemas with the engine's registry."""

        self._registry.register(schema, resolution_scope, fallback_id)

    def is_registered(self, schema_id: str) -> bool:
        """Return ``True`` when ``schema_id`` resolves in the registry."""

        return self._registry.is_registered(schema_id)

    def get_missing_schemas(self) -> list[str]:
        """Return referenced base URIs that are not registered yet."""

        return self._registry.get_missing_schemas()

    def add_format(self, name: str, handler: FormatPredicate) -> None:
        """Register a custom ``format`` handler.

        Args:
            name: Format name used in schemas.
            handler: Predicate ``(value, schema) -> None | str``.
        """

        self._formats.add(name, handler)

    def validate(
        self,
        instance: object,
        schema_or_id: SchemaMapping | str | None,
        callback: ResultCallback | None = None,
    ) -> list[ValidationError] | None:
        """Validate ``instance`` against a schema or a registered schema id.

        Without ``callback`` the call is synchronous and returns the error
        list; no I/O happens, so a configured loader is ignored and a
        :class:`LoaderAsyncError` is placed first in the result.  With
        ``callback`` the result is always delivered on a later iteration of
        the event loop as ``callback(None)`` on success or ``callback(errors)``
        on failure; referenced schemas are fetched first when a loader is
        configured.  Inside a running event loop the callback runs only after
        ``validate`` has returned.  With no running loop the work is driven on
        a private loop by ``asyncio.run``, so the callback has already been
        called by the time ``validate`` returns, though never from inside the
        code that computed the result.  Faults raised by a dialect runner or
        a format handler are reported as a single error record, never raised.

        Args:
            instance: Value to validate.
            schema_or_id: Schema object, or the id of a registered schema.
            callback: Optional result callback.

        Returns:
            list[ValidationError] | None: Errors for synchronous calls, ``None``
            when a callback was supplied.
        """

        if callback is None:
            prepared = self._prepare(schema_or_id)
            if isinstance(prepared, ValidationError):
                return [prepared]
            schema, scope = prepared
            errors: list[ValidationError] = []
            if self._loader is not None:
                LOGGER.warning("loader ignored: validate() called without a callback")
                errors.append(LoaderAsyncError(description=LOADER_IGNORED_DESCRIPTION))
            errors.extend(self._validate_guarded(instance, schema, scope))
            return errors

        if self._loader is None:
            errors = self._validate_now(instance, schema_or_id)
            self._dispatch(self._deliver(callback, errors))
        else:
            self._dispatch(self._validate_and_deliver(instance, schema_or_id, callback))
        return None

    async def validate_async(
        self,
        instance: object,
        schema_or_id: SchemaMapping | str | None,
    ) -> list[ValidationError]:
        """Close the reference graph, then validate ``instance``.

        Args:
            instance: Value to validate.
            schema_or_id: Schema object, or the id of a registered schema.

        Returns:
            list[ValidationError]: Every error found; empty when valid.
        """

        prepared = self._prepare(schema_or_id)
        if isinstance(prepared, ValidationError):
            return [prepared]
        schema, scope = prepared
        if self._reference_loader is not None:
            try:
                await self._reference_loader.close_reference_graph(self._settings.max_recursion)
            except ReferenceClosureError as exc:
                return list(exc.records)
        return self._validate_guarded(instance, schema, scope)

    def _validate_internal(
        self,
        instance: object,
        schema: SchemaMapping,
        resolution_scope: str | None = None,
        instance_context: str | None = None,
        *,
        active_refs: frozenset[ActiveRef] = frozenset(),
    ) -> list[ValidationError]:
        """Run the dialect runner for ``schema`` and return its records.

        Args:
            instance: Value to validate.
            schema: Schema object (top-level or dereferenced sub-schema).
            resolution_scope: Base URI in effect for ``schema``.
            instance_context: Pointer of ``instance`` in the top-level instance.
            active_refs: ``$ref`` targets already entered on this call chain.

        Returns:
            list[ValidationError]: Records produced by the runner, or a single
            :class:`UnsupportedDialectError`.
        """

        declared = schema_id_of(schema)
        if resolution_scope is None:
            resolution_scope = declared or anonymous_schema_id(schema)
            self._registry.register(schema, fallback_id=resolution_scope)
        elif declared:
            resolution_scope = resolve_uri(resolution_scope, declared)
        if "#" not in resolution_scope:
            resolution_scope += "#"

        dialect = schema.get(DIALECT_KEY)
        if not isinstance(dialect, str):
            dialect = self._settings.default_dialect
        runner = self._dialects.get(dialect)
        if runner is None:
            supported = ", ".join(self._dialects.supported())
            return [
                UnsupportedDialectError(
                    resolution_scope=resolution_scope,
                    instance_context=instance_context or ROOT_POINTER,
                    keyword=DIALECT_KEY,
                    value=dialect,
                    description=f"unsupported JSON Schema version {dialect!r}; supported versions: {supported}",
                ),
            ]

        context = ValidationContext(
            instance=instance,
            schema=schema,
            resolution_scope=resolution_scope,
            registry=self._registry,
            format_handlers=self._formats,
            validate=self._validate_internal,
            instance_context=instance_context or ROOT_POINTER,
            active_refs=active_refs,
        )
        return list(runner(context))

    def _prepare(self, schema_or_id: SchemaMapping | str | None) -> tuple[SchemaMapping, str] | ValidationError:
        """Resolve ids, assign an identifier and register the schema."""

        if isinstance(schema_or_id, str):
            target = self._registry.get_schema(schema_or_id)
            if isinstance(target, Mapping):
                scope = schema_or_id if "#" in schema_or_id else f"{schema_or_id}#"
                return cast(SchemaMapping, target), scope
            schema_or_id = {REF_KEY: schema_or_id}
        if not isinstance(schema_or_id, Mapping):
            return ValidationError(instance_context=ROOT_POINTER, description=NO_SCHEMA_DESCRIPTION)

        schema = cast(SchemaMapping, schema_or_id)
        declared = schema_id_of(schema)
        if declared:
            self._registry.register(schema)
            scope = resolve_uri(None, declared)
            return schema, scope if "#" in scope else f"{scope}#"
        scope = anonymous_schema_id(schema)
        self._registry.register(schema, fallback_id=scope)
        canonical = self._registry.get_schema(scope)
        return (cast(SchemaMapping, canonical) if isinstance(canonical, Mapping) else schema), scope

    def _validate_now(self, instance: object, schema_or_id: SchemaMapping | str | None) -> list[ValidationError]:
        prepared = self._prepare(schema_or_id)
        if isinstance(prepared, ValidationError):
            return [prepared]
        schema, scope = prepared
        return self._validate_guarded(instance, schema, scope)

    def _validate_guarded(self, instance: object, schema: SchemaMapping, scope: str) -> list[ValidationError]:
        """Run ``_validate_internal`` and turn a runner or handler fault into one record."""

        try:
            return self._validate_internal(instance, schema, scope)
        except Exception as exc:  # runner and format handler faults are reported, not raised
            LOGGER.warning("validation against %s aborted: %s", scope, exc, exc_info=True)
            return [
                ValidationError(
                    resolution_scope=scope,
                    instance_context=ROOT_POINTER,
                    value=type(exc).__name__,
                    description=f"validation aborted by {type(exc).__name__}: {exc}",
                ),
            ]

    async def _validate_and_deliver(
        self,
        instance: object,
        schema_or_id: SchemaMapping | str | None,
        callback: ResultCallback,
    ) -> None:
        errors = await self.validate_async(instance, schema_or_id)
        await self._deliver(callback, errors)

    @staticmethod
    async def _deliver(callback: ResultCallback, errors: list[ValidationError]) -> None:
        loop = asyncio.get_running_loop()
        loop.call_soon(callback, errors or None)
        await asyncio.sleep(0)

    def _dispatch(self, work: Coroutine[Any, Any, None]) -> None:
        """Run ``work`` on the running loop, or on a private loop when none runs."""

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(work)
            return
        task = loop.create_task(work)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


__all__ = ["LOADER_IGNORED_DESCRIPTION", "NO_SCHEMA_DESCRIPTION", "ResultCallback", "SchemaEngine"]
