# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Canonical storage of schemas keyed by base URI with fragment indexing."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from .errors import SchemaGraphError
from .resolution import (
    escape_pointer_segment,
    resolve_pointer,
    resolve_reference,
    resolve_uri,
    schema_id_of,
    split_fragment,
)
from .types import REF_KEY, ROOT_POINTER, JSONValue, SchemaMapping

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class RegistryEntry:
    """Top-level schema stored under one base URI.

    Attributes:
        schema: Canonical schema object for the base URI.
        fragments: Named fragment identifiers mapped to ``#``-rooted JSON Pointers.
    """

    schema: SchemaMapping
    fragments: dict[str, str] = field(default_factory=dict)


class SchemaRegistry:
    """Index schemas and their sub-schemas by URI and JSON Pointer.

    Entries are never evicted; a registry lives as long as the engine that
    owns it.  Registration is idempotent per base URI, which also breaks
    cycles between schemas that share object identity.
    """

    def __init__(self) -> None:
        """Create an empty registry."""

        self._entries: dict[str, RegistryEntry] = {}
        self._refs: dict[str, None] = {}
        self._scopes: dict[int, str] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, uri: object) -> bool:
        return isinstance(uri, str) and self.is_registered(uri)

    @property
    def base_uris(self) -> tuple[str, ...]:
        """Return registered base URIs in registration order."""

        return tuple(self._entries)

    def register(
        self,
        schema: SchemaMapping,
        resolution_scope: str | None = None,
        fallback_id: str | None = None,
        path: str = ROOT_POINTER,
    ) -> None:
        """Register ``schema`` and every object-valued sub-schema it contains.

        Args:
            schema: Schema object to register.
            resolution_scope: Base URI used to resolve a relative ``id``.
            fallback_id: Identifier used when ``schema`` declares none.
            path: JSON Pointer of ``schema`` within its top-level document.

        Raises:
            SchemaGraphError: If ``schema`` is not a JSON object.
        """

        if not isinstance(schema, Mapping):
            raise SchemaGraphError(f"cannot register {type(schema).__name__}: schemas must be JSON objects")
        self._register_node(schema, resolution_scope, fallback_id, path)

    def alias(self, uri: str, schema: SchemaMapping) -> None:
        """Store ``schema`` under ``uri`` without walking it again.

        Used when a fetched document declares an identifier other than the
        URI it was fetched from.

        Args:
            uri: URI the document was requested as.
            schema: Document returned for ``uri``.
        """

        base, _ = split_fragment(uri)
        if base and base not in self._entries:
            LOGGER.debug("aliasing schema under %s", base)
            self._entries[base] = RegistryEntry(schema=schema)

    def get_schema(self, resolved_id: str) -> JSONValue | None:
        """Return the schema addressed by ``resolved_id``.

        Args:
            resolved_id: Absolute URI, optionally with a JSON Pointer or named fragment.

        Returns:
            JSONValue | None: The schema or sub-schema, or ``None`` when unknown.
        """

        base, fragment = split_fragment(resolved_id)
        entry = self._entries.get(base)
        if entry is None:
            return None
        if not fragment:
            return entry.schema
        if fragment.startswith("/"):
            pointer = fragment
        else:
            pointer = entry.fragments.get(fragment, fragment)
        found, value = resolve_pointer(entry.schema, pointer)
        return value if found else None

    get = get_schema

    def is_registered(self, schema_id: str) -> bool:
        """Return ``True`` when ``schema_id`` is known to the registry.

        Args:
            schema_id: Identifier with an optional fragment.

        Returns:
            bool: Whether the base URI is registered and the fragment resolves.
        """

        base, fragment = split_fragment(schema_id)
        if base not in self._entries:
            return False
        return not fragment or self.get_schema(schema_id) is not None

    def get_missing_schemas(self) -> list[str]:
        """Return referenced base URIs that have not been registered yet.

        Returns:
            list[str]: Base URIs in the order their references were first seen.
        """

        missing: dict[str, None] = {}
        for ref in self._refs:
            base, _ = split_fragment(ref)
            if base and base not in self._entries:
                missing.setdefault(base)
        return list(missing)

    def scope_for(self, node: object) -> str | None:
        """Return the resolution scope recorded for a registered schema node.

        Args:
            node: Schema object reachable from a registered document.

        Returns:
            str | None: Base URI in effect at ``node``, or ``None`` when unknown.
        """

        return self._scopes.get(id(node))

    def _register_node(
        self,
        node: SchemaMapping,
        scope: str | None,
        fallback_id: str | None,
        path: str,
    ) -> None:
        candidate = schema_id_of(node) or fallback_id
        if candidate:
            scope = resolve_uri(scope, candidate)
            base, fragment = split_fragment(scope)
            if not fragment:
                if base in self._entries:
                    return
                LOGGER.debug("registering schema %s", base)
                self._entries[base] = RegistryEntry(schema=node)
                path = ROOT_POINTER
            else:
                entry = self._entries.get(base)
                if entry is not None:
                    entry.fragments.setdefault(fragment, path)
        self._index_node(node, scope)

        for key, value in node.items():
            if isinstance(value, Mapping):
                self._register_node(value, scope, None, f"{path}/{escape_pointer_segment(key)}")
            elif _is_array(value):
                for item in value:
                    self._walk_array_item(item, scope)

    def _walk_array_item(self, item: JSONValue, scope: str | None) -> None:
        # Array members are not registered; they only contribute refs and scopes.
        if isinstance(item, Mapping):
            declared = schema_id_of(item)
            if declared:
                scope = resolve_uri(scope, declared)
            self._index_node(item, scope)
            for value in item.values():
                self._walk_array_item(value, scope)
        elif _is_array(item):
            for value in item:
                self._walk_array_item(value, scope)

    def _index_node(self, node: SchemaMapping, scope: str | None) -> None:
        if scope is not None:
            self._scopes.setdefault(id(node), scope)
        ref = node.get(REF_KEY)
        if isinstance(ref, str):
            self._refs.setdefault(resolve_reference(scope, ref))


def _is_array(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


__all__ = ["RegistryEntry", "SchemaRegistry"]
