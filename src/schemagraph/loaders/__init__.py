# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Ready-made coroutine loaders for :class:`~schemagraph.engine.SchemaEngine`.

``http`` is a shared :class:`UrlSchemaLoader` with default settings::

    from schemagraph import SchemaEngine, loaders

    engine = SchemaEngine(loaders.http)
    errors = await engine.validate_async(instance, schema)
"""

from __future__ import annotations

import asyncio
import logging
import ssl
import urllib.error
import urllib.request
from pathlib import Path
from urllib.parse import urlsplit

from ..config import LoaderSettings
from ..errors import SchemaGraphError, SchemaLoadFailure
from ..io import ensure_json_object, load_schema, parse_document
from ..resolution import split_fragment
from ..types import SchemaMapping

LOGGER = logging.getLogger(__name__)

_ACCEPT = "application/schema+json, application/json;q=0.9, */*;q=0.1"
_JSON_SUFFIX = ".json"


class UrlSchemaLoader:
    """Fetch schemas over ``http``, ``https`` or ``file`` URLs."""

    def __init__(self, settings: LoaderSettings | None = None) -> None:
        """Create a loader using ``settings`` (defaults when omitted)."""

        self.settings = settings or LoaderSettings()

    async def __call__(self, ref: str) -> SchemaMapping:
        """Fetch the document addressed by ``ref`` without blocking the event loop.

        Args:
            ref: Absolute URI of the schema; any fragment is ignored.

        Returns:
            SchemaMapping: Decoded schema document.

        Raises:
            SchemaLoadFailure: On a disallowed scheme, transport, status or decode failure.
        """

        url, _ = split_fragment(ref)
        scheme = urlsplit(url).scheme.lower()
        if scheme not in self.settings.allowed_schemes:
            raise SchemaLoadFailure(ref, f"unsupported URI scheme {scheme or '(none)'!r}")
        payload = await asyncio.to_thread(self._read, ref, url)
        try:
            return ensure_json_object(parse_document(payload, context=url), context=url)
        except SchemaGraphError as exc:
            raise SchemaLoadFailure(ref, str(exc)) from exc

    def _read(self, ref: str, url: str) -> bytes:
        request = urllib.request.Request(
            url,
            headers={"User-Agent": self.settings.user_agent, "Accept": _ACCEPT},
        )
        opener = urllib.request.build_opener(urllib.request.HTTPSHandler(context=ssl.create_default_context()))
        LOGGER.debug("fetching %s", url)
        try:
            with opener.open(request, timeout=self.settings.http_timeout) as response:
                return response.read()
        except urllib.error.HTTPError as exc:
            raise SchemaLoadFailure(ref, f"HTTP {exc.code} {exc.reason}") from exc
        except urllib.error.URLError as exc:
            raise SchemaLoadFailure(ref, str(exc.reason)) from exc
        except (OSError, ValueError) as exc:
            raise SchemaLoadFailure(ref, str(exc)) from exc


class DirectoryLoader:
    """Serve schemas whose URI starts with ``prefix`` from a local directory.

    ``<prefix>/a/b`` maps to ``<directory>/a/b`` or, when that file does not
    exist, ``<directory>/a/b.json``.  Paths escaping ``directory`` are refused.
    """

    def __init__(self, prefix: str, directory: Path | str) -> None:
        """Map URIs under ``prefix`` onto files below ``directory``."""

        self.prefix = prefix
        self.directory = Path(directory).resolve()

    async def __call__(self, ref: str) -> SchemaMapping:
        """Read the schema for ``ref``.

        Raises:
            SchemaLoadFailure: If ``ref`` is outside the prefix or the file is missing or invalid.
        """

        path = self.path_for(ref)
        try:
            return await asyncio.to_thread(load_schema, path)
        except FileNotFoundError as exc:
            raise SchemaLoadFailure(ref, f"no schema file at {path}") from exc
        except SchemaGraphError as exc:
            raise SchemaLoadFailure(ref, str(exc)) from exc

    def path_for(self, ref: str) -> Path:
        """Return the file that backs ``ref``.

        Raises:
            SchemaLoadFailure: If ``ref`` does not start with the prefix or escapes the directory.
        """

        base, _ = split_fragment(ref)
        if not base.startswith(self.prefix):
            raise SchemaLoadFailure(ref, f"not under {self.prefix}")
        relative = base[len(self.prefix) :].lstrip("/")
        if not relative:
            raise SchemaLoadFailure(ref, "no file name after the prefix")
        candidate = (self.directory / relative).resolve()
        if not candidate.is_relative_to(self.directory):
            raise SchemaLoadFailure(ref, "path escapes the schema directory")
        if candidate.is_file():
            return candidate
        return candidate.with_name(candidate.name + _JSON_SUFFIX)


http = UrlSchemaLoader()

__all__ = ["DirectoryLoader", "UrlSchemaLoader", "http"]
