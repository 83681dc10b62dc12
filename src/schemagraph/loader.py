# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Asynchronous closure of the ``$ref`` graph before validation.

The reference loader repeatedly asks the registry which referenced documents
are still missing, fetches them through a caller-supplied loader, registers
the results and goes round again until nothing is missing or the depth
budget is spent.  Fetches inside one round run concurrently; rounds are
strictly sequential.  Every ref is requested at most once for the lifetime
of the owning engine, including across concurrent ``validate`` calls.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TypeAlias, cast

from .errors import DepthExceededError, ReferenceClosureError, SchemaLoaderError, SchemaLoadFailure
from .registry import SchemaRegistry
from .resolution import normalize_id
from .types import JSONValue, SchemaMapping

LOGGER = logging.getLogger(__name__)

DoneCallback: TypeAlias = Callable[[BaseException | None, JSONValue | None], None]
CallbackLoader: TypeAlias = Callable[[str, DoneCallback], None]
CoroutineLoader: TypeAlias = Callable[[str], Awaitable[JSONValue]]
SchemaLoader: TypeAlias = CallbackLoader | CoroutineLoader


def is_coroutine_loader(loader: object) -> bool:
    """Return ``True`` when ``loader`` is an ``async def`` callable.

    Args:
        loader: Function, bound method or callable instance.

    Returns:
        bool: ``True`` for coroutine loaders, ``False`` for callback loaders.
    """

    if inspect.iscoroutinefunction(loader):
        return True
    call = getattr(loader, "__call__", None)
    return call is not None and inspect.iscoroutinefunction(call)


@dataclass(frozen=True, slots=True)
class _Done:
    """``done(error, schema)`` callback handed to callback-style loaders."""

    owner: ReferenceLoader
    ref: str
    future: asyncio.Future[JSONValue]
    loop: asyncio.AbstractEventLoop

    def __call__(self, error: BaseException | None = None, schema: JSONValue | None = None) -> None:
        self.loop.call_soon_threadsafe(self.owner._settle, self.ref, self.future, error, schema)


class ReferenceLoader:
    """Fetch and register missing referenced schemas up to a depth bound."""

    def __init__(self, registry: SchemaRegistry, loader: SchemaLoader) -> None:
        """Bind the loader to ``registry``.

        Args:
            registry: Registry shared with the owning engine.
            loader: Callback-style ``loader(ref, done)`` or ``async def loader(ref)``.
        """

        self._registry = registry
        self._loader = loader
        self._coroutine = is_coroutine_loader(loader)
        self._requested: dict[str, asyncio.Future[JSONValue]] = {}
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def requested(self) -> tuple[str, ...]:
        """Return the normalised refs requested so far."""

        return tuple(self._requested)

    async def close_reference_graph(self, max_depth: int) -> None:
        """Fetch missing referenced schemas until the graph is closed.

        Args:
            max_depth: Number of fetch rounds allowed before giving up.

        Raises:
            ReferenceClosureError: When the depth budget is exhausted or any
                fetch awaited by this call failed.
        """

        depth = max_depth
        while True:
            fresh, in_flight = self._partition_missing()
            if fresh and depth <= 0:
                raise ReferenceClosureError([_depth_exceeded(fresh)])
            for ref in fresh:
                self._request(ref)
            awaited = [*in_flight, *fresh]
            if not awaited:
                return
            futures = [self._requested[normalize_id(ref)] for ref in awaited]
            pending = [future for future in futures if not future.done()]
            if pending:
                await asyncio.wait(pending)
            failures = [
                _load_failed(ref, error)
                for ref, error in zip(awaited, (future.exception() for future in futures), strict=True)
                if error is not None
            ]
            if failures:
                raise ReferenceClosureError(failures)
            if fresh:
                depth -= 1

    def _partition_missing(self) -> tuple[list[str], list[str]]:
        """Split missing refs into never-requested and already-requested ones."""

        fresh: list[str] = []
        in_flight: list[str] = []
        for ref in self._registry.get_missing_schemas():
            if self._registry.is_registered(ref):
                continue
            if normalize_id(ref) in self._requested:
                in_flight.append(ref)
            else:
                fresh.append(ref)
        return fresh, in_flight

    def _request(self, ref: str) -> None:
        """Record a pending future for ``ref`` and invoke the loader once."""

        loop = asyncio.get_running_loop()
        future: asyncio.Future[JSONValue] = loop.create_future()
        self._requested[normalize_id(ref)] = future
        LOGGER.debug("requesting referenced schema %s", ref)
        if self._coroutine:
            task = loop.create_task(self._fetch(ref, future))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return
        done = _Done(owner=self, ref=ref, future=future, loop=loop)
        try:
            cast(CallbackLoader, self._loader)(ref, done)
        except Exception as exc:  # loader faults become rejections of this ref only
            self._settle(ref, future, exc, None)

    async def _fetch(self, ref: str, future: asyncio.Future[JSONValue]) -> None:
        try:
            schema = await cast(CoroutineLoader, self._loader)(ref)
        except Exception as exc:  # loader faults become rejections of this ref only
            self._settle(ref, future, exc, None)
            return
        self._settle(ref, future, None, schema)

    def _settle(
        self,
        ref: str,
        future: asyncio.Future[JSONValue],
        error: BaseException | None,
        schema: JSONValue | None,
    ) -> None:
        """Register a fetched schema and resolve (or reject) its future."""

        if future.done():
            LOGGER.warning("loader reported %s more than once; ignoring the extra call", ref)
            return
        if error is not None:
            LOGGER.debug("loading %s failed: %s", ref, error)
            future.set_exception(_as_failure(ref, error))
            return
        if not isinstance(schema, Mapping):
            future.set_exception(SchemaLoadFailure(ref, "loader did not return a JSON object"))
            return
        document = cast(SchemaMapping, schema)
        if not self._registry.is_registered(ref):
            self._registry.register(document, ref, fallback_id=ref)
            if not self._registry.is_registered(ref):
                LOGGER.warning("schema fetched from %s declares a different id; registering it under both", ref)
                self._registry.alias(ref, document)
        future.set_result(schema)


def _as_failure(ref: str, error: BaseException) -> SchemaLoadFailure:
    if isinstance(error, SchemaLoadFailure):
        return error
    failure = SchemaLoadFailure(ref, str(error) or type(error).__name__)
    failure.__cause__ = error
    return failure


def _load_failed(ref: str, outcome: BaseException) -> SchemaLoaderError:
    reason = outcome.reason if isinstance(outcome, SchemaLoadFailure) else (str(outcome) or type(outcome).__name__)
    return SchemaLoaderError(
        value=ref,
        description=f"failed to load referenced schema {ref}: {reason}",
    )


def _depth_exceeded(refs: list[str]) -> DepthExceededError:
    return DepthExceededError(
        value=tuple(refs),
        description=(
            "would exceed max recursion depth fetching these referenced schemas "
            "(set max_recursion if you need to go deeper): " + ", ".join(refs)
        ),
    )


__all__ = [
    "CallbackLoader",
    "CoroutineLoader",
    "DoneCallback",
    "ReferenceLoader",
    "SchemaLoader",
    "is_coroutine_loader",
]
