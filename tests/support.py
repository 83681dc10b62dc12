# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""In-memory loaders shared by the test-suite."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping

from schemagraph.errors import SchemaLoadFailure
from schemagraph.types import JSONValue


class MemoryLoader:
    """Coroutine loader serving documents from a dict and recording requests."""

    def __init__(self, documents: Mapping[str, JSONValue], *, delay: float = 0.0) -> None:
        self.documents = dict(documents)
        self.delay = delay
        self.calls: list[str] = []

    async def __call__(self, ref: str) -> JSONValue:
        self.calls.append(ref)
        await asyncio.sleep(self.delay)
        try:
            return self.documents[ref]
        except KeyError as exc:
            raise SchemaLoadFailure(ref, "not found") from exc


class CallbackMemoryLoader:
    """Callback-style loader answering on the next loop iteration."""

    def __init__(self, documents: Mapping[str, JSONValue], *, repeat_done: bool = False) -> None:
        self.documents = dict(documents)
        self.repeat_done = repeat_done
        self.calls: list[str] = []

    def __call__(self, ref: str, done: Callable[[BaseException | None, JSONValue | None], None]) -> None:
        self.calls.append(ref)
        loop = asyncio.get_running_loop()
        if ref in self.documents:
            loop.call_soon(done, None, self.documents[ref])
        else:
            loop.call_soon(done, SchemaLoadFailure(ref, "not found"), None)
        if self.repeat_done:
            loop.call_soon(done, None, {"type": "null"})


__all__ = ["CallbackMemoryLoader", "MemoryLoader"]
