# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Dialect runner registry and entry-point discovery.

A dialect runner interprets the keywords of one schema dialect (``$schema``
value).  Runners receive a :class:`~schemagraph.context.ValidationContext`
and return the ordered list of error records for that context.  Packages can
contribute runners through the ``schemagraph.dialects`` entry-point group;
each entry point loads a factory returning a mapping of dialect URI to runner.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterator, Mapping, Sequence
from importlib import metadata
from typing import TYPE_CHECKING, TypeAlias, cast

from ..errors import ValidationError
from ..resolution import normalize_id
from ..types import DRAFT04_DIALECT, LATEST_DIALECT_ALIAS
from .draft04 import run_draft04

if TYPE_CHECKING:
    from ..context import ValidationContext

LOGGER = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "schemagraph.dialects"

DialectRunner: TypeAlias = Callable[["ValidationContext"], Sequence[ValidationError]]
DialectFactory: TypeAlias = Callable[[], Mapping[str, DialectRunner] | None]


class DialectRegistry:
    """Map dialect URIs to runners with fragment-insensitive lookups."""

    def __init__(self, runners: Mapping[str, DialectRunner] | None = None) -> None:
        """Create a registry seeded with ``runners``."""

        self._runners: dict[str, tuple[str, DialectRunner]] = {}
        for dialect, runner in (runners or {}).items():
            self.register(dialect, runner)

    @classmethod
    def with_defaults(cls, *, discover: bool = True) -> DialectRegistry:
        """Return a registry holding the built-in draft-04 runner.

        Args:
            discover: When ``True`` also load runners from installed entry points.

        Returns:
            DialectRegistry: Registry ready for use by an engine.
        """

        registry = cls({DRAFT04_DIALECT: run_draft04, LATEST_DIALECT_ALIAS: run_draft04})
        if discover:
            for factory in _discover_dialect_factories():
                registry.update(_invoke_factory(factory))
        return registry

    def register(self, dialect: str, runner: DialectRunner) -> None:
        """Register ``runner`` for ``dialect``, replacing any previous runner."""

        self._runners[normalize_id(dialect)] = (dialect, runner)

    def update(self, runners: Mapping[str, DialectRunner] | None) -> None:
        """Register every runner in ``runners``."""

        for dialect, runner in (runners or {}).items():
            self.register(dialect, runner)

    def get(self, dialect: str) -> DialectRunner | None:
        """Return the runner for ``dialect`` or ``None`` when unsupported."""

        found = self._runners.get(normalize_id(dialect))
        return found[1] if found is not None else None

    def supported(self) -> tuple[str, ...]:
        """Return the dialect URIs as they were registered."""

        return tuple(dialect for dialect, _ in self._runners.values())

    def __contains__(self, dialect: object) -> bool:
        return isinstance(dialect, str) and normalize_id(dialect) in self._runners

    def __iter__(self) -> Iterator[str]:
        return iter(self.supported())

    def __len__(self) -> int:
        return len(self._runners)


def _discover_dialect_factories() -> tuple[DialectFactory, ...]:
    """Discover dialect factories registered under :data:`ENTRY_POINT_GROUP`.

    Returns:
        tuple[DialectFactory, ...]: Loaded factories; broken entry points are skipped.
    """

    try:
        selected = metadata.entry_points(group=ENTRY_POINT_GROUP)
    except metadata.PackageNotFoundError:  # pragma: no cover - metadata failure fallback
        return ()
    factories: list[DialectFactory] = []
    for entry in selected:
        try:
            factories.append(cast(DialectFactory, entry.load()))
        except (AttributeError, ImportError, ValueError) as exc:
            LOGGER.warning("skipping dialect entry point %s: %s", entry.name, exc)
    return tuple(factories)


def _invoke_factory(factory: DialectFactory) -> Mapping[str, DialectRunner] | None:
    """Call ``factory`` and check that it produced a mapping of runners.

    Args:
        factory: Callable loaded from an entry point.

    Returns:
        Mapping[str, DialectRunner] | None: Runners contributed by the factory.
    """

    if not callable(factory) or inspect.isclass(factory):
        LOGGER.warning("dialect entry point %r is not a factory function", factory)
        return None
    result = factory()
    if result is None:
        return None
    if not isinstance(result, Mapping):
        LOGGER.warning("dialect factory %r returned %s, expected a mapping", factory, type(result).__name__)
        return None
    return result


__all__ = ["ENTRY_POINT_GROUP", "DialectFactory", "DialectRegistry", "DialectRunner", "run_draft04"]
