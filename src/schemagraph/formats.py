# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Registry of user-supplied ``format`` keyword handlers."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

from .errors import FormatValidationError, ValidationError
from .types import JSONValue

if TYPE_CHECKING:
    from .context import ValidationContext

FormatPredicate: TypeAlias = Callable[[object, JSONValue], object]
FormatHandler: TypeAlias = Callable[["ValidationContext"], list[ValidationError]]

GENERIC_FORMAT_DESCRIPTION = "failed custom format validation"


@dataclass(frozen=True, slots=True)
class _FormatHandlerWrapper:
    """Adapt a ``(value, schema) -> None | str`` predicate to the error protocol."""

    name: str
    predicate: FormatPredicate

    def __call__(self, context: ValidationContext) -> list[ValidationError]:
        result = self.predicate(context.instance, context.schema)
        if result is None:
            return []
        description = result if isinstance(result, str) else GENERIC_FORMAT_DESCRIPTION
        return [
            FormatValidationError(
                resolution_scope=context.resolution_scope,
                instance_context=context.instance_context,
                keyword="format",
                attribute=self.name,
                value=context.instance,
                description=description,
            ),
        ]


class FormatHandlerRegistry(Mapping[str, FormatHandler]):
    """Mapping of format names to wrapped handlers consumed by dialect runners."""

    def __init__(self) -> None:
        """Create an empty handler registry."""

        self._handlers: dict[str, FormatHandler] = {}

    def add(self, name: str, handler: FormatPredicate) -> None:
        """Register ``handler`` for the ``format`` value ``name``.

        The handler returns ``None`` for valid values and a description string
        otherwise.  Any other non-``None`` result is reported with a generic
        description.  Registering the same name again replaces the handler.

        Args:
            name: Format name as used in schemas (``"format": name``).
            handler: Predicate called with ``(value, schema)``.
        """

        self._handlers[name] = _FormatHandlerWrapper(name=name, predicate=handler)

    def __getitem__(self, name: str) -> FormatHandler:
        return self._handlers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)


__all__ = ["GENERIC_FORMAT_DESCRIPTION", "FormatHandler", "FormatHandlerRegistry", "FormatPredicate"]
