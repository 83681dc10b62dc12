# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Draft-04 dialect runner backed by :mod:`jsonschema`.

Keyword semantics come from :class:`jsonschema.Draft4Validator`.  Two
keywords are replaced so that the engine stays in charge of references and
custom formats:

``$ref``
    Resolved against the resolution scope of the node holding it and
    validated through :meth:`ValidationContext.follow_ref`, which calls back
    into the engine.

``format``
    Handlers registered with ``add_format`` take precedence over the
    library's format checker.

Records produced by those callbacks are carried through the library's error
stream inside :class:`_CarriedRecord` and re-anchored at the location the
library reports for them.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextvars import ContextVar
from typing import Final

from jsonschema import Draft4Validator, validators
from jsonschema.exceptions import UnknownType
from jsonschema.exceptions import ValidationError as LibraryValidationError

from ..context import ValidationContext
from ..errors import FormatValidationError, ValidationError
from ..resolution import pointer_from_path
from ..types import JSONValue, SchemaMapping

_ACTIVE_CONTEXT: ContextVar[ValidationContext] = ContextVar("schemagraph_draft04_context")
_BUILTIN_FORMAT: Final = Draft4Validator.VALIDATORS["format"]


class _CarriedRecord(LibraryValidationError):
    """Library error wrapping a record produced outside :mod:`jsonschema`."""

    record: ValidationError | None = None


def _carry(record: ValidationError) -> _CarriedRecord:
    carrier = _CarriedRecord(record.description)
    carrier.record = record
    return carrier


def _ref_keyword(
    validator: object,
    ref: JSONValue,
    instance: object,
    schema: SchemaMapping,
) -> Iterator[LibraryValidationError]:
    if not isinstance(ref, str):
        return
    context = _ACTIVE_CONTEXT.get()
    for record in context.follow_ref(ref, holder=schema, instance=instance):
        yield _carry(record)


def _format_keyword(
    validator: object,
    format_name: JSONValue,
    instance: object,
    schema: SchemaMapping,
) -> Iterator[LibraryValidationError]:
    context = _ACTIVE_CONTEXT.get()
    handler = context.format_handlers.get(format_name) if isinstance(format_name, str) else None
    if handler is None:
        yield from _BUILTIN_FORMAT(validator, format_name, instance, schema)
        return
    narrowed = context.clone(
        instance=instance,
        schema=schema,
        resolution_scope=context.scope_of(schema),
        instance_context="#",
    )
    for record in handler(narrowed):
        yield _carry(record)


Draft04Validator = validators.extend(
    Draft4Validator,
    validators={"$ref": _ref_keyword, "format": _format_keyword},
)


def run_draft04(context: ValidationContext) -> list[ValidationError]:
    """Validate ``context.instance`` against ``context.schema`` using draft-04 rules.

    Args:
        context: Per-call validation context supplied by the engine.

    Returns:
        list[ValidationError]: Every violation found, in library iteration order.
    """

    validator = Draft04Validator(context.schema, format_checker=Draft4Validator.FORMAT_CHECKER)
    records: list[ValidationError] = []
    token = _ACTIVE_CONTEXT.set(context)
    try:
        for error in validator.iter_errors(context.instance):
            records.append(_to_record(error, context))
    except UnknownType as exc:
        records.append(
            ValidationError(
                resolution_scope=context.resolution_scope,
                instance_context=context.instance_context,
                keyword="type",
                attribute=str(exc.type),
                value=context.instance,
                description=f"unknown type {exc.type!r} in schema",
            ),
        )
    finally:
        _ACTIVE_CONTEXT.reset(token)
    return records


def _to_record(error: LibraryValidationError, context: ValidationContext) -> ValidationError:
    location = pointer_from_path(tuple(error.absolute_path), prefix=context.instance_context)
    if isinstance(error, _CarriedRecord) and error.record is not None:
        return error.record.rebase(location)
    keyword = error.validator if isinstance(error.validator, str) else None
    record_type = FormatValidationError if keyword == "format" else ValidationError
    attribute = error.validator_value if isinstance(error.validator_value, (str, int, float, bool)) else None
    return record_type(
        resolution_scope=context.resolution_scope,
        instance_context=location,
        keyword=keyword,
        attribute=attribute,
        value=error.instance,
        description=error.message,
    )


__all__ = ["Draft04Validator", "run_draft04"]
