# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command-line interface for validating JSON documents against schemas."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Annotated, NoReturn

import typer
from rich.console import Console

from ..config import DEFAULT_MAX_RECURSION
from ..engine import SchemaEngine
from ..errors import SchemaGraphError
from ..io import load_document, load_schema
from ..loaders import UrlSchemaLoader
from ..resolution import resolve_uri, schema_id_of
from ..types import SchemaMapping
from ._rendering import render_errors

EXIT_VALID = 0
EXIT_INVALID = 1
EXIT_USAGE = 2

app = typer.Typer(
    name="schemagraph",
    help="Validate JSON documents against JSON Schema with $ref resolution.",
    no_args_is_help=True,
    add_completion=False,
)

SchemaDirOption = Annotated[
    Path | None,
    typer.Option("--schema-dir", help="Register every *.json schema below this directory first."),
]
BaseUriOption = Annotated[
    str | None,
    typer.Option("--base-uri", help="Base URI for schemas that declare no id."),
]


@app.callback()
def main(
    debug: Annotated[bool, typer.Option("--debug", help="Emit debug logging on stderr.")] = False,
) -> None:
    """Validate JSON documents against JSON Schema with $ref resolution."""

    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def validate(
    instance: Annotated[Path, typer.Argument(help="JSON document to validate.")],
    schema: Annotated[Path, typer.Argument(help="Schema file to validate against.")],
    schema_dir: SchemaDirOption = None,
    base_uri: BaseUriOption = None,
    remote: Annotated[
        bool,
        typer.Option("--remote/--no-remote", help="Fetch missing $ref targets over http(s) and file URLs."),
    ] = False,
    max_recursion: Annotated[
        int,
        typer.Option("--max-recursion", min=0, help="Rounds of referenced-schema fetching allowed."),
    ] = DEFAULT_MAX_RECURSION,
    json_output: Annotated[bool, typer.Option("--json", help="Print one JSON error record per line.")] = False,
) -> None:
    """Validate INSTANCE against SCHEMA and report every error found."""

    engine = SchemaEngine(UrlSchemaLoader() if remote else None, max_recursion=max_recursion)
    try:
        document = load_document(instance)
        target = _prepare_engine(engine, schema, schema_dir, base_uri)
    except (FileNotFoundError, SchemaGraphError) as exc:
        _fail(exc)

    if remote:
        errors = asyncio.run(engine.validate_async(document, target))
    else:
        errors = engine.validate(document, target) or []

    if json_output:
        for record in errors:
            typer.echo(json.dumps(record.to_dict(), default=str, ensure_ascii=False))
    elif errors:
        Console(highlight=False).print(render_errors(errors))
    else:
        typer.echo(f"✅ {instance} is valid")
    raise typer.Exit(code=EXIT_INVALID if errors else EXIT_VALID)


@app.command()
def missing(
    schema: Annotated[Path, typer.Argument(help="Schema file to inspect.")],
    schema_dir: SchemaDirOption = None,
    base_uri: BaseUriOption = None,
) -> None:
    """List referenced schemas that are not available locally."""

    engine = SchemaEngine()
    try:
        _prepare_engine(engine, schema, schema_dir, base_uri)
    except (FileNotFoundError, SchemaGraphError) as exc:
        _fail(exc)
    for uri in engine.get_missing_schemas():
        typer.echo(uri)


@app.command()
def dialects() -> None:
    """List the supported $schema dialect URIs."""

    for dialect in SchemaEngine().dialects.supported():
        typer.echo(dialect)


def _prepare_engine(
    engine: SchemaEngine,
    schema_path: Path,
    schema_dir: Path | None,
    base_uri: str | None,
) -> SchemaMapping | str:
    """Register local schemas and return what ``validate`` should be called with."""

    if schema_dir is not None:
        if not schema_dir.is_dir():
            raise FileNotFoundError(schema_dir)
        for path in sorted(schema_dir.rglob("*.json")):
            fallback = resolve_uri(base_uri, path.relative_to(schema_dir).as_posix()) if base_uri else None
            engine.register(load_schema(path), fallback_id=fallback)
    schema = load_schema(schema_path)
    if base_uri and schema_id_of(schema) is None:
        schema_id = resolve_uri(base_uri, schema_path.name)
        engine.register(schema, fallback_id=schema_id)
        return schema_id
    engine.register(schema)
    return schema


def _fail(exc: BaseException) -> NoReturn:
    message = f"no such file or directory: {exc}" if isinstance(exc, FileNotFoundError) else str(exc)
    Console(stderr=True, highlight=False).print(f"[red]error:[/red] {message}", markup=True)
    raise typer.Exit(code=EXIT_USAGE) from exc


__all__ = ["EXIT_INVALID", "EXIT_USAGE", "EXIT_VALID", "app"]
