# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich rendering helpers for validation error records."""

from __future__ import annotations

import json
from collections.abc import Sequence

from rich import box
from rich.table import Table

from ..errors import ValidationError

_VALUE_PREVIEW_LIMIT = 60


def render_errors(errors: Sequence[ValidationError]) -> Table:
    """Return a table with one row per error record.

    Args:
        errors: Records returned by ``SchemaEngine.validate``.

    Returns:
        Table: Renderable summarising the records.
    """

    table = Table(box=box.SIMPLE_HEAVY, title=f"{len(errors)} validation error(s)", title_justify="left")
    table.add_column("Location", overflow="fold", no_wrap=True)
    table.add_column("Keyword", no_wrap=True)
    table.add_column("Kind", no_wrap=True)
    table.add_column("Description", overflow="fold")
    table.add_column("Value", overflow="fold")
    for record in errors:
        table.add_row(
            record.instance_context or "",
            record.keyword or "",
            record.kind,
            record.description,
            _preview(record.value),
        )
    return table


def _preview(value: object) -> str:
    text = json.dumps(value, default=str, ensure_ascii=False)
    if len(text) > _VALUE_PREVIEW_LIMIT:
        return text[: _VALUE_PREVIEW_LIMIT - 1] + "…"
    return text


__all__ = ["render_errors"]
