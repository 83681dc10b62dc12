# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""URI-reference resolution and JSON Pointer helpers.

:func:`urllib.parse.urljoin` only joins URIs whose scheme appears in
``urllib.parse.uses_relative``, which excludes ``urn:`` and the synthetic
``anon-schema://`` ids given to anonymous schemas.  :func:`resolve_uri`
therefore implements the reference resolution algorithm of RFC 3986
section 5.2 on top of :func:`urllib.parse.urlsplit`.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from urllib.parse import SplitResult, unquote, urlsplit, urlunsplit

from .types import ANON_URI_SCHEME, ID_KEYS, JSONValue


def resolve_uri(base: str | None, reference: str) -> str:
    """Resolve ``reference`` against ``base``.

    Args:
        base: Base URI in effect, or ``None``/empty when there is none.
        reference: Absolute or relative URI reference.

    Returns:
        str: The target URI.  Absolute references replace the base.
    """

    ref = urlsplit(reference)
    if ref.scheme:
        return _unsplit(ref.scheme, ref.netloc, _remove_dot_segments(ref.path), ref.query, ref.fragment)
    if not base:
        return reference
    parent = urlsplit(base)
    if ref.netloc:
        return _unsplit(parent.scheme, ref.netloc, _remove_dot_segments(ref.path), ref.query, ref.fragment)
    if not ref.path:
        query = ref.query if "?" in reference.split("#", 1)[0] else parent.query
        return _unsplit(parent.scheme, parent.netloc, parent.path, query, ref.fragment)
    if ref.path.startswith("/"):
        path = _remove_dot_segments(ref.path)
    else:
        path = _remove_dot_segments(_merge_paths(parent, ref.path))
    return _unsplit(parent.scheme, parent.netloc, path, ref.query, ref.fragment)


def resolve_reference(scope: str | None, reference: str) -> str:
    """Resolve a ``$ref`` value against the resolution ``scope``.

    Anonymous schemas have no meaningful location, so only fragment-only
    references are joined with an ``anon-schema://`` scope; any other
    relative reference is kept as written.

    Args:
        scope: Resolution scope of the schema node holding the reference.
        reference: Raw ``$ref`` value.

    Returns:
        str: Resolved reference URI.
    """

    if scope and urlsplit(scope).scheme == ANON_URI_SCHEME and not reference.startswith("#"):
        return resolve_uri(None, reference)
    return resolve_uri(scope, reference)


def split_fragment(uri: str) -> tuple[str, str]:
    """Split ``uri`` into its base URI and fragment (without ``#``).

    Args:
        uri: URI possibly carrying a fragment.

    Returns:
        tuple[str, str]: Base URI and fragment; an empty fragment means none.
    """

    base, _, fragment = uri.partition("#")
    return base, fragment


def normalize_id(uri: str) -> str:
    """Return ``uri`` without an empty trailing fragment.

    Args:
        uri: Schema identifier or reference.

    Returns:
        str: Normalised identifier used for de-duplication.
    """

    base, fragment = split_fragment(uri)
    return f"{base}#{fragment}" if fragment else base


def schema_id_of(schema: Mapping[str, JSONValue]) -> str | None:
    """Return the identifier declared by ``schema`` (``id`` or ``$id``).

    Args:
        schema: Schema node to inspect.

    Returns:
        str | None: Declared identifier, or ``None`` when absent or not a string.
    """

    for key in ID_KEYS:
        value = schema.get(key)
        if isinstance(value, str) and value:
            return value
    return None


def decode_pointer_segment(segment: str) -> str:
    """Unescape one JSON Pointer segment taken from a URI fragment.

    Args:
        segment: Percent-encoded, ``~``-escaped segment.

    Returns:
        str: Decoded member name.
    """

    return unquote(segment).replace("~1", "/").replace("~0", "~")


def escape_pointer_segment(segment: object) -> str:
    """Escape ``segment`` for inclusion in a JSON Pointer.

    Args:
        segment: Member name or array index.

    Returns:
        str: Escaped segment.
    """

    return str(segment).replace("~", "~0").replace("/", "~1")


def pointer_from_path(path: Sequence[object], *, prefix: str = "#") -> str:
    """Render ``path`` as a ``#``-rooted JSON Pointer.

    Args:
        path: Member names and indices, outermost first.
        prefix: Pointer the path is relative to.

    Returns:
        str: Pointer such as ``#/items/0``.
    """

    head = "#" if prefix in ("", "#") else prefix.rstrip("/")
    if not path:
        return head
    return head + "".join(f"/{escape_pointer_segment(segment)}" for segment in path)


def resolve_pointer(document: JSONValue, pointer: str) -> tuple[bool, JSONValue]:
    """Descend ``document`` following a JSON Pointer.

    Args:
        document: Root value to descend.
        pointer: Pointer such as ``/definitions/x`` (a leading ``#`` is ignored).

    Returns:
        tuple[bool, JSONValue]: ``(True, value)`` when found, ``(False, None)`` otherwise.
    """

    text = pointer[1:] if pointer.startswith("#") else pointer
    if not text:
        return True, document
    if text.startswith("/"):
        text = text[1:]
    current = document
    for raw in text.split("/"):
        segment = decode_pointer_segment(raw)
        if isinstance(current, Mapping):
            if segment not in current:
                return False, None
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes, bytearray)):
            if not segment.isdigit() or int(segment) >= len(current):
                return False, None
            current = current[int(segment)]
        else:
            return False, None
    return True, current


def _merge_paths(base: SplitResult, path: str) -> str:
    if base.netloc and not base.path:
        return f"/{path}"
    head, slash, _ = base.path.rpartition("/")
    return f"{head}{slash}{path}" if slash else path


def _remove_dot_segments(path: str) -> str:
    if "." not in path:
        return path
    output: list[str] = []
    segments = path.split("/")
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        if segment == ".":
            if last:
                output.append("")
            continue
        if segment == "..":
            if len(output) > 1 or (output and output[0] != ""):
                output.pop()
            if last:
                output.append("")
            continue
        output.append(segment)
    return "/".join(output)


def _unsplit(scheme: str, netloc: str, path: str, query: str, fragment: str) -> str:
    return urlunsplit((scheme, netloc, path, query, fragment))


__all__ = [
    "decode_pointer_segment",
    "escape_pointer_segment",
    "normalize_id",
    "pointer_from_path",
    "resolve_pointer",
    "resolve_reference",
    "resolve_uri",
    "schema_id_of",
    "split_fragment",
]
