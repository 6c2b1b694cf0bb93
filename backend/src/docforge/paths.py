"""Safe nested field access for schema-less documents.

Field paths use any mix of dot and bracket separators::

    get_path(doc, "author.tags[0]")
    get_path(doc, "items.2.price", 0)

A path that cannot be resolved is a normal outcome, never an error:
the caller's default comes back instead.
"""

import json
import re
from collections.abc import Mapping
from typing import Any

_SEPARATORS = re.compile(r"[,\[\].]+")

# Marks a lookup that found nothing (distinct from a stored None)
_MISSING = object()


def split_path(path: Any) -> list[str]:
    """Tokenize a field path, discarding empty tokens."""
    return [token for token in _SEPARATORS.split(str(path)) if token]


def _lookup(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key, _MISSING)
    if isinstance(value, (list, tuple, str)):
        if not (key.isascii() and key.isdigit()):
            return _MISSING
        index = int(key)
        return value[index] if index < len(value) else _MISSING
    if key.startswith("_"):
        return _MISSING
    return getattr(value, key, _MISSING)


def get_path(document: Any, path: Any, default: Any = None) -> Any:
    """Read a possibly nested field out of a document.

    Args:
        document: Mapping (or nested mappings/sequences) to read from
        path: Field path such as ``"a.b[0].c"``
        default: Returned when the path does not resolve

    Returns:
        The resolved value, or ``default`` if any step is missing, an
        intermediate value is None, or the path resolves back to the
        document itself (e.g. an empty path).
    """
    value = document
    for key in split_path(path):
        if value is None or value is _MISSING:
            return default
        value = _lookup(value, key)

    if value is _MISSING or value is document:
        return default
    return value


def cast_array(value: Any) -> list[Any]:
    """Wrap a non-list value in a single-element list."""
    return value if isinstance(value, list) else [value]


def clone(value: Any) -> Any:
    """Deep copy a JSON-compatible value.

    Falsy values (None, empty containers) are returned unchanged.
    """
    if not value:
        return value
    return json.loads(json.dumps(value))
