"""
Row-scoped filter templates.

A filter template is plain filter text with ``{{path}}`` or
``{{path:default}}`` placeholders that are filled in from the host row:

    render_filter("ownerId:{{owner.id}} AND status:{{status:open}}", row)

Paths use dot or index addressing (``items.0.name`` or ``items[0].name``)
over mappings, sequences and plain objects.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any, Optional

_PLACEHOLDER = re.compile(r"\{\{(.*?)\}\}")
_INDEX = re.compile(r"\[(\d+)\]")

_MISSING = object()


def _split_path(path: str):
    return [part for part in _INDEX.sub(r".\1", path.strip()).split(".") if part]


def lookup_path(data: Any, path: str, default: Any = None) -> Any:
    """Resolve a dotted path against nested data, returning default when absent."""
    current = data
    for part in _split_path(path):
        if isinstance(current, Mapping):
            current = current.get(part, _MISSING)
        elif isinstance(current, Sequence) and not isinstance(current, str):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                current = _MISSING
        else:
            current = getattr(current, part, _MISSING)

        if current is _MISSING:
            return default
    return current


def _to_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def render_filter(template: Optional[str], row_data: Any) -> str:
    """
    Fill every placeholder in template from row_data.

    Missing or None values take the placeholder's default (empty string when
    no default is given). An empty template renders an empty filter.
    """
    if not template:
        return ""

    def replace(match: "re.Match") -> str:
        path, _, default = match.group(1).partition(":")
        value = lookup_path(row_data, path, None)
        if value is None:
            return default
        return _to_text(value)

    return _PLACEHOLDER.sub(replace, template)
