"""Dot-delimited path resolution over JSON trees.

Paths are a fail-soft addressing scheme: a path that does not lead to a
scalar yields ``NOT_FOUND`` instead of raising, so one missing field only
affects the column or record that needs it.
"""

from __future__ import annotations

import enum

from core.types import JsonPath
from mapping.json_value import SCALAR_KINDS, json_kind, scalar_text


class NotFound(enum.Enum):
    """Marker type for paths that do not resolve to a scalar."""

    NOT_FOUND = "not_found"

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = NotFound.NOT_FOUND


def resolve_path(root: object, path: JsonPath | str) -> str | NotFound:
    """Return the string form of the scalar at ``path``.

    Each component descends into an object key. A missing key stops
    resolution with ``NOT_FOUND``. Reaching a non-object node before the
    components run out stops descending there, and the remaining
    components are ignored.

    Args:
        root: Parsed JSON tree. Never mutated.
        path: Compiled path or raw path expression.

    Returns:
        Scalar text, or ``NOT_FOUND`` when the path is absent or ends on
        an object, array, or null.
    """
    compiled_path = path if isinstance(path, JsonPath) else JsonPath.parse(path)
    node = root
    for component in compiled_path.components:
        kind = json_kind(node)
        if kind == "object":
            if component not in node:  # type: ignore[operator]
                return NOT_FOUND
            node = node[component]  # type: ignore[index]
        elif kind in ("array", "string", "number", "boolean", "null"):
            break
    if json_kind(node) in SCALAR_KINDS:
        return scalar_text(node)
    return NOT_FOUND
