"""JSON record parsing and value classification.

This module parses one input line into a JSON tree and classifies each
node as one of the six JSON kinds so traversal never guesses at types.
"""

from __future__ import annotations

import json
from typing import Literal, Mapping

from core.errors import MalformedRecordError

JsonKind = Literal["object", "array", "string", "number", "boolean", "null"]
SCALAR_KINDS: frozenset[JsonKind] = frozenset({"string", "number", "boolean"})


class JsonNumber(str):
    """JSON number kept as its literal source text.

    Resolved values are strings, so keeping the literal avoids float
    round-tripping (``1.50`` stays ``1.50`` and large integers stay exact).
    """

    __slots__ = ()


def parse_json_record(raw_record: str) -> Mapping[str, object]:
    """Parse one input line into a JSON object tree.

    Args:
        raw_record: Raw text of a single record.

    Returns:
        Parsed top-level JSON object.

    Raises:
        MalformedRecordError: If the text is not valid JSON or not an object.
    """
    try:
        tree = json.loads(
            raw_record,
            parse_int=JsonNumber,
            parse_float=JsonNumber,
            parse_constant=_reject_constant,
        )
    except (ValueError, RecursionError) as error:
        raise MalformedRecordError(f"Failed to parse record as JSON: {error}") from error
    if json_kind(tree) != "object":
        raise MalformedRecordError(
            f"Invalid record: expected a JSON object, got {json_kind(tree)}."
        )
    return tree


def json_kind(value: object) -> JsonKind:
    """Classify a parsed JSON node.

    Raises:
        TypeError: If the value is not a JSON-compatible type.
    """
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list):
        return "array"
    if isinstance(value, JsonNumber):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if value is None:
        return "null"
    raise TypeError(f"Unsupported JSON node type: {type(value).__name__}")


def scalar_text(value: object) -> str:
    """Render a scalar node in its JSON text form.

    Raises:
        TypeError: If the node is an object, array, or null.
    """
    kind = json_kind(value)
    if kind not in SCALAR_KINDS:
        raise TypeError(f"Expected a scalar JSON node, got {kind}")
    if kind == "string" or isinstance(value, JsonNumber):
        return str(value)
    return json.dumps(value)


def _reject_constant(name: str) -> object:
    raise ValueError(f"non-standard JSON constant {name}")
