"""Readable rendering of objects for error reports."""

from __future__ import annotations

import dataclasses
import enum
import json
from typing import Any

_ESCAPES = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)


def _encode(obj: Any) -> Any:
    if isinstance(obj, enum.Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    raise TypeError(f"cannot encode object of type {type(obj).__name__}")


def prettify(o: Any, compact: bool) -> str:
    """Return a readable JSON string for o, or a fallback when it can't be encoded."""
    try:
        if compact:
            text = json.dumps(
                o, default=_encode, ensure_ascii=False, allow_nan=False,
                separators=(",", ":"),
            )
        else:
            text = json.dumps(
                o, default=_encode, ensure_ascii=False, allow_nan=False, indent=2,
            )
    except (TypeError, ValueError):
        return f"(invalid) {o!r}"
    return text.translate(_ESCAPES)