"""Rendering of values as Jsonnet-looking documents."""

from __future__ import annotations

import dataclasses
import enum
import json
import re
from typing import Any, TextIO

_LABELS_COMMENT = """  // Note: labels management is optional. If you prefer to use the
  // GMail interface to add and remove labels, you can safely remove
  // this section of the config.
"""

_LABELS_LINE = "  labels: ["

_KEY_RE = re.compile(r'^ *"([a-zA-Z01]+)":')

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
    raise TypeError(f"cannot encode object of type {type(obj).__name__}")


def _unquote_key(line: str) -> str:
    m = _KEY_RE.match(line)
    if m is None:
        return line
    start, end = m.span(1)
    return line[: start - 1] + line[start:end] + line[end + 1 :]


def marshal_jsonnet(v: Any, w: TextIO, header: str) -> None:
    """Write v to w as indented JSON with simple keys unquoted, after header.

    Raises TypeError or ValueError if v cannot be encoded; nothing is written then.
    """
    text = json.dumps(v, default=_encode, ensure_ascii=False, allow_nan=False, indent=2)
    text = text.translate(_ESCAPES)

    out = [header]
    for line in text.split("\n"):
        line = _unquote_key(line)
        if line == _LABELS_LINE:
            out.append(_LABELS_COMMENT)
        out.append(line + "\n")
    w.write("".join(out))