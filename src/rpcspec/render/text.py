from __future__ import annotations

import json
import re
from typing import Any

_PLAIN_KEY = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*$")
_INDENT = "  "
# YAML 1.1 reads these as booleans or null when unquoted
_RESERVED = {"true", "false", "null", "yes", "no", "on", "off", "y", "n", "~"}
# outside the YAML printable set, or folded as line breaks inside double quotes
_NON_PRINTABLE = re.compile(r"[\x7f-\x9f\u2028\u2029\ud800-\udfff\ufeff\ufffe\uffff]")


def to_json(doc: Any, pretty: bool = True) -> str:
    if pretty:
        return json.dumps(doc, indent=2, ensure_ascii=False)
    return json.dumps(doc, separators=(",", ":"), ensure_ascii=False)


def to_yaml(doc: Any) -> str:
    """
    Minimal YAML emitter for generated documents.

    Only handles JSON-shaped data (dict / list / str / int / float / bool /
    None). Strings are always double-quoted using JSON escaping, which YAML
    accepts as a double-quoted scalar. Not a general-purpose YAML writer.
    """
    return "".join(_emit(doc, 0))


def _escape_char(match: re.Match[str]) -> str:
    code = ord(match.group(0))
    return f"\\x{code:02x}" if code < 0x100 else f"\\u{code:04x}"


def _quote(text: str) -> str:
    # JSON escaping covers quotes, backslashes and C0 controls
    return _NON_PRINTABLE.sub(_escape_char, json.dumps(text, ensure_ascii=False))


def _key(key: Any) -> str:
    if not isinstance(key, str):
        raise TypeError(f"YAML keys must be strings, got {type(key).__name__}")
    # bare keys only where YAML would not reinterpret them
    if _PLAIN_KEY.match(key) and key.lower() not in _RESERVED:
        return key
    return _quote(key)


def _scalar(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, str):
        return _quote(value)
    raise TypeError(f"Cannot render {type(value).__name__} as YAML")


def _emit(obj: Any, indent: int) -> list[str]:
    pad = _INDENT * indent
    lines: list[str] = []

    if isinstance(obj, dict):
        for k, v in obj.items():
            if isinstance(v, (dict, list)) and v:
                lines.append(f"{pad}{_key(k)}:\n")
                lines.extend(_emit(v, indent + 1))
            elif isinstance(v, dict):
                lines.append(f"{pad}{_key(k)}: {{}}\n")
            elif isinstance(v, list):
                lines.append(f"{pad}{_key(k)}: []\n")
            else:
                lines.append(f"{pad}{_key(k)}: {_scalar(v)}\n")
        return lines

    if isinstance(obj, list):
        for item in obj:
            lines.append(f"{pad}-\n")
            if isinstance(item, dict) and not item:
                lines.append(f"{pad}{_INDENT}{{}}\n")
            elif isinstance(item, list) and not item:
                lines.append(f"{pad}{_INDENT}[]\n")
            else:
                lines.extend(_emit(item, indent + 1))
        return lines

    return [f"{pad}{_scalar(obj)}\n"]
