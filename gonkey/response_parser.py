"""Extraction of variables from HTTP response bodies."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from typing import Any

from gonkey.variables import Variable, Variables

_MISSING = object()


def _components(path: str) -> list[tuple[str, re.Pattern[str] | None]]:
    parts = []
    literal, regex, wild = "", "", False
    chars = iter(path)
    for char in chars:
        if char == ".":
            parts.append((literal, re.compile(regex, re.DOTALL) if wild else None))
            literal, regex, wild = "", "", False
        elif char in "*?":
            wild = True
            regex += ".*" if char == "*" else "."
        else:
            if char == "\\":
                char = next(chars, "")
            literal += char
            regex += re.escape(char)
    parts.append((literal, re.compile(regex, re.DOTALL) if wild else None))
    return parts


def _resolve(value: Any, parts: list[tuple[str, re.Pattern[str] | None]]) -> Any:
    if not parts:
        return value
    (key, pattern), rest = parts[0], parts[1:]
    if isinstance(value, list) and pattern is None:
        if key == "#":
            if not rest:
                return len(value)
            return [found for item in value if (found := _resolve(item, rest)) is not _MISSING]
        if key.isascii() and key.isdigit() and int(key) < len(value):
            return _resolve(value[int(key)], rest)
    elif isinstance(value, dict):
        if pattern is None:
            return _resolve(value[key], rest) if key in value else _MISSING
        for name, item in value.items():
            if pattern.fullmatch(name):
                return _resolve(item, rest)
    return _MISSING


def _lookup(data: Any, path: str) -> str | None:
    if not path or data is _MISSING:
        return None
    result = _resolve(data, _components(path))
    if result is _MISSING:
        return None
    if result is None:
        return ""
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, separators=(",", ":"))


def _load(body: str) -> Any:
    try:
        return json.loads(body)
    except ValueError:
        return _MISSING


def json_path_get(body: str, path: str) -> str | None:
    """Return the value at a dot-separated ``path`` in a JSON ``body`` as text, or None."""
    return _lookup(_load(body), path)


def from_response(vars_to_set: Mapping[str, str] | None, body: str, is_json: bool) -> Variables:
    """Build variables from a response body.

    JSON bodies map each name to a path; plain text expects exactly one name.
    """
    items = dict(vars_to_set or {})
    variables = Variables()
    if not is_json:
        if len(items) != 1:
            raise ValueError(
                f"count of variables for plain-text response should be 1, {len(items)} given"
            )
        return variables.add(Variable(next(iter(items)), body))

    data = _load(body)
    for name, path in items.items():
        value = _lookup(data, path)
        if value is None:
            raise ValueError(f"path '{path}' doesn't exist in given json")
        variables.add(Variable(name, value))
    return variables