"""YAML frontmatter codec.

A frontmatter block is a ``---`` line, a YAML mapping, and a closing ``---``
line at the very top of a note::

    ---
    id: note1
    aliases: []
    tags: [x]
    ---

Parsing goes through :func:`yaml.safe_load`.  Dumping is done line by line
so the output is a pure function of the mapping: ``id``, ``aliases`` and
``tags`` lead, the remaining keys keep mapping order, lists of scalars are
written in flow style and strings are only quoted when the plain form would
not load back to the same value.
"""

from __future__ import annotations

import datetime as dt
import math
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

import yaml

DELIMITER = "---"

#: Keys written first, in this order, when present.
PRIORITY_KEYS = ("id", "aliases", "tags")


class ParseError(Exception):
    """Raised when a leading ``---`` block exists but cannot be decoded."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.message = message
        self.line = line
        super().__init__(message if line is None else f"line {line}: {message}")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def is_delimiter(line: str) -> bool:
    return line.rstrip() == DELIMITER


def split_frontmatter(lines: Sequence[str]) -> tuple[dict[str, Any] | None, int | None]:
    """Locate and decode the frontmatter block at the top of *lines*.

    Returns ``(mapping, end_line)`` where ``end_line`` is the index of the
    first body line, or ``(None, None)`` when the note has no frontmatter.

    Raises
    ------
    ParseError
        The first line opens a block that is unterminated, is not valid YAML,
        or does not hold a mapping.
    """
    if not lines or not is_delimiter(lines[0]):
        return None, None

    for i in range(1, len(lines)):
        if is_delimiter(lines[i]):
            return loads("\n".join(lines[1:i])), i + 1

    raise ParseError("frontmatter block is not terminated", line=1)


def loads(text: str) -> dict[str, Any]:
    """Decode the YAML between the delimiters into a dict."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        # +2: one for 1-based lines, one for the opening delimiter
        line = mark.line + 2 if mark is not None else None
        raise ParseError(f"invalid YAML in frontmatter: {exc}", line=line) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(f"frontmatter must be a mapping, not {type(data).__name__}")
    return data


# ---------------------------------------------------------------------------
# Dumping
# ---------------------------------------------------------------------------


def ordered_keys(mapping: Mapping[Any, Any]) -> list[Any]:
    head = [k for k in PRIORITY_KEYS if k in mapping]
    return head + [k for k in mapping if k not in PRIORITY_KEYS]


def dump_lines(mapping: Mapping[Any, Any]) -> list[str]:
    """Serialize *mapping* to YAML lines (no delimiters)."""
    return list(_dump_mapping(mapping, 0, ordered_keys(mapping)))


def dumps(mapping: Mapping[Any, Any]) -> str:
    return "\n".join(dump_lines(mapping))


def frontmatter_lines(mapping: Mapping[Any, Any]) -> list[str]:
    """Return the full delimited block.

    An empty mapping gives ``[]``: a note whose generator returns ``{}`` has
    its frontmatter block removed on the next save.
    """
    if not mapping:
        return []
    return [DELIMITER, *dump_lines(mapping), DELIMITER]


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, bool, int, float, dt.date))


def _is_block(value: Any) -> bool:
    if isinstance(value, Mapping):
        return bool(value)
    if isinstance(value, (list, tuple)):
        return not all(_is_scalar(item) for item in value)
    return False


def _dump_mapping(mapping: Mapping[Any, Any], indent: int, keys: list[Any] | None = None) -> Iterator[str]:
    pad = " " * indent
    for key in keys if keys is not None else list(mapping):
        value = mapping[key]
        name = format_scalar(key)
        if _is_block(value):
            yield f"{pad}{name}:"
            yield from _dump_block(value, indent + 2)
        else:
            yield f"{pad}{name}: {format_inline(value)}"


def _dump_block(value: Any, indent: int) -> Iterator[str]:
    if isinstance(value, Mapping):
        yield from _dump_mapping(value, indent)
        return

    pad = " " * indent
    for item in value:
        if isinstance(item, Mapping) and item:
            nested = list(_dump_mapping(item, indent + 2))
            yield f"{pad}- {nested[0].lstrip()}"
            yield from nested[1:]
        elif _is_block(item):
            yield f"{pad}-"
            yield from _dump_block(item, indent + 2)
        else:
            yield f"{pad}- {format_inline(item)}"


def format_inline(value: Any) -> str:
    """Format a value that fits on a single line."""
    if isinstance(value, Mapping):
        return "{}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_scalar(item, flow=True) for item in value) + "]"
    return format_scalar(value)


def format_scalar(value: Any, *, flow: bool = False) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, str):
        return _format_str(value, flow=flow)
    raise TypeError(f"cannot serialize {type(value).__name__} to frontmatter")


def _format_float(value: float) -> str:
    if math.isnan(value):
        return ".nan"
    if math.isinf(value):
        return ".inf" if value > 0 else "-.inf"
    text = repr(value)
    # YAML 1.1 floats need a dot before the exponent.
    if "e" in text and "." not in text:
        mantissa, exponent = text.split("e")
        text = f"{mantissa}.0e{exponent}"
    return text


def _format_str(value: str, *, flow: bool) -> str:
    if value and "\n" not in value and "\r" not in value:
        candidate = f"k: [{value}]" if flow else f"k: {value}"
        try:
            loaded = yaml.safe_load(candidate)
        except yaml.YAMLError:
            loaded = None
        expected = [value] if flow else value
        if isinstance(loaded, dict) and loaded.get("k") == expected:
            return value
    # The emitter escapes every character the YAML reader would refuse or fold.
    dumped = yaml.safe_dump(value, default_style='"', allow_unicode=True, width=float("inf"))
    return dumped.split("\n", 1)[0]
