"""WikiLink, markdown-link, tag and heading parser for note bodies."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Literal

# [[Target]], [[Target|Alias]], [[Target#Heading]], [[Target#Heading|Alias]]
_WIKILINK_RE = re.compile(r"\[\[([^\]|#]*)(?:#([^\]|]*))?(?:\|([^\]]*))?\]\]")
# [text](target); the ``!`` image form is excluded by the lookbehind
_MDLINK_RE = re.compile(r"(?<!!)\[([^\]]*)\]\(([^)\s]+)\)")
# Inline #tags (not inside code-spans or URLs)
_TAG_RE = re.compile(r"(?<![`\w/#&])#([\w/-]*[^\W\d][\w/-]*)")
_CODE_SPAN_RE = re.compile(r"`[^`]*`")
_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_HEADING_RE = re.compile(r"^#\s+(.+?)\s*#*\s*$")
_URL_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")

LinkKind = Literal["wiki", "markdown"]


@dataclass(frozen=True)
class Link:
    """A reference found in a note body.

    ``line`` is 1-based and counts from the first body line's position in
    the whole file, so it can be shown next to the source text.
    """

    target: str
    line: int
    kind: LinkKind = "wiki"
    anchor: str | None = None
    alias: str | None = None
    text: str = ""


def split_lines(text: str) -> list[str]:
    r"""Split *text* on ``\n`` only, the way editors number lines.

    A trailing ``\r`` is dropped from each line and a final newline does not
    start an extra empty line.  Other Unicode line separators stay in place.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def iter_body_lines(lines: Sequence[str], start: int = 0) -> Iterator[tuple[int, str]]:
    """Yield ``(line_no, line)`` for lines outside fenced code blocks."""
    in_fence = False
    for offset, line in enumerate(lines):
        if _FENCE_RE.match(line):
            in_fence = not in_fence
            continue
        if not in_fence:
            yield start + offset + 1, line


def parse_links(lines: Sequence[str], start: int = 0) -> list[Link]:
    """Return every wiki and markdown link in *lines*, in document order.

    *start* is the index of ``lines[0]`` within the file.  External URLs and
    links inside code spans or fenced blocks are skipped.
    """
    links: list[Link] = []
    for line_no, line in iter_body_lines(lines, start):
        text = _CODE_SPAN_RE.sub(lambda m: " " * len(m.group(0)), line)
        found: list[tuple[int, Link]] = []
        for m in _WIKILINK_RE.finditer(text):
            target = m.group(1).strip()
            if not target:
                continue
            anchor = (m.group(2) or "").strip() or None
            alias = (m.group(3) or "").strip() or None
            found.append((m.start(), Link(target, line_no, "wiki", anchor, alias, line.strip())))
        for m in _MDLINK_RE.finditer(text):
            raw = m.group(2)
            if _URL_RE.match(raw) or raw.startswith("#"):
                continue
            target, _, anchor = raw.partition("#")
            found.append(
                (m.start(), Link(target, line_no, "markdown", anchor or None, m.group(1) or None, line.strip()))
            )
        links.extend(link for _, link in sorted(found, key=lambda pair: pair[0]))
    return links


def parse_wikilinks(text: str) -> list[str]:
    """Return all ``[[WikiLink]]`` targets found in *text* (de-duped, ordered)."""
    seen: set[str] = set()
    result: list[str] = []
    for link in parse_links(split_lines(text)):
        if link.kind == "wiki" and link.target not in seen:
            seen.add(link.target)
            result.append(link.target)
    return result


def parse_tags(text: str) -> list[str]:
    """Return all ``#tag`` values found in *text* (de-duped, ordered)."""
    seen: set[str] = set()
    result: list[str] = []
    for _, line in iter_body_lines(split_lines(text)):
        line = _CODE_SPAN_RE.sub("", line)
        for m in _TAG_RE.finditer(line):
            tag = m.group(1)
            if tag not in seen:
                seen.add(tag)
                result.append(tag)
    return result


def parse_title(lines: Sequence[str]) -> str | None:
    """Return the text of the first level-one heading, if any."""
    for _, line in iter_body_lines(lines):
        m = _HEADING_RE.match(line)
        if m:
            return m.group(1)
    return None
