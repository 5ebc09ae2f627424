"""Frontmatter synchronization on save.

Before a buffer is written, its text is parsed into a :class:`Note`, the
canonical frontmatter is computed (the client's ``note_frontmatter_func``
or the note's own fields) and, when the serialized block differs from what
the buffer holds, a :class:`FrontmatterUpdate` describing the replacement of
lines ``[0, frontmatter_end_line)`` is returned.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mdvault.note import Note

if TYPE_CHECKING:
    from mdvault.client import Client


@dataclass(frozen=True)
class FrontmatterUpdate:
    """Replace ``lines[start:end]`` with ``new_lines``."""

    start: int
    end: int
    new_lines: list[str]
    original_lines: list[str]

    @property
    def changed(self) -> bool:
        return self.original_lines != self.new_lines

    def apply(self, lines: Sequence[str]) -> list[str]:
        return [*lines[: self.start], *self.new_lines, *lines[self.end :]]


def compute_frontmatter_update(
    note: Note,
    lines: Sequence[str],
    frontmatter_func: Callable[[Note], Mapping[str, Any]] | None = None,
) -> FrontmatterUpdate:
    """Build the replacement for *note*'s frontmatter block, changed or not."""
    frontmatter = frontmatter_func(note) if frontmatter_func is not None else None
    end = note.frontmatter_end_line or 0
    return FrontmatterUpdate(
        start=0,
        end=end,
        new_lines=note.frontmatter_lines(frontmatter),
        original_lines=list(lines[:end]),
    )


def sync_frontmatter(client: "Client", lines: Sequence[str], path: Path | str) -> FrontmatterUpdate | None:
    """Return the frontmatter replacement for a buffer about to be saved.

    ``None`` means nothing should be written: *path* is a template, the
    client or the note opts out, or the block is already canonical.

    Raises :class:`~mdvault.frontmatter.ParseError` when the leading block
    cannot be decoded.
    """
    if client.is_template(path):
        return None

    note = Note.from_lines(lines, path)
    if not client.should_save_frontmatter(note):
        return None

    update = compute_frontmatter_update(note, lines, client.opts.note_frontmatter_func)
    return update if update.changed else None
