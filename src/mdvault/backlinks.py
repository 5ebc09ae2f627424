"""Backlinks: every place in the vault that links *to* a note."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mdvault.index import VaultIndex
    from mdvault.note import Note
    from mdvault.parser import Link


@dataclass(frozen=True)
class Backlink:
    source_id: str
    source_path: Path | None
    source_title: str
    line: int
    #: The stripped source line, for showing the reference in context.
    text: str
    link: "Link"


def backlinks_for(index: "VaultIndex", note: "Note | str") -> list[Backlink]:
    """Return references to *note* (a Note or any resolvable query).

    Results are ordered by source path, then line.  Self-references are
    excluded.  An unknown query yields an empty list.
    """
    target = index.resolve_note(note) if isinstance(note, str) else index.lookup(note)
    if target is None:
        return []

    result: list[Backlink] = []
    for rel in sorted(index.notes):
        source = index.notes[rel]
        if source is target:
            continue
        for link in source.links:
            if index.resolve_link(link, source) is target:
                result.append(Backlink(source.id, source.path, source.display_name(), link.line, link.text, link))
    return result


def backlinks_panel(index: "VaultIndex", note: "Note | str") -> list[dict[str, object]]:
    """Return ``{id, title, line, text}`` dicts for display."""
    return [
        {
            "id": b.source_id,
            "title": b.source_title,
            "line": b.line,
            "text": b.text,
        }
        for b in backlinks_for(index, note)
    ]
