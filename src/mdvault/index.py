"""VaultIndex: in-memory index of all notes and their relationships."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from urllib.parse import unquote

from mdvault.frontmatter import ParseError
from mdvault.note import Note
from mdvault.parser import Link, parse_links, parse_title, split_lines
from mdvault.workspace import normalize_path

log = logging.getLogger(__name__)


def _strip_md(name: str) -> str:
    return name[:-3] if name.lower().endswith(".md") else name


class VaultIndex:
    """Scans a vault directory and builds lookup, backlink, and tag indexes.

    Notes are keyed by their vault-relative POSIX path, which is unique even
    when two notes share an id.
    """

    def __init__(self, vault_dir: Path | str) -> None:
        self.vault_dir = normalize_path(vault_dir)
        self.notes: dict[str, Note] = {}
        # Derived maps hold vault-relative paths; ids need not be unique.
        #: target path -> paths of notes linking to it
        self.backlinks: dict[str, list[str]] = {}
        #: link target with no matching note -> paths of notes using it
        self.unresolved: dict[str, list[str]] = {}
        #: tag -> paths of notes carrying it
        self.tags: dict[str, list[str]] = {}
        self._lookup: dict[str, str] = {}
        self._lookup_folded: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def build(self) -> None:
        """(Re-)scan the vault and rebuild all indexes."""
        self.notes = {}
        for path in sorted(self.vault_dir.glob("**/*.md")):
            rel = path.relative_to(self.vault_dir)
            # skips .obsidian and other hidden directories
            if any(part.startswith(".") for part in rel.parts[:-1]):
                continue
            note = self._load(path)
            if note is not None:
                self.notes[rel.as_posix()] = note
        self._rebuild()

    def upsert(self, note: Note) -> None:
        """Add or replace a single note and refresh the derived indexes."""
        if note.path is None:
            raise ValueError("only notes with a path can be indexed")
        self.notes[self.relative_path(note.path)] = note
        self._rebuild()

    def remove(self, path: Path | str) -> None:
        self.notes.pop(self.relative_path(path), None)
        self._rebuild()

    def _load(self, path: Path) -> Note | None:
        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.warning("%s: cannot be read (%s); skipped", path, exc)
            return None
        try:
            return Note.from_text(text, path)
        except ParseError as exc:
            log.warning("%s: %s; indexing without frontmatter", path, exc)
            lines = split_lines(text)
            return Note(
                id=path.stem,
                path=path,
                title=parse_title(lines),
                body="\n".join(lines),
                links=parse_links(lines),
            )

    def _rebuild(self) -> None:
        self._build_lookup()
        self._build_backlinks()
        self._build_tags()

    def _build_lookup(self) -> None:
        # Earlier kinds win: id, then path, then stem, then alias.
        self._lookup = {}
        self._lookup_folded = {}
        kinds: list[list[tuple[str, str]]] = [[], [], [], []]
        for rel, note in self.notes.items():
            kinds[0].append((note.id, rel))
            kinds[1].extend([(rel, rel), (_strip_md(rel), rel)])
            kinds[2].append((PurePosixPath(rel).stem, rel))
            kinds[3].extend((str(alias), rel) for alias in note.aliases)
        for pairs in kinds:
            for key, rel in pairs:
                self._lookup.setdefault(key, rel)
        for pairs in kinds:
            for key, rel in pairs:
                self._lookup_folded.setdefault(key.casefold(), rel)

    def _build_backlinks(self) -> None:
        self.backlinks = {rel: [] for rel in self.notes}
        self.unresolved = {}
        for rel, note in self.notes.items():
            for link in note.links:
                target = self.resolve_link(link, note)
                if target is note:
                    continue
                if target is not None:
                    sources = self.backlinks.setdefault(self.relative_path(target.path), [])
                else:
                    sources = self.unresolved.setdefault(self._normalise_link(link.target), [])
                if rel not in sources:
                    sources.append(rel)

    def _build_tags(self) -> None:
        self.tags = {}
        for rel, note in self.notes.items():
            for tag in note.all_tags():
                sources = self.tags.setdefault(str(tag), [])
                if rel not in sources:
                    sources.append(rel)

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def relative_path(self, path: Path | str) -> str:
        return normalize_path(path).relative_to(self.vault_dir).as_posix()

    def resolve_note(self, query: str) -> Note | None:
        """Find a note by id, vault-relative path, file stem, or alias.

        Exact matches win over case-insensitive ones.
        """
        query = query.strip().lstrip("/")
        if not query:
            return None
        for key in (query, _strip_md(query)):
            rel = self._lookup.get(key)
            if rel is not None:
                return self.notes[rel]
        for key in (query, _strip_md(query)):
            rel = self._lookup_folded.get(key.casefold())
            if rel is not None:
                return self.notes[rel]
        return None

    def lookup(self, note: Note) -> Note | None:
        """Return the indexed copy of *note*, matched by path, then by id."""
        if note.path is not None:
            try:
                rel = self.relative_path(note.path)
            except ValueError:
                rel = None
            if rel is not None and rel in self.notes:
                return self.notes[rel]
        return self.resolve_note(note.id)

    def resolve_link(self, link: Link, source: Note | None = None) -> Note | None:
        """Resolve *link* to a note; markdown links are relative to *source*."""
        if link.kind == "markdown":
            target = unquote(link.target)
            if source is not None and source.path is not None and not target.startswith("/"):
                candidate = normalize_path(source.path.parent / target)
                try:
                    rel = candidate.relative_to(self.vault_dir).as_posix()
                except ValueError:
                    rel = None
                if rel is not None and rel in self.notes:
                    return self.notes[rel]
                if rel is not None and f"{rel}.md" in self.notes:
                    return self.notes[f"{rel}.md"]
            return self.resolve_note(target)
        return self.resolve_note(link.target)

    @staticmethod
    def _normalise_link(link: str) -> str:
        """Convert a link target to a slug (strip path / extension)."""
        return PurePosixPath(link).stem if ("/" in link or link.lower().endswith(".md")) else link

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def get(self, note_id: str) -> Note | None:
        rel = self._lookup.get(note_id)
        return self.notes[rel] if rel is not None else None

    def edges(self) -> list[tuple[str, str]]:
        """Return ``(source_id, target_id)`` pairs for every resolved link."""
        result: list[tuple[str, str]] = []
        for note in self.notes.values():
            for link in note.links:
                target = self.resolve_link(link, note)
                if target is not None:
                    result.append((note.id, target.id))
        return result

    def search(self, query: str) -> list[Note]:
        """Case-insensitive full-text search across title, aliases, and body."""
        q = query.lower()
        return [
            n
            for n in self.notes.values()
            if q in (n.title or "").lower() or q in n.body.lower() or any(q in str(a).lower() for a in n.aliases)
        ]

    def notes_with_tag(self, tag: str) -> list[Note]:
        return [self.notes[rel] for rel in self.tags.get(tag, [])]
