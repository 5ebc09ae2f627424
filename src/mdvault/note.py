"""Core Note dataclass."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mdvault import frontmatter as fm
from mdvault.parser import Link, parse_links, parse_tags, parse_title, split_lines

#: Frontmatter key a note sets to ``false`` to keep its header untouched.
OPT_OUT_KEY = "sync_frontmatter"


def _as_list(value: Any, *, split_commas: bool = False) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        if split_commas:
            return [v.strip() for v in value.split(",") if v.strip()]
        return [value]
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


@dataclass
class Note:
    """A single markdown note in the vault."""

    id: str
    path: Path | None = None
    aliases: list[Any] = field(default_factory=list)
    tags: list[Any] = field(default_factory=list)
    title: str | None = None
    #: Every frontmatter key other than id / aliases / tags, in file order.
    metadata: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    has_frontmatter: bool = False
    #: Index of the first body line, ``None`` without frontmatter.
    frontmatter_end_line: int | None = None
    links: list[Link] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_lines(cls, lines: Sequence[str], path: Path | str | None = None) -> "Note":
        """Parse a note from its lines.

        Raises :class:`~mdvault.frontmatter.ParseError` when the leading
        block looks like frontmatter but cannot be decoded.
        """
        path = Path(path) if path is not None else None
        data, end = fm.split_frontmatter(lines)
        meta = dict(data or {})

        note_id = meta.pop("id", None)
        if note_id is None:
            if path is None:
                raise ValueError("a note without an 'id' field needs a path")
            note_id = path.stem

        body_lines = list(lines[end:] if end is not None else lines)
        return cls(
            id=str(note_id),
            path=path,
            aliases=_as_list(meta.pop("aliases", None)),
            tags=_as_list(meta.pop("tags", None), split_commas=True),
            title=parse_title(body_lines),
            metadata=meta,
            body="\n".join(body_lines),
            has_frontmatter=data is not None,
            frontmatter_end_line=end,
            links=parse_links(body_lines, start=end or 0),
        )

    @classmethod
    def from_text(cls, text: str, path: Path | str | None = None) -> "Note":
        return cls.from_lines(split_lines(text), path)

    @classmethod
    def from_file(cls, path: Path | str) -> "Note":
        path = Path(path)
        return cls.from_text(path.read_text(encoding="utf-8"), path)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def stem(self) -> str | None:
        return self.path.stem if self.path is not None else None

    def display_name(self) -> str:
        return self.title or (str(self.aliases[0]) if self.aliases else self.id)

    def all_tags(self) -> list[Any]:
        """Frontmatter tags followed by inline ``#tags`` from the body."""
        return list(dict.fromkeys([*self.tags, *parse_tags(self.body)]))

    def add_alias(self, alias: str) -> None:
        if alias not in self.aliases:
            self.aliases.append(alias)

    def add_tag(self, tag: str) -> None:
        if tag not in self.tags:
            self.tags.append(tag)

    def should_save_frontmatter(self) -> bool:
        return self.metadata.get(OPT_OUT_KEY, True) is not False

    # ------------------------------------------------------------------
    # Frontmatter
    # ------------------------------------------------------------------

    def frontmatter(self) -> dict[str, Any]:
        """The default frontmatter mapping derived from this note's fields."""
        out: dict[str, Any] = {"id": self.id, "aliases": list(self.aliases), "tags": list(self.tags)}
        out.update(self.metadata)
        return out

    def frontmatter_lines(self, frontmatter: Mapping[str, Any] | None = None) -> list[str]:
        """Serialize *frontmatter* (default: :meth:`frontmatter`) to lines.

        A note that had no frontmatter gets a blank separator line after the
        new block.
        """
        mapping = self.frontmatter() if frontmatter is None else frontmatter
        lines = fm.frontmatter_lines(mapping)
        if lines and not self.has_frontmatter:
            lines.append("")
        return lines

    def to_text(self, frontmatter: Mapping[str, Any] | None = None) -> str:
        header = self.frontmatter_lines(frontmatter)
        text = "\n".join([*header, self.body]) if header else self.body
        return text if text.endswith("\n") else text + "\n"

    def save(self, path: Path | str | None = None, frontmatter: Mapping[str, Any] | None = None) -> Path:
        """Write the note, with its frontmatter, to *path* (default: ``self.path``)."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("note has no path to save to")
        target.parent.mkdir(parents=True, exist_ok=True)
        header = self.frontmatter_lines(frontmatter)
        target.write_text(self.to_text(frontmatter), encoding="utf-8")
        self.path = target
        if not header:
            self.has_frontmatter = False
        elif not self.has_frontmatter:
            # The separator line now belongs to the body.
            header.pop()
            self.body = "\n" + self.body
            self.has_frontmatter = True
        self.frontmatter_end_line = len(header) if header else None
        return target

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "path": str(self.path) if self.path is not None else None,
            "title": self.title,
            "aliases": self.aliases,
            "tags": self.tags,
            "metadata": self.metadata,
            "links": [link.target for link in self.links],
        }
