"""Client: vault operations bound to the active workspace."""

from __future__ import annotations

import datetime as dt
import logging
import random
import re
import string
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from mdvault import daily
from mdvault.backlinks import Backlink, backlinks_for
from mdvault.config import ClientOpts, TemplatesOpts
from mdvault.index import VaultIndex
from mdvault.note import Note
from mdvault.templates import make_template_classifier, merge_template, render_template
from mdvault.workspace import Workspace, find_vault_root, normalize_path, resolve_workspace

log = logging.getLogger(__name__)


def default_note_id(
    title: str | None,
    now: dt.datetime | None = None,
    rng: random.Random | None = None,
) -> str:
    """``<unix time>-<suffix>``; the suffix is a slug of *title* or 4 random letters."""
    now = now or dt.datetime.now()
    suffix = ""
    if title:
        suffix = re.sub(r"[^a-z0-9-]", "", title.replace(" ", "-").lower())
    if not suffix:
        rng = rng or random.Random()
        suffix = "".join(rng.choice(string.ascii_uppercase) for _ in range(4))
    return f"{int(now.timestamp())}-{suffix}"


class Client:
    """Vault operations for one workspace.

    *opts* must already be normalised (see :meth:`ClientOpts.normalize`).
    The workspace is picked by :func:`~mdvault.workspace.resolve_workspace`
    and its ``overrides`` are applied on top of *opts*.
    """

    def __init__(
        self,
        opts: ClientOpts,
        *,
        cwd: Path | str | None = None,
        directory: Path | str | None = None,
    ) -> None:
        self.current_workspace: Workspace = resolve_workspace(opts.workspaces, cwd=cwd, directory=directory)
        self.opts = opts.with_overrides(self.current_workspace.overrides)
        self.dir: Path = self.current_workspace.path
        #: Suppresses the "Updated frontmatter" notice.
        self.quiet = False
        self._index: VaultIndex | None = None
        self.templates_dir = self._find_templates_dir()
        self.is_template = make_template_classifier(self.templates_dir)

    def __repr__(self) -> str:
        return f"Client(workspace={self.current_workspace.name!r}, dir={str(self.dir)!r})"

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _find_templates_dir(self) -> Path | None:
        templates = self.opts.templates
        if templates is None or templates.subdir is None:
            return None
        path = self.dir / templates.subdir
        if not path.is_dir():
            log.error("%s is not a valid directory for templates", path)
            return None
        return path

    def vault_root(self) -> Path:
        return find_vault_root(self.dir)

    def notes_dir(self) -> Path:
        return self.dir / self.opts.notes_subdir if self.opts.notes_subdir else self.dir

    def relative_path(self, path: Path | str) -> str:
        """Path relative to the vault root (``str(path)`` when outside it)."""
        candidate = normalize_path(path)
        try:
            return candidate.relative_to(self.vault_root()).as_posix()
        except ValueError:
            return str(candidate)

    def is_vault_note(self, path: Path | str) -> bool:
        candidate = normalize_path(path)
        return candidate.suffix == ".md" and self.dir in candidate.parents

    # ------------------------------------------------------------------
    # Frontmatter policy
    # ------------------------------------------------------------------

    def should_save_frontmatter(self, note: Note) -> bool:
        if not note.should_save_frontmatter():
            return False
        disable = self.opts.disable_frontmatter
        if callable(disable):
            if note.path is None:
                return True
            return not disable(self.relative_path(note.path))
        return not disable

    def frontmatter_for(self, note: Note) -> Mapping[str, Any]:
        """The canonical frontmatter for *note* under this client's options."""
        if self.opts.note_frontmatter_func is not None:
            return self.opts.note_frontmatter_func(note)
        return note.frontmatter()

    # ------------------------------------------------------------------
    # Index / links
    # ------------------------------------------------------------------

    @property
    def index(self) -> VaultIndex:
        """The vault index, built on first access."""
        if self._index is None:
            self._index = VaultIndex(self.dir)
            self._index.build()
        return self._index

    def invalidate_index(self) -> None:
        self._index = None

    def resolve_note(self, query: str) -> Note | None:
        return self.index.resolve_note(query)

    def backlinks(self, note: Note | str) -> list[Backlink]:
        return backlinks_for(self.index, note)

    # ------------------------------------------------------------------
    # Creating notes
    # ------------------------------------------------------------------

    def new_note_id(self, title: str | None = None) -> str:
        if self.opts.note_id_func is not None:
            return str(self.opts.note_id_func(title))
        return default_note_id(title)

    def new_note(
        self,
        title: str | None = None,
        note_id: str | None = None,
        directory: Path | str | None = None,
        template: str | None = None,
    ) -> Note:
        """Create and write a new note.

        The note goes to *directory* when given, otherwise to the notes
        subdirectory when ``new_notes_location`` is ``"notes_subdir"``,
        otherwise to the workspace root.
        """
        note_id = note_id or self.new_note_id(title)
        if directory is not None:
            target_dir = Path(directory)
        elif self.opts.new_notes_location == "notes_subdir":
            target_dir = self.notes_dir()
        else:
            target_dir = self.dir

        note = Note(
            id=note_id,
            path=target_dir / f"{note_id}.md",
            aliases=[title] if title else [],
            title=title,
        )
        body = [f"# {title}", ""] if title else []
        if template is not None:
            rendered = render_template(self.templates_dir, template, note, self.opts.templates or TemplatesOpts())
            body = [*body, *merge_template(note, rendered)]
        note.body = "\n".join(body)
        self.write_new_note(note)
        log.debug("Created note %s", note.path)
        return note

    def write_new_note(self, note: Note) -> Path:
        """Write *note* to its path; refuses to overwrite an existing file."""
        if note.path is None:
            raise ValueError("note has no path")
        if note.path.exists():
            raise FileExistsError(note.path)
        frontmatter = self.frontmatter_for(note) if self.should_save_frontmatter(note) else {}
        path = note.save(frontmatter=frontmatter)
        if self._index is not None:
            self._index.upsert(note)
        return path

    # ------------------------------------------------------------------
    # Daily notes
    # ------------------------------------------------------------------

    def daily_note_path(self, day: dt.date) -> Path:
        return daily.daily_note_path(self, day)

    def daily(self, offset_days: int = 0) -> Note:
        """Open (or create) the daily note *offset_days* from today."""
        return daily.daily_note(self, dt.date.today() + dt.timedelta(days=offset_days))

    def today(self) -> Note:
        return daily.today(self)

    def yesterday(self) -> Note:
        return daily.yesterday(self)

    def tomorrow(self) -> Note:
        return daily.tomorrow(self)
