"""Template classification and ``{{variable}}`` substitution."""

from __future__ import annotations

import datetime as dt
import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from mdvault.frontmatter import split_frontmatter
from mdvault.parser import split_lines
from mdvault.workspace import normalize_path

if TYPE_CHECKING:
    from mdvault.config import TemplatesOpts
    from mdvault.note import Note

_VARIABLE_RE = re.compile(r"\{\{\s*([\w.-]+)\s*\}\}")


class TemplateError(Exception):
    """Raised when a template cannot be found or rendered."""


def make_template_classifier(templates_dir: Path | str | None) -> Callable[[Path | str], bool]:
    """Return ``is_template(path)`` for *templates_dir*.

    Without a templates directory nothing is a template.  Otherwise a path
    is a template iff it lies strictly inside the directory.
    """
    if templates_dir is None:
        return lambda _path: False

    prefix = str(normalize_path(templates_dir)).rstrip(os.sep) + os.sep
    pattern = re.compile("^" + re.escape(prefix))

    def is_template(path: Path | str) -> bool:
        return pattern.match(str(normalize_path(path))) is not None

    return is_template


def substitute_template_variables(
    text: str,
    note: "Note",
    opts: "TemplatesOpts",
    now: dt.datetime | None = None,
) -> str:
    """Fill ``{{title}}``, ``{{id}}``, ``{{date}}``, ``{{time}}`` and custom variables.

    Unknown variables are left in place.
    """
    now = now or dt.datetime.now()
    builtins: dict[str, Callable[[], str]] = {
        "title": note.display_name,
        "id": lambda: note.id,
        "date": lambda: now.strftime(opts.date_format),
        "time": lambda: now.strftime(opts.time_format),
    }

    def replace(m: re.Match[str]) -> str:
        name = m.group(1)
        if name in opts.substitutions:
            value = opts.substitutions[name]
            return value() if callable(value) else str(value)
        if name in builtins:
            return builtins[name]()
        return m.group(0)

    return _VARIABLE_RE.sub(replace, text)


def find_template(templates_dir: Path | None, name: str) -> Path:
    """Resolve *name* (with or without ``.md``) inside *templates_dir*."""
    if templates_dir is None:
        raise TemplateError("no templates directory is configured")
    candidates = [templates_dir / name]
    if not name.endswith(".md"):
        candidates.append(templates_dir / f"{name}.md")
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    raise TemplateError(f"template {name!r} not found in {templates_dir}")


def render_template(
    templates_dir: Path | None,
    name: str,
    note: "Note",
    opts: "TemplatesOpts",
    now: dt.datetime | None = None,
) -> str:
    template = find_template(templates_dir, name)
    return substitute_template_variables(template.read_text(encoding="utf-8"), note, opts, now)


def clone_template(
    templates_dir: Path | None,
    name: str,
    destination: Path,
    note: "Note",
    opts: "TemplatesOpts",
    now: dt.datetime | None = None,
) -> Path:
    """Render template *name* for *note* into a new file at *destination*."""
    if destination.exists():
        raise FileExistsError(destination)
    text = render_template(templates_dir, name, note, opts, now)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(text, encoding="utf-8")
    return destination


def merge_template(note: "Note", rendered: str) -> list[str]:
    """Fold a rendered template's frontmatter into *note*.

    Template tags and aliases are added to the note's, other keys fill in
    metadata the note does not already have, and ``id`` is ignored.  Returns
    the template's body lines.
    """
    lines = split_lines(rendered)
    data, end = split_frontmatter(lines)
    for key, value in (data or {}).items():
        values = value if isinstance(value, list) else [value]
        if key == "tags":
            for tag in values:
                note.add_tag(tag)
        elif key == "aliases":
            for alias in values:
                note.add_alias(alias)
        elif key != "id":
            note.metadata.setdefault(key, value)
    return lines[end or 0 :]
