"""Daily notes: one note per day, created on first open."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from mdvault.config import TemplatesOpts
from mdvault.note import Note
from mdvault.templates import merge_template, render_template

if TYPE_CHECKING:
    from mdvault.client import Client

log = logging.getLogger(__name__)


def daily_notes_dir(client: "Client") -> Path:
    folder = client.opts.daily_notes.folder
    return client.dir / folder if folder else client.dir


def daily_note_path(client: "Client", day: dt.date) -> Path:
    """``<vault>/<folder>/<day formatted with date_format>.md``"""
    return daily_notes_dir(client) / f"{day.strftime(client.opts.daily_notes.date_format)}.md"


def daily_note(client: "Client", day: dt.date, now: dt.datetime | None = None) -> Note:
    """Open the daily note for *day*, creating it when it does not exist yet."""
    path = daily_note_path(client, day)
    if path.exists():
        return Note.from_file(path)

    opts = client.opts.daily_notes
    alias = day.strftime(opts.alias_format)
    note = Note(
        id=path.stem,
        path=path,
        aliases=[alias],
        tags=list(opts.default_tags),
        title=alias,
    )
    body = [f"# {alias}", ""]
    if opts.template:
        templates_opts = client.opts.templates or TemplatesOpts()
        moment = now or dt.datetime.combine(day, dt.datetime.now().time())
        rendered = render_template(client.templates_dir, opts.template, note, templates_opts, moment)
        body = [*body, *merge_template(note, rendered)]
    note.body = "\n".join(body)

    client.write_new_note(note)
    log.info("Created daily note %s", path.name)
    return note


def today(client: "Client") -> Note:
    return daily_note(client, dt.date.today())


def yesterday(client: "Client") -> Note:
    return daily_note(client, dt.date.today() - dt.timedelta(days=1))


def tomorrow(client: "Client") -> Note:
    return daily_note(client, dt.date.today() + dt.timedelta(days=1))
