"""Session: the explicit context every event handler receives.

:func:`setup` builds a :class:`Client`, prepares the vault directories,
registers the buffer handlers and returns a :class:`Session`.  Nothing is
stored globally; callers keep the session and feed it events::

    session = mdvault.setup({"dir": "~/notes"}, host=my_editor)
    session.dispatch(BufferWritePre(path, buffer_id, text))
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mdvault.client import Client
from mdvault.config import ClientOpts
from mdvault.events import BufferEntered, BufferWritePre, Dispatcher, EditorHost, Event
from mdvault.frontmatter import ParseError
from mdvault.log import configure_logging, set_level
from mdvault.parser import split_lines
from mdvault.sync import sync_frontmatter
from mdvault.workspace import Workspace, ensure_dir

log = logging.getLogger(__name__)


class ClientNotSetError(RuntimeError):
    """Raised when the vault is used before :func:`setup` has run."""

    def __init__(self) -> None:
        super().__init__("mdvault client has not been set! Did you forget to call 'setup()'?")


@dataclass
class Session:
    host: EditorHost | None = None
    dispatcher: Dispatcher = field(default_factory=Dispatcher)
    _client: Client | None = None
    #: Path of the vault note the editor most recently entered.
    current_path: Path | None = None

    @property
    def client(self) -> Client:
        if self._client is None:
            raise ClientNotSetError()
        return self._client

    def set_client(self, client: Client) -> None:
        self._client = client

    def dispatch(self, event: Event) -> None:
        """Run the handlers for *event* if it concerns a note in the vault."""
        if not self.client.is_vault_note(event.path):
            return
        self.dispatcher.dispatch(self, event)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def on_buffer_entered(session: Session, event: BufferEntered) -> None:
    session.current_path = Path(event.path)
    log.debug("Entered %s", event.path)


def on_buffer_write_pre(session: Session, event: BufferWritePre) -> None:
    """Add or update the frontmatter of a note that is about to be saved."""
    client = session.client
    try:
        update = sync_frontmatter(client, split_lines(event.text), event.path)
    except ParseError as exc:
        log.warning("%s: frontmatter left untouched: %s", event.path, exc)
        return
    if update is None:
        return

    if session.host is None:
        raise RuntimeError("no editor host to apply the frontmatter update to")
    session.host.replace_lines(event.buffer, update.start, update.end, update.new_lines)
    client.invalidate_index()
    if not client.quiet:
        log.info("Updated frontmatter")


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def new(opts: ClientOpts | Mapping[str, Any] | None, cwd: Path | str | None = None) -> Client:
    """Create a client without preparing directories or handlers."""
    return Client(ClientOpts.normalize(opts), cwd=cwd)


def new_from_dir(directory: Path | str) -> Client:
    """Create a client bound to *directory*."""
    opts = ClientOpts.default()
    opts.workspaces = [Workspace.from_dir(directory)]
    return Client(ClientOpts.normalize(opts), directory=directory)


def setup(
    opts: ClientOpts | Mapping[str, Any] | None,
    host: EditorHost | None = None,
    *,
    cwd: Path | str | None = None,
    directory: Path | str | None = None,
) -> Session:
    """Set up a session: client, vault directories and buffer handlers.

    Directory creation errors propagate.  A templates subdirectory that does
    not exist is reported and templates are disabled.
    """
    opts = ClientOpts.normalize(opts)
    configure_logging(opts.log_level)

    client = Client(opts, cwd=cwd if cwd is not None else Path.cwd(), directory=directory)
    set_level(client.opts.log_level)

    ensure_dir(client.dir)
    if client.opts.notes_subdir is not None:
        ensure_dir(client.dir / client.opts.notes_subdir)
    if client.opts.daily_notes.folder is not None:
        ensure_dir(client.dir / client.opts.daily_notes.folder)

    session = Session(host=host)
    session.dispatcher.register(BufferEntered, on_buffer_entered)
    session.dispatcher.register(BufferWritePre, on_buffer_write_pre)
    session.set_client(client)
    log.debug("Session ready for %r", client)
    return session
