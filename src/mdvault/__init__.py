"""mdvault: a Markdown note vault with frontmatter, wikilinks and backlinks."""

from mdvault.backlinks import Backlink, backlinks_for
from mdvault.client import Client
from mdvault.config import ClientOpts, ConfigError, DailyNotesOpts, TemplatesOpts, load_opts
from mdvault.db import VaultDB
from mdvault.events import BufferEntered, BufferWritePre, Dispatcher, EditorHost
from mdvault.frontmatter import ParseError
from mdvault.index import VaultIndex
from mdvault.note import Note
from mdvault.parser import Link, parse_links, parse_tags, parse_wikilinks
from mdvault.session import ClientNotSetError, Session, new, new_from_dir, setup
from mdvault.sync import FrontmatterUpdate, sync_frontmatter
from mdvault.templates import TemplateError, make_template_classifier
from mdvault.workspace import Workspace, resolve_workspace

__version__ = "0.1.0"

__all__ = [
    "Backlink",
    "BufferEntered",
    "BufferWritePre",
    "Client",
    "ClientNotSetError",
    "ClientOpts",
    "ConfigError",
    "DailyNotesOpts",
    "Dispatcher",
    "EditorHost",
    "FrontmatterUpdate",
    "Link",
    "Note",
    "ParseError",
    "Session",
    "TemplateError",
    "TemplatesOpts",
    "VaultDB",
    "VaultIndex",
    "Workspace",
    "backlinks_for",
    "load_opts",
    "make_template_classifier",
    "new",
    "new_from_dir",
    "parse_links",
    "parse_tags",
    "parse_wikilinks",
    "resolve_workspace",
    "setup",
    "sync_frontmatter",
]
