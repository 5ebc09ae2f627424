"""Client options.

Options are plain dataclasses.  They can be built in Python or loaded from a
TOML file::

    log_level          = "info"
    notes_subdir       = "notes"
    new_notes_location = "notes_subdir"
    note_frontmatter_func = "my_vault.hooks:frontmatter"   # module:attr

    [[workspaces]]
    name = "personal"
    path = "~/vaults/personal"

    [workspaces.overrides]
    notes_subdir = "zettels"

    [daily_notes]
    folder      = "dailies"
    date_format = "%Y-%m-%d"
    template    = "daily.md"

    [templates]
    subdir = "templates"

Callables given as ``"package.module:attr"`` strings are imported when the
options are normalised.
"""

from __future__ import annotations

import dataclasses
import importlib
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from mdvault.log import level_from_name
from mdvault.workspace import Workspace

if TYPE_CHECKING:
    from mdvault.note import Note

NEW_NOTES_LOCATIONS = ("current_dir", "notes_subdir")


class ConfigError(Exception):
    """Raised when client options are invalid."""


# ---------------------------------------------------------------------------
# Option groups
# ---------------------------------------------------------------------------


@dataclass
class DailyNotesOpts:
    folder: str | None = None
    date_format: str = "%Y-%m-%d"
    alias_format: str = "%B %d, %Y"
    #: Template file name, relative to the templates directory.
    template: str | None = None
    default_tags: list[str] = field(default_factory=lambda: ["daily-notes"])


@dataclass
class TemplatesOpts:
    subdir: str | None = None
    date_format: str = "%Y-%m-%d"
    time_format: str = "%H:%M"
    #: Extra ``{{name}}`` variables: a string or a zero-argument callable.
    substitutions: dict[str, str | Callable[[], str]] = field(default_factory=dict)


@dataclass
class ClientOpts:
    workspaces: list[Workspace] = field(default_factory=list)
    #: Single vault directory; becomes the first workspace when set.
    dir: str | None = None
    log_level: str = "info"
    notes_subdir: str | None = None
    new_notes_location: str = "current_dir"
    note_id_func: Callable[[str | None], str] | None = None
    #: Returns the frontmatter to save; an empty mapping removes the block.
    note_frontmatter_func: Callable[["Note"], Mapping[str, Any]] | None = None
    #: ``True`` disables frontmatter management; a callable receives the
    #: note's vault-relative path and returns ``True`` to skip it.
    disable_frontmatter: bool | Callable[[str], bool] = False
    daily_notes: DailyNotesOpts = field(default_factory=DailyNotesOpts)
    templates: TemplatesOpts | None = None

    @classmethod
    def default(cls) -> "ClientOpts":
        return cls()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClientOpts":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"unknown option(s): {', '.join(sorted(unknown))}")

        values = dict(data)
        values["workspaces"] = [
            ws if isinstance(ws, Workspace) else Workspace.from_dict(ws) for ws in data.get("workspaces", [])
        ]
        try:
            if isinstance(values.get("daily_notes"), Mapping):
                values["daily_notes"] = DailyNotesOpts(**values["daily_notes"])
            if isinstance(values.get("templates"), Mapping):
                values["templates"] = TemplatesOpts(**values["templates"])
            return cls(**values)
        except TypeError as exc:
            raise ConfigError(str(exc)) from exc

    @classmethod
    def normalize(cls, opts: "ClientOpts | Mapping[str, Any] | None") -> "ClientOpts":
        """Validate *opts* and return a fresh, fully-resolved copy."""
        if opts is None:
            opts = cls.default()
        elif isinstance(opts, Mapping):
            opts = cls.from_dict(opts)
        else:
            opts = dataclasses.replace(opts, workspaces=list(opts.workspaces))

        if opts.dir is not None:
            opts.workspaces.insert(0, Workspace.from_dir(opts.dir))
            opts.dir = None
        if not opts.workspaces:
            raise ConfigError("at least one workspace (or 'dir') must be configured")

        opts._validate()
        return opts

    def _validate(self) -> None:
        """Check option values and import ``module:attr`` references in place."""
        try:
            level_from_name(self.log_level)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc

        if self.new_notes_location not in NEW_NOTES_LOCATIONS:
            raise ConfigError(
                f"new_notes_location must be one of {NEW_NOTES_LOCATIONS}, got {self.new_notes_location!r}"
            )
        if self.new_notes_location == "notes_subdir" and not self.notes_subdir:
            raise ConfigError("new_notes_location is 'notes_subdir' but notes_subdir is not set")

        self.note_id_func = _resolve_callable(self.note_id_func, "note_id_func")
        self.note_frontmatter_func = _resolve_callable(self.note_frontmatter_func, "note_frontmatter_func")
        if isinstance(self.disable_frontmatter, str):
            self.disable_frontmatter = _resolve_callable(self.disable_frontmatter, "disable_frontmatter")

        if self.templates is not None:
            self.templates = dataclasses.replace(
                self.templates,
                substitutions={
                    name: _resolve_substitution(value) for name, value in self.templates.substitutions.items()
                },
            )

    def with_overrides(self, overrides: Mapping[str, Any]) -> "ClientOpts":
        """Return a copy with a workspace's ``overrides`` applied."""
        if not overrides:
            return self
        values = dict(overrides)
        # workspaces and dir pick the workspace, they cannot vary per workspace
        allowed = {f.name for f in dataclasses.fields(self)} - {"workspaces", "dir"}
        unknown = set(values) - allowed
        if unknown:
            raise ConfigError(f"unknown workspace override(s): {', '.join(sorted(unknown))}")
        for name, group in (("daily_notes", self.daily_notes), ("templates", self.templates or TemplatesOpts())):
            if isinstance(values.get(name), Mapping):
                try:
                    values[name] = dataclasses.replace(group, **values[name])
                except TypeError as exc:
                    raise ConfigError(f"workspace override {name!r}: {exc}") from exc
        merged = dataclasses.replace(self, **values)
        merged._validate()
        return merged


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def load_opts(path: Path | str) -> ClientOpts:
    """Load and normalise options from a TOML file."""
    path = Path(path)
    try:
        with open(path, "rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"{path.name}: {exc}") from exc
    return ClientOpts.normalize(data)


def import_object(ref: str) -> Any:
    """Import ``"package.module:attr"`` and return the attribute."""
    module_name, sep, attr = ref.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"expected 'module:attr', got {ref!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"cannot import {module_name!r}: {exc}") from exc
    try:
        return getattr(module, attr)
    except AttributeError:
        raise ConfigError(f"module {module_name!r} has no attribute {attr!r}") from None


def _resolve_callable(value: Any, name: str) -> Any:
    if value is None or callable(value):
        return value
    if isinstance(value, str):
        obj = import_object(value)
        if not callable(obj):
            raise ConfigError(f"{name}: {value!r} is not callable")
        return obj
    raise ConfigError(f"{name} must be a callable or a 'module:attr' string")


def _resolve_substitution(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("@"):
        # "@module:attr" names a callable; anything else is literal text.
        return _resolve_callable(value[1:], "substitutions")
    return value
