"""Workspaces: named vault roots, and the rule for picking the active one."""

from __future__ import annotations

import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

#: Directory that marks the top of an Obsidian-compatible vault.
VAULT_MARKER = ".obsidian"


def normalize_path(path: Path | str) -> Path:
    """Absolute, user-expanded, ``..``-free path (symlinks are not followed)."""
    return Path(os.path.normpath(os.path.abspath(os.path.expanduser(str(path)))))


@dataclass
class Workspace:
    name: str
    path: Path
    #: Client options that apply only while this workspace is active.
    overrides: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.path = normalize_path(self.path)

    @classmethod
    def from_dir(cls, directory: Path | str) -> "Workspace":
        path = normalize_path(directory)
        return cls(name=path.name or str(path), path=path)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Workspace":
        path = data["path"]
        return cls(
            name=data.get("name") or normalize_path(path).name,
            path=path,
            overrides=dict(data.get("overrides", {})),
        )

    def contains(self, path: Path | str) -> bool:
        """True when *path* is this workspace's root or lies below it."""
        candidate = normalize_path(path)
        return candidate == self.path or self.path in candidate.parents


def get_workspace_for_dir(workspaces: Sequence[Workspace], cwd: Path | str) -> Workspace | None:
    """Return the first workspace whose root is an ancestor of *cwd*."""
    for workspace in workspaces:
        if workspace.contains(cwd):
            return workspace
    return None


def resolve_workspace(
    workspaces: Sequence[Workspace],
    cwd: Path | str | None = None,
    directory: Path | str | None = None,
) -> Workspace:
    """Pick the active workspace.

    An explicit *directory* always wins; otherwise the first workspace
    containing *cwd*; otherwise the first configured workspace.
    """
    if directory is not None:
        return Workspace.from_dir(directory)
    if not workspaces:
        raise ValueError("at least one workspace is required")
    if cwd is not None:
        match = get_workspace_for_dir(workspaces, cwd)
        if match is not None:
            return match
    return workspaces[0]


def find_vault_root(directory: Path | str) -> Path:
    """Walk upward from *directory* looking for a ``.obsidian`` marker.

    Falls back to *directory* itself when no marker is found.
    """
    start = normalize_path(directory)
    for candidate in (start, *start.parents):
        if (candidate / VAULT_MARKER).is_dir():
            return candidate
    return start


def ensure_dir(path: Path) -> Path:
    """Create *path* and its parents; an existing directory is fine."""
    path.mkdir(parents=True, exist_ok=True)
    return path
