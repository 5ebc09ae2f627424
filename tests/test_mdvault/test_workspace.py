"""Unit tests for mdvault.workspace."""

from pathlib import Path

import pytest

from mdvault.workspace import (
    Workspace,
    ensure_dir,
    find_vault_root,
    get_workspace_for_dir,
    resolve_workspace,
)

WORKSPACES = [Workspace("a", Path("/a")), Workspace("b", Path("/b"))]


class TestResolveWorkspace:
    def test_context_inside_second_workspace(self):
        assert resolve_workspace(WORKSPACES, cwd="/b/notes/x").path == Path("/b")

    def test_context_outside_falls_back_to_first(self):
        assert resolve_workspace(WORKSPACES, cwd="/c").path == Path("/a")

    def test_no_context_uses_first(self):
        assert resolve_workspace(WORKSPACES).name == "a"

    def test_explicit_directory_wins(self):
        ws = resolve_workspace(WORKSPACES, cwd="/b/notes", directory="/d/vault")
        assert ws.path == Path("/d/vault")
        assert ws.name == "vault"

    def test_shared_prefix_is_not_ancestor(self):
        workspaces = [Workspace("notes", Path("/n/notes")), Workspace("other", Path("/n/other"))]
        assert resolve_workspace(workspaces, cwd="/n/notes-archive/x").name == "notes"
        assert get_workspace_for_dir(workspaces, "/n/notes-archive/x") is None

    def test_root_itself_matches(self):
        assert get_workspace_for_dir(WORKSPACES, "/b") is WORKSPACES[1]

    def test_requires_workspaces(self):
        with pytest.raises(ValueError):
            resolve_workspace([], cwd="/a")


class TestWorkspace:
    def test_path_is_normalised(self, tmp_path: Path):
        ws = Workspace("w", tmp_path / "x" / ".." / "vault")
        assert ws.path == tmp_path / "vault"

    def test_from_dict(self):
        ws = Workspace.from_dict({"path": "/srv/notes", "overrides": {"notes_subdir": "z"}})
        assert ws.name == "notes"
        assert ws.overrides == {"notes_subdir": "z"}

    def test_expands_user(self):
        assert Workspace.from_dir("~/vault").path == Path.home() / "vault"


class TestFindVaultRoot:
    def test_marker_in_parent(self, tmp_path: Path):
        (tmp_path / ".obsidian").mkdir()
        (tmp_path / "sub" / "deeper").mkdir(parents=True)
        assert find_vault_root(tmp_path / "sub" / "deeper") == tmp_path

    def test_no_marker_returns_directory(self, tmp_path: Path):
        assert find_vault_root(tmp_path) == tmp_path


class TestEnsureDir:
    def test_creates_parents_and_is_idempotent(self, tmp_path: Path):
        target = tmp_path / "a" / "b"
        ensure_dir(target)
        ensure_dir(target)
        assert target.is_dir()
