"""Shared fixtures: an in-memory editor host and client factories."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Any, Callable

import pytest

from mdvault.client import Client
from mdvault.config import ClientOpts
from mdvault.parser import split_lines


class MemoryHost:
    """Editor stand-in that keeps buffers as lists of lines."""

    def __init__(self) -> None:
        self.buffers: dict[Any, list[str]] = {}
        self.calls: list[tuple[Any, int, int, list[str]]] = []

    def open(self, buffer: Any, text: str) -> None:
        self.buffers[buffer] = split_lines(text)

    def text(self, buffer: Any) -> str:
        return "\n".join(self.buffers[buffer])

    def replace_lines(self, buffer: Any, start: int, end: int, new_lines: list[str]) -> None:
        self.calls.append((buffer, start, end, list(new_lines)))
        self.buffers[buffer][start:end] = new_lines


def write_note(directory: Path, name: str, content: str) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


@pytest.fixture()
def host() -> MemoryHost:
    return MemoryHost()


@pytest.fixture()
def make_client(tmp_path: Path) -> Callable[..., Client]:
    """Build a client for a vault at ``tmp_path / "vault"``."""

    def factory(**options: Any) -> Client:
        vault = tmp_path / "vault"
        vault.mkdir(exist_ok=True)
        opts = ClientOpts.normalize({"dir": str(vault), **options})
        return Client(opts)

    return factory


@pytest.fixture()
def linked_vault(tmp_path: Path) -> Path:
    """Three notes linking to each other by id, alias and relative path."""
    vault = tmp_path / "vault"
    write_note(vault, "alpha.md", """\
        ---
        aliases: [The First]
        tags: [first]
        ---
        # Alpha
        See [[beta]] and [[gamma|G]].
    """)
    write_note(vault, "beta.md", """\
        # Beta
        Back to [[The First]].
        Also [alpha](alpha.md).
        #second
    """)
    write_note(vault, "sub/gamma.md", """\
        ---
        id: gamma
        tags: [first, second]
        ---
        Points to [[missing-note]] and [[alpha#Intro]].

        ```
        [[beta]]
        ```
    """)
    write_note(vault, ".obsidian/workspace.md", "[[alpha]]\n")
    return vault
