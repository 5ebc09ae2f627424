"""VaultDB: SQL view over the vault index.

Uses DuckDB (in-memory) as a query engine over note metadata, frontmatter
and the link graph.  Returns :mod:`polars` DataFrames.

Usage::

    db = VaultDB(client.index)

    db.search("zettelkasten")          # title / alias / body substring
    db.tag_counts()                    # tag -> note_count
    db.unresolved_links()              # links whose target has no note
    db.query("SELECT id FROM notes WHERE 'daily-notes' = ANY(tags)")
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import duckdb
import polars as pl

if TYPE_CHECKING:
    from mdvault.index import VaultIndex


class VaultDB:
    """In-memory DuckDB database over vault notes and links."""

    def __init__(self, index: "VaultIndex") -> None:
        self.conn: duckdb.DuckDBPyConnection = duckdb.connect(":memory:")
        self.refresh(index)

    # ------------------------------------------------------------------
    # Build / refresh
    # ------------------------------------------------------------------

    def refresh(self, index: "VaultIndex") -> None:
        """(Re-)populate the database from *index* (call after index rebuild)."""
        self._index = index
        self._create_schema()
        self._load()

    def _create_schema(self) -> None:
        self.conn.execute("""
            CREATE OR REPLACE TABLE notes (
                path        VARCHAR PRIMARY KEY,
                id          VARCHAR,
                title       VARCHAR,
                body        TEXT,
                aliases     VARCHAR[],
                tags        VARCHAR[],
                frontmatter JSON
            )
        """)
        self.conn.execute("""
            CREATE OR REPLACE TABLE links (
                source_path VARCHAR,
                source_id   VARCHAR,
                target      VARCHAR,
                target_id   VARCHAR,
                kind        VARCHAR,
                line        INTEGER
            )
        """)

    def _load(self) -> None:
        notes = []
        links = []
        for rel, note in self._index.notes.items():
            notes.append(
                (
                    rel,
                    note.id,
                    note.display_name(),
                    note.body,
                    [str(a) for a in note.aliases],
                    [str(t) for t in note.all_tags()],
                    json.dumps(note.frontmatter(), default=str),
                )
            )
            for link in note.links:
                target = self._index.resolve_link(link, note)
                links.append(
                    (rel, note.id, link.target, target.id if target is not None else None, link.kind, link.line)
                )
        if notes:
            self.conn.executemany("INSERT INTO notes VALUES (?,?,?,?,?,?,?)", notes)
        if links:
            self.conn.executemany("INSERT INTO links VALUES (?,?,?,?,?,?)", links)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def query(self, sql: str, params: list | None = None) -> pl.DataFrame:
        """Run a raw SQL query and return a Polars DataFrame."""
        return self.conn.execute(sql, params or []).pl()

    def search(self, text: str) -> pl.DataFrame:
        """Case-insensitive substring search over title, aliases and body."""
        pattern = f"%{text}%"
        return self.query(
            """
            SELECT id, title, path
            FROM notes
            WHERE title ILIKE ? OR body ILIKE ?
               OR CAST(aliases AS VARCHAR) ILIKE ?
            ORDER BY path
            """,
            [pattern, pattern, pattern],
        )

    def notes_with_tag(self, tag: str) -> pl.DataFrame:
        return self.query("SELECT id, title, path FROM notes WHERE list_contains(tags, ?) ORDER BY path", [tag])

    def tag_counts(self) -> pl.DataFrame:
        """Return a tag → count table sorted by frequency."""
        return self.query(
            """
            SELECT tag, COUNT(*) AS note_count
            FROM (SELECT unnest(tags) AS tag FROM notes)
            GROUP BY tag
            ORDER BY note_count DESC, tag
            """
        )

    def unresolved_links(self) -> pl.DataFrame:
        """Links whose target matches no note, one row per source line."""
        return self.query(
            """
            SELECT target, source_id, source_path, line
            FROM links
            WHERE target_id IS NULL
            ORDER BY target, source_path, line
            """
        )

    def backlink_counts(self) -> pl.DataFrame:
        """Number of distinct notes linking to each note."""
        return self.query(
            """
            SELECT target_id AS id, COUNT(DISTINCT source_path) AS backlinks
            FROM links
            WHERE target_id IS NOT NULL AND target_id <> source_id
            GROUP BY target_id
            ORDER BY backlinks DESC, id
            """
        )

    def frontmatter_keys(self) -> list[str]:
        """Return all frontmatter property names present across all notes."""
        rows = self.conn.execute(
            "SELECT DISTINCT unnest(json_keys(frontmatter)) AS k FROM notes ORDER BY k"
        ).fetchall()
        return [r[0] for r in rows]

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "VaultDB":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
