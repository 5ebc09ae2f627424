"""Unit tests for mdvault.templates."""

import datetime as dt
from pathlib import Path

import pytest

from mdvault.config import TemplatesOpts
from mdvault.note import Note
from mdvault.templates import (
    TemplateError,
    clone_template,
    find_template,
    make_template_classifier,
    merge_template,
    render_template,
    substitute_template_variables,
)

NOW = dt.datetime(2024, 1, 15, 9, 5)


# ---------------------------------------------------------------------------
# make_template_classifier
# ---------------------------------------------------------------------------


class TestTemplateClassifier:
    def test_no_directory_means_no_templates(self, tmp_path: Path):
        is_template = make_template_classifier(None)
        assert not is_template(tmp_path / "templates" / "t.md")

    def test_inside_and_outside(self, tmp_path: Path):
        is_template = make_template_classifier(tmp_path / "templates")
        assert is_template(tmp_path / "templates" / "t.md")
        assert is_template(tmp_path / "templates" / "nested" / "t.md")
        assert not is_template(tmp_path / "notes" / "t.md")

    def test_directory_itself_is_not_inside(self, tmp_path: Path):
        is_template = make_template_classifier(tmp_path / "templates")
        assert not is_template(tmp_path / "templates")

    def test_sibling_with_shared_prefix(self, tmp_path: Path):
        is_template = make_template_classifier(tmp_path / "templates")
        assert not is_template(tmp_path / "templates-archive" / "t.md")

    def test_regex_metacharacters_are_literal(self, tmp_path: Path):
        is_template = make_template_classifier(tmp_path / "tpl.(x)+")
        assert is_template(tmp_path / "tpl.(x)+" / "t.md")
        assert not is_template(tmp_path / "tplA(x)+" / "t.md")
        assert not is_template(tmp_path / "tpl.xx" / "t.md")

    def test_unnormalised_paths(self, tmp_path: Path):
        is_template = make_template_classifier(tmp_path / "a" / ".." / "templates")
        assert is_template(tmp_path / "templates" / "." / "t.md")


# ---------------------------------------------------------------------------
# substitute_template_variables
# ---------------------------------------------------------------------------


class TestSubstitution:
    def test_builtin_variables(self):
        note = Note(id="n-1", title="Weekly")
        text = substitute_template_variables("{{title}} {{id}} {{date}} {{ time }}", note, TemplatesOpts(), NOW)
        assert text == "Weekly n-1 2024-01-15 09:05"

    def test_title_falls_back_to_alias_then_id(self):
        opts = TemplatesOpts()
        assert substitute_template_variables("{{title}}", Note(id="x", aliases=["Ex"]), opts, NOW) == "Ex"
        assert substitute_template_variables("{{title}}", Note(id="x"), opts, NOW) == "x"

    def test_custom_formats(self):
        opts = TemplatesOpts(date_format="%d/%m/%Y", time_format="%H.%M")
        assert substitute_template_variables("{{date}} {{time}}", Note(id="n"), opts, NOW) == "15/01/2024 09.05"

    def test_custom_substitutions(self):
        opts = TemplatesOpts(substitutions={"author": "Ada", "weekday": lambda: "Monday", "title": "Fixed"})
        text = substitute_template_variables("{{author}} {{weekday}} {{title}}", Note(id="n", title="T"), opts, NOW)
        assert text == "Ada Monday Fixed"

    def test_unknown_variables_are_kept(self):
        assert substitute_template_variables("{{nope}}", Note(id="n"), TemplatesOpts(), NOW) == "{{nope}}"


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------


@pytest.fixture()
def templates_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "templates"
    directory.mkdir()
    (directory / "meeting.md").write_text(
        "---\ntags: [meeting]\naliases: [Sync]\nid: ignored\nstatus: open\n---\n# {{title}}\n\nOn {{date}}\n",
        encoding="utf-8",
    )
    return directory


class TestTemplateFiles:
    def test_find_with_and_without_extension(self, templates_dir: Path):
        assert find_template(templates_dir, "meeting") == templates_dir / "meeting.md"
        assert find_template(templates_dir, "meeting.md") == templates_dir / "meeting.md"

    def test_find_missing(self, templates_dir: Path):
        with pytest.raises(TemplateError, match="not found"):
            find_template(templates_dir, "nope")

    def test_find_without_directory(self):
        with pytest.raises(TemplateError):
            find_template(None, "meeting")

    def test_render(self, templates_dir: Path):
        text = render_template(templates_dir, "meeting", Note(id="m", title="Standup"), TemplatesOpts(), NOW)
        assert "# Standup" in text
        assert "On 2024-01-15" in text

    def test_clone(self, tmp_path: Path, templates_dir: Path):
        dest = tmp_path / "notes" / "standup.md"
        clone_template(templates_dir, "meeting", dest, Note(id="m", title="Standup"), TemplatesOpts(), NOW)
        assert dest.read_text(encoding="utf-8").endswith("# Standup\n\nOn 2024-01-15\n")

    def test_clone_refuses_to_overwrite(self, tmp_path: Path, templates_dir: Path):
        dest = tmp_path / "existing.md"
        dest.write_text("keep me", encoding="utf-8")
        with pytest.raises(FileExistsError):
            clone_template(templates_dir, "meeting", dest, Note(id="m"), TemplatesOpts(), NOW)
        assert dest.read_text(encoding="utf-8") == "keep me"


class TestMergeTemplate:
    def test_merges_frontmatter_into_note(self, templates_dir: Path):
        note = Note(id="m", aliases=["Standup"], tags=["work"], metadata={"status": "done"})
        rendered = render_template(templates_dir, "meeting", note, TemplatesOpts(), NOW)

        body = merge_template(note, rendered)

        assert note.id == "m"
        assert note.tags == ["work", "meeting"]
        assert note.aliases == ["Standup", "Sync"]
        assert note.metadata == {"status": "done"}
        assert body == ["# Standup", "", "On 2024-01-15"]

    def test_template_without_frontmatter(self):
        note = Note(id="m")
        assert merge_template(note, "Plain\nbody") == ["Plain", "body"]
        assert note.tags == []
