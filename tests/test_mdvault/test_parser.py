"""Unit tests for mdvault.parser."""

from mdvault.parser import parse_links, parse_tags, parse_title, parse_wikilinks, split_lines

# ---------------------------------------------------------------------------
# parse_wikilinks
# ---------------------------------------------------------------------------


class TestParseWikilinks:
    def test_single_link(self):
        assert parse_wikilinks("See [[Getting Started]] for details.") == ["Getting Started"]

    def test_multiple_links(self):
        links = parse_wikilinks("[[A]] and [[B]] and [[C]]")
        assert links == ["A", "B", "C"]

    def test_link_with_alias(self):
        # [[Target|Display Text]]: only target is returned
        links = parse_wikilinks("See [[index|Home Page]] here.")
        assert links == ["index"]

    def test_link_with_heading(self):
        links = parse_wikilinks("Jump to [[setup-guide#Install]].")
        assert links == ["setup-guide"]

    def test_deduplication(self):
        links = parse_wikilinks("[[A]] then [[A]] again")
        assert links == ["A"]

    def test_no_links(self):
        assert parse_wikilinks("Plain text, no links.") == []

    def test_preserves_order(self):
        links = parse_wikilinks("[[Z]] then [[A]] then [[M]]")
        assert links == ["Z", "A", "M"]

    def test_same_note_heading_ignored(self):
        assert parse_wikilinks("Back to [[#Top]].") == []


# ---------------------------------------------------------------------------
# parse_links
# ---------------------------------------------------------------------------


class TestParseLinks:
    def test_line_numbers_are_one_based(self):
        links = parse_links(["first", "see [[a]]", "", "and [[b]]"])
        assert [(link.target, link.line) for link in links] == [("a", 2), ("b", 4)]

    def test_start_offset(self):
        links = parse_links(["see [[a]]"], start=3)
        assert links[0].line == 4

    def test_anchor_and_alias(self):
        (link,) = parse_links(["[[note#Section|shown]]"])
        assert link.target == "note"
        assert link.anchor == "Section"
        assert link.alias == "shown"
        assert link.kind == "wiki"

    def test_markdown_link(self):
        (link,) = parse_links(["Read [the guide](docs/guide.md#usage)."])
        assert link.kind == "markdown"
        assert link.target == "docs/guide.md"
        assert link.anchor == "usage"
        assert link.alias == "the guide"

    def test_external_urls_skipped(self):
        assert parse_links(["[site](https://example.com) and [mail](mailto:a@b.c)"]) == []

    def test_images_skipped(self):
        assert parse_links(["![diagram](img/diagram.png)"]) == []

    def test_document_order_within_line(self):
        links = parse_links(["[md](one.md) then [[two]]"])
        assert [link.target for link in links] == ["one.md", "two"]

    def test_code_fence_skipped(self):
        lines = ["```", "[[hidden]]", "```", "[[shown]]"]
        links = parse_links(lines)
        assert [(link.target, link.line) for link in links] == [("shown", 4)]

    def test_code_span_skipped(self):
        assert parse_links(["Write `[[literal]]` to link."]) == []

    def test_context_text(self):
        (link,) = parse_links(["   see [[a]] here   "])
        assert link.text == "see [[a]] here"


# ---------------------------------------------------------------------------
# parse_tags
# ---------------------------------------------------------------------------


class TestParseTags:
    def test_single_tag(self):
        assert parse_tags("This is #markdown content.") == ["markdown"]

    def test_multiple_tags(self):
        tags = parse_tags("Post tagged #python and #open-source.")
        assert tags == ["python", "open-source"]

    def test_deduplication(self):
        tags = parse_tags("#python code in #python style")
        assert tags == ["python"]

    def test_no_tags(self):
        assert parse_tags("No hashtags here.") == []

    def test_url_not_matched(self):
        tags = parse_tags("Visit https://example.com/page#section for info.")
        assert "section" not in tags

    def test_nested_tag(self):
        tags = parse_tags("Category #tools/editor used here.")
        assert "tools/editor" in tags

    def test_code_span_excluded(self):
        tags = parse_tags("Use `#include` in C code.")
        assert "include" not in tags

    def test_headings_are_not_tags(self):
        assert parse_tags("# Heading\n## Sub heading") == []

    def test_numbers_are_not_tags(self):
        assert parse_tags("Fixed in issue #42.") == []


# ---------------------------------------------------------------------------
# parse_title
# ---------------------------------------------------------------------------


class TestParseTitle:
    def test_first_h1(self):
        assert parse_title(["intro", "# My Title", "# Second"]) == "My Title"

    def test_h2_is_not_a_title(self):
        assert parse_title(["## Only a section"]) is None

    def test_heading_inside_fence_ignored(self):
        assert parse_title(["```", "# not me", "```"]) is None


# ---------------------------------------------------------------------------
# split_lines
# ---------------------------------------------------------------------------


class TestSplitLines:
    def test_crlf_and_final_newline(self):
        assert split_lines("a\r\nb\n") == ["a", "b"]

    def test_only_newline_separates(self):
        assert split_lines("a\x0cb c\x85d") == ["a\x0cb c\x85d"]

    def test_empty_text(self):
        assert split_lines("") == []

    def test_blank_lines_kept(self):
        assert split_lines("a\n\nb") == ["a", "", "b"]

    def test_wikilinks_after_form_feed(self):
        assert parse_wikilinks("a\x0cb\n[[x]]") == ["x"]
