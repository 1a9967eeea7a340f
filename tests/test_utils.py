"""Tests for utility functions."""

from datetime import date

from journal_sync.utils.text_utils import (
    dedupe_tags,
    format_post_date,
    parse_post_date,
    slugify,
    truncate_text,
)


class TestSlugify:
    def test_basic_slugify(self):
        assert slugify("Hello World") == "hello-world"

    def test_special_chars(self):
        assert slugify("Hello, World!") == "hello-world"

    def test_leading_and_trailing_separators(self):
        assert slugify("  --Next.js & React--  ") == "next-js-react"

    def test_non_ascii_is_separator(self):
        assert slugify("Café Résumé") == "caf-r-sum"


class TestTruncateText:
    def test_no_truncation_needed(self):
        assert truncate_text("Short", 100) == "Short"

    def test_hard_cut_with_suffix(self):
        assert truncate_text("abcdef", 3, suffix="...") == "abc..."


class TestDates:
    def test_format_post_date(self):
        assert format_post_date(date(2024, 1, 5)) == "2024-01-05"

    def test_format_defaults_to_today(self):
        assert format_post_date() == date.today().isoformat()

    def test_parse_invalid(self):
        assert parse_post_date("2024-13-01") is None
        assert parse_post_date("") is None


class TestDedupeTags:
    def test_keeps_first_occurrence_order(self):
        assert dedupe_tags(["b", "a", "b", " ", "c"]) == ["b", "a", "c"]
