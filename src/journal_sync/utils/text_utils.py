"""Text processing helpers for post authoring."""

import re
from datetime import date


EXCERPT_LENGTH = 150


def slugify(text: str) -> str:
    """
    Convert a post title to its URL slug.

    Lowercases the text, collapses every run of characters outside
    ``[a-z0-9]`` into a single hyphen and strips hyphens from both ends.

    Args:
        text: Title to convert

    Returns:
        URL-friendly slug (may be empty for titles without letters or digits)
    """
    text = text.lower()
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")


def truncate_text(text: str, max_length: int, suffix: str = "") -> str:
    """
    Cut text to at most ``max_length`` characters and append ``suffix``.

    Unlike word-boundary truncation this is a hard cut, matching how
    excerpts are derived from the first content block.
    """
    return text[:max_length] + suffix


def format_post_date(value: date | None = None) -> str:
    """Format a date as ``YYYY-MM-DD`` (today when omitted)."""
    value = value or date.today()
    return value.isoformat()


def parse_post_date(value: str) -> date | None:
    """Parse a ``YYYY-MM-DD`` string, returning None when it is not a date."""
    try:
        return date.fromisoformat(value.strip())
    except (AttributeError, ValueError):
        return None


def dedupe_tags(tags) -> list[str]:
    """Strip tags and drop blanks and exact duplicates, keeping first occurrence."""
    seen = set()
    result = []
    for tag in tags:
        tag = str(tag).strip()
        if tag and tag not in seen:
            seen.add(tag)
            result.append(tag)
    return result
