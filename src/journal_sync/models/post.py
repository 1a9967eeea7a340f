"""Post and content block models."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from journal_sync.exceptions import ValidationFailure
from journal_sync.utils.text_utils import (
    EXCERPT_LENGTH,
    dedupe_tags,
    format_post_date,
    parse_post_date,
    slugify,
    truncate_text,
)


DEFAULT_CODE_LANGUAGE = "javascript"


class TextBlock(BaseModel):
    """A paragraph of prose."""

    model_config = ConfigDict(extra="allow")

    type: Literal["text"] = "text"
    content: str = ""


class CodeBlock(BaseModel):
    """A code listing with its highlighting language."""

    model_config = ConfigDict(extra="allow")

    type: Literal["code"] = "code"
    content: str = ""
    language: str = DEFAULT_CODE_LANGUAGE

    @field_validator("language", mode="before")
    @classmethod
    def _default_language(cls, value: Any) -> Any:
        return value or DEFAULT_CODE_LANGUAGE


class RawBlock(BaseModel):
    """A block with an unrecognized shape, kept verbatim and skipped when rendering."""

    model_config = ConfigDict(extra="allow")

    @property
    def kind(self) -> Any:
        return (self.model_extra or {}).get("type")


ContentBlock = Union[TextBlock, CodeBlock, RawBlock]


def _coerce_block(item: Any) -> ContentBlock | None:
    if isinstance(item, (TextBlock, CodeBlock, RawBlock)):
        return item
    if not isinstance(item, Mapping):
        return None
    kind = item.get("type")
    content = item.get("content")
    if kind == "text" and isinstance(content, str):
        return TextBlock(**dict(item))
    language = item.get("language")
    if kind == "code" and isinstance(content, str) and (language is None or isinstance(language, str)):
        return CodeBlock(**dict(item))
    return RawBlock(**dict(item))


class Post(BaseModel):
    """A journal post, keyed by its slug."""

    model_config = ConfigDict(extra="allow")

    slug: str = Field(..., description="URL-safe primary key")
    title: str = Field(..., description="Post title")
    date: str = Field(..., description="Publication date (YYYY-MM-DD)")
    excerpt: str = Field(default="", description="Short summary shown in listings")
    tags: list[str] = Field(default_factory=list, description="Post tags")
    content: list[ContentBlock] = Field(default_factory=list, description="Ordered content blocks")

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [str(tag) for tag in value]
        return value

    @field_validator("content", mode="before")
    @classmethod
    def _coerce_blocks(cls, value: Any) -> Any:
        if not isinstance(value, (list, tuple)):
            return value
        blocks = (_coerce_block(item) for item in value)
        return [block for block in blocks if block is not None]

    def renderable_blocks(self) -> list[TextBlock | CodeBlock]:
        """Blocks with a recognized type, in order."""
        return [b for b in self.content if isinstance(b, (TextBlock, CodeBlock))]

    @property
    def published_on(self) -> date | None:
        """The post date parsed, or None when it is not a valid date."""
        return parse_post_date(self.date)

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready representation used by every storage tier."""
        return self.model_dump(mode="json")


def is_valid_post(candidate: Any) -> bool:
    """Check the minimal shape an imported post must have.

    ``slug``, ``title``, ``date`` and ``excerpt`` must be non-empty strings and
    ``content`` must be a list. Content blocks are not inspected.
    """
    if not isinstance(candidate, Mapping):
        return False
    for key in ("slug", "title", "date", "excerpt"):
        value = candidate.get(key)
        if not isinstance(value, str) or not value:
            return False
    return isinstance(candidate.get("content"), list)


def make_excerpt(blocks: list[ContentBlock]) -> str:
    """Excerpt from the first text block, else a truncated first block."""
    for block in blocks:
        if isinstance(block, TextBlock):
            return truncate_text(block.content, EXCERPT_LENGTH)
    if not blocks:
        return ""
    content = getattr(blocks[0], "content", None) or ""
    return truncate_text(str(content), EXCERPT_LENGTH, suffix="...")


def build_post(
    title: str,
    blocks: Iterable[ContentBlock | Mapping[str, Any]],
    *,
    tags: Iterable[str] = (),
    slug: str | None = None,
    on_date: date | None = None,
) -> Post:
    """Assemble a new post the way the authoring form does.

    The slug is derived from the title unless given, the excerpt from the
    blocks, and the date defaults to today.

    Raises:
        ValidationFailure: If the title or slug is empty, there are no
            blocks, or any block has empty content.
    """
    title = title.strip()
    if not title:
        raise ValidationFailure("Post title is required")

    resolved_slug = (slug if slug is not None else slugify(title)).strip()
    if not resolved_slug:
        raise ValidationFailure("Post slug is required")

    content = [_coerce_block(block) for block in blocks]
    content = [block for block in content if block is not None]
    if not content:
        raise ValidationFailure("Post needs at least one content block")
    if any(not getattr(block, "content", None) for block in content):
        raise ValidationFailure("Content blocks cannot be empty")

    return Post(
        slug=resolved_slug,
        title=title,
        date=format_post_date(on_date),
        excerpt=make_excerpt(content),
        tags=dedupe_tags(tags),
        content=content,
    )


def sort_posts_by_date(posts: Iterable[Post]) -> list[Post]:
    """Return posts newest first; undated posts sort last."""
    return sorted(
        posts,
        key=lambda post: post.published_on or date.min,
        reverse=True,
    )


def posts_to_payload(posts: Iterable[Post]) -> list[dict[str, Any]]:
    """Serialize a collection to plain JSON data."""
    return [post.to_dict() for post in posts]


def posts_from_payload(data: Any) -> list[Post]:
    """Parse plain JSON data into a collection.

    Raises:
        ValidationFailure: If the data is not a list of post objects.
    """
    if not isinstance(data, list):
        raise ValidationFailure("Post collection must be a JSON array")
    try:
        return [Post.model_validate(item) for item in data]
    except ValueError as exc:
        raise ValidationFailure(f"Malformed post in collection: {exc}") from exc
