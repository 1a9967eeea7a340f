"""Pydantic data models."""

from journal_sync.models.post import (
    CodeBlock,
    ContentBlock,
    Post,
    RawBlock,
    TextBlock,
    build_post,
    is_valid_post,
    sort_posts_by_date,
)
from journal_sync.models.credentials import DriveCredentials, FirebaseConfig

__all__ = [
    "CodeBlock",
    "ContentBlock",
    "Post",
    "RawBlock",
    "TextBlock",
    "build_post",
    "is_valid_post",
    "sort_posts_by_date",
    "DriveCredentials",
    "FirebaseConfig",
]
