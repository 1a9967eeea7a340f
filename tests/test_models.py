"""Tests for Pydantic models."""

from datetime import date

import pytest

from journal_sync.exceptions import ValidationFailure
from journal_sync.models.credentials import DEFAULT_DRIVE_CLIENT_ID, DriveCredentials, FirebaseConfig
from journal_sync.models.post import (
    DEFAULT_CODE_LANGUAGE,
    CodeBlock,
    Post,
    RawBlock,
    TextBlock,
    build_post,
    is_valid_post,
    posts_from_payload,
    sort_posts_by_date,
)

from conftest import make_post


VALID = {
    "slug": "hello",
    "title": "Hello",
    "date": "2024-01-02",
    "excerpt": "Hi",
    "content": [],
}


class TestPost:
    def test_blocks_are_coerced_by_type(self):
        post = Post.model_validate({
            **VALID,
            "content": [
                {"type": "text", "content": "prose"},
                {"type": "code", "content": "x = 1", "language": "python"},
                {"type": "image", "src": "cat.png"},
            ],
        })
        assert isinstance(post.content[0], TextBlock)
        assert isinstance(post.content[1], CodeBlock)
        assert isinstance(post.content[2], RawBlock)
        assert post.content[2].kind == "image"

    def test_code_language_defaults(self):
        post = Post.model_validate({**VALID, "content": [{"type": "code", "content": "ls"}]})
        assert post.content[0].language == DEFAULT_CODE_LANGUAGE

    def test_renderable_blocks_skip_unknown(self):
        post = Post.model_validate({
            **VALID,
            "content": [{"type": "video"}, {"type": "text", "content": "kept"}],
        })
        assert [b.content for b in post.renderable_blocks()] == ["kept"]

    def test_unknown_keys_survive_serialization(self):
        data = {
            **VALID,
            "tags": ["a"],
            "draft": True,
            "content": [{"type": "text", "content": "x", "id": 7}, {"type": "quote", "by": "me"}],
        }
        assert Post.model_validate(data).to_dict() == data

    def test_missing_tags_default_to_empty(self):
        post = Post.model_validate({**VALID, "tags": None})
        assert post.tags == []

    def test_published_on(self):
        assert make_post("a", "2024-02-29").published_on == date(2024, 2, 29)
        assert make_post("b", "someday").published_on is None


class TestIsValidPost:
    def test_accepts_minimal_post(self):
        assert is_valid_post(VALID) is True

    @pytest.mark.parametrize("field", ["slug", "title", "date", "excerpt"])
    def test_rejects_missing_or_empty_field(self, field):
        missing = {k: v for k, v in VALID.items() if k != field}
        assert is_valid_post(missing) is False
        assert is_valid_post({**VALID, field: ""}) is False

    def test_rejects_non_list_content(self):
        assert is_valid_post({**VALID, "content": "text"}) is False

    def test_rejects_non_mapping(self):
        assert is_valid_post(["slug"]) is False
        assert is_valid_post(None) is False

    def test_blocks_are_not_inspected(self):
        assert is_valid_post({**VALID, "content": [42, {"type": "??"}]}) is True


class TestBuildPost:
    def test_derives_slug_excerpt_and_date(self):
        post = build_post(
            "My First Post!",
            [TextBlock(content="Hello world")],
            tags=["python", "python", " notes "],
            on_date=date(2024, 7, 4),
        )
        assert post.slug == "my-first-post"
        assert post.excerpt == "Hello world"
        assert post.date == "2024-07-04"
        assert post.tags == ["python", "notes"]

    def test_excerpt_uses_first_text_block(self):
        post = build_post(
            "Code",
            [CodeBlock(content="a = 1"), TextBlock(content="t" * 200)],
        )
        assert post.excerpt == "t" * 150

    def test_excerpt_falls_back_to_first_block(self):
        post = build_post("Only code", [{"type": "code", "content": "c" * 200, "language": "go"}])
        assert post.excerpt == "c" * 150 + "..."

    def test_explicit_slug(self):
        post = build_post("Title", [TextBlock(content="x")], slug="custom")
        assert post.slug == "custom"

    def test_rejects_empty_block(self):
        with pytest.raises(ValidationFailure, match="empty"):
            build_post("Title", [TextBlock(content="x"), TextBlock(content="")])

    def test_rejects_title_without_slug_characters(self):
        with pytest.raises(ValidationFailure, match="slug"):
            build_post("!!!", [TextBlock(content="x")])

    def test_rejects_no_blocks(self):
        with pytest.raises(ValidationFailure):
            build_post("Title", [])


class TestSorting:
    def test_newest_first_with_bad_dates_last(self):
        posts = [make_post("a", "2023-01-01"), make_post("b", "not a date"), make_post("c", "2024-06-01")]
        assert [p.slug for p in sort_posts_by_date(posts)] == ["c", "a", "b"]

    def test_posts_from_payload_rejects_non_list(self):
        with pytest.raises(ValidationFailure):
            posts_from_payload({"posts": []})


class TestCredentials:
    def test_drive_defaults_client_id(self):
        creds = DriveCredentials.model_validate({"clientId": "", "apiKey": "key"})
        assert creds.client_id == DEFAULT_DRIVE_CLIENT_ID
        assert creds.is_complete is True

    def test_drive_requires_api_key(self):
        assert DriveCredentials().is_complete is False

    def test_firebase_defaults_domains(self):
        config = FirebaseConfig.model_validate({"apiKey": "k", "projectId": "journal"})
        assert config.auth_domain == "journal.firebaseapp.com"
        assert config.storage_bucket == "journal.appspot.com"
        assert config.is_complete is True

    def test_firebase_dump_uses_camel_case(self):
        dumped = FirebaseConfig(api_key="k", project_id="p").model_dump(by_alias=True)
        assert set(dumped) == {
            "apiKey", "authDomain", "projectId", "storageBucket", "messagingSenderId", "appId",
        }
