"""Shared fixtures for journal-sync tests."""

import asyncio
import json

import httpx
import pytest

from journal_sync.config import Settings
from journal_sync.exceptions import RemoteAuthFailure, RemoteSyncFailure
from journal_sync.models.post import CodeBlock, Post, TextBlock
from journal_sync.remote.identity import AuthSession
from journal_sync.storage.local_store import LocalStore


def make_post(slug: str, date: str = "2024-01-01", title: str | None = None, **extra) -> Post:
    return Post(
        slug=slug,
        title=title or slug.replace("-", " ").title(),
        date=date,
        excerpt=f"About {slug}",
        tags=extra.pop("tags", ["notes"]),
        content=extra.pop("content", [TextBlock(content=f"Body of {slug}")]),
        **extra,
    )


class FakeRemote:
    """In-memory remote adapter with switchable failure modes."""

    name = "fake"

    def __init__(self, posts=None, *, signed_in=True, fail_save=False, raise_on_save=False):
        self.posts = posts
        self.signed_in = signed_in
        self.fail_save = fail_save
        self.raise_on_save = raise_on_save
        self.saved: list[list[Post]] = []
        self.load_calls = 0
        self.release_save: asyncio.Event | None = None

    def is_configured(self) -> bool:
        return True

    def is_available(self) -> bool:
        return True

    def is_signed_in(self) -> bool:
        return self.signed_in

    async def load(self):
        self.load_calls += 1
        return list(self.posts) if self.posts is not None else None

    async def save(self, posts) -> bool:
        if self.release_save is not None:
            await self.release_save.wait()
        if self.raise_on_save:
            raise RemoteSyncFailure("connection reset", operation="save")
        if self.fail_save:
            return False
        self.saved.append(list(posts))
        return True


class FakeIdentityProvider:
    """Identity provider returning a fixed session, or refusing."""

    def __init__(self, token: str = "google-token", user_id: str = "user-1", fail: bool = False):
        self.token = token
        self.user_id = user_id
        self.fail = fail
        self.authorized: list[tuple[str, str | None]] = []
        self.revoked: list[AuthSession] = []

    async def authorize(self, scope, client_id=None):
        self.authorized.append((scope, client_id))
        if self.fail:
            raise RemoteAuthFailure("popup closed by user", operation="authorize")
        return AuthSession(user_id=self.user_id, access_token=self.token, email="me@example.com")

    async def revoke(self, session):
        self.revoked.append(session)


class FakeGoogle:
    """Records requests and serves canned Drive / Firestore / Identity responses."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.drive_files: dict[str, bytes] = {}
        self.documents: dict[str, dict] = {}
        self.fail_paths: dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        for prefix, status in self.fail_paths.items():
            if path.startswith(prefix):
                return httpx.Response(status, json={"error": {"message": "boom"}})

        if path == "/discovery/v1/apis/drive/v3/rest":
            return httpx.Response(200, json={"name": "drive"})
        if path == "/drive/v3/files" and request.method == "GET":
            files = [{"id": fid, "name": "code-like-a-pro-posts.json"} for fid in self.drive_files]
            return httpx.Response(200, json={"files": files})
        if path == "/upload/drive/v3/files" and request.method == "POST":
            body = request.content.decode("utf-8")
            self.drive_files["new-file"] = body.split("\r\n\r\n")[2].rsplit("\r\n--", 1)[0].encode()
            return httpx.Response(200, json={"id": "new-file"})
        if path.startswith("/upload/drive/v3/files/") and request.method == "PATCH":
            self.drive_files[path.rsplit("/", 1)[1]] = request.content
            return httpx.Response(200, json={})
        if path.startswith("/drive/v3/files/") and request.method == "GET":
            return httpx.Response(200, content=self.drive_files[path.rsplit("/", 1)[1]])
        if path == "/v1/accounts:signInWithIdp":
            return httpx.Response(200, json={"localId": "uid-42", "idToken": "firebase-token", "email": "me@example.com"})
        if "/documents/users/" in path:
            if request.method == "GET":
                if path not in self.documents:
                    return httpx.Response(404, json={"error": {"message": "not found"}})
                return httpx.Response(200, json=self.documents[path])
            if request.method == "PATCH":
                body = json.loads(request.content)
                document = self.documents.setdefault(path, {"fields": {}})
                document["fields"].update(body["fields"])
                return httpx.Response(200, json=document)
        return httpx.Response(404)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, data_dir=tmp_path / "data")


@pytest.fixture
def local_store(settings) -> LocalStore:
    return LocalStore(settings.local_store_dir, quota_bytes=settings.local_quota_bytes)


@pytest.fixture
def sample_posts() -> list[Post]:
    return [
        make_post("first-post", "2024-03-01"),
        make_post(
            "second-post",
            "2024-05-20",
            content=[
                TextBlock(content="Some code:"),
                CodeBlock(content="print('hi')", language="python"),
            ],
        ),
        make_post("third-post", "2023-12-31", tags=[]),
    ]
