from __future__ import annotations

import base64
import hashlib
import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest
from fastapi.testclient import TestClient

from app.core.dependencies import get_http_client
from app.main import app

OWNER = "octo"
REPO = "uploads-repo"
BRANCH = "main"
TOKEN = "test-token"
CONTENTS_PREFIX = f"/repos/{OWNER}/{REPO}/contents/"


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


class FakeGitHub:
    """
    In-memory stand-in for the GitHub Contents API, enforcing the SHA rules
    GitHub applies to overwrites.
    """

    def __init__(self) -> None:
        self.files: Dict[str, Dict[str, str]] = {}
        self.requests: List[httpx.Request] = []
        self.fail_get: Dict[str, Tuple[int, str]] = {}
        self.fail_put: Dict[str, Tuple[int, str]] = {}
        self._commits = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        assert request.headers["Authorization"] == f"token {TOKEN}"
        assert request.url.path.startswith(CONTENTS_PREFIX)
        path = request.url.path[len(CONTENTS_PREFIX):]

        if request.method == "GET":
            assert request.url.params["ref"] == BRANCH
            return self._get(path)
        if request.method == "PUT":
            return self._put(path, json.loads(request.content))
        return httpx.Response(405, json={"message": "Not allowed"})

    def _get(self, path: str) -> httpx.Response:
        if path in self.fail_get:
            status, message = self.fail_get[path]
            return httpx.Response(status, json={"message": message})
        stored = self.files.get(path)
        if stored is None:
            return httpx.Response(404, json={"message": "Not Found"})
        content = stored["content"]
        # GitHub wraps base64 content at 60 characters.
        wrapped = "\n".join(content[i:i + 60] for i in range(0, len(content), 60)) + "\n"
        return httpx.Response(
            200,
            json={
                "type": "file",
                "encoding": "base64",
                "path": path,
                "sha": stored["sha"],
                "content": wrapped,
                "html_url": self.html_url(path),
                "download_url": self.download_url(path),
            },
        )

    def _put(self, path: str, body: Dict[str, Any]) -> httpx.Response:
        assert body["branch"] == BRANCH
        if path in self.fail_put:
            status, message = self.fail_put[path]
            return httpx.Response(status, json={"message": message})

        existing = self.files.get(path)
        if existing is not None and "sha" not in body:
            return httpx.Response(422, json={"message": "Invalid request.\n\n\"sha\" wasn't supplied."})
        if existing is not None and body["sha"] != existing["sha"]:
            return httpx.Response(409, json={"message": f"{path} does not match {body['sha']}"})

        self._commits += 1
        blob_sha = hashlib.sha1(f"{path}:{self._commits}".encode()).hexdigest()
        commit_sha = hashlib.sha1(f"commit:{self._commits}".encode()).hexdigest()
        self.files[path] = {"content": body["content"], "sha": blob_sha, "message": body["message"]}

        return httpx.Response(
            200 if existing is not None else 201,
            json={
                "content": {
                    "path": path,
                    "sha": blob_sha,
                    "html_url": self.html_url(path),
                    "download_url": self.download_url(path),
                },
                "commit": {
                    "sha": commit_sha,
                    "html_url": f"https://github.com/{OWNER}/{REPO}/commit/{commit_sha}",
                },
            },
        )

    @staticmethod
    def html_url(path: str) -> str:
        return f"https://github.com/{OWNER}/{REPO}/blob/{BRANCH}/{path}"

    @staticmethod
    def download_url(path: str) -> str:
        return f"https://raw.githubusercontent.com/{OWNER}/{REPO}/{BRANCH}/{path}"

    def seed(self, path: str, data: bytes, sha: str = "seed-sha") -> None:
        self.files[path] = {"content": b64(data), "sha": sha, "message": "seed"}

    def read(self, path: str) -> bytes:
        return base64.b64decode(self.files[path]["content"])

    def manifest(self) -> Optional[Dict[str, Any]]:
        if "uploads/index.json" not in self.files:
            return None
        return json.loads(self.read("uploads/index.json"))

    def puts(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == "PUT"]


@pytest.fixture
def github_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", TOKEN)
    monkeypatch.setenv("GITHUB_OWNER", OWNER)
    monkeypatch.setenv("GITHUB_REPO", REPO)
    for name in ("GITHUB_BRANCH", "GITHUB_API_URL", "GITHUB_TIMEOUT_SECONDS", "UPLOAD_MAX_BYTES"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def client(github_env: None, fake_github: FakeGitHub):
    async def _mock_http_client():
        async with httpx.AsyncClient(transport=httpx.MockTransport(fake_github)) as http_client:
            yield http_client

    app.dependency_overrides[get_http_client] = _mock_http_client
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()
