"""
GitHub Contents API implementation of ContentStore.
"""
from __future__ import annotations

import logging
import urllib.parse
from typing import Any, Dict, Optional

import httpx

from app.core.config import UploaderSettings
from app.domain.errors import UpstreamError
from app.domain.models import CommitResult, RemoteContent
from app.storage.content_store import ContentStore

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"


def _error_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {"message": response.text}
    return body if isinstance(body, dict) else {"message": str(body)}


class GitHubContentStore(ContentStore):
    def __init__(self, settings: UploaderSettings, client: httpx.AsyncClient):
        self._settings = settings
        self._client = client

    @property
    def branch(self) -> str:
        return self._settings.branch

    def _url(self, path: str) -> str:
        quoted = urllib.parse.quote(path, safe="/")
        return f"{self._settings.api_url}/repos/{self._settings.owner}/{self._settings.repo}/contents/{quoted}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"token {self._settings.token}",
            "Accept": GITHUB_ACCEPT,
        }

    async def get_content(self, path: str) -> Optional[RemoteContent]:
        response = await self._client.get(
            self._url(path),
            params={"ref": self.branch},
            headers=self._headers(),
            timeout=self._settings.timeout_seconds,
        )

        if response.status_code == 404:
            logger.debug(f"{path} does not exist on {self.branch}")
            return None

        if not response.is_success:
            body = _error_body(response)
            logger.error(f"GitHub API error reading {path}: {response.status_code} {body}")
            raise UpstreamError(
                body.get("message") or f"Failed to read {path} from GitHub",
                response.status_code,
                body,
            )

        content = RemoteContent.model_validate(response.json())
        logger.debug(f"{path} exists on {self.branch} at {content.sha}")
        return content

    async def put_content(
        self,
        path: str,
        content_b64: str,
        message: str,
        sha: Optional[str] = None,
    ) -> CommitResult:
        payload: Dict[str, Any] = {
            "message": message,
            "content": content_b64,
            "branch": self.branch,
        }
        if sha:
            payload["sha"] = sha

        response = await self._client.put(
            self._url(path),
            json=payload,
            headers=self._headers(),
            timeout=self._settings.timeout_seconds,
        )

        if not response.is_success:
            body = _error_body(response)
            logger.error(f"GitHub API error writing {path}: {response.status_code} {body}")
            raise UpstreamError(
                body.get("message") or "Failed to upload file to GitHub",
                response.status_code,
                body,
            )

        return CommitResult.model_validate(response.json())
