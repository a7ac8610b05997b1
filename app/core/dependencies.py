from typing import AsyncIterator

import httpx

from app.core.config import UploaderSettings
from app.services.upload_service import UploadService
from app.storage.github_content_store import GitHubContentStore


def get_settings() -> UploaderSettings:
    # Read on every request so that configuration changes need no restart.
    return UploaderSettings.from_env()


async def get_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient() as client:
        yield client


def build_upload_service(settings: UploaderSettings, client: httpx.AsyncClient) -> UploadService:
    return UploadService(settings, GitHubContentStore(settings, client))
