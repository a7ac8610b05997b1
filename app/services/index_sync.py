"""
Read-modify-write maintenance of the uploads manifest (uploads/index.json).

The manifest is read together with its blob SHA, updated in memory and written
back with that same SHA. If another upload rewrote the manifest in between,
GitHub rejects the write and the error is raised to the caller; there is no
retry loop.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Optional, Tuple

import httpx
from pydantic import ValidationError as PydanticValidationError

from app.domain.errors import IndexSyncError, UpstreamError
from app.domain.models import Manifest, ManifestEntry
from app.domain.upload_utils import INDEX_FILE_PATH, encode_text
from app.storage.content_store import ContentStore

logger = logging.getLogger(__name__)


class IndexSynchronizer:
    def __init__(self, store: ContentStore, index_path: str = INDEX_FILE_PATH):
        self.store = store
        self.index_path = index_path

    async def load(self) -> Tuple[Manifest, Optional[str]]:
        """
        Return the current manifest and its SHA. A manifest that does not exist
        yet comes back empty with a SHA of None.
        """
        try:
            remote = await self.store.get_content(self.index_path)
        except UpstreamError as e:
            raise IndexSyncError(f"Failed to update index: {e.message}") from e
        except httpx.HTTPError as e:
            raise IndexSyncError(f"Failed to update index: {e}") from e

        if remote is None:
            return Manifest(), None

        try:
            text = base64.b64decode(remote.content).decode("utf-8")
            manifest = Manifest.model_validate(json.loads(text))
        except (binascii.Error, UnicodeDecodeError, ValueError, PydanticValidationError) as e:
            raise IndexSyncError(f"Failed to update index: {self.index_path} is not a valid manifest ({e})") from e

        return manifest, remote.sha

    async def merge_entry(self, entry: ManifestEntry) -> Manifest:
        """
        Replace any manifest entry stored under ``entry.path`` with ``entry``
        and commit the manifest in a single PUT.
        """
        manifest, sha = await self.load()
        manifest.replace_entry(entry)

        try:
            await self.store.put_content(
                self.index_path,
                encode_text(manifest.to_json()),
                f"Update index for {entry.name}",
                sha=sha,
            )
        except UpstreamError as e:
            raise IndexSyncError(f"Failed to update index: {e.message}") from e
        except httpx.HTTPError as e:
            raise IndexSyncError(f"Failed to update index: {e}") from e

        logger.info(f"Index {self.index_path} now lists {len(manifest.files)} file(s)")
        return manifest
