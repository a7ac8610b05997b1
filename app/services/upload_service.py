"""
Relay an uploaded file into the target repository and record it in the
uploads manifest.
"""
from __future__ import annotations

import logging

from app.core.config import UploaderSettings
from app.domain.errors import PayloadTooLargeError, ValidationError
from app.domain.models import ManifestEntry, UploadRequest, UploadResponse, utc_timestamp
from app.domain.upload_utils import decode_payload, upload_path
from app.services.index_sync import IndexSynchronizer
from app.storage.content_store import ContentStore

logger = logging.getLogger(__name__)


class UploadService:
    def __init__(self, settings: UploaderSettings, store: ContentStore):
        self.settings = settings
        self.store = store
        self.index = IndexSynchronizer(store)

    async def upload(self, request: UploadRequest) -> UploadResponse:
        """
        Commit the file to ``uploads/<name>.<ext>`` and update the manifest.

        Steps:
            1. Validate and decode the base64 payload.
            2. Probe the target path for an existing blob SHA so that a
               re-upload overwrites instead of failing.
            3. PUT the file (with the SHA when one was found).
            4. Merge the new entry into uploads/index.json.

        Errors from step 3 are forwarded with GitHub's status. A failure in
        step 4 raises IndexSyncError although the file is already committed.
        """
        if not request.file:
            raise ValidationError("No file provided")

        data = decode_payload(request.file)
        if len(data) > self.settings.max_upload_bytes:
            raise PayloadTooLargeError(
                f"File is {len(data)} bytes; the limit is {self.settings.max_upload_bytes} bytes"
            )

        file_path = upload_path(request.file_name, request.original_name)
        file_name = file_path.rsplit("/", 1)[1]

        existing = await self.store.get_content(file_path)
        current_sha = existing.sha if existing else None
        if current_sha:
            logger.info(f"{file_path} already exists at {current_sha}; overwriting")

        result = await self.store.put_content(
            file_path,
            "".join(request.file.split()),
            f"Upload {file_name}",
            sha=current_sha,
        )

        commit_url = result.commit.html_url or ""
        file_url = result.content.html_url or ""
        logger.info(f"Committed {file_path} ({len(data)} bytes) to {self.settings.repository}@{self.store.branch}")

        entry = ManifestEntry(
            name=file_name,
            original_name=request.original_name,
            path=file_path,
            type=request.file_type,
            upload_time=utc_timestamp(),
            commit_url=commit_url,
            file_url=file_url,
            size=len(data),
        )

        try:
            await self.index.merge_entry(entry)
        except Exception:
            logger.error(f"{file_path} was committed but the index update failed", exc_info=True)
            raise

        return UploadResponse(
            commit_url=commit_url,
            file_url=file_url,
            raw_url=result.content.download_url,
            github_url=file_url,
            path=file_path,
        )
