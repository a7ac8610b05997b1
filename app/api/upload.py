"""
Upload API: relays a base64 file from the upload page into the GitHub
repository and keeps uploads/index.json current.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.core.config import UploaderSettings
from app.core.dependencies import build_upload_service, get_http_client, get_settings
from app.domain.errors import (
    ConfigurationError,
    InternalError,
    MethodNotAllowedError,
    UploaderError,
    ValidationError,
)
from app.domain.models import UploadRequest

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/upload")
async def upload_file(
    body: Optional[UploadRequest] = None,
    settings: UploaderSettings = Depends(get_settings),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> JSONResponse:
    """
    Commit the posted file to ``uploads/<fileName>.<ext>`` and record it in
    the manifest.

    Request and configuration problems are rejected before any GitHub call
    is made. A failed blob write is answered with GitHub's own status and
    message; everything else that goes wrong is a 500.
    """
    if body is None or not body.file:
        raise ValidationError("No file provided")

    missing = settings.missing()
    if missing:
        logger.error(f"Upload rejected, missing configuration: {', '.join(missing)}")
        raise ConfigurationError(missing)

    service = build_upload_service(settings, client)
    try:
        result = await service.upload(body)
    except UploaderError:
        raise
    except Exception as e:
        logger.error(f"Upload error: {e}", exc_info=True)
        raise InternalError(str(e)) from e

    return JSONResponse(status_code=200, content=result.model_dump(by_alias=True))


@router.api_route("/upload", methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"], include_in_schema=False)
async def upload_method_not_allowed() -> JSONResponse:
    raise MethodNotAllowedError()
