"""
Pydantic models for the upload endpoint, the GitHub Contents API and the
uploads manifest.

Wire formats use camelCase keys (``originalName``, ``lastUpdated``); Python
code uses snake_case attributes. Always dump with ``by_alias=True``.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """
    ISO-8601 UTC timestamp with millisecond precision and a ``Z`` suffix.
    """
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Upload endpoint
# ---------------------------------------------------------------------------


class UploadRequest(BaseModel):
    """
    JSON body posted by the upload page.

    All fields are optional here so that a request without a file is reported
    as "No file provided" rather than as a schema error.
    """

    model_config = ConfigDict(populate_by_name=True)

    file: Optional[str] = Field(
        default=None,
        description="Base64-encoded file content (no data: URL prefix).",
    )
    file_name: Optional[str] = Field(
        default=None,
        alias="fileName",
        description="Desired base name of the stored file, without extension.",
    )
    original_name: Optional[str] = Field(
        default=None,
        alias="originalName",
        description="Name of the file on the user's machine; used for the extension.",
    )
    file_type: Optional[str] = Field(
        default=None,
        alias="fileType",
        description="MIME type reported by the browser.",
    )


class UploadResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    commit_url: str = Field(alias="commitUrl")
    file_url: str = Field(alias="fileUrl")
    raw_url: Optional[str] = Field(default=None, alias="rawUrl")
    github_url: str = Field(alias="githubUrl")
    path: str
    message: str = "File uploaded successfully"


# ---------------------------------------------------------------------------
# GitHub Contents API
# ---------------------------------------------------------------------------


class RemoteContent(BaseModel):
    """
    A file object returned by ``GET /repos/{owner}/{repo}/contents/{path}``.
    """

    model_config = ConfigDict(extra="ignore")

    sha: str
    path: Optional[str] = None
    content: str = ""
    encoding: Optional[str] = None
    html_url: Optional[str] = None
    download_url: Optional[str] = None


class CommittedContent(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sha: Optional[str] = None
    path: Optional[str] = None
    html_url: Optional[str] = None
    download_url: Optional[str] = None


class CommitInfo(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sha: Optional[str] = None
    html_url: Optional[str] = None


class CommitResult(BaseModel):
    """
    Response body of a successful ``PUT .../contents/{path}``.
    """

    model_config = ConfigDict(extra="ignore")

    content: CommittedContent = Field(default_factory=CommittedContent)
    commit: CommitInfo = Field(default_factory=CommitInfo)


# ---------------------------------------------------------------------------
# Manifest (uploads/index.json)
# ---------------------------------------------------------------------------


class ManifestEntry(BaseModel):
    """
    One uploaded file as recorded in the manifest.

    Keys written by other tools are kept when the manifest is rewritten.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: Optional[str] = None
    original_name: Optional[str] = Field(default=None, alias="originalName")
    path: Optional[str] = None
    type: Optional[str] = None
    upload_time: Optional[str] = Field(default=None, alias="uploadTime")
    commit_url: Optional[str] = Field(default=None, alias="commitUrl")
    file_url: Optional[str] = Field(default=None, alias="fileUrl")
    size: Optional[int] = None


class Manifest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    files: List[ManifestEntry] = Field(default_factory=list)
    last_updated: str = Field(default_factory=utc_timestamp, alias="lastUpdated")

    def replace_entry(self, entry: ManifestEntry) -> None:
        """
        Drop every entry stored under ``entry.path`` and append ``entry``.
        """
        self.files = [f for f in self.files if f.path != entry.path]
        self.files.append(entry)
        self.last_updated = utc_timestamp()

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2, exclude_none=True)
