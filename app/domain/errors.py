"""
Error taxonomy for the upload endpoint.

Every error carries the HTTP status it is reported with; the API layer turns
them into ``{"error": message}`` responses.
"""
from __future__ import annotations

from typing import List


class UploaderError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    @property
    def response_message(self) -> str:
        return self.message


class ConfigurationError(UploaderError):
    """Required settings are missing."""

    status_code = 500

    def __init__(self, missing: List[str]):
        super().__init__(f"Missing environment variables: {', '.join(missing)}")
        self.missing = list(missing)


class ValidationError(UploaderError):
    """The request itself is unusable."""

    status_code = 400


class MethodNotAllowedError(ValidationError):
    status_code = 405

    def __init__(self, message: str = "Method not allowed"):
        super().__init__(message)


class PayloadTooLargeError(ValidationError):
    status_code = 413


class UpstreamError(UploaderError):
    """
    GitHub answered with a non-success status. The status and the API's own
    message are forwarded to the caller unchanged.
    """

    def __init__(self, message: str, status_code: int, body: object | None = None):
        super().__init__(message, status_code)
        self.body = body


class InternalError(UploaderError):
    status_code = 500

    @property
    def response_message(self) -> str:
        return f"Internal server error: {self.message}"


class IndexSyncError(InternalError):
    """
    The manifest could not be read or rewritten. Raised after the blob commit,
    so the repository already holds the file when this surfaces.
    """
