"""
Runtime configuration for the uploader.

Settings are read from an environment mapping once per request and handed to
the services explicitly; nothing below the API layer looks at os.environ.
"""
from __future__ import annotations

import logging
import os
from typing import Any, Callable, List, Mapping, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


DEFAULT_API_URL = "https://api.github.com"
DEFAULT_BRANCH = "main"
DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024

# Environment variable name -> settings field, in the order they are reported.
REQUIRED_ENV_VARS = {
    "GITHUB_TOKEN": "token",
    "GITHUB_OWNER": "owner",
    "GITHUB_REPO": "repo",
}


def _positive_number(env: Mapping[str, str], name: str, cast: Callable[[str], Any]) -> Any:
    """
    Parse an optional numeric setting. Unparsable or non-positive values are
    ignored with a warning so that the default applies.
    """
    raw = env.get(name)
    if not raw:
        return None
    try:
        value = cast(raw)
    except ValueError:
        logger.warning(f"Ignoring {name}={raw!r}: not a number; using the default")
        return None
    if not value > 0:
        logger.warning(f"Ignoring {name}={raw!r}: must be greater than 0; using the default")
        return None
    return value


class UploaderSettings(BaseModel):
    """
    Target repository coordinates and client limits.
    """

    token: Optional[str] = Field(
        default=None,
        description="GitHub access token used for every Contents API call.",
    )
    owner: Optional[str] = Field(
        default=None,
        description="Owner (user or organisation) of the target repository.",
    )
    repo: Optional[str] = Field(
        default=None,
        description="Name of the target repository.",
    )
    branch: str = Field(
        default=DEFAULT_BRANCH,
        description="Branch that receives the upload commits.",
    )
    api_url: str = Field(
        default=DEFAULT_API_URL,
        description="Base URL of the GitHub REST API.",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to each GitHub request.",
    )
    max_upload_bytes: int = Field(
        default=DEFAULT_MAX_UPLOAD_BYTES,
        gt=0,
        description="Largest decoded payload accepted by the upload endpoint.",
    )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "UploaderSettings":
        env = os.environ if environ is None else environ

        values = {
            field: env.get(name) or None
            for name, field in REQUIRED_ENV_VARS.items()
        }
        values["branch"] = env.get("GITHUB_BRANCH") or DEFAULT_BRANCH
        values["api_url"] = (env.get("GITHUB_API_URL") or DEFAULT_API_URL).rstrip("/")
        timeout = _positive_number(env, "GITHUB_TIMEOUT_SECONDS", float)
        if timeout is not None:
            values["timeout_seconds"] = timeout
        max_bytes = _positive_number(env, "UPLOAD_MAX_BYTES", int)
        if max_bytes is not None:
            values["max_upload_bytes"] = max_bytes
        return cls(**values)

    def missing(self) -> List[str]:
        """
        Names of the required environment variables that are not set.
        """
        return [
            name
            for name, field in REQUIRED_ENV_VARS.items()
            if not getattr(self, field)
        ]

    @property
    def repository(self) -> str:
        return f"{self.owner}/{self.repo}"
