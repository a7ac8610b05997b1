from abc import ABC, abstractmethod
from typing import Optional

from app.domain.models import CommitResult, RemoteContent


class ContentStore(ABC):
    """
    Abstract base class for the repository that receives uploaded files.
    """

    @property
    @abstractmethod
    def branch(self) -> str:
        """Branch that reads and writes target."""
        pass

    @abstractmethod
    async def get_content(self, path: str) -> Optional[RemoteContent]:
        """
        Fetch the file at ``path``, or None when it does not exist.
        Any other failure raises UpstreamError.
        """
        pass

    @abstractmethod
    async def put_content(
        self,
        path: str,
        content_b64: str,
        message: str,
        sha: Optional[str] = None,
    ) -> CommitResult:
        """
        Create or overwrite the file at ``path`` in a single commit.
        ``sha`` must be the current blob SHA when the file already exists.
        """
        pass
