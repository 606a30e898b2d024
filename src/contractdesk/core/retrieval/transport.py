from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class FetchedPayload:
    """Bytes returned by a download attempt, with what the server claimed they were."""
    data: bytes
    content_type: Optional[str] = None
    status_code: int = 200


class AbstractFileTransport(ABC):
    """Chat-platform file access used by the retrieval cascade."""

    @abstractmethod
    async def files_info(self, file_id: str) -> Dict[str, Any]:
        """Return the platform's metadata record for a file."""
        pass

    @abstractmethod
    async def shared_public_url(self, file_id: str) -> Optional[str]:
        """Create (or return) a public permalink for a file."""
        pass

    @abstractmethod
    async def fetch(self, url: str) -> FetchedPayload:
        """Authenticated GET with redirects followed by the HTTP client."""
        pass

    @abstractmethod
    async def fetch_streamed(self, url: str, max_redirects: int = 5) -> FetchedPayload:
        """Authenticated streamed GET that follows redirects hop by hop."""
        pass
