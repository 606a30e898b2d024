"""
Document retrieval cascade.

Transport strategies, in priority order:
1. api_metadata   - look the file up through the platform API, fetch its URL
2. direct_fetch   - authenticated GET of the upload's download URL
3. protocol_fetch - streamed GET following redirects hop by hop
4. public_link    - create a public permalink and fetch with its secret

A download only counts when it is larger than the minimum size and does not
sniff as HTML. Permission problems commonly come back as an HTML login page
with status 200.
"""

from typing import List, Optional

from loguru import logger

from contractdesk.core.errors import RetrievalFailed
from contractdesk.core.retrieval.transport import AbstractFileTransport, FetchedPayload
from contractdesk.models.document import SourceDocument, SourceFile
from contractdesk.utils.fallback import AsyncStrategy, first_success_async

HTML_MARKERS = (b"<!doctype", b"<html")


def sniff_rejection(payload: FetchedPayload, min_bytes: int) -> Optional[str]:
    """Return why a download is unusable, or None when it looks like a document."""
    if len(payload.data) <= min_bytes:
        return f"payload too small ({len(payload.data)} bytes)"
    if "text/html" in (payload.content_type or "").lower():
        return "received HTML content type"
    head = payload.data[:512].lstrip().lower()
    if any(head.startswith(marker) or marker in head[:100] for marker in HTML_MARKERS):
        return "received HTML body"
    return None


class DocumentRetriever:
    """Fetches raw document bytes through an ordered list of transports."""

    def __init__(
        self,
        transport: AbstractFileTransport,
        min_bytes: int = 100,
        timeout: float = 30.0,
    ):
        self.transport = transport
        self.min_bytes = min_bytes
        self.timeout = timeout
        self.strategies: List[AsyncStrategy[FetchedPayload]] = [
            AsyncStrategy("api_metadata", self._api_metadata),
            AsyncStrategy("direct_fetch", self._direct_fetch),
            AsyncStrategy("protocol_fetch", self._protocol_fetch),
            AsyncStrategy("public_link", self._public_link),
        ]

    async def _api_metadata(self, file: SourceFile) -> Optional[FetchedPayload]:
        info = await self.transport.files_info(file.id)
        url = info.get("url_private_download") or info.get("url_private")
        if not url:
            return None
        return await self.transport.fetch(url)

    async def _direct_fetch(self, file: SourceFile) -> Optional[FetchedPayload]:
        if not file.download_url:
            return None
        return await self.transport.fetch(file.download_url)

    async def _protocol_fetch(self, file: SourceFile) -> Optional[FetchedPayload]:
        if not file.download_url:
            return None
        return await self.transport.fetch_streamed(file.download_url)

    async def _public_link(self, file: SourceFile) -> Optional[FetchedPayload]:
        permalink = await self.transport.shared_public_url(file.id)
        if not permalink or not file.url_private:
            return None
        secret = permalink.rstrip("/").rsplit("-", 1)[-1]
        return await self.transport.fetch(f"{file.url_private}?pub_secret={secret}")

    async def retrieve(self, file: SourceFile) -> SourceDocument:
        """
        Download the file behind ``file``.

        Raises:
            RetrievalFailed: If every transport strategy failed
        """
        logger.info(f"Retrieving {file.name} (id={file.id}, size={file.size}, mimetype={file.mimetype})")

        result = await first_success_async(
            self.strategies,
            file,
            accept=lambda payload: sniff_rejection(payload, self.min_bytes),
            timeout=self.timeout,
            label="retrieval",
        )
        if result.is_err():
            logger.error(f"All download strategies failed for {file.name}")
            raise RetrievalFailed(file.name, result.unwrap_err())

        success = result.unwrap()
        payload = success.value
        logger.info(f"Downloaded {len(payload.data)} bytes for {file.name} via {success.name}")

        document = SourceDocument(
            data=payload.data,
            file_name=file.name,
            declared_size=file.size,
            content_type=file.mimetype or payload.content_type,
        )
        if not document.has_pdf_signature():
            logger.warning(f"{file.name} does not start with a %PDF header, continuing")
        return document
