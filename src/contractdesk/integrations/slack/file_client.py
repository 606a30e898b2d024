"""Slack Web API file access over httpx"""

from typing import Any, Dict, Optional
from urllib.parse import urljoin

import httpx
from loguru import logger

from contractdesk.core.retrieval.transport import AbstractFileTransport, FetchedPayload
from contractdesk.utils.settings.core import SlackSettings


class SlackApiError(RuntimeError):
    """Slack answered with ok=false."""


class SlackFileClient(AbstractFileTransport):
    """
    Downloads uploaded files with the bot token.

    The httpx client can be injected, which is how tests supply an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        settings: SlackSettings,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ):
        if not settings.bot_token:
            logger.warning("SLACK_BOT_TOKEN is not set; file downloads will be rejected")
        self.settings = settings
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.bot_token or ''}",
            "User-Agent": self.settings.user_agent,
        }

    async def _call(self, method: str, **params: Any) -> Dict[str, Any]:
        response = await self.client.post(
            f"{self.settings.api_base_url.rstrip('/')}/{method}",
            data=params,
            headers=self._headers,
        )
        response.raise_for_status()
        payload = response.json()
        if not payload.get("ok"):
            raise SlackApiError(f"{method} returned error: {payload.get('error', 'unknown')}")
        return payload

    async def files_info(self, file_id: str) -> Dict[str, Any]:
        payload = await self._call("files.info", file=file_id)
        return payload.get("file") or {}

    async def shared_public_url(self, file_id: str) -> Optional[str]:
        payload = await self._call("files.sharedPublicURL", file=file_id)
        return (payload.get("file") or {}).get("permalink_public")

    async def fetch(self, url: str) -> FetchedPayload:
        logger.debug(f"Fetching {url[:60]}...")
        response = await self.client.get(url, headers=self._headers, follow_redirects=True)
        if response.status_code != 200:
            raise httpx.HTTPStatusError(
                f"HTTP {response.status_code} for {url[:60]}",
                request=response.request,
                response=response,
            )
        return FetchedPayload(
            data=response.content,
            content_type=response.headers.get("content-type"),
            status_code=response.status_code,
        )

    async def fetch_streamed(self, url: str, max_redirects: int = 5) -> FetchedPayload:
        current = url
        for _ in range(max_redirects + 1):
            async with self.client.stream(
                "GET", current, headers=self._headers, follow_redirects=False
            ) as response:
                location = response.headers.get("location")
                if 300 <= response.status_code < 400 and location:
                    current = urljoin(current, location)
                    logger.debug(f"Following redirect to {current[:60]}...")
                    continue
                if response.status_code != 200:
                    raise httpx.HTTPStatusError(
                        f"HTTP {response.status_code} for {current[:60]}",
                        request=response.request,
                        response=response,
                    )
                chunks = [chunk async for chunk in response.aiter_bytes()]
                return FetchedPayload(
                    data=b"".join(chunks),
                    content_type=response.headers.get("content-type"),
                    status_code=response.status_code,
                )
        raise RuntimeError(f"Too many redirects fetching {url[:60]}")

    async def aclose(self) -> None:
        await self.client.aclose()
