import logging
from urllib.parse import urlsplit

import httpx

from .config import HTTP_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)


def _referer_for(url: str) -> str:
    """Scheme and host of the target URL, which the origin expects as Referer."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return ""
    return f"{parts.scheme}://{parts.netloc}"


class PageFetcher:
    """
    Async HTML fetcher for listing and profile pages.

    Failures never raise: a transport error or non-2xx status is logged and
    reported as None so callers can treat it as "no more data". There are no
    retries.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float = HTTP_TIMEOUT):
        self.timeout = timeout
        self.client = client
        self._owns_client = client is None

    async def __aenter__(self):
        """Async context manager entry."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
                timeout=self.timeout,
            )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.client and self._owns_client:
            await self.client.aclose()
            self.client = None
        return False

    async def fetch(self, url: str) -> str | None:
        if not self.client:
            raise RuntimeError("PageFetcher must be used as an async context manager")

        headers = {"User-Agent": USER_AGENT}
        referer = _referer_for(url)
        if referer:
            headers["Referer"] = referer

        try:
            resp = await self.client.get(url, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(f"HTTP {exc.response.status_code} on {url}")
            return None
        except httpx.HTTPError as exc:
            logger.error(f"Request error on {url}: {type(exc).__name__}: {exc}")
            return None

        logger.debug(f"Fetched {url} ({len(resp.text)} chars)")
        return resp.text
