"""Remote image download."""

from typing import Protocol

import httpx

from imgconv.core.errors import ClientInputError
from imgconv.core.logger import LogIcon, logger


class ImageFetcher(Protocol):
    """Fetches image bytes from a URL."""

    async def fetch(self, url: str) -> bytes: ...


class HttpxImageFetcher:
    """Fetch images with a shared ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def fetch(self, url: str) -> bytes:
        logger.info("Fetching remote image", icon=LogIcon.DOWNLOAD, url=url)
        try:
            response = await self._client.get(url, follow_redirects=True)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as ex:
            logger.warning("Remote image fetch failed", icon=LogIcon.NETWORK, url=url, error=str(ex))
            raise ClientInputError("Failed to fetch image from URL") from ex

        logger.info("Remote image fetched", icon=LogIcon.SUCCESS, url=url, size=len(response.content))
        return response.content
