"""HTTP client lifespan event for remote image downloads."""

import httpx

from imgconv.core.lifespan import BaseEvent
from imgconv.core.settings import settings as st


def create_http_client(timeout: float | None = None) -> httpx.AsyncClient:
    """Create the shared AsyncClient used to fetch ``imageUrl`` sources."""
    return httpx.AsyncClient(timeout=timeout or st.FETCH_TIMEOUT, follow_redirects=True)


class HttpClientEvent(BaseEvent[httpx.AsyncClient]):
    """Manages the httpx.AsyncClient lifecycle."""

    name = "http_client"

    async def startup(self) -> httpx.AsyncClient:
        return create_http_client()

    async def shutdown(self, instance: httpx.AsyncClient) -> None:
        await instance.aclose()
