"""Serverless function entrypoint.

Accepts an event shaped ``{httpMethod, headers, body, isBase64Encoded}`` and
returns ``{statusCode, headers, body, isBase64Encoded}`` with a base64 body
for images.
"""

import asyncio
from typing import Any

from imgconv.events.http_client import create_http_client
from imgconv.models.core import InboundRequest
from imgconv.services.fetcher import HttpxImageFetcher
from imgconv.services.pipeline import ConversionService
from imgconv.services.resolver import InputResolver
from imgconv.services.response import cors_headers
from imgconv.services.transcode import Transcoder


def to_inbound_request(event: dict[str, Any]) -> InboundRequest:
    return InboundRequest(
        method=event.get("httpMethod") or "GET",
        headers=dict(event.get("headers") or {}),
        body=event.get("body") or b"",
        is_base64_encoded=bool(event.get("isBase64Encoded")),
    )


async def handle_event(event: dict[str, Any], service: ConversionService | None = None) -> dict[str, Any]:
    """Run one conversion for a function event."""
    request = to_inbound_request(event)
    if service is not None:
        response = await service.handle(request)
    else:
        async with create_http_client() as client:
            service = ConversionService(InputResolver(HttpxImageFetcher(client)), Transcoder())
            response = await service.handle(request)
    return response.to_event(extra_headers=cors_headers())


def handler(event: dict[str, Any], context: Any = None) -> dict[str, Any]:
    """Synchronous entrypoint for function runtimes."""
    return asyncio.run(handle_event(event))
