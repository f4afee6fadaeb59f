"""Image conversion endpoint."""

from robyn import Request

from imgconv.core.lifespan import State
from imgconv.core.router import Router, to_inbound_request
from imgconv.services.fetcher import HttpxImageFetcher
from imgconv.services.pipeline import ConversionService
from imgconv.services.resolver import InputResolver
from imgconv.services.response import ConversionResponse
from imgconv.services.transcode import Transcoder

router = Router(__file__)


def build_service(state: State) -> ConversionService:
    """Wire the conversion service from lifespan resources."""
    fetcher = HttpxImageFetcher(state.http_client)
    return ConversionService(InputResolver(fetcher), Transcoder(state.get("process_pool")))


@router.route_all("/convert")
async def convert(request: Request, global_dependencies) -> ConversionResponse:
    """Convert an uploaded, linked or embedded image to WebP or AVIF."""
    service = build_service(global_dependencies["state"])
    return await service.handle(to_inbound_request(request))
