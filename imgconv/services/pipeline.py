"""Conversion service: method dispatch, conversion flow and error mapping."""

from uuid import uuid4

import structlog
from asgi_correlation_id import correlation_id
from robyn import status_codes

from imgconv.core.errors import ClientInputError
from imgconv.core.logger import LogIcon, logger
from imgconv.models.core import InboundRequest
from imgconv.services.resolver import InputResolver
from imgconv.services.response import ConversionResponse, assemble_response, empty_response, error_response
from imgconv.services.transcode import Transcoder


class ConversionService:
    """Handles one conversion request end to end."""

    def __init__(self, resolver: InputResolver, transcoder: Transcoder) -> None:
        self._resolver = resolver
        self._transcoder = transcoder

    async def handle(self, request: InboundRequest) -> ConversionResponse:
        request_id = request.header("x-request-id") or uuid4().hex
        token = correlation_id.set(request_id)
        try:
            with structlog.contextvars.bound_contextvars(request_id=request_id):
                return await self._dispatch(request)
        finally:
            correlation_id.reset(token)

    async def _dispatch(self, request: InboundRequest) -> ConversionResponse:
        match request.method:
            case "OPTIONS":
                return empty_response()
            case "POST":
                pass
            case _:
                logger.warning("Method not allowed", icon=LogIcon.FORBIDDEN, method=request.method)
                return error_response(status_codes.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed. Use POST.")

        try:
            return await self._convert(request)
        except ClientInputError as ex:
            logger.warning("Rejected conversion request", icon=LogIcon.VALIDATION, error=ex.message)
            return error_response(ex.status_code, ex.message, usage=ex.usage)
        except Exception as ex:
            logger.exception("Error processing image", icon=LogIcon.ERROR, error=str(ex))
            return error_response(
                status_codes.HTTP_500_INTERNAL_SERVER_ERROR,
                "Failed to process image",
                message=str(ex),
            )

    async def _convert(self, request: InboundRequest) -> ConversionResponse:
        image = await self._resolver.resolve(request)
        result = await self._transcoder.run(image)
        return assemble_response(result)
