"""Resolve an inbound request into image bytes plus conversion parameters."""

import base64
import binascii
import re
from typing import Protocol

from pydantic import ValidationError

from imgconv.core.errors import ClientInputError
from imgconv.core.logger import LogIcon, logger
from imgconv.core.multipart import extract_boundary, parse_multipart
from imgconv.core.settings import settings as st
from imgconv.models.core import ImageInput, InboundRequest, OutputFormat
from imgconv.models.requests import JsonImageRequest
from imgconv.services.fetcher import ImageFetcher

JSON_CONTENT_TYPE = "application/json"
MULTIPART_CONTENT_TYPE = "multipart/form-data"

JSON_USAGE = "Include imageUrl, imageBase64, or image field in JSON body"
MULTIPART_USAGE = 'Include an image file in the "image" field'
GENERAL_USAGE = "Send image file, imageUrl, or imageBase64 with optional maxWidth or maxHeight parameters"

_DATA_URL_PREFIX = re.compile(r"^data:image/[\w.+-]+;base64,", re.IGNORECASE)
_DIGITS = re.compile(r"\d+", re.ASCII)


# -----------------------------------------------------------------------------
# Default output format strategies
# -----------------------------------------------------------------------------


class DefaultFormatResolver(Protocol):
    """Chooses the output format when the request does not name one."""

    def __call__(self, request: InboundRequest) -> OutputFormat: ...


class StaticFormatResolver:
    """Always selects the same format."""

    def __init__(self, output_format: OutputFormat) -> None:
        self.output_format = output_format

    def __call__(self, request: InboundRequest) -> OutputFormat:
        return self.output_format


class HostFormatResolver:
    """Select the format from a forwarded host such as ``avif.example.com``."""

    def __init__(self, fallback: OutputFormat | None = None) -> None:
        self.fallback = fallback or OutputFormat(st.DEFAULT_FORMAT)

    def __call__(self, request: InboundRequest) -> OutputFormat:
        host = (request.header("x-forwarded-host") or request.header("host")).lower()
        for output_format in OutputFormat:
            prefix = f"{output_format.value}."
            if host.startswith(prefix) or f"://{prefix}" in host:
                return output_format
        return self.fallback


# -----------------------------------------------------------------------------
# Parameter coercion
# -----------------------------------------------------------------------------


def parse_dimension(name: str, value: object) -> int | None:
    """Coerce an optional maxWidth/maxHeight value to a positive integer."""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    if isinstance(value, str):
        value = value.strip()
    if value is None or value == "":
        return None

    match value:
        case bool():
            number = None
        case int():
            number = value
        case float() if value.is_integer():
            number = int(value)
        case str() if _DIGITS.fullmatch(value):
            number = int(value)
        case _:
            number = None

    if number is None or number <= 0:
        raise ClientInputError(f"{name} must be a positive integer")
    return number


def decode_base64_image(name: str, value: str) -> bytes:
    """Strip an optional data URL prefix and decode base64 image data."""
    payload = _DATA_URL_PREFIX.sub("", value.strip(), count=1)
    try:
        data = base64.b64decode(payload)
    except (binascii.Error, ValueError) as ex:
        raise ClientInputError(f"{name} is not valid base64 data") from ex
    if not data:
        raise ClientInputError(f"{name} is empty")
    return data


def _body_bytes(request: InboundRequest) -> bytes:
    body = request.body or b""
    if request.is_base64_encoded:
        try:
            return base64.b64decode(body)
        except (binascii.Error, ValueError) as ex:
            raise ClientInputError("Request body is not valid base64") from ex
    return body.encode("utf-8") if isinstance(body, str) else body


# -----------------------------------------------------------------------------
# Resolver
# -----------------------------------------------------------------------------


class InputResolver:
    """Normalizes multipart and JSON requests into an ``ImageInput``."""

    def __init__(
        self,
        fetcher: ImageFetcher,
        default_format: DefaultFormatResolver | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._default_format = default_format or HostFormatResolver()

    async def resolve(self, request: InboundRequest) -> ImageInput:
        content_type = request.content_type.lower()

        if JSON_CONTENT_TYPE in content_type:
            return await self._resolve_json(request)
        if MULTIPART_CONTENT_TYPE in content_type:
            return self._resolve_multipart(request)

        raise ClientInputError(
            "Content-Type must be multipart/form-data or application/json",
            usage=GENERAL_USAGE,
        )

    def _output_format(self, request: InboundRequest, requested: object) -> OutputFormat:
        return OutputFormat.parse(requested) or self._default_format(request)

    async def _resolve_json(self, request: InboundRequest) -> ImageInput:
        try:
            payload = JsonImageRequest.model_validate_json(_body_bytes(request))
        except ValidationError as ex:
            raise ClientInputError("Request body must be a valid JSON object", usage=JSON_USAGE) from ex

        if payload.imageUrl:
            data = await self._fetcher.fetch(payload.imageUrl)
            source = "url"
        elif payload.imageBase64:
            data = decode_base64_image("imageBase64", payload.imageBase64)
            source = "base64"
        elif payload.image:
            data = decode_base64_image("image", payload.image)
            source = "base64"
        else:
            raise ClientInputError("No image provided", usage=JSON_USAGE)

        logger.info("Resolved JSON image input", icon=LogIcon.JSON, source=source, size=len(data))
        return ImageInput(
            data=data,
            output_format=self._output_format(request, payload.format),
            max_width=parse_dimension("maxWidth", payload.maxWidth),
            max_height=parse_dimension("maxHeight", payload.maxHeight),
            source=source,
        )

    def _resolve_multipart(self, request: InboundRequest) -> ImageInput:
        boundary = extract_boundary(request.content_type)
        if not boundary:
            raise ClientInputError("Invalid multipart/form-data boundary")

        parts = parse_multipart(request.body or b"", boundary, request.is_base64_encoded)
        if parts.skipped:
            logger.warning("Skipped malformed multipart parts", icon=LogIcon.WARNING, skipped=parts.skipped)

        image = parts.get("image")
        if not isinstance(image, bytes) or not image:
            raise ClientInputError("No image file provided", usage=MULTIPART_USAGE)

        logger.info("Resolved multipart image input", icon=LogIcon.UPLOAD, fields=list(parts), size=len(image))
        return ImageInput(
            data=image,
            output_format=self._output_format(request, parts.get("format")),
            max_width=parse_dimension("maxWidth", parts.get("maxWidth")),
            max_height=parse_dimension("maxHeight", parts.get("maxHeight")),
            source="upload",
        )
