"""Response assembly for conversion results and errors."""

import base64
from dataclasses import dataclass, field
from typing import Any

import orjson
from robyn import Response, status_codes

from imgconv.core.settings import settings as st
from imgconv.models.core import TranscodeResult

JSON_HEADERS = {"Content-Type": "application/json"}


def cors_headers() -> dict[str, str]:
    """CORS headers attached to every conversion response."""
    return {
        "Access-Control-Allow-Origin": st.CORS_ALLOW_ORIGIN,
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
    }


@dataclass(slots=True)
class ConversionResponse:
    """Framework-neutral response: status, headers and raw body bytes."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    @property
    def is_binary(self) -> bool:
        return self.headers.get("Content-Type", "").startswith("image/")

    def json(self) -> Any:
        return orjson.loads(self.body)

    def to_robyn(self) -> Response:
        return Response(status_code=self.status_code, headers=dict(self.headers), description=self.body)

    def to_event(self, extra_headers: dict[str, str] | None = None) -> dict[str, Any]:
        """Render as a serverless function result; binary bodies are base64 encoded."""
        headers = {**(extra_headers or {}), **self.headers}
        if self.is_binary:
            return {
                "statusCode": self.status_code,
                "headers": headers,
                "body": base64.b64encode(self.body).decode("ascii"),
                "isBase64Encoded": True,
            }
        return {
            "statusCode": self.status_code,
            "headers": headers,
            "body": self.body.decode("utf-8"),
        }


def assemble_response(result: TranscodeResult) -> ConversionResponse:
    """Build the success response carrying the encoded image and its dimensions."""
    ext = result.output_format.value
    return ConversionResponse(
        status_code=status_codes.HTTP_200_OK,
        headers={
            "Content-Type": result.output_format.content_type,
            "Content-Disposition": f'inline; filename="converted.{ext}"',
            "X-Original-Width": str(result.original_width),
            "X-Original-Height": str(result.original_height),
            "X-Final-Width": str(result.final_width),
            "X-Final-Height": str(result.final_height),
            "X-Output-Format": ext,
        },
        body=result.data,
    )


def error_response(status_code: int, error: str, **extra: str | None) -> ConversionResponse:
    """Build a JSON error response; ``None`` extras are omitted."""
    payload = {"error": error, **{key: value for key, value in extra.items() if value is not None}}
    return ConversionResponse(status_code=status_code, headers=dict(JSON_HEADERS), body=orjson.dumps(payload))


def empty_response(status_code: int = status_codes.HTTP_200_OK) -> ConversionResponse:
    return ConversionResponse(status_code=status_code)
