"""Tests for response assembly."""

import base64

from robyn import Response

from imgconv.models.core import OutputFormat, TranscodeResult
from imgconv.services.response import (
    ConversionResponse,
    assemble_response,
    cors_headers,
    empty_response,
    error_response,
)


def _result(output_format: OutputFormat = OutputFormat.WEBP) -> TranscodeResult:
    return TranscodeResult(
        data=b"\x00\x01encoded",
        output_format=output_format,
        original_width=4000,
        original_height=2000,
        final_width=1920,
        final_height=960,
    )


class TestAssembleResponse:
    """Tests for assemble_response."""

    def test_webp_headers(self) -> None:
        response = assemble_response(_result())

        assert response.status_code == 200
        assert response.body == b"\x00\x01encoded"
        assert response.headers == {
            "Content-Type": "image/webp",
            "Content-Disposition": 'inline; filename="converted.webp"',
            "X-Original-Width": "4000",
            "X-Original-Height": "2000",
            "X-Final-Width": "1920",
            "X-Final-Height": "960",
            "X-Output-Format": "webp",
        }

    def test_avif_headers(self) -> None:
        response = assemble_response(_result(OutputFormat.AVIF))

        assert response.headers["Content-Type"] == "image/avif"
        assert response.headers["Content-Disposition"] == 'inline; filename="converted.avif"'
        assert response.headers["X-Output-Format"] == "avif"


class TestConversionResponse:
    """Tests for ConversionResponse rendering."""

    def test_binary_event_is_base64(self) -> None:
        """Verify image bodies are transport-encoded for function runtimes."""
        event = assemble_response(_result()).to_event(extra_headers=cors_headers())

        assert event["statusCode"] == 200
        assert event["isBase64Encoded"] is True
        assert base64.b64decode(event["body"]) == b"\x00\x01encoded"
        assert event["headers"]["Access-Control-Allow-Origin"] == "*"
        assert event["headers"]["X-Final-Width"] == "1920"

    def test_json_event_is_text(self) -> None:
        event = error_response(400, "bad").to_event()

        assert event["statusCode"] == 400
        assert event["body"] == '{"error":"bad"}'
        assert "isBase64Encoded" not in event

    def test_to_robyn(self) -> None:
        response = assemble_response(_result()).to_robyn()

        assert isinstance(response, Response)
        assert response.status_code == 200


def test_error_response_omits_none_extras() -> None:
    response = error_response(500, "Failed to process image", message="boom", usage=None)

    assert response.headers["Content-Type"] == "application/json"
    assert response.json() == {"error": "Failed to process image", "message": "boom"}


def test_empty_response() -> None:
    response = empty_response()

    assert response == ConversionResponse(status_code=200)
    assert response.body == b""


def test_cors_headers() -> None:
    assert cors_headers() == {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Allow-Methods": "POST, OPTIONS",
    }
