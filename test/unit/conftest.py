"""Test fixtures for imgconv-api unit tests."""

import io
from collections.abc import Callable
from dataclasses import dataclass, field

import httpx
import pytest
from PIL import Image

from imgconv.core.lifespan import State
from imgconv.models.core import OutputFormat
from imgconv.services.fetcher import HttpxImageFetcher
from imgconv.services.pipeline import ConversionService
from imgconv.services.resolver import InputResolver, StaticFormatResolver
from imgconv.services.transcode import Transcoder

BOUNDARY = "----imgconvBoundary7MA4YWxkTrZu0gW"


# -----------------------------------------------------------------------------
# Mock classes for Robyn Request/Response
# -----------------------------------------------------------------------------


@dataclass
class MockHeaders:
    """Mock Headers object for Robyn Request."""

    _data: dict = field(default_factory=dict)

    def __post_init__(self) -> None:
        self._data = {key.lower(): value for key, value in self._data.items()}

    def get(self, key: str, default: str | None = None) -> str | None:
        return self._data.get(key.lower(), default)

    def set(self, key: str, value: str) -> None:
        self._data[key.lower()] = value

    def __getitem__(self, key: str) -> str:
        return self._data[key.lower()]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key.lower()] = value


@dataclass
class MockRequest:
    """Mock Request object for Robyn."""

    body: bytes | str = b""
    headers: MockHeaders = field(default_factory=MockHeaders)
    method: str = "POST"
    path: str = "/convert"


@dataclass
class MockResponse:
    """Mock Response object for Robyn."""

    status_code: int = 200
    headers: MockHeaders = field(default_factory=MockHeaders)
    description: bytes | str = b""


# -----------------------------------------------------------------------------
# Image and body builders
# -----------------------------------------------------------------------------


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Factory fixture producing encoded images generated with Pillow."""

    def _make(width: int = 10, height: int = 10, fmt: str = "PNG", mode: str = "RGB") -> bytes:
        color = (200, 30, 30, 255)[: len(mode)] if mode in ("RGB", "RGBA") else 128
        buffer = io.BytesIO()
        Image.new(mode, (width, height), color).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def png_bytes(make_image) -> bytes:
    """A 10x10 opaque PNG."""
    return make_image(10, 10)


def encode_multipart(parts: list[tuple[str, bytes | str, str | None]], boundary: str = BOUNDARY) -> bytes:
    """Build a CRLF multipart/form-data body from (name, value, filename) tuples."""
    chunks: list[bytes] = []
    for name, value, filename in parts:
        disposition = f'Content-Disposition: form-data; name="{name}"'
        headers = [disposition + (f'; filename="{filename}"' if filename else "")]
        if filename:
            headers.append("Content-Type: application/octet-stream")
        data = value.encode("utf-8") if isinstance(value, str) else value
        chunks.append(f"--{boundary}\r\n".encode() + "\r\n".join(headers).encode() + b"\r\n\r\n" + data + b"\r\n")
    chunks.append(f"--{boundary}--\r\n".encode())
    return b"".join(chunks)


@pytest.fixture
def multipart_body() -> Callable[..., bytes]:
    """Factory fixture building multipart bodies."""
    return encode_multipart


# -----------------------------------------------------------------------------
# Service fixtures
# -----------------------------------------------------------------------------


@pytest.fixture
def remote_images(png_bytes: bytes) -> dict[str, httpx.Response]:
    """URL -> response table served by the mock transport."""
    return {
        "https://images.example.com/pixel.png": httpx.Response(200, content=png_bytes),
        "https://images.example.com/missing.png": httpx.Response(404, text="not found"),
    }


@pytest.fixture
async def http_client(remote_images: dict[str, httpx.Response]):
    """AsyncClient backed by httpx.MockTransport."""

    def _handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == "https://images.example.com/unreachable.png":
            raise httpx.ConnectError("connection refused", request=request)
        return remote_images.get(str(request.url), httpx.Response(404))

    async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
        yield client


@pytest.fixture
def fetcher(http_client: httpx.AsyncClient) -> HttpxImageFetcher:
    return HttpxImageFetcher(http_client)


@pytest.fixture
def webp_service(fetcher: HttpxImageFetcher) -> ConversionService:
    """Conversion service defaulting to WebP, running inline on the default executor."""
    resolver = InputResolver(fetcher, default_format=StaticFormatResolver(OutputFormat.WEBP))
    return ConversionService(resolver, Transcoder())


# -----------------------------------------------------------------------------
# State fixture
# -----------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_state() -> State:
    """Create a test state container."""
    return State()


@pytest.fixture
def global_dependencies(test_state: State, http_client: httpx.AsyncClient) -> dict:
    """Setup global dependencies for tests."""
    test_state.http_client = http_client
    test_state.process_pool = None
    yield {"state": test_state}
    test_state.clear()


@pytest.fixture
def make_mock_request() -> Callable[..., MockRequest]:
    """Factory fixture to create mock requests."""

    def _make(body: bytes | str = b"", headers: dict | None = None, method: str = "POST") -> MockRequest:
        return MockRequest(body=body, headers=MockHeaders(headers or {}), method=method)

    return _make


@pytest.fixture
def make_mock_response() -> Callable[..., MockResponse]:
    """Factory fixture to create mock responses."""

    def _make(status_code: int = 200, headers: dict | None = None) -> MockResponse:
        return MockResponse(status_code=status_code, headers=MockHeaders(headers or {}))

    return _make
