"""Core models for request/response handling."""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Literal


class OutputFormat(StrEnum):
    """Encoded output formats supported by the converter."""

    WEBP = "webp"
    AVIF = "avif"

    @property
    def content_type(self) -> str:
        return f"image/{self.value}"

    @property
    def pil_format(self) -> str:
        return self.value.upper()

    @classmethod
    def parse(cls, value: object) -> "OutputFormat | None":
        """Return the format named by a case-insensitive string, else None."""
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True, slots=True)
class ResizeSpec:
    """Target bounds for a resize. Unset sides scale proportionally."""

    width: int | None = None
    height: int | None = None
    fit: Literal["inside"] | None = None

    def apply(self, width: int, height: int) -> tuple[int, int]:
        """Compute concrete pixel dimensions for a source of the given size."""
        if self.width and self.height:
            if self.fit != "inside":
                return self.width, self.height
            scale = min(self.width / width, self.height / height)
        elif self.width:
            scale = self.width / width
        elif self.height:
            scale = self.height / height
        else:
            return width, height
        return max(1, round(width * scale)), max(1, round(height * scale))


@dataclass(frozen=True, slots=True)
class ImageInput:
    """Normalized conversion request: source bytes plus parameters."""

    data: bytes
    output_format: OutputFormat
    max_width: int | None = None
    max_height: int | None = None
    source: str = "upload"


@dataclass(frozen=True, slots=True)
class TranscodeResult:
    """Encoded image with the dimensions measured before and after."""

    data: bytes
    output_format: OutputFormat
    original_width: int
    original_height: int
    final_width: int
    final_height: int


@dataclass(slots=True)
class InboundRequest:
    """Framework-neutral view of an HTTP request."""

    method: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | str | None = None
    is_base64_encoded: bool = False

    def __post_init__(self) -> None:
        self.method = self.method.upper()
        self.headers = {key.lower(): value for key, value in self.headers.items() if value is not None}

    def header(self, name: str, default: str = "") -> str:
        return self.headers.get(name.lower(), default)

    @property
    def content_type(self) -> str:
        return self.header("content-type")
