"""Binary multipart/form-data body parser.

The parser works on a single in-memory buffer and never raises on malformed
input: truncated bodies yield the parts completed before the truncation point
and parts without a field name are counted in ``MultipartResult.skipped``.
Line breaks are expected to be CRLF.
"""

import base64
import binascii
import re

CRLF = b"\r\n"
HEADER_SEPARATOR = b"\r\n\r\n"

_NAME_RE = re.compile(r'(?<![\w*-])name="([^"]+)"')
_FILENAME_MARKER = "filename="


class MultipartResult(dict[str, bytes | str]):
    """Parsed fields keyed by name: ``bytes`` for files, ``str`` for text fields."""

    def __init__(self) -> None:
        super().__init__()
        self.skipped = 0

    @property
    def files(self) -> dict[str, bytes]:
        return {name: value for name, value in self.items() if isinstance(value, bytes)}

    @property
    def fields(self) -> dict[str, str]:
        return {name: value for name, value in self.items() if isinstance(value, str)}


def extract_boundary(content_type: str) -> str | None:
    """Return the ``boundary=`` parameter of a content type, or None if absent or empty."""
    _, found, tail = content_type.partition("boundary=")
    if not found:
        return None
    boundary = tail.split(";", 1)[0].strip().strip('"')
    return boundary or None


def _to_buffer(body: bytes | str, is_encoded: bool) -> bytes:
    if is_encoded:
        return base64.b64decode(body)
    if isinstance(body, str):
        return body.encode("latin-1", errors="replace")
    return bytes(body)


def parse_multipart(body: bytes | str, boundary: str, is_encoded: bool = False) -> MultipartResult:
    """Split a multipart body into named parts.

    Args:
        body: Raw request body, or its base64 text when ``is_encoded`` is set.
        boundary: Boundary token from the content type, without leading dashes.
        is_encoded: Whether the body is base64 transport-encoded.

    Returns:
        MultipartResult mapping field names to values. Repeated names keep the last value.
    """
    result = MultipartResult()
    try:
        buffer = _to_buffer(body, is_encoded)
    except (binascii.Error, ValueError):
        return result

    part_marker = b"--" + boundary.encode("utf-8")
    end_marker = part_marker + b"--"
    position = 0

    while position < len(buffer):
        marker_index = buffer.find(part_marker, position)
        if marker_index == -1:
            break

        position = marker_index + len(part_marker)
        if buffer.startswith(CRLF, position):
            position += len(CRLF)

        if buffer.startswith(end_marker, marker_index):
            break

        headers_end = buffer.find(HEADER_SEPARATOR, position)
        if headers_end == -1:
            break

        headers = buffer[position:headers_end].decode("utf-8", errors="replace")
        name_match = _NAME_RE.search(headers)
        if not name_match:
            result.skipped += 1
            position = headers_end + len(HEADER_SEPARATOR)
            continue

        field_name = name_match.group(1)
        is_file = _FILENAME_MARKER in headers
        position = headers_end + len(HEADER_SEPARATOR)

        next_marker = buffer.find(part_marker, position)
        if next_marker == -1:
            break

        # The CRLF preceding the next boundary is framing, not content
        content = buffer[position:max(position, next_marker - len(CRLF))]
        result[field_name] = content if is_file else content.decode("utf-8", errors="replace")

        position = next_marker

    return result
