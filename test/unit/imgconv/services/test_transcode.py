"""Tests for the Pillow transcoding driver."""

import io

import pytest
from PIL import Image, features

from imgconv.core.errors import ProcessingError
from imgconv.models.core import ImageInput, OutputFormat
from imgconv.services.transcode import Transcoder, default_quality, transcode

requires_avif = pytest.mark.skipif(not features.check("avif"), reason="Pillow built without AVIF support")


def _open(data: bytes) -> Image.Image:
    return Image.open(io.BytesIO(data))


class TestTranscode:
    """Tests for transcode."""

    def test_webp_without_resize(self, png_bytes: bytes) -> None:
        """Verify a small image is re-encoded at its natural size."""
        result = transcode(png_bytes, OutputFormat.WEBP)

        assert result.output_format is OutputFormat.WEBP
        assert (result.original_width, result.original_height) == (10, 10)
        assert (result.final_width, result.final_height) == (10, 10)
        assert _open(result.data).format == "WEBP"

    @requires_avif
    def test_avif_without_resize(self, png_bytes: bytes) -> None:
        result = transcode(png_bytes, OutputFormat.AVIF)

        assert (result.final_width, result.final_height) == (10, 10)
        assert _open(result.data).format == "AVIF"

    def test_fit_inside_resize(self, make_image) -> None:
        """Verify the final size is measured from the encoded output."""
        result = transcode(make_image(400, 200), OutputFormat.WEBP, max_width=192, max_height=108)

        assert (result.original_width, result.original_height) == (400, 200)
        assert (result.final_width, result.final_height) == (192, 96)

    def test_width_only_resize(self, make_image) -> None:
        result = transcode(make_image(300, 150), OutputFormat.WEBP, max_width=100)

        assert (result.final_width, result.final_height) == (100, 50)

    def test_never_upscales(self, make_image) -> None:
        result = transcode(make_image(80, 60), OutputFormat.WEBP, max_width=1920)

        assert (result.final_width, result.final_height) == (80, 60)

    @pytest.mark.parametrize("mode", ["RGBA", "L", "P"])
    def test_converts_image_modes(self, make_image, mode: str) -> None:
        """Verify palette, grayscale and alpha sources encode cleanly."""
        result = transcode(make_image(12, 8, mode=mode), OutputFormat.WEBP)

        assert (result.final_width, result.final_height) == (12, 8)

    def test_accepts_other_source_formats(self, make_image) -> None:
        result = transcode(make_image(16, 16, fmt="JPEG"), OutputFormat.WEBP)

        assert result.final_width == 16

    def test_corrupt_input_raises_processing_error(self) -> None:
        """Verify decode failures surface as ProcessingError."""
        with pytest.raises(ProcessingError):
            transcode(b"definitely not an image", OutputFormat.WEBP)


def test_default_quality() -> None:
    """Verify the fixed encoder quality per format."""
    assert default_quality(OutputFormat.WEBP) == 80
    assert default_quality(OutputFormat.AVIF) == 60


async def test_transcoder_runs_on_default_executor(png_bytes: bytes) -> None:
    """Verify Transcoder awaits transcode off the event loop."""
    image = ImageInput(data=png_bytes, output_format=OutputFormat.WEBP)

    result = await Transcoder().run(image)

    assert result.final_width == 10


async def test_transcoder_propagates_processing_error() -> None:
    image = ImageInput(data=b"junk", output_format=OutputFormat.WEBP)

    with pytest.raises(ProcessingError):
        await Transcoder().run(image)
