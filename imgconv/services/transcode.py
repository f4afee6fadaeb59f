"""Pillow-backed decode, resize and encode."""

import asyncio
import io
from concurrent.futures import Executor

from PIL import Image, UnidentifiedImageError

from imgconv.core.errors import ProcessingError
from imgconv.core.logger import LogIcon, logger
from imgconv.core.settings import settings as st
from imgconv.models.core import ImageInput, OutputFormat, TranscodeResult
from imgconv.services.resize import plan_resize


def default_quality(output_format: OutputFormat) -> int:
    """Fixed encoder quality for a format."""
    return st.AVIF_QUALITY if output_format is OutputFormat.AVIF else st.WEBP_QUALITY


def _normalize_mode(img: Image.Image) -> Image.Image:
    """Convert palette, grayscale, CMYK and high bit-depth images to RGB(A)."""
    if img.mode in ("RGB", "RGBA"):
        return img
    has_alpha = "A" in img.getbands() or "transparency" in img.info
    return img.convert("RGBA" if has_alpha else "RGB")


def transcode(
    data: bytes,
    output_format: OutputFormat,
    max_width: int | None = None,
    max_height: int | None = None,
    quality: int | None = None,
) -> TranscodeResult:
    """
    Decode an image, resize it if it exceeds the bounds and encode it.

    Framework-agnostic and picklable, so it can run in a process pool.

    Args:
        data: Source image bytes in any format Pillow can decode
        output_format: Target format
        max_width: Optional width bound
        max_height: Optional height bound
        quality: Encoder quality; defaults to the configured value for the format

    Returns:
        TranscodeResult with the encoded bytes and the measured dimensions

    Raises:
        ProcessingError: If Pillow fails to decode or encode the image
    """
    quality = quality if quality is not None else default_quality(output_format)

    try:
        with Image.open(io.BytesIO(data)) as source:
            original_width, original_height = source.size
            img = _normalize_mode(source)

            resize = plan_resize(original_width, original_height, max_width, max_height)
            if resize is not None:
                img = img.resize(resize.apply(original_width, original_height), Image.Resampling.LANCZOS)

            buffer = io.BytesIO()
            img.save(buffer, format=output_format.pil_format, quality=quality)
            encoded = buffer.getvalue()

        # Final dimensions are measured from the encoded output
        with Image.open(io.BytesIO(encoded)) as output:
            final_width, final_height = output.size
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError, KeyError, Image.DecompressionBombError) as ex:
        raise ProcessingError(str(ex) or ex.__class__.__name__) from ex

    return TranscodeResult(
        data=encoded,
        output_format=output_format,
        original_width=original_width,
        original_height=original_height,
        final_width=final_width,
        final_height=final_height,
    )


class Transcoder:
    """Runs ``transcode`` off the event loop on the given executor."""

    def __init__(self, executor: Executor | None = None) -> None:
        self._executor = executor

    async def run(self, image: ImageInput) -> TranscodeResult:
        logger.info(
            "Transcoding image",
            icon=LogIcon.PROCESSOR,
            format=image.output_format.value,
            size=len(image.data),
            max_width=image.max_width,
            max_height=image.max_height,
        )
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(
            self._executor,
            transcode,
            image.data,
            image.output_format,
            image.max_width,
            image.max_height,
            default_quality(image.output_format),
        )
        logger.info(
            "Image transcoded",
            icon=LogIcon.SUCCESS,
            original=f"{result.original_width}x{result.original_height}",
            final=f"{result.final_width}x{result.final_height}",
            bytes=len(result.data),
        )
        return result
