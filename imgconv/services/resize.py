"""Resize planning from natural dimensions and optional bounds."""

from beartype import beartype

from imgconv.models.core import ResizeSpec


@beartype
def plan_resize(
    width: int,
    height: int,
    max_width: int | None = None,
    max_height: int | None = None,
) -> ResizeSpec | None:
    """Return the resize to apply, or None when the image already fits.

    A single bound constrains that side only and the other side follows the
    aspect ratio. With both bounds the image is fitted inside the box. Images
    are never upscaled.
    """
    match (max_width, max_height):
        case (None, None):
            return None
        case (int(), None):
            return ResizeSpec(width=max_width) if width > max_width else None
        case (None, int()):
            return ResizeSpec(height=max_height) if height > max_height else None
        case _:
            if width > max_width or height > max_height:
                return ResizeSpec(width=max_width, height=max_height, fit="inside")
            return None
