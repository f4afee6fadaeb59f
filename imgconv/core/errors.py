"""Error taxonomy for the conversion flow."""

from robyn import status_codes


class ImageConvertError(Exception):
    """Base exception for image conversion failures."""

    status_code: int = status_codes.HTTP_500_INTERNAL_SERVER_ERROR


class ClientInputError(ImageConvertError):
    """Request could not be turned into an image input. Reported as 4xx."""

    status_code = status_codes.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, *, status_code: int | None = None, usage: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.usage = usage
        if status_code is not None:
            self.status_code = status_code


class ProcessingError(ImageConvertError):
    """Decoding, resizing or encoding failed inside the image library."""
