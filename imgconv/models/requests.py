"""Request payload models."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class JsonImageRequest(BaseModel):
    """JSON body for conversion requests. Exactly one image source is used."""

    model_config = ConfigDict(extra="ignore")

    imageUrl: str | None = None
    imageBase64: str | None = None
    image: str | None = None
    maxWidth: Any = None
    maxHeight: Any = None
    format: Any = None
