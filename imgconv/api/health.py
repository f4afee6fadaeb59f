"""Health check endpoint."""

from PIL import features
from pydantic import BaseModel

from imgconv.core.logger import LogIcon, logger
from imgconv.core.router import Router
from imgconv.core.settings import settings as st
from imgconv.models.core import OutputFormat

router = Router(__file__, prefix="/")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    service: str
    version: str
    formats: list[str]


def available_formats() -> list[str]:
    """Output formats the installed Pillow build can encode."""
    return [fmt.value for fmt in OutputFormat if features.check(fmt.value)]


def build_health() -> HealthResponse:
    formats = available_formats()
    status = "healthy" if len(formats) == len(OutputFormat) else "degraded"
    return HealthResponse(status=status, service=st.API_NAME, version=st.API_VERSION, formats=formats)


@router.get("/health")
async def health_check() -> HealthResponse:
    logger.info("Health check requested", icon=LogIcon.HEALTHCHECK)
    return build_health()
