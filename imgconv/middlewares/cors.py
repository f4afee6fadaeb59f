"""CORS middleware for the conversion endpoint."""

from robyn import Response

from imgconv.middlewares.base import BaseMiddleware
from imgconv.services.response import cors_headers


class CorsMiddleware(BaseMiddleware):
    """Adds the CORS headers to every response of the conversion endpoint."""

    endpoints = frozenset(["/convert"])

    def after(self, response: Response) -> Response:
        for name, value in cors_headers().items():
            response.headers.set(name, value)
        return response
