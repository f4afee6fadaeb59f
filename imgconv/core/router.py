"""Router with request adaptation, dependency passing and response handling."""

import inspect
from collections.abc import Callable
from functools import wraps
from typing import Any

from pydantic import BaseModel
from robyn import Request, Response, SubRouter, status_codes
from robyn.robyn import HttpMethod

from imgconv.core.errors import ImageConvertError
from imgconv.core.logger import LogIcon, logger
from imgconv.models.core import InboundRequest
from imgconv.services.response import ConversionResponse, error_response

INJECTED_PARAMS = ("request", "global_dependencies")
FORWARDED_HEADERS = ("content-type", "host", "x-forwarded-host", "x-request-id")


def parse_endpoint_signature(sig: inspect.Signature) -> frozenset[str]:
    """Return the Robyn-injected parameters a handler declares."""
    return frozenset(name for name in sig.parameters if name in INJECTED_PARAMS)


def to_inbound_request(request: Request) -> InboundRequest:
    """Convert a Robyn request to the framework-neutral request model."""
    headers = {}
    for name in FORWARDED_HEADERS:
        value = request.headers.get(name)
        if value:
            headers[name] = value

    body = request.body
    # Robyn hands over UTF-8 decodable bodies as text
    if isinstance(body, str):
        body = body.encode("utf-8")

    return InboundRequest(method=str(request.method), headers=headers, body=body or b"")


def parse_response(result: Any) -> Response:
    """Convert handler result to Response."""
    match result:
        case Response():
            return result
        case ConversionResponse():
            return result.to_robyn()
        case BaseModel():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=result.model_dump_json(indent=4),
            )
        case _:
            raise TypeError(f"Unsupported handler result: {type(result).__name__}")


def parse_error(ex: ImageConvertError) -> Response:
    """Convert a domain error escaping a handler to a JSON error Response."""
    message = getattr(ex, "message", None) or str(ex)
    return error_response(ex.status_code, message, usage=getattr(ex, "usage", None)).to_robyn()


HTTP_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.PATCH,
    HttpMethod.HEAD,
    HttpMethod.OPTIONS,
    HttpMethod.TRACE,
    HttpMethod.CONNECT,
)


def _create_method_wrapper(original_method: Callable) -> Callable:
    @wraps(original_method)
    def method_wrapper(*args, **kwargs) -> Callable:
        decorator = original_method(*args, **kwargs)

        def handler_decorator(handler: Callable) -> Callable:
            sig = inspect.signature(handler)
            injected = parse_endpoint_signature(sig)

            @wraps(handler)
            async def wrapped_handler(request: Request, **h_kwargs):
                # Pass request to handler only if it declared it
                if "request" in injected:
                    h_kwargs["request"] = request

                try:
                    result = await handler(**h_kwargs)
                except ImageConvertError as ex:
                    logger.warning("Handler raised domain error", icon=LogIcon.ERROR, error=str(ex))
                    return parse_error(ex)
                return parse_response(result)

            # Build signature: always include request for Robyn injection
            new_params = [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
            new_params.extend(param for name, param in sig.parameters.items() if name != "request")

            wrapped_handler.__signature__ = sig.replace(parameters=new_params)  # type: ignore[attr-defined]
            return decorator(wrapped_handler)

        return handler_decorator

    return method_wrapper


class Router(SubRouter):
    """Enhanced SubRouter with request adaptation and response handling."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        """Wrap HTTP methods with response handling."""
        for method in HTTP_METHODS:
            method_name = str(method).split(".")[-1].lower()
            if hasattr(self, method_name):
                original_method = getattr(self, method_name)
                setattr(self, method_name, _create_method_wrapper(original_method))

    def route_all(self, endpoint: str) -> Callable:
        """Register one handler for every HTTP method on an endpoint."""

        def decorator(handler: Callable) -> Callable:
            for method in HTTP_METHODS:
                method_name = str(method).split(".")[-1].lower()
                if hasattr(self, method_name):
                    getattr(self, method_name)(endpoint)(handler)
            return handler

        return decorator
