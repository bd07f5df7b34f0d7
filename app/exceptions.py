from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse


class WeatherLookupError(Exception):
    """Base for every failure that ends a lookup request.

    Each subclass fixes the client-facing `code` and HTTP `status_code`; the
    message is safe to show to clients (no upstream bodies, no tracebacks).
    """

    code = "lookup_error"
    status_code = 500
    default_message = "Lookup failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"detail": self.message, "code": self.code}


class MethodNotAllowed(WeatherLookupError):
    code = "method_not_allowed"
    status_code = 405
    default_message = "Method not allowed"


class RequestReadError(WeatherLookupError):
    code = "request_read_error"
    status_code = 500
    default_message = "Error reading request body"


class MalformedBody(WeatherLookupError):
    code = "malformed_body"
    status_code = 422
    default_message = "Invalid zipcode"


class InvalidPostalCode(WeatherLookupError):
    code = "invalid_zipcode"
    status_code = 422
    default_message = "Invalid zipcode"


class UpstreamUnreachable(WeatherLookupError):
    code = "upstream_unreachable"
    status_code = 502
    default_message = "Error reaching upstream service"


class UpstreamTimeout(UpstreamUnreachable):
    code = "upstream_timeout"
    status_code = 504
    default_message = "Upstream service timed out"


class LocalityNotFound(WeatherLookupError):
    code = "zipcode_not_found"
    status_code = 404
    default_message = "Can not find zipcode"


class LocalityParseError(LocalityNotFound):
    code = "locality_parse_error"
    status_code = 500
    default_message = "Error parsing zipcode"


class UpstreamError(WeatherLookupError):
    code = "upstream_error"
    status_code = 500
    default_message = "Error requesting weather"


class ResponseParseError(WeatherLookupError):
    code = "response_parse_error"
    status_code = 500
    default_message = "Error parsing weather"


class ResponseDecodeError(WeatherLookupError):
    code = "response_decode_error"
    status_code = 500
    default_message = "Error parsing weather response"


class MissingCredential(WeatherLookupError):
    code = "missing_credential"
    status_code = 500
    default_message = "Error finding weather api key"


class ResponseEncodeError(WeatherLookupError):
    code = "response_encode_error"
    status_code = 500
    default_message = "Error returning weather response"


async def weather_lookup_exception_handler(request: Request, exc: WeatherLookupError) -> JSONResponse:
    request.app.state.metrics.observe_lookup_error(exc.code)
    structlog.get_logger("lookup").warning(
        "lookup.failed",
        code=exc.code,
        status_code=exc.status_code,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WeatherLookupError, weather_lookup_exception_handler)  # type: ignore[arg-type]
