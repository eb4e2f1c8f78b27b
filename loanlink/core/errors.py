from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class LoanLinkError(Exception):
    """Base for errors that map onto a JSON failure response."""

    status_code: int = 500
    code: str = "server_error"
    default_message: str = "Server error"

    def __init__(self, message: str | None = None, **extra: Any) -> None:
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)


class Unauthenticated(LoanLinkError):
    status_code = 401
    code = "unauthenticated"
    default_message = "Authentication required"


class Forbidden(LoanLinkError):
    status_code = 403
    code = "forbidden"
    default_message = "Access denied"


class NotFound(LoanLinkError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class InvalidState(LoanLinkError):
    status_code = 400
    code = "invalid_state"
    default_message = "Operation not allowed in the current state"


class AlreadyPaid(LoanLinkError):
    status_code = 400
    code = "already_paid"
    default_message = "Application fee already paid"


class PaymentNotSuccessful(LoanLinkError):
    status_code = 400
    code = "payment_not_successful"
    default_message = "Payment not successful"


class ConcurrentUpdate(LoanLinkError):
    status_code = 409
    code = "concurrent_update"
    default_message = "The record was updated by another request. Please refresh and retry."


class PaymentServiceUnavailable(LoanLinkError):
    status_code = 500
    code = "payment_service_unavailable"
    default_message = "Payment service is not configured. Please contact administrator."


class PaymentProviderError(LoanLinkError):
    status_code = 500
    code = "payment_provider_error"
    default_message = "Server error"


def _default_message(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Request failed"


def _build_response(
    status_code: int,
    message: str,
    extra: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    payload: dict[str, Any] = {"message": message}
    if extra:
        payload.update(extra)
    return JSONResponse(
        status_code=status_code, content=jsonable_encoder(payload), headers=headers
    )


async def loanlink_exception_handler(request: Request, exc: LoanLinkError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Request failed code=%s message=%s", exc.code, exc.message)
    return _build_response(exc.status_code, exc.message, exc.extra)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("message") or _default_message(exc.status_code)
        extra = {k: v for k, v in detail.items() if k != "message"}
    elif isinstance(detail, str):
        message, extra = detail, None
    else:
        message, extra = _default_message(exc.status_code), None
    return _build_response(exc.status_code, message, extra, headers=getattr(exc, "headers", None))


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    message = "Validation failed"
    if errors:
        first = errors[0] or {}
        loc = first.get("loc") or []
        msg = first.get("msg") or "Validation failed"
        # Drop the request section (body/query/path) from the location
        loc_parts = [str(part) for part in loc if part not in {"body", "query", "path"}]
        if loc_parts:
            message = f"{'.'.join(loc_parts)}: {msg}"
        else:
            message = str(msg)
    return _build_response(422, message, {"errors": errors})


async def rate_limit_exception_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    response = _build_response(429, _default_message(429), {"error": str(exc.detail)})
    headers = getattr(exc, "headers", None)
    if isinstance(headers, dict):
        response.headers.update(headers)
    return response


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _build_response(500, "Server error", {"error": str(exc)})


def register_exception_handlers(app) -> None:
    app.add_exception_handler(LoanLinkError, loanlink_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
