"""JSON envelope and exception handlers shared by every ``/api/v1`` router.

Successful responses are wrapped as::

    {"success": true, "message": "...", "data": ..., "meta": {"timestamp": ..., "version": "v1"}}

Failures are rendered by the handlers installed with
:func:`register_error_handlers`::

    {"success": false, "message": "...", "code": "...", "errors": {...}, "meta": {...}}
"""

from datetime import UTC, datetime
from math import ceil
from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

API_VERSION = "v1"

logger = structlog.get_logger(__name__)

# Domain errors keyed on these fields are business-rule rejections, not bad input
_BUSINESS_ERROR_CODES = {
    "stock": "INSUFFICIENT_STOCK",
    "availability": "PRODUCT_UNAVAILABLE",
    "cart": "CART_EMPTY",
    "wishlist": "ALREADY_IN_WISHLIST",
    "refund": "REFUND_LIMIT_EXCEEDED",
    "status": "INVALID_STATE",
}

_HTTP_ERROR_CODES = {
    400: "BAD_REQUEST",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
}


def _meta(**extra: Any) -> dict[str, Any]:
    return {"timestamp": datetime.now(UTC).isoformat(), "version": API_VERSION, **extra}


class ApiResponse(BaseModel):
    success: bool = True
    message: str = "OK"
    data: Any = None
    meta: dict[str, Any] = Field(default_factory=_meta)


def success(data: Any = None, message: str = "OK") -> ApiResponse:
    return ApiResponse(message=message, data=data)


def paginated(items: list, total: int, page: int, per_page: int, message: str = "OK") -> ApiResponse:
    """Wrap one page of ``items`` with Laravel-style pagination metadata."""
    last_page = max(ceil(total / per_page), 1) if per_page else 1
    first = (page - 1) * per_page + 1 if items else None
    last = first + len(items) - 1 if items else None
    meta = _meta(current_page=page, per_page=per_page, total=total, last_page=last_page)
    meta["from"] = first
    meta["to"] = last
    return ApiResponse(message=message, data=items, meta=meta)


def paginate(records: list, page: int, per_page: int) -> tuple[list, int]:
    """Slice an already-filtered result list; returns ``(page_items, total)``."""
    start = (page - 1) * per_page
    return records[start : start + per_page], len(records)


def error_response(status_code: int, message: str, code: str, errors: Any = None) -> JSONResponse:
    body: dict[str, Any] = {"success": False, "message": message, "code": code}
    if errors:
        body["errors"] = errors
    body["meta"] = _meta()
    return JSONResponse(status_code=status_code, content=body)


def _first_message(messages: dict) -> str:
    for value in messages.values():
        if isinstance(value, list | tuple) and value:
            return str(value[0])
        if value:
            return str(value)
    return "The given data was invalid."


async def _domain_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    messages = exc.messages if isinstance(exc.messages, dict) else {"error": [str(exc.messages)]}
    first_key = next(iter(messages), None)
    code = _BUSINESS_ERROR_CODES.get(first_key)

    logger.info(
        "Request rejected by domain validation",
        path=request.url.path,
        code=code or "VALIDATION_ERROR",
        errors=messages,
    )

    if code:
        return error_response(400, _first_message(messages), code, errors=messages)
    return error_response(422, "The given data was invalid.", "VALIDATION_ERROR", errors=messages)


async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body") or "body"
        errors.setdefault(field, []).append(error.get("msg", "Invalid value"))
    return error_response(422, "The given data was invalid.", "VALIDATION_ERROR", errors=errors)


async def _object_not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    logger.info("Resource not found", path=request.url.path)
    return error_response(404, "Resource not found", "NOT_FOUND")


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Routes may pass {"message": ..., "code": ...} as detail for a specific error code
    if isinstance(exc.detail, dict):
        message = exc.detail.get("message", "Request failed")
        code = exc.detail.get("code", _HTTP_ERROR_CODES.get(exc.status_code, "ERROR"))
    else:
        message = str(exc.detail)
        code = _HTTP_ERROR_CODES.get(exc.status_code, "ERROR")
    return error_response(exc.status_code, message, code)


def register_error_handlers(app: FastAPI) -> None:
    """Install the envelope-rendering exception handlers on ``app``."""
    app.add_exception_handler(ValidationError, _domain_validation_error)
    app.add_exception_handler(RequestValidationError, _request_validation_error)
    app.add_exception_handler(ObjectNotFoundError, _object_not_found)
    app.add_exception_handler(StarletteHTTPException, _http_error)
