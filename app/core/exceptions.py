# file: app/core/exceptions.py

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("errors")


class NotFoundError(Exception):
    def __init__(self, resource: str, identifier):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found with id: {identifier}")


class WhatsAppError(Exception):
    pass


class ResponderError(Exception):
    pass


# ============================================================
# Error body
# ============================================================

def _error_body(status_code: int, error: str, message: str, validation_errors: dict | None = None) -> dict:
    body = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status": status_code,
        "error": error,
        "message": message,
    }
    if validation_errors is not None:
        body["validation_errors"] = validation_errors
    return body


def _field_name(loc: tuple) -> str:
    # ("body", "price") -> "price", ("query", "name") -> "name"
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "request"


# ============================================================
# Handlers
# ============================================================

async def not_found_handler(request: Request, exc: NotFoundError):
    logger.error(f"[Errors] Not found: {exc}")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=_error_body(404, "Not Found", str(exc)),
    )


async def whatsapp_error_handler(request: Request, exc: WhatsAppError):
    logger.error(f"[Errors] WhatsApp error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=_error_body(502, "WhatsApp Service Error", str(exc)),
    )


async def responder_error_handler(request: Request, exc: ResponderError):
    logger.error(f"[Errors] Responder error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=_error_body(503, "AI Service Error", str(exc)),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = {}
    for err in exc.errors():
        errors.setdefault(_field_name(tuple(err.get("loc", ()))), err.get("msg", "invalid value"))

    logger.error(f"[Errors] Validation error: {errors}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(400, "Validation Error", "Request field validation failed", errors),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"[Errors] Unexpected error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(500, "Internal Server Error", "An unexpected error occurred. Please contact the administrator."),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(WhatsAppError, whatsapp_error_handler)
    app.add_exception_handler(ResponderError, responder_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
