"""
Global exception handlers for consistent API errors.
"""
import logging
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import (
    FieldValidationError,
    FlowBusy,
    InvalidCode,
    InvalidCredentials,
    NoteLocked,
    NoteMissing,
    ServiceError,
    SessionLocked,
    UserNotFound,
)


def _req_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", object()), "request_id", None)


def _respond(request: Request, status_code: int, body: Dict[str, Any]) -> JSONResponse:
    rid = _req_id(request)
    if rid:
        body["request_id"] = rid
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    log = logging.getLogger("notes.errors")

    @app.exception_handler(StarletteHTTPException)
    async def _http_exc_handler(request: Request, exc: StarletteHTTPException):
        return _respond(request, exc.status_code, {"message": exc.detail or "HTTP error"})

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in e.get("loc", ())[1:]), "message": e.get("msg", "")}
            for e in exc.errors()
        ]
        return _respond(request, 422, {"message": "Validation error", "errors": errors})

    @app.exception_handler(FieldValidationError)
    async def _field_handler(request: Request, exc: FieldValidationError):
        # Errores de entrada: se muestran junto al campo, sin log
        return _respond(
            request,
            422,
            {"message": "Validation error", "errors": [{"field": exc.field, "message": exc.message}]},
        )

    @app.exception_handler(InvalidCode)
    async def _invalid_code_handler(request: Request, exc: InvalidCode):
        log.info("QR rechazado reason=%s request_id=%s", exc.reason, _req_id(request))
        return _respond(request, 400, {"message": InvalidCode.message})

    @app.exception_handler(NoteMissing)
    async def _missing_handler(request: Request, exc: NoteMissing):
        return _respond(request, 404, {"message": exc.message})

    @app.exception_handler(InvalidCredentials)
    async def _credentials_handler(request: Request, exc: InvalidCredentials):
        return _respond(request, 401, {"message": exc.message})

    @app.exception_handler(UserNotFound)
    async def _user_handler(request: Request, exc: UserNotFound):
        return _respond(request, 401, {"message": exc.message})

    @app.exception_handler(SessionLocked)
    async def _locked_handler(request: Request, exc: SessionLocked):
        return _respond(request, 403, {"message": exc.message})

    @app.exception_handler(NoteLocked)
    async def _note_locked_handler(request: Request, exc: NoteLocked):
        return _respond(request, 403, {"message": exc.message})

    @app.exception_handler(FlowBusy)
    async def _busy_handler(request: Request, exc: FlowBusy):
        return _respond(request, 409, {"message": exc.message, "flow": exc.flow})

    @app.exception_handler(ServiceError)
    async def _service_handler(request: Request, exc: ServiceError):
        log.exception(
            "Service error request_id=%s path=%s: %s", _req_id(request), request.url.path, exc.__cause__ or exc, exc_info=exc
        )
        return _respond(request, 503, {"message": ServiceError.message})

    @app.exception_handler(Exception)
    async def _generic_handler(request: Request, exc: Exception):
        rid = _req_id(request)
        log.exception("Unhandled error request_id=%s", rid)
        return _respond(request, 500, {"message": "Internal server error"})
