"""
Translation of domain errors into HTTP responses. Call `add_exception_handlers`
on the app at startup, otherwise these surface as 500s.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from structlog import get_logger

from studygroups.core.group import StudyGroupError
from studygroups.service.repository import (
    StudyGroupExistsError,
    StudyGroupNotFound,
    UserNotFound,
)


async def _respond(request: Request, exc: Exception, status_code: int, detail):
    log = get_logger()
    log = log.bind(
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=status_code,
    )
    await log.ainfo("api.error", detail=detail)
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def bad_request_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Validation failures and membership conflicts; the client sent something
    the current state cannot accept.
    """
    return await _respond(request, exc, 400, str(exc))


async def not_found_handler(request: Request, exc: Exception) -> JSONResponse:
    return await _respond(request, exc, 404, str(exc))


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Payloads that cannot be parsed at all are reported as 400 rather than
    FastAPI's default 422.
    """
    return await _respond(request, exc, 400, jsonable_encoder(exc.errors()))


def add_exception_handlers(app: FastAPI) -> FastAPI:
    app.add_exception_handler(StudyGroupError, bad_request_handler)
    app.add_exception_handler(StudyGroupExistsError, bad_request_handler)
    app.add_exception_handler(UserNotFound, bad_request_handler)
    app.add_exception_handler(StudyGroupNotFound, not_found_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    return app
