"""
Error-handling for FastAPI applications: maps faults to RFC 7807 responses.

    UserFault    -> 400, detail = friendly_error(), errors = [{code, message}]
    SystemFault  -> 500, generic detail; stack_trace() goes to the logs only
    Exception    -> 500, generic detail; logged with exc_info

Usage:
    app = FastAPI()
    install_fault_handlers(app)
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dusted.api.schemas import ErrorDetail, ProblemDetail
from dusted.fault import SystemFault, UserFault
from dusted.logging import get_logger

logger = get_logger(__name__)

INTERNAL_ERROR_DETAIL = "An unexpected error occurred."


def problem_response(
    *,
    status: int,
    title: str,
    detail: str = "",
    instance: str = "",
    errors: list[dict[str, Any]] | None = None,
) -> JSONResponse:
    """Build a RFC 7807 JSON error response."""
    body = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        instance=instance,
    )
    if errors:
        body.errors = [ErrorDetail(**e) for e in errors]
    return JSONResponse(
        status_code=status,
        content=body.model_dump(),
        media_type="application/problem+json",
    )


async def user_fault_handler(request: Request, exc: UserFault) -> JSONResponse:
    """Render a user fault for the end user, with every code and message."""
    return problem_response(
        status=400,
        title="Bad Request",
        detail=exc.friendly_error(),
        instance=str(request.url),
        errors=[{"code": code, "message": message} for code, message in exc.errors().items()],
    )


async def system_fault_handler(request: Request, exc: SystemFault) -> JSONResponse:
    """Log the full stack trace and return a generic 500."""
    logger.error(
        "system_fault",
        method=request.method,
        path=request.url.path,
        fault=exc,
    )
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=INTERNAL_ERROR_DETAIL,
        instance=str(request.url),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for exceptions that were never wrapped into a fault."""
    logger.error(
        "unhandled_exception",
        method=request.method,
        path=request.url.path,
        exc_info=exc,
    )
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail=INTERNAL_ERROR_DETAIL,
        instance=str(request.url),
    )


def install_fault_handlers(app: FastAPI, *, catch_all: bool = True) -> None:
    """Register the fault handlers on a FastAPI application."""
    app.add_exception_handler(UserFault, user_fault_handler)
    app.add_exception_handler(SystemFault, system_fault_handler)
    if catch_all:
        app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = [
    "INTERNAL_ERROR_DETAIL",
    "problem_response",
    "user_fault_handler",
    "system_fault_handler",
    "unhandled_exception_handler",
    "install_fault_handlers",
]
