"""
RFC 7807 problem schemas for fault responses.

Every fault rendered by :mod:`dusted.api.errors` uses :class:`ProblemDetail`
as its body. User faults list one :class:`ErrorDetail` per error code.

Doc-Types: API_REFERENCE
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class ErrorDetail(BaseModel):
    """One user error.

    UI Hints:
        Display next to the corresponding form input.
        Use ``code`` for programmatic error handling.
    """

    code: str = Field(description="Machine-readable error code (e.g., 'missing_email_address')")
    message: str = Field(description="Human-readable error description")


class ProblemDetail(BaseModel):
    """RFC 7807 «Problem Details for HTTP APIs».

    Example:
        {
            "type": "about:blank",
            "title": "Bad Request",
            "status": 400,
            "detail": "Email address is required.",
            "instance": "/signup",
            "errors": [
                {"code": "missing_email_address", "message": "Email address is required."}
            ]
        }
    """

    type: str = Field(default="about:blank", description="Error type URI (usually 'about:blank')")
    title: str = Field(description="Short human-readable error summary")
    status: int = Field(description="HTTP status code (e.g., 400, 500)")
    detail: str = Field(default="", description="Human-readable explanation of the error")
    instance: str = Field(default="", description="URI of the failing request")
    errors: list[ErrorDetail] = Field(
        default_factory=list,
        description="One entry per user error, in the order they were added",
    )


__all__ = ["ErrorDetail", "ProblemDetail"]
