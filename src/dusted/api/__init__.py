"""FastAPI integration: render faults as RFC 7807 problem responses.

Requires the ``api`` extra::

    pip install dusted-utils[api]
"""

from dusted.api.errors import (
    INTERNAL_ERROR_DETAIL,
    install_fault_handlers,
    problem_response,
    system_fault_handler,
    user_fault_handler,
)
from dusted.api.schemas import ErrorDetail, ProblemDetail

__all__ = [
    "INTERNAL_ERROR_DETAIL",
    "ErrorDetail",
    "ProblemDetail",
    "install_fault_handlers",
    "problem_response",
    "system_fault_handler",
    "user_fault_handler",
]
