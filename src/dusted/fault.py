"""
Structured faults for user-facing and internal errors.

Every error raised by a dusted module is one of exactly two kinds of
``Fault``. The kinds are never interchangeable and are rendered differently
depending on who reads them.

Manifesto:
    - **Two taxonomies:** ``UserFault`` is expected and caller-actionable,
      ``SystemFault`` is unexpected and internal
    - **Stable codes:** Every user fault message carries a machine-parsable code
    - **Append-only context:** Each layer wraps a system fault with one new
      ``component.operation: message`` line, never discarding the history
    - **One stack:** The call stack is captured once, where the fault is
      first observed, and rendered only when diagnostics are requested

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────────┐
        │                         Fault                                 │
        │                  (kind, error(), to_dict())                   │
        ├──────────────────────────────────────────────────────────────┤
        │                                                               │
        │  UserFault                     SystemFault                    │
        │  (USER)                        (SYSTEM)                       │
        │  code -> message pairs         history, rendered, trace       │
        │  error()                       error()                        │
        │  friendly_error()              stack_trace()                  │
        │  errors()                      unwrap() / cause()             │
        │  error_messages()                                             │
        │                                                               │
        └──────────────────────────────────────────────────────────────┘

        Wrapping:
        ┌──────────────────────────────────────────────────────────────┐
        │ f1 = system("a", "b", "c")          history: [a.b: c]        │
        │ f2 = system_wrap(f1, "d", "e", "f")  history: [.., d.e: f]    │
        │ f3 = system_wrap(f2, "g", "h", "i")  history: [.., g.h: i]    │
        │                                                               │
        │ str(f3) == "g.h: i\\n   d.e: f\\n      a.b: c"                   │
        └──────────────────────────────────────────────────────────────┘

Examples:
    Reporting several validation problems at once:

    >>> fault = user("missing_first_name", "First name is required")
    >>> fault.add("missing_last_name", "Last name is required")
    >>> print(fault)
    - First name is required (missing_first_name)
    - Last name is required (missing_last_name)
    >>> print(fault.friendly_error())
    - First name is required
    - Last name is required

    Adding context to an internal error at every layer:

    >>> try:
    ...     raise ConnectionError("connection refused")
    ... except ConnectionError as exc:
    ...     inner = system_wrap(exc, "db", "get", "reading entity failed")
    >>> outer = system_wrap(inner, "users", "load", "loading user failed")
    >>> print(outer)
    users.load: loading user failed
       db.get: reading entity failed
          connection refused
    >>> outer.cause()
    ConnectionError('connection refused')

Guardrails:
    ❌ DON'T: Show ``SystemFault`` text to end users
    ✅ DO: Log ``stack_trace()`` and show a generic message

    ❌ DON'T: Wrap a ``UserFault`` into a ``SystemFault``
    ✅ DO: Let user faults propagate unchanged to the layer that renders them

Tags:
    error-handling, fault, user-error, system-error, error-chaining,
    stack-trace, dusted

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

import traceback
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from dusted.stack import Trace, capture

PADDING = "   "


class FaultKind(str, Enum):
    """Discriminant for the error kinds understood by this module."""

    USER = "USER"
    SYSTEM = "SYSTEM"
    FOREIGN = "FOREIGN"  # any exception not created by this module


class Fault(Exception, ABC):
    """Base class for ``UserFault`` and ``SystemFault``."""

    kind: FaultKind

    @abstractmethod
    def error(self) -> str:
        """Return the rendered error text."""

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation."""

    def __str__(self) -> str:
        return self.error()


# =============================================================================
# USER FAULT
# =============================================================================


class UserFault(Fault):
    """
    One or more problems caused by the end user.

    A user fault is the kind of error an application surfaces back to the
    user, e.g. a validation error of user provided input, or anything that
    would result in a 4xx status code in a web application.

    Every message is tagged with a code so that programs acting on behalf of
    the user can parse the error and decide what to do next. Codes should be
    unique and descriptive to prevent collisions in larger applications.

    Examples:
        >>> fault = UserFault("missing_email_address", "Email address is required")
        >>> str(fault)
        'Email address is required (missing_email_address)'
        >>> fault.errors()
        {'missing_email_address': 'Email address is required'}
    """

    kind = FaultKind.USER

    def __init__(self, code: str, message: str):
        super().__init__(code, message)
        # dict keeps first-insertion order when a code is overwritten
        self._errors: dict[str, str] = {code: message}

    def add(self, code: str, message: str) -> None:
        """Add another user error. An existing code keeps its position."""
        self._errors[code] = message

    def _render(self, include_code: bool) -> str:
        prefix = "- " if len(self._errors) > 1 else ""
        lines = []
        for code, message in self._errors.items():
            if include_code:
                lines.append(f"{prefix}{message} ({code})")
            else:
                lines.append(f"{prefix}{message}")
        return "\n".join(lines)

    def error(self) -> str:
        """Return all user errors, including their codes.

        A single error is rendered as one line::

            Email address is required (missing_email_address)

        Several errors are rendered as a list in the order they were added::

            - First name is required (missing_first_name)
            - Last name is required (missing_last_name)
        """
        return self._render(include_code=True)

    def friendly_error(self) -> str:
        """Same as ``error()`` without the codes."""
        return self._render(include_code=False)

    def errors(self) -> dict[str, str]:
        """Return a copy of the code -> message mapping."""
        return dict(self._errors)

    def error_messages(self) -> list[str]:
        """Return the messages only, in the order they were added."""
        return list(self._errors.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "errors": self.errors(),
            "messages": self.error_messages(),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._errors!r})"


def user(code: str, message: str) -> UserFault:
    """Create a new user fault holding a single error."""
    return UserFault(code, message)


# =============================================================================
# SYSTEM FAULT
# =============================================================================


class TracedError(Exception):
    """Root error of a fault chain that started inside this module.

    Carries the stack captured where ``system()`` was called.
    """

    def __init__(self, message: str, trace: Trace):
        super().__init__(message)
        self.trace = trace

    def __reduce__(self):
        return (self.__class__, (str(self), self.trace))


class SystemFault(Fault):
    """
    An internal fault with full causal context for diagnostics.

    A system fault is an error that can only be handled by the application
    itself, or that would result in a 5xx status code in a web application:
    failing to connect to a database, failing to read from a stream, an
    unexpected response from a HTTP call, etc.

    Instances are immutable. Use ``system()`` to create one and
    ``system_wrap()`` to add context at every layer it passes through.

    Attributes:
        message: The outermost ``component.operation: message`` line
        history: Every message of the chain, innermost first
        trace: Stack captured where the chain was first observed
    """

    kind = FaultKind.SYSTEM

    def __init__(
        self,
        message: str,
        *,
        history: tuple[str, ...],
        rendered: str,
        trace: Trace,
        error: BaseException,
    ):
        super().__init__(rendered)
        self.message = message
        self.history = history
        self.trace = trace
        self._rendered = rendered
        self._error = error
        self.__cause__ = error

    def __reduce__(self):
        # self.args only holds the rendered text
        return (
            _restore_system_fault,
            (self.__class__, self.message, self.history, self._rendered, self.trace, self._error),
        )

    def error(self) -> str:
        """Return the nested message chain without stack frames."""
        return self._rendered

    def stack_trace(self) -> str:
        """Return the nested message chain followed by the captured frames.

        Meant for logs only, never for end users.
        """
        result = f"{self._rendered}{self.trace}"
        root = self.cause()
        if not isinstance(root, TracedError) and root.__traceback__ is not None:
            formatted = "".join(traceback.format_exception(root))
            result = f"{result}\n\nCaused by:\n{formatted.rstrip()}"
        return result

    def unwrap(self) -> BaseException:
        """Return the immediate underlying error."""
        return self._error

    def cause(self) -> BaseException:
        """Return the original error at the root of the chain."""
        err: BaseException = self
        while isinstance(err, SystemFault):
            err = err.unwrap()
        return err

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "history": list(self.history),
            "cause": str(self.cause()),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, depth={len(self.history)})"


def _restore_system_fault(
    cls: type[SystemFault],
    message: str,
    history: tuple[str, ...],
    rendered: str,
    trace: Trace,
    error: BaseException,
) -> SystemFault:
    return cls(message, history=history, rendered=rendered, trace=trace, error=error)


def _format(component: str, operation: str, message: str) -> str:
    return f"{component}.{operation}: {message}"


def system(component: str, operation: str, message: str) -> SystemFault:
    """Create a new system fault, capturing the caller's stack."""
    msg = _format(component, operation, message)
    root = TracedError(msg, capture(skip=1))
    return SystemFault(
        msg,
        history=(msg,),
        rendered=msg,
        trace=root.trace,
        error=root,
    )


def system_wrap(
    err: BaseException,
    component: str,
    operation: str,
    message: str,
) -> SystemFault:
    """Wrap an error into a new system fault, preserving its history and stack.

    Wrapping another ``SystemFault`` re-renders its entire history beneath the
    new message, indenting each older message one step further. Any other
    error starts a fresh history and has the stack captured here.
    """
    msg = _format(component, operation, message)

    # Only the error itself is checked, faults nested inside a foreign
    # error's __cause__ are treated as foreign.
    if isinstance(err, SystemFault):
        pad = PADDING
        lines = []
        for previous in reversed(err.history):
            lines.append(f"\n{pad}{previous}")
            pad += PADDING
        return SystemFault(
            msg,
            history=err.history + (msg,),
            rendered=msg + "".join(lines),
            trace=err.trace,
            error=err,
        )

    return SystemFault(
        msg,
        history=(str(err), msg),
        rendered=f"{msg}\n{PADDING}{err}",
        trace=capture(skip=1),
        error=err,
    )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def kind_of(error: BaseException) -> FaultKind:
    """Classify an error as user fault, system fault or foreign error."""
    if isinstance(error, Fault):
        return error.kind
    return FaultKind.FOREIGN


__all__ = [
    "PADDING",
    "FaultKind",
    "Fault",
    "UserFault",
    "user",
    "TracedError",
    "SystemFault",
    "system",
    "system_wrap",
    "kind_of",
]
