"""Dusted -- small, independent utilities shared across applications.

Architecture::

    Core (no third-party dependencies)
        fault.py           UserFault / SystemFault, user(), system(), system_wrap()
        stack.py           Bounded stack capture for system faults

    Helpers
        mapsort.py         Sorted mapping keys
        array.py           contains_more_than()
        types/             E-mail address and URL value types
        webfile.py         Uploaded-file MIME sniffing and hashing

    Ambient
        logging.py         structlog configuration, fault rendering
        settings.py        DUSTED_* settings (pydantic-settings)

    Integrations
        clients/           hCaptcha, Pub/Sub mailer, Cloud Storage, Datastore
        api/               FastAPI fault handlers (RFC 7807)

The fault API is re-exported here::

    from dusted import system_wrap, user
"""

from dusted.fault import (
    Fault,
    FaultKind,
    SystemFault,
    TracedError,
    UserFault,
    kind_of,
    system,
    system_wrap,
    user,
)

__version__ = "0.1.0"

__all__ = [
    "Fault",
    "FaultKind",
    "SystemFault",
    "TracedError",
    "UserFault",
    "kind_of",
    "system",
    "system_wrap",
    "user",
]
