"""
hCaptcha server-side verification.

Checks a user provided captcha response with the hCaptcha ``siteverify``
endpoint. A badly solved captcha is not an error: ``verify`` returns
``False``. Transport failures and server misconfiguration are raised as
``SystemFault``.

Examples:
    >>> ok = verify(site_key, secret, form["h-captcha-response"])
    >>> if not ok:
    ...     raise user("invalid_captcha", "Please solve the captcha.")

Docs:
    https://docs.hcaptcha.com/#verify-the-user-response-server-side

Tags:
    hcaptcha, captcha, http, httpx, dusted
"""

from __future__ import annotations

from typing import Any

import httpx

from dusted.fault import system, system_wrap
from dusted.logging import get_logger
from dusted.settings import get_settings

logger = get_logger(__name__)

COMPONENT = "hcaptcha"

# Error codes which mean the server side is misconfigured, not the user.
# Docs: https://docs.hcaptcha.com/#siteverify-error-codes-table
MISCONFIGURATION_CODES = frozenset({
    "missing-input-secret",       # secret key is missing
    "invalid-input-secret",       # secret key is invalid or malformed
    "not-using-dummy-passcode",   # testing sitekey used without its matching secret
    "sitekey-secret-mismatch",    # sitekey is not registered with the secret
})


def _form(site_key: str, secret: str, captcha_response: str) -> dict[str, str]:
    return {
        "response": captcha_response,
        "secret": secret,
        "sitekey": site_key,
    }


def _interpret(response: httpx.Response, operation: str) -> bool:
    try:
        result: Any = response.json()
    except ValueError as exc:
        raise system_wrap(
            exc, COMPONENT, operation, "deserializing response body from JSON failed"
        ) from exc

    if not isinstance(result, dict):
        raise system(COMPONENT, operation, "response body is not a JSON object")

    if result.get("success") is True:
        return True

    error_codes = result.get("error-codes") or []
    if not isinstance(error_codes, list) or not all(isinstance(c, str) for c in error_codes):
        raise system(COMPONENT, operation, "response body has an invalid error-codes field")

    misconfigured = MISCONFIGURATION_CODES.intersection(error_codes)
    if misconfigured:
        logger.error("captcha_misconfigured", error_codes=sorted(misconfigured))
        raise system(COMPONENT, operation, "hCaptcha is misconfigured on the server")

    logger.debug("captcha_rejected", error_codes=error_codes)
    return False


def verify(
    site_key: str,
    secret: str,
    captcha_response: str,
    *,
    client: httpx.Client | None = None,
    endpoint: str | None = None,
    timeout: float | None = None,
) -> bool:
    """Check the user provided captcha response with the hCaptcha server.

    Args:
        site_key: The site key of the hCaptcha widget
        secret: The account secret
        captcha_response: The ``h-captcha-response`` form value
        client: Optional ``httpx.Client`` to reuse (connection pooling, tests)
        endpoint: Override of ``DUSTED_HCAPTCHA_ENDPOINT``
        timeout: Override of ``DUSTED_HCAPTCHA_TIMEOUT``

    Returns:
        True if the captcha was solved, False if it was not.

    Raises:
        SystemFault: The request failed or hCaptcha is misconfigured.
    """
    settings = get_settings()
    url = endpoint or settings.hcaptcha_endpoint
    owned = client is None
    http = client or httpx.Client(timeout=timeout or settings.hcaptcha_timeout)
    try:
        response = http.post(url, data=_form(site_key, secret, captcha_response))
    except httpx.HTTPError as exc:
        raise system_wrap(
            exc, COMPONENT, "verify", "sending HTTP request to hCaptcha failed"
        ) from exc
    finally:
        if owned:
            http.close()

    return _interpret(response, "verify")


async def verify_async(
    site_key: str,
    secret: str,
    captcha_response: str,
    *,
    client: httpx.AsyncClient | None = None,
    endpoint: str | None = None,
    timeout: float | None = None,
) -> bool:
    """Async variant of :func:`verify`."""
    settings = get_settings()
    url = endpoint or settings.hcaptcha_endpoint
    owned = client is None
    http = client or httpx.AsyncClient(timeout=timeout or settings.hcaptcha_timeout)
    try:
        response = await http.post(url, data=_form(site_key, secret, captcha_response))
    except httpx.HTTPError as exc:
        raise system_wrap(
            exc, COMPONENT, "verify_async", "sending HTTP request to hCaptcha failed"
        ) from exc
    finally:
        if owned:
            await http.aclose()

    return _interpret(response, "verify_async")


__all__ = [
    "MISCONFIGURATION_CODES",
    "verify",
    "verify_async",
]
