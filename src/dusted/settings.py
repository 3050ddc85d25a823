"""Shared settings for the dusted clients and logging.

Configuration is read from ``DUSTED_``-prefixed environment variables and an
optional ``.env`` file. Unknown variables are ignored so that applications can
share one environment with other services.

Examples:
    >>> import os
    >>> os.environ["DUSTED_HCAPTCHA_TIMEOUT"] = "5"
    >>> get_settings(_force_reload=True).hcaptcha_timeout
    5.0

Tags:
    settings, configuration, pydantic, environment, dusted

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DustedSettings(BaseSettings):
    """Settings shared by every dusted module.

    Fields
    ──────
    log_level              : structlog log level
    log_json               : JSON output (None = auto, JSON when not a TTY)
    service_name           : Service name added to every log line
    environment            : Deployment environment, also sent with e-mails
    hcaptcha_endpoint      : hCaptcha siteverify URL
    hcaptcha_timeout       : Seconds before the siteverify call fails
    storage_timeout        : Seconds allowed for a Cloud Storage upload
    mailer_publish_timeout : Seconds to wait for a Pub/Sub publish result
    gcp_project            : Google Cloud project for the Datastore repo
    """

    model_config = SettingsConfigDict(
        env_prefix="DUSTED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool | None = None
    service_name: str = "dusted"
    environment: str = "development"

    # ── hCaptcha ─────────────────────────────────────────────────
    hcaptcha_endpoint: str = Field(
        default="https://hcaptcha.com/siteverify",
        description="hCaptcha siteverify endpoint",
    )
    hcaptcha_timeout: float = Field(default=10.0, gt=0)

    # ── Google Cloud ─────────────────────────────────────────────
    storage_timeout: float = Field(default=1.0, gt=0)
    mailer_publish_timeout: float = Field(default=30.0, gt=0)
    gcp_project: str | None = None


_settings_cache: DustedSettings | None = None


def get_settings(*, _force_reload: bool = False) -> DustedSettings:
    """Load and cache the settings."""
    global _settings_cache
    if _settings_cache is None or _force_reload:
        _settings_cache = DustedSettings()
    return _settings_cache


__all__ = [
    "DustedSettings",
    "get_settings",
]
