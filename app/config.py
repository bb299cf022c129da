"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from db.config import load_env_files

DEFAULT_DASHBOARD_REGIONS: tuple[str, ...] = (
    "Mbeya Region",
    "Mwanza Region",
    "Dodoma Region",
    "Dar es Salaam Region",
)


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_list_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list; blank items are dropped.
    """

    raw_value = _get_optional_str_env(name)
    if raw_value is None:
        return default
    items = tuple(item.strip() for item in raw_value.split(",") if item.strip())
    return items or default


@dataclass(frozen=True)
class DedupRegistrySettings:
    """
    Endpoints of the two "already uploaded" registries.
    """

    ctc_numbers_url: str
    elicitation_numbers_url: str
    timeout_seconds: float = 10.0


@dataclass(frozen=True)
class UploadSettings:
    """
    Where accepted rows are written.
    """

    output_root: Path = Path("public")


@dataclass(frozen=True)
class ReservedLogin:
    """
    A login handled locally without contacting the identity service.
    """

    username: str
    password: str


@dataclass(frozen=True)
class AuthSettings:
    """
    Token signing and identity-service proxy settings.
    """

    jwt_secret: str
    token_ttl_seconds: int = 86_400
    auth_service_host: str = "localhost"
    auth_service_port: int = 8080
    auth_service_timeout_seconds: float = 15.0
    dev_login: ReservedLogin | None = None
    admin_login: ReservedLogin | None = None
    admin_stats_regions: tuple[str, ...] = DEFAULT_DASHBOARD_REGIONS

    @property
    def auth_service_url(self) -> str:
        return f"http://{self.auth_service_host}:{self.auth_service_port}/opensrp/security/authenticate"


@dataclass(frozen=True)
class DashboardSettings:
    """
    Basic-Auth users for the dashboard and the regions it reports on.
    """

    users: dict[str, str] = field(default_factory=dict)
    regions: tuple[str, ...] = DEFAULT_DASHBOARD_REGIONS


@dataclass(frozen=True)
class APISettings:
    """
    HTTP surface behaviour.
    """

    debug_errors: bool = False


def _reserved_login(prefix: str) -> ReservedLogin | None:
    username = _get_optional_str_env(f"{prefix}_USERNAME")
    password = _get_optional_str_env(f"{prefix}_PASSWORD")
    if username is None or password is None:
        return None
    return ReservedLogin(username=username, password=password)


@lru_cache(maxsize=1)
def get_dedup_registry_settings() -> DedupRegistrySettings:
    """
    Return cached registry endpoint settings from environment variables.
    """

    return DedupRegistrySettings(
        ctc_numbers_url=_get_str_env("CTC_NUMBERS_ENDPOINT", ""),
        elicitation_numbers_url=_get_str_env("ELICITATION_NUMBERS_ENDPOINT", ""),
        timeout_seconds=max(0.1, _get_float_env("DEDUP_TIMEOUT_SECONDS", 10.0)),
    )


@lru_cache(maxsize=1)
def get_upload_settings() -> UploadSettings:
    return UploadSettings(output_root=Path(_get_str_env("UPLOAD_OUTPUT_ROOT", "public")))


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    """
    Return cached authentication settings.

    JWT_SECRET presence is enforced at startup by `app.main`.
    """

    return AuthSettings(
        jwt_secret=_get_str_env("JWT_SECRET", ""),
        token_ttl_seconds=max(60, _get_int_env("JWT_TTL_SECONDS", 86_400)),
        auth_service_host=_get_str_env("AUTH_SERVICE_HOST", "localhost"),
        auth_service_port=_get_int_env("AUTH_SERVICE_PORT", 8080),
        auth_service_timeout_seconds=max(1.0, _get_float_env("AUTH_SERVICE_TIMEOUT_SECONDS", 15.0)),
        dev_login=_reserved_login("DEV_LOGIN"),
        admin_login=_reserved_login("ADMIN_LOGIN"),
        admin_stats_regions=_get_list_env("ADMIN_STATS_REGIONS", DEFAULT_DASHBOARD_REGIONS),
    )


@lru_cache(maxsize=1)
def get_dashboard_settings() -> DashboardSettings:
    """
    Collect DASHBOARD_USERNAME<n>/DASHBOARD_PASSWORD<n> pairs.
    """

    users: dict[str, str] = {}
    for index in range(1, 10):
        username = _get_optional_str_env(f"DASHBOARD_USERNAME{index}")
        password = _get_optional_str_env(f"DASHBOARD_PASSWORD{index}")
        if username and password:
            users[username] = password
    return DashboardSettings(
        users=users,
        regions=_get_list_env("DASHBOARD_REGIONS", DEFAULT_DASHBOARD_REGIONS),
    )


@lru_cache(maxsize=1)
def get_api_settings() -> APISettings:
    return APISettings(debug_errors=_get_bool_env("API_DEBUG_ERRORS", False))
