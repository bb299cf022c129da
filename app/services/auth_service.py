"""
app/services/auth_service.py

Login: exchange credentials for a signed identity token.

Three paths, checked in order:

    1. reserved development login -> fixed development identity, no outbound call
    2. reserved admin login       -> same, plus per-region upload statistics
    3. everyone else              -> Basic-Auth proxy to the identity service;
                                     the user must be assigned a Facility location
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from sqlalchemy.orm import Session

from app.config import AuthSettings, ReservedLogin, get_auth_settings
from app.connectors.identity_service import IdentityServiceClient
from app.domain.identity import SubmitterIdentity
from app.domain.uploads import RegionUploadStats, UserUploadStats
from app.errors import AuthError, ServiceUnavailableError, ValidationError
from app.repositories.upload_stats_repository import UploadStatsRepository
from app.security.tokens import TokenService, get_token_service

logger = logging.getLogger(__name__)

FACILITY_TAG = "Facility"

DEV_TEAM = "TEPI_Dev"
DEV_TEAM_ID = "e26a5499-a4db-4441-b5b1-3bb16d95822c"
DEV_LOCATION_ID = "065fc2b9-15d6-4453-8134-4a3b02efd64e"
DEV_FACILITY = "TEPI Dev Facility"


@dataclass(frozen=True)
class LoginResult:
    token: str
    message: str
    stats: UserUploadStats
    region_stats: list[RegionUploadStats] = field(default_factory=list)


class AuthenticationService:
    """
    Credential check and token issuance.
    """

    def __init__(
        self,
        *,
        settings: AuthSettings,
        token_service: TokenService,
        identity_client: IdentityServiceClient,
    ) -> None:
        self._settings = settings
        self._token_service = token_service
        self._identity_client = identity_client

    def login(self, username: str | None, password: str | None, *, db: Session) -> LoginResult:
        if not username or not password:
            raise ValidationError("Username or Password is missing!")

        repository = UploadStatsRepository(db)

        if _is_reserved(self._settings.dev_login, username):
            identity = self._reserved_identity(self._settings.dev_login, username, password)
            logger.info("Development login username=%s", username)
            return LoginResult(
                token=self._token_service.issue(identity),
                message="Dev login successful",
                stats=repository.user_stats(identity.provider_id),
            )

        if _is_reserved(self._settings.admin_login, username):
            identity = self._reserved_identity(self._settings.admin_login, username, password)
            logger.info("Admin login username=%s regions=%d", username, len(self._settings.admin_stats_regions))
            return LoginResult(
                token=self._token_service.issue(identity),
                message="Admin login successful",
                stats=repository.user_stats(identity.provider_id),
                region_stats=[repository.region_stats(region) for region in self._settings.admin_stats_regions],
            )

        payload = self._identity_client.authenticate(username, password)
        identity = identity_from_auth_payload(payload, fallback_username=username)
        logger.info("Login successful username=%s team=%s", identity.provider_id, identity.team)
        return LoginResult(
            token=self._token_service.issue(identity),
            message="Login successful",
            stats=repository.user_stats(identity.provider_id),
        )

    @staticmethod
    def _reserved_identity(login: ReservedLogin | None, username: str, password: str) -> SubmitterIdentity:
        if login is None or not secrets.compare_digest(password.encode(), login.password.encode()):
            logger.info("Reserved login refused username=%s", username)
            raise AuthError("Invalid username or password!")
        return SubmitterIdentity(
            team=DEV_TEAM,
            team_id=DEV_TEAM_ID,
            provider_id=username,
            location_id=DEV_LOCATION_ID,
            facility=DEV_FACILITY,
        )


def _is_reserved(login: ReservedLogin | None, username: str) -> bool:
    return login is not None and login.username == username


def _invalid_payload(field_name: str) -> ServiceUnavailableError:
    logger.error("Identity service payload has an unexpected shape field=%s", field_name)
    return ServiceUnavailableError("Authentication service returned an invalid response.")


def _as_mapping(value: Any, field_name: str) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _invalid_payload(field_name)
    return value


def identity_from_auth_payload(payload: dict[str, Any], *, fallback_username: str) -> SubmitterIdentity:
    """
    Build the submitter identity from an identity-service answer.

    The first location tagged Facility decides the location claims. A user
    without one may not upload. A body whose team, user or location list
    has the wrong shape is treated as an unavailable service.
    """

    team_block = _as_mapping(payload.get("team"), "team")
    team = _as_mapping(team_block.get("team"), "team.team")
    user = _as_mapping(payload.get("user"), "user")
    locations = team_block.get("locations") or []
    if not isinstance(locations, list):
        raise _invalid_payload("team.locations")

    facility_location = None
    for location in locations:
        if not isinstance(location, dict):
            continue
        tags = location.get("tags") or []
        if not isinstance(tags, list):
            continue
        if any(isinstance(tag, dict) and tag.get("name") == FACILITY_TAG for tag in tags):
            facility_location = location
            break

    if facility_location is None or not facility_location.get("uuid"):
        raise AuthError("User is not allowed to add files!")
    if not team.get("teamName") or not team.get("uuid"):
        raise AuthError("User is not allowed to add files!")

    return SubmitterIdentity(
        team=str(team["teamName"]),
        team_id=str(team["uuid"]),
        provider_id=str(user.get("username") or fallback_username),
        location_id=str(facility_location["uuid"]),
        facility=facility_location.get("display"),
        user_base_entity_id=user.get("baseEntityId"),
    )


@lru_cache(maxsize=1)
def get_authentication_service() -> AuthenticationService:
    settings = get_auth_settings()
    return AuthenticationService(
        settings=settings,
        token_service=get_token_service(),
        identity_client=IdentityServiceClient(
            url=settings.auth_service_url,
            timeout_seconds=settings.auth_service_timeout_seconds,
        ),
    )
