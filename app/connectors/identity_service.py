"""
app/connectors/identity_service.py

HTTP Basic-Auth proxy to the external identity service.

The service answers a successful authentication with the user record and
the team the user belongs to:

    {
      "user": {"username": "...", "baseEntityId": "..."},
      "team": {
        "team": {"teamName": "...", "uuid": "..."},
        "locations": [{"uuid": "...", "display": "...", "tags": [{"name": "Facility"}]}]
      }
    }
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.errors import AuthError, ServiceUnavailableError

logger = logging.getLogger(__name__)

REJECTED_CREDENTIAL_STATUS_CODES = {401, 403}


class IdentityServiceClient:
    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: float,
        session: requests.Session | None = None,
    ) -> None:
        self._url = url
        self._timeout_seconds = timeout_seconds
        self._session = session or requests.Session()

    def authenticate(self, username: str, password: str) -> dict[str, Any]:
        """
        Return the identity-service payload for valid credentials.

        Raises AuthError when the credentials are refused and
        ServiceUnavailableError for transport failures, 5xx answers or an
        unreadable body.
        """

        try:
            response = self._session.get(
                self._url,
                auth=(username, password),
                headers={"Content-Type": "application/json"},
                timeout=self._timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.error("Identity service request failed url=%s error=%s", self._url, exc)
            raise ServiceUnavailableError("Authentication service unavailable. Retry later!") from exc

        if response.status_code in REJECTED_CREDENTIAL_STATUS_CODES:
            logger.info("Identity service refused credentials username=%s", username)
            raise AuthError("Invalid username or password!")
        if response.status_code >= 400:
            logger.error(
                "Identity service returned failure url=%s status=%s",
                self._url,
                response.status_code,
            )
            raise ServiceUnavailableError("Authentication service unavailable. Retry later!")

        try:
            payload = response.json()
        except ValueError as exc:
            raise ServiceUnavailableError("Authentication service returned an invalid response.") from exc
        if not isinstance(payload, dict):
            raise ServiceUnavailableError("Authentication service returned an invalid response.")
        return payload
