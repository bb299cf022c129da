"""
app/domain/identity.py

Verified submitter identity carried inside signed tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

# Token claim name -> attribute name.
_CLAIM_FIELDS: tuple[tuple[str, str], ...] = (
    ("team", "team"),
    ("teamId", "team_id"),
    ("providerId", "provider_id"),
    ("locationId", "location_id"),
    ("facility", "facility"),
    ("userBaseEntityId", "user_base_entity_id"),
)


@dataclass(frozen=True)
class SubmitterIdentity:
    team: str
    team_id: str
    provider_id: str
    location_id: str
    facility: str | None = None
    user_base_entity_id: str | None = None

    def to_claims(self) -> dict[str, Any]:
        return {claim: getattr(self, attribute) for claim, attribute in _CLAIM_FIELDS}

    @classmethod
    def from_claims(cls, claims: Mapping[str, Any]) -> SubmitterIdentity:
        """
        Build an identity from the ``data`` claim of a decoded token.

        Raises KeyError when a required claim is missing.
        """

        values = {attribute: claims.get(claim) for claim, attribute in _CLAIM_FIELDS}
        for required in ("team", "teamId", "providerId", "locationId"):
            if not claims.get(required):
                raise KeyError(required)
        return cls(**{key: (str(value) if value is not None else None) for key, value in values.items()})
