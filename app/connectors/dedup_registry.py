"""
app/connectors/dedup_registry.py

Client for the two "already uploaded" registries used to reject duplicates.

Both registries answer a GET with a JSON array:

    CTC registry          [{"ctc_number": "01-23-4567-890123"}, ...]
    elicitation registry  [{"elicitation_number": "E-1", "has_results": true}, ...]

The two fetches run concurrently and each one is bounded by the configured
timeout. Any failure is terminal for the upload; nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
from types import MappingProxyType
from typing import Any

import httpx

from app.config import DedupRegistrySettings
from app.domain.uploads import DedupRegistry
from app.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

CTC_CHECKER = "CTC"
ELICITATION_CHECKER = "Elicitation"


class DedupRegistryClient:
    """
    Fetches current registry snapshots for one upload request.
    """

    def __init__(
        self,
        *,
        settings: DedupRegistrySettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._ctc_numbers_url = settings.ctc_numbers_url
        self._elicitation_numbers_url = settings.elicitation_numbers_url
        self._timeout_seconds = settings.timeout_seconds
        self._transport = transport

    async def fetch_registry(self) -> DedupRegistry:
        """
        Fetch both registries concurrently and join them into one snapshot.

        Raises ServiceUnavailableError naming the first failing checker
        (CTC before elicitation when both fail).
        """

        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self._timeout_seconds,
        ) as client:
            results = await asyncio.gather(
                self._fetch(client, checker=CTC_CHECKER, url=self._ctc_numbers_url),
                self._fetch(client, checker=ELICITATION_CHECKER, url=self._elicitation_numbers_url),
                return_exceptions=True,
            )

        for result in results:
            if isinstance(result, BaseException):
                raise result

        ctc_payload, elicitation_payload = results
        registry = DedupRegistry(
            ctc_numbers=_extract_ctc_numbers(ctc_payload),
            elicitations=_extract_elicitations(elicitation_payload),
        )
        logger.info(
            "Dedup registries fetched ctc_numbers=%d elicitations=%d",
            len(registry.ctc_numbers),
            len(registry.elicitations),
        )
        return registry

    async def _fetch(self, client: httpx.AsyncClient, *, checker: str, url: str) -> list[Any]:
        try:
            response = await asyncio.wait_for(client.get(url), timeout=self._timeout_seconds)
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.error(
                "Dedup checker timed out checker=%s url=%s timeout_seconds=%.1f",
                checker,
                url,
                self._timeout_seconds,
            )
            raise ServiceUnavailableError(f"{checker} Deduplicator checker timed out. Retry later!") from exc
        except httpx.HTTPError as exc:
            logger.error("Dedup checker request failed checker=%s url=%s error=%s", checker, url, exc)
            raise ServiceUnavailableError(f"{checker} Deduplicator checker unavailable. Retry later!") from exc

        if not response.is_success:
            logger.error(
                "Dedup checker returned failure checker=%s url=%s status=%s",
                checker,
                url,
                response.status_code,
            )
            raise ServiceUnavailableError(f"{checker} Deduplicator checker unavailable. Retry later!")

        try:
            payload = response.json()
        except ValueError as exc:
            raise ServiceUnavailableError(f"{checker} Deduplicator checker unavailable. Retry later!") from exc

        if not isinstance(payload, list):
            logger.error("Dedup checker payload is not a JSON array checker=%s url=%s", checker, url)
            raise ServiceUnavailableError(f"{checker} Deduplicator checker unavailable. Retry later!")
        return payload


def _extract_ctc_numbers(payload: list[Any]) -> frozenset[str]:
    return frozenset(
        str(item["ctc_number"]).strip()
        for item in payload
        if isinstance(item, dict) and item.get("ctc_number") is not None
    )


def _extract_elicitations(payload: list[Any]) -> MappingProxyType[str, bool]:
    """
    Map elicitation number -> has_results. A number listed more than once
    counts as having results if any entry says so.
    """

    elicitations: dict[str, bool] = {}
    for item in payload:
        if not isinstance(item, dict) or item.get("elicitation_number") is None:
            continue
        number = str(item["elicitation_number"]).strip()
        elicitations[number] = elicitations.get(number, False) or bool(item.get("has_results"))
    return MappingProxyType(elicitations)
