"""
tests/test_dedup_registry_client.py

Registry client against httpx.MockTransport handlers; no network.
"""

from __future__ import annotations

import asyncio

import httpx
import pytest

from app.config import DedupRegistrySettings
from app.connectors.dedup_registry import DedupRegistryClient
from app.errors import ServiceUnavailableError

CTC_URL = "http://registry.test/ctc-numbers"
ELICITATION_URL = "http://registry.test/elicitation-numbers"


def _client(handler, *, timeout_seconds: float = 1.0) -> DedupRegistryClient:
    return DedupRegistryClient(
        settings=DedupRegistrySettings(
            ctc_numbers_url=CTC_URL,
            elicitation_numbers_url=ELICITATION_URL,
            timeout_seconds=timeout_seconds,
        ),
        transport=httpx.MockTransport(handler),
    )


def _ok_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/ctc-numbers":
        return httpx.Response(
            200,
            json=[
                {"ctc_number": "01-23-4567-890123"},
                {"ctc_number": " 11-22-3333-444444 "},
                {"something_else": "ignored"},
            ],
        )
    return httpx.Response(
        200,
        json=[
            {"elicitation_number": "E-1", "has_results": False},
            {"elicitation_number": "E-2", "has_results": True},
            {"elicitation_number": "E-3"},
            {"elicitation_number": "E-1", "has_results": True},
        ],
    )


class TestFetchRegistry:
    def test_joins_both_registries(self) -> None:
        registry = asyncio.run(_client(_ok_handler).fetch_registry())

        assert registry.ctc_numbers == frozenset({"01-23-4567-890123", "11-22-3333-444444"})
        assert registry.has_elicitation("E-3")
        assert not registry.elicitation_has_results("E-3")
        assert registry.elicitation_has_results("E-2")

    def test_duplicate_entries_keep_has_results(self) -> None:
        registry = asyncio.run(_client(_ok_handler).fetch_registry())
        assert registry.elicitation_has_results("E-1")

    def test_timeout_names_the_checker(self) -> None:
        async def slow_ctc(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/ctc-numbers":
                await asyncio.sleep(1.0)
            return httpx.Response(200, json=[])

        with pytest.raises(ServiceUnavailableError) as exc_info:
            asyncio.run(_client(slow_ctc, timeout_seconds=0.05).fetch_registry())

        assert exc_info.value.message == "CTC Deduplicator checker timed out. Retry later!"
        assert exc_info.value.status_code == 502

    def test_elicitation_failure_status_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/elicitation-numbers":
                return httpx.Response(503)
            return httpx.Response(200, json=[])

        with pytest.raises(ServiceUnavailableError) as exc_info:
            asyncio.run(_client(handler).fetch_registry())

        assert exc_info.value.message == "Elicitation Deduplicator checker unavailable. Retry later!"

    def test_ctc_error_wins_when_both_fail(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        with pytest.raises(ServiceUnavailableError) as exc_info:
            asyncio.run(_client(handler).fetch_registry())

        assert exc_info.value.message.startswith("CTC ")

    def test_transport_error_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ServiceUnavailableError) as exc_info:
            asyncio.run(_client(handler).fetch_registry())

        assert "unavailable" in exc_info.value.message

    def test_non_array_body_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"ctc_number": "01-23-4567-890123"})

        with pytest.raises(ServiceUnavailableError):
            asyncio.run(_client(handler).fetch_registry())

    def test_invalid_json_is_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"<html>oops</html>")

        with pytest.raises(ServiceUnavailableError):
            asyncio.run(_client(handler).fetch_registry())

    def test_truthy_has_results_values_count(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/ctc-numbers":
                return httpx.Response(200, json=[])
            return httpx.Response(
                200,
                json=[
                    {"elicitation_number": "E-int", "has_results": 1},
                    {"elicitation_number": "E-str", "has_results": "true"},
                    {"elicitation_number": "E-zero", "has_results": 0},
                    {"elicitation_number": "E-null", "has_results": None},
                ],
            )

        registry = asyncio.run(_client(handler).fetch_registry())

        assert registry.elicitation_has_results("E-int")
        assert registry.elicitation_has_results("E-str")
        assert not registry.elicitation_has_results("E-zero")
        assert not registry.elicitation_has_results("E-null")
        assert registry.has_elicitation("E-null")
