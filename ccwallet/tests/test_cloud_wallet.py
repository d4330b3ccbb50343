"""
Tests for ccwallet.backends.cloud_wallet
"""

from __future__ import annotations

import json

import httpx
import pytest

from ccwallet.backends.cloud_wallet import (
    CloudWalletBackend,
    CloudWalletError,
    normalize_hydrated_coins_response,
)
from ccwcore.models import FungibleProvenance

API_BASE = "https://api.example.net"
COINS_URL = "https://edge.example.net/hydrated-coins"
ADDRESS = "xch1" + "q" * 58


def make_backend(handler, jwt_token: str | None = "test-jwt") -> CloudWalletBackend:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return CloudWalletBackend(
        api_base_url=API_BASE + "/",
        hydrated_coins_url=COINS_URL,
        jwt_token=jwt_token,
        client=client,
    )


class TestNormalizeResponse:
    def test_plain_list(self):
        assert normalize_hydrated_coins_response([{"a": 1}]) == [{"a": 1}]

    def test_data_list(self):
        assert normalize_hydrated_coins_response({"data": [{"a": 1}]}) == [{"a": 1}]

    def test_nested_data(self):
        payload = {"success": True, "data": {"data": [{"a": 1}], "total": 1}}
        assert normalize_hydrated_coins_response(payload) == [{"a": 1}]

    @pytest.mark.parametrize("payload", [None, "text", {"data": None}, {"data": {"rows": []}}])
    def test_unexpected_shapes_are_empty(self, payload):
        assert normalize_hydrated_coins_response(payload) == []


class TestPublicIdentifiers:
    @pytest.mark.asyncio
    async def test_posts_with_bearer_token(self):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "success": True,
                    "data": {
                        "address": ADDRESS,
                        "puzzle_hash": "0x" + "ab" * 32,
                        "synthetic_public_key": "0x" + "cd" * 48,
                    },
                },
            )

        backend = make_backend(handler)
        identifiers = await backend.get_public_identifiers()
        await backend.client.aclose()

        assert identifiers.address == ADDRESS
        assert identifiers.synthetic_public_key == "0x" + "cd" * 48
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == f"{API_BASE}/api/enclave/public-key"
        assert request.headers["Authorization"] == "Bearer test-jwt"
        assert json.loads(request.content) == {}

    @pytest.mark.asyncio
    async def test_unwrapped_response(self):
        backend = make_backend(lambda request: httpx.Response(200, json={"address": ADDRESS}))

        identifiers = await backend.get_public_identifiers()

        assert identifiers.address == ADDRESS
        assert identifiers.puzzle_hash is None

    @pytest.mark.asyncio
    async def test_missing_address(self):
        backend = make_backend(lambda request: httpx.Response(200, json={"data": {"email": "x"}}))

        with pytest.raises(CloudWalletError):
            await backend.get_public_identifiers()

    @pytest.mark.asyncio
    async def test_requires_jwt(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={})

        backend = make_backend(handler, jwt_token=None)

        with pytest.raises(CloudWalletError, match="JWT"):
            await backend.get_public_identifiers()
        assert calls == []

        backend.set_jwt_token("later")
        backend.client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"address": ADDRESS}))
        )
        assert (await backend.get_public_identifiers()).address == ADDRESS


class TestHydratedCoins:
    @pytest.mark.asyncio
    async def test_fetches_and_parses_records(self, make_record, cat_info, asset_a):
        seen: list[httpx.Request] = []
        records = [make_record(1_000), make_record(500, cat_info(asset_a))]

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"data": {"data": records}})

        backend = make_backend(handler)
        coins = await backend.get_hydrated_coins(ADDRESS)

        assert [c.coin.amount for c in coins] == [1_000, 500]
        assert isinstance(coins[1].provenance, FungibleProvenance)
        assert coins[1].provenance.asset_id == asset_a
        assert seen[0].method == "GET"
        assert seen[0].url.params["address"] == ADDRESS
        assert str(seen[0].url).startswith(COINS_URL)
        assert seen[0].headers["Authorization"] == "Bearer test-jwt"

    @pytest.mark.asyncio
    async def test_invalid_records_are_skipped(self, make_record):
        records = [
            make_record(1_000),
            {"coin": {"parentCoinInfo": "0x12", "puzzleHash": "0x34", "amount": "-1"}},
            {"createdHeight": 5},
            "garbage",
        ]
        backend = make_backend(lambda request: httpx.Response(200, json=records))

        coins = await backend.get_hydrated_coins(ADDRESS)

        assert [c.coin.amount for c in coins] == [1_000]

    @pytest.mark.asyncio
    async def test_unexpected_structure_is_empty(self):
        backend = make_backend(lambda request: httpx.Response(200, json={"data": "none"}))
        assert await backend.get_hydrated_coins(ADDRESS) == []

    @pytest.mark.asyncio
    async def test_http_error_propagates(self):
        backend = make_backend(lambda request: httpx.Response(500, json={"error": "down"}))

        with pytest.raises(httpx.HTTPStatusError):
            await backend.get_hydrated_coins(ADDRESS)

    @pytest.mark.asyncio
    async def test_timeout_propagates(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        backend = make_backend(handler)

        with pytest.raises(httpx.TimeoutException):
            await backend.get_hydrated_coins(ADDRESS)

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        backend = make_backend(lambda request: httpx.Response(200, content=b"<html>"))

        with pytest.raises(CloudWalletError, match="Invalid JSON"):
            await backend.get_hydrated_coins(ADDRESS)


class TestClose:
    @pytest.mark.asyncio
    async def test_injected_client_is_left_open(self):
        backend = make_backend(lambda request: httpx.Response(200, json=[]))

        await backend.close()

        assert not backend.client.is_closed
        await backend.client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self):
        backend = CloudWalletBackend(api_base_url=API_BASE, hydrated_coins_url=COINS_URL)

        await backend.close()

        assert backend.client.is_closed
