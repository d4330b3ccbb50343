"""
Test configuration for ccwallet tests.
"""

from __future__ import annotations

import itertools
from collections.abc import Callable
from typing import Any

import pytest

from ccwcore.models import Coin, HydratedCoin

_counter = itertools.count(1)


def coin_record(
    amount: int,
    driver_info: dict[str, Any] | None = None,
    parent: str | None = None,
    puzzle_hash: str | None = None,
) -> dict[str, Any]:
    """A hydrated coin record as returned by the cloud wallet API."""
    n = next(_counter)
    record: dict[str, Any] = {
        "coin": {
            "parentCoinInfo": parent or f"0x{n:064x}",
            "puzzleHash": puzzle_hash or "0x" + "ab" * 32,
            "amount": str(amount),
        },
        "createdHeight": 1000 + n,
    }
    if driver_info is not None:
        record["parentSpendInfo"] = {"driverInfo": driver_info}
    return record


@pytest.fixture
def make_coin() -> Callable[..., Coin]:
    def factory(amount: int, parent: str | None = None) -> Coin:
        n = next(_counter)
        return Coin(
            parent_coin_info=parent or f"0x{n:064x}",
            puzzle_hash="0x" + "ab" * 32,
            amount=amount,
        )

    return factory


@pytest.fixture
def make_hydrated() -> Callable[..., HydratedCoin]:
    def factory(amount: int, driver_info: dict[str, Any] | None = None) -> HydratedCoin:
        return HydratedCoin.from_api(coin_record(amount, driver_info))

    return factory


@pytest.fixture
def cat_info() -> Callable[[str], dict[str, Any]]:
    return lambda asset_id: {"type": "CAT", "assetId": asset_id}


@pytest.fixture
def nft_info() -> Callable[..., dict[str, Any]]:
    def factory(launcher_id: str | None = None, metadata_uri: str | None = None) -> dict:
        info: dict[str, Any] = {"metadata": {}}
        if launcher_id is not None:
            info["launcherId"] = launcher_id
        if metadata_uri is not None:
            info["metadata"]["metadataUris"] = [metadata_uri]
        return {"type": "NFT", "info": info}

    return factory


@pytest.fixture
def asset_a() -> str:
    return "a628c1c2c6fcb74d53746157e438e108eab5c0bb3e5c80ff9b1910b3e4832913"


@pytest.fixture
def asset_b() -> str:
    return "db1a9020d48d9d4ad22631b66ab4b9ebd3637ef7758ad38881348c5d24c38f20"


@pytest.fixture
def make_record() -> Callable[..., dict[str, Any]]:
    return coin_record
