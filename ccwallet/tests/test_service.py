"""
Tests for ccwallet.wallet.service
"""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from ccwallet.backends.base import WalletBackend
from ccwallet.wallet.models import CoinSelection, PaymentPlan, SelectionFailed
from ccwallet.wallet.service import WalletService
from ccwcore.metadata import MetadataCache
from ccwcore.models import HydratedCoin, PublicIdentifiers

ADDRESS = "xch1" + "q" * 58
METADATA_URI = "ipfs://QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"


class StaticBackend(WalletBackend):
    """Backend serving a fixed coin list."""

    def __init__(self, coins: list[HydratedCoin]):
        self.coins = coins
        self.identifier_calls = 0
        self.coin_calls: list[str] = []
        self.closed = False

    async def get_public_identifiers(self) -> PublicIdentifiers:
        self.identifier_calls += 1
        return PublicIdentifiers(address=ADDRESS, puzzle_hash="00" * 32)

    async def get_hydrated_coins(self, address: str) -> list[HydratedCoin]:
        self.coin_calls.append(address)
        return list(self.coins)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def wallet_coins(make_hydrated, cat_info, nft_info, asset_a):
    return [
        make_hydrated(3_000_000_000_000),
        make_hydrated(1_000_000_000_000),
        make_hydrated(5_000, cat_info(asset_a)),
        make_hydrated(1, nft_info("aa" * 32, metadata_uri=METADATA_URI)),
        make_hydrated(1, nft_info("bb" * 32)),
    ]


class TestSync:
    @pytest.mark.asyncio
    async def test_resolves_address_then_fetches_coins(self, wallet_coins):
        backend = StaticBackend(wallet_coins)
        wallet = WalletService(backend)

        coins = await wallet.sync()

        assert wallet.address == ADDRESS
        assert wallet.identifiers is not None
        assert backend.coin_calls == [ADDRESS]
        assert len(coins) == 5

    @pytest.mark.asyncio
    async def test_known_address_skips_identifier_lookup(self, wallet_coins):
        backend = StaticBackend(wallet_coins)
        wallet = WalletService(backend, address="xch1known")

        await wallet.sync()

        assert backend.identifier_calls == 0
        assert backend.coin_calls == ["xch1known"]

    @pytest.mark.asyncio
    async def test_sync_replaces_snapshot(self, wallet_coins, make_hydrated):
        backend = StaticBackend(wallet_coins)
        wallet = WalletService(backend)
        await wallet.sync()

        backend.coins = [make_hydrated(42)]
        await wallet.sync()

        holdings = await wallet.get_holdings()
        assert len(holdings) == 1
        assert holdings.plain_total == 42

    @pytest.mark.asyncio
    async def test_lazy_sync(self, wallet_coins):
        backend = StaticBackend(wallet_coins)
        wallet = WalletService(backend)

        await wallet.get_balance()
        await wallet.get_balance()

        assert len(backend.coin_calls) == 1

    @pytest.mark.asyncio
    async def test_backend_errors_propagate(self):
        backend = StaticBackend([])
        backend.get_hydrated_coins = AsyncMock(side_effect=RuntimeError("boom"))
        wallet = WalletService(backend, address=ADDRESS)

        with pytest.raises(RuntimeError):
            await wallet.sync()


class TestBalanceAndSelection:
    @pytest.mark.asyncio
    async def test_balance(self, wallet_coins, asset_a):
        wallet = WalletService(StaticBackend(wallet_coins))

        balance = await wallet.get_balance()

        assert balance.xch == 4_000_000_000_000
        assert balance.cat_by_asset == {asset_a: 5_000}
        assert balance.nft_coin_count == 2

    @pytest.mark.asyncio
    async def test_only_plain_coins_are_spendable(self, wallet_coins):
        wallet = WalletService(StaticBackend(wallet_coins))

        spendable = await wallet.spendable_coins()

        assert sorted(c.amount for c in spendable) == [1_000_000_000_000, 3_000_000_000_000]

    @pytest.mark.asyncio
    async def test_select_coins(self, wallet_coins):
        wallet = WalletService(StaticBackend(wallet_coins))

        result = await wallet.select_coins(2_000_000_000_000)

        assert isinstance(result, CoinSelection)
        assert [c.amount for c in result.selected_coins] == [3_000_000_000_000]

    @pytest.mark.asyncio
    async def test_select_more_than_spendable(self, wallet_coins):
        wallet = WalletService(StaticBackend(wallet_coins))

        result = await wallet.select_coins(4_000_000_000_001)

        assert isinstance(result, SelectionFailed)

    @pytest.mark.asyncio
    async def test_plan_payment_uses_minimum_fee(self, wallet_coins):
        wallet = WalletService(StaticBackend(wallet_coins))

        plan = await wallet.plan_payment(1_000_000_000_000)

        assert isinstance(plan, PaymentPlan)
        assert plan.fee == 1_000_000
        assert plan.selection.target_amount == 1_000_001_000_000


class TestNFTMetadata:
    @pytest.mark.asyncio
    async def test_load_nft_metadata(self, wallet_coins):
        fetcher = AsyncMock(return_value={"name": "Friend #1"})
        cache = MetadataCache(fetcher=fetcher)
        wallet = WalletService(StaticBackend(wallet_coins))

        documents = await wallet.load_nft_metadata(cache, auth_token="jwt")

        assert documents == {"aa" * 32: {"name": "Friend #1"}, "bb" * 32: None}
        fetcher.assert_awaited_once()
        assert fetcher.await_args.args[1] == "jwt"

    @pytest.mark.asyncio
    async def test_shared_metadata_uri_fetched_once(self, make_hydrated, nft_info):
        uri = METADATA_URI
        coins = [
            make_hydrated(1, nft_info("aa" * 32, metadata_uri=uri)),
            make_hydrated(1, nft_info("bb" * 32, metadata_uri=uri)),
        ]
        calls = []

        async def fetcher(fetch_uri: str, auth_token: str | None) -> dict:
            calls.append(fetch_uri)
            await asyncio.sleep(0)
            return {"name": "Shared"}

        wallet = WalletService(StaticBackend(coins))
        documents = await wallet.load_nft_metadata(MetadataCache(fetcher=fetcher))

        assert len(calls) == 1
        # The second NFT asked while the first fetch was in flight
        assert sorted(documents.values(), key=str) == [None, {"name": "Shared"}]

    @pytest.mark.asyncio
    async def test_invalid_metadata_uri(self, make_hydrated, nft_info):
        wallet = WalletService(StaticBackend([make_hydrated(1, nft_info("aa" * 32, "ipfs://"))]))
        cache = MetadataCache(fetcher=AsyncMock())

        assert await wallet.load_nft_metadata(cache) == {"aa" * 32: None}

    @pytest.mark.asyncio
    async def test_search_and_collection_filter(self, make_hydrated, nft_info):
        coins = [make_hydrated(1, nft_info("aa" * 32)), make_hydrated(1, nft_info("bb" * 32))]
        wallet = WalletService(StaticBackend(coins))
        await wallet.sync()
        documents = {
            "aa" * 32: {
                "name": "Chia Friend #7",
                "collection": {"name": "Chia Friends", "family": "friends"},
                "attributes": [{"trait_type": "Hat", "value": "Beanie"}],
            },
            "bb" * 32: {"name": "Other", "description": "Something else"},
        }

        assert [h.launcher_id for h in wallet.search_nfts("friend", documents)] == ["aa" * 32]
        assert [h.launcher_id for h in wallet.search_nfts("beanie", documents)] == ["aa" * 32]
        assert [h.launcher_id for h in wallet.search_nfts("ELSE", documents)] == ["bb" * 32]
        assert wallet.nfts_by_collection("FRIENDS", documents)[0].launcher_id == "aa" * 32
        assert wallet.nfts_by_collection("nothing", documents) == []


@pytest.mark.asyncio
async def test_close_closes_backend():
    backend = StaticBackend([])
    await WalletService(backend).close()
    assert backend.closed


@pytest.mark.asyncio
async def test_get_holdings_syncs_on_first_use(wallet_coins, asset_a):
    backend = StaticBackend(wallet_coins)
    wallet = WalletService(backend)

    holdings = await wallet.get_holdings()

    assert backend.coin_calls == [ADDRESS]
    assert holdings.plain_total == 4_000_000_000_000
    assert holdings.fungible_totals == {asset_a: 5_000}
    assert await wallet.get_holdings() is holdings
    assert len(backend.coin_calls) == 1
