"""
Cloud wallet service: coin snapshot, balances and payment planning.
"""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from ccwallet.backends.base import WalletBackend
from ccwallet.wallet.balance import aggregate
from ccwallet.wallet.classifier import classify
from ccwallet.wallet.models import (
    BalanceBreakdown,
    ClassifiedHoldings,
    CoinSelection,
    NonFungibleHolding,
    PaymentPlan,
    SelectionFailed,
)
from ccwallet.wallet.selection import plan_payment, select_coins
from ccwcore.constants import DEFAULT_FEE_RATE, MINIMUM_FEE
from ccwcore.ipfs import InvalidContentURIError
from ccwcore.metadata import MetadataCache, MetadataDocument
from ccwcore.models import Coin, HydratedCoin, PublicIdentifiers


def _document_matches(document: MetadataDocument, term: str) -> bool:
    collection = document.get("collection") or {}
    if not isinstance(collection, dict):
        collection = {}

    fields = [document.get("name"), document.get("description"), collection.get("name")]
    if any(isinstance(value, str) and term in value.lower() for value in fields):
        return True

    for attribute in document.get("attributes") or []:
        if not isinstance(attribute, dict):
            continue
        if term in str(attribute.get("trait_type", "")).lower():
            return True
        if term in str(attribute.get("value", "")).lower():
            return True
    return False


class WalletService:
    """
    Wallet service backed by a remote cloud wallet.

    Holds one snapshot of the wallet's unspent coins. A sync replaces the
    snapshot wholesale; nothing is merged across syncs.
    """

    def __init__(self, backend: WalletBackend, address: str | None = None):
        self.backend = backend
        self.address = address
        self.identifiers: PublicIdentifiers | None = None

        self.coins: list[HydratedCoin] = []
        self._holdings: ClassifiedHoldings | None = None

    async def _load_holdings(self) -> ClassifiedHoldings:
        if self.address is None:
            self.identifiers = await self.backend.get_public_identifiers()
            self.address = self.identifiers.address
            logger.info(f"Resolved wallet address {self.address}")

        logger.info("Syncing hydrated coins...")
        coins = await self.backend.get_hydrated_coins(self.address)

        holdings = classify(coins)
        self.coins = coins
        self._holdings = holdings
        logger.info(
            f"Sync complete: {len(coins)} coins "
            f"({len(holdings.plain)} XCH, "
            f"{len(holdings.fungible)} CAT assets, "
            f"{holdings.non_fungible_count} NFTs)"
        )
        return holdings

    async def sync(self) -> list[HydratedCoin]:
        """Fetch the wallet's coins, resolving the address first if needed"""
        await self._load_holdings()
        return self.coins

    async def get_holdings(self) -> ClassifiedHoldings:
        """Get classified holdings, syncing if not cached."""
        if self._holdings is None:
            return await self._load_holdings()
        return self._holdings

    async def get_balance(self) -> BalanceBreakdown:
        return aggregate(await self.get_holdings())

    async def spendable_coins(self) -> list[Coin]:
        """Plain XCH coins; CAT and NFT coins are never spent as fee or value."""
        holdings = await self.get_holdings()
        return [hydrated.coin for hydrated in holdings.plain]

    async def select_coins(self, target_amount: int) -> CoinSelection | SelectionFailed:
        return select_coins(await self.spendable_coins(), target_amount)

    async def plan_payment(
        self,
        amount: int,
        fee_rate: float = DEFAULT_FEE_RATE,
        minimum_fee: int = MINIMUM_FEE,
    ) -> PaymentPlan | SelectionFailed:
        """Select coins for ``amount`` plus a fee for the resulting spend"""
        return plan_payment(
            await self.spendable_coins(), amount, fee_rate=fee_rate, minimum_fee=minimum_fee
        )

    async def load_nft_metadata(
        self, metadata_cache: MetadataCache, auth_token: str | None = None
    ) -> dict[str, MetadataDocument | None]:
        """
        Load off-chain metadata for every NFT in the snapshot.

        Returns:
            launcher id -> metadata document, or None when the NFT has no
            metadata URI, its URI is invalid, or the document is not
            available yet
        """
        holdings = await self.get_holdings()

        async def load(holding: NonFungibleHolding) -> MetadataDocument | None:
            uri = holding.metadata_uri
            if not uri:
                return None
            try:
                return await metadata_cache.get_or_fetch(uri, auth_token=auth_token)
            except InvalidContentURIError as e:
                logger.debug(f"NFT {holding.launcher_id} has an unusable metadata URI: {e}")
                return None

        documents = await asyncio.gather(*(load(h) for h in holdings.non_fungible))
        return {
            holding.launcher_id: document
            for holding, document in zip(holdings.non_fungible, documents, strict=True)
        }

    def search_nfts(self, query: str, documents: dict[str, Any]) -> list[NonFungibleHolding]:
        """Match NFTs whose metadata name, description, collection or traits contain query."""
        if self._holdings is None:
            return []
        term = query.lower()
        return [
            holding
            for holding in self._holdings.non_fungible
            if isinstance(documents.get(holding.launcher_id), dict)
            and _document_matches(documents[holding.launcher_id], term)
        ]

    def nfts_by_collection(
        self, collection_name: str, documents: dict[str, Any]
    ) -> list[NonFungibleHolding]:
        if self._holdings is None:
            return []
        term = collection_name.lower()
        matches = []
        for holding in self._holdings.non_fungible:
            document = documents.get(holding.launcher_id)
            if not isinstance(document, dict):
                continue
            collection = document.get("collection")
            if not isinstance(collection, dict):
                continue
            names = [collection.get("name"), collection.get("family")]
            if any(isinstance(name, str) and term in name.lower() for name in names):
                matches.append(holding)
        return matches

    async def close(self) -> None:
        """Close backend connection"""
        await self.backend.close()
