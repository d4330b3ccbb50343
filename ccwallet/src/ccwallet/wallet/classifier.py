"""
Classify hydrated coins into plain XCH, fungible CAT tokens and NFTs.
"""

from __future__ import annotations

from collections.abc import Iterable

from loguru import logger

from ccwallet.wallet.models import ClassifiedHoldings, NonFungibleHolding
from ccwcore.constants import UNKNOWN_ASSET_ID
from ccwcore.models import FungibleProvenance, HydratedCoin, NonFungibleProvenance


def _nft_identifier(coin: HydratedCoin, provenance: NonFungibleProvenance) -> str:
    if provenance.launcher_id:
        return provenance.launcher_id
    try:
        return coin.coin.coin_id
    except ValueError:
        # Not hex; still needs a stable label
        return f"{coin.coin.parent_coin_info}:{coin.coin.puzzle_hash}:{coin.amount}"


def classify(coins: Iterable[HydratedCoin]) -> ClassifiedHoldings:
    """
    Partition coins by provenance.

    Coins without provenance, and coins whose driver info was malformed or of
    an unknown type, count as plain value. Duplicates are kept as given.
    """
    holdings = ClassifiedHoldings()
    unrecognized = 0

    for coin in coins:
        provenance = coin.provenance

        if isinstance(provenance, FungibleProvenance):
            asset_id = provenance.asset_id or UNKNOWN_ASSET_ID
            holdings.fungible.setdefault(asset_id, []).append(coin)
        elif isinstance(provenance, NonFungibleProvenance):
            holdings.non_fungible.append(
                NonFungibleHolding(launcher_id=_nft_identifier(coin, provenance), coin=coin)
            )
        else:
            if provenance is not None:
                unrecognized += 1
            holdings.plain.append(coin)

    if unrecognized:
        logger.debug(f"Treated {unrecognized} coin(s) with unrecognized driver info as plain")

    return holdings
