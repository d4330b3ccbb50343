"""
Wallet data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ccwcore.models import Coin, HydratedCoin, NonFungibleProvenance


@dataclass
class NonFungibleHolding:
    """An NFT coin together with the identifier used to display it"""

    launcher_id: str
    coin: HydratedCoin

    @property
    def provenance(self) -> NonFungibleProvenance | None:
        provenance = self.coin.provenance
        return provenance if isinstance(provenance, NonFungibleProvenance) else None

    @property
    def metadata_uri(self) -> str | None:
        """First off-chain metadata URI, falling back to the first data URI."""
        if self.provenance is None:
            return None
        metadata = self.provenance.metadata
        if metadata.metadata_uris:
            return metadata.metadata_uris[0]
        if metadata.data_uris:
            return metadata.data_uris[0]
        return None

    @property
    def image_uri(self) -> str | None:
        if self.provenance is None or not self.provenance.metadata.data_uris:
            return None
        return self.provenance.metadata.data_uris[0]


@dataclass
class ClassifiedHoldings:
    """
    Coins partitioned by what they represent.

    Every input coin lands in exactly one of the three groups.
    """

    plain: list[HydratedCoin] = field(default_factory=list)
    fungible: dict[str, list[HydratedCoin]] = field(default_factory=dict)
    non_fungible: list[NonFungibleHolding] = field(default_factory=list)

    @property
    def plain_total(self) -> int:
        return sum(coin.amount for coin in self.plain)

    @property
    def fungible_totals(self) -> dict[str, int]:
        return {
            asset_id: sum(coin.amount for coin in coins)
            for asset_id, coins in self.fungible.items()
        }

    @property
    def fungible_total(self) -> int:
        return sum(self.fungible_totals.values())

    @property
    def non_fungible_count(self) -> int:
        return len(self.non_fungible)

    def __len__(self) -> int:
        fungible_count = sum(len(coins) for coins in self.fungible.values())
        return len(self.plain) + fungible_count + len(self.non_fungible)


@dataclass
class BalanceBreakdown:
    """Integer totals in base units (mojos) and coin counts per group"""

    total: int
    xch: int
    cat: int
    nft: int
    coin_count: int
    xch_coin_count: int
    cat_coin_count: int
    nft_coin_count: int
    cat_by_asset: dict[str, int] = field(default_factory=dict)


@dataclass
class CoinSelection:
    """Result of coin selection"""

    selected_coins: list[Coin]
    target_amount: int
    total_amount: int
    change_amount: int

    @property
    def efficiency(self) -> float:
        return self.target_amount / self.total_amount

    @property
    def waste_ratio(self) -> float:
        return 1 - self.efficiency

    @property
    def input_count(self) -> int:
        return len(self.selected_coins)


class SelectionFailureReason(str, Enum):
    NO_COINS = "no_coins"
    INSUFFICIENT_FUNDS = "insufficient_funds"


@dataclass
class SelectionFailed:
    """Selection could not cover the target; no coins are returned"""

    reason: SelectionFailureReason
    target_amount: int
    available_amount: int

    @property
    def shortfall(self) -> int:
        return self.target_amount - self.available_amount


@dataclass
class PaymentPlan:
    """Coins to spend for a payment plus the fee they imply"""

    selection: CoinSelection
    amount: int
    fee: int
    byte_size: int

    @property
    def total_cost(self) -> int:
        return self.amount + self.fee
