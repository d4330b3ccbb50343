"""
Wallet functionality: classification, balances and coin selection.
"""

from ccwallet.wallet.address import (
    address_to_puzzle_hash,
    is_valid_address,
    puzzle_hash_to_address,
    to_puzzle_hash,
)
from ccwallet.wallet.balance import aggregate, format_cat_amount, format_xch, mojos_to_xch
from ccwallet.wallet.classifier import classify
from ccwallet.wallet.models import (
    BalanceBreakdown,
    ClassifiedHoldings,
    CoinSelection,
    NonFungibleHolding,
    PaymentPlan,
    SelectionFailed,
    SelectionFailureReason,
)
from ccwallet.wallet.selection import (
    InsufficientFundsError,
    InvalidAmountError,
    plan_payment,
    require_selection,
    select_coins,
)
from ccwallet.wallet.service import WalletService

__all__ = [
    "BalanceBreakdown",
    "ClassifiedHoldings",
    "CoinSelection",
    "InsufficientFundsError",
    "InvalidAmountError",
    "NonFungibleHolding",
    "PaymentPlan",
    "SelectionFailed",
    "SelectionFailureReason",
    "WalletService",
    "address_to_puzzle_hash",
    "aggregate",
    "classify",
    "format_cat_amount",
    "format_xch",
    "is_valid_address",
    "mojos_to_xch",
    "plan_payment",
    "puzzle_hash_to_address",
    "require_selection",
    "select_coins",
    "to_puzzle_hash",
]
