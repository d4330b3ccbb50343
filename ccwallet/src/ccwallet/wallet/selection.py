"""
Coin selection for spends.

A single deterministic policy is used everywhere:

1. Order coins by amount, largest first, ties broken by coin identity
   (parent coin info, then puzzle hash).
2. If the largest coin alone covers the target, spend just that coin. Fewer,
   larger inputs keep the spend small.
3. Otherwise accumulate coins largest-first until the running total reaches
   the target.

Selection never returns a partial set: when funds are short the caller gets
a SelectionFailed value describing why.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from ccwallet.wallet.fees import calculate_optimal_fee, estimate_size
from ccwallet.wallet.models import (
    CoinSelection,
    PaymentPlan,
    SelectionFailed,
    SelectionFailureReason,
)
from ccwcore.constants import DEFAULT_FEE_RATE
from ccwcore.models import Coin


class InvalidAmountError(ValueError):
    """Target amount is zero or negative."""

    pass


class InsufficientFundsError(ValueError):
    """Available coins do not cover the requested amount."""

    def __init__(self, failure: SelectionFailed):
        self.failure = failure
        super().__init__(
            f"Insufficient funds: need {failure.target_amount}, have {failure.available_amount}"
        )


def _ordering_key(coin: Coin) -> tuple[int, tuple[str, str, int]]:
    return (-coin.amount, coin.identity)


def select_coins(available: Sequence[Coin], target_amount: int) -> CoinSelection | SelectionFailed:
    """
    Choose coins whose sum covers ``target_amount``.

    Args:
        available: Spendable coins (plain value only)
        target_amount: Amount in mojos, must be positive

    Returns:
        CoinSelection on success, SelectionFailed otherwise

    Raises:
        InvalidAmountError: If target_amount <= 0
    """
    if target_amount <= 0:
        raise InvalidAmountError(f"Target amount must be positive, got {target_amount}")

    if not available:
        return SelectionFailed(SelectionFailureReason.NO_COINS, target_amount, 0)

    available_amount = sum(coin.amount for coin in available)
    if available_amount < target_amount:
        logger.debug(f"Cannot cover {target_amount} mojos with {available_amount} available")
        return SelectionFailed(
            SelectionFailureReason.INSUFFICIENT_FUNDS, target_amount, available_amount
        )

    ordered = sorted(available, key=_ordering_key)

    largest = ordered[0]
    if largest.amount >= target_amount:
        return CoinSelection(
            selected_coins=[largest],
            target_amount=target_amount,
            total_amount=largest.amount,
            change_amount=largest.amount - target_amount,
        )

    selected = []
    total = 0
    for coin in ordered:
        selected.append(coin)
        total += coin.amount
        if total >= target_amount:
            break

    return CoinSelection(
        selected_coins=selected,
        target_amount=target_amount,
        total_amount=total,
        change_amount=total - target_amount,
    )


def require_selection(result: CoinSelection | SelectionFailed) -> CoinSelection:
    """Unwrap a selection result, raising InsufficientFundsError on failure."""
    if isinstance(result, SelectionFailed):
        raise InsufficientFundsError(result)
    return result


def plan_payment(
    available: Sequence[Coin],
    amount: int,
    fee_rate: float = DEFAULT_FEE_RATE,
    output_count: int = 2,
    minimum_fee: int = 0,
) -> PaymentPlan | SelectionFailed:
    """
    Select coins for a payment of ``amount`` plus the fee the spend needs.

    The fee depends on the number of inputs, which depends on the fee, so
    selection is repeated with the fee for the previous input count until the
    selected input count no longer grows.

    Args:
        available: Spendable coins
        amount: Payment amount in mojos
        fee_rate: Mojos per estimated byte
        output_count: Outputs created by the spend (payment and change)
        minimum_fee: Floor for the fee in mojos

    Raises:
        InvalidAmountError: If amount <= 0
    """
    if amount <= 0:
        raise InvalidAmountError(f"Payment amount must be positive, got {amount}")

    input_count = 1
    while True:
        byte_size = estimate_size(input_count, output_count)
        fee = calculate_optimal_fee(byte_size, fee_rate, minimum_fee)

        result = select_coins(available, amount + fee)
        if isinstance(result, SelectionFailed):
            return result

        # input_count only grows and is bounded by len(available)
        if result.input_count <= input_count:
            logger.debug(
                f"Planned payment of {amount} with {result.input_count} input(s), fee {fee}"
            )
            return PaymentPlan(selection=result, amount=amount, fee=fee, byte_size=byte_size)

        input_count = result.input_count
