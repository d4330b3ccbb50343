"""
Balance aggregation and amount formatting.

All arithmetic is on integer mojos. Conversion to XCH goes through Decimal
and only happens when a value is formatted for display.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ccwallet.wallet.models import BalanceBreakdown, ClassifiedHoldings
from ccwcore.constants import DEFAULT_CAT_DENOM, MOJOS_PER_XCH

SHORT_UNITS = ["", "K", "M", "B", "T"]


def aggregate(holdings: ClassifiedHoldings) -> BalanceBreakdown:
    """
    Sum each group of classified holdings.

    NFTs are counted but their amounts are left out of ``total``: the mojo
    value locked in a singleton is not spendable balance.
    """
    cat_by_asset = holdings.fungible_totals
    xch = holdings.plain_total
    cat = sum(cat_by_asset.values())
    cat_coin_count = sum(len(coins) for coins in holdings.fungible.values())

    return BalanceBreakdown(
        total=xch + cat,
        xch=xch,
        cat=cat,
        nft=sum(holding.coin.amount for holding in holdings.non_fungible),
        coin_count=len(holdings),
        xch_coin_count=len(holdings.plain),
        cat_coin_count=cat_coin_count,
        nft_coin_count=holdings.non_fungible_count,
        cat_by_asset=cat_by_asset,
    )


def mojos_to_xch(mojos: int | str) -> Decimal:
    return Decimal(int(mojos)) / Decimal(MOJOS_PER_XCH)


def xch_to_mojos(xch: Decimal | int | str) -> int:
    """
    Convert an XCH amount to mojos.

    Raises:
        ValueError: If the amount is not a number or has more precision than
            a mojo
    """
    try:
        value = Decimal(str(xch))
    except InvalidOperation as e:
        raise ValueError(f"Invalid XCH amount: {xch!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid XCH amount: {xch!r}")

    mojos = value * MOJOS_PER_XCH
    if mojos != mojos.to_integral_value():
        raise ValueError(f"XCH amount {xch} is finer than one mojo")
    return int(mojos)


def _to_fixed(value: Decimal, decimals: int, remove_trailing_zeros: bool) -> str:
    quantum = Decimal(1).scaleb(-decimals)
    formatted = f"{value.quantize(quantum, rounding=ROUND_HALF_UP):f}"
    if remove_trailing_zeros and "." in formatted:
        formatted = formatted.rstrip("0").rstrip(".")
    return formatted


def format_xch(
    mojos: int | str,
    decimals: int = 6,
    remove_trailing_zeros: bool = True,
    show_unit: bool = False,
    short_format: bool = False,
) -> str:
    """
    Format a mojo amount as XCH for display.

    Args:
        mojos: Amount in mojos
        decimals: Digits after the decimal point
        remove_trailing_zeros: Drop trailing zeros (and a bare decimal point)
        show_unit: Append " XCH"
        short_format: Abbreviate amounts of 1000 XCH or more (1.5K, 2M, ...)
    """
    value = mojos_to_xch(mojos)
    suffix = ""

    if short_format and abs(value) >= 1000:
        unit_index = 0
        while abs(value) >= 1000 and unit_index < len(SHORT_UNITS) - 1:
            value /= 1000
            unit_index += 1
        suffix = SHORT_UNITS[unit_index]
        decimals = 2

    formatted = _to_fixed(value, decimals, remove_trailing_zeros) + suffix
    return f"{formatted} XCH" if show_unit else formatted


def format_cat_amount(amount: int | str, denom: int = DEFAULT_CAT_DENOM, decimals: int = 3) -> str:
    """Format a CAT amount given in base units; CATs use 1000 base units per token."""
    value = Decimal(int(amount)) / Decimal(denom)
    return _to_fixed(value, decimals, remove_trailing_zeros=True)
