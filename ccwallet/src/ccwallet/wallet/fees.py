"""
Transaction size and fee estimation.

Sizes are rough byte estimates for a spend bundle, not exact serialized
sizes. Fees are in mojos.
"""

from __future__ import annotations

import math

from ccwcore.constants import (
    BASE_TX_SIZE,
    DEFAULT_FEE_RATE,
    INPUT_SIZE,
    MINIMUM_FEE,
    OUTPUT_SIZE,
)


def estimate_size(input_count: int, output_count: int) -> int:
    """
    Estimate the size of a transaction in bytes.

    Args:
        input_count: Number of coins spent
        output_count: Number of coins created (payment plus change)

    Raises:
        ValueError: If either count is negative
    """
    if input_count < 0 or output_count < 0:
        raise ValueError(
            f"Counts must be non-negative: inputs={input_count}, outputs={output_count}"
        )
    return BASE_TX_SIZE + input_count * INPUT_SIZE + output_count * OUTPUT_SIZE


def estimate_fee(byte_size: int, fee_rate_per_byte: float = DEFAULT_FEE_RATE) -> int:
    """Fee for ``byte_size`` bytes at the given rate, rounded up to whole mojos."""
    if byte_size < 0:
        raise ValueError(f"byte_size must be non-negative, got {byte_size}")
    if fee_rate_per_byte < 0:
        raise ValueError(f"fee_rate_per_byte must be non-negative, got {fee_rate_per_byte}")
    return math.ceil(byte_size * fee_rate_per_byte)


def calculate_optimal_fee(
    byte_size: int,
    fee_rate_per_byte: float = DEFAULT_FEE_RATE,
    minimum_fee: int = MINIMUM_FEE,
) -> int:
    return max(estimate_fee(byte_size, fee_rate_per_byte), minimum_fee)


def calculate_fee_rate(fee: int, byte_size: int) -> float:
    return fee / byte_size if byte_size > 0 else 0.0


def calculate_efficiency(target_amount: int, total_amount: int) -> float:
    """Share of the selected value that goes to the target (1.0 means no change)."""
    return target_amount / total_amount if total_amount > 0 else 0.0


def calculate_waste_ratio(target_amount: int, total_amount: int) -> float:
    if total_amount <= 0:
        return 0.0
    return 1 - calculate_efficiency(target_amount, total_amount)
