"""
Test configuration for ccwcore tests.
"""

from __future__ import annotations

import pytest


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def cid() -> str:
    """CIDv1 of a sample image."""
    return "bafybeigdyrzt5sfp7udm7hu76uh7y26nf3efuylqabf3oclgtqy55fbzdi"


@pytest.fixture
def other_cid() -> str:
    """CIDv0 of a sample metadata document."""
    return "QmYwAPJzv5CZsnA625s3Xf2nemtYgPpHdWEz79ojWnPbdG"


@pytest.fixture
def parent_coin_info() -> str:
    return "0x" + "11" * 32


@pytest.fixture
def puzzle_hash() -> str:
    return "0x" + "22" * 32
