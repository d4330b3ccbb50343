"""
Core data models using Pydantic for validation and serialization.

Wire data from the cloud wallet uses camelCase keys (``parentCoinInfo``) in
some environments and snake_case in others; every model accepts both.
"""

from __future__ import annotations

import hashlib
import re
from enum import Enum
from typing import Any

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ccwcore.constants import UNKNOWN_ASSET_ID

HEX32_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")

_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


def strip_hex_prefix(value: str) -> str:
    return value[2:] if value.startswith(("0x", "0X")) else value


def is_valid_coin_id(coin_id: str) -> bool:
    """Check that a coin id is a 32-byte hex string (optional 0x prefix)."""
    return bool(HEX32_PATTERN.match(strip_hex_prefix(coin_id)))


class Coin(BaseModel):
    parent_coin_info: str
    puzzle_hash: str
    amount: int = Field(..., ge=0)

    model_config = _WIRE_CONFIG

    @property
    def coin_id(self) -> str:
        """
        Coin id as hex: SHA256(parent_coin_info + puzzle_hash + amount).

        The amount is encoded as 8 bytes big-endian.

        Raises:
            ValueError: If the parent or puzzle hash is not 32 bytes of hex, or
                the amount does not fit in 8 bytes
        """
        parent = strip_hex_prefix(self.parent_coin_info)
        puzzle_hash = strip_hex_prefix(self.puzzle_hash)
        if not HEX32_PATTERN.match(parent):
            raise ValueError("parent_coin_info must be a 64-character hex string")
        if not HEX32_PATTERN.match(puzzle_hash):
            raise ValueError("puzzle_hash must be a 64-character hex string")
        try:
            amount_bytes = self.amount.to_bytes(8, "big")
        except OverflowError as e:
            raise ValueError(f"Amount {self.amount} does not fit in 8 bytes") from e

        preimage = bytes.fromhex(parent) + bytes.fromhex(puzzle_hash) + amount_bytes
        return hashlib.sha256(preimage).hexdigest()

    @property
    def identity(self) -> tuple[str, str, int]:
        """Stable ordering key that never fails, unlike coin_id."""
        return (self.parent_coin_info.lower(), self.puzzle_hash.lower(), self.amount)


class DriverType(str, Enum):
    CAT = "CAT"
    NFT = "NFT"


class NFTOnChainMetadata(BaseModel):
    data_uris: tuple[str, ...] = ()
    data_hash: str | None = None
    metadata_uris: tuple[str, ...] = ()
    metadata_hash: str | None = None
    license_uris: tuple[str, ...] = ()
    license_hash: str | None = None
    edition_number: int | str | None = None
    edition_total: int | str | None = None

    model_config = _WIRE_CONFIG


class FungibleProvenance(BaseModel):
    """Coin created by a CAT driver."""

    asset_id: str = UNKNOWN_ASSET_ID

    model_config = _WIRE_CONFIG


class NonFungibleProvenance(BaseModel):
    """Coin created by an NFT (singleton) driver."""

    launcher_id: str | None = None
    metadata: NFTOnChainMetadata = Field(default_factory=NFTOnChainMetadata)
    current_owner: str | None = None
    p2_puzzle_hash: str | None = None
    royalty_puzzle_hash: str | None = None
    royalty_ten_thousandths: int | None = None

    model_config = _WIRE_CONFIG


class UnrecognizedProvenance(BaseModel):
    """Driver info that is present but unknown or malformed."""

    driver_type: str | None = None
    reason: str = ""

    model_config = _WIRE_CONFIG


Provenance = FungibleProvenance | NonFungibleProvenance | UnrecognizedProvenance


def parse_provenance(driver_info: Any) -> Provenance | None:
    """
    Turn a raw ``driverInfo`` payload into a provenance variant.

    Never raises: payloads that fail validation become
    ``UnrecognizedProvenance`` so the wallet keeps working with formats it
    does not understand yet.

    Args:
        driver_info: The ``driverInfo`` object from a hydrated coin, or None

    Returns:
        None for plain coins, otherwise one of the provenance variants
    """
    if driver_info is None:
        return None

    if not isinstance(driver_info, dict):
        return UnrecognizedProvenance(reason=f"driver info is {type(driver_info).__name__}")

    driver_type = driver_info.get("type")

    try:
        if driver_type == DriverType.CAT.value:
            asset_id = driver_info.get("assetId", driver_info.get("asset_id"))
            return FungibleProvenance(asset_id=asset_id or UNKNOWN_ASSET_ID)

        if driver_type == DriverType.NFT.value:
            # Older responses carry the NFT info under "also"
            info = driver_info.get("info") or driver_info.get("also") or {}
            return NonFungibleProvenance.model_validate(info)

    except ValidationError as e:
        logger.debug(f"Malformed {driver_type} driver info: {e.error_count()} validation error(s)")
        return UnrecognizedProvenance(driver_type=driver_type, reason="validation failed")

    return UnrecognizedProvenance(
        driver_type=str(driver_type) if driver_type is not None else None,
        reason="unrecognized driver type",
    )


class HydratedCoin(BaseModel):
    coin: Coin
    provenance: Provenance | None = None
    created_height: int | None = None
    parent_coin_id: str | None = None
    spent_block_index: int | None = None

    model_config = _WIRE_CONFIG

    @property
    def amount(self) -> int:
        return self.coin.amount

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> HydratedCoin:
        """
        Build a hydrated coin from a cloud wallet API record.

        Raises:
            ValidationError: If the coin itself is missing or invalid
        """
        parent_spend = data.get("parentSpendInfo", data.get("parent_spend_info")) or {}
        if not isinstance(parent_spend, dict):
            parent_spend = {}
        driver_info = parent_spend.get("driverInfo", parent_spend.get("driver_info"))

        return cls(
            coin=Coin.model_validate(data.get("coin")),
            provenance=parse_provenance(driver_info),
            created_height=data.get("createdHeight", data.get("created_height")),
            parent_coin_id=parent_spend.get("parentCoinId", parent_spend.get("parent_coin_id")),
            spent_block_index=parent_spend.get(
                "spentBlockIndex", parent_spend.get("spent_block_index")
            ),
        )


class PublicIdentifiers(BaseModel):
    """Identifiers of the wallet bound to the current session."""

    address: str
    puzzle_hash: str | None = None
    synthetic_public_key: str | None = None
    master_public_key: str | None = None
    user_id: str | None = None
    email: str | None = None

    model_config = ConfigDict(frozen=True, extra="ignore")
