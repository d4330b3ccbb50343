"""
Display metadata for CAT tokens.

The registry starts out with a table of well-known tokens so that common
assets have a name before any token list has been fetched, and replaces it
wholesale with a fetched list once the current one is older than the TTL.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ccwcore.constants import DEFAULT_CAT_DENOM, METADATA_CACHE_TTL

ICON_URL_TEMPLATE = "https://icons.dexie.space/{asset_id}.webp"

ASSET_COLORS = [
    "#3B82F6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#8B5CF6",
    "#EC4899",
    "#14B8A6",
    "#F97316",
]


class CATMetadata(BaseModel):
    asset_id: str = Field(..., alias="id", min_length=1)
    code: str = "CAT"
    name: str = "Unknown CAT"
    icon: str | None = None
    denom: int = Field(default=DEFAULT_CAT_DENOM, gt=0)

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    @property
    def display_name(self) -> str:
        return f"{self.name} ({self.code})"


def _known(asset_id: str, name: str, code: str) -> CATMetadata:
    return CATMetadata(
        asset_id=asset_id,
        name=name,
        code=code,
        icon=ICON_URL_TEMPLATE.format(asset_id=asset_id),
    )


FALLBACK_TOKENS = [
    _known(
        "a628c1c2c6fcb74d53746157e438e108eab5c0bb3e5c80ff9b1910b3e4832913", "Spacebucks", "SBX"
    ),
    _known(
        "db1a9020d48d9d4ad22631b66ab4b9ebd3637ef7758ad38881348c5d24c38f20", "dexie bucks", "DBX"
    ),
    _known(
        "fa4a180ac326e67ea289b869e3448256f6af05721f7cf934cb9901baa6b7a99d",
        "Base warp.green USDC",
        "wUSDC.b",
    ),
    _known(
        "bbb51b246fbec1da1305be31dcf17151ccd0b8231a1ec306d7ce9f5b8c742b9e",
        "Ethereum warp.green USDC",
        "wUSDC",
    ),
    _known(
        "8ebf855de6eb146db5602f0456d2f0cbe750d57f821b6f91a8592ee9f1d4cf31", "Marmot Coin", "MRMT"
    ),
    _known("ccda69ff6c44d687994efdbee30689be51d2347f739287ab4bb7b52344f8bf1d", "BEPE", "BEPE"),
    _known(
        "e0005928763a7253a9c443d76837bdfab312382fc47cab85dad00be23ae4e82f", "Moonbucks", "MBX"
    ),
    _known(
        "509deafe3cd8bbfbb9ccce1d930e3d7b57b40c964fa33379b18d628175eb7a8f",
        "Chia Holiday 2021",
        "CH21",
    ),
    _known(
        "634f9f0de1a6c39a2189948b8e61b6852fbf774f73b0e36e143e841c49a0798c",
        "Ethereum warp.green USDT",
        "wUSDT",
    ),
]

TokenListFetcher = Callable[[], Awaitable[list[dict[str, Any]]]]


def build_metadata_map(tokens: list[dict[str, Any]]) -> dict[str, CATMetadata]:
    """Build an asset id -> metadata map, skipping entries without a usable id."""
    metadata: dict[str, CATMetadata] = {}
    for token in tokens:
        if not isinstance(token, dict) or not token.get("id"):
            continue
        try:
            entry = CATMetadata.model_validate(
                {key: value for key, value in token.items() if value is not None}
            )
        except ValidationError as e:
            logger.debug(f"Skipping malformed token entry {token.get('id')}: {e.error_count()}")
            continue
        metadata[entry.asset_id] = entry
    return metadata


class CATMetadataRegistry:
    def __init__(
        self,
        ttl: float = METADATA_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl = ttl
        self._clock = clock
        self._metadata = {token.asset_id: token for token in FALLBACK_TOKENS}
        self._loaded_at: float | None = None

    @property
    def is_stale(self) -> bool:
        if self._loaded_at is None:
            return True
        return self._clock() - self._loaded_at >= self.ttl

    def get(self, asset_id: str) -> CATMetadata | None:
        return self._metadata.get(asset_id)

    def __len__(self) -> int:
        return len(self._metadata)

    async def refresh(self, fetcher: TokenListFetcher, force: bool = False) -> bool:
        """
        Replace the token map with a freshly fetched list when it is stale.

        A failed or empty fetch keeps the current map.

        Returns:
            True if the map was replaced
        """
        if not force and not self.is_stale:
            return False

        try:
            tokens = await fetcher()
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch CAT token list: {e}")
            return False

        mapped = build_metadata_map(tokens or [])
        if not mapped:
            logger.debug("Token list was empty, keeping current CAT metadata")
            return False

        self._metadata = mapped
        self._loaded_at = self._clock()
        logger.info(f"Loaded {len(mapped)} CATs from token list")
        return True

    def display_name(self, asset_id: str) -> str:
        metadata = self.get(asset_id)
        if metadata is None:
            return f"CAT {asset_id[:8]}"
        return metadata.display_name


def get_cat_initials(code: str) -> str:
    """Up to three upper-case characters of a token code, for icon badges."""
    if not code:
        return "C"
    return code[:3].upper()


def get_asset_color(asset_id: str) -> str:
    """Stable badge color derived from the asset id."""
    return ASSET_COLORS[sum(ord(char) for char in asset_id) % len(ASSET_COLORS)]
