"""
Chia and cloud wallet constants.

Amounts are always handled as integers in mojos; conversion to XCH only
happens when formatting for display.
"""

from __future__ import annotations

# 1 XCH = 10^12 mojos
MOJOS_PER_XCH = 1_000_000_000_000

# CAT tokens use 3 decimal places (1 CAT = 1000 CAT mojos)
DEFAULT_CAT_DENOM = 1000

# Asset id used when a CAT driver reports no asset id
UNKNOWN_ASSET_ID = "unknown"

# Rough spend bundle size estimation (bytes)
BASE_TX_SIZE = 100
INPUT_SIZE = 150
OUTPUT_SIZE = 50

# Minimum fee used by calculate_optimal_fee: 0.000001 XCH
MINIMUM_FEE = 1_000_000  # mojos
DEFAULT_FEE_RATE = 1  # mojos per byte

# Metadata and resolution cache lifetime (seconds)
METADATA_CACHE_TTL = 5 * 60

# Timeout for a single gateway attempt (seconds)
DEFAULT_GATEWAY_TIMEOUT = 8.0

# Timeout for cloud wallet API calls (seconds)
DEFAULT_API_TIMEOUT = 30.0

# Raw CIDs are only recognized above this length
MIN_RAW_CID_LENGTH = 40

# Placeholder returned when no gateway could serve an image
DEFAULT_NFT_IMAGE = (
    "data:image/svg+xml;base64,PHN2ZyB4bWxucz0iaHR0cDovL3d3dy53My5vcmcvMjAwMC9zdmciIHdpZHRo"
    "PSIyMDAiIGhlaWdodD0iMjAwIiB2aWV3Qm94PSIwIDAgMjAwIDIwMCI+PHJlY3Qgd2lkdGg9IjIwMCIgaGVpZ2h0"
    "PSIyMDAiIGZpbGw9IiNlNWU3ZWIiLz48dGV4dCB4PSIxMDAiIHk9IjEwNSIgZm9udC1zaXplPSIxNiIgdGV4dC1h"
    "bmNob3I9Im1pZGRsZSIgZmlsbD0iIzZiNzI4MCI+TkZUPC90ZXh0Pjwvc3ZnPg=="
)

# Public IPFS gateways, in default rank order
PINATA_GATEWAY = "https://gateway.pinata.cloud/ipfs"
IPFS_IO_GATEWAY = "https://ipfs.io/ipfs"
# Authenticated gateway (bearer JWT), returns binary payloads
SILICON_GATEWAY = "https://edgedev.silicon.net/v1/ipfs"
