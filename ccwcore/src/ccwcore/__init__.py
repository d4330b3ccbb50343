"""
ccwcore - Core library for the Chia cloud wallet components

Provides shared coin models and IPFS content resolution.
"""

__version__ = "0.3.0"

from ccwcore.cache import TTLCache
from ccwcore.constants import (
    DEFAULT_CAT_DENOM,
    DEFAULT_NFT_IMAGE,
    MOJOS_PER_XCH,
    UNKNOWN_ASSET_ID,
)
from ccwcore.gateways import (
    DEFAULT_GATEWAYS,
    ContentKind,
    GatewayConfigurationError,
    GatewayEndpoint,
    GatewayPreference,
    GatewayRegistry,
)
from ccwcore.ipfs import (
    ContentURI,
    InvalidContentURIError,
    convert_ipfs_url,
    extract_cid,
    get_best_image_url,
    is_ipfs_url,
    normalize_content_uri,
)
from ccwcore.metadata import MetadataCache, MetadataFetchError
from ccwcore.models import (
    Coin,
    FungibleProvenance,
    HydratedCoin,
    NFTOnChainMetadata,
    NonFungibleProvenance,
    Provenance,
    PublicIdentifiers,
    UnrecognizedProvenance,
    parse_provenance,
)
from ccwcore.resolver import (
    ContentHandle,
    ContentResolver,
    HandleRegistry,
    HandleReleasedError,
    ResolvedContent,
    ResolverContext,
)

__all__ = [
    "Coin",
    "ContentHandle",
    "ContentKind",
    "ContentResolver",
    "ContentURI",
    "DEFAULT_CAT_DENOM",
    "DEFAULT_GATEWAYS",
    "DEFAULT_NFT_IMAGE",
    "FungibleProvenance",
    "GatewayConfigurationError",
    "GatewayEndpoint",
    "GatewayPreference",
    "GatewayRegistry",
    "HandleRegistry",
    "HandleReleasedError",
    "HydratedCoin",
    "InvalidContentURIError",
    "MOJOS_PER_XCH",
    "MetadataCache",
    "MetadataFetchError",
    "NFTOnChainMetadata",
    "NonFungibleProvenance",
    "Provenance",
    "PublicIdentifiers",
    "ResolvedContent",
    "ResolverContext",
    "TTLCache",
    "UNKNOWN_ASSET_ID",
    "UnrecognizedProvenance",
    "convert_ipfs_url",
    "extract_cid",
    "get_best_image_url",
    "is_ipfs_url",
    "normalize_content_uri",
    "parse_provenance",
]
