"""
NFT metadata document cache with in-flight request de-duplication.
"""

from __future__ import annotations

import json
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx
from loguru import logger

from ccwcore.cache import TTLCache
from ccwcore.constants import METADATA_CACHE_TTL
from ccwcore.gateways import ContentKind
from ccwcore.ipfs import normalize_content_uri
from ccwcore.resolver import ContentResolver

MetadataDocument = dict[str, Any]
MetadataFetcher = Callable[[str, str | None], Awaitable[MetadataDocument]]


class MetadataFetchError(Exception):
    """A metadata document could not be fetched or decoded."""

    pass


class MetadataCache:
    """
    Caches decoded metadata documents for a fixed TTL.

    While a URI is being fetched, further requests for it return None instead
    of issuing a second request; callers pick the document up on a later
    refresh. Failed fetches are not cached, so the next call retries.
    """

    def __init__(
        self,
        resolver: ContentResolver | None = None,
        ttl: float = METADATA_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
        fetcher: MetadataFetcher | None = None,
    ):
        if resolver is None and fetcher is None:
            raise ValueError("MetadataCache needs a resolver or a fetcher")
        self.resolver = resolver
        self._cache: TTLCache[MetadataDocument] = TTLCache(ttl, clock)
        self._in_flight: set[str] = set()
        self._fetcher = fetcher or self._fetch_via_resolver

    async def _fetch_via_resolver(self, uri: str, auth_token: str | None) -> MetadataDocument:
        if self.resolver is None:
            raise MetadataFetchError("No resolver configured")
        fetched = await self.resolver.fetch(uri, auth_token=auth_token, kind=ContentKind.METADATA)
        if fetched is None:
            raise MetadataFetchError(f"No source could serve {uri}")

        try:
            document = json.loads(fetched.data)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MetadataFetchError(f"Invalid JSON from {fetched.source}: {e}") from e

        if not isinstance(document, dict):
            raise MetadataFetchError(f"Expected a JSON object from {fetched.source}")
        return document

    @staticmethod
    def _key(uri: str) -> str:
        return normalize_content_uri(uri).canonical

    def peek(self, uri: str) -> MetadataDocument | None:
        """Return a fresh cached document without fetching."""
        return self._cache.get(self._key(uri))

    def is_in_flight(self, uri: str) -> bool:
        return self._key(uri) in self._in_flight

    async def get_or_fetch(
        self, uri: str, auth_token: str | None = None
    ) -> MetadataDocument | None:
        """
        Return the metadata document for ``uri``.

        Returns:
            The document, or None if it is already being fetched by another
            caller or the fetch failed

        Raises:
            InvalidContentURIError: If the URI is empty or malformed
        """
        key = self._key(uri)

        cached = self._cache.get(key)
        if cached is not None:
            return cached

        if key in self._in_flight:
            logger.debug(f"Metadata for {key} already in flight, not refetching")
            return None

        self._in_flight.add(key)
        try:
            document = await self._fetcher(uri, auth_token)
        except (MetadataFetchError, httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to load metadata from {uri}: {e}")
            return None
        finally:
            self._in_flight.discard(key)

        self._cache.set(key, document)
        return document

    def invalidate(self, uri: str) -> None:
        self._cache.invalidate(self._key(uri))

    def clear(self) -> None:
        self._cache.clear()
