"""
Content resolution over multiple IPFS gateways.

A resolution normalizes the URI, then tries each eligible gateway in turn,
one at a time, until one answers with a 2xx response. Timeouts, transport
errors and non-2xx responses move on to the next gateway. When every gateway
has failed the caller gets a placeholder instead of an exception.

Gateway preference, the resolution cache and live content handles belong to
a ResolverContext, so separate sessions (and tests) never share state.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field

import httpx
from loguru import logger

from ccwcore.cache import TTLCache
from ccwcore.constants import DEFAULT_GATEWAY_TIMEOUT, DEFAULT_NFT_IMAGE, METADATA_CACHE_TTL
from ccwcore.gateways import (
    ContentKind,
    GatewayEndpoint,
    GatewayPreference,
    GatewayRegistry,
)
from ccwcore.ipfs import ContentURI, normalize_content_uri

DIRECT_SOURCE = "direct"
PLACEHOLDER_SOURCE = "placeholder"

TEXT_CONTENT_TYPES = ("text/", "application/json", "application/ld+json")


class HandleReleasedError(Exception):
    """Raised when a content handle is used or released after release."""

    pass


class ContentHandle:
    """
    Locally owned, revocable reference to fetched bytes.

    Allocated by the resolver for authenticated binary payloads. The caller
    owns it and must call release() exactly once when the content is no
    longer displayed.
    """

    def __init__(
        self, handle_id: str, data: bytes, content_type: str | None, registry: HandleRegistry
    ):
        self.handle_id = handle_id
        self.content_type = content_type
        self._data: bytes | None = data
        self._registry = registry

    @property
    def url(self) -> str:
        return f"blob:ccw/{self.handle_id}"

    @property
    def released(self) -> bool:
        return self._data is None

    @property
    def data(self) -> bytes:
        if self._data is None:
            raise HandleReleasedError(f"Handle {self.handle_id} has been released")
        return self._data

    def release(self) -> None:
        self._registry.release(self.handle_id)

    def _revoke(self) -> None:
        self._data = None

    def __repr__(self) -> str:
        state = "released" if self.released else f"{len(self._data or b'')} bytes"
        return f"ContentHandle({self.handle_id}, {state})"


class HandleRegistry:
    """Tracks live handles so leaks are observable."""

    def __init__(self) -> None:
        self._handles: dict[str, ContentHandle] = {}

    def allocate(self, data: bytes, content_type: str | None = None) -> ContentHandle:
        handle = ContentHandle(uuid.uuid4().hex, data, content_type, self)
        self._handles[handle.handle_id] = handle
        return handle

    def release(self, handle_id: str) -> None:
        handle = self._handles.pop(handle_id, None)
        if handle is None:
            raise HandleReleasedError(f"Handle {handle_id} is not live")
        handle._revoke()

    def release_all(self) -> int:
        count = len(self._handles)
        for handle_id in list(self._handles):
            self.release(handle_id)
        return count

    def __len__(self) -> int:
        return len(self._handles)


@dataclass(frozen=True)
class FetchedContent:
    data: bytes
    url: str
    source: str
    content_type: str | None = None
    authenticated: bool = False

    @property
    def is_binary(self) -> bool:
        if self.content_type is None:
            return True
        return not self.content_type.lower().startswith(TEXT_CONTENT_TYPES)


@dataclass(frozen=True)
class ResolvedContent:
    """Result of resolve(); always usable as an image source."""

    url: str
    source: str
    content_type: str | None = None
    data: bytes | None = None
    handle: ContentHandle | None = None

    @property
    def is_placeholder(self) -> bool:
        return self.source == PLACEHOLDER_SOURCE

    @classmethod
    def placeholder(cls) -> ResolvedContent:
        return cls(url=DEFAULT_NFT_IMAGE, source=PLACEHOLDER_SOURCE, content_type="image/svg+xml")


@dataclass
class ResolverContext:
    """Mutable state owned by one resolver."""

    preference: GatewayPreference = field(default_factory=GatewayPreference)
    content_cache: TTLCache[ResolvedContent] = field(
        default_factory=lambda: TTLCache(METADATA_CACHE_TTL)
    )
    handles: HandleRegistry = field(default_factory=HandleRegistry)


class ContentResolver:
    def __init__(
        self,
        registry: GatewayRegistry | None = None,
        context: ResolverContext | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_GATEWAY_TIMEOUT,
    ):
        """
        Initialize the resolver.

        Args:
            registry: Gateways to try (defaults to the built-in list)
            context: Preference/cache/handle state (a fresh one if omitted)
            client: Shared httpx client; the resolver creates and owns one if omitted
            timeout: Per-gateway timeout in seconds
        """
        self.registry = registry or GatewayRegistry()
        self.context = context or ResolverContext()
        self.timeout = timeout
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def _get(
        self, url: str, source: str, headers: dict[str, str] | None = None
    ) -> FetchedContent | None:
        # httpx timeouts are per read; the whole attempt including the body is bounded here
        try:
            response = await asyncio.wait_for(
                self.client.get(url, headers=headers, timeout=self.timeout),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.debug(f"{source}: timed out after {self.timeout}s ({url})")
            return None
        except httpx.HTTPError as e:
            logger.debug(f"{source}: request failed ({url}) - {e}")
            return None

        return FetchedContent(
            data=response.content,
            url=url,
            source=source,
            content_type=response.headers.get("content-type"),
            authenticated=headers is not None and "Authorization" in headers,
        )

    async def _try_endpoint(
        self, endpoint: GatewayEndpoint, content: ContentURI, auth_token: str | None
    ) -> FetchedContent | None:
        headers = {"Authorization": f"Bearer {auth_token}"} if endpoint.requires_auth else None
        return await self._get(endpoint.build_url(content.canonical), endpoint.name, headers)

    async def _fetch_with_fallback(
        self, content: ContentURI, kind: ContentKind, auth_token: str | None
    ) -> FetchedContent | None:
        endpoints = self.registry.ordered_endpoints(kind, self.context.preference)

        for endpoint in endpoints:
            if endpoint.requires_auth and not auth_token:
                logger.debug(f"Skipping {endpoint.name}: requires auth and no token given")
                continue

            fetched = await self._try_endpoint(endpoint, content, auth_token)
            if fetched is not None:
                self.context.preference.record_success(kind, endpoint.name)
                logger.debug(f"Resolved {content.canonical} via {endpoint.name}")
                return fetched

        logger.warning(f"All IPFS gateways failed for {content.canonical}")
        return None

    async def fetch(
        self,
        uri: str,
        auth_token: str | None = None,
        kind: ContentKind = ContentKind.METADATA,
    ) -> FetchedContent | None:
        """
        Fetch the bytes behind a URI.

        IPFS URIs go through the gateway fallback loop; other URIs are fetched
        once, directly.

        Returns:
            FetchedContent, or None if nothing could serve the content

        Raises:
            InvalidContentURIError: If the URI is empty or has no CID
            GatewayConfigurationError: If no gateways are configured
        """
        content = normalize_content_uri(uri)
        if not content.is_content_addressed:
            return await self._get(content.original, DIRECT_SOURCE)
        return await self._fetch_with_fallback(content, kind, auth_token)

    async def resolve(
        self,
        uri: str,
        auth_token: str | None = None,
        kind: ContentKind = ContentKind.IMAGE,
    ) -> ResolvedContent:
        """
        Resolve a URI to something displayable.

        Never fails for network reasons: if every gateway fails, the
        placeholder is returned. Authenticated binary payloads come back with
        a ContentHandle the caller must release.

        Raises:
            InvalidContentURIError: If the URI is empty or has no CID
            GatewayConfigurationError: If no gateways are configured
        """
        content = normalize_content_uri(uri)
        if not content.is_content_addressed:
            return ResolvedContent(url=content.original, source=DIRECT_SOURCE)

        cache_key = f"{kind.value}:{content.canonical}"
        cached = self.context.content_cache.get(cache_key)
        if cached is not None:
            return cached

        fetched = await self._fetch_with_fallback(content, kind, auth_token)
        if fetched is None:
            return ResolvedContent.placeholder()

        if fetched.authenticated and fetched.is_binary:
            handle = self.context.handles.allocate(fetched.data, fetched.content_type)
            return ResolvedContent(
                url=handle.url,
                source=fetched.source,
                content_type=fetched.content_type,
                data=fetched.data,
                handle=handle,
            )

        resolved = ResolvedContent(
            url=fetched.url,
            source=fetched.source,
            content_type=fetched.content_type,
            data=fetched.data,
        )
        if not fetched.authenticated:
            self.context.content_cache.set(cache_key, resolved)
        return resolved

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self) -> ContentResolver:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
