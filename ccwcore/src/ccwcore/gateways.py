"""
IPFS gateway registry and per-content-kind gateway preference.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from urllib.parse import urlparse

from pydantic import BaseModel, Field

from ccwcore.constants import IPFS_IO_GATEWAY, PINATA_GATEWAY, SILICON_GATEWAY


class GatewayConfigurationError(Exception):
    """Raised when the gateway list cannot be used at all."""

    pass


class ContentKind(str, Enum):
    IMAGE = "image"
    METADATA = "metadata"


class GatewayEndpoint(BaseModel):
    name: str = Field(..., min_length=1)
    # Either contains "{cid}" or is a base URL the identifier is appended to
    url_template: str = Field(..., min_length=1)
    requires_auth: bool = False
    rank: int = Field(default=0, ge=0)

    model_config = {"frozen": True}

    def build_url(self, content_id: str) -> str:
        if "{cid}" in self.url_template:
            return self.url_template.replace("{cid}", content_id)
        return f"{self.url_template.rstrip('/')}/{content_id}"


def endpoint_name_from_url(url: str) -> str:
    """Derive a readable endpoint name (the host) from a gateway URL."""
    host = urlparse(url).hostname
    return host or url


DEFAULT_GATEWAYS: list[GatewayEndpoint] = [
    GatewayEndpoint(name="pinata", url_template=PINATA_GATEWAY, rank=0),
    GatewayEndpoint(name="silicon", url_template=SILICON_GATEWAY, requires_auth=True, rank=1),
    GatewayEndpoint(name="ipfs.io", url_template=IPFS_IO_GATEWAY, rank=2),
]


class GatewayPreference:
    """
    Remembers which gateway last served each kind of content.

    Only written after a successful fetch, so a failing gateway never becomes
    preferred.
    """

    def __init__(self) -> None:
        self._preferred: dict[ContentKind, str] = {}

    def record_success(self, kind: ContentKind, endpoint_name: str) -> None:
        self._preferred[kind] = endpoint_name

    def preferred(self, kind: ContentKind) -> str | None:
        return self._preferred.get(kind)

    def clear(self) -> None:
        self._preferred.clear()

    def snapshot(self) -> dict[str, str]:
        return {kind.value: name for kind, name in self._preferred.items()}


class GatewayRegistry:
    """Static, rank-ordered list of gateways for one session."""

    def __init__(self, endpoints: Sequence[GatewayEndpoint] | None = None):
        endpoints = list(DEFAULT_GATEWAYS if endpoints is None else endpoints)

        names = [endpoint.name for endpoint in endpoints]
        duplicates = {name for name in names if names.count(name) > 1}
        if duplicates:
            raise GatewayConfigurationError(f"Duplicate gateway names: {sorted(duplicates)}")

        # sorted() is stable, so equal ranks keep configuration order
        self._endpoints = sorted(endpoints, key=lambda e: e.rank)

    @property
    def endpoints(self) -> list[GatewayEndpoint]:
        return list(self._endpoints)

    def get(self, name: str) -> GatewayEndpoint | None:
        for endpoint in self._endpoints:
            if endpoint.name == name:
                return endpoint
        return None

    def ordered_endpoints(
        self, kind: ContentKind, preference: GatewayPreference | None = None
    ) -> list[GatewayEndpoint]:
        """
        Endpoints in the order they should be tried for ``kind``.

        The gateway that last succeeded for this kind goes first, the rest
        follow in rank order.

        Raises:
            GatewayConfigurationError: If no gateways are configured
        """
        if not self._endpoints:
            raise GatewayConfigurationError("No IPFS gateways configured")

        preferred = preference.preferred(kind) if preference else None
        if preferred is None:
            return list(self._endpoints)

        first = [e for e in self._endpoints if e.name == preferred]
        rest = [e for e in self._endpoints if e.name != preferred]
        return first + rest
