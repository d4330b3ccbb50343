"""
IPFS URI handling.

Accepted spellings of the same content identifier:
- ipfs://<CID>[/path]
- ipfs://ipfs/<CID>[/path]
- /ipfs/<CID>[/path]
- https://<any-gateway>/ipfs/<CID>[/path]
- a raw CID (more than 40 characters, no '/' or ':')

Anything else is not content-addressed and is used as-is.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from ccwcore.constants import MIN_RAW_CID_LENGTH, PINATA_GATEWAY

CID_PATTERN = re.compile(r"^[a-zA-Z0-9]+$")
GATEWAY_PATH_PATTERN = re.compile(r"/ipfs/([a-zA-Z0-9]+)(?:/([^?#]*))?")


class InvalidContentURIError(ValueError):
    """Raised when a URI cannot be interpreted at all."""

    pass


@dataclass(frozen=True)
class ContentURI:
    """A URI after normalization."""

    original: str
    cid: str | None = None
    path: str = ""

    @property
    def is_content_addressed(self) -> bool:
        return self.cid is not None

    @property
    def canonical(self) -> str:
        """Canonical identifier (CID plus optional path) or the original URI."""
        if self.cid is None:
            return self.original
        return f"{self.cid}/{self.path}" if self.path else self.cid


def _looks_like_raw_cid(value: str) -> bool:
    return (
        len(value) > MIN_RAW_CID_LENGTH
        and "/" not in value
        and ":" not in value
        and bool(CID_PATTERN.match(value))
    )


def _split_cid(original: str, remainder: str) -> ContentURI:
    cid, _, path = remainder.partition("/")
    if not cid or not CID_PATTERN.match(cid):
        raise InvalidContentURIError(f"No content identifier in {original!r}")
    return ContentURI(original=original, cid=cid, path=path)


def normalize_content_uri(uri: str) -> ContentURI:
    """
    Normalize any supported IPFS spelling into a canonical content identifier.

    Args:
        uri: URI or raw CID

    Returns:
        ContentURI; ``cid`` is None for URIs that are not content-addressed

    Raises:
        InvalidContentURIError: For empty URIs or IPFS URIs without a CID
    """
    if not isinstance(uri, str) or not uri.strip():
        raise InvalidContentURIError("Content URI must be a non-empty string")

    uri = uri.strip()

    if uri.startswith(("http://", "https://")):
        match = GATEWAY_PATH_PATTERN.search(uri)
        if match:
            return ContentURI(original=uri, cid=match.group(1), path=match.group(2) or "")
        return ContentURI(original=uri)

    if uri.startswith("ipfs://"):
        remainder = uri[len("ipfs://") :]
        if remainder.startswith("ipfs/"):
            remainder = remainder[len("ipfs/") :]
        return _split_cid(uri, remainder)

    if uri.startswith("/ipfs/"):
        return _split_cid(uri, uri[len("/ipfs/") :])

    if _looks_like_raw_cid(uri):
        return ContentURI(original=uri, cid=uri)

    return ContentURI(original=uri)


def extract_cid(uri: str | None) -> str | None:
    """Return the CID of an IPFS URI, or None if there is none."""
    if not uri:
        return None
    try:
        return normalize_content_uri(uri).cid
    except InvalidContentURIError:
        return None


def is_ipfs_url(uri: str | None) -> bool:
    return extract_cid(uri) is not None


def convert_ipfs_url(uri: str | None, gateway: str = PINATA_GATEWAY) -> str | None:
    """
    Rewrite an IPFS URI to an HTTP URL on the given gateway.

    Non-IPFS URIs are returned unchanged; empty input gives None.
    """
    if not uri:
        return None
    try:
        content = normalize_content_uri(uri)
    except InvalidContentURIError:
        return uri
    if not content.is_content_addressed:
        return content.original
    return f"{gateway.rstrip('/')}/{content.canonical}"


def convert_ipfs_urls(uris: list[str | None] | None, gateway: str = PINATA_GATEWAY) -> list[str]:
    if not uris:
        return []
    converted = (convert_ipfs_url(uri, gateway) for uri in uris)
    return [url for url in converted if url is not None]


def get_best_image_url(uris: list[str | None] | None) -> str | None:
    """
    Pick the URL to display from several candidates.

    Plain HTTP URLs win over IPFS ones since they skip the gateway hop.
    """
    if not uris:
        return None

    valid = [uri for uri in uris if uri]
    if not valid:
        return None

    for uri in valid:
        if uri.startswith(("http://", "https://")) and not is_ipfs_url(uri):
            return uri

    for uri in valid:
        if is_ipfs_url(uri):
            return convert_ipfs_url(uri)

    return valid[0]
