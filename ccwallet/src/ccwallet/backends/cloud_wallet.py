"""
Cloud wallet HTTP backend.
Talks to the hosted wallet API with a bearer JWT; keys never leave the
remote enclave.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from ccwallet.backends.base import WalletBackend
from ccwcore.constants import DEFAULT_API_TIMEOUT
from ccwcore.models import HydratedCoin, PublicIdentifiers

PUBLIC_KEY_PATH = "/api/enclave/public-key"


class CloudWalletError(Exception):
    """The cloud wallet API rejected a request or returned an unexpected payload."""

    pass


def normalize_hydrated_coins_response(payload: Any) -> list[dict[str, Any]]:
    """
    Extract the list of coin records from a hydrated coins response.

    Depending on the environment the records are either ``data`` itself or
    nested one level deeper under ``data.data``.
    """
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, dict):
        logger.warning(f"Unexpected hydrated coins response type: {type(payload).__name__}")
        return []

    data = payload.get("data")
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("data"), list):
        return data["data"]

    logger.warning("Unexpected hydrated coins response structure, treating as empty")
    return []


class CloudWalletBackend(WalletBackend):
    def __init__(
        self,
        api_base_url: str,
        hydrated_coins_url: str,
        jwt_token: str | None = None,
        timeout: float = DEFAULT_API_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ):
        self.api_base_url = api_base_url.rstrip("/")
        self.hydrated_coins_url = hydrated_coins_url
        self.jwt_token = jwt_token
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    def set_jwt_token(self, token: str | None) -> None:
        self.jwt_token = token

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        """
        Make an authenticated API request.

        Raises:
            CloudWalletError: Without a JWT, or if the body is not JSON
            httpx.HTTPError: On connection/timeout errors and non-2xx responses
        """
        if not self.jwt_token:
            raise CloudWalletError("JWT token is required for this request")

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.jwt_token}",
        }

        logger.debug(f"{method} {url}")
        try:
            response = await self.client.request(method, url, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            logger.error(f"Cloud wallet request timed out: {method} {url} - {e}")
            raise
        except httpx.HTTPError as e:
            logger.error(f"Cloud wallet request failed: {method} {url} - {e}")
            raise

        try:
            return response.json()
        except ValueError as e:
            raise CloudWalletError(f"Invalid JSON from {url}") from e

    async def get_public_identifiers(self) -> PublicIdentifiers:
        data = await self._request("POST", f"{self.api_base_url}{PUBLIC_KEY_PATH}", json={})

        if isinstance(data, dict) and "address" not in data and isinstance(data.get("data"), dict):
            data = data["data"]

        try:
            return PublicIdentifiers.model_validate(data)
        except ValidationError as e:
            raise CloudWalletError(f"Unexpected public key response: {e}") from e

    async def get_hydrated_coins(self, address: str) -> list[HydratedCoin]:
        payload = await self._request("GET", self.hydrated_coins_url, params={"address": address})

        coins = []
        for record in normalize_hydrated_coins_response(payload):
            if not isinstance(record, dict):
                logger.warning(f"Skipping non-object coin record: {record!r}")
                continue
            try:
                coins.append(HydratedCoin.from_api(record))
            except ValidationError as e:
                logger.warning(f"Skipping invalid coin record: {e.error_count()} error(s)")

        logger.debug(f"Fetched {len(coins)} hydrated coins for {address}")
        return coins

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()
