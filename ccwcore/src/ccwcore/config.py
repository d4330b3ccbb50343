"""
Configuration management using pydantic-settings.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from ccwcore.constants import (
    DEFAULT_API_TIMEOUT,
    DEFAULT_GATEWAY_TIMEOUT,
    IPFS_IO_GATEWAY,
    METADATA_CACHE_TTL,
    PINATA_GATEWAY,
    SILICON_GATEWAY,
)
from ccwcore.gateways import GatewayEndpoint, endpoint_name_from_url

AUTH_PREFIX = "auth:"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    # Comma separated, in rank order; "auth:" marks a gateway that needs a JWT
    ipfs_gateways: str = f"{PINATA_GATEWAY},{AUTH_PREFIX}{SILICON_GATEWAY},{IPFS_IO_GATEWAY}"
    gateway_timeout: float = DEFAULT_GATEWAY_TIMEOUT
    metadata_cache_ttl: float = METADATA_CACHE_TTL

    api_base_url: str = "https://api.silicon-dev.net"
    hydrated_coins_url: str = (
        "https://edge.silicon-dev.net/chia/hydrated_coins_fetcher/hydrated-unspent-coins"
    )
    api_timeout: float = DEFAULT_API_TIMEOUT
    jwt_token: str = ""

    log_level: str = "INFO"

    def get_gateway_endpoints(self) -> list[GatewayEndpoint]:
        endpoints = []
        for entry in self.ipfs_gateways.split(","):
            entry = entry.strip()
            if not entry:
                continue
            requires_auth = entry.startswith(AUTH_PREFIX)
            url = entry[len(AUTH_PREFIX) :] if requires_auth else entry
            endpoints.append(
                GatewayEndpoint(
                    name=endpoint_name_from_url(url),
                    url_template=url,
                    requires_auth=requires_auth,
                    rank=len(endpoints),
                )
            )
        return endpoints


def get_settings() -> Settings:
    return Settings()
