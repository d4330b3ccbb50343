"""
Base wallet backend interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ccwcore.models import HydratedCoin, PublicIdentifiers


class WalletBackend(ABC):
    """
    Abstract wallet backend interface.
    Implementations provide the coins and identifiers of a remotely held
    wallet; signing and broadcast stay with the remote service.
    """

    @abstractmethod
    async def get_public_identifiers(self) -> PublicIdentifiers:
        """Get address and public keys of the session's wallet"""

    @abstractmethod
    async def get_hydrated_coins(self, address: str) -> list[HydratedCoin]:
        """Get unspent coins with provenance for an address"""

    async def close(self) -> None:
        """Close backend connection"""
        pass
