"""
Wallet backend implementations.

Available backends:
- CloudWalletBackend: Hosted cloud wallet API (bearer JWT)
"""

from ccwallet.backends.base import WalletBackend
from ccwallet.backends.cloud_wallet import CloudWalletBackend, CloudWalletError

__all__ = [
    "CloudWalletBackend",
    "CloudWalletError",
    "WalletBackend",
]
