"""
Providers package - Chain client implementations.
"""

from wallet_explorer.providers.blockscout import BlockscoutClient


__all__ = [
    "BlockscoutClient",
]
