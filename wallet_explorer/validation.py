"""
Address validation.

Every client operation calls this first and returns its empty value on
failure. Invalid input is expected, so nothing here raises.
"""

import re
from typing import Any

from web3 import Web3


_HEX_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{40}$")


def is_valid_address(address: Any) -> bool:
    """
    True for a 0x-prefixed, 40-hex-character EVM address.

    Mixed-case input must carry a valid EIP-55 checksum.
    """
    if not isinstance(address, str) or not address:
        return False
    if not _HEX_ADDRESS.match(address):
        return False
    try:
        return bool(Web3.is_address(address))
    except (TypeError, ValueError):
        return False
