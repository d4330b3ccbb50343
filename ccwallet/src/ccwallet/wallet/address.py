"""
Chia address utilities.

Chia addresses are bech32m (BIP350) encodings of a 32-byte puzzle hash with
the ``xch`` prefix on mainnet and ``txch`` on testnet.
"""

from __future__ import annotations

from ccwcore.models import HEX32_PATTERN, strip_hex_prefix

BECH32M_CONST = 0x2BC830A3
CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"

NETWORK_PREFIXES = {"mainnet": "xch", "testnet": "txch"}


def bech32_polymod(values: list[int]) -> int:
    """Bech32 checksum polymod"""
    gen = [0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3]
    chk = 1
    for v in values:
        b = chk >> 25
        chk = (chk & 0x1FFFFFF) << 5 ^ v
        for i in range(5):
            chk ^= gen[i] if ((b >> i) & 1) else 0
    return chk


def bech32_hrp_expand(hrp: str) -> list[int]:
    """Expand HRP for bech32"""
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def bech32m_create_checksum(hrp: str, data: list[int]) -> list[int]:
    values = bech32_hrp_expand(hrp) + data
    polymod = bech32_polymod(values + [0, 0, 0, 0, 0, 0]) ^ BECH32M_CONST
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def bech32m_verify_checksum(hrp: str, data: list[int]) -> bool:
    return bech32_polymod(bech32_hrp_expand(hrp) + data) == BECH32M_CONST


def bech32m_encode(hrp: str, data: list[int]) -> str:
    combined = data + bech32m_create_checksum(hrp, data)
    return hrp + "1" + "".join([CHARSET[d] for d in combined])


def bech32m_decode(address: str) -> tuple[str, list[int]]:
    """
    Split a bech32m string into its prefix and 5-bit data words.

    Raises:
        ValueError: On mixed case, bad characters or a bad checksum
    """
    if address.lower() != address and address.upper() != address:
        raise ValueError("Mixed-case address")
    address = address.lower()

    pos = address.rfind("1")
    if pos < 1 or pos + 7 > len(address):
        raise ValueError("Missing separator or data part too short")

    hrp = address[:pos]
    if any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise ValueError("Invalid character in prefix")

    try:
        data = [CHARSET.index(c) for c in address[pos + 1 :]]
    except ValueError as e:
        raise ValueError("Invalid character in data part") from e

    if not bech32m_verify_checksum(hrp, data):
        raise ValueError("Invalid bech32m checksum")

    return hrp, data[:-6]


def convertbits(data: bytes | list[int], frombits: int, tobits: int, pad: bool = True) -> list[int]:
    """Convert between bit groups"""
    acc = 0
    bits = 0
    ret = []
    maxv = (1 << tobits) - 1
    max_acc = (1 << (frombits + tobits - 1)) - 1

    for value in data:
        if value < 0 or value >> frombits:
            raise ValueError("Invalid value for bit conversion")
        acc = ((acc << frombits) | value) & max_acc
        bits += frombits
        while bits >= tobits:
            bits -= tobits
            ret.append((acc >> bits) & maxv)

    if pad:
        if bits:
            ret.append((acc << (tobits - bits)) & maxv)
    elif bits >= frombits or ((acc << (tobits - bits)) & maxv):
        raise ValueError("Invalid bits")

    return ret


def puzzle_hash_to_address(puzzle_hash: str, network: str = "mainnet") -> str:
    """
    Encode a 32-byte puzzle hash as a Chia address.

    Args:
        puzzle_hash: Hex puzzle hash (optional 0x prefix)
        network: mainnet (xch) or testnet (txch)
    """
    puzzle_hash = strip_hex_prefix(puzzle_hash)
    if not HEX32_PATTERN.match(puzzle_hash):
        raise ValueError("Puzzle hash must be 32 bytes of hex")
    if network not in NETWORK_PREFIXES:
        raise ValueError(f"Unknown network: {network}")

    return bech32m_encode(NETWORK_PREFIXES[network], convertbits(bytes.fromhex(puzzle_hash), 8, 5))


def address_to_puzzle_hash(address: str) -> str:
    """
    Decode a Chia address to its puzzle hash (hex, no prefix).

    Raises:
        ValueError: If the address is not a valid xch/txch bech32m address
    """
    hrp, data = bech32m_decode(address.strip())
    if hrp not in NETWORK_PREFIXES.values():
        raise ValueError(f"Unexpected address prefix: {hrp}")

    decoded = bytes(convertbits(data, 5, 8, pad=False))
    if len(decoded) != 32:
        raise ValueError(f"Address decodes to {len(decoded)} bytes, expected 32")
    return decoded.hex()


def to_puzzle_hash(address_or_puzzle_hash: str) -> str:
    """Accept either a puzzle hash or an address and return the puzzle hash."""
    candidate = strip_hex_prefix(address_or_puzzle_hash.strip())
    if HEX32_PATTERN.match(candidate):
        return candidate.lower()
    return address_to_puzzle_hash(address_or_puzzle_hash)


def is_valid_address(address: str) -> bool:
    try:
        address_to_puzzle_hash(address)
    except ValueError:
        return False
    return True


def shorten(value: str, length: int = 10) -> str:
    """Abbreviate a long address or hash as ``head...tail``."""
    if not value or len(value) <= length * 2:
        return value
    return f"{value[:length]}...{value[-length:]}"
