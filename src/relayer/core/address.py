"""
Bech32 account addresses.
"""

from typing import Optional

from bip_utils import AtomAddrEncoder, Bech32ChecksumError, Bech32Decoder

ACCOUNT_ADDRESS_BYTES = 20


def normalize_address(address: str, prefix: str = "terra") -> Optional[str]:
    """
    Return the canonical lowercase form of a well-formed account address.

    Bech32 allows an all-uppercase spelling; mixed case is invalid.

    Args:
        address: Candidate bech32 address
        prefix: Expected human readable part

    Returns:
        Lowercase address, or None if it does not decode with the right
        prefix and a 20-byte payload
    """
    if not isinstance(address, str):
        return None
    if address == address.upper():
        address = address.lower()
    elif address != address.lower():
        return None

    try:
        payload = Bech32Decoder.Decode(prefix, address)
    except (Bech32ChecksumError, ValueError):
        return None

    if len(payload) != ACCOUNT_ADDRESS_BYTES:
        return None
    return address


def is_valid_address(address: str, prefix: str = "terra") -> bool:
    """Check whether a string is a well-formed account address."""
    return normalize_address(address, prefix) is not None


def address_from_public_key(public_key: bytes, prefix: str = "terra") -> str:
    """Derive the account address (bech32 of HASH160) of a compressed secp256k1 public key."""
    return AtomAddrEncoder.EncodeKey(public_key, hrp=prefix)
