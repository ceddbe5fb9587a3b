"""Validation utilities for Solana Holders.

This module provides utilities for validating Solana-specific data.
"""

import re

import base58

from solana_holders.utils.error_handling import ValidationError

# Solana public key validation pattern (base58 format)
PUBKEY_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")
PUBKEY_LENGTH = 32


class InvalidPublicKeyError(ValidationError):
    """Exception raised when an invalid public key is provided."""

    def __init__(self, pubkey: str):
        super().__init__(f"Invalid public key: {pubkey}", details={"pubkey": pubkey})
        self.pubkey = pubkey


def validate_public_key(pubkey: str) -> bool:
    """Validate a Solana public key.

    The key must be base58 and decode to exactly 32 bytes.

    Args:
        pubkey: The public key to validate

    Returns:
        True if the public key is valid, False otherwise
    """
    if not pubkey or not isinstance(pubkey, str):
        return False
    if not PUBKEY_PATTERN.match(pubkey):
        return False
    try:
        return len(base58.b58decode(pubkey)) == PUBKEY_LENGTH
    except ValueError:
        return False


def validate_solana_address(address: str) -> str:
    """Validate a Solana address and raise an exception if invalid.

    Args:
        address: The address to validate

    Returns:
        The address, unchanged

    Raises:
        InvalidPublicKeyError: If the address is invalid
    """
    if not validate_public_key(address):
        raise InvalidPublicKeyError(address)
    return address
