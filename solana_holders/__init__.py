"""Solana Holders Package.

This package classifies the holders of an SPL token and decomposes its
supply into exchange, DEX, on-chain and locked buckets.
"""

import logging

__version__ = "0.1.0"
__author__ = "Solana Holders Contributors"
__email__ = "dev@solana-holders.local"

logger = logging.getLogger(__name__)
