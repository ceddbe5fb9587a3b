"""Constants used throughout the Solana Holders application.

This module defines common constants to avoid duplication and ensure consistency.
"""

# Solana token program IDs
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"

# Size of a classic SPL token account; Token-2022 accounts with extensions are larger
TOKEN_ACCOUNT_DATA_SIZE = 165

# Program names reported by jsonParsed account data
PARSED_TOKEN_PROGRAMS = ("spl-token", "spl-token-2022")

# Solscan activity types that move a token balance
SPL_TRANSFER_ACTIVITY_TYPES = (
    "ACTIVITY_SPL_TRANSFER",
    "ACTIVITY_SPL_MINT",
    "ACTIVITY_SPL_CREATE_ACCOUNT",
    "ACTIVITY_SPL_BURN",
)

# Label/tag keywords that mark an owner as holding vesting or otherwise locked supply
DEFAULT_LOCK_LABEL_KEYWORDS = (
    "streamflow",
    "vesting",
    "timelock",
    "lock",
    "escrow",
    "cliff",
    "unlock schedule",
    "vsr",
    "realms",
    "governance lock",
)

SECONDS_PER_DAY = 86400

# Basis points in one whole (100%)
BPS_PER_WHOLE = 10_000
