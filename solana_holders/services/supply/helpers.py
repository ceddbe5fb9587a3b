"""Helper functions shared by the exhaustive supply scans."""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from solana_holders.clients.base import ChainProvider
from solana_holders.constants import TOKEN_ACCOUNT_DATA_SIZE, TOKEN_PROGRAM_ID
from solana_holders.logging_config import get_logger, log_with_context
from solana_holders.models.chain import TokenAccountRecord
from solana_holders.utils.error_handling import ChainQueryError, ProviderError

logger = get_logger(__name__)


def token_program_ids(extra_program_ids: Iterable[str] = ()) -> List[str]:
    """The legacy token program followed by any extra programs, deduplicated."""
    program_ids = [TOKEN_PROGRAM_ID]
    for program_id in extra_program_ids:
        if program_id and program_id not in program_ids:
            program_ids.append(program_id)
    return program_ids


async def collect_token_accounts(
    chain: ChainProvider,
    mint: str,
    extra_program_ids: Sequence[str] = ()
) -> List[TokenAccountRecord]:
    """Enumerate every token account of a mint across the token programs.

    Only the legacy program gets the fixed account-size filter; Token-2022
    accounts with extensions are larger. An extra program whose enumeration
    fails contributes no accounts.

    Raises:
        ChainQueryError: If the legacy token program cannot be enumerated
    """
    accounts: List[TokenAccountRecord] = []
    for program_id in token_program_ids(extra_program_ids):
        data_size = TOKEN_ACCOUNT_DATA_SIZE if program_id == TOKEN_PROGRAM_ID else None
        try:
            found = await chain.get_program_token_accounts(program_id, mint, data_size)
        except ProviderError as e:
            if program_id == TOKEN_PROGRAM_ID:
                raise ChainQueryError(
                    f"Token account enumeration failed for {mint}: {e.message}",
                    details={"program": program_id}
                ) from e
            log_with_context(logger, "warning", f"Token account enumeration failed: {e.message}",
                             program=program_id, mint=mint)
            continue

        log_with_context(logger, "info", "Found token accounts", program=program_id, mint=mint, count=len(found))
        accounts.extend(account for account in found if account.mint == mint)
    return accounts


def aggregate_owner_balances(accounts: Iterable[TokenAccountRecord]) -> List[Tuple[str, int]]:
    """Sum raw balances per owner, dropping empty owners.

    Returns:
        ``(owner, raw_balance)`` pairs, largest balance first
    """
    per_owner: Dict[str, int] = defaultdict(int)
    for account in accounts:
        if account.amount_raw > 0:
            per_owner[account.owner] += account.amount_raw
    return sorted(per_owner.items(), key=lambda item: (-item[1], item[0]))
