"""Async Solana JSON-RPC client."""

# Standard library imports
import asyncio
import json
from typing import Any, Dict, List, Optional

# Third-party library imports
import httpx

# Internal imports
from solana_holders.clients.base import ChainProvider
from solana_holders.config import SolanaConfig
from solana_holders.logging_config import get_logger, log_with_context
from solana_holders.models.chain import LargestTokenAccount, MintInfo, TokenAccountRecord
from solana_holders.models.parsed import parse_mint_account, parse_program_account, parse_token_account_data
from solana_holders.utils.error_handling import ChainQueryError, ErrorCode, ProviderError
from solana_holders.utils.validation import validate_solana_address

# Get logger
logger = get_logger(__name__)

# getTokenLargestAccounts never returns more than this many entries
LARGEST_ACCOUNTS_LIMIT = 20


def _unwrap_value(result: Any) -> Any:
    """Strip the ``{"context": ..., "value": ...}`` envelope when present."""
    if isinstance(result, dict) and "value" in result:
        return result["value"]
    return result


class SolanaRpcClient(ChainProvider):
    """Chain provider backed by a Solana JSON-RPC endpoint."""

    retriable_status_codes = {408, 429, 500, 502, 503, 504}
    initial_retry_delay = 1.0  # seconds
    max_retry_delay = 10.0  # seconds

    def __init__(self, config: SolanaConfig, http_client: Optional[httpx.AsyncClient] = None):
        """Initialize the RPC client.

        Args:
            config: Solana connection settings
            http_client: Optional pre-built HTTP client (tests inject one with a mock transport)
        """
        self.config = config
        self.headers = {"Content-Type": "application/json"}
        self._http_client = http_client
        self._request_id = 0

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.config.timeout,
                limits=httpx.Limits(max_keepalive_connections=10, max_connections=20)
            )
        return self._http_client

    def _retry_wait(self, retry_count: int) -> float:
        return min(self.initial_retry_delay * (2 ** retry_count), self.max_retry_delay)

    async def _make_request(self, method: str, params: Optional[List[Any]] = None) -> Any:
        """Make a JSON-RPC request to the Solana node.

        Args:
            method: The RPC method to call
            params: The parameters to pass to the method

        Returns:
            The ``result`` member of the JSON-RPC response

        Raises:
            ChainQueryError: If the request fails or the node returns an error
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or []
        }
        max_retries = self.config.max_retries
        client = self._get_http_client()

        for retry_count in range(max_retries + 1):
            if retry_count > 0:
                logger.info(f"Retry attempt {retry_count}/{max_retries} for {method}")

            try:
                response = await client.post(self.config.rpc_url, headers=self.headers, json=payload)

                if response.status_code in self.retriable_status_codes and retry_count < max_retries:
                    wait_time = self._retry_wait(retry_count)
                    logger.warning(f"HTTP status {response.status_code}, retrying in {wait_time}s: {method}")
                    await asyncio.sleep(wait_time)
                    continue

                response.raise_for_status()
                result = response.json()
            except (httpx.HTTPError, json.JSONDecodeError) as e:
                if retry_count < max_retries and not isinstance(e, httpx.HTTPStatusError):
                    wait_time = self._retry_wait(retry_count)
                    logger.warning(f"Request failed, retrying in {wait_time}s: {str(e)}")
                    await asyncio.sleep(wait_time)
                    continue

                status_code = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
                logger.error(f"{method} failed after {retry_count + 1} attempt(s): {str(e)}")
                raise ChainQueryError(
                    f"Request to Solana RPC failed: {str(e) or type(e).__name__}",
                    error_code=ErrorCode.NETWORK_ERROR,
                    details={"method": method, "status_code": status_code}
                ) from e

            if not isinstance(result, dict):
                raise ChainQueryError(
                    "Malformed JSON-RPC response",
                    error_code=ErrorCode.PARSING_ERROR,
                    details={"method": method}
                )

            if "error" in result:
                error = result["error"] or {}
                message = f"Solana RPC error: {error.get('message', 'Unknown error')}"
                if "data" in error:
                    message += f" - {json.dumps(error['data'])}"
                raise ChainQueryError(message, rpc_error_code=error.get("code"), details={"method": method})

            return result.get("result")

        raise ChainQueryError(
            f"Request to Solana RPC failed after {max_retries + 1} attempt(s)",
            error_code=ErrorCode.NETWORK_ERROR,
            details={"method": method}
        )

    async def _get_parsed_account(self, address: str) -> Optional[Dict[str, Any]]:
        result = await self._make_request(
            "getAccountInfo",
            [address, {"encoding": "jsonParsed", "commitment": self.config.commitment}]
        )
        value = _unwrap_value(result)
        return value if isinstance(value, dict) else None

    async def get_mint_info(self, mint: str) -> MintInfo:
        """Fetch and validate a mint account.

        Raises:
            InvalidPublicKeyError: If the mint is not a valid public key
            ChainQueryError: If the account is missing or is not a token mint
        """
        validate_solana_address(mint)

        account = await self._get_parsed_account(mint)
        if account is None:
            raise ChainQueryError(
                f"Mint account not found: {mint}",
                error_code=ErrorCode.ACCOUNT_NOT_FOUND_ERROR,
                details={"mint": mint}
            )

        mint_info = parse_mint_account(mint, account.get("data"))
        if mint_info is None:
            raise ChainQueryError(
                f"Account is not a token mint: {mint}",
                error_code=ErrorCode.PARSING_ERROR,
                details={"mint": mint}
            )

        log_with_context(logger, "debug", "Fetched mint info",
                         mint=mint, decimals=mint_info.decimals, supply_raw=mint_info.supply_raw)
        return mint_info

    async def get_largest_token_accounts(self, mint: str) -> List[LargestTokenAccount]:
        """Get the largest token accounts of a mint.

        Entries that cannot be parsed are skipped.
        """
        validate_solana_address(mint)

        result = await self._make_request(
            "getTokenLargestAccounts",
            [mint, {"commitment": self.config.commitment}]
        )
        value = _unwrap_value(result)
        if not isinstance(value, list):
            logger.warning(f"Unexpected format for getTokenLargestAccounts for {mint}: {value}")
            return []

        accounts = []
        for entry in value[:LARGEST_ACCOUNTS_LIMIT]:
            try:
                accounts.append(LargestTokenAccount(
                    token_account=entry["address"],
                    amount_raw=int(entry["amount"]),
                    decimals=int(entry["decimals"]),
                ))
            except (KeyError, TypeError, ValueError):
                logger.debug(f"Skipping malformed largest-account entry for {mint}: {entry}")
        return accounts

    async def get_owner_of_token_account(self, token_account: str) -> str:
        """Resolve the wallet owning a token account.

        Falls back to the input address when the account is missing, is not
        a parsed SPL token account, or cannot be fetched.
        """
        try:
            account = await self._get_parsed_account(token_account)
        except ProviderError as e:
            logger.warning(f"Failed to get token account owner for {token_account}: {e.message}")
            return token_account

        if account is None:
            return token_account

        info = parse_token_account_data(account.get("data"))
        return info.owner if info is not None else token_account

    async def get_program_token_accounts(
        self,
        program_id: str,
        mint: str,
        data_size: Optional[int] = None
    ) -> List[TokenAccountRecord]:
        """Enumerate the token accounts of a mint under one token program.

        Args:
            program_id: Token program owning the accounts
            mint: Mint address, matched against the first 32 bytes of account data
            data_size: Optional exact account size filter

        Returns:
            Validated token account records; entries that fail validation are skipped

        Raises:
            InvalidPublicKeyError: If an address is not a valid public key
            ChainQueryError: If the request fails
        """
        validate_solana_address(program_id)
        validate_solana_address(mint)

        filters: List[Dict[str, Any]] = [{"memcmp": {"offset": 0, "bytes": mint}}]
        if data_size is not None:
            filters.insert(0, {"dataSize": data_size})

        result = await self._make_request(
            "getProgramAccounts",
            [program_id, {
                "encoding": "jsonParsed",
                "filters": filters,
                "commitment": self.config.commitment
            }]
        )
        entries = _unwrap_value(result)
        if not isinstance(entries, list):
            logger.warning(f"Unexpected format for getProgramAccounts under {program_id}")
            return []

        records = []
        for entry in entries:
            record = parse_program_account(entry, program_id)
            if record is not None:
                records.append(record)

        skipped = len(entries) - len(records)
        log_with_context(logger, "debug", "Enumerated token accounts",
                         program=program_id, mint=mint, accounts=len(records), skipped=skipped)
        return records

    async def __aenter__(self):
        """Async context manager entry.

        Returns:
            Self
        """
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the client and release resources."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
