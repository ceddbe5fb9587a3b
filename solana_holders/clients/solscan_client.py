"""Async client for the Solscan Pro API (account metadata and transfers)."""

# Standard library imports
from typing import Any, Dict, List, Optional, Sequence

# Third-party library imports
import httpx
from cachetools import TTLCache
from pydantic import ValidationError as PydanticValidationError

# Internal imports
from solana_holders.clients.base import MetadataProvider, TransferHistoryProvider
from solana_holders.config import SolscanConfig
from solana_holders.constants import SPL_TRANSFER_ACTIVITY_TYPES
from solana_holders.logging_config import get_logger
from solana_holders.models.chain import TransferRecord
from solana_holders.models.metadata import AccountMetadata, TransferActivity
from solana_holders.utils.error_handling import ErrorCode, ProviderError, transform_exceptions
from solana_holders.utils.validation import validate_public_key, validate_solana_address

# Get logger
logger = get_logger(__name__)

PROVIDER_NAME = "solscan"

_MISSING = object()


def _http_error_to_provider_error(e: Exception) -> ProviderError:
    status_code = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
    return ProviderError(
        f"Solscan request failed: {str(e) or type(e).__name__}",
        provider=PROVIDER_NAME,
        status_code=status_code,
        error_code=ErrorCode.NETWORK_ERROR
    )


class SolscanClient(MetadataProvider, TransferHistoryProvider):
    """Metadata and transfer history provider backed by Solscan."""

    def __init__(self, config: SolscanConfig, http_client: Optional[httpx.AsyncClient] = None):
        """Initialize the Solscan client.

        Args:
            config: Solscan API settings
            http_client: Optional pre-built HTTP client
        """
        self.config = config
        self._http_client = http_client
        self._metadata_cache: TTLCache = TTLCache(
            maxsize=config.metadata_cache_size,
            ttl=config.metadata_cache_ttl
        )
        if not config.has_api_key:
            logger.warning("SOLSCAN_API_KEY is not set; Solscan requests will likely be rejected")

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.api_key:
            headers["token"] = self.config.api_key
        return headers

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.timeout)
        return self._http_client

    @transform_exceptions({httpx.HTTPError: _http_error_to_provider_error})
    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        """GET a Solscan endpoint and return its ``data`` member.

        Raises:
            ProviderError: On HTTP errors, invalid JSON or ``success: false``
        """
        url = f"{self.config.base_url.rstrip('/')}{path}"
        response = await self._get_http_client().get(url, params=params, headers=self.headers)
        response.raise_for_status()

        try:
            body = response.json()
        except ValueError as e:
            raise ProviderError(
                "Solscan returned invalid JSON",
                provider=PROVIDER_NAME,
                status_code=response.status_code,
                error_code=ErrorCode.PARSING_ERROR,
                details={"path": path}
            ) from e

        if not isinstance(body, dict) or not body.get("success"):
            raise ProviderError(
                "Solscan request was not successful",
                provider=PROVIDER_NAME,
                status_code=response.status_code,
                details={"path": path}
            )

        return body.get("data")

    async def get_account_metadata(self, address: str) -> Optional[AccountMetadata]:
        """Get the label, tags and provenance of an address.

        Never raises: invalid addresses, provider failures and malformed
        payloads all yield None. Successful lookups, including empty ones,
        are cached for ``metadata_cache_ttl`` seconds.
        """
        cached = self._metadata_cache.get(address, _MISSING)
        if cached is not _MISSING:
            return cached

        if not validate_public_key(address):
            logger.debug(f"Skipping metadata lookup for invalid address {address}")
            return None

        try:
            data = await self._get("/account/metadata", {"address": address})
        except ProviderError as e:
            logger.warning(f"Metadata lookup failed for {address}: {e.message}")
            return None

        metadata = None
        if isinstance(data, dict) and data:
            try:
                metadata = AccountMetadata.from_payload(data)
            except PydanticValidationError as e:
                logger.debug(f"Discarding malformed metadata for {address}: {e.error_count()} error(s)")

        self._metadata_cache[address] = metadata
        return metadata

    async def get_transfer_history(
        self,
        address: str,
        token: Optional[str] = None,
        activity_types: Optional[Sequence[str]] = SPL_TRANSFER_ACTIVITY_TYPES,
        page: int = 1,
        page_size: int = 100,
        sort_order: str = "desc"
    ) -> List[TransferRecord]:
        """Get one page of transfers touching an owner.

        Args:
            address: Owner address (transfers are aggregated at owner level)
            token: Optional mint filter
            activity_types: Solscan activity types to include
            page: 1-based page number
            page_size: Records per page
            sort_order: "asc" or "desc" by block time

        Returns:
            Transfer records; malformed items are skipped

        Raises:
            InvalidPublicKeyError: If the address is not a valid public key
            ProviderError: On network errors or a non-success response
        """
        validate_solana_address(address)

        params: Dict[str, Any] = {
            "address": address,
            "exclude_amount_zero": "true",
            "sort_by": "block_time",
            "sort_order": sort_order,
            "page": page,
            "page_size": page_size,
        }
        if token:
            params["token"] = token
        if activity_types:
            params["activity_type[]"] = list(activity_types)

        data = await self._get("/account/transfer", params)
        if data is None:
            return []
        if not isinstance(data, list):
            raise ProviderError(
                "Unexpected transfer payload",
                provider=PROVIDER_NAME,
                error_code=ErrorCode.PARSING_ERROR,
                details={"address": address, "page": page}
            )

        transfers = []
        for item in data:
            try:
                activity = TransferActivity.model_validate(item)
            except PydanticValidationError:
                logger.debug(f"Skipping malformed transfer item for {address}")
                continue
            transfers.append(TransferRecord(
                flow=activity.flow,
                amount_raw=activity.amount,
                decimals=activity.token_decimals,
                block_time=activity.block_time,
            ))
        return transfers

    def clear_cache(self) -> None:
        """Drop all cached metadata."""
        self._metadata_cache.clear()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the client and release resources."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
