"""Unit tests for error types, exception mapping and key validation."""

import httpx
import pytest

from solana_holders.utils.error_handling import (
    ChainQueryError,
    ErrorCode,
    HolderAnalysisError,
    NoHoldersError,
    ProviderError,
    ValidationError,
    transform_exceptions,
)
from solana_holders.utils.validation import InvalidPublicKeyError, validate_public_key, validate_solana_address
from tests.fixtures.common import MINT, SYSTEM_PROGRAM, WSOL_MINT


def test_error_message_format():
    error = ProviderError("request failed", provider="solscan", status_code=502)

    assert str(error) == "[PROVIDER_ERROR] request failed - Details: {'provider': 'solscan', 'status_code': 502}"
    assert isinstance(error, HolderAnalysisError)


def test_chain_query_error_is_a_provider_error():
    error = ChainQueryError("boom", rpc_error_code=-32005)

    assert isinstance(error, ProviderError)
    assert error.provider == "solana-rpc"
    assert error.error_code is ErrorCode.RPC_ERROR
    assert error.details["rpc_error_code"] == -32005


def test_no_holders_error():
    error = NoHoldersError(MINT)

    assert error.error_code is ErrorCode.NO_HOLDERS_ERROR
    assert MINT in error.message


def to_provider_error(e):
    return ProviderError(str(e), provider="test")


@pytest.mark.asyncio
async def test_transform_exceptions_maps_async_errors():
    @transform_exceptions({httpx.HTTPError: to_provider_error})
    async def fetch():
        raise httpx.ConnectError("connection refused")

    with pytest.raises(ProviderError) as exc_info:
        await fetch()

    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_transform_exceptions_passes_package_errors_through():
    @transform_exceptions({Exception: to_provider_error})
    def validate():
        raise ValidationError("bad input")

    with pytest.raises(ValidationError):
        validate()


def test_transform_exceptions_leaves_unmapped_errors():
    @transform_exceptions({httpx.HTTPError: to_provider_error})
    def compute():
        raise KeyError("missing")

    with pytest.raises(KeyError):
        compute()


@pytest.mark.parametrize("key,expected", [
    (MINT, True),
    (WSOL_MINT, True),
    (SYSTEM_PROGRAM, True),
    ("1111", False),
    ("0OIl" * 10, False),
    ("", False),
    (None, False),
    # Valid alphabet and length but decodes to more than 32 bytes
    ("z" * 44, False),
])
def test_validate_public_key(key, expected):
    assert validate_public_key(key) is expected


def test_validate_solana_address_raises():
    assert validate_solana_address(MINT) == MINT
    with pytest.raises(InvalidPublicKeyError):
        validate_solana_address("not-a-key")
