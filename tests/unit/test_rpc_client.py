"""Unit tests for the Solana JSON-RPC client."""

import json

import httpx
import pytest

from solana_holders.clients.rpc_client import SolanaRpcClient
from solana_holders.config import SolanaConfig
from solana_holders.constants import TOKEN_2022_PROGRAM_ID, TOKEN_PROGRAM_ID
from solana_holders.utils.error_handling import ChainQueryError, ErrorCode
from solana_holders.utils.validation import InvalidPublicKeyError
from tests.fixtures.common import MINT, USDC_MINT, USDT_MINT

RPC_URL = "https://rpc.example.com"


class FakeNode:
    """Answers JSON-RPC requests from a method -> result table and records them."""

    def __init__(self, results=None, status_code=200, errors=None):
        self.results = results or {}
        self.errors = errors or {}
        self.status_code = status_code
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.requests.append(payload)
        method = payload["method"]
        if self.status_code != 200:
            return httpx.Response(self.status_code, text="upstream unavailable")
        if method in self.errors:
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "error": self.errors[method]})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": payload["id"], "result": self.results.get(method)})


def make_client(node: FakeNode, **config) -> SolanaRpcClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(node))
    return SolanaRpcClient(SolanaConfig(rpc_url=RPC_URL, **config), http_client=http_client)


def envelope(value):
    return {"context": {"slot": 280000000}, "value": value}


def mint_account(supply="1000000000", decimals=6):
    return {
        "data": {
            "program": "spl-token",
            "parsed": {"type": "mint", "info": {"supply": supply, "decimals": decimals, "mintAuthority": None,
                                                "freezeAuthority": None, "isInitialized": True}},
            "space": 82,
        },
        "owner": TOKEN_PROGRAM_ID,
        "lamports": 1461600,
    }


def token_account(owner, amount="250", state="initialized", mint=MINT):
    return {
        "data": {
            "program": "spl-token",
            "parsed": {"type": "account", "info": {"mint": mint, "owner": owner, "state": state,
                                                   "tokenAmount": {"amount": amount, "decimals": 6}}},
            "space": 165,
        },
        "owner": TOKEN_PROGRAM_ID,
    }


@pytest.mark.asyncio
async def test_get_mint_info():
    node = FakeNode({"getAccountInfo": envelope(mint_account())})

    async with make_client(node) as client:
        mint = await client.get_mint_info(MINT)

    assert mint.address == MINT
    assert mint.supply_raw == 1_000_000_000
    assert mint.decimals == 6
    assert mint.supply == 1000.0
    assert node.requests[0]["params"] == [MINT, {"encoding": "jsonParsed", "commitment": "confirmed"}]


@pytest.mark.asyncio
async def test_missing_mint_is_an_error():
    node = FakeNode({"getAccountInfo": envelope(None)})

    async with make_client(node) as client:
        with pytest.raises(ChainQueryError) as exc_info:
            await client.get_mint_info(MINT)

    assert exc_info.value.error_code is ErrorCode.ACCOUNT_NOT_FOUND_ERROR


@pytest.mark.asyncio
async def test_non_mint_account_is_an_error():
    node = FakeNode({"getAccountInfo": envelope(token_account(USDC_MINT))})

    async with make_client(node) as client:
        with pytest.raises(ChainQueryError) as exc_info:
            await client.get_mint_info(MINT)

    assert exc_info.value.error_code is ErrorCode.PARSING_ERROR


@pytest.mark.asyncio
async def test_invalid_mint_is_rejected_before_any_request():
    node = FakeNode()

    async with make_client(node) as client:
        with pytest.raises(InvalidPublicKeyError):
            await client.get_mint_info("not-a-key")

    assert node.requests == []


@pytest.mark.asyncio
async def test_rpc_error_carries_code():
    node = FakeNode(errors={"getAccountInfo": {"code": -32602, "message": "Invalid param"}})

    async with make_client(node) as client:
        with pytest.raises(ChainQueryError) as exc_info:
            await client.get_mint_info(MINT)

    assert exc_info.value.rpc_error_code == -32602
    assert "Invalid param" in exc_info.value.message


@pytest.mark.asyncio
async def test_http_failure_is_network_error():
    node = FakeNode(status_code=503)

    async with make_client(node) as client:
        with pytest.raises(ChainQueryError) as exc_info:
            await client.get_mint_info(MINT)

    assert exc_info.value.error_code is ErrorCode.NETWORK_ERROR
    assert len(node.requests) == 1


@pytest.mark.asyncio
async def test_get_largest_token_accounts_skips_malformed_entries():
    node = FakeNode({"getTokenLargestAccounts": envelope([
        {"address": "ata-1", "amount": "900", "decimals": 6, "uiAmount": 0.0009},
        {"address": "ata-2", "amount": "not-a-number", "decimals": 6},
        {"amount": "5", "decimals": 6},
        {"address": "ata-3", "amount": "0", "decimals": 6},
    ])})

    async with make_client(node) as client:
        accounts = await client.get_largest_token_accounts(MINT)

    assert [(a.token_account, a.amount_raw) for a in accounts] == [("ata-1", 900), ("ata-3", 0)]


@pytest.mark.asyncio
async def test_owner_of_token_account():
    node = FakeNode({"getAccountInfo": envelope(token_account(USDT_MINT))})

    async with make_client(node) as client:
        assert await client.get_owner_of_token_account("ata-1") == USDT_MINT


@pytest.mark.parametrize("value", [None, mint_account()])
@pytest.mark.asyncio
async def test_owner_falls_back_to_input(value):
    node = FakeNode({"getAccountInfo": envelope(value)})

    async with make_client(node) as client:
        assert await client.get_owner_of_token_account(USDC_MINT) == USDC_MINT


@pytest.mark.asyncio
async def test_owner_falls_back_on_rpc_failure():
    node = FakeNode(status_code=500)

    async with make_client(node) as client:
        assert await client.get_owner_of_token_account(USDC_MINT) == USDC_MINT


@pytest.mark.asyncio
async def test_get_program_token_accounts():
    entries = [
        {"pubkey": "ata-1", "account": token_account("owner-1", amount="700")},
        {"pubkey": "ata-2", "account": token_account("owner-2", amount="300", state="frozen")},
        {"pubkey": "ata-3", "account": {"data": ["AAAA", "base64"]}},
    ]
    node = FakeNode({"getProgramAccounts": entries})

    async with make_client(node) as client:
        accounts = await client.get_program_token_accounts(TOKEN_PROGRAM_ID, MINT, data_size=165)

    assert [(a.address, a.owner, a.amount_raw, a.is_frozen) for a in accounts] == [
        ("ata-1", "owner-1", 700, False),
        ("ata-2", "owner-2", 300, True),
    ]
    program_id, options = node.requests[0]["params"]
    assert program_id == TOKEN_PROGRAM_ID
    assert options["encoding"] == "jsonParsed"
    assert options["filters"] == [{"dataSize": 165}, {"memcmp": {"offset": 0, "bytes": MINT}}]


@pytest.mark.asyncio
async def test_token_2022_enumeration_has_no_size_filter():
    node = FakeNode({"getProgramAccounts": []})

    async with make_client(node) as client:
        assert await client.get_program_token_accounts(TOKEN_2022_PROGRAM_ID, MINT) == []

    _, options = node.requests[0]["params"]
    assert options["filters"] == [{"memcmp": {"offset": 0, "bytes": MINT}}]
