"""Provider clients for chain data, account metadata and transfer history."""

from solana_holders.clients.base import ChainProvider, MetadataProvider, TransferHistoryProvider
from solana_holders.clients.rpc_client import SolanaRpcClient
from solana_holders.clients.solscan_client import SolscanClient

__all__ = [
    "ChainProvider",
    "MetadataProvider",
    "SolanaRpcClient",
    "SolscanClient",
    "TransferHistoryProvider",
]
