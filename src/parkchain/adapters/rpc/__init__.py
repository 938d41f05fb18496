"""
RPC Adapters - Blockchain Node Clients

This package contains clients for external JSON-RPC endpoints:
- Solana (recent performance samples for network monitoring)
"""

from parkchain.adapters.rpc.solana import SolanaRpcClient

__all__ = ["SolanaRpcClient"]
