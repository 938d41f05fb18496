# src/parkchain/adapters/__init__.py
"""
Adapters Layer - External Interfaces

This package contains all adapters for external systems:
- Persistence (JSON documents)
- RPC (Solana performance samples)
- Telegram (bot interface)
- Formatting (output)
"""

__all__ = []
