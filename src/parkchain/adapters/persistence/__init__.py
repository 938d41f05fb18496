"""
Persistence Adapters - Data Storage

This package contains adapters for persisting service state:
- File-based keyed JSON documents
"""

from parkchain.adapters.persistence.file_store import (
    ACHIEVEMENTS_KEY,
    BATCH_HISTORY_KEY,
    CHANNEL_PERFORMANCE_KEY,
    METRICS_KEY,
    TRANSACTIONS_KEY,
    USER_TIER_KEY,
    JsonFileStore,
)

__all__ = [
    "JsonFileStore",
    "TRANSACTIONS_KEY",
    "METRICS_KEY",
    "USER_TIER_KEY",
    "BATCH_HISTORY_KEY",
    "CHANNEL_PERFORMANCE_KEY",
    "ACHIEVEMENTS_KEY",
]
