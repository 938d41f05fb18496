# src/parkchain/adapters/persistence/file_store.py
"""
File Store - Keyed JSON Document Persistence

This module persists each service's state as one JSON document per storage
key (e.g. ``parkchain_gateway_transactions``) inside the data directory.
Every write replaces the whole document atomically; reads of missing or
corrupt documents fall back to the caller's default.

Files that USE this module:
- parkchain.application.transaction_store (transactions and metrics)
- parkchain.application.tier_engine (persisted tier id)
- parkchain.application.routing (channel performance)
- parkchain.application.batch (batch history)
- parkchain.application.achievements (unlocked achievements)
- parkchain.application.container (builds the store from settings)

Files that this module USES:
- parkchain.domain.errors (StorageError)
"""
from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import threading
from pathlib import Path
from typing import Any

from parkchain.domain.errors import StorageError

log = logging.getLogger(__name__)

# Storage keys, one JSON document each
TRANSACTIONS_KEY = "parkchain_gateway_transactions"
METRICS_KEY = "parkchain_gateway_metrics"
USER_TIER_KEY = "parkchain_user_tier"
BATCH_HISTORY_KEY = "parkchain_batch_history"
CHANNEL_PERFORMANCE_KEY = "parkchain_channel_performance"
ACHIEVEMENTS_KEY = "parkchain_achievements"


class JsonFileStore:
    """Whole-document JSON storage keyed by name, single writer per process."""

    def __init__(self, data_dir: Path):
        """
        Initialize file store.

        Args:
            data_dir: Directory holding one ``<key>.json`` file per key
        """
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def load(self, key: str, default: Any = None) -> Any:
        """
        Load the document stored under ``key``.

        Handles corrupt files gracefully by backing them up to
        ``<key>.json.corrupt`` and returning the default.

        Args:
            key: Storage key
            default: Value returned when the document is missing or unreadable

        Returns:
            Decoded JSON value, or default
        """
        p = self.path_for(key)
        with self._lock:
            if not p.exists():
                return default

            try:
                with p.open("r", encoding="utf-8") as f:
                    return json.load(f)
            except json.JSONDecodeError as e:
                backup_path = p.with_suffix(".json.corrupt")
                try:
                    shutil.copy2(p, backup_path)
                    p.unlink()
                    log.warning("Document %s corrupted, backed up to %s: %s", key, backup_path, e)
                except OSError as backup_error:
                    log.error("Failed to back up corrupt document %s: %s", key, backup_error)
                return default
            except OSError as e:
                log.error("Failed to read document %s: %s", key, e)
                return default

    def save(self, key: str, value: Any) -> None:
        """
        Save ``value`` under ``key`` using an atomic write.

        Writes to a temporary file in the same directory, then renames it over
        the target so readers never observe a half-written document.

        Raises:
            StorageError: If the document cannot be serialized or written
        """
        p = self.path_for(key)
        with self._lock:
            temp_fd, temp_path = tempfile.mkstemp(
                suffix=".json.tmp",
                dir=str(self.data_dir),
                text=True,
            )
            try:
                with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
                    json.dump(value, f, ensure_ascii=False, indent=2)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(temp_path, str(p))
            except (OSError, TypeError, ValueError) as e:
                try:
                    os.unlink(temp_path)
                except OSError:
                    pass
                raise StorageError(f"Failed to save document {key}: {e}") from e

    def delete(self, key: str) -> None:
        """Remove the document stored under ``key`` if present."""
        with self._lock:
            try:
                self.path_for(key).unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                raise StorageError(f"Failed to delete document {key}: {e}") from e
