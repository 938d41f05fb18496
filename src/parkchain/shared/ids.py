# src/parkchain/shared/ids.py
"""
Identifier helpers shared by the transaction log and batch coordinator.
"""
import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits


def new_id(prefix: str) -> str:
    """Return ``<prefix>_<epoch millis>_<9 random base36 chars>``."""
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(9))
    return f"{prefix}_{int(time.time() * 1000)}_{suffix}"
