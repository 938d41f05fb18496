# src/parkchain/shared/validators.py
"""
Input Validation Utilities - Configuration and Command Argument Checks

This module validates bot tokens and RPC endpoints used in settings, and
parses the free-text arguments users pass to bot commands (network
conditions, routing priorities, numeric values).

Files that USE this module:
- parkchain.config.settings (uses validation functions in Settings field validators)
- parkchain.adapters.telegram.handlers (parses /route and /tier arguments)

Files that this module USES:
- parkchain.domain.channels (known network conditions and priorities)
"""
import math
import re
from typing import Optional
from urllib.parse import urlparse

from parkchain.domain.channels import NETWORK_CONDITIONS, ROUTING_PRIORITIES


def validate_bot_token(token: str) -> bool:
    """
    Validate Telegram bot token format.

    Args:
        token: Bot token to validate

    Returns:
        True if valid, False otherwise
    """
    if not token:
        return False

    # 123456789:ABCDEFghijklmnopQRSTUVwxyz...
    pattern = r'^\d{8,10}:[A-Za-z0-9_-]{35}$'
    return bool(re.match(pattern, token))


def validate_rpc_url(url: str) -> bool:
    """
    Validate a JSON-RPC endpoint URL (http or https with a host).

    Args:
        url: Endpoint URL to validate

    Returns:
        True if valid, False otherwise
    """
    if not url:
        return False

    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def parse_network_condition(value: Optional[str]) -> Optional[str]:
    """
    Normalize a user-supplied network condition.

    Returns:
        One of low/normal/high/critical, or None if the value is not recognised
    """
    if not value:
        return None
    cleaned = value.strip().lower()
    return cleaned if cleaned in NETWORK_CONDITIONS else None


def parse_routing_priority(value: Optional[str]) -> str:
    """Normalize a routing priority, falling back to 'balanced'."""
    if not value:
        return "balanced"
    cleaned = value.strip().lower()
    return cleaned if cleaned in ROUTING_PRIORITIES else "balanced"


def validate_numeric_input(value: str, min_val: Optional[float] = None,
                           max_val: Optional[float] = None) -> bool:
    """
    Validate numeric input string.

    Args:
        value: String value to validate
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        True if valid, False otherwise
    """
    if not value:
        return False

    try:
        num_val = float(value)
    except ValueError:
        return False
    if not math.isfinite(num_val):
        return False
    if min_val is not None and num_val < min_val:
        return False
    if max_val is not None and num_val > max_val:
        return False
    return True
