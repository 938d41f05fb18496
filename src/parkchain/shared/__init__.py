# src/parkchain/shared/__init__.py
"""
Shared Utilities - Cross-cutting Concerns

This package contains shared utilities used across all layers:
- Validation
- Identifier generation
- Logging configuration
"""

from parkchain.shared.ids import new_id
from parkchain.shared.logging_conf import setup_logging
from parkchain.shared.validators import (
    parse_network_condition,
    parse_routing_priority,
    validate_bot_token,
    validate_numeric_input,
    validate_rpc_url,
)

__all__ = [
    "new_id",
    "setup_logging",
    "parse_network_condition",
    "parse_routing_priority",
    "validate_bot_token",
    "validate_numeric_input",
    "validate_rpc_url",
]
