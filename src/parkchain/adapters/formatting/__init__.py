"""
Formatting Adapters - Message Formatting

This package contains message formatting adapters for Telegram output.
"""

from parkchain.adapters.formatting.formatter import (
    format_achievements,
    format_batch_stats,
    format_metrics,
    format_network,
    format_route,
    format_tier,
)

__all__ = [
    "format_achievements",
    "format_batch_stats",
    "format_metrics",
    "format_network",
    "format_route",
    "format_tier",
]
