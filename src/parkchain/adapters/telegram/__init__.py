"""
Telegram Adapters - Bot Interface

This package contains Telegram bot adapters:
- Bot application builder
- Command handlers
- Scheduled jobs
"""

from parkchain.adapters.telegram.bot import build_application
from parkchain.adapters.telegram.handlers import build_handlers
from parkchain.adapters.telegram.jobs import (
    network_monitor_job,
    start_network_monitor,
    stop_network_monitor,
)

__all__ = [
    "build_application",
    "build_handlers",
    "network_monitor_job",
    "start_network_monitor",
    "stop_network_monitor",
]
