# src/parkchain/adapters/telegram/jobs.py
"""
Telegram Jobs - Scheduled Network Monitoring

Registers a repeating job on the bot's job queue that samples Solana
performance and updates the routing selector's network condition.

Files that USE this module:
- parkchain.app (start_network_monitor at startup)

Files that this module USES:
- parkchain.application.routing (monitor_network_conditions)
- parkchain.adapters.rpc.solana (SolanaRpcClient through the container)
"""
from __future__ import annotations

import asyncio
import logging
from datetime import timedelta

from telegram.ext import Application, ContextTypes

from parkchain.application.container import GatewayServices

logger = logging.getLogger(__name__)

NETWORK_MONITOR_JOB = "network_monitor"


async def network_monitor_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Sample network load and refresh the routing selector's condition."""
    services: GatewayServices = context.bot_data["services"]
    previous = services.routing.get_network_conditions()

    # requests is blocking; keep it off the event loop
    current = await asyncio.to_thread(services.routing.monitor_network_conditions, services.rpc_client)

    if current != previous:
        logger.info("Network conditions changed: %s -> %s", previous, current)


def start_network_monitor(application: Application, interval_seconds: int) -> None:
    """
    Schedule the network monitor, replacing any existing monitor job.

    Args:
        application: Bot application whose job queue runs the monitor
        interval_seconds: Seconds between samples
    """
    stop_network_monitor(application)
    application.job_queue.run_repeating(
        callback=network_monitor_job,
        interval=timedelta(seconds=interval_seconds),
        first=0,  # sample immediately at boot
        name=NETWORK_MONITOR_JOB,
    )
    logger.info("Network monitor scheduled every %d seconds", interval_seconds)


def stop_network_monitor(application: Application) -> int:
    """Remove every scheduled monitor job; returns how many were removed."""
    jobs = application.job_queue.get_jobs_by_name(NETWORK_MONITOR_JOB)
    for job in jobs:
        job.schedule_removal()
    if jobs:
        logger.info("Network monitor stopped")
    return len(jobs)
