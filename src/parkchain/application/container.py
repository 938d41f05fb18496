# src/parkchain/application/container.py
"""
Service Container - Explicit Wiring of the Gateway Services

Builds every service once, in dependency order, around a single file
store. The bot keeps the result in ``bot_data`` and tests build their own
against a temporary data directory.

Files that USE this module:
- parkchain.app (composition root)
- parkchain.adapters.telegram.handlers (reads services from bot_data)
- tests.conftest (fixtures)
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from parkchain.adapters.persistence.file_store import JsonFileStore
from parkchain.adapters.rpc.solana import SolanaRpcClient
from parkchain.application.achievements import AchievementTracker
from parkchain.application.batch import BatchCoordinator
from parkchain.application.gateway import SimulatedGateway
from parkchain.application.routing import RoutingSelector
from parkchain.application.tier_engine import TierEngine
from parkchain.application.transaction_store import TransactionStore
from parkchain.config import Settings


@dataclass
class GatewayServices:
    settings: Settings
    store: JsonFileStore
    transactions: TransactionStore
    tiers: TierEngine
    routing: RoutingSelector
    gateway: SimulatedGateway
    batches: BatchCoordinator
    achievements: AchievementTracker
    rpc_client: SolanaRpcClient


def build_services(settings: Optional[Settings] = None, rng: Optional[random.Random] = None) -> GatewayServices:
    """
    Wire all services against ``settings.data_dir``.

    Args:
        settings: Settings to use (defaults to the global settings)
        rng: Random source for simulated deliveries
    """
    if settings is None:
        from parkchain.config import settings as global_settings
        settings = global_settings

    store = JsonFileStore(settings.data_dir)
    transactions = TransactionStore(store, settings)
    tiers = TierEngine(store, transactions)
    routing = RoutingSelector(store, tiers, settings)
    gateway = SimulatedGateway(routing, tiers, settings, rng=rng)
    batches = BatchCoordinator(store, tiers, transactions, gateway, settings)
    achievements = AchievementTracker(store, transactions, tiers, batches)
    rpc_client = SolanaRpcClient(settings.solana_rpc_url, settings.http_timeout_seconds)

    return GatewayServices(
        settings=settings,
        store=store,
        transactions=transactions,
        tiers=tiers,
        routing=routing,
        gateway=gateway,
        batches=batches,
        achievements=achievements,
        rpc_client=rpc_client,
    )
