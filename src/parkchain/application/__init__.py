# src/parkchain/application/__init__.py
"""
Application Layer - Use Cases and Services

This package contains the gateway services that orchestrate domain logic.
Services receive their collaborators explicitly; see ``container``.
"""

from parkchain.application.achievements import ACHIEVEMENTS, Achievement, AchievementTracker
from parkchain.application.batch import BatchCoordinator, estimate_savings
from parkchain.application.container import GatewayServices, build_services
from parkchain.application.gateway import SimulatedGateway
from parkchain.application.routing import RoutingSelector
from parkchain.application.tier_engine import TierEngine
from parkchain.application.transaction_store import TransactionStore

__all__ = [
    "ACHIEVEMENTS",
    "Achievement",
    "AchievementTracker",
    "BatchCoordinator",
    "estimate_savings",
    "GatewayServices",
    "build_services",
    "SimulatedGateway",
    "RoutingSelector",
    "TierEngine",
    "TransactionStore",
]
