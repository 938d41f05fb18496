# src/parkchain/domain/channels.py
"""
Routing Channels - Static Delivery Channel Catalogue

Defines the fixed set of synthetic delivery channels a transaction can be
routed through, the network condition levels, and the default performance
figures each channel starts from before any results are recorded.

Files that USE this module:
- parkchain.application.routing (scores channels for route selection)
- parkchain.application.tier_engine (condition multipliers for priority fees)
- parkchain.shared.validators (parses condition/priority arguments)

Files that this module USES:
- None (pure domain constants)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

LOW = "low"
NORMAL = "normal"
HIGH = "high"
CRITICAL = "critical"

NETWORK_CONDITIONS: Tuple[str, ...] = (LOW, NORMAL, HIGH, CRITICAL)

# Multipliers applied to a base priority fee per network condition
CONDITION_FEE_MULTIPLIERS: Dict[str, float] = {
    LOW: 0.5,
    NORMAL: 1.0,
    HIGH: 2.0,
    CRITICAL: 5.0,
}

ROUTING_PRIORITIES: Tuple[str, ...] = ("balanced", "speed", "cost")

# Score bonus per channel speed class when routing prioritizes speed
SPEED_BONUS: Dict[str, int] = {
    "very-fast": 30,
    "optimized": 25,
    "fast": 20,
    "medium": 10,
}


@dataclass(frozen=True)
class ChannelInfo:
    """
    Static description of a delivery channel.

    Attributes:
        id: Channel identifier (rpc, jito, triton, gateway)
        name: Display name
        base_cost: Base cost per transaction in SOL
        speed: Speed class (medium, fast, very-fast, optimized)
        reliability: Static reliability constant in [0, 1]
        best_for: Network conditions this channel is suited to
    """
    id: str
    name: str
    base_cost: float
    speed: str
    reliability: float
    best_for: Tuple[str, ...]

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "base_cost": self.base_cost,
            "speed": self.speed,
            "reliability": self.reliability,
            "best_for": list(self.best_for),
        }


ROUTING_CHANNELS: Dict[str, ChannelInfo] = {
    "rpc": ChannelInfo(
        id="rpc",
        name="Standard RPC",
        base_cost=0.000005,
        speed="medium",
        reliability=0.95,
        best_for=(LOW, NORMAL),
    ),
    "jito": ChannelInfo(
        id="jito",
        name="Jito Bundles",
        base_cost=0.0001,  # tip required
        speed="fast",
        reliability=0.97,
        best_for=(HIGH, CRITICAL),
    ),
    "triton": ChannelInfo(
        id="triton",
        name="Triton Priority",
        base_cost=0.00005,
        speed="very-fast",
        reliability=0.98,
        best_for=(HIGH, CRITICAL),
    ),
    "gateway": ChannelInfo(
        id="gateway",
        name="Gateway Optimized",
        base_cost=0.0001,
        speed="optimized",
        reliability=0.99,
        best_for=(NORMAL, HIGH, CRITICAL),
    ),
}

# Channels that get a bonus for Premium and above
PREMIUM_CHANNELS: Tuple[str, ...] = ("triton", "gateway")

# (success_rate, avg_confirm_time_ms) before any recorded result
DEFAULT_CHANNEL_PERFORMANCE: Dict[str, Tuple[float, float]] = {
    "rpc": (0.95, 8000.0),
    "jito": (0.97, 4000.0),
    "triton": (0.98, 2000.0),
    "gateway": (0.99, 3000.0),
}

# Average transactions per performance sample -> condition
CONGESTION_THRESHOLDS: Tuple[Tuple[float, str], ...] = (
    (1000, LOW),
    (2000, NORMAL),
    (3000, HIGH),
)


def condition_for_load(avg_tx_per_sample: float) -> str:
    """Bucket an average transaction count into a network condition."""
    for limit, condition in CONGESTION_THRESHOLDS:
        if avg_tx_per_sample < limit:
            return condition
    return CRITICAL
