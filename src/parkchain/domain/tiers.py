# src/parkchain/domain/tiers.py
"""
User Tiers - Static Tier Catalogue

Four fixed tiers (Free, Basic, Premium, VIP) with their benefit constants
and qualification thresholds. A tier is reached when BOTH the successful
transaction count and the successful volume thresholds are met.

Files that USE this module:
- parkchain.application.tier_engine (tier calculation and fee discounts)
- parkchain.application.routing (tier level gates channel eligibility)
- parkchain.application.batch (max batch size)
- parkchain.adapters.formatting.formatter (tier summaries)

Files that this module USES:
- parkchain.domain.errors (UnknownTierError)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from parkchain.domain.errors import UnknownTierError


@dataclass(frozen=True)
class TierBenefits:
    priority_multiplier: float
    fee_discount: float
    max_batch_size: int
    dedicated_lane: bool
    confirmation_speed_boost: int
    analytics: str
    support: str


@dataclass(frozen=True)
class TierRequirements:
    min_transactions: int
    min_volume: float


@dataclass(frozen=True)
class TierDefinition:
    """
    A named bundle of benefits unlocked by cumulative activity.

    Attributes:
        id: Tier identifier (free, basic, premium, vip)
        name: Display name
        level: Ordinal level, 0 (Free) to 3 (VIP)
        benefits: Static benefit constants
        requirements: Qualification thresholds
    """
    id: str
    name: str
    level: int
    benefits: TierBenefits
    requirements: TierRequirements

    def qualifies(self, successful_count: int, successful_volume: float) -> bool:
        return (
            successful_count >= self.requirements.min_transactions
            and successful_volume >= self.requirements.min_volume
        )


FREE = TierDefinition(
    id="free",
    name="Free",
    level=0,
    benefits=TierBenefits(
        priority_multiplier=1,
        fee_discount=0,
        max_batch_size=1,
        dedicated_lane=False,
        confirmation_speed_boost=1,
        analytics="basic",
        support="community",
    ),
    requirements=TierRequirements(min_transactions=0, min_volume=0),
)

BASIC = TierDefinition(
    id="basic",
    name="Basic",
    level=1,
    benefits=TierBenefits(
        priority_multiplier=1.5,
        fee_discount=0.05,
        max_batch_size=5,
        dedicated_lane=False,
        confirmation_speed_boost=2,
        analytics="standard",
        support="email",
    ),
    requirements=TierRequirements(min_transactions=10, min_volume=1000),
)

PREMIUM = TierDefinition(
    id="premium",
    name="Premium",
    level=2,
    benefits=TierBenefits(
        priority_multiplier=3,
        fee_discount=0.20,
        max_batch_size=20,
        dedicated_lane=True,
        confirmation_speed_boost=5,
        analytics="advanced",
        support="priority",
    ),
    requirements=TierRequirements(min_transactions=50, min_volume=10000),
)

VIP = TierDefinition(
    id="vip",
    name="VIP",
    level=3,
    benefits=TierBenefits(
        priority_multiplier=5,
        fee_discount=0.50,
        max_batch_size=100,
        dedicated_lane=True,
        confirmation_speed_boost=10,
        analytics="enterprise",
        support="dedicated",
    ),
    requirements=TierRequirements(min_transactions=200, min_volume=100000),
)

# Ordered from lowest to highest level
USER_TIERS: Dict[str, TierDefinition] = {
    tier.id: tier for tier in (FREE, BASIC, PREMIUM, VIP)
}


def get_tier(tier_id: str) -> TierDefinition:
    """
    Look up a tier by id (case-insensitive).

    Raises:
        UnknownTierError: If no tier has that id
    """
    tier = USER_TIERS.get((tier_id or "").lower())
    if tier is None:
        raise UnknownTierError(f"Unknown tier: {tier_id!r}")
    return tier


def next_tier(tier: TierDefinition) -> Optional[TierDefinition]:
    """Tier one level above, or None at the top."""
    for candidate in USER_TIERS.values():
        if candidate.level == tier.level + 1:
            return candidate
    return None


def tiers_descending() -> List[TierDefinition]:
    return sorted(USER_TIERS.values(), key=lambda t: t.level, reverse=True)
