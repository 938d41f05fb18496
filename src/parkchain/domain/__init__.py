"""
Domain Layer - Pure Business Objects

This package contains domain models, static catalogues and business rules.
No dependencies on infrastructure or external systems.
"""

from parkchain.domain.models import (
    Batch,
    BatchExecution,
    BatchItem,
    BatchItemResult,
    BatchStatus,
    ChannelPerformance,
    DeliveryResult,
    Metrics,
    RouteScore,
    RouteSelection,
    RoutingRecord,
    TierProgress,
    TierUpdate,
    TransactionRecord,
)
from parkchain.domain.errors import (
    BatchError,
    BatchExecutionError,
    BatchFullError,
    BatchItemNotFoundError,
    BatchNotFoundError,
    BatchStateError,
    BatchingNotSupportedError,
    DeliveryError,
    DomainError,
    EmptyBatchError,
    StorageError,
    UnknownTierError,
)
from parkchain.domain.tiers import USER_TIERS, TierDefinition, get_tier
from parkchain.domain.channels import NETWORK_CONDITIONS, ROUTING_CHANNELS

__all__ = [
    "Batch",
    "BatchExecution",
    "BatchItem",
    "BatchItemResult",
    "BatchStatus",
    "ChannelPerformance",
    "DeliveryResult",
    "Metrics",
    "RouteScore",
    "RouteSelection",
    "RoutingRecord",
    "TierProgress",
    "TierUpdate",
    "TransactionRecord",
    "DomainError",
    "BatchError",
    "BatchExecutionError",
    "BatchFullError",
    "BatchItemNotFoundError",
    "BatchNotFoundError",
    "BatchStateError",
    "BatchingNotSupportedError",
    "DeliveryError",
    "EmptyBatchError",
    "StorageError",
    "UnknownTierError",
    "USER_TIERS",
    "TierDefinition",
    "get_tier",
    "NETWORK_CONDITIONS",
    "ROUTING_CHANNELS",
]
