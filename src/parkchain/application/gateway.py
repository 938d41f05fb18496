# src/parkchain/application/gateway.py
"""
Simulated Gateway - Synthetic Transaction Delivery

Delivers one transaction payload through the channel picked by the routing
selector. Nothing touches a real network: success is drawn against the
channel's tracked success rate and the confirmation time is a jittered copy
of its average. Every outcome is fed back into the routing selector.

Files that USE this module:
- parkchain.application.batch (delivers each batch item)
- parkchain.application.container (composition)

Files that this module USES:
- parkchain.application.routing (route selection and result recording)
- parkchain.application.tier_engine (discounted gateway fee)
"""
from __future__ import annotations

import asyncio
import logging
import random
import secrets
from typing import Any, Callable, Dict, Optional

from parkchain.application.routing import RoutingSelector
from parkchain.application.tier_engine import TierEngine
from parkchain.config import Settings
from parkchain.domain.errors import DeliveryError
from parkchain.domain.models import DeliveryResult

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Dict[str, Any]], None]

DELIVERY_STAGES = (
    ("optimize", "Optimizing transaction with Gateway..."),
    ("send", "Sending via {channel}..."),
    ("confirm", "Waiting for confirmation..."),
)


class SimulatedGateway:
    """Routes and 'delivers' transactions with a configurable per-stage delay."""

    def __init__(
        self,
        routing: RoutingSelector,
        tiers: TierEngine,
        settings: Settings,
        rng: Optional[random.Random] = None,
    ):
        self._routing = routing
        self._tiers = tiers
        self._base_fee = settings.gateway_fee
        self._delay = settings.simulated_delivery_delay_seconds
        self._rng = rng or random.Random()

    async def execute_transaction(
        self,
        payload: Dict[str, Any],
        on_progress: Optional[ProgressCallback] = None,
    ) -> DeliveryResult:
        """
        Deliver one payload.

        Args:
            payload: Transaction payload; an optional "prioritize" key is
                passed to route selection
            on_progress: Called with {"stage", "message"} for each stage

        Returns:
            DeliveryResult with signature, channel, confirmation time and fee

        Raises:
            DeliveryError: If the simulated delivery fails
        """
        route = self._routing.select_route(prioritize=payload.get("prioritize", "balanced"))
        channel = route.primary.channel

        for stage, message in DELIVERY_STAGES:
            if on_progress:
                on_progress({"stage": stage, "message": message.format(channel=route.primary.info.name)})
            await asyncio.sleep(self._delay)

        perf = self._routing.get_channel_performance()[channel]
        if self._rng.random() >= perf.success_rate:
            self._routing.record_routing_result(channel, False)
            logger.warning("Simulated delivery via %s failed", channel)
            raise DeliveryError(f"Delivery via {route.primary.info.name} failed", channel=channel)

        confirmation_time = round(perf.avg_confirm_time * (0.8 + 0.4 * self._rng.random()))
        signature = f"sim_{secrets.token_hex(32)}"
        self._routing.record_routing_result(channel, True, confirmation_time, signature)

        return DeliveryResult(
            signature=signature,
            channel=channel,
            confirmation_time=confirmation_time,
            gateway_fee=self._tiers.calculate_gateway_fee(self._base_fee),
        )
