# src/parkchain/adapters/telegram/handlers.py
"""
Telegram Handlers - Command Processing and User Interaction

This module contains the bot's command handlers. Each handler reads the
service container from ``context.bot_data["services"]``, calls one or two
services and replies with a formatted plain-text message. Precondition
errors raised by the services are shown to the user as-is.

Files that USE this module:
- parkchain.app (build_handlers registers the handlers)

Files that this module USES:
- parkchain.application.container (GatewayServices)
- parkchain.adapters.formatting.formatter (one formatter per command)
- parkchain.shared.validators (argument parsing)
"""
from __future__ import annotations

import logging
from typing import List

from telegram import Update
from telegram.ext import CommandHandler, ContextTypes

from parkchain.adapters.formatting.formatter import (
    format_achievements,
    format_batch_stats,
    format_metrics,
    format_network,
    format_route,
    format_tier,
)
from parkchain.application.container import GatewayServices
from parkchain.domain.errors import DomainError
from parkchain.shared.validators import (
    parse_network_condition,
    parse_routing_priority,
    validate_numeric_input,
)

logger = logging.getLogger(__name__)

SERVICES_KEY = "services"
MAX_DEMO_TRANSACTIONS = 200

WELCOME_TEXT = (
    "👋 Parkchain Gateway\n"
    "Simulated transaction delivery with tiers, smart routing and batching.\n\n"
    "/metrics - transaction metrics\n"
    "/tier - your tier and progress\n"
    "/route [conditions] [balanced|speed|cost] - routing decision\n"
    "/batches - batch statistics\n"
    "/achievements - unlocked achievements\n"
    "/network - network conditions\n"
    "/demo [count] - generate demo transactions\n"
    "/batch [count] - execute a demo batch"
)


def _services(context: ContextTypes.DEFAULT_TYPE) -> GatewayServices:
    return context.bot_data[SERVICES_KEY]


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(WELCOME_TEXT)


async def metrics_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    services = _services(context)
    await update.message.reply_text(format_metrics(services.transactions.get_metrics()))


async def tier_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /tier - recalculate the tier, then show benefits and progress.

    Any tier change is announced before the status message.
    """
    tiers = _services(context).tiers
    result = tiers.update_tier()
    if result.upgraded:
        await update.message.reply_text(result.message)

    text = format_tier(tiers.get_current_tier(), tiers.get_next_tier_progress(), tiers.get_priority_lane())
    await update.message.reply_text(text)


async def route_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /route [conditions] [prioritize]."""
    routing = _services(context).routing
    args = context.args or []

    conditions = None
    if args:
        conditions = parse_network_condition(args[0])
        if conditions is None:
            await update.message.reply_text("⚠️ Conditions must be one of: low, normal, high, critical")
            return
    prioritize = parse_routing_priority(args[1] if len(args) > 1 else None)

    selection = routing.select_route(conditions=conditions, prioritize=prioritize)
    await update.message.reply_text(format_route(selection))


async def batches_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    services = _services(context)
    tier = services.tiers.get_current_tier()

    efficiency = None
    if services.tiers.can_use_batch(2):
        efficiency = services.batches.calculate_batch_efficiency(tier.benefits.max_batch_size)

    await update.message.reply_text(format_batch_stats(services.batches.get_batch_stats(), efficiency))


async def achievements_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    tracker = _services(context).achievements
    recent = tracker.check_achievements()
    text = format_achievements(tracker.get_stats(), tracker.get_unlocked_achievements(), recent)
    await update.message.reply_text(text)


async def network_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    routing = _services(context).routing
    await update.message.reply_text(
        format_network(routing.get_network_conditions(), routing.get_routing_stats())
    )


async def demo_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /demo [count] - insert random demo transactions."""
    args = context.args or []
    count = 20
    if args:
        if not validate_numeric_input(args[0], min_val=1, max_val=MAX_DEMO_TRANSACTIONS):
            await update.message.reply_text(f"⚠️ Count must be a number between 1 and {MAX_DEMO_TRANSACTIONS}")
            return
        count = int(float(args[0]))

    services = _services(context)
    services.transactions.generate_demo_data(count)

    logger.info("Generated %d demo transactions for user %s", count, update.effective_user.id)
    await update.message.reply_text(
        f"✅ Generated {count} demo transactions.\n\n"
        + format_metrics(services.transactions.get_metrics())
    )


async def batch_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /batch [count] - build and execute a demo batch.

    The batch is non-atomic so one failed delivery does not stop the rest.
    Tier and batch precondition errors are replied to the user.
    """
    services = _services(context)
    args = context.args or []
    max_size = services.tiers.get_current_tier().benefits.max_batch_size

    count = min(3, max_size)
    if args:
        if not validate_numeric_input(args[0], min_val=1, max_val=max(max_size, 1)):
            await update.message.reply_text(f"⚠️ Count must be a number between 1 and {max_size}")
            return
        count = int(float(args[0]))

    try:
        batch = services.batches.create_batch(atomic=False, metadata={"source": "telegram"})
        for i in range(count):
            services.batches.add_to_batch(batch.id, {"amount": 100.0, "label": f"demo #{i + 1}"})
        execution = await services.batches.execute_batch(batch.id)
    except DomainError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return

    summary = execution.summary
    await update.message.reply_text(
        f"📦 Batch {execution.batch.status}: {summary['successful']}/{summary['total']} delivered "
        f"in {summary['execution_time']} ms\n"
        f"Estimated savings: {summary['estimated_savings']:.6f} SOL"
    )


def build_handlers() -> List[CommandHandler]:
    """Create the bot's command handlers."""
    return [
        CommandHandler("start", start),
        CommandHandler("metrics", metrics_cmd),
        CommandHandler("tier", tier_cmd),
        CommandHandler("route", route_cmd),
        CommandHandler("batches", batches_cmd),
        CommandHandler("achievements", achievements_cmd),
        CommandHandler("network", network_cmd),
        CommandHandler("demo", demo_cmd),
        CommandHandler("batch", batch_cmd),
    ]
