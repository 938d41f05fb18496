# src/parkchain/adapters/telegram/bot.py
"""
Telegram Bot - Application Builder

Builds the bot application and attaches the service container and the
command handlers to it.
"""

from __future__ import annotations

from telegram.ext import Application

from parkchain.adapters.telegram.handlers import SERVICES_KEY, build_handlers
from parkchain.application.container import GatewayServices


def build_application(bot_token: str, services: GatewayServices) -> Application:
    """
    Build the Telegram bot application.

    Args:
        bot_token: Telegram bot token
        services: Service container exposed to handlers and jobs via bot_data

    Returns:
        Configured Application instance
    """
    app = Application.builder().token(bot_token).build()
    app.bot_data[SERVICES_KEY] = services
    for handler in build_handlers():
        app.add_handler(handler)
    return app
