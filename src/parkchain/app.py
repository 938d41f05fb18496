# src/parkchain/app.py
"""
Application Entry Point - Bot Initialization and Startup

Composition root for the Parkchain Gateway bot: configures logging, builds
the service container, registers the command handlers and the network
monitor job, then starts polling.

Files that USE this module:
- parkchain-bot console script (pyproject.toml)
- python -m parkchain.app

Files that this module USES:
- parkchain.shared.logging_conf (setup_logging)
- parkchain.config (settings)
- parkchain.application.container (build_services)
- parkchain.adapters.telegram (build_application, start_network_monitor)
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
from pathlib import Path

from telegram.error import Conflict, NetworkError, TimedOut

from parkchain.adapters.telegram import build_application, start_network_monitor
from parkchain.application.container import build_services
from parkchain.shared.logging_conf import setup_logging


def _get_pid_file(data_dir: Path) -> Path:
    """PID file from PARKCHAIN_PID_FILE, or ``bot.pid`` in the data directory."""
    pid_file = os.environ.get("PARKCHAIN_PID_FILE")
    return Path(pid_file) if pid_file else data_dir / "bot.pid"


def _acquire_instance_lock(pid_file: Path) -> None:
    """
    Write our PID, refusing to start if another live instance holds the file.

    Raises:
        RuntimeError: If the PID in the file belongs to a running process
    """
    if pid_file.exists():
        try:
            old_pid = int(pid_file.read_text().strip())
        except (OSError, ValueError):
            old_pid = None

        if old_pid is not None:
            try:
                os.kill(old_pid, 0)  # signal 0 only checks existence
            except ProcessLookupError:
                pass
            except PermissionError:
                raise RuntimeError(f"Another bot instance is already running (PID: {old_pid})")
            else:
                raise RuntimeError(
                    f"Another bot instance is already running (PID: {old_pid}).\n"
                    f"Stop it first with: kill {old_pid}"
                )

    pid_file.parent.mkdir(parents=True, exist_ok=True)
    pid_file.write_text(str(os.getpid()))


def _release_instance_lock(pid_file: Path) -> None:
    try:
        pid_file.unlink()
    except FileNotFoundError:
        pass


def main() -> None:
    """
    Initialize and start the Telegram bot.

    1. Set up logging from settings
    2. Acquire the single-instance lock
    3. Build services and the bot application
    4. Schedule the network monitor
    5. Poll until stopped
    """
    from parkchain.config import settings

    setup_logging(
        level=logging.INFO,
        log_file=settings.log_file,
        log_dir=settings.log_dir,
        log_to_stdout=settings.log_stdout,
        max_bytes=settings.log_max_bytes,
        backup_count=settings.log_backup_count,
    )
    logger = logging.getLogger(__name__)

    if not settings.bot_token:
        raise RuntimeError("BOT_TOKEN missing")

    pid_file = _get_pid_file(settings.data_dir)
    try:
        _acquire_instance_lock(pid_file)
    except RuntimeError as e:
        logger.error(str(e))
        sys.exit(1)
    atexit.register(_release_instance_lock, pid_file)
    logger.info("Bot instance lock acquired (PID: %d, file: %s)", os.getpid(), pid_file)

    services = build_services(settings)
    reconciled = services.transactions.reconcile_metrics()
    if reconciled:
        logger.warning("Metrics were rebuilt from the transaction log at startup")

    app = build_application(settings.bot_token, services)
    start_network_monitor(app, settings.network_monitor_interval_seconds)

    logger.info(
        "Starting bot polling… data_dir=%s, rpc=%s, monitor every %ds",
        settings.data_dir,
        settings.solana_rpc_url,
        settings.network_monitor_interval_seconds,
    )

    try:
        app.run_polling(drop_pending_updates=False)
    except Conflict as e:
        logger.error("Telegram Conflict error: %s. Another instance is polling with this token.", e)
        raise
    except (TimedOut, NetworkError) as e:
        logger.error("Network error talking to Telegram: %s (type: %s)", e, type(e).__name__, exc_info=True)
        raise
    except KeyboardInterrupt:
        logger.info("Bot stopped by user (KeyboardInterrupt)")
        raise


if __name__ == "__main__":
    main()
