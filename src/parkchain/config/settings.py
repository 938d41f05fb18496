# src/parkchain/config/settings.py
"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Values come from environment variables or a local .env file.

Files that USE this module:
- parkchain.app (loads settings for bot and logging configuration)
- parkchain.application.* (services read fee constants, limits and paths)
- parkchain.adapters.rpc.solana (RPC endpoint and HTTP timeout)
- parkchain.adapters.telegram.jobs (network monitor interval)

Files that this module USES:
- parkchain.shared.validators (validation functions for settings)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from pathlib import Path  # Object-oriented filesystem paths
from typing import Optional  # Type hints for optional values

from pydantic import Field, field_validator  # Data validation and field configuration
from pydantic_settings import BaseSettings, SettingsConfigDict  # Settings management with Pydantic

from parkchain.shared.validators import (
    validate_bot_token,  # Validate Telegram bot token format
    validate_rpc_url,  # Validate JSON-RPC endpoint URL
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Telegram ---
    # Empty for library use; the bot entry point refuses to start without it
    bot_token: str = Field(default="", alias="BOT_TOKEN")

    # --- Persistence ---
    data_dir: Path = Field(default=Path("./data"), alias="DATA_DIR")

    # --- Fees (in SOL) ---
    gateway_fee: float = Field(default=0.0001, alias="GATEWAY_FEE", gt=0.0)
    batch_overhead_fee: float = Field(default=0.00001, alias="BATCH_OVERHEAD_FEE", ge=0.0)

    # --- Routing ---
    ema_alpha: float = Field(default=0.1, alias="EMA_ALPHA", gt=0.0, le=1.0)
    routing_history_limit: int = Field(default=100, alias="ROUTING_HISTORY_LIMIT", ge=1, le=10000)

    # --- Batching ---
    batch_history_limit: int = Field(default=50, alias="BATCH_HISTORY_LIMIT", ge=1, le=1000)
    simulated_delivery_delay_seconds: float = Field(
        default=0.5, alias="SIMULATED_DELIVERY_DELAY_SECONDS", ge=0.0, le=30.0
    )

    # --- Network monitoring ---
    solana_rpc_url: str = Field(default="https://api.devnet.solana.com", alias="SOLANA_RPC_URL")
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)
    network_monitor_interval_seconds: int = Field(
        default=30, alias="NETWORK_MONITOR_INTERVAL_SECONDS", ge=5, le=3600
    )

    # --- Logging (for server deployment) ---
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE")
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_stdout: bool = Field(default=True, alias="PARKCHAIN_LOG_STDOUT")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @field_validator("bot_token")
    @classmethod
    def validate_bot_token(cls, v: str) -> str:
        """Validate bot token format (when provided)."""
        if v and not validate_bot_token(v):
            raise ValueError("Invalid BOT_TOKEN format")
        return v

    @field_validator("solana_rpc_url")
    @classmethod
    def validate_rpc_url(cls, v: str) -> str:
        """Validate RPC endpoint URL."""
        if not validate_rpc_url(v):
            raise ValueError("SOLANA_RPC_URL must be an http(s) URL")
        return v

    def model_post_init(self, __context) -> None:
        """Post-initialization: ensure data directory exists."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
