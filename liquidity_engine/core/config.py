"""Configuration management using Pydantic Settings.

This module handles loading configuration from environment variables
and provides type-safe configuration objects. Nested values use ``__``
as delimiter, e.g. ``LE_STRATEGY__MODEL__RISK_AVERSION=0.2``.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from liquidity_engine.core.constants import (
    DEFAULT_ARRIVAL_INTENSITY,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MARKET_ID,
    DEFAULT_MIN_INTERVAL,
    DEFAULT_MIN_SPREAD,
    DEFAULT_OWNER,
    DEFAULT_PAIR_ID,
    DEFAULT_RISK_AVERSION,
    DEFAULT_TARGET_RATIO,
    DEFAULT_VOLATILITY_SQ,
    DEFAULT_WIDTH,
)


class StrategyKind(str, Enum):
    """Quote source for the strategy."""

    FIXED = "fixed"  # Owner-set bid/ask limits
    ORACLE = "oracle"  # Oracle bid/ask prices
    MODEL = "model"  # Avellaneda-Stoikov pricing model


class MarketConfig(BaseModel):
    """Venue market configuration."""

    market_id: str = Field(DEFAULT_MARKET_ID, description="Order book market ID")
    width: int = Field(DEFAULT_WIDTH, gt=0, description="Limit spacing of the market")
    pair_id: str = Field(DEFAULT_PAIR_ID, description="Oracle pair ID")


class ModelConfig(BaseModel):
    """Avellaneda-Stoikov model parameters."""

    risk_aversion: Decimal = Field(Decimal(DEFAULT_RISK_AVERSION), gt=0, description="Risk aversion (gamma)")
    volatility_sq: Decimal = Field(Decimal(DEFAULT_VOLATILITY_SQ), ge=0, description="Squared volatility (sigma^2)")
    arrival_intensity: Decimal = Field(
        Decimal(DEFAULT_ARRIVAL_INTENSITY), gt=0, description="Order arrival intensity (k)"
    )
    target_ratio: Decimal = Field(
        Decimal(DEFAULT_TARGET_RATIO), ge=0, le=1, description="Target share of pool value held in quote"
    )


class OracleConfig(BaseModel):
    """Oracle-replicating strategy parameters."""

    min_spread: int = Field(DEFAULT_MIN_SPREAD, ge=0, description="Extra limits added on each side of the oracle quote")


class FixedConfig(BaseModel):
    """Fixed quote parameters."""

    bid_limit: int = Field(-10, description="Bid price limit")
    ask_limit: int = Field(10, description="Ask price limit")

    @model_validator(mode="after")
    def check_not_crossed(self):
        """Bid must sit below ask."""
        if self.bid_limit >= self.ask_limit:
            raise ValueError(f"bid_limit {self.bid_limit} must be below ask_limit {self.ask_limit}")
        return self


class StrategyConfig(BaseModel):
    """Strategy configuration."""

    kind: StrategyKind = Field(StrategyKind.MODEL, description="Quote source: fixed|oracle|model")
    min_interval: int = Field(DEFAULT_MIN_INTERVAL, ge=0, description="Minimum blocks between cycles")
    public: bool = Field(False, description="Allow anyone to deposit")
    owner: str = Field(DEFAULT_OWNER, description="Strategy owner")

    model: ModelConfig = Field(default_factory=ModelConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    fixed: FixedConfig = Field(default_factory=FixedConfig)

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v):
        """Accept upper-case strategy names."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="LE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = Field("dev", description="Environment (dev/staging/prod)")

    # Market and strategy
    market: MarketConfig = Field(default_factory=MarketConfig)
    strategy: StrategyConfig = Field(default_factory=StrategyConfig)

    # Logging
    log_level: str = Field(DEFAULT_LOG_LEVEL, description="Logging level")
    log_file: Optional[str] = Field(None, description="Log file path")

    # Event journal
    journal_dir: Optional[str] = Field(None, description="Directory for the event journal (disabled if unset)")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Upper-case the log level name."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls()
