"""Tests for core module."""

import pytest
from decimal import Decimal
from pydantic import ValidationError
from liquidity_engine.core.config import FixedConfig, ModelConfig, Settings, StrategyConfig, StrategyKind
from liquidity_engine.core.constants import DEFAULT_MARKET_ID, DEFAULT_RISK_AVERSION
from liquidity_engine.core.exceptions import InvalidState, Unauthorized
from liquidity_engine.core.models import EngineState, OrderBatch, Quote, Reserves, Side, Timer
from liquidity_engine.risk.guardian import StrategyGuardian


def test_settings_creation():
    """Test Settings creation."""
    settings = Settings.from_env()
    assert settings.market.market_id == DEFAULT_MARKET_ID
    assert settings.market.width > 0
    assert settings.strategy is not None


def test_settings_from_environment(monkeypatch):
    """Test nested environment overrides."""
    monkeypatch.setenv("LE_STRATEGY__KIND", "FIXED")
    monkeypatch.setenv("LE_STRATEGY__FIXED__BID_LIMIT", "-50")
    monkeypatch.setenv("LE_MARKET__WIDTH", "5")
    monkeypatch.setenv("LE_LOG_LEVEL", "debug")

    settings = Settings.from_env()
    assert settings.strategy.kind == StrategyKind.FIXED
    assert settings.strategy.fixed.bid_limit == -50
    assert settings.market.width == 5
    assert settings.log_level == "DEBUG"


def test_model_config_defaults():
    """Test ModelConfig defaults and validation."""
    config = ModelConfig()
    assert config.risk_aversion == Decimal(DEFAULT_RISK_AVERSION)
    assert config.target_ratio == Decimal("0.5")

    with pytest.raises(ValidationError):
        ModelConfig(arrival_intensity="0")
    with pytest.raises(ValidationError):
        ModelConfig(target_ratio="1.5")


def test_fixed_config_rejects_crossed_limits():
    """Test FixedConfig validation."""
    with pytest.raises(ValidationError):
        FixedConfig(bid_limit=10, ask_limit=10)


def test_strategy_config_kind_normalized():
    """Test StrategyConfig kind parsing."""
    assert StrategyConfig(kind=" Oracle ").kind == StrategyKind.ORACLE


def test_side_model():
    """Test Side helpers."""
    assert Side.BID.is_bid
    assert Side.BID.offered_asset == "quote"
    assert Side.ASK.offered_asset == "base"


def test_reserves_model():
    """Test Reserves credit and debit."""
    reserves = Reserves(base=100, quote=50)
    reserves.credit(base=10)
    reserves.debit(quote=50)
    assert (reserves.base, reserves.quote) == (110, 0)

    with pytest.raises(InvalidState):
        reserves.debit(quote=1)
    assert reserves.quote == 0


def test_order_batch_model():
    """Test OrderBatch remaining amounts."""
    bid = OrderBatch(batch_id="b", limit=-10, is_bid=True, amount_in=100, base_amount=40, quote_amount=60)
    assert bid.remaining_offered == 60
    assert not bid.is_filled

    ask = OrderBatch(batch_id="a", limit=10, is_bid=False, amount_in=100, quote_amount=100)
    assert ask.is_filled


def test_quote_model():
    """Test Quote model."""
    quote = Quote(bid_limit=-10, ask_limit=15)
    assert quote.limit_for(Side.BID) == -10
    assert quote.limit_for(Side.ASK) == 15
    assert quote.spread == 25


def test_timer_model():
    """Test Timer readiness."""
    timer = Timer(min_interval=3)
    assert timer.is_ready(0)
    timer.last_trigger = 10
    assert not timer.is_ready(12)
    assert timer.is_ready(13)


def test_exception_context():
    """Test error messages carry their context."""
    error = InvalidState("Insufficient shares", {"shares": 5})
    assert str(error) == "Insufficient shares (shares=5)"
    assert str(Unauthorized()) == "Caller not authorized"


def test_guardian_checks():
    """Test guardian pause and interval checks."""
    state = EngineState(owner="owner", timer=Timer(min_interval=2))
    guardian = StrategyGuardian(state)

    assert guardian.check_cycle(0) == (True, None)
    state.timer.last_trigger = 0
    is_allowed, reason = guardian.check_cycle(1)
    assert not is_allowed
    assert "Rate limited" in reason

    guardian.pause("owner")
    is_allowed, reason = guardian.check_cycle(5)
    assert not is_allowed
    assert reason == "Strategy paused"
    assert guardian.is_paused()

    with pytest.raises(Unauthorized):
        guardian.unpause("mallory")
    guardian.unpause("owner")
    with pytest.raises(InvalidState):
        guardian.unpause("owner")
