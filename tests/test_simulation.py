"""Tests for the paper simulation and CLI."""

import os

import pytest
from typer.testing import CliRunner
from liquidity_engine.apps.main import app
from liquidity_engine.apps.simulation import SimulationConfig, run_simulation
from liquidity_engine.core.config import FixedConfig, Settings, StrategyConfig

runner = CliRunner()


def make_settings(kind, **kwargs):
    return Settings(strategy=StrategyConfig(kind=kind, fixed=FixedConfig(bid_limit=-10, ask_limit=10)), **kwargs)


def test_simulation_is_deterministic():
    """Test that the same seed gives the same run."""
    config = SimulationConfig(blocks=30, seed=3)
    first = run_simulation(make_settings("fixed"), config)
    second = run_simulation(make_settings("fixed"), config)

    assert first.ticks == second.ticks
    assert first.blocks == 30
    assert first.cycles + first.skipped + first.faults == 30
    assert first.total_shares == 1000


@pytest.mark.parametrize("kind", ["fixed", "oracle", "model"])
def test_simulation_runs_each_strategy(kind):
    """Test a short run per quote source."""
    result = run_simulation(make_settings(kind), SimulationConfig(blocks=20, seed=11))
    assert result.faults == 0
    assert result.cycles == 20
    assert len(result.ticks) == 20


def test_simulation_journal(tmp_path):
    """Test that a journaled run writes its artifacts."""
    settings = make_settings("fixed", journal_dir=str(tmp_path))
    result = run_simulation(settings, SimulationConfig(blocks=5, journal=True))

    assert result.run_dir is not None
    assert os.path.exists(os.path.join(result.run_dir, "events.jsonl"))
    assert os.path.exists(os.path.join(result.run_dir, "summary.md"))


def test_cli_quote():
    """Test the quote command."""
    result = runner.invoke(app, ["quote", "--curr-limit", "0", "--base", "1000", "--quote", "1500"])
    assert result.exit_code == 0
    assert "Model Quote" in result.output


def test_cli_quote_invalid_parameters():
    """Test the quote command with an invalid parameter."""
    result = runner.invoke(app, ["quote", "--risk-aversion", "0"])
    assert result.exit_code == 1


def test_cli_simulate():
    """Test the simulate command."""
    result = runner.invoke(app, ["simulate", "--blocks", "10", "--kind", "fixed", "--no-ticks"])
    assert result.exit_code == 0
    assert "Simulation Summary" in result.output

    result = runner.invoke(app, ["simulate", "--kind", "bogus"])
    assert result.exit_code == 1


def test_cli_config():
    """Test the config command."""
    result = runner.invoke(app, ["config"])
    assert result.exit_code == 0
    assert "Effective Configuration" in result.output
