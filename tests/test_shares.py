"""Tests for share accounting."""

import pytest
from liquidity_engine.accounting.shares import ShareLedger
from liquidity_engine.core.exceptions import DivisionByZero, InvalidState
from liquidity_engine.core.models import SharePool


def identity(amount):
    return amount


@pytest.fixture
def ledger():
    """Create share ledger for testing."""
    return ShareLedger(SharePool())


@pytest.fixture
def seeded(ledger):
    """Create share ledger seeded with 1000 shares."""
    ledger.seed("owner", 1000, 1000, identity)
    return ledger


def test_seed_deposit_withdraw(ledger):
    """Test the seed, deposit and withdraw sequence at price 1."""
    assert ledger.seed("owner", 1000, 1000, identity) == 1000
    assert ledger.deposit("alice", 500, 500, 1000, 1000) == 500
    assert ledger.total_shares == 1500
    assert ledger.withdraw("owner", 750, 1500, 1500) == (750, 750)
    assert ledger.total_shares == 750
    assert ledger.balance_of("owner") == 250


def test_seed_uses_smaller_side(ledger):
    """Test that seeding mints the smaller value in base units."""
    assert ledger.seed("owner", 1000, 300, lambda quote: quote * 2) == 600


def test_seed_rejections(ledger, seeded):
    """Test double seeding and zero-share seeds."""
    with pytest.raises(InvalidState):
        seeded.seed("owner", 1, 1, identity)

    empty = ShareLedger(SharePool())
    with pytest.raises(InvalidState):
        empty.seed("owner", 0, 1000, identity)
    assert empty.total_shares == 0


def test_deposit_rejections(ledger, seeded):
    """Test unseeded pools, empty reserves and zero-share deposits."""
    with pytest.raises(InvalidState):
        ShareLedger(SharePool()).deposit("alice", 10, 10, 10, 10)
    with pytest.raises(DivisionByZero):
        seeded.deposit("alice", 10, 10, 0, 1000)
    with pytest.raises(InvalidState):
        seeded.deposit("alice", 0, 10, 1000, 1000)
    assert seeded.total_shares == 1000


def test_deposit_uses_smaller_ratio(seeded):
    """Test pro-rata minting with uneven amounts."""
    assert seeded.preview_deposit(100, 300, 1000, 2000) == 100
    assert seeded.preview_deposit(300, 100, 1000, 2000) == 50


def test_withdraw_rejections(seeded):
    """Test over-withdrawal and non-positive shares."""
    with pytest.raises(InvalidState):
        seeded.withdraw("owner", 1001, 1000, 1000)
    with pytest.raises(InvalidState):
        seeded.withdraw("owner", 0, 1000, 1000)
    with pytest.raises(InvalidState):
        seeded.withdraw("mallory", 1, 1000, 1000)
    assert seeded.balance_of("owner") == 1000


def test_partial_withdrawals_never_exceed_full(seeded):
    """Test that splitting a withdrawal never pays more."""
    full = ShareLedger(SharePool(total_shares=1000, balances={"owner": 1000}))
    full_base, full_quote = full.withdraw("owner", 1000, 1001, 999)

    base_reserves, quote_reserves = 1001, 999
    paid_base = paid_quote = 0
    for shares in (333, 333, 334):
        base, quote = seeded.withdraw("owner", shares, base_reserves, quote_reserves)
        base_reserves -= base
        quote_reserves -= quote
        paid_base += base
        paid_quote += quote

    assert paid_base <= full_base
    assert paid_quote <= full_quote
    assert seeded.total_shares == 0


def test_transfer_preserves_total(seeded):
    """Test transfers and the balance sum."""
    seeded.deposit("alice", 500, 500, 1000, 1000)
    seeded.transfer("owner", "bob", 400)
    seeded.transfer("alice", "bob", 500)

    assert seeded.balance_of("bob") == 900
    assert seeded.balance_of("alice") == 0
    assert "alice" not in seeded.pool.balances
    assert sum(seeded.pool.balances.values()) == seeded.total_shares == 1500

    with pytest.raises(InvalidState):
        seeded.transfer("alice", "bob", 1)


def test_amounts_for_shares_rounding(seeded):
    """Test rounding direction of backing amounts."""
    assert seeded.amounts_for_shares(1, 1500, 2500) == (1, 2)
    assert seeded.amounts_for_shares(1, 1500, 2500, round_up=True) == (2, 3)
