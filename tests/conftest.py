"""Shared fixtures for the cost-basis tests."""

import pytest

from costbasis import CostBasisEngine, EngineConfig, TransactionLedger


def _config(**overrides):
    settings = {
        "default_method": "fifo",
        "price_mode": "strict",
        "long_term_rule": "days",
        "long_term_days": 365,
        "price_max_staleness_days": 0,
        "fiat_currency": "usd",
    }
    settings.update(overrides)
    return EngineConfig(**settings)


@pytest.fixture
def config():
    """Default settings, independent of the environment."""
    return _config()


@pytest.fixture
def make_config():
    return _config


@pytest.fixture
def record():
    """Factory for raw transaction records."""

    def _record(tx_id, tx_type, amount_sat, price_usd, when, fee_sat=0):
        return {
            "id": tx_id,
            "tx_type": tx_type,
            "amount_sat": amount_sat,
            "fee_sat": fee_sat,
            "price_usd": price_usd,
            "transacted_at": when,
        }

    return _record


@pytest.fixture
def scenario_b(record):
    """Two lots at $20,000 and $25,000, then 70,000 sat sold at $30,000."""
    return [
        record("lot1", "buy", 50_000, "20000.00", "2023-01-01T00:00:00Z"),
        record("lot2", "buy", 50_000, "25000.00", "2023-06-01T00:00:00Z"),
        record("sell1", "sell", 70_000, "30000.00", "2023-12-01T00:00:00Z"),
    ]


@pytest.fixture
def scenario_d(record):
    """Three lots whose unit cost is not monotonic in time."""
    return [
        record("d1", "buy", 40_000, "20000.00", "2023-01-01T00:00:00Z"),
        record("d2", "buy", 40_000, "40000.00", "2023-02-01T00:00:00Z"),
        record("d3", "buy", 40_000, "30000.00", "2023-03-01T00:00:00Z"),
        record("dsell", "sell", 60_000, "35000.00", "2023-06-01T00:00:00Z"),
    ]


@pytest.fixture
def engine(config):
    return CostBasisEngine(config)


@pytest.fixture
def ledger_for(config):
    """Build a ledger from records with the default config."""

    def _ledger(records, price_source=None, cfg=None):
        return TransactionLedger(records, price_source=price_source, config=cfg or config)

    return _ledger
