"""Tests for PortfolioSummaryAggregator."""

from costbasis import PortfolioState, PortfolioSummaryAggregator


def test_summary_after_scenario_b(engine, ledger_for, scenario_b):
    state = engine.replay(ledger_for(scenario_b), "fifo")
    summary = PortfolioSummaryAggregator.summarize(state, 4_000_000)

    assert summary.total_balance_sat == 30_000
    assert summary.total_cost_basis_usd_cents == 750
    assert summary.current_value_usd_cents == 1200
    assert summary.unrealized_gain_usd_cents == 450
    assert summary.realized_gain_usd_cents == 600
    assert summary.total_received_sat == 100_000
    assert summary.total_sent_sat == 70_000
    assert summary.transaction_count == 3
    assert summary.disposition_count == 1
    assert summary.open_lot_count == 1
    assert summary.estimated is False


def test_summary_is_idempotent(engine, ledger_for, scenario_d):
    state = engine.replay(ledger_for(scenario_d), "hifo")
    assert PortfolioSummaryAggregator.summarize(
        state, 3_500_000
    ) == PortfolioSummaryAggregator.summarize(state, 3_500_000)


def test_realized_gain_limited_to_tax_year(engine, ledger_for, record):
    ledger = ledger_for(
        [
            record("buy", "buy", 100_000, "20000.00", "2023-01-01"),
            record("s23", "sell", 40_000, "25000.00", "2023-06-01"),
            record("s24", "sell", 10_000, "30000.00", "2024-06-01"),
        ]
    )
    state = engine.replay(ledger, "fifo")

    summary_2024 = PortfolioSummaryAggregator.summarize(state, 3_000_000, tax_year=2024)
    assert summary_2024.realized_gain_usd_cents == 100
    assert summary_2024.disposition_count == 1
    # balance is never limited by year
    assert summary_2024.total_balance_sat == 50_000

    summary_all = PortfolioSummaryAggregator.summarize(state, 3_000_000)
    assert summary_all.realized_gain_usd_cents == 300
    assert summary_all.disposition_count == 2


def test_empty_portfolio():
    summary = PortfolioSummaryAggregator.summarize(PortfolioState(method="fifo"), 3_000_000)
    assert summary.total_balance_sat == 0
    assert summary.current_value_usd_cents == 0
    assert summary.unrealized_gain_usd_cents == 0
    assert summary.to_dict()["total_balance_btc"] == "0.00000000"


def test_estimated_price_flags_summary(engine, ledger_for, scenario_b):
    state = engine.replay(ledger_for(scenario_b), "fifo")
    summary = PortfolioSummaryAggregator.summarize(state, 0, price_estimated=True)
    assert summary.estimated is True
    assert summary.unrealized_gain_usd_cents == -750


def test_to_dict(engine, ledger_for, scenario_b):
    state = engine.replay(ledger_for(scenario_b), "fifo")
    data = PortfolioSummaryAggregator.summarize(state, 4_000_000).to_dict()
    assert data["total_balance_btc"] == "0.00030000"
    assert data["current_value_usd"] == "12.00"
    assert data["unrealized_gain_usd"] == "4.50"
    assert data["price_usd"] == "40000.00"
