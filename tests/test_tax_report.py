"""Tests for the Form 8949 report and its CSV rendering."""

import pytest

from costbasis import ReportExporter, Term

HEADER = (
    "Description of Property,Date Acquired,Date Sold or Disposed Of,"
    "Proceeds (Sales Price),Cost or Other Basis,Gain or (Loss),Term,Estimated"
)


@pytest.fixture
def exporter():
    return ReportExporter()


def test_scenario_b_csv(engine, ledger_for, scenario_b, exporter):
    state = engine.replay(ledger_for(scenario_b), "fifo")
    report, csv_text = exporter.export(state.gains, 2023, "fifo")

    assert csv_text == (
        f"{HEADER}\n"
        "0.00050000 BTC,2023-01-01,2023-12-01,15.00,10.00,5.00,Short-term,\n"
        "0.00020000 BTC,2023-06-01,2023-12-01,6.00,5.00,1.00,Short-term,\n"
        "TOTALS,,,21.00,15.00,6.00,,\n"
    )
    assert report.disposition_count == 2
    assert report.total_proceeds_usd_cents == 2100
    assert report.total_cost_basis_usd_cents == 1500
    assert report.total_gain_usd_cents == 600
    assert report.short_term_gain_usd_cents == 600
    assert report.long_term_gain_usd_cents == 0
    assert report.estimated_count == 0


def test_long_and_short_term_totals(engine, ledger_for, record, exporter):
    ledger = ledger_for(
        [
            record("old", "buy", 100_000, "20000.00", "2022-01-01"),
            record("new", "buy", 100_000, "28000.00", "2023-09-01"),
            record("sell", "sell", 150_000, "30000.00", "2023-12-01"),
        ]
    )
    state = engine.replay(ledger, "fifo")
    report = exporter.build_report(state.gains, 2023, "fifo")

    long_term, short_term = report.dispositions
    assert long_term.term is Term.LONG
    assert short_term.term is Term.SHORT
    assert report.long_term_gain_usd_cents == 1000
    assert report.short_term_gain_usd_cents == 100
    assert report.total_gain_usd_cents == 1100
    assert long_term.to_row()[6] == "Long-term"


def test_report_filters_year_and_method(engine, ledger_for, scenario_b, exporter):
    state = engine.replay(ledger_for(scenario_b), "fifo")

    other_year, csv_text = exporter.export(state.gains, 2024, "fifo")
    assert other_year.disposition_count == 0
    assert csv_text == f"{HEADER}\nTOTALS,,,0.00,0.00,0.00,,\n"

    other_method = exporter.build_report(state.gains, 2023, "LIFO")
    assert other_method.disposition_count == 0
    assert other_method.method == "lifo"


def test_estimated_rows_flagged(engine, ledger_for, record, make_config, exporter):
    ledger = ledger_for(
        [
            record("buy", "buy", 100_000, None, "2023-01-01"),
            record("sell", "sell", 100_000, "30000.00", "2023-03-01"),
        ],
        cfg=make_config(price_mode="lenient"),
    )
    state = engine.replay(ledger, "fifo")
    report, csv_text = exporter.export(state.gains, 2023, "fifo")

    assert report.estimated_count == 1
    lines = csv_text.splitlines()
    assert lines[1].endswith(",Short-term,yes")
    assert lines[-1] == "TOTALS,,,30.00,0.00,30.00,,1"


def test_dispositions_follow_disposal_order(engine, ledger_for, record, exporter):
    ledger = ledger_for(
        [
            record("a", "buy", 10_000, "20000.00", "2023-01-01"),
            record("b", "buy", 10_000, "30000.00", "2023-01-02"),
            record("s2", "sell", 5_000, "25000.00", "2023-05-01"),
            record("s1", "sell", 15_000, "25000.00", "2023-04-01"),
        ]
    )
    state = engine.replay(ledger, "hifo")
    report = exporter.build_report(state.gains, 2023, "hifo")
    assert [(d.disposal_id, d.lot_id) for d in report.dispositions] == [
        ("s1", "b"),
        ("s1", "a"),
        ("s2", "a"),
    ]


def test_report_to_dict(engine, ledger_for, scenario_b, exporter):
    state = engine.replay(ledger_for(scenario_b), "fifo")
    data = exporter.build_report(state.gains, 2023, "fifo").to_dict()
    assert data["total_gain_usd"] == "6.00"
    assert data["dispositions"][0]["description"] == "0.00050000 BTC"
    assert data["dispositions"][1]["term"] == "Short-term"


def test_filename():
    assert ReportExporter.filename(2023, "HIFO") == "form_8949_2023_hifo.csv"
