"""Form 8949 style tax report built from realized gain records."""

from collections.abc import Iterable
import csv
from dataclasses import dataclass
from io import StringIO
import time

from costbasis.config.decorators import LoggerMixin
from costbasis.ledger.models import GainLossRecord, Term
from costbasis.ledger.money import format_cents, format_sat

CSV_HEADER = (
    "Description of Property",
    "Date Acquired",
    "Date Sold or Disposed Of",
    "Proceeds (Sales Price)",
    "Cost or Other Basis",
    "Gain or (Loss)",
    "Term",
    "Estimated",
)


@dataclass(frozen=True)
class TaxDisposition:
    """One Form 8949 line: a piece of one lot sold in one disposal."""

    description: str
    date_acquired: str
    date_sold: str
    proceeds_usd_cents: int
    cost_basis_usd_cents: int
    gain_usd_cents: int
    term: Term
    holding_days: int
    lot_id: str
    disposal_id: str
    estimated: bool = False

    @classmethod
    def from_record(cls, record: GainLossRecord) -> "TaxDisposition":
        return cls(
            description=f"{format_sat(record.quantity_consumed_sat)} BTC",
            date_acquired=record.acquisition_date.strftime("%Y-%m-%d"),
            date_sold=record.disposal_date.strftime("%Y-%m-%d"),
            proceeds_usd_cents=record.proceeds_usd_cents,
            cost_basis_usd_cents=record.cost_basis_usd_cents,
            gain_usd_cents=record.gain_usd_cents,
            term=record.term,
            holding_days=record.holding_days,
            lot_id=record.lot_id,
            disposal_id=record.disposal_id,
            estimated=record.estimated,
        )

    def to_row(self) -> list[str]:
        return [
            self.description,
            self.date_acquired,
            self.date_sold,
            format_cents(self.proceeds_usd_cents),
            format_cents(self.cost_basis_usd_cents),
            format_cents(self.gain_usd_cents),
            self.term.label,
            "yes" if self.estimated else "",
        ]

    def to_dict(self) -> dict:
        return {
            "description": self.description,
            "date_acquired": self.date_acquired,
            "date_sold": self.date_sold,
            "proceeds_usd": format_cents(self.proceeds_usd_cents),
            "cost_basis_usd": format_cents(self.cost_basis_usd_cents),
            "gain_usd": format_cents(self.gain_usd_cents),
            "term": self.term.label,
            "holding_days": self.holding_days,
            "lot_id": self.lot_id,
            "disposal_id": self.disposal_id,
            "estimated": self.estimated,
        }


@dataclass(frozen=True)
class TaxReport:
    """Realized gains of one tax year under one matching method."""

    year: int
    method: str
    short_term_gain_usd_cents: int
    long_term_gain_usd_cents: int
    total_gain_usd_cents: int
    total_proceeds_usd_cents: int
    total_cost_basis_usd_cents: int
    disposition_count: int
    estimated_count: int
    dispositions: tuple[TaxDisposition, ...]

    def to_dict(self) -> dict:
        return {
            "year": self.year,
            "method": self.method,
            "short_term_gain_usd": format_cents(self.short_term_gain_usd_cents),
            "long_term_gain_usd": format_cents(self.long_term_gain_usd_cents),
            "total_gain_usd": format_cents(self.total_gain_usd_cents),
            "total_proceeds_usd": format_cents(self.total_proceeds_usd_cents),
            "total_cost_basis_usd": format_cents(self.total_cost_basis_usd_cents),
            "disposition_count": self.disposition_count,
            "estimated_count": self.estimated_count,
            "dispositions": [d.to_dict() for d in self.dispositions],
        }


class ReportExporter(LoggerMixin):
    """Builds ``TaxReport`` values and renders them as CSV text."""

    def build_report(
        self, gains: Iterable[GainLossRecord], year: int, method: str
    ) -> TaxReport:
        """Filter gains to ``year`` and ``method`` and total them.

        Input order is kept, which for replayed gains is disposal date, then
        ledger order, then match order.
        """
        method = method.lower()
        selected = [g for g in gains if g.tax_year == year and g.method == method]
        dispositions = tuple(TaxDisposition.from_record(g) for g in selected)

        short_term = sum(d.gain_usd_cents for d in dispositions if d.term is Term.SHORT)
        long_term = sum(d.gain_usd_cents for d in dispositions if d.term is Term.LONG)
        report = TaxReport(
            year=year,
            method=method,
            short_term_gain_usd_cents=short_term,
            long_term_gain_usd_cents=long_term,
            total_gain_usd_cents=short_term + long_term,
            total_proceeds_usd_cents=sum(d.proceeds_usd_cents for d in dispositions),
            total_cost_basis_usd_cents=sum(d.cost_basis_usd_cents for d in dispositions),
            disposition_count=len(dispositions),
            estimated_count=sum(1 for d in dispositions if d.estimated),
            dispositions=dispositions,
        )
        self.logger.info(
            "Tax report %d/%s: %d dispositions, total gain %s",
            year,
            method,
            report.disposition_count,
            format_cents(report.total_gain_usd_cents),
        )
        if report.estimated_count:
            self.logger.warning(
                "Tax report %d/%s has %d estimated dispositions",
                year,
                method,
                report.estimated_count,
            )
        return report

    @staticmethod
    def to_csv(report: TaxReport) -> str:
        """Render the report as Form 8949 CSV with a trailing TOTALS row."""
        buffer = StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for disposition in report.dispositions:
            writer.writerow(disposition.to_row())
        writer.writerow(
            [
                "TOTALS",
                "",
                "",
                format_cents(report.total_proceeds_usd_cents),
                format_cents(report.total_cost_basis_usd_cents),
                format_cents(report.total_gain_usd_cents),
                "",
                str(report.estimated_count) if report.estimated_count else "",
            ]
        )
        return buffer.getvalue()

    @staticmethod
    def filename(year: int, method: str) -> str:
        return f"form_8949_{year}_{method.lower()}.csv"

    def export(
        self, gains: Iterable[GainLossRecord], year: int, method: str
    ) -> tuple[TaxReport, str]:
        self.log_operation_start("Form 8949 export", f"{year} {method}")
        started = time.perf_counter()
        report = self.build_report(gains, year, method)
        csv_text = self.to_csv(report)
        self.log_operation_success(
            "Form 8949 export",
            time.perf_counter() - started,
            f"{report.disposition_count} dispositions",
        )
        return report, csv_text
