"""Cost-basis operations over a stored portfolio ledger."""

from datetime import date, datetime, timezone
from typing import Any, Protocol

from costbasis.analytics.core.price_manager import PriceSource
from costbasis.analytics.core.summary import PortfolioSummary, PortfolioSummaryAggregator
from costbasis.analytics.engine import CostBasisEngine, CostBasisResult
from costbasis.config.decorators import audit_log, log_calls
from costbasis.config.logger import get_logger
from costbasis.config.settings import EngineConfig
from costbasis.data.managers.db_manager import DBManager
from costbasis.errors import MissingPriceError, ValidationError
from costbasis.ledger.money import to_cents
from costbasis.ledger.transaction_ledger import TransactionLedger
from costbasis.reporting.tax_report import ReportExporter, TaxReport

from .service import Service

logger = get_logger(__name__)


class TransactionSource(Protocol):
    """Where a portfolio's raw records come from."""

    def fetch_records(self, portfolio_id: str) -> list[dict[str, Any]]: ...


class CostBasisService(Service):
    """Computes cost basis, summaries and tax reports for one portfolio at a time.

    Every call reads the portfolio's records once and replays them from
    scratch; nothing is cached between calls.
    """

    def __init__(
        self,
        db_manager: DBManager | None = None,
        price_source: PriceSource | None = None,
        config: EngineConfig | None = None,
        source: TransactionSource | None = None,
    ):
        super().__init__(db_manager)
        self.price_source = price_source
        self.config = config or EngineConfig()
        self.source = source
        self.engine = CostBasisEngine(self.config)
        self.exporter = ReportExporter()

    def load_ledger(self, portfolio_id: str) -> TransactionLedger:
        source = self.source if self.source is not None else self.tx_repo
        records = source.fetch_records(portfolio_id)
        return TransactionLedger(records, price_source=self.price_source, config=self.config)

    @log_calls()
    def compute_cost_basis(
        self,
        portfolio_id: str,
        method: str | None = None,
        tax_year: int | None = None,
        as_of: datetime | date | None = None,
    ) -> CostBasisResult:
        """Realized gains and remaining lots.

        Args:
            portfolio_id: Portfolio to compute
            method: "fifo", "lifo" or "hifo"; defaults to the configured method
            tax_year: Only report gains disposed of in this year; without
                ``as_of`` the replay also stops at the end of this year
            as_of: Stop the replay at this instant

        Raises:
            ValidationError, InsufficientInventoryError, UnsupportedMethodError,
            MissingPriceError
        """
        ledger = self.load_ledger(portfolio_id)
        return self.engine.compute_cost_basis(ledger, method, tax_year, as_of)

    @log_calls()
    def compute_summary(
        self,
        portfolio_id: str,
        current_price=None,
        method: str | None = None,
        tax_year: int | None = None,
    ) -> PortfolioSummary:
        """Balance, cost basis and value at ``current_price`` (USD per BTC).

        Without a current price the latest price known to the price source is
        used.
        """
        state = self.engine.replay(self.load_ledger(portfolio_id), method)
        price_cents, estimated = self._current_price_cents(portfolio_id, current_price)
        return PortfolioSummaryAggregator.summarize(state, price_cents, tax_year, estimated)

    def _current_price_cents(self, portfolio_id: str, current_price) -> tuple[int, bool]:
        if current_price is not None:
            cents = to_cents(current_price)
            if cents < 0:
                raise ValidationError(f"current_price must not be negative, got {current_price}")
            return cents, False

        currency = self.config.fiat_currency
        latest = None
        if self.price_source is not None and hasattr(self.price_source, "latest_price"):
            latest = self.price_source.latest_price(currency)
        if latest is not None:
            _, price = latest
            return to_cents(price), False

        if not self.config.lenient:
            raise MissingPriceError(
                f"{portfolio_id}:current", datetime.now(timezone.utc), currency
            )
        logger.warning(
            "No current price for portfolio %s; valuing at 0 and marking estimated",
            portfolio_id,
        )
        return 0, True

    @audit_log("EXPORT_TAX_REPORT")
    def export_tax_report(
        self, portfolio_id: str, year: int, method: str | None = None
    ) -> tuple[TaxReport, str]:
        """Form 8949 report and its CSV text for one tax year.

        Events after the end of ``year`` are not replayed.
        """
        method = method or self.config.default_method
        state = self.engine.replay(self.load_ledger(portfolio_id), method, date(year, 12, 31))
        return self.exporter.export(state.gains, year, state.method)
