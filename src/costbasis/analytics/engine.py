"""Replay of a ledger into lots and realized gains.

The engine keeps no state between calls: each computation replays the event
stream from genesis into a fresh ``LotInventory`` and returns frozen results.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, time, timezone

from costbasis.config.decorators import LoggerMixin, log_performance
from costbasis.config.settings import EngineConfig
from costbasis.ledger.models import (
    Acquisition,
    Disposal,
    GainLossRecord,
    LedgerEvent,
    Lot,
    PortfolioState,
    Term,
    Transfer,
)
from costbasis.ledger.money import format_cents, format_sat
from costbasis.ledger.transaction_ledger import TransactionLedger, parse_timestamp

from .accounting.matcher import get_strategy
from .accounting.strategy import MatchingStrategy
from .core.gains import GainCalculator
from .core.inventory import LotInventory


@dataclass(frozen=True)
class CostBasisResult:
    """Realized gains for a period plus the open lots left after the replay."""

    method: str
    gains: tuple[GainLossRecord, ...]
    total_realized_gain_usd_cents: int
    total_short_term_gain_usd_cents: int
    total_long_term_gain_usd_cents: int
    remaining_lots: tuple[Lot, ...]
    remaining_balance_sat: int
    remaining_cost_basis_usd_cents: int
    tax_year: int | None = None
    as_of: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "method": self.method,
            "tax_year": self.tax_year,
            "as_of": self.as_of.isoformat() if self.as_of else None,
            "gains": [g.to_dict() for g in self.gains],
            "total_realized_gain_usd": format_cents(self.total_realized_gain_usd_cents),
            "total_short_term_gain_usd": format_cents(self.total_short_term_gain_usd_cents),
            "total_long_term_gain_usd": format_cents(self.total_long_term_gain_usd_cents),
            "remaining_lots": len(self.remaining_lots),
            "open_lots": [lot.to_dict() for lot in self.remaining_lots],
            "remaining_balance_btc": format_sat(self.remaining_balance_sat),
            "remaining_cost_basis_usd": format_cents(self.remaining_cost_basis_usd_cents),
        }


def to_cutoff(as_of) -> datetime | None:
    """Normalize an as-of bound; a bare date includes that whole UTC day."""
    if as_of is None:
        return None
    if isinstance(as_of, date) and not isinstance(as_of, datetime):
        return datetime.combine(as_of, time.max, tzinfo=timezone.utc)
    return parse_timestamp(as_of)


class CostBasisEngine(LoggerMixin):
    """Replays ledger events through the inventory, matcher and calculator."""

    def __init__(self, config: EngineConfig | None = None):
        super().__init__()
        self.config = config or EngineConfig()

    def _events(self, ledger: TransactionLedger | Iterable[LedgerEvent]):
        if isinstance(ledger, TransactionLedger):
            return ledger.events()
        return tuple(sorted(ledger, key=lambda e: e.sort_key))

    @log_performance(warn_threshold=1.0, memory_tracking=True)
    def replay(
        self,
        ledger: TransactionLedger | Iterable[LedgerEvent],
        method: str | MatchingStrategy | None = None,
        as_of=None,
    ) -> PortfolioState:
        """Rebuild the portfolio state from the first event.

        Args:
            ledger: A TransactionLedger or already-normalized events
            method: Matching method; defaults to ``config.default_method``
            as_of: Ignore events after this instant (a date means end of day)

        Returns:
            PortfolioState with open lots and the full gain history

        Raises:
            InsufficientInventoryError: a disposal exceeds open holdings;
                nothing is returned in that case
            UnsupportedMethodError: unknown method
        """
        strategy = get_strategy(method or self.config.default_method)
        cutoff = to_cutoff(as_of)
        inventory = LotInventory()
        calculator = GainCalculator(self.config)
        gains: list[GainLossRecord] = []
        received = sent = count = 0

        for event in self._events(ledger):
            if cutoff is not None and event.date > cutoff:
                break
            count += 1

            if isinstance(event, Acquisition):
                inventory.add_lot(Lot.from_acquisition(event))
                received += event.quantity_sat
            elif isinstance(event, Disposal):
                picks = strategy.select_lots(
                    event.quantity_sat, inventory.snapshot(), event.source_transaction_id
                )
                records = calculator.calculate(event, picks, strategy.name)
                for lot, amount in picks:
                    inventory.consume(lot.id, amount)
                gains.extend(records)
                sent += event.quantity_sat
            elif isinstance(event, Transfer):
                # Carry-over: lots keep their acquisition date and unit cost
                self.logger.debug(
                    "Transfer %s of %d sat leaves lots untouched",
                    event.source_transaction_id,
                    event.quantity_sat,
                )

        self.logger.info(
            "Replayed %d events with %s: %d open lots, %d gain records",
            count,
            strategy.name,
            len(inventory),
            len(gains),
        )
        return PortfolioState(
            method=strategy.name,
            lots=inventory.open_lots(),
            gains=tuple(gains),
            total_received_sat=received,
            total_sent_sat=sent,
            transaction_count=count,
        )

    def compute_cost_basis(
        self,
        ledger: TransactionLedger | Iterable[LedgerEvent],
        method: str | MatchingStrategy | None = None,
        tax_year: int | None = None,
        as_of=None,
    ) -> CostBasisResult:
        """Realized gains (optionally for one tax year) and remaining lots.

        With ``tax_year`` and no ``as_of`` the replay stops at the end of that
        year, so later events cannot affect it and the remaining lots are the
        year-end holdings.
        """
        if as_of is None and tax_year is not None:
            as_of = date(tax_year, 12, 31)
        state = self.replay(ledger, method, as_of)
        return self.result_from_state(state, tax_year, to_cutoff(as_of))

    @staticmethod
    def result_from_state(
        state: PortfolioState, tax_year: int | None = None, as_of: datetime | None = None
    ) -> CostBasisResult:
        gains = state.gains_for_year(tax_year)
        return CostBasisResult(
            method=state.method,
            gains=gains,
            total_realized_gain_usd_cents=sum(g.gain_usd_cents for g in gains),
            total_short_term_gain_usd_cents=sum(
                g.gain_usd_cents for g in gains if g.term is Term.SHORT
            ),
            total_long_term_gain_usd_cents=sum(
                g.gain_usd_cents for g in gains if g.term is Term.LONG
            ),
            remaining_lots=state.lots,
            remaining_balance_sat=state.remaining_balance_sat,
            remaining_cost_basis_usd_cents=state.remaining_cost_basis_usd_cents,
            tax_year=tax_year,
            as_of=as_of,
        )
