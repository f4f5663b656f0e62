"""Typed events, lots, and gain records.

All of these are frozen dataclasses. A lot that is partly consumed is replaced
by a new ``Lot`` value, so a snapshot handed to a matcher never changes
underneath it.
"""

from dataclasses import dataclass
from datetime import datetime
import enum

from costbasis.errors import ValidationError

from .money import fiat_value, format_cents, format_sat


class TxType(enum.Enum):
    """Closed set of raw transaction types."""

    BUY = "buy"
    RECEIVE = "receive"
    SELL = "sell"
    SEND = "send"
    TRANSFER = "transfer"


ACQUISITION_TYPES = frozenset({TxType.BUY, TxType.RECEIVE})
DISPOSAL_TYPES = frozenset({TxType.SELL, TxType.SEND})


class Term(enum.Enum):
    """Holding-period classification of a realized gain."""

    SHORT = "short"
    LONG = "long"

    @property
    def label(self) -> str:
        """Form 8949 label."""
        return "Long-term" if self is Term.LONG else "Short-term"


@dataclass(frozen=True)
class LedgerEvent:
    """Common fields of every normalized ledger event."""

    source_transaction_id: str
    sequence: int
    date: datetime
    tx_type: TxType
    quantity_sat: int
    fee_sat: int

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return (self.date, self.sequence)


@dataclass(frozen=True)
class Acquisition(LedgerEvent):
    """A buy or receive; opens a new lot."""

    unit_cost_usd_cents: int
    estimated: bool = False


@dataclass(frozen=True)
class Disposal(LedgerEvent):
    """A sell or send; consumes open lots and realizes gain."""

    unit_price_usd_cents: int
    estimated: bool = False


@dataclass(frozen=True)
class Transfer(LedgerEvent):
    """Internal move between own wallets. Lots carry over untouched."""


@dataclass(frozen=True)
class Lot:
    """A discrete acquisition of BTC with its own cost basis."""

    id: str
    acquisition_date: datetime
    original_quantity_sat: int
    remaining_quantity_sat: int
    unit_cost_usd_cents: int
    source_transaction_id: str
    sequence: int = 0
    estimated: bool = False

    def __post_init__(self):
        if not 0 <= self.remaining_quantity_sat <= self.original_quantity_sat:
            raise ValidationError(
                f"Lot remaining quantity {self.remaining_quantity_sat} outside "
                f"[0, {self.original_quantity_sat}]",
                self.id,
            )

    @classmethod
    def from_acquisition(cls, event: Acquisition) -> "Lot":
        return cls(
            id=event.source_transaction_id,
            acquisition_date=event.date,
            original_quantity_sat=event.quantity_sat,
            remaining_quantity_sat=event.quantity_sat,
            unit_cost_usd_cents=event.unit_cost_usd_cents,
            source_transaction_id=event.source_transaction_id,
            sequence=event.sequence,
            estimated=event.estimated,
        )

    @property
    def key(self) -> tuple[datetime, int]:
        """Ordering key: acquisition date, then ledger sequence."""
        return (self.acquisition_date, self.sequence)

    @property
    def consumed_quantity_sat(self) -> int:
        return self.original_quantity_sat - self.remaining_quantity_sat

    @property
    def is_open(self) -> bool:
        return self.remaining_quantity_sat > 0

    def cumulative_cost(self, quantity_sat: int) -> int:
        """Cost in cents of the first ``quantity_sat`` of this lot, rounded once."""
        return fiat_value(quantity_sat, self.unit_cost_usd_cents)

    @property
    def total_cost_usd_cents(self) -> int:
        return self.cumulative_cost(self.original_quantity_sat)

    @property
    def remaining_cost_basis_usd_cents(self) -> int:
        """Cost basis still attached to the open part of the lot."""
        return self.total_cost_usd_cents - self.cumulative_cost(self.consumed_quantity_sat)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "acquisition_date": self.acquisition_date.isoformat(),
            "original_quantity_btc": format_sat(self.original_quantity_sat),
            "remaining_quantity_btc": format_sat(self.remaining_quantity_sat),
            "unit_cost_usd": format_cents(self.unit_cost_usd_cents),
            "remaining_cost_basis_usd": format_cents(self.remaining_cost_basis_usd_cents),
            "source_transaction_id": self.source_transaction_id,
            "estimated": self.estimated,
        }


@dataclass(frozen=True)
class GainLossRecord:
    """Realized gain or loss on one piece of one lot. Never mutated."""

    lot_id: str
    disposal_id: str
    quantity_consumed_sat: int
    cost_basis_usd_cents: int
    proceeds_usd_cents: int
    gain_usd_cents: int
    holding_days: int
    term: Term
    acquisition_date: datetime
    disposal_date: datetime
    method: str
    estimated: bool = False

    @property
    def tax_year(self) -> int:
        return self.disposal_date.year

    def to_dict(self) -> dict:
        return {
            "lot_id": self.lot_id,
            "disposal_id": self.disposal_id,
            "quantity_consumed_btc": format_sat(self.quantity_consumed_sat),
            "cost_basis_usd": format_cents(self.cost_basis_usd_cents),
            "proceeds_usd": format_cents(self.proceeds_usd_cents),
            "gain_usd": format_cents(self.gain_usd_cents),
            "holding_days": self.holding_days,
            "term": self.term.value,
            "acquisition_date": self.acquisition_date.isoformat(),
            "disposal_date": self.disposal_date.isoformat(),
            "method": self.method,
            "estimated": self.estimated,
        }


@dataclass(frozen=True)
class PortfolioState:
    """Open lots plus the realized-gain history, as rebuilt by a replay."""

    method: str
    lots: tuple[Lot, ...] = ()
    gains: tuple[GainLossRecord, ...] = ()
    total_received_sat: int = 0
    total_sent_sat: int = 0
    transaction_count: int = 0

    @property
    def remaining_balance_sat(self) -> int:
        return sum(lot.remaining_quantity_sat for lot in self.lots)

    @property
    def remaining_cost_basis_usd_cents(self) -> int:
        return sum(lot.remaining_cost_basis_usd_cents for lot in self.lots)

    def gains_for_year(self, tax_year: int | None = None) -> tuple[GainLossRecord, ...]:
        """Gain records whose disposal falls in ``tax_year`` (all when None)."""
        if tax_year is None:
            return self.gains
        return tuple(g for g in self.gains if g.tax_year == tax_year)

    def realized_gain_usd_cents(self, tax_year: int | None = None) -> int:
        return sum(g.gain_usd_cents for g in self.gains_for_year(tax_year))
