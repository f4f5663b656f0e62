"""Normalization of raw transaction records into an ordered event stream."""

from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from decimal import Decimal

import pandas as pd

from costbasis.analytics.core.price_manager import PriceSource
from costbasis.config.decorators import LoggerMixin
from costbasis.config.settings import EngineConfig
from costbasis.errors import MissingPriceError, ValidationError

from .models import (
    ACQUISITION_TYPES,
    DISPOSAL_TYPES,
    Acquisition,
    Disposal,
    LedgerEvent,
    Transfer,
    TxType,
)
from .money import to_cents


def _field(record, name: str):
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def parse_timestamp(value, record_id: str | None = None) -> datetime:
    """Parse a timestamp into an aware UTC datetime. Naive input is taken as UTC."""
    if value is None or value == "":
        raise ValidationError("Missing transacted_at", record_id)
    try:
        ts = pd.Timestamp(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid transacted_at: {value!r}", record_id) from e
    if pd.isna(ts):
        raise ValidationError(f"Invalid transacted_at: {value!r}", record_id)
    ts = ts.tz_localize(timezone.utc) if ts.tzinfo is None else ts.tz_convert(timezone.utc)
    return ts.to_pydatetime()


def parse_sat(value, name: str, record_id: str | None = None) -> int:
    """Parse a satoshi amount; must be a whole number."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {name}: {value!r}", record_id)
    if isinstance(value, int):
        return value
    try:
        amount = Decimal(str(value).strip())
    except ArithmeticError as e:
        raise ValidationError(f"Invalid {name}: {value!r}", record_id) from e
    if not amount.is_finite() or amount != amount.to_integral_value():
        raise ValidationError(f"{name} must be a whole number of satoshi, got {value!r}", record_id)
    return int(amount)


class TransactionLedger(LoggerMixin):
    """Turns raw records into typed, chronologically ordered events.

    Records are validated as they are appended; ``events()`` returns the
    stream sorted by ``(transacted_at, insertion order)``. Records without a
    price are priced through the optional ``price_source``; what happens when
    that fails is governed by ``config.price_mode``.
    """

    def __init__(
        self,
        records: Iterable = (),
        price_source: PriceSource | None = None,
        config: EngineConfig | None = None,
    ):
        super().__init__()
        self.price_source = price_source
        self.config = config or EngineConfig()
        self._events: list[LedgerEvent] = []
        self._ids: set[str] = set()
        self.extend(records)

    def __len__(self) -> int:
        return len(self._events)

    def extend(self, records: Iterable) -> None:
        for record in records:
            self.append(record)

    def append(self, record) -> LedgerEvent:
        """Validate and add one raw record."""
        sequence = len(self._events)
        event = self.normalize(record, sequence)
        if event.source_transaction_id in self._ids:
            raise ValidationError("Duplicate transaction id", event.source_transaction_id)
        self._ids.add(event.source_transaction_id)
        self._events.append(event)
        return event

    def events(self) -> tuple[LedgerEvent, ...]:
        """The event stream ordered by timestamp, ties in insertion order."""
        return tuple(sorted(self._events, key=lambda e: e.sort_key))

    def normalize(self, record, sequence: int) -> LedgerEvent:
        """Map one raw record to its closed event variant."""
        raw_id = _field(record, "id")
        record_id = str(raw_id) if raw_id not in (None, "") else f"tx-{sequence}"

        raw_type = _field(record, "tx_type")
        try:
            tx_type = TxType(str(raw_type).strip().lower()) if raw_type is not None else None
        except ValueError:
            tx_type = None
        if tx_type is None:
            raise ValidationError(f"Unknown tx_type: {raw_type!r}", record_id)

        amount_sat = parse_sat(_field(record, "amount_sat"), "amount_sat", record_id)
        if amount_sat <= 0:
            raise ValidationError(f"amount_sat must be positive, got {amount_sat}", record_id)

        raw_fee = _field(record, "fee_sat")
        fee_sat = 0 if raw_fee in (None, "") else parse_sat(raw_fee, "fee_sat", record_id)
        if fee_sat < 0:
            raise ValidationError(f"fee_sat must not be negative, got {fee_sat}", record_id)
        if tx_type in DISPOSAL_TYPES and fee_sat > amount_sat:
            raise ValidationError(
                f"fee_sat {fee_sat} exceeds the disposed amount {amount_sat}", record_id
            )

        when = parse_timestamp(_field(record, "transacted_at"), record_id)
        common = {
            "source_transaction_id": record_id,
            "sequence": sequence,
            "date": when,
            "tx_type": tx_type,
            "quantity_sat": amount_sat,
            "fee_sat": fee_sat,
        }

        if tx_type is TxType.TRANSFER:
            return Transfer(**common)

        price_cents, estimated = self._resolve_price(record, record_id, when)
        if tx_type in ACQUISITION_TYPES:
            return Acquisition(**common, unit_cost_usd_cents=price_cents, estimated=estimated)
        return Disposal(**common, unit_price_usd_cents=price_cents, estimated=estimated)

    def _resolve_price(self, record, record_id: str, when: datetime) -> tuple[int, bool]:
        raw_price = _field(record, "price_usd")
        if raw_price in (None, ""):
            raw_price = self._lookup_price(record_id, when)
            if raw_price is None:
                return 0, True

        cents = to_cents(raw_price, record_id)
        if cents < 0:
            raise ValidationError(f"price_usd must not be negative, got {raw_price}", record_id)
        return cents, False

    def _lookup_price(self, record_id: str, when: datetime):
        currency = self.config.fiat_currency
        price = None
        if self.price_source is not None:
            price = self.price_source.historical_price(when, currency)
        if price is not None:
            self.logger.debug("Priced %s from history at %s %s", record_id, price, currency)
            return price
        if not self.config.lenient:
            raise MissingPriceError(record_id, when, currency)
        self.logger.warning(
            "No price for %s at %s; booking at 0 and marking estimated", record_id, when
        )
        return None
