"""Realized gain/loss for the lots matched against one disposal.

Every amount below is an exact rational rounded once, half-to-even, to the
cent:

* cost basis of a piece is the difference of two cumulative lot costs,
  ``round(after * unit) - round(before * unit)``, so a lot booked in any
  number of pieces costs exactly ``round(original * unit)`` in total;
* the disposal fee (in sat, valued at the disposal price) is spread over the
  pieces in proportion to their size, giving each piece the net proceeds
  ``amount * price * (quantity - fee) / quantity``; the pieces are rounded by
  largest remainder so they add up to the rounded disposal total.

Together these make total realized gain independent of the matching method
once every lot is sold.
"""

from datetime import date, datetime, timezone

from costbasis.config.decorators import LoggerMixin
from costbasis.config.settings import EngineConfig
from costbasis.errors import ValidationError
from costbasis.ledger.models import Disposal, GainLossRecord, Lot, Term
from costbasis.ledger.money import SAT_PER_BTC, allocate


def _utc_date(when: datetime) -> date:
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc)
    return when.date()


def one_year_after(day: date) -> date:
    """Same calendar day next year; Feb 29 rolls to Mar 1."""
    try:
        return day.replace(year=day.year + 1)
    except ValueError:
        return date(day.year + 1, 3, 1)


class GainCalculator(LoggerMixin):
    """Turns ``(lot, amount)`` picks into immutable gain records."""

    def __init__(self, config: EngineConfig | None = None):
        super().__init__()
        self.config = config or EngineConfig()

    @staticmethod
    def holding_days(acquired: datetime, disposed: datetime) -> int:
        """Calendar days between the UTC acquisition and disposal dates."""
        return (_utc_date(disposed) - _utc_date(acquired)).days

    def classify(self, acquired: datetime, disposed: datetime) -> Term:
        """Short or long term under the configured rule."""
        if self.config.long_term_rule == "calendar":
            is_long = _utc_date(disposed) > one_year_after(_utc_date(acquired))
        else:
            is_long = self.holding_days(acquired, disposed) > self.config.long_term_days
        return Term.LONG if is_long else Term.SHORT

    def calculate(
        self, disposal: Disposal, picks: list[tuple[Lot, int]], method: str
    ) -> list[GainLossRecord]:
        """Gain records for one disposal, in pick order.

        Args:
            disposal: The disposal event
            picks: ``(lot, amount)`` pairs as chosen by the matcher; lots as
                they were before this disposal
            method: Matching method name, stored on each record

        Returns:
            One record per pick
        """
        quantity = disposal.quantity_sat
        matched = sum(amount for _, amount in picks)
        if matched != quantity:
            raise ValidationError(
                f"Matched {matched} sat but disposal is {quantity} sat",
                disposal.source_transaction_id,
            )

        price = disposal.unit_price_usd_cents
        net_quantity = quantity - disposal.fee_sat
        proceeds = allocate(
            [amount * price * net_quantity for _, amount in picks],
            quantity * SAT_PER_BTC,
        )

        records = []
        for (lot, amount), piece_proceeds in zip(picks, proceeds):
            consumed = lot.consumed_quantity_sat
            cost_basis = lot.cumulative_cost(consumed + amount) - lot.cumulative_cost(consumed)
            holding_days = self.holding_days(lot.acquisition_date, disposal.date)
            if lot.acquisition_date > disposal.date:
                raise ValidationError(
                    f"Lot {lot.id} acquired after the disposal",
                    disposal.source_transaction_id,
                )
            records.append(
                GainLossRecord(
                    lot_id=lot.id,
                    disposal_id=disposal.source_transaction_id,
                    quantity_consumed_sat=amount,
                    cost_basis_usd_cents=cost_basis,
                    proceeds_usd_cents=piece_proceeds,
                    gain_usd_cents=piece_proceeds - cost_basis,
                    holding_days=holding_days,
                    term=self.classify(lot.acquisition_date, disposal.date),
                    acquisition_date=lot.acquisition_date,
                    disposal_date=disposal.date,
                    method=method,
                    estimated=disposal.estimated or lot.estimated,
                )
            )

        self.logger.debug(
            "Disposal %s: %d sat over %d lots, gain %d cents",
            disposal.source_transaction_id,
            quantity,
            len(records),
            sum(r.gain_usd_cents for r in records),
        )
        return records
