"""Portfolio roll-up of open lots and realized gains."""

from dataclasses import dataclass

from costbasis.ledger.models import PortfolioState
from costbasis.ledger.money import fiat_value, format_cents, format_sat


@dataclass(frozen=True)
class PortfolioSummary:
    """Balance, cost basis and value of a portfolio at a given price."""

    total_balance_sat: int
    total_cost_basis_usd_cents: int
    current_value_usd_cents: int
    unrealized_gain_usd_cents: int
    realized_gain_usd_cents: int
    total_received_sat: int
    total_sent_sat: int
    transaction_count: int
    disposition_count: int
    price_usd_cents: int
    open_lot_count: int
    estimated: bool = False

    def to_dict(self) -> dict:
        return {
            "total_balance_btc": format_sat(self.total_balance_sat),
            "total_cost_basis_usd": format_cents(self.total_cost_basis_usd_cents),
            "current_value_usd": format_cents(self.current_value_usd_cents),
            "unrealized_gain_usd": format_cents(self.unrealized_gain_usd_cents),
            "realized_gain_usd": format_cents(self.realized_gain_usd_cents),
            "total_received_btc": format_sat(self.total_received_sat),
            "total_sent_btc": format_sat(self.total_sent_sat),
            "transaction_count": self.transaction_count,
            "disposition_count": self.disposition_count,
            "price_usd": format_cents(self.price_usd_cents),
            "open_lot_count": self.open_lot_count,
            "estimated": self.estimated,
        }


class PortfolioSummaryAggregator:
    """Pure function of a ``PortfolioState`` and a current price."""

    @staticmethod
    def summarize(
        state: PortfolioState,
        current_price_usd_cents: int,
        tax_year: int | None = None,
        price_estimated: bool = False,
    ) -> PortfolioSummary:
        """Summarize open lots at ``current_price_usd_cents`` per BTC.

        Args:
            state: Replayed portfolio state
            current_price_usd_cents: Marking price, cents per BTC
            tax_year: Limit realized gain and disposition count to this year
            price_estimated: The marking price itself is a stand-in

        Returns:
            PortfolioSummary
        """
        balance = state.remaining_balance_sat
        cost_basis = state.remaining_cost_basis_usd_cents
        current_value = fiat_value(balance, current_price_usd_cents)
        gains = state.gains_for_year(tax_year)

        return PortfolioSummary(
            total_balance_sat=balance,
            total_cost_basis_usd_cents=cost_basis,
            current_value_usd_cents=current_value,
            unrealized_gain_usd_cents=current_value - cost_basis,
            realized_gain_usd_cents=sum(g.gain_usd_cents for g in gains),
            total_received_sat=state.total_received_sat,
            total_sent_sat=state.total_sent_sat,
            transaction_count=state.transaction_count,
            disposition_count=len({g.disposal_id for g in gains}),
            price_usd_cents=current_price_usd_cents,
            open_lot_count=len(state.lots),
            estimated=(
                price_estimated
                or any(lot.estimated for lot in state.lots)
                or any(g.estimated for g in gains)
            ),
        )
