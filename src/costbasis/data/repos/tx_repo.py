"""Repository for BTC transactions."""

from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import Any

from costbasis.config.logger import get_logger
from costbasis.data.managers.db_manager import DBManager
from costbasis.data.orm.transaction import BtcTransaction
from costbasis.errors import ValidationError
from costbasis.ledger.models import TxType
from costbasis.ledger.money import to_cents
from costbasis.ledger.transaction_ledger import parse_sat, parse_timestamp

from .repository import Repository

logger = get_logger(__name__)


class TransactionRepository(Repository[BtcTransaction]):
    """Stores raw transaction records and reads a portfolio's ledger back."""

    def __init__(self, db_manager: DBManager | None = None):
        super().__init__(BtcTransaction, db_manager)

    @staticmethod
    def _to_row(portfolio_id: str, record: Mapping[str, Any], position: int) -> dict:
        """Column values for one raw record.

        Unknown tx types are refused here; sign and price rules are checked by
        the ledger on replay.
        """
        tx_id = record.get("id")
        if tx_id in (None, ""):
            raise ValidationError(f"Record {position} of {portfolio_id} has no id")
        tx_id = str(tx_id)

        try:
            tx_type = TxType(str(record.get("tx_type") or "").strip().lower())
        except ValueError as e:
            raise ValidationError(f"Unknown tx_type: {record.get('tx_type')!r}", tx_id) from e

        price = record.get("price_usd")
        fee = record.get("fee_sat")
        return {
            "tx_id": tx_id,
            "portfolio_id": str(portfolio_id),
            "tx_type": tx_type.value,
            "amount_sat": parse_sat(record.get("amount_sat"), "amount_sat", tx_id),
            "fee_sat": 0 if fee in (None, "") else parse_sat(fee, "fee_sat", tx_id),
            "price_usd": (
                None if price in (None, "") else Decimal(to_cents(price, tx_id)).scaleb(-2)
            ),
            "transacted_at": parse_timestamp(record.get("transacted_at"), tx_id),
            "description": record.get("description"),
        }

    def add_records(self, portfolio_id: str, records: Iterable[Mapping[str, Any]]) -> int:
        """Insert raw records for ``portfolio_id`` in the given order."""
        rows = [self._to_row(portfolio_id, r, i) for i, r in enumerate(records)]
        count = self.create_many(rows)
        logger.info("Stored %d transactions for portfolio %s", count, portfolio_id)
        return count

    def fetch_records(self, portfolio_id: str) -> list[dict]:
        """All records of a portfolio read in one session, by time then insertion."""
        with self.get_session(readonly=True) as session:
            rows = self.get(
                order_by=[BtcTransaction.transacted_at, BtcTransaction.seq],
                session=session,
                portfolio_id=str(portfolio_id),
            )
            # rollback on exit expires the rows, so convert them first
            return [row.to_record() for row in rows]
