"""BTC transaction ORM model."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import BigInteger, CheckConstraint, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, UTCDateTime


class BtcTransaction(Base):
    """Raw BTC transaction as recorded for a portfolio.

    ``tx_type`` is stored as plain text; the ledger validates it when the
    records are replayed. ``seq`` preserves insertion order for events that
    share a timestamp.
    """

    __tablename__ = "btc_transaction"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tx_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)
    portfolio_id: Mapped[str] = mapped_column(String(64), nullable=False)
    tx_type: Mapped[str] = mapped_column(String(16), nullable=False)
    amount_sat: Mapped[int] = mapped_column(BigInteger, nullable=False)
    fee_sat: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    price_usd: Mapped[Decimal | None] = mapped_column(Numeric(18, 2))
    transacted_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    description: Mapped[str | None] = mapped_column(Text)

    __table_args__ = (
        CheckConstraint("fee_sat >= 0", name="btc_transaction_fee_positive"),
        Index("idx_btc_transaction_portfolio", "portfolio_id"),
        Index("idx_btc_transaction_portfolio_date", "portfolio_id", "transacted_at"),
    )

    def to_record(self) -> dict:
        """Raw record in the shape the ledger ingests."""
        return {
            "id": self.tx_id,
            "tx_type": self.tx_type,
            "amount_sat": self.amount_sat,
            "fee_sat": self.fee_sat,
            "price_usd": self.price_usd,
            "transacted_at": self.transacted_at,
            "description": self.description,
        }

    def __str__(self):
        return (
            f"BtcTransaction({self.transacted_at}, {self.portfolio_id}, {self.tx_type}, "
            f"{self.amount_sat} sat @ {self.price_usd})"
        )
