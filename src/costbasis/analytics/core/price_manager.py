"""Historical price lookups.

``PriceSource`` is the interface the ledger uses when a record has no price;
``PriceManager`` implements it over a daily close table held in pandas.
"""

from datetime import date, datetime
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Protocol

import pandas as pd

from costbasis.config.logger import get_logger
from costbasis.ledger.money import CENT

logger = get_logger(__name__)


class PriceSource(Protocol):
    """Anything that can answer "what was BTC worth on this day"."""

    def historical_price(self, when, currency: str = "usd") -> Decimal | None:
        """Price of one BTC in ``currency`` on the day of ``when``, or None."""


def _to_utc_day(when) -> pd.Timestamp:
    ts = pd.Timestamp(when)
    ts = ts.tz_localize("UTC") if ts.tzinfo is None else ts.tz_convert("UTC")
    return ts.normalize()


def _to_decimal(value) -> Decimal:
    if isinstance(value, (Decimal, str)):
        amount = Decimal(str(value))
    else:
        # numpy scalars and floats: go through the shortest float repr
        amount = Decimal(str(float(value)))
    return amount.quantize(CENT, rounding=ROUND_HALF_EVEN)


class PriceManager:
    """Daily BTC closes per fiat currency.

    Holds a DataFrame indexed by UTC day with one column per currency code
    (``usd``, ``eur``, ...). Lookups are exact by default; with
    ``max_staleness_days`` the most recent earlier close within that many days
    is used instead.
    """

    def __init__(self, prices_df: pd.DataFrame | None = None, max_staleness_days: int = 0):
        """Initialize with a price DataFrame (date index, currency columns)."""
        if prices_df is None or prices_df.empty:
            self.prices_df = pd.DataFrame(index=pd.DatetimeIndex([], tz="UTC"))
        else:
            df = prices_df.copy()
            index = pd.DatetimeIndex(pd.to_datetime(df.index))
            index = index.tz_localize("UTC") if index.tz is None else index.tz_convert("UTC")
            df.index = index.normalize()
            df.columns = [str(c).lower() for c in df.columns]
            # Keep the last quote when a day appears twice
            df = df[~df.index.duplicated(keep="last")]
            self.prices_df = df.sort_index()
        self.max_staleness_days = max_staleness_days

    @classmethod
    def from_records(
        cls, records: list[dict], currency: str = "usd", max_staleness_days: int = 0
    ) -> "PriceManager":
        """Build from ``[{"date": ..., "price": ...}, ...]`` rows."""
        if not records:
            return cls(max_staleness_days=max_staleness_days)
        df = pd.DataFrame(records)
        df = df.set_index("date")[["price"]].rename(columns={"price": currency.lower()})
        return cls(df, max_staleness_days=max_staleness_days)

    @classmethod
    def from_mapping(
        cls,
        prices: dict[date | datetime | str, object],
        currency: str = "usd",
        max_staleness_days: int = 0,
    ) -> "PriceManager":
        """Build from a ``{day: price}`` mapping."""
        records = [{"date": day, "price": price} for day, price in prices.items()]
        return cls.from_records(records, currency=currency, max_staleness_days=max_staleness_days)

    def historical_price(self, when, currency: str = "usd") -> Decimal | None:
        """Close on the UTC day of ``when``, or the nearest earlier one in range."""
        currency = currency.lower()
        if currency not in self.prices_df.columns:
            return None

        series = self.prices_df[currency].dropna()
        if series.empty:
            return None

        day = _to_utc_day(when)
        found = series.index.asof(day)
        if pd.isna(found):
            return None
        if (day - found).days > self.max_staleness_days:
            logger.debug(
                "Nearest %s price for %s is %s, outside %d-day window",
                currency,
                day.date(),
                found.date(),
                self.max_staleness_days,
            )
            return None
        return _to_decimal(series.loc[found])

    def latest_price(self, currency: str = "usd") -> tuple[pd.Timestamp, Decimal] | None:
        """Most recent close for ``currency`` with its day."""
        currency = currency.lower()
        if currency not in self.prices_df.columns:
            return None
        series = self.prices_df[currency].dropna()
        if series.empty:
            return None
        return series.index[-1], _to_decimal(series.iloc[-1])

    def get_available_currencies(self) -> list[str]:
        """Get list of all available currency columns."""
        return sorted(self.prices_df.columns)

    def get_date_range(self) -> tuple:
        """Get the available date range (start, end)."""
        if self.prices_df.empty:
            return None, None
        return self.prices_df.index.min(), self.prices_df.index.max()
