"""Integer money helpers.

Quantities are satoshi and fiat amounts are cents, both plain ``int``. Prices
are cents per whole BTC. Decimal text only appears at the edges: when a price is
ingested and when a value is rendered for output.
"""

from decimal import ROUND_HALF_EVEN, Decimal, InvalidOperation

from costbasis.errors import ValidationError

SAT_PER_BTC = 100_000_000
CENT = Decimal("0.01")


def to_cents(value, record_id: str | None = None) -> int:
    """Convert a decimal fiat amount (e.g. ``"20000.00"``) to integer cents.

    Floats go through their shortest repr so ``0.1`` becomes ``Decimal("0.1")``
    rather than its binary expansion. Rounds half-to-even to the cent.
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid price: {value!r}", record_id)
    if isinstance(value, int):
        return value * 100
    try:
        amount = (
            Decimal(repr(float(value)))
            if isinstance(value, float)
            else Decimal(str(value).strip())
        )
        if not amount.is_finite():
            raise ValidationError(f"Invalid price: {value!r}", record_id)
        return int(amount.quantize(CENT, rounding=ROUND_HALF_EVEN) * 100)
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"Invalid price: {value!r}", record_id) from e


def div_round_half_even(numerator: int, denominator: int) -> int:
    """Divide two integers, rounding the exact quotient half-to-even."""
    if denominator <= 0:
        raise ValueError("denominator must be positive")
    quotient, remainder = divmod(numerator, denominator)
    twice = 2 * remainder
    if twice > denominator or (twice == denominator and quotient % 2 == 1):
        quotient += 1
    return quotient


def fiat_value(quantity_sat: int, price_cents: int) -> int:
    """Value of ``quantity_sat`` at ``price_cents`` per BTC, in cents."""
    return div_round_half_even(quantity_sat * price_cents, SAT_PER_BTC)


def allocate(numerators: list[int], denominator: int) -> list[int]:
    """Split ``round(sum(numerators) / denominator)`` into integer shares.

    Each share is its own quotient floored, then the leftover units go to the
    largest remainders (earliest position wins ties). Shares always add up to
    the rounded total.
    """
    if not numerators:
        return []
    total = div_round_half_even(sum(numerators), denominator)
    shares = []
    remainders = []
    for index, numerator in enumerate(numerators):
        share, remainder = divmod(numerator, denominator)
        shares.append(share)
        remainders.append((-remainder, index))
    leftover = total - sum(shares)
    for _, index in sorted(remainders)[:leftover]:
        shares[index] += 1
    return shares


def format_cents(cents: int) -> str:
    """Render cents as a fixed 2-decimal string, e.g. ``-1005 -> "-10.05"``."""
    sign = "-" if cents < 0 else ""
    whole, frac = divmod(abs(cents), 100)
    return f"{sign}{whole}.{frac:02d}"


def format_sat(sat: int) -> str:
    """Render satoshi as a fixed 8-decimal BTC string."""
    sign = "-" if sat < 0 else ""
    whole, frac = divmod(abs(sat), SAT_PER_BTC)
    return f"{sign}{whole}.{frac:08d}"
