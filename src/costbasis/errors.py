"""Error taxonomy for cost-basis computations.

Every failure raised by the engine derives from ``CostBasisError`` so callers can
tell engine failures apart from programming errors, and each subclass names a
distinct kind of problem.
"""


class CostBasisError(Exception):
    """Base class for all cost-basis engine errors."""


class ValidationError(CostBasisError):
    """A raw transaction record or configuration value is malformed."""

    def __init__(self, message: str, record_id: str | None = None):
        self.record_id = record_id
        prefix = f"[{record_id}] " if record_id else ""
        super().__init__(f"{prefix}{message}")


class InsufficientInventoryError(CostBasisError):
    """A disposal asks for more satoshi than the open lots hold."""

    def __init__(self, requested_sat: int, available_sat: int, disposal_id: str | None = None):
        self.requested_sat = requested_sat
        self.available_sat = available_sat
        self.disposal_id = disposal_id
        where = f" for disposal {disposal_id}" if disposal_id else ""
        super().__init__(
            f"Insufficient inventory{where}: requested {requested_sat} sat, "
            f"only {available_sat} sat open"
        )


class UnsupportedMethodError(CostBasisError):
    """An unknown lot-matching method was requested."""

    def __init__(self, method: str, available: list[str]):
        self.method = method
        self.available = available
        super().__init__(
            f"Unknown matching method: {method!r}. Available methods: {available}"
        )


class MissingPriceError(CostBasisError):
    """No price is recorded and the price collaborator could not supply one."""

    def __init__(self, record_id: str, when, currency: str = "usd"):
        self.record_id = record_id
        self.when = when
        self.currency = currency
        super().__init__(
            f"No {currency.upper()} price for transaction {record_id} at {when}"
        )
