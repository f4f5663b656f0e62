"""Engine configuration read from the environment."""

import os

from dotenv import load_dotenv

from costbasis.errors import ValidationError

PRICE_MODES = ("strict", "lenient")
LONG_TERM_RULES = ("days", "calendar")


class EngineConfig:
    """Settings for a cost-basis computation.

    Values come from environment variables (a ``.env`` file is honoured), and
    keyword arguments override them. Attributes are validated on construction.
    """

    def __init__(self, **overrides):
        """Initialize configuration from environment variables."""
        load_dotenv()

        self.default_method = os.getenv("COSTBASIS_DEFAULT_METHOD", "fifo").lower()
        self.price_mode = os.getenv("COSTBASIS_PRICE_MODE", "strict").lower()
        self.long_term_rule = os.getenv("COSTBASIS_LONG_TERM_RULE", "days").lower()
        self.long_term_days = self._parse_int(
            "COSTBASIS_LONG_TERM_DAYS", os.getenv("COSTBASIS_LONG_TERM_DAYS", "365")
        )
        self.price_max_staleness_days = self._parse_int(
            "COSTBASIS_PRICE_MAX_STALENESS_DAYS",
            os.getenv("COSTBASIS_PRICE_MAX_STALENESS_DAYS", "0"),
        )
        self.fiat_currency = os.getenv("COSTBASIS_FIAT_CURRENCY", "usd").lower()

        for name, value in overrides.items():
            if not hasattr(self, name):
                raise ValidationError(f"Unknown configuration option: {name}")
            setattr(self, name, value)

        self.validate()

    @staticmethod
    def _parse_int(name: str, raw: str) -> int:
        try:
            return int(raw)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"{name} must be an integer, got {raw!r}") from e

    @property
    def lenient(self) -> bool:
        return self.price_mode == "lenient"

    def validate(self):
        """Raise ValidationError for out-of-range settings."""
        if self.price_mode not in PRICE_MODES:
            raise ValidationError(
                f"price_mode must be one of {PRICE_MODES}, got {self.price_mode!r}"
            )
        if self.long_term_rule not in LONG_TERM_RULES:
            raise ValidationError(
                f"long_term_rule must be one of {LONG_TERM_RULES}, got {self.long_term_rule!r}"
            )
        if self.long_term_days < 0:
            raise ValidationError("long_term_days must not be negative")
        if self.price_max_staleness_days < 0:
            raise ValidationError("price_max_staleness_days must not be negative")

    def __repr__(self):
        return (
            f"EngineConfig(default_method={self.default_method!r}, "
            f"price_mode={self.price_mode!r}, long_term_rule={self.long_term_rule!r}, "
            f"long_term_days={self.long_term_days})"
        )
