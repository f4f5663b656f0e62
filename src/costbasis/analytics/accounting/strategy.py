"""Abstract base class for lot-matching strategies."""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from costbasis.analytics.core.inventory import InventoryView
from costbasis.errors import InsufficientInventoryError, ValidationError
from costbasis.ledger.models import Lot


class MatchingStrategy(ABC):
    """Decides which open lots satisfy a disposal, and in what order."""

    name: str = ""

    @abstractmethod
    def ordered_lots(self, snapshot: InventoryView) -> Iterator[Lot]:
        """Yield open lots in the order this strategy consumes them."""

    def select_lots(
        self, quantity_sat: int, snapshot: InventoryView, disposal_id: str | None = None
    ) -> list[tuple[Lot, int]]:
        """Pick ``(lot, amount)`` pairs that add up exactly to ``quantity_sat``.

        Raises:
            InsufficientInventoryError: the open lots hold less than requested.
        """
        if quantity_sat <= 0:
            raise ValidationError(
                f"Disposal quantity must be positive, got {quantity_sat}", disposal_id
            )

        available = snapshot.total_remaining_sat
        if available < quantity_sat:
            raise InsufficientInventoryError(quantity_sat, available, disposal_id)

        picks = []
        remaining = quantity_sat
        for lot in self.ordered_lots(snapshot):
            take = min(lot.remaining_quantity_sat, remaining)
            picks.append((lot, take))
            remaining -= take
            if remaining == 0:
                break
        return picks

    def __repr__(self):
        return f"{self.__class__.__name__}()"
