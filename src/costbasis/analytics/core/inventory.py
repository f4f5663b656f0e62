"""Open-lot inventory for one portfolio.

Lots are kept in two sorted key lists, chronological and by descending unit
cost, so each matching strategy can walk the lots in its own order without
re-sorting on every disposal.
"""

from bisect import bisect_left, insort
from collections.abc import Iterator
import dataclasses
from datetime import datetime

from costbasis.config.decorators import LoggerMixin
from costbasis.errors import InsufficientInventoryError, ValidationError
from costbasis.ledger.models import Lot

LotKey = tuple[datetime, int]


class InventoryView:
    """Immutable snapshot of the open lots, handed to matchers.

    Captures both orderings at the moment ``LotInventory.snapshot()`` is
    called; later consumption from the inventory does not show through.
    Lots themselves are frozen.
    """

    __slots__ = ("_oldest", "_by_cost", "_by_id", "_total")

    def __init__(self, oldest: tuple[Lot, ...], by_cost: tuple[Lot, ...]):
        self._oldest = oldest
        self._by_cost = by_cost
        self._by_id = {lot.id: lot for lot in oldest}
        self._total = sum(lot.remaining_quantity_sat for lot in oldest)

    def __len__(self) -> int:
        return len(self._oldest)

    def __iter__(self) -> Iterator[Lot]:
        return self.oldest_first()

    @property
    def total_remaining_sat(self) -> int:
        return self._total

    def get(self, lot_id: str) -> Lot | None:
        return self._by_id.get(lot_id)

    def oldest_first(self) -> Iterator[Lot]:
        return iter(self._oldest)

    def newest_first(self) -> Iterator[Lot]:
        return reversed(self._oldest)

    def highest_cost_first(self) -> Iterator[Lot]:
        """Highest unit cost first; equal costs oldest first."""
        return iter(self._by_cost)


class LotInventory(LoggerMixin):
    """Ordered collection of open lots keyed by (acquisition_date, sequence)."""

    def __init__(self, lots: list[Lot] | None = None):
        super().__init__()
        self._lots: dict[LotKey, Lot] = {}
        self._keys_by_id: dict[str, LotKey] = {}
        self._chrono: list[LotKey] = []
        self._by_cost: list[tuple[int, LotKey]] = []
        self.total_remaining_sat = 0
        for lot in lots or ():
            self.add_lot(lot)

    def __len__(self) -> int:
        return len(self._lots)

    def __contains__(self, lot_id: str) -> bool:
        return lot_id in self._keys_by_id

    def add_lot(self, lot: Lot) -> None:
        """Insert a new open lot."""
        if lot.id in self._keys_by_id:
            raise ValidationError("Lot already in inventory", lot.id)
        if not lot.is_open:
            self.logger.debug("Ignoring empty lot %s", lot.id)
            return
        key = lot.key
        if key in self._lots:
            raise ValidationError(f"Lot key {key} already taken by {self._lots[key].id}", lot.id)
        self._lots[key] = lot
        self._keys_by_id[lot.id] = key
        insort(self._chrono, key)
        insort(self._by_cost, (-lot.unit_cost_usd_cents, key))
        self.total_remaining_sat += lot.remaining_quantity_sat

    def consume(self, lot_id: str, amount: int) -> Lot:
        """Take ``amount`` sat from a lot and return the updated lot.

        The unit cost is untouched. A lot that reaches zero leaves the open
        set.
        """
        key = self._keys_by_id.get(lot_id)
        if key is None:
            raise InsufficientInventoryError(amount, 0)
        lot = self._lots[key]
        if amount <= 0:
            raise ValidationError(f"Consumption must be positive, got {amount}", lot_id)
        if amount > lot.remaining_quantity_sat:
            raise InsufficientInventoryError(amount, lot.remaining_quantity_sat)

        updated = dataclasses.replace(
            lot, remaining_quantity_sat=lot.remaining_quantity_sat - amount
        )
        self.total_remaining_sat -= amount
        if updated.is_open:
            self._lots[key] = updated
        else:
            self._remove(updated)
        return updated

    def _remove(self, lot: Lot) -> None:
        key = lot.key
        del self._lots[key]
        del self._keys_by_id[lot.id]
        del self._chrono[bisect_left(self._chrono, key)]
        cost_entry = (-lot.unit_cost_usd_cents, key)
        del self._by_cost[bisect_left(self._by_cost, cost_entry)]

    def snapshot(self) -> InventoryView:
        """Open lots as they stand now, in every matching order."""
        lots = self._lots
        return InventoryView(
            tuple(lots[key] for key in self._chrono),
            tuple(lots[key] for _, key in self._by_cost),
        )

    def open_lots(self) -> tuple[Lot, ...]:
        """Open lots, oldest first."""
        return tuple(self._lots[key] for key in self._chrono)
