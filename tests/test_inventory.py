"""Tests for LotInventory and its read-only view."""

from datetime import datetime, timezone
import unittest

import pytest

from costbasis import InsufficientInventoryError, Lot, LotInventory, ValidationError


def make_lot(lot_id, day, quantity, unit_cost, sequence=0, remaining=None):
    return Lot(
        id=lot_id,
        acquisition_date=datetime(2023, 1, day, tzinfo=timezone.utc),
        original_quantity_sat=quantity,
        remaining_quantity_sat=quantity if remaining is None else remaining,
        unit_cost_usd_cents=unit_cost,
        source_transaction_id=lot_id,
        sequence=sequence,
    )


class TestLotInventory(unittest.TestCase):
    """Inventory bookkeeping and ordering."""

    def setUp(self):
        self.inventory = LotInventory(
            [
                make_lot("old", 1, 1000, 2_000_000, sequence=0),
                make_lot("mid", 2, 2000, 4_000_000, sequence=1),
                make_lot("new", 3, 3000, 3_000_000, sequence=2),
            ]
        )

    def test_totals(self):
        self.assertEqual(len(self.inventory), 3)
        self.assertEqual(self.inventory.total_remaining_sat, 6000)
        self.assertIn("mid", self.inventory)

    def test_view_orders(self):
        view = self.inventory.snapshot()
        self.assertEqual([lot.id for lot in view.oldest_first()], ["old", "mid", "new"])
        self.assertEqual([lot.id for lot in view.newest_first()], ["new", "mid", "old"])
        self.assertEqual(
            [lot.id for lot in view.highest_cost_first()], ["mid", "new", "old"]
        )
        self.assertEqual([lot.id for lot in view], ["old", "mid", "new"])
        self.assertEqual(view.total_remaining_sat, 6000)
        self.assertEqual(view.get("new").remaining_quantity_sat, 3000)
        self.assertIsNone(view.get("missing"))

    def test_view_is_read_only(self):
        view = self.inventory.snapshot()
        self.assertFalse(hasattr(view, "consume"))
        self.assertFalse(hasattr(view, "add_lot"))
        with self.assertRaises(AttributeError):
            view.extra = 1

    def test_snapshot_unchanged_by_later_consumption(self):
        view = self.inventory.snapshot()
        self.inventory.consume("old", 1000)
        self.inventory.consume("mid", 500)

        self.assertEqual(view.total_remaining_sat, 6000)
        self.assertEqual(len(view), 3)
        self.assertEqual([lot.id for lot in view], ["old", "mid", "new"])
        self.assertEqual(view.get("mid").remaining_quantity_sat, 2000)
        self.assertEqual(self.inventory.snapshot().total_remaining_sat, 4500)

    def test_consume_while_walking_snapshot(self):
        view = self.inventory.snapshot()
        walked = []
        for lot in view.oldest_first():
            walked.append(lot.id)
            self.inventory.consume(lot.id, lot.remaining_quantity_sat)
        self.assertEqual(walked, ["old", "mid", "new"])
        self.assertEqual(len(self.inventory), 0)

    def test_partial_consume_keeps_unit_cost(self):
        updated = self.inventory.consume("mid", 500)
        self.assertEqual(updated.remaining_quantity_sat, 1500)
        self.assertEqual(updated.original_quantity_sat, 2000)
        self.assertEqual(updated.unit_cost_usd_cents, 4_000_000)
        self.assertEqual(self.inventory.total_remaining_sat, 5500)
        self.assertEqual(self.inventory.snapshot().get("mid"), updated)

    def test_full_consume_closes_lot(self):
        updated = self.inventory.consume("old", 1000)
        self.assertFalse(updated.is_open)
        self.assertNotIn("old", self.inventory)
        self.assertEqual([lot.id for lot in self.inventory.open_lots()], ["mid", "new"])
        self.assertEqual(
            [lot.id for lot in self.inventory.snapshot().highest_cost_first()], ["mid", "new"]
        )

    def test_over_consume_raises(self):
        with self.assertRaises(InsufficientInventoryError) as ctx:
            self.inventory.consume("old", 1001)
        self.assertEqual(ctx.exception.requested_sat, 1001)
        self.assertEqual(ctx.exception.available_sat, 1000)
        self.assertEqual(self.inventory.total_remaining_sat, 6000)

    def test_unknown_lot_raises(self):
        with self.assertRaises(InsufficientInventoryError):
            self.inventory.consume("nope", 1)

    def test_non_positive_consume_raises(self):
        with self.assertRaises(ValidationError):
            self.inventory.consume("old", 0)

    def test_duplicate_lot_rejected(self):
        with self.assertRaises(ValidationError):
            self.inventory.add_lot(make_lot("old", 5, 10, 1))
        with self.assertRaises(ValidationError):
            self.inventory.add_lot(make_lot("other", 1, 10, 1, sequence=0))

    def test_empty_lot_ignored(self):
        self.inventory.add_lot(make_lot("empty", 9, 10, 1, sequence=9, remaining=0))
        self.assertNotIn("empty", self.inventory)


def test_equal_cost_lots_taken_oldest_first():
    inventory = LotInventory(
        [
            make_lot("b", 2, 10, 100, sequence=1),
            make_lot("a", 1, 10, 100, sequence=0),
            make_lot("c", 2, 10, 100, sequence=2),
        ]
    )
    assert [lot.id for lot in inventory.snapshot().highest_cost_first()] == ["a", "b", "c"]


def test_lot_quantity_bounds_enforced():
    with pytest.raises(ValidationError, match="bad"):
        make_lot("bad", 1, 10, 1, remaining=11)


def test_lot_remaining_cost_basis():
    lot = make_lot("x", 1, 3, 50_000_000, remaining=2)
    # cumulative cost: round(1 * 0.5) = 0, round(3 * 0.5) = 2
    assert lot.total_cost_usd_cents == 2
    assert lot.remaining_cost_basis_usd_cents == 2
