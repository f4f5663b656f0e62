"""LIFO lot-matching strategy implementation."""

from .strategy import MatchingStrategy


class LIFO(MatchingStrategy):
    """LIFO (Last In, First Out): newest acquisition first.

    Lots acquired at the same instant are taken in reverse ledger order.
    """

    name = "lifo"

    def ordered_lots(self, snapshot):
        return snapshot.newest_first()
