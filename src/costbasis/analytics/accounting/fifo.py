"""FIFO lot-matching strategy implementation."""

from .strategy import MatchingStrategy


class FIFO(MatchingStrategy):
    """FIFO (First In, First Out): oldest acquisition first."""

    name = "fifo"

    def ordered_lots(self, snapshot):
        return snapshot.oldest_first()
