"""HIFO lot-matching strategy implementation."""

from .strategy import MatchingStrategy


class HIFO(MatchingStrategy):
    """HIFO (Highest In, First Out): highest unit cost first.

    Lots with equal unit cost are taken oldest first, which keeps the choice
    deterministic and favours long-term treatment.
    """

    name = "hifo"

    def ordered_lots(self, snapshot):
        return snapshot.highest_cost_first()
