"""Strategy registry and the ``select_lots`` entry point."""

from costbasis.analytics.core.inventory import InventoryView
from costbasis.errors import UnsupportedMethodError
from costbasis.ledger.models import Lot

from .fifo import FIFO
from .hifo import HIFO
from .lifo import LIFO
from .strategy import MatchingStrategy

# Strategies are stateless, one shared instance each
STRATEGIES: dict[str, MatchingStrategy] = {
    "fifo": FIFO(),
    "lifo": LIFO(),
    "hifo": HIFO(),
}


def get_strategy(method: str | MatchingStrategy) -> MatchingStrategy:
    """Resolve a method name (case-insensitive) or pass a strategy through."""
    if isinstance(method, MatchingStrategy):
        return method
    strategy = STRATEGIES.get(str(method).strip().lower()) if method is not None else None
    if strategy is None:
        raise UnsupportedMethodError(str(method), list(STRATEGIES))
    return strategy


def select_lots(
    quantity_sat: int,
    snapshot: InventoryView,
    strategy: str | MatchingStrategy,
    disposal_id: str | None = None,
) -> list[tuple[Lot, int]]:
    """Pick lots for a disposal using the named strategy."""
    return get_strategy(strategy).select_lots(quantity_sat, snapshot, disposal_id)
