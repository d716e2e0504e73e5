from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Dict, Iterable, List, Optional, Protocol, Tuple
import logging
import uuid

from app.core.config import settings
from app.models.budget import Budget
from app.services.transaction_store import SpendTotals

logger = logging.getLogger(__name__)

WindowKey = Tuple[uuid.UUID, uuid.UUID, date, date]  # user, category, start, end


class TransactionStore(Protocol):
    def sum_expenses_by_category_and_window(
        self,
        user_id: uuid.UUID,
        category_id: uuid.UUID,
        start_date: date,
        end_date: date,
    ) -> SpendTotals:
        ...


class SpendAggregator:
    """
    Computes spent amount and transaction count for budgets.

    Budgets that share a (category, start, end) window are resolved with a
    single store query. Distinct windows are queried on a thread pool whose
    size never exceeds ``max_workers`` nor the number of windows.
    Store failures propagate as ``AggregationFailureError``; they are never
    reported as zero spend.
    """

    def __init__(self, store: TransactionStore, max_workers: Optional[int] = None):
        self.store = store
        self.max_workers = max(1, max_workers or settings.SPEND_AGGREGATION_MAX_WORKERS)

    def aggregate(self, budget: Budget) -> SpendTotals:
        return self._query(_window_of(budget))

    def aggregate_many(self, budgets: Iterable[Budget]) -> Dict[uuid.UUID, SpendTotals]:
        """Map each budget id to its spend totals"""
        budgets = list(budgets)
        if not budgets:
            return {}

        windows: Dict[WindowKey, List[uuid.UUID]] = {}
        for budget in budgets:
            windows.setdefault(_window_of(budget), []).append(budget.id)

        keys = list(windows)
        workers = min(self.max_workers, len(keys))
        logger.debug(f"Aggregating spend for {len(budgets)} budgets over {len(keys)} windows ({workers} workers)")

        if workers == 1:
            results = [self._query(key) for key in keys]
        else:
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="spend-agg") as pool:
                results = list(pool.map(self._query, keys))

        totals: Dict[uuid.UUID, SpendTotals] = {}
        for key, result in zip(keys, results):
            for budget_id in windows[key]:
                totals[budget_id] = result
        return totals

    def _query(self, key: WindowKey) -> SpendTotals:
        user_id, category_id, start_date, end_date = key
        return self.store.sum_expenses_by_category_and_window(
            user_id, category_id, start_date, end_date
        )


def _window_of(budget: Budget) -> WindowKey:
    return (budget.user_id, budget.category_id, budget.start_date, budget.end_date)
