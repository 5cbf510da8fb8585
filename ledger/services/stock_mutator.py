"""Unit stock changes on a single item.

The default path reads the item, adjusts ``amount_in_stock`` in memory and
writes the whole row back. Nothing locks the row between the read and the
write, so two concurrent increments that read the same value both write
``value + 1`` and one of them is lost. No floor is applied either: stock can
go negative.

``atomic=True`` keeps the same inputs, results and errors but lets the
database compute ``amount_in_stock + delta`` in a single UPDATE, which
closes the lost-update window.
"""
import logging
from typing import Optional

from ledger.config import get_settings
from ledger.core.dates import utc_now
from ledger.schemas.item import ItemRead
from ledger.services.inventory_store import InventoryStore

logger = logging.getLogger(__name__)


class StockMutator:
    def __init__(self, store: InventoryStore, *, atomic: Optional[bool] = None):
        if atomic is None:
            atomic = get_settings().STOCK_ATOMIC_UPDATES
        self._store = store
        self._atomic = atomic

    @property
    def atomic(self) -> bool:
        return self._atomic

    def increment(self, item_id: int) -> ItemRead:
        return self.apply_delta(item_id, 1)

    def decrement(self, item_id: int) -> ItemRead:
        return self.apply_delta(item_id, -1)

    def apply_delta(self, item_id: int, delta: int) -> ItemRead:
        if self._atomic:
            updated = self._store.adjust_stock_atomic(item_id, delta)
        else:
            updated = self._read_transform_write(item_id, delta)
        logger.debug(
            "Stock of item %d changed by %+d to %d.",
            item_id,
            delta,
            updated.amount_in_stock,
            extra={"item_id": item_id, "delta": delta},
        )
        return updated

    def _read_transform_write(self, item_id: int, delta: int) -> ItemRead:
        item = self._store.get_item(item_id)
        item = item.model_copy(update={"amount_in_stock": item.amount_in_stock + delta})
        updated = self._store.update_item(item)
        self._store.record_stock_change(item_id, delta, utc_now())
        return updated


__all__ = ["StockMutator"]
