from typing import Optional

from sqlalchemy.engine import Engine

from ledger.config import get_settings
from ledger.core.errors import MigrationError
from ledger.core.money import Money
from ledger.database.engine import get_engine
from ledger.database.migrations import SchemaMigrator
from ledger.schemas.item import ItemCreate, ItemRead, StockChangeRead
from ledger.services.inventory_store import InventoryStore
from ledger.services.stock_mutator import StockMutator


class InventoryLedger:
    """Entry point for HTTP handlers, scripts and tests.

    The engine is owned by the caller and shared by reference. Data calls are
    refused until ``run_migrations`` has completed on this instance.
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        *,
        atomic_stock_updates: Optional[bool] = None,
        currency_symbol: Optional[str] = None,
    ):
        self._engine = engine or get_engine()
        self._migrator = SchemaMigrator(self._engine)
        self._store = InventoryStore(self._engine)
        self._mutator = StockMutator(self._store, atomic=atomic_stock_updates)
        self._schema_version: Optional[int] = None
        self._currency_symbol = currency_symbol or get_settings().CURRENCY_SYMBOL

    @property
    def store(self) -> InventoryStore:
        return self._store

    @property
    def schema_version(self) -> Optional[int]:
        return self._schema_version

    @property
    def currency_symbol(self) -> str:
        return self._currency_symbol

    def format_money(self, value: Money) -> str:
        return value.format(self._currency_symbol)

    def run_migrations(self) -> int:
        self._schema_version = self._migrator.run()
        return self._schema_version

    def list_items(self) -> list[ItemRead]:
        self._require_schema()
        return self._store.list_items()

    def get_item(self, item_id: int) -> ItemRead:
        self._require_schema()
        return self._store.get_item(item_id)

    def insert_item(self, draft: ItemCreate) -> ItemRead:
        self._require_schema()
        return self._store.insert_item(draft)

    def update_item(self, item: ItemRead) -> ItemRead:
        self._require_schema()
        return self._store.update_item(item)

    def increment(self, item_id: int) -> ItemRead:
        self._require_schema()
        return self._mutator.increment(item_id)

    def decrement(self, item_id: int) -> ItemRead:
        self._require_schema()
        return self._mutator.decrement(item_id)

    def list_stock_changes(self, item_id: int) -> list[StockChangeRead]:
        self._require_schema()
        return self._store.list_stock_changes(item_id)

    def _require_schema(self) -> None:
        if self._schema_version is None:
            raise MigrationError("run_migrations() must complete before the ledger is used.")


__all__ = ["InventoryLedger"]
