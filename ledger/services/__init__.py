from ledger.services.inventory_store import InventoryStore
from ledger.services.ledger import InventoryLedger
from ledger.services.stock_mutator import StockMutator

__all__ = [
    "InventoryLedger",
    "InventoryStore",
    "StockMutator",
]
