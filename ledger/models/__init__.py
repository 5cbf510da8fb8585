from ledger.models.item import Item
from ledger.models.stock_change import StockChange
from ledger.models.version import SchemaVersion

__all__ = [
    "Item",
    "SchemaVersion",
    "StockChange",
]
