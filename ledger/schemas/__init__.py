from ledger.schemas.item import ItemBase, ItemCreate, ItemForm, ItemRead, StockChangeRead

__all__ = ["ItemBase", "ItemCreate", "ItemForm", "ItemRead", "StockChangeRead"]
