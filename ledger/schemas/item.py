from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from ledger.core.money import Money


class ItemBase(BaseModel):
    name: str
    buy_price: Money
    sell_price: Money
    units_per_buy: int
    amount_in_stock: int = 0

    @property
    def profit(self) -> Money:
        """Profit per purchase lot, not per unit."""
        return self.units_per_buy * self.sell_price - self.buy_price


class ItemCreate(ItemBase):
    pass


class ItemRead(ItemBase):
    id: int

    model_config = ConfigDict(from_attributes=True)

    def as_draft(self) -> ItemCreate:
        return ItemCreate(
            name=self.name,
            buy_price=self.buy_price,
            sell_price=self.sell_price,
            units_per_buy=self.units_per_buy,
            amount_in_stock=self.amount_in_stock,
        )


class ItemForm(BaseModel):
    name: str
    buy_price: Decimal
    sell_price: Decimal
    units_per_buy: int

    def to_create(self) -> ItemCreate:
        return ItemCreate(
            name=self.name,
            buy_price=Money.from_decimal(self.buy_price),
            sell_price=Money.from_decimal(self.sell_price),
            units_per_buy=self.units_per_buy,
            amount_in_stock=0,
        )


class StockChangeRead(BaseModel):
    id: int
    item_id: int
    amount: int
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)
