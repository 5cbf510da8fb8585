from sqlalchemy import Column, Integer, String

from ledger.database.base import Base
from ledger.database.types import MoneyType


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)

    buy_price = Column(MoneyType, nullable=False)
    sell_price = Column(MoneyType, nullable=False)
    units_per_buy = Column(Integer, nullable=False)

    amount_in_stock = Column(Integer, nullable=False)


__all__ = ["Item"]
