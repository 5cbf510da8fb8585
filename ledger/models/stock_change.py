from datetime import datetime, timezone

from sqlalchemy import Column, Integer

from ledger.database.base import Base
from ledger.database.types import UtcDateTime


class StockChange(Base):
    __tablename__ = "stock_changes"

    id = Column(Integer, primary_key=True)
    # Plain reference: items may be removed without touching their history.
    item_id = Column(Integer, nullable=False)
    amount = Column(Integer, nullable=False)
    timestamp = Column(
        UtcDateTime(),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )


__all__ = ["StockChange"]
