import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ledger.core.dates import normalize_utc, utc_now
from ledger.core.errors import NotFound, StorageError, ValidationError
from ledger.models.item import Item
from ledger.models.stock_change import StockChange
from ledger.schemas.item import ItemBase, ItemCreate, ItemRead, StockChangeRead

logger = logging.getLogger(__name__)

_ITEM_COLUMNS = (
    Item.id,
    Item.name,
    Item.buy_price,
    Item.sell_price,
    Item.units_per_buy,
    Item.amount_in_stock,
)


def validate_item(item: ItemBase) -> None:
    if not item.name or not item.name.strip():
        raise ValidationError("Item name must not be empty.")
    if item.units_per_buy < 1:
        raise ValidationError(
            "units_per_buy must be at least 1, got {}.".format(item.units_per_buy)
        )


class InventoryStore:
    """Typed access to ``items`` and append-only writes to ``stock_changes``.

    Every call issues one statement on a short-lived session drawn from the
    shared engine. Requires the schema from ``run_migrations``.
    """

    def __init__(self, engine: Engine):
        self._engine = engine
        self._sessions = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    def list_items(self) -> list[ItemRead]:
        db = self._sessions()
        try:
            records = db.execute(select(Item).order_by(Item.id)).scalars().all()
            return [ItemRead.model_validate(record) for record in records]
        except SQLAlchemyError as exc:
            raise _storage_error("list items", exc) from exc
        finally:
            db.close()

    def get_item(self, item_id: int) -> ItemRead:
        db = self._sessions()
        try:
            record = db.execute(select(Item).where(Item.id == item_id)).scalars().first()
        except SQLAlchemyError as exc:
            raise _storage_error("load item {}".format(item_id), exc) from exc
        finally:
            db.close()
        if record is None:
            raise NotFound(item_id)
        return ItemRead.model_validate(record)

    def insert_item(self, draft: ItemCreate) -> ItemRead:
        validate_item(draft)
        record = Item(
            name=draft.name,
            buy_price=draft.buy_price,
            sell_price=draft.sell_price,
            units_per_buy=draft.units_per_buy,
            amount_in_stock=draft.amount_in_stock,
        )
        db = self._sessions()
        try:
            db.add(record)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise _storage_error("insert item {!r}".format(draft.name), exc) from exc
        finally:
            db.close()

        item = ItemRead.model_validate(record)
        logger.info("Inserted item %d (%s).", item.id, item.name, extra={"item_id": item.id})
        return item

    def update_item(self, item: ItemRead) -> ItemRead:
        validate_item(item)
        stmt = (
            update(Item)
            .where(Item.id == item.id)
            .values(
                name=item.name,
                buy_price=item.buy_price,
                sell_price=item.sell_price,
                units_per_buy=item.units_per_buy,
                amount_in_stock=item.amount_in_stock,
            )
            .returning(*_ITEM_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        return self._write_item(stmt, item.id, "update item {}".format(item.id))

    def adjust_stock_atomic(
        self,
        item_id: int,
        delta: int,
        timestamp: Optional[datetime] = None,
    ) -> ItemRead:
        """Add ``delta`` in the store itself and log the change, in one transaction.

        The new quantity is computed by the database, so concurrent callers
        cannot overwrite each other's adjustments.
        """
        stmt = (
            update(Item)
            .where(Item.id == item_id)
            .values(amount_in_stock=Item.amount_in_stock + delta)
            .returning(*_ITEM_COLUMNS)
            .execution_options(synchronize_session=False)
        )
        change = insert(StockChange).values(
            item_id=item_id,
            amount=delta,
            timestamp=normalize_utc(timestamp) or utc_now(),
        )
        return self._write_item(
            stmt,
            item_id,
            "adjust stock of item {}".format(item_id),
            follow_up=change,
        )

    def record_stock_change(
        self,
        item_id: int,
        amount: int,
        timestamp: Optional[datetime] = None,
    ) -> StockChangeRead:
        record = StockChange(
            item_id=item_id,
            amount=amount,
            timestamp=normalize_utc(timestamp) or utc_now(),
        )
        db = self._sessions()
        try:
            db.add(record)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise _storage_error("record stock change for item {}".format(item_id), exc) from exc
        finally:
            db.close()
        return StockChangeRead.model_validate(record)

    def list_stock_changes(self, item_id: int) -> list[StockChangeRead]:
        db = self._sessions()
        try:
            records = (
                db.execute(
                    select(StockChange)
                    .where(StockChange.item_id == item_id)
                    .order_by(StockChange.id)
                )
                .scalars()
                .all()
            )
            return [StockChangeRead.model_validate(record) for record in records]
        except SQLAlchemyError as exc:
            raise _storage_error("list stock changes for item {}".format(item_id), exc) from exc
        finally:
            db.close()

    def _write_item(self, stmt, item_id: int, action: str, *, follow_up=None) -> ItemRead:
        db = self._sessions()
        try:
            row = db.execute(stmt).first()
            if row is None:
                db.rollback()
                raise NotFound(item_id)
            if follow_up is not None:
                db.execute(follow_up)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise _storage_error(action, exc) from exc
        finally:
            db.close()
        return ItemRead.model_validate(dict(row._mapping))


def _storage_error(action: str, exc: SQLAlchemyError) -> StorageError:
    logger.error("Failed to %s: %s", action, exc)
    return StorageError("Failed to {}.".format(action))


__all__ = ["InventoryStore", "validate_item"]
