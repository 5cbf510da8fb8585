import unittest
from datetime import datetime, timedelta, timezone

from sqlalchemy import event

from ledger.core.errors import NotFound, StorageError, ValidationError
from ledger.core.money import MONEY_MAX_MINOR_UNITS, MONEY_MIN_MINOR_UNITS, Money
from ledger.database.engine import create_db_engine
from ledger.database.migrations import run_migrations
from ledger.schemas.item import ItemCreate, ItemForm, ItemRead
from ledger.services.inventory_store import InventoryStore


def make_draft(**overrides):
    values = dict(
        name="Chocolate bar",
        buy_price=Money.from_minor_units(4000),
        sell_price=Money.from_minor_units(100),
        units_per_buy=90,
        amount_in_stock=1000,
    )
    values.update(overrides)
    return ItemCreate(**values)


class InventoryStoreTest(unittest.TestCase):
    def setUp(self):
        self.engine = create_db_engine("sqlite:///:memory:")
        run_migrations(self.engine)
        self.store = InventoryStore(self.engine)
        self.statements = []
        event.listen(self.engine, "before_cursor_execute", self._count_statement)

    def tearDown(self):
        event.remove(self.engine, "before_cursor_execute", self._count_statement)
        self.engine.dispose()

    def _count_statement(self, _conn, _cursor, statement, *_args):
        self.statements.append(statement)

    def test_empty_store_lists_nothing(self):
        self.assertEqual(self.store.list_items(), [])

    def test_get_missing_item(self):
        with self.assertRaises(NotFound) as ctx:
            self.store.get_item(999)
        self.assertEqual(ctx.exception.item_id, 999)

    def test_insert_then_get_round_trip(self):
        draft = make_draft()
        created = self.store.insert_item(draft)

        self.assertGreater(created.id, 0)
        fetched = self.store.get_item(created.id)
        self.assertEqual(fetched, created)
        self.assertEqual(fetched.as_draft(), draft)
        self.assertIsInstance(fetched.buy_price, Money)
        self.assertEqual(fetched.profit, Money(5000))

    def test_insert_assigns_unique_ids(self):
        first = self.store.insert_item(make_draft(name="Cola"))
        second = self.store.insert_item(make_draft(name="Crisps"))

        self.assertNotEqual(first.id, second.id)
        self.assertEqual([item.name for item in self.store.list_items()], ["Cola", "Crisps"])

    def test_insert_rejects_empty_name_without_io(self):
        for name in ("", "   "):
            with self.subTest(name=name):
                self.statements.clear()
                with self.assertRaises(ValidationError):
                    self.store.insert_item(make_draft(name=name))
                self.assertEqual(self.statements, [])
        self.assertEqual(self.store.list_items(), [])

    def test_insert_rejects_units_per_buy_below_one(self):
        for units in (0, -3):
            with self.subTest(units_per_buy=units):
                self.statements.clear()
                with self.assertRaises(ValidationError):
                    self.store.insert_item(make_draft(units_per_buy=units))
                self.assertEqual(self.statements, [])
        self.assertEqual(self.store.list_items(), [])

    def test_update_replaces_mutable_fields(self):
        created = self.store.insert_item(make_draft())
        changed = created.model_copy(
            update={
                "name": "Dark chocolate bar",
                "sell_price": Money.from_minor_units(120),
                "units_per_buy": 80,
                "amount_in_stock": -4,
            }
        )

        updated = self.store.update_item(changed)

        self.assertEqual(updated, changed)
        self.assertEqual(self.store.get_item(created.id), changed)

    def test_update_is_a_single_statement(self):
        created = self.store.insert_item(make_draft())
        self.statements.clear()

        self.store.update_item(created.model_copy(update={"amount_in_stock": 7}))

        self.assertEqual(len(self.statements), 1)
        self.assertTrue(self.statements[0].lstrip().upper().startswith("UPDATE"))

    def test_update_missing_item(self):
        ghost = ItemRead(id=999, **dict(make_draft()))
        with self.assertRaises(NotFound):
            self.store.update_item(ghost)

    def test_update_validates_before_io(self):
        created = self.store.insert_item(make_draft())
        self.statements.clear()

        with self.assertRaises(ValidationError):
            self.store.update_item(created.model_copy(update={"name": ""}))
        self.assertEqual(self.statements, [])

    def test_record_stock_change_is_append_only(self):
        created = self.store.insert_item(make_draft())
        when = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)

        change = self.store.record_stock_change(created.id, -2, when)
        self.store.record_stock_change(created.id, 5)

        self.assertGreater(change.id, 0)
        self.assertEqual(change.amount, -2)
        self.assertEqual(change.timestamp, when)
        changes = self.store.list_stock_changes(created.id)
        self.assertEqual([c.amount for c in changes], [-2, 5])
        self.assertEqual(self.store.list_stock_changes(created.id + 1), [])

    def test_stock_change_timestamp_reads_back_as_utc(self):
        created = self.store.insert_item(make_draft())
        when = datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc)
        local = datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2)))

        recorded = self.store.record_stock_change(created.id, 1, when)
        self.store.record_stock_change(created.id, 1, local)
        self.store.record_stock_change(created.id, 1, datetime(2024, 5, 1, 12, 30))

        stored = self.store.list_stock_changes(created.id)
        self.assertEqual(stored[0].timestamp, when)
        self.assertEqual(stored[0].timestamp, recorded.timestamp)
        for change in stored:
            self.assertEqual(change.timestamp, when)
            self.assertEqual(change.timestamp.utcoffset(), timedelta(0))

    def test_default_stock_change_timestamp_is_aware(self):
        created = self.store.insert_item(make_draft())
        recorded = self.store.record_stock_change(created.id, 1)

        stored = self.store.list_stock_changes(created.id)[0]
        self.assertIsNotNone(stored.timestamp.tzinfo)
        self.assertEqual(stored.timestamp, recorded.timestamp)

    def test_out_of_range_price_is_not_written(self):
        too_large = Money.from_minor_units(MONEY_MAX_MINOR_UNITS + 1)
        with self.assertRaises(StorageError):
            self.store.insert_item(make_draft(buy_price=too_large))
        self.assertEqual(self.store.list_items(), [])

        created = self.store.insert_item(make_draft())
        too_small = Money.from_minor_units(MONEY_MIN_MINOR_UNITS - 1)
        with self.assertRaises(StorageError):
            self.store.update_item(created.model_copy(update={"sell_price": too_small}))
        self.assertEqual(self.store.get_item(created.id), created)

    def test_stock_changes_outlive_item_reference(self):
        change = self.store.record_stock_change(4242, 1)
        self.assertEqual(change.item_id, 4242)

    def test_atomic_adjustment(self):
        created = self.store.insert_item(make_draft(amount_in_stock=10))

        updated = self.store.adjust_stock_atomic(created.id, -3)

        self.assertEqual(updated.amount_in_stock, 7)
        self.assertEqual(self.store.get_item(created.id).amount_in_stock, 7)
        self.assertEqual([c.amount for c in self.store.list_stock_changes(created.id)], [-3])

    def test_atomic_adjustment_missing_item(self):
        with self.assertRaises(NotFound):
            self.store.adjust_stock_atomic(999, 1)
        self.assertEqual(self.store.list_stock_changes(999), [])

    def test_item_form_converts_decimal_prices(self):
        draft = ItemForm(
            name="Coffee beans",
            buy_price="18.75",
            sell_price="0.605",
            units_per_buy=60,
        ).to_create()

        created = self.store.insert_item(draft)

        self.assertEqual(created.buy_price.to_minor_units(), 1875)
        self.assertEqual(created.sell_price.to_minor_units(), 61)
        self.assertEqual(created.amount_in_stock, 0)


class InventoryStoreStorageErrorTest(unittest.TestCase):
    def test_missing_schema_surfaces_storage_error(self):
        engine = create_db_engine("sqlite:///:memory:")
        try:
            store = InventoryStore(engine)
            with self.assertRaises(StorageError):
                store.list_items()
            with self.assertRaises(StorageError):
                store.insert_item(make_draft())
            with self.assertRaises(StorageError):
                store.record_stock_change(1, 1)
        finally:
            engine.dispose()


if __name__ == "__main__":
    unittest.main()
