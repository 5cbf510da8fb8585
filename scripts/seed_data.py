import argparse

from ledger.core.logging import setup_logging
from ledger.core.money import Money
from ledger.database.engine import create_db_engine
from ledger.schemas.item import ItemCreate, ItemForm
from ledger.services.ledger import InventoryLedger


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample ledger items.")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Override DATABASE_URL from the environment.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    engine = create_db_engine(args.database_url)
    try:
        ledger = InventoryLedger(engine)
        ledger.run_migrations()

        if ledger.list_items():
            print("Seed skipped: items already exist.")
            return

        drafts = [
            ItemCreate(
                name="Cola (crate of 24)",
                buy_price=Money.from_minor_units(1440),
                sell_price=Money.from_minor_units(100),
                units_per_buy=24,
                amount_in_stock=48,
            ),
            ItemCreate(
                name="Chocolate bar (box of 90)",
                buy_price=Money.from_minor_units(4000),
                sell_price=Money.from_minor_units(100),
                units_per_buy=90,
                amount_in_stock=1000,
            ),
            ItemForm(
                name="Coffee beans (1 kg)",
                buy_price="18.75",
                sell_price="0.60",
                units_per_buy=60,
            ).to_create(),
        ]
        for draft in drafts:
            item = ledger.insert_item(draft)
            print("{:<28} profit per lot {}".format(item.name, ledger.format_money(item.profit)))
        print("Seed data created.")
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
