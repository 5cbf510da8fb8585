import argparse
import logging
import sys

from ledger.core.errors import MigrationError
from ledger.core.logging import setup_logging
from ledger.database.engine import create_db_engine
from ledger.database.migrations import run_migrations

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Bring the ledger schema to the latest version.")
    parser.add_argument(
        "--database-url",
        default=None,
        help="Override DATABASE_URL from the environment.",
    )
    return parser.parse_args()


def main() -> int:
    setup_logging()
    args = parse_args()

    engine = create_db_engine(args.database_url)
    try:
        version = run_migrations(engine)
    except MigrationError:
        logger.error("Migration failed; refusing to continue.")
        return 1
    finally:
        engine.dispose()

    print("Schema at version {}.".format(version))
    return 0


if __name__ == "__main__":
    sys.exit(main())
