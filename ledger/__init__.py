from ledger.core.errors import LedgerError, MigrationError, NotFound, StorageError, ValidationError
from ledger.core.money import Money

__all__ = [
    "LedgerError",
    "MigrationError",
    "Money",
    "NotFound",
    "StorageError",
    "ValidationError",
]
