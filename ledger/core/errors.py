from typing import Optional


class LedgerError(Exception):
    """Base class for every error the ledger core raises."""


class StorageError(LedgerError):
    """The backing store is unreachable or rejected a statement."""


class NotFound(LedgerError):
    def __init__(self, item_id, message: Optional[str] = None):
        self.item_id = item_id
        super().__init__(message or "Item {} not found.".format(item_id))


class ValidationError(LedgerError):
    """Input breaks an item invariant; raised before any store I/O."""


class MigrationError(LedgerError):
    """A schema migration failed; the process must not serve requests."""


__all__ = [
    "LedgerError",
    "MigrationError",
    "NotFound",
    "StorageError",
    "ValidationError",
]
