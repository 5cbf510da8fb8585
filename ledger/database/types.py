from datetime import datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.types import TypeDecorator

from ledger.core.dates import normalize_utc
from ledger.core.money import Money, decode_money, encode_money


class MoneyType(TypeDecorator):
    """Stores Money as its integer minor units."""

    impl = Integer
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, Money):
            raise TypeError("MoneyType expects Money, got {}".format(type(value).__name__))
        return encode_money(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return decode_money(value)


class UtcDateTime(TypeDecorator):
    """Timezone-aware datetimes, normalised to UTC on the way in and out.

    SQLite drops the offset of ``DateTime(timezone=True)`` values, so naive
    results are read back as UTC. Naive inputs are taken to be UTC already.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if not isinstance(value, datetime):
            raise TypeError("UtcDateTime expects datetime, got {}".format(type(value).__name__))
        return normalize_utc(value)

    def process_result_value(self, value, dialect):
        return normalize_utc(value)


__all__ = ["MoneyType", "UtcDateTime"]
