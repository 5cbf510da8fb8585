from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Union

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

MINOR_UNITS_PER_MAJOR = 100
DEFAULT_CURRENCY_SYMBOL = "€"

# Persisted as a 32-bit signed INTEGER column: about +/- 21 million major units.
MONEY_MIN_MINOR_UNITS = -(2**31)
MONEY_MAX_MINOR_UNITS = 2**31 - 1

DecimalLike = Union[Decimal, float, int, str]


@dataclass(frozen=True, order=True)
class Money:
    """A currency amount held as an integer count of minor units (cents).

    Arithmetic never goes through floating point. Only ``from_decimal``
    accepts fractional input, rounding half-up to the nearest minor unit, so
    inputs with more than two decimal digits lose precision there.
    """

    minor_units: int = 0

    def __post_init__(self):
        if isinstance(self.minor_units, bool) or not isinstance(self.minor_units, int):
            raise TypeError(
                "Money minor_units must be an int, got {}".format(type(self.minor_units).__name__)
            )

    @classmethod
    def from_minor_units(cls, minor_units: int) -> Money:
        return cls(minor_units)

    @classmethod
    def from_decimal(cls, value: DecimalLike) -> Money:
        if isinstance(value, float):
            value = str(value)
        try:
            amount = Decimal(value.strip() if isinstance(value, str) else value)
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise ValueError("Not a decimal amount: {!r}".format(value)) from exc
        if not amount.is_finite():
            raise ValueError("Money amount must be finite, got {!r}".format(value))
        minor = (amount * MINOR_UNITS_PER_MAJOR).quantize(Decimal(1), rounding=ROUND_HALF_UP)
        return cls(int(minor))

    @classmethod
    def zero(cls) -> Money:
        return cls(0)

    def to_minor_units(self) -> int:
        return self.minor_units

    def to_decimal(self) -> Decimal:
        return Decimal(self.minor_units) / MINOR_UNITS_PER_MAJOR

    def add(self, other: Money) -> Money:
        return Money(self.minor_units + other.minor_units)

    def subtract(self, other: Money) -> Money:
        return Money(self.minor_units - other.minor_units)

    def multiply_by_quantity(self, quantity: int) -> Money:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise TypeError("Money can only be multiplied by an int quantity")
        return Money(self.minor_units * quantity)

    def format(self, symbol: str = DEFAULT_CURRENCY_SYMBOL) -> str:
        # Split on the absolute value; floor division on negatives would
        # render -450 as "-5.50".
        major, minor = divmod(abs(self.minor_units), MINOR_UNITS_PER_MAJOR)
        sign = "-" if self.minor_units < 0 else ""
        return "{} {}{}.{:02d}".format(symbol, sign, major, minor)

    def __add__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other):
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __mul__(self, quantity):
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            return NotImplemented
        return self.multiply_by_quantity(quantity)

    __rmul__ = __mul__

    def __neg__(self) -> Money:
        return Money(-self.minor_units)

    def __str__(self) -> str:
        return self.format()

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        # Models exchange Money as a bare integer of minor units.
        from_int = core_schema.no_info_after_validator_function(
            cls.from_minor_units,
            core_schema.int_schema(strict=True),
        )
        return core_schema.json_or_python_schema(
            json_schema=from_int,
            python_schema=core_schema.union_schema(
                [core_schema.is_instance_schema(cls), from_int]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda value: value.minor_units
            ),
        )


def encode_money(value: Money) -> int:
    minor_units = value.to_minor_units()
    if not MONEY_MIN_MINOR_UNITS <= minor_units <= MONEY_MAX_MINOR_UNITS:
        raise ValueError(
            "{} does not fit a 32-bit minor-unit column".format(value.format())
        )
    return minor_units


def decode_money(value: int) -> Money:
    return Money.from_minor_units(int(value))


__all__ = [
    "DEFAULT_CURRENCY_SYMBOL",
    "MINOR_UNITS_PER_MAJOR",
    "MONEY_MAX_MINOR_UNITS",
    "MONEY_MIN_MINOR_UNITS",
    "Money",
    "decode_money",
    "encode_money",
]
