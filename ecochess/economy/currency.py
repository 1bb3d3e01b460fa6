from __future__ import annotations

from dataclasses import dataclass
from typing import Union


Number = Union[int, float]


@dataclass(frozen=True, order=True)
class Currency:
    """Integral amount of money, counted in pennies.

    Multiplying or dividing by a float truncates toward zero, which is how
    fractional piece values become prices: ``doubloon() * 3.15 == Currency(31)``.
    A negative amount is a debt.
    """

    amount: int = 0

    @classmethod
    def doubloon(cls) -> "Currency":
        return cls(10)

    @classmethod
    def penny(cls) -> "Currency":
        return cls(1)

    @classmethod
    def zero(cls) -> "Currency":
        return cls(0)

    def is_zero(self) -> bool:
        return self.amount == 0

    def is_debt(self) -> bool:
        return self.amount < 0

    def is_surplus(self) -> bool:
        return self.amount > 0

    def __add__(self, other: "Currency") -> "Currency":
        if not isinstance(other, Currency):
            return NotImplemented
        return Currency(self.amount + other.amount)

    def __sub__(self, other: "Currency") -> "Currency":
        if not isinstance(other, Currency):
            return NotImplemented
        return Currency(self.amount - other.amount)

    def __neg__(self) -> "Currency":
        return Currency(-self.amount)

    def __mul__(self, factor: Number) -> "Currency":
        if isinstance(factor, bool) or not isinstance(factor, (int, float)):
            return NotImplemented
        return Currency(int(self.amount * factor))

    __rmul__ = __mul__

    def __truediv__(self, other: Union[Number, "Currency"]):  # type: ignore[no-untyped-def]
        if isinstance(other, Currency):
            return self.amount / other.amount
        if isinstance(other, bool) or not isinstance(other, (int, float)):
            return NotImplemented
        return Currency(int(self.amount / other))

    def __str__(self) -> str:
        if self.is_debt():
            return f"-¢{-self.amount}"
        return f"¢{self.amount}"
