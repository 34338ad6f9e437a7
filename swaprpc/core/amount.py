"""
Fixed-point coin amounts.

Values are held as an integer count of satoshis.  Conversions from coin
denominated values go through :class:`decimal.Decimal` so that decimal text
returned by a wallet never passes through a binary float.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

COIN = 100_000_000
MAX_MONEY = 21_000_000 * COIN
SATOSHI = Decimal("0.00000001")


class AmountError(ValueError):
    pass


class Amount(int):
    """An amount of satoshis."""

    __slots__ = ()

    @classmethod
    def from_coins(cls, value: Decimal | str | int) -> Amount:
        if isinstance(value, float):
            raise AmountError("Refusing to build an amount from a binary float")
        try:
            coins = Decimal(value)
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise AmountError(f"Invalid decimal amount {value!r}") from exc
        if not coins.is_finite():
            raise AmountError(f"Invalid decimal amount {value!r}")
        satoshis = coins * COIN
        if satoshis != satoshis.to_integral_value():
            raise AmountError(f"Amount {value!r} is more precise than one satoshi")
        result = int(satoshis)
        if abs(result) > MAX_MONEY:
            raise AmountError(f"Amount {value!r} exceeds the money supply")
        return cls(result)

    def to_coins(self) -> Decimal:
        return (Decimal(int(self)) / COIN).quantize(SATOSHI)

    def format(self) -> str:
        return f"{self.to_coins():f} BTC"

    def __repr__(self) -> str:
        return f"Amount({int(self)})"
