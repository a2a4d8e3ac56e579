"""Deterministic fixed-point arithmetic.

Two types are provided:

- ``UFixed``: unsigned fixed point with 47 integer bits and 28 fraction bits,
  stored as a raw integer scaled by 2**28.
- ``SFixed``: signed magnitude ``(UFixed, is_negative)``.

Every multiply and divide truncates toward zero (floor for non-negative
values) so chained computations give identical results on every platform.
Out-of-range results raise instead of clamping.
"""

from __future__ import annotations

from decimal import Decimal, ROUND_FLOOR, localcontext
from functools import total_ordering
from typing import Union

from liquidity_engine.core.exceptions import DivisionByZero, DomainError, Overflow, Underflow

INTEGER_BITS = 47
FRACTION_BITS = 28
ONE_RAW = 1 << FRACTION_BITS
MAX_RAW = (1 << (INTEGER_BITS + FRACTION_BITS)) - 1

_DECIMAL_PRECISION = 60

Number = Union["UFixed", int]


def _to_raw(value: Union[Decimal, str, int]) -> int:
    with localcontext() as ctx:
        ctx.prec = _DECIMAL_PRECISION
        scaled = Decimal(value) * ONE_RAW
        return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


@total_ordering
class UFixed:
    """Unsigned 47.28 fixed-point number."""

    __slots__ = ("raw",)

    def __init__(self, raw: int):
        """Create from a raw scaled integer.

        Args:
            raw: Value scaled by 2**28

        Raises:
            Underflow: If raw is negative
            Overflow: If raw exceeds the 75-bit range
        """
        if raw < 0:
            raise Underflow("Fixed-point result is negative", {"raw": raw})
        if raw > MAX_RAW:
            raise Overflow("Fixed-point result exceeds 47.28 range", {"raw": raw})
        self.raw = raw

    @classmethod
    def from_raw(cls, raw: int) -> "UFixed":
        return cls(raw)

    @classmethod
    def from_int(cls, value: int) -> "UFixed":
        if value < 0:
            raise Underflow("Cannot represent negative integer", {"value": value})
        return cls(value << FRACTION_BITS)

    @classmethod
    def from_decimal(cls, value: Union[Decimal, str, int]) -> "UFixed":
        """Create from a decimal value, truncating to the 2**-28 grid."""
        return cls(_to_raw(value))

    @classmethod
    def zero(cls) -> "UFixed":
        return cls(0)

    @classmethod
    def one(cls) -> "UFixed":
        return cls(ONE_RAW)

    def to_decimal(self) -> Decimal:
        """Exact decimal value."""
        with localcontext() as ctx:
            ctx.prec = _DECIMAL_PRECISION
            return Decimal(self.raw) / Decimal(ONE_RAW)

    def floor(self) -> int:
        return self.raw >> FRACTION_BITS

    def ceil(self) -> int:
        return -((-self.raw) >> FRACTION_BITS)

    def is_zero(self) -> bool:
        return self.raw == 0

    def add(self, other: Number) -> "UFixed":
        return UFixed(self.raw + _coerce(other).raw)

    def sub(self, other: Number) -> "UFixed":
        other = _coerce(other)
        if other.raw > self.raw:
            raise Underflow("Fixed-point subtraction underflow", {"lhs": self, "rhs": other})
        return UFixed(self.raw - other.raw)

    def mul(self, other: Number) -> "UFixed":
        return UFixed((self.raw * _coerce(other).raw) >> FRACTION_BITS)

    def div(self, other: Number) -> "UFixed":
        other = _coerce(other)
        if other.raw == 0:
            raise DivisionByZero("Fixed-point division by zero", {"lhs": self})
        return UFixed((self.raw << FRACTION_BITS) // other.raw)

    def half(self) -> "UFixed":
        return UFixed(self.raw >> 1)

    def log2(self) -> "SFixed":
        """Binary logarithm, truncated to 28 fraction bits.

        Uses the iterative squaring method: the integer part comes from the
        most significant bit, each fraction bit from one squaring step.

        Raises:
            DomainError: If the value is zero
        """
        if self.raw == 0:
            raise DomainError("log2 of non-positive value")

        int_part = self.raw.bit_length() - 1 - FRACTION_BITS
        if int_part >= 0:
            y = self.raw >> int_part
        else:
            y = self.raw << -int_part

        frac = 0
        two = ONE_RAW << 1
        for bit in range(FRACTION_BITS - 1, -1, -1):
            y = (y * y) >> FRACTION_BITS
            if y >= two:
                y >>= 1
                frac |= 1 << bit

        if int_part >= 0:
            return SFixed(UFixed((int_part << FRACTION_BITS) | frac), False)
        return SFixed(UFixed((-int_part << FRACTION_BITS) - frac), True)

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __truediv__ = div

    def __radd__(self, other: int) -> "UFixed":
        return _coerce(other).add(self)

    def __rmul__(self, other: int) -> "UFixed":
        return _coerce(other).mul(self)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UFixed):
            return self.raw == other.raw
        if isinstance(other, int):
            return self.raw == other << FRACTION_BITS
        return NotImplemented

    def __lt__(self, other: Number) -> bool:
        return self.raw < _coerce(other).raw

    def __hash__(self) -> int:
        return hash(self.raw)

    def __bool__(self) -> bool:
        return self.raw != 0

    def __repr__(self) -> str:
        return f"UFixed({self.to_decimal().normalize()})"

    def __str__(self) -> str:
        return str(self.to_decimal().normalize())


def _coerce(value: Number) -> UFixed:
    if isinstance(value, UFixed):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return UFixed.from_int(value)
    raise TypeError(f"Unsupported fixed-point operand: {value!r}")


@total_ordering
class SFixed:
    """Signed fixed-point number stored as magnitude and sign.

    Zero compares equal regardless of its sign flag.
    """

    __slots__ = ("magnitude", "is_negative")

    def __init__(self, magnitude: UFixed, is_negative: bool = False):
        self.magnitude = magnitude
        self.is_negative = is_negative

    @classmethod
    def zero(cls) -> "SFixed":
        return cls(UFixed.zero(), False)

    @classmethod
    def from_int(cls, value: int) -> "SFixed":
        return cls(UFixed.from_int(abs(value)), value < 0)

    @classmethod
    def from_decimal(cls, value: Union[Decimal, str, int]) -> "SFixed":
        value = Decimal(value)
        return cls(UFixed.from_decimal(abs(value)), value < 0)

    @classmethod
    def from_ufixed(cls, value: UFixed) -> "SFixed":
        return cls(value, False)

    def sign(self) -> int:
        if self.magnitude.raw == 0:
            return 0
        return -1 if self.is_negative else 1

    def is_zero(self) -> bool:
        return self.magnitude.raw == 0

    def to_decimal(self) -> Decimal:
        value = self.magnitude.to_decimal()
        return -value if self.sign() < 0 else value

    def _signed_raw(self) -> int:
        return -self.magnitude.raw if self.is_negative else self.magnitude.raw

    def add(self, other: "SFixed") -> "SFixed":
        other = _coerce_signed(other)
        if self.is_negative == other.is_negative:
            return SFixed(self.magnitude.add(other.magnitude), self.is_negative)
        if self.magnitude >= other.magnitude:
            return SFixed(self.magnitude.sub(other.magnitude), self.is_negative)
        return SFixed(other.magnitude.sub(self.magnitude), other.is_negative)

    def sub(self, other: "SFixed") -> "SFixed":
        return self.add(-_coerce_signed(other))

    def mul(self, other: "SFixed") -> "SFixed":
        other = _coerce_signed(other)
        return SFixed(self.magnitude.mul(other.magnitude), self.is_negative != other.is_negative)

    def div(self, other: "SFixed") -> "SFixed":
        other = _coerce_signed(other)
        return SFixed(self.magnitude.div(other.magnitude), self.is_negative != other.is_negative)

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __truediv__ = div

    def __neg__(self) -> "SFixed":
        return SFixed(self.magnitude, not self.is_negative)

    def __abs__(self) -> "SFixed":
        return SFixed(self.magnitude, False)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, (SFixed, UFixed, int)):
            return self._signed_raw() == _coerce_signed(other)._signed_raw()
        return NotImplemented

    def __lt__(self, other: "SFixed") -> bool:
        return self._signed_raw() < _coerce_signed(other)._signed_raw()

    def __hash__(self) -> int:
        return hash(self._signed_raw())

    def __repr__(self) -> str:
        return f"SFixed({self.to_decimal().normalize()})"

    def __str__(self) -> str:
        return str(self.to_decimal().normalize())


def _coerce_signed(value: Union[SFixed, UFixed, int]) -> SFixed:
    if isinstance(value, SFixed):
        return value
    if isinstance(value, UFixed):
        return SFixed(value, False)
    if isinstance(value, int) and not isinstance(value, bool):
        return SFixed.from_int(value)
    raise TypeError(f"Unsupported fixed-point operand: {value!r}")
