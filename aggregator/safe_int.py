"""Safe integer wrapper for quote and fee arithmetic.

Token amounts, reserves and sqrt prices are unsigned integers that must
reproduce bit-for-bit. SafeInt keeps them honest:
- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- to_uint256()/to_uint160() raise Uint256Overflow when out of range

Usage pattern:
    from aggregator.safe_int import S

    numerator = S(amount_in) * fee_multiplier * reserve_out
    denominator = S(reserve_in) * 10000 + S(amount_in) * fee_multiplier
    return (numerator // denominator).value
"""

from __future__ import annotations

UINT160_MAX = 2**160 - 1
UINT256_MAX = 2**256 - 1


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic errors."""


class DivisionByZero(SafeIntError):
    """Division or modulo by zero."""


class Underflow(SafeIntError):
    """Subtraction would produce negative result."""


class Uint256Overflow(SafeIntError):
    """Value does not fit the requested unsigned width."""


def _value_of(x: SafeInt | int) -> int:
    return x._value if isinstance(x, SafeInt) else x


class SafeInt:
    """Non-negative integer with checked arithmetic.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = value
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __hash__(self) -> int:
        return hash(self._value)

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    # --- Arithmetic ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value + _value_of(other))

    __radd__ = __add__

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(self._value * _value_of(other))

    __rmul__ = __mul__

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _value_of(other)
        if other_val > self._value:
            raise Underflow(f"Underflow: {self._value} - {other_val}")
        return SafeInt(self._value - other_val)

    def __rsub__(self, other: int) -> SafeInt:
        return SafeInt(other) - self

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division, truncating toward zero for non-negative operands.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _value_of(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    def __rfloordiv__(self, other: int) -> SafeInt:
        return SafeInt(other) // self

    def __lshift__(self, bits: int) -> SafeInt:
        return SafeInt(self._value << bits)

    def __rshift__(self, bits: int) -> SafeInt:
        return SafeInt(self._value >> bits)

    # --- Comparison ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt | int):
            return self._value == _value_of(other)
        return NotImplemented

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _value_of(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _value_of(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _value_of(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _value_of(other)

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Ceiling division (rounds up).

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _value_of(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt(-(-self._value // other_val))

    def mul_div(self, multiplier: SafeInt | int, denominator: SafeInt | int) -> SafeInt:
        """Compute floor(self * multiplier / denominator) at full precision."""
        return (self * multiplier) // denominator

    def mul_div_rounding_up(
        self, multiplier: SafeInt | int, denominator: SafeInt | int
    ) -> SafeInt:
        """Compute ceil(self * multiplier / denominator) at full precision."""
        return (self * multiplier).ceiling_div(denominator)

    def to_uint256(self) -> int:
        """Return the value, validating uint256 bounds.

        Raises:
            Uint256Overflow: If value is negative or exceeds 2^256-1
        """
        if not 0 <= self._value <= UINT256_MAX:
            raise Uint256Overflow(f"Value out of uint256 range: {self._value}")
        return self._value

    def to_uint160(self) -> int:
        """Return the value, validating uint160 bounds (sqrt prices).

        Raises:
            Uint256Overflow: If value is negative or exceeds 2^160-1
        """
        if not 0 <= self._value <= UINT160_MAX:
            raise Uint256Overflow(f"Value out of uint160 range: {self._value}")
        return self._value


# Convenience alias for concise code
S = SafeInt

__all__ = [
    "SafeInt",
    "S",
    "SafeIntError",
    "DivisionByZero",
    "Underflow",
    "Uint256Overflow",
    "UINT160_MAX",
    "UINT256_MAX",
]
