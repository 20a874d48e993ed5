"""
Fixed Width — беззнаковый 256-битный и знаковый 64-битный субстрат

Python int не ограничен по ширине, поэтому контракт субстрата задаётся явно:
- U256: checked add/sub/mul/div (переполнение → исключение, не wrap),
  логические сдвиги на байт (0..255), xor, сравнение, разбиение на лимбы
- I64: тип тиков; конверсии из u64, abs, знак, сравнение

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Ни одна операция не возвращает значение вне диапазона своего типа
2. Переполнение никогда не маскируется молча (кроме u256_shl, который
   по контракту логического сдвига отбрасывает вытолкнутые биты)
"""

from enum import Enum
from typing import Final

from src.core.math.errors import (
    CastOverflow,
    DivisionByZero,
    Uint256Overflow,
    Uint256Underflow,
)
from src.core.math.limbs import I256_LIMBS, Limbs, split_limbs

# =============================================================================
# ГРАНИЦЫ ТИПОВ
# =============================================================================

U16_MAX: Final[int] = (1 << 16) - 1
U32_MAX: Final[int] = (1 << 32) - 1
U64_MAX: Final[int] = (1 << 64) - 1
U128_MAX: Final[int] = (1 << 128) - 1
U256_MAX: Final[int] = (1 << 256) - 1

I64_MIN: Final[int] = -(1 << 63)
I64_MAX: Final[int] = (1 << 63) - 1

# Максимальный сдвиг: сдвиг задаётся одним байтом
MAX_SHIFT: Final[int] = 255


class Ordering(int, Enum):
    """Результат трёхстороннего сравнения"""

    LESS = -1
    EQUAL = 0
    GREATER = 1


def _ordering(a: int, b: int) -> Ordering:
    if a < b:
        return Ordering.LESS
    if a > b:
        return Ordering.GREATER
    return Ordering.EQUAL


# =============================================================================
# ВАЛИДАЦИЯ ВХОДОВ
# =============================================================================


def require_u256(value: int, name: str) -> None:
    """
    Проверка, что значение — int в [0, U256_MAX].

    Raises:
        ValueError: Если тип не int или значение вне диапазона
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int, got {type(value).__name__}")
    if not 0 <= value <= U256_MAX:
        raise ValueError(f"{name} must be in [0, U256_MAX], got {value}")


def require_i64(value: int, name: str) -> None:
    """
    Проверка, что значение — int в [I64_MIN, I64_MAX].

    Raises:
        ValueError: Если тип не int или значение вне диапазона
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an int, got {type(value).__name__}")
    if not I64_MIN <= value <= I64_MAX:
        raise ValueError(f"{name} must be in [{I64_MIN}, {I64_MAX}], got {value}")


def _require_shift(shift: int) -> None:
    if not isinstance(shift, int) or isinstance(shift, bool):
        raise ValueError(f"shift must be an int, got {type(shift).__name__}")
    if not 0 <= shift <= MAX_SHIFT:
        raise ValueError(f"shift must be a byte in [0, {MAX_SHIFT}], got {shift}")


# =============================================================================
# U256
# =============================================================================


def u256_max() -> int:
    return U256_MAX


def u256_from_u64(value: int) -> int:
    if not 0 <= value <= U64_MAX:
        raise ValueError(f"value must fit in u64, got {value}")
    return value


def u256_from_u128(value: int) -> int:
    if not 0 <= value <= U128_MAX:
        raise ValueError(f"value must fit in u128, got {value}")
    return value


def u256_add(a: int, b: int) -> int:
    """
    Checked сложение.

    Raises:
        Uint256Overflow: Если a + b > U256_MAX
    """
    result = a + b
    if result > U256_MAX:
        raise Uint256Overflow(f"u256 addition overflow: {a} + {b}")
    return result


def u256_sub(a: int, b: int) -> int:
    """
    Checked вычитание.

    Raises:
        Uint256Underflow: Если b > a
    """
    if b > a:
        raise Uint256Underflow(f"u256 subtraction underflow: {a} - {b}")
    return a - b


def u256_mul(a: int, b: int) -> int:
    """
    Checked умножение.

    Raises:
        Uint256Overflow: Если a * b > U256_MAX
    """
    result = a * b
    if result > U256_MAX:
        raise Uint256Overflow(f"u256 multiplication overflow: {a} * {b}")
    return result


def u256_div(a: int, b: int) -> int:
    """
    Целочисленное деление с округлением вниз.

    Raises:
        DivisionByZero: Если b == 0
    """
    if b == 0:
        raise DivisionByZero(f"u256 division by zero: {a} / 0")
    return a // b


def u256_shl(value: int, shift: int) -> int:
    """Логический сдвиг влево; биты за пределами 256 отбрасываются."""
    _require_shift(shift)
    return (value << shift) & U256_MAX


def u256_shr(value: int, shift: int) -> int:
    """Логический сдвиг вправо."""
    _require_shift(shift)
    return value >> shift


def u256_xor(a: int, b: int) -> int:
    return a ^ b


def u256_compare(a: int, b: int) -> Ordering:
    return _ordering(a, b)


def u256_fields(value: int) -> Limbs:
    """Четыре u64 лимба значения, младший первым."""
    return split_limbs(value, I256_LIMBS)


# =============================================================================
# I64
# =============================================================================


def i64_from(value: int) -> int:
    """
    Неотрицательный I64 из u64.

    Raises:
        CastOverflow: Если value > I64_MAX
    """
    if not 0 <= value <= I64_MAX:
        raise CastOverflow(f"u64 {value} does not fit in i64")
    return value


def i64_neg_from(value: int) -> int:
    """
    Отрицательный I64 из модуля u64: возвращает -value.

    Raises:
        CastOverflow: Если -value < I64_MIN
    """
    if not 0 <= value <= -I64_MIN:
        raise CastOverflow(f"-{value} does not fit in i64")
    return -value


def i64_abs(value: int) -> int:
    """
    Модуль I64.

    Raises:
        CastOverflow: Для I64_MIN (модуль не представим в i64)
    """
    if value == I64_MIN:
        raise CastOverflow(f"abs({value}) does not fit in i64")
    return -value if value < 0 else value


def i64_is_neg(value: int) -> bool:
    return value < 0


def i64_as_u64(value: int) -> int:
    """Битовый паттерн I64 как u64 (two's complement)."""
    return value & U64_MAX


def i64_compare(a: int, b: int) -> Ordering:
    return _ordering(a, b)
