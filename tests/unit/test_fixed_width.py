"""
Тесты для модуля Fixed Width (U256 / I64 субстрат)

Проверяет:
1. Checked арифметику U256 (overflow/underflow/деление на ноль)
2. Логические сдвиги на байт
3. Конверсии и abs для I64
4. Валидацию входов
"""

import pytest

from src.core.math.errors import (
    CastOverflow,
    DivisionByZero,
    FixedWidthArithmeticError,
    Uint256Overflow,
    Uint256Underflow,
)
from src.core.math.fixed_width import (
    I64_MAX,
    I64_MIN,
    U64_MAX,
    U128_MAX,
    U256_MAX,
    Ordering,
    i64_abs,
    i64_as_u64,
    i64_compare,
    i64_from,
    i64_is_neg,
    i64_neg_from,
    require_i64,
    require_u256,
    u256_add,
    u256_compare,
    u256_div,
    u256_fields,
    u256_from_u64,
    u256_from_u128,
    u256_max,
    u256_mul,
    u256_shl,
    u256_shr,
    u256_sub,
    u256_xor,
)

# =============================================================================
# U256
# =============================================================================


class TestU256Arithmetic:
    """Тесты checked арифметики U256"""

    def test_add_basic(self) -> None:
        assert u256_add(2, 3) == 5
        assert u256_add(U256_MAX - 1, 1) == U256_MAX

    def test_add_overflow(self) -> None:
        """Сложение за U256_MAX — исключение"""
        with pytest.raises(Uint256Overflow, match="addition overflow"):
            u256_add(U256_MAX, 1)

    def test_sub_underflow(self) -> None:
        """Вычитание большего из меньшего — исключение"""
        assert u256_sub(10, 3) == 7
        with pytest.raises(Uint256Underflow, match="underflow"):
            u256_sub(3, 10)

    def test_mul_overflow(self) -> None:
        """Умножение за U256_MAX — исключение"""
        assert u256_mul(2**128, 2**127) == 2**255
        with pytest.raises(Uint256Overflow, match="multiplication overflow"):
            u256_mul(2**128, 2**128)

    def test_div_rounds_down(self) -> None:
        assert u256_div(7, 2) == 3
        assert u256_div(U256_MAX, 2**128) == U128_MAX

    def test_div_by_zero(self) -> None:
        """Деление на ноль — DivisionByZero (и ZeroDivisionError)"""
        with pytest.raises(DivisionByZero):
            u256_div(1, 0)
        with pytest.raises(ZeroDivisionError):
            u256_div(1, 0)

    def test_errors_are_arithmetic(self) -> None:
        """Все ошибки субстрата — FixedWidthArithmeticError"""
        for error in (Uint256Overflow, Uint256Underflow, DivisionByZero, CastOverflow):
            assert issubclass(error, FixedWidthArithmeticError)
            assert issubclass(error, ArithmeticError)


class TestU256Shifts:
    """Тесты логических сдвигов"""

    def test_shl_drops_high_bits(self) -> None:
        """Сдвиг влево отбрасывает биты за 256"""
        assert u256_shl(U256_MAX, 1) == U256_MAX - 1
        assert u256_shl(1, 255) == 2**255
        assert u256_shl(2, 255) == 0

    def test_shr(self) -> None:
        assert u256_shr(2**255, 255) == 1
        assert u256_shr(5, 0) == 5

    @pytest.mark.parametrize("shift", [-1, 256, 1000])
    def test_shift_must_be_byte(self, shift: int) -> None:
        """Сдвиг вне [0, 255] отклоняется"""
        with pytest.raises(ValueError, match="shift must be a byte"):
            u256_shl(1, shift)
        with pytest.raises(ValueError, match="shift must be a byte"):
            u256_shr(1, shift)

    @pytest.mark.parametrize("shift", [1.5, "8", True])
    def test_shift_must_be_int(self, shift: object) -> None:
        """Сдвиг не-int отклоняется до выполнения"""
        with pytest.raises(ValueError, match="shift must be an int"):
            u256_shr(1, shift)  # type: ignore[arg-type]


class TestU256Misc:
    """Тесты прочих операций U256"""

    def test_xor(self) -> None:
        assert u256_xor(0b1100, 0b1010) == 0b0110

    def test_compare(self) -> None:
        assert u256_compare(1, 2) is Ordering.LESS
        assert u256_compare(2, 2) is Ordering.EQUAL
        assert u256_compare(3, 2) is Ordering.GREATER

    def test_fields_little_limb_first(self) -> None:
        assert u256_fields(2**64 + 5) == (5, 1, 0, 0)
        assert u256_fields(U256_MAX) == (U64_MAX,) * 4

    def test_constructors(self) -> None:
        assert u256_max() == U256_MAX
        assert u256_from_u64(U64_MAX) == U64_MAX
        assert u256_from_u128(U128_MAX) == U128_MAX
        with pytest.raises(ValueError):
            u256_from_u64(U64_MAX + 1)
        with pytest.raises(ValueError):
            u256_from_u128(U128_MAX + 1)


# =============================================================================
# I64
# =============================================================================


class TestI64:
    """Тесты I64 субстрата"""

    def test_from_u64(self) -> None:
        assert i64_from(I64_MAX) == I64_MAX
        with pytest.raises(CastOverflow):
            i64_from(I64_MAX + 1)

    def test_neg_from_u64(self) -> None:
        """-2^63 представим, -(2^63 + 1) — нет"""
        assert i64_neg_from(5) == -5
        assert i64_neg_from(2**63) == I64_MIN
        with pytest.raises(CastOverflow):
            i64_neg_from(2**63 + 1)

    def test_abs(self) -> None:
        assert i64_abs(-7) == 7
        assert i64_abs(7) == 7
        assert i64_abs(I64_MIN + 1) == I64_MAX

    def test_abs_of_min_overflows(self) -> None:
        """abs(I64_MIN) не представим"""
        with pytest.raises(CastOverflow):
            i64_abs(I64_MIN)

    def test_sign_and_bits(self) -> None:
        assert i64_is_neg(-1)
        assert not i64_is_neg(0)
        assert i64_as_u64(-1) == U64_MAX
        assert i64_as_u64(5) == 5
        assert i64_compare(-1, 1) is Ordering.LESS


# =============================================================================
# ВАЛИДАЦИЯ
# =============================================================================


class TestRequire:
    """Тесты валидации входов"""

    def test_require_u256(self) -> None:
        require_u256(0, "x")
        require_u256(U256_MAX, "x")
        with pytest.raises(ValueError, match="x must be in"):
            require_u256(U256_MAX + 1, "x")
        with pytest.raises(ValueError, match="x must be an int"):
            require_u256(True, "x")
        with pytest.raises(ValueError, match="x must be an int"):
            require_u256(1.0, "x")

    def test_require_i64(self) -> None:
        require_i64(I64_MIN, "tick")
        require_i64(I64_MAX, "tick")
        with pytest.raises(ValueError, match="tick must be in"):
            require_i64(I64_MAX + 1, "tick")
        with pytest.raises(ValueError, match="tick must be an int"):
            require_i64("1", "tick")
