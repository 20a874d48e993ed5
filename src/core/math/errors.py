"""
Fixed-Width Errors — таксономия ошибок арифметики фиксированной ширины

Все ошибки fail-fast: сигнализируют либо о реальном переполнении, либо о
нарушении внутреннего инварианта. Повтор операции не поможет, поэтому
вызывающий код должен отклонить всю операцию целиком (расчёт цены/тика,
который переполняется, не применяется частично).

Иерархия:
- FixedWidthArithmeticError (ArithmeticError) — переполнения и деление на ноль
- InvariantViolation (AssertionError) — ошибки программиста (индекс лимба)
- TickMathDomainError (ValueError) — вход вне допустимого диапазона тиков/цен
"""


# =============================================================================
# АРИФМЕТИЧЕСКИЕ ОШИБКИ
# =============================================================================


class FixedWidthArithmeticError(ArithmeticError):
    """Базовая ошибка арифметики фиксированной ширины (U256 / I256 / I64)."""

    pass


class ConversionOverflow(FixedWidthArithmeticError):
    """
    Старший бит (bit 255) беззнакового значения установлен при checked-конверсии в I256.

    Такое значение нельзя представить в sign-magnitude форме без потери знака.
    """

    pass


class AdditionOverflow(FixedWidthArithmeticError):
    """Модуль суммы вышел за знаковый диапазон I256."""

    pass


class SubtractionOverflow(FixedWidthArithmeticError):
    """Модуль разности вышел за знаковый диапазон I256 (или остался borrow)."""

    pass


class MultiplicationOverflow(FixedWidthArithmeticError):
    """512-битное произведение не сужается до 256 бит без потери данных."""

    pass


class CastOverflow(FixedWidthArithmeticError):
    """Значение не помещается в более узкий целевой тип (например, signed 64)."""

    pass


class Uint256Overflow(FixedWidthArithmeticError):
    """Результат беззнаковой операции превысил U256_MAX."""

    pass


class Uint256Underflow(FixedWidthArithmeticError):
    """Результат беззнакового вычитания отрицательный."""

    pass


class DivisionByZero(FixedWidthArithmeticError, ZeroDivisionError):
    """Деление U256 на ноль."""

    pass


# =============================================================================
# НАРУШЕНИЯ ИНВАРИАНТОВ
# =============================================================================


class InvariantViolation(AssertionError):
    """
    Нарушение внутреннего инварианта движка.

    Недостижимо при корректном внешнем вводе; перехватывать не следует.
    """

    pass


class LimbIndexOutOfRange(InvariantViolation):
    """Индекс лимба вне [0, 4) для I256 или вне [0, 8) для DI256."""

    def __init__(self, index: int, width: int):
        self.index = index
        self.width = width
        super().__init__(f"Limb index out of range: {index} not in [0, {width})")


# =============================================================================
# ОШИБКИ ДОМЕНА TICK MATH
# =============================================================================


class TickMathDomainError(ValueError):
    """Базовая ошибка входа вне домена конверсии tick <-> sqrt price."""

    pass


class TickOutOfRange(TickMathDomainError):
    """|tick| превышает сконфигурированный max_tick."""

    pass


class SqrtPriceOutOfRange(TickMathDomainError):
    """sqrt price вне полуинтервала [min_sqrt_price, max_sqrt_price)."""

    pass
