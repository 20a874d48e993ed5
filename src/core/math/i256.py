"""
I256 — знаковое 256-битное целое в sign-magnitude форме

Представление: флаг знака + беззнаковый модуль из 4 u64-лимбов (младший первым).
Арифметика (add/sub/mul/compare) работает с модулем напрямую; побитовые
операции (shr/or) проходят через явную two's-complement форму
(get_complement туда и обратно), поэтому вся битовая магия изолирована в них.

Умножение накапливает 512-битное произведение во временном DI256
(8 лимбов) и сужает его обратно до 256 бит с проверкой переполнения.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Bit 255 модуля (bit 63 лимба 3) равен 0 после любой публичной операции.
   Рабочий диапазон: [-(2^255 - 1), 2^255 - 1]
2. Ноль единственный: negative=False (отрицательный ноль нормализуется)
3. Значения immutable: каждая операция возвращает новый I256
4. Переполнение → исключение (AdditionOverflow, SubtractionOverflow,
   MultiplicationOverflow, ConversionOverflow, CastOverflow), никогда не wrap

Семантика сдвига за пределы байта:
    shift >= 256 выдвигает все биты: результат 0 для неотрицательных
    и -1 для отрицательных (floor(a / 2^shift)). Отрицательный shift → ValueError.
"""

from dataclasses import dataclass
from typing import Final, Union

from src.core.math.errors import (
    AdditionOverflow,
    CastOverflow,
    ConversionOverflow,
    MultiplicationOverflow,
    SubtractionOverflow,
)
from src.core.math.fixed_width import (
    MAX_SHIFT,
    U256_MAX,
    Ordering,
    i64_from,
    i64_neg_from,
    require_u256,
    u256_from_u128,
)
from src.core.math.limbs import (
    DI256_LIMBS,
    I256_LIMBS,
    LIMB_BITS,
    LIMB_MASK,
    Limbs,
    get_limb,
    join_limbs,
    put_limb,
    split_limbs,
    zero_limbs,
)

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Знаковый бит модуля: bit 63 старшего лимба (bit 255 всего значения)
SIGN_BIT: Final[int] = 1 << (LIMB_BITS - 1)

# Максимальный модуль I256
I256_MAX_MAGNITUDE: Final[int] = (1 << 255) - 1

_TOP_LIMB: Final[int] = I256_LIMBS - 1


def _sign_bit_set(magnitude: Limbs) -> bool:
    return get_limb(magnitude, _TOP_LIMB) & SIGN_BIT != 0


def _sign_extension_mask(shift: int) -> Limbs:
    # Единицы в старших `shift` битах 256-битного слова
    return split_limbs((U256_MAX << (256 - shift)) & U256_MAX, I256_LIMBS)


# Предвычисленные маски знакового расширения для всех сдвигов 0..255
_SIGN_EXTENSION_MASKS: Final[tuple[Limbs, ...]] = tuple(
    _sign_extension_mask(shift) for shift in range(MAX_SHIFT + 1)
)


# =============================================================================
# I256
# =============================================================================


@dataclass(frozen=True)
class I256:
    """
    Знаковое 256-битное целое (sign-magnitude).

    Attributes:
        negative: Флаг знака (False для нуля)
        magnitude: Модуль, 4 u64-лимба, младший первым

    Прямой конструктор проверяет bit 255. Two's-complement паттерны внутри
    shr/or и from_u256_without_check строятся через _from_pattern.
    """

    negative: bool
    magnitude: Limbs

    def __post_init__(self) -> None:
        self._assign(self.negative, self.magnitude)
        if _sign_bit_set(self.magnitude):
            raise ConversionOverflow("I256 magnitude has bit 255 set")

    def _assign(self, negative: bool, magnitude: Limbs) -> None:
        magnitude = tuple(magnitude)
        if len(magnitude) != I256_LIMBS:
            raise ValueError(f"I256 magnitude must have {I256_LIMBS} limbs, got {len(magnitude)}")
        for word in magnitude:
            if not isinstance(word, int) or not 0 <= word <= LIMB_MASK:
                raise ValueError(f"I256 limb must fit in u64, got {word!r}")
        object.__setattr__(self, "magnitude", magnitude)
        object.__setattr__(self, "negative", bool(negative) and any(magnitude))

    @classmethod
    def _from_pattern(cls, negative: bool, magnitude: Limbs) -> "I256":
        # Без проверки bit 255: лимбы могут быть two's-complement паттерном
        value = object.__new__(cls)
        value._assign(negative, magnitude)
        return value

    # -------------------------------------------------------------------------
    # Конструкторы
    # -------------------------------------------------------------------------

    @classmethod
    def zero(cls) -> "I256":
        return cls(False, zero_limbs(I256_LIMBS))

    @classmethod
    def from_u256(cls, value: int) -> "I256":
        """
        Неотрицательный I256 из U256 с проверкой знакового бита.

        Raises:
            ValueError: Если value не U256
            ConversionOverflow: Если bit 255 установлен
        """
        result = cls.from_u256_without_check(value)
        if _sign_bit_set(result.magnitude):
            raise ConversionOverflow(f"u256 {value} has bit 255 set, cannot convert to I256")
        return result

    @classmethod
    def from_u256_without_check(cls, value: int) -> "I256":
        """Неотрицательный I256 из U256 без проверки bit 255."""
        require_u256(value, "value")
        return cls._from_pattern(False, split_limbs(value, I256_LIMBS))

    @classmethod
    def from_u128(cls, value: int, is_negative: bool) -> "I256":
        """
        I256 из модуля u128 и знака.

        Examples:
            >>> I256.from_u128(1500, True).to_int()
            -1500
        """
        return cls(is_negative, split_limbs(u256_from_u128(value), I256_LIMBS))

    @classmethod
    def from_int(cls, value: int) -> "I256":
        """
        I256 из Python int.

        Raises:
            ConversionOverflow: Если |value| > 2^255 - 1
        """
        magnitude = -value if value < 0 else value
        if magnitude > I256_MAX_MAGNITUDE:
            raise ConversionOverflow(f"{value} is outside the I256 range")
        return cls(value < 0, split_limbs(magnitude, I256_LIMBS))

    # -------------------------------------------------------------------------
    # Наблюдатели и конверсии
    # -------------------------------------------------------------------------

    def is_neg(self) -> bool:
        return self.negative

    def is_zero(self) -> bool:
        return not any(self.magnitude)

    def to_int(self) -> int:
        value = join_limbs(self.magnitude)
        return -value if self.negative else value

    def as_i64(self) -> int:
        """
        Сужение до signed 64.

        Raises:
            CastOverflow: Если лимбы 1..3 ненулевые или значение вне i64
        """
        for index in range(1, I256_LIMBS):
            if get_limb(self.magnitude, index) != 0:
                raise CastOverflow(f"I256 {self.to_int()} does not fit in i64")
        low = get_limb(self.magnitude, 0)
        if self.negative:
            return i64_neg_from(low)
        return i64_from(low)

    def neg(self) -> "I256":
        return I256._from_pattern(not self.negative, self.magnitude)

    def abs(self) -> "I256":
        return I256._from_pattern(False, self.magnitude)

    # -------------------------------------------------------------------------
    # Операторы
    # -------------------------------------------------------------------------

    def __add__(self, other: Union["I256", int]) -> "I256":
        return add(self, _coerce(other))

    def __radd__(self, other: int) -> "I256":
        return add(_coerce(other), self)

    def __sub__(self, other: Union["I256", int]) -> "I256":
        return sub(self, _coerce(other))

    def __rsub__(self, other: int) -> "I256":
        return sub(_coerce(other), self)

    def __mul__(self, other: Union["I256", int]) -> "I256":
        return mul(self, _coerce(other))

    def __rmul__(self, other: int) -> "I256":
        return mul(_coerce(other), self)

    def __or__(self, other: Union["I256", int]) -> "I256":
        return bit_or(self, _coerce(other))

    def __ror__(self, other: int) -> "I256":
        return bit_or(_coerce(other), self)

    def __rshift__(self, shift: int) -> "I256":
        return shr(self, shift)

    def __neg__(self) -> "I256":
        return self.neg()

    def __abs__(self) -> "I256":
        return self.abs()

    def __lt__(self, other: Union["I256", int]) -> bool:
        return compare(self, _coerce(other)) is Ordering.LESS

    def __le__(self, other: Union["I256", int]) -> bool:
        return compare(self, _coerce(other)) is not Ordering.GREATER

    def __gt__(self, other: Union["I256", int]) -> bool:
        return compare(self, _coerce(other)) is Ordering.GREATER

    def __ge__(self, other: Union["I256", int]) -> bool:
        return compare(self, _coerce(other)) is not Ordering.LESS

    def __str__(self) -> str:
        return str(self.to_int())


def _coerce(value: Union[I256, int]) -> I256:
    if isinstance(value, I256):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return I256.from_int(value)
    raise TypeError(f"Unsupported operand type for I256: {type(value).__name__}")


# =============================================================================
# DI256: АККУМУЛЯТОР УМНОЖЕНИЯ
# =============================================================================


@dataclass(frozen=True)
class DI256:
    """
    Беззнаковое 512-битное значение (8 лимбов), только для mul().

    Сужение до I256 успешно, только если лимбы 4..7 нулевые
    и bit 63 лимба 3 сброшен.
    """

    limbs: Limbs

    @classmethod
    def zero(cls) -> "DI256":
        return cls(zero_limbs(DI256_LIMBS))

    def accumulate(self, index: int, word: int) -> "DI256":
        """
        Прибавление u64-слова к лимбу index с распространением переноса вверх.

        Raises:
            MultiplicationOverflow: Если перенос выходит за лимб 7
        """
        limbs = self.limbs
        while word:
            if index >= DI256_LIMBS:
                raise MultiplicationOverflow("carry out of the 512-bit accumulator")
            total = get_limb(limbs, index) + word
            limbs = put_limb(limbs, index, total & LIMB_MASK)
            word = total >> LIMB_BITS
            index += 1
        return DI256(limbs)

    def narrow(self, negative: bool) -> I256:
        """
        Сужение до I256 с заданным знаком.

        Raises:
            MultiplicationOverflow: Если старшие лимбы ненулевые или bit 255 установлен
        """
        for index in range(I256_LIMBS, DI256_LIMBS):
            if get_limb(self.limbs, index) != 0:
                raise MultiplicationOverflow(f"product exceeds 256 bits (limb {index} is non-zero)")
        magnitude = tuple(get_limb(self.limbs, index) for index in range(I256_LIMBS))
        if _sign_bit_set(magnitude):
            raise MultiplicationOverflow("product has bit 255 set")
        return I256(negative, magnitude)


# =============================================================================
# СРАВНЕНИЕ
# =============================================================================


def abs_compare(a: I256, b: I256) -> Ordering:
    """Сравнение модулей лексикографически от старшего лимба к младшему."""
    for index in reversed(range(I256_LIMBS)):
        left = get_limb(a.magnitude, index)
        right = get_limb(b.magnitude, index)
        if left != right:
            return Ordering.LESS if left < right else Ordering.GREATER
    return Ordering.EQUAL


def compare(a: I256, b: I256) -> Ordering:
    """
    Знаковое сравнение.

    Разные знаки решаются знаком (отрицательное меньше). Одинаковые —
    по модулю, с инверсией для двух отрицательных.
    """
    if a.negative != b.negative:
        return Ordering.LESS if a.negative else Ordering.GREATER
    ordering = abs_compare(a, b)
    if a.negative:
        return Ordering(-ordering.value)
    return ordering


# =============================================================================
# СЛОЖЕНИЕ И ВЫЧИТАНИЕ
# =============================================================================


def add_without_sign(a: Limbs, b: Limbs) -> Limbs:
    """
    Сложение модулей с переносом по лимбам.

    Raises:
        AdditionOverflow: Перенос за лимб 3 или установлен bit 255
    """
    result = zero_limbs(I256_LIMBS)
    carry = 0
    for index in range(I256_LIMBS):
        total = get_limb(a, index) + get_limb(b, index) + carry
        result = put_limb(result, index, total & LIMB_MASK)
        carry = total >> LIMB_BITS
    if carry or _sign_bit_set(result):
        raise AdditionOverflow("I256 addition overflow")
    return result


def sub_without_sign(larger: Limbs, smaller: Limbs) -> Limbs:
    """
    Вычитание меньшего модуля из большего с заёмом по лимбам.

    Raises:
        SubtractionOverflow: Заём после лимба 3 или установлен bit 255
    """
    result = zero_limbs(I256_LIMBS)
    borrow = 0
    for index in range(I256_LIMBS):
        diff = get_limb(larger, index) - get_limb(smaller, index) - borrow
        borrow = 1 if diff < 0 else 0
        result = put_limb(result, index, diff + (borrow << LIMB_BITS))
    if borrow or _sign_bit_set(result):
        raise SubtractionOverflow("I256 subtraction overflow")
    return result


def add(a: I256, b: I256) -> I256:
    """
    Знаковое сложение.

    Одинаковые знаки складывают модули; разные вычитают меньший модуль
    из большего, знак берётся у операнда с большим модулем.

    Raises:
        AdditionOverflow: Результат вне диапазона I256
    """
    if a.negative == b.negative:
        return I256(a.negative, add_without_sign(a.magnitude, b.magnitude))
    if abs_compare(a, b) is Ordering.LESS:
        return I256(b.negative, sub_without_sign(b.magnitude, a.magnitude))
    return I256(a.negative, sub_without_sign(a.magnitude, b.magnitude))


def sub(a: I256, b: I256) -> I256:
    """
    Знаковое вычитание.

    Разные знаки складывают модули (знак у a). Одинаковые: если |a| < |b|,
    считается |b| - |a| с инвертированным знаком.

    Raises:
        SubtractionOverflow: Результат вне диапазона I256
    """
    if a.negative != b.negative:
        try:
            magnitude = add_without_sign(a.magnitude, b.magnitude)
        except AdditionOverflow as exc:
            raise SubtractionOverflow("I256 subtraction overflow") from exc
        return I256(a.negative, magnitude)
    if abs_compare(a, b) is Ordering.LESS:
        return I256(not a.negative, sub_without_sign(b.magnitude, a.magnitude))
    return I256(a.negative, sub_without_sign(a.magnitude, b.magnitude))


# =============================================================================
# УМНОЖЕНИЕ
# =============================================================================


def mul(a: I256, b: I256) -> I256:
    """
    Знаковое умножение: школьный алгоритм 4x4 лимба в DI256.

    Каждое произведение лимбов (до 128 бит) раскладывается на младшее
    и старшее слово, которые добавляются в аккумулятор с переносом.
    Знак результата — XOR знаков операндов.

    Raises:
        MultiplicationOverflow: Произведение не сужается до I256

    Examples:
        >>> mul(I256.from_int(-285), I256.from_int(375)).to_int()
        -106875
    """
    accumulator = DI256.zero()
    for i in range(I256_LIMBS):
        a_limb = get_limb(a.magnitude, i)
        if a_limb == 0:
            continue
        for j in range(I256_LIMBS):
            product = a_limb * get_limb(b.magnitude, j)
            accumulator = accumulator.accumulate(i + j, product & LIMB_MASK)
            accumulator = accumulator.accumulate(i + j + 1, product >> LIMB_BITS)
    return accumulator.narrow(a.negative != b.negative)


# =============================================================================
# TWO'S COMPLEMENT И ПОБИТОВЫЕ ОПЕРАЦИИ
# =============================================================================


def get_complement(value: I256) -> I256:
    """
    Two's-complement паттерн отрицательного значения: NOT(модуль) + 1.

    Для неотрицательных — тождество. Повторное применение к паттерну
    с флагом negative возвращает исходное значение.
    """
    if not value.negative:
        return value
    pattern = zero_limbs(I256_LIMBS)
    carry = 1
    for index in range(I256_LIMBS):
        total = (~get_limb(value.magnitude, index) & LIMB_MASK) + carry
        pattern = put_limb(pattern, index, total & LIMB_MASK)
        carry = total >> LIMB_BITS
    return I256._from_pattern(True, pattern)


def _from_twos_complement(negative: bool, pattern: Limbs) -> I256:
    result = get_complement(I256._from_pattern(negative, pattern))
    if _sign_bit_set(result.magnitude):
        raise ConversionOverflow("two's-complement pattern does not map back to I256")
    return result


def shr(value: I256, shift: int) -> I256:
    """
    Арифметический сдвиг вправо (floor деления на 2^shift).

    Алгоритм: two's-complement паттерн → сдвиг на shift // 64 слов и
    shift % 64 бит с подтягиванием битов из следующего лимба → для
    отрицательных OR маски единиц в освободившихся старших битах →
    обратно из two's complement.

    Args:
        value: Сдвигаемое значение
        shift: Величина сдвига; >= 256 выдвигает все биты

    Raises:
        ValueError: Если shift не int или отрицательный

    Examples:
        >>> shr(I256.from_int(-100), 2).to_int()
        -25
        >>> shr(I256.from_int(-5), 1).to_int()
        -3
    """
    if not isinstance(shift, int) or isinstance(shift, bool):
        raise ValueError(f"shift must be an int, got {type(shift).__name__}")
    if shift < 0:
        raise ValueError(f"shift must be non-negative, got {shift}")
    if shift > MAX_SHIFT:
        return I256.from_int(-1 if value.negative else 0)

    pattern = get_complement(value).magnitude
    word_shift, bit_shift = divmod(shift, LIMB_BITS)

    shifted = zero_limbs(I256_LIMBS)
    for index in range(I256_LIMBS - word_shift):
        source = index + word_shift
        word = get_limb(pattern, source) >> bit_shift
        if bit_shift and source + 1 < I256_LIMBS:
            word |= (get_limb(pattern, source + 1) << (LIMB_BITS - bit_shift)) & LIMB_MASK
        shifted = put_limb(shifted, index, word)

    if value.negative:
        mask = _SIGN_EXTENSION_MASKS[shift]
        shifted = tuple(
            get_limb(shifted, index) | get_limb(mask, index) for index in range(I256_LIMBS)
        )

    return _from_twos_complement(value.negative, shifted)


def bit_or(a: I256, b: I256) -> I256:
    """
    Побитовое OR в two's-complement семантике.

    Знак результата — OR знаков. Так положительная битовая маска
    вливается в отрицательный аккумулятор логарифма.

    Examples:
        >>> bit_or(I256.from_int(-8), I256.from_int(3)).to_int()
        -5
    """
    left = get_complement(a).magnitude
    right = get_complement(b).magnitude
    pattern = tuple(get_limb(left, index) | get_limb(right, index) for index in range(I256_LIMBS))
    return _from_twos_complement(a.negative or b.negative, pattern)
