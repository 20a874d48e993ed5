"""
Limbs — контейнер 64-битных слов фиксированной длины

Многословные целые (256 и 512 бит) хранятся как кортежи u64-лимбов,
младший лимб первым (limbs[0] — младшие 64 бита).

Это единственный модуль, который обращается к лимбам по сырому индексу.
Всё остальное идёт через get_limb/put_limb, чтобы раскладка оставалась
деталью реализации.
"""

from typing import Final

from src.core.math.errors import LimbIndexOutOfRange

LIMB_BITS: Final[int] = 64
LIMB_MASK: Final[int] = (1 << LIMB_BITS) - 1

# Ширина I256 и аккумулятора умножения DI256 в лимбах
I256_LIMBS: Final[int] = 4
DI256_LIMBS: Final[int] = 8

Limbs = tuple[int, ...]


def _check_index(limbs: Limbs, index: int) -> None:
    if not 0 <= index < len(limbs):
        raise LimbIndexOutOfRange(index, len(limbs))


def get_limb(limbs: Limbs, index: int) -> int:
    """
    Чтение лимба по индексу.

    Raises:
        LimbIndexOutOfRange: Если index вне [0, len(limbs))
    """
    _check_index(limbs, index)
    return limbs[index]


def put_limb(limbs: Limbs, index: int, word: int) -> Limbs:
    """
    Запись лимба по индексу. Исходный кортеж не меняется.

    Args:
        limbs: Исходные лимбы
        index: Индекс в [0, len(limbs))
        word: Новое значение, u64

    Returns:
        Новый кортеж с заменённым лимбом

    Raises:
        LimbIndexOutOfRange: Если index вне диапазона
        ValueError: Если word не помещается в u64
    """
    _check_index(limbs, index)
    if not 0 <= word <= LIMB_MASK:
        raise ValueError(f"Limb word must fit in u64, got {word}")
    return limbs[:index] + (word,) + limbs[index + 1 :]


def zero_limbs(width: int) -> Limbs:
    return (0,) * width


def split_limbs(value: int, width: int) -> Limbs:
    """
    Разбиение неотрицательного int на width лимбов (младший первым).

    Examples:
        >>> split_limbs(2**64 + 5, 4)
        (5, 1, 0, 0)
    """
    if value < 0 or value >> (LIMB_BITS * width):
        raise ValueError(f"Value does not fit in {width} limbs: {value}")
    return tuple((value >> (LIMB_BITS * i)) & LIMB_MASK for i in range(width))


def join_limbs(limbs: Limbs) -> int:
    """Сборка int из лимбов (младший первым)."""
    value = 0
    for index in reversed(range(len(limbs))):
        value = (value << LIMB_BITS) | get_limb(limbs, index)
    return value
