"""
Tick Math — конверсия tick <-> sqrt price

Тик — целочисленный индекс геометрической лестницы цен:
    price = 1.0001^tick
    sqrt_price = sqrt(1.0001)^tick, формат Q64.96 (2^96 == 1.0)

Прямое направление (get_sqrt_price): битовое разложение |tick|, каждый
установленный бит умножает Q128.128 аккумулятор на предвычисленную
константу sqrt(1.0001)^(-2^k), затем обращение для неотрицательных тиков
и сдвиг на 32 бита с округлением вверх.

Обратное направление (get_log_sqrt_price_floor): целочисленный log2 через
поиск старшего бита и 14 раундов возведения в квадрат в знаковом I256
аккумуляторе, перевод в log_sqrt(1.0001) и коррекция на границе тика
пересчётом прямого направления.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Результаты детерминированы бит-в-бит (константы и порядок операций фиксированы)
2. get_sqrt_price(get_log_sqrt_price_floor(p)) <= p (floor-тик)
3. Переполнение на любом шаге → исключение (U256 / I256 checked операции)
"""

import logging
from dataclasses import dataclass
from typing import Final, Optional

from src.core.math.errors import SqrtPriceOutOfRange, TickOutOfRange
from src.core.math.fixed_width import (
    MAX_SHIFT,
    U16_MAX,
    U32_MAX,
    U64_MAX,
    U128_MAX,
    U256_MAX,
    i64_abs,
    i64_is_neg,
    require_i64,
    require_u256,
    u256_add,
    u256_div,
    u256_mul,
    u256_shl,
    u256_shr,
)
from src.core.math.i256 import I256, bit_or, shr

logger = logging.getLogger(__name__)

# =============================================================================
# ПАРАМЕТРЫ ЛЕСТНИЦЫ ТИКОВ
# =============================================================================

MIN_TICK: Final[int] = -887272
MAX_TICK: Final[int] = -MIN_TICK

# get_sqrt_price(MIN_TICK) и get_sqrt_price(MAX_TICK)
MIN_SQRT_PRICE: Final[int] = 4295128739
MAX_SQRT_PRICE: Final[int] = 1461446703485210103287273052203988822378723970342

# 1.0 в формате Q64.96
Q96: Final[int] = 1 << 96

# Битовое разложение покрывает |tick| < 2^20 (биты 2^0 .. 2^19)
TICK_BIT_LIMIT: Final[int] = 1 << 20

# =============================================================================
# МАГИЧЕСКИЕ КОНСТАНТЫ (Q128.128)
# =============================================================================

# Стартовое значение аккумулятора: |tick| нечётный / чётный
_RATIO_ODD_TICK: Final[int] = 0xFFFCB933BD6FAD37AA2D162D1A594001
_RATIO_EVEN_TICK: Final[int] = 1 << 128

# (маска бита |tick|, sqrt(1.0001)^(-маска) в Q128)
_TICK_BIT_MULTIPLIERS: Final[tuple[tuple[int, int], ...]] = (
    (0x2, 0xFFF97272373D413259A46990580E213A),
    (0x4, 0xFFF2E50F5F656932EF12357CF3C7FDCC),
    (0x8, 0xFFE5CACA7E10E4E61C3624EAA0941CD0),
    (0x10, 0xFFCB9843D60F6159C9DB58835C926644),
    (0x20, 0xFF973B41FA98C081472E6896DFB254C0),
    (0x40, 0xFF2EA16466C96A3843EC78B326B52861),
    (0x80, 0xFE5DEE046A99A2A811C461F1969C3053),
    (0x100, 0xFCBE86C7900A88AEDCFFC83B479AA3A4),
    (0x200, 0xF987A7253AC413176F2B074CF7815E54),
    (0x400, 0xF3392B0822B70005940C7A398E4B70F3),
    (0x800, 0xE7159475A2C29B7443B29C7FA6E889D9),
    (0x1000, 0xD097F3BDFD2022B8845AD8F792AA5825),
    (0x2000, 0xA9F746462D870FDF8A65DC1F90E061E5),
    (0x4000, 0x70D869A156D2A1B890BB3DF62BAF32F7),
    (0x8000, 0x31BE135F97D08FD981231505542FCFA6),
    (0x10000, 0x9AA508B5B7A84E1C677DE54F3E99BC9),
    (0x20000, 0x5D6AF8DEDB81196699C329225EE604),
    (0x40000, 0x2216E584F5FA1EA926041BEDFE98),
    (0x80000, 0x48A170391F7DC42444E8FA2),
)

# Пороги поиска старшего бита: (2^(2^k) - 1, k)
_MSB_THRESHOLDS: Final[tuple[tuple[int, int], ...]] = (
    (U128_MAX, 7),
    (U64_MAX, 6),
    (U32_MAX, 5),
    (U16_MAX, 4),
    (0xFF, 3),
    (0xF, 2),
    (0x3, 1),
)

# log2 -> log_sqrt(1.0001): 1 / log2(sqrt(1.0001)) в Q64 (результат Q128.128)
LOG_SQRT_10001_MULTIPLIER: Final[int] = 255738958999603826347141

# Границы ошибки аппроксимации log_sqrt(1.0001) в Q128.128
LOG_FLOOR_ERROR: Final[int] = 3402992956809132418596140100660247210
LOG_UPPER_ERROR: Final[int] = 291339464771989622907027621153398088495

# Битовые позиции дробной части log2 (Q64): 63..51 в цикле, 50 в финальном раунде
_REFINEMENT_OFFSETS: Final[range] = range(63, 50, -1)
_FINAL_REFINEMENT_OFFSET: Final[int] = 50


# =============================================================================
# КОНФИГУРАЦИЯ
# =============================================================================


@dataclass(frozen=True)
class TickMathConfig:
    """Конфигурация границ тиков.

    max_tick ограничивает |tick|; по умолчанию стандартная лестница
    [-887272, 887272]. Сверху ограничен охватом битового разложения (2^20).
    """

    max_tick: int = MAX_TICK

    def __post_init__(self) -> None:
        if not isinstance(self.max_tick, int) or isinstance(self.max_tick, bool):
            raise ValueError(f"max_tick must be an int, got {type(self.max_tick).__name__}")
        if not 0 < self.max_tick < TICK_BIT_LIMIT:
            raise ValueError(f"max_tick must be in (0, {TICK_BIT_LIMIT}), got {self.max_tick}")

    @property
    def min_tick(self) -> int:
        return -self.max_tick

    @property
    def min_sqrt_price(self) -> int:
        if self.max_tick == MAX_TICK:
            return MIN_SQRT_PRICE
        return get_sqrt_price(self.min_tick, self)

    @property
    def max_sqrt_price(self) -> int:
        if self.max_tick == MAX_TICK:
            return MAX_SQRT_PRICE
        return get_sqrt_price(self.max_tick, self)


DEFAULT_TICK_MATH_CONFIG: Final[TickMathConfig] = TickMathConfig()


# =============================================================================
# TICK -> SQRT PRICE
# =============================================================================


def get_sqrt_price(tick: int, config: Optional[TickMathConfig] = None) -> int:
    """
    sqrt(1.0001)^tick в формате Q64.96.

    Args:
        tick: Тик (signed 64)
        config: Границы тиков (default: DEFAULT_TICK_MATH_CONFIG)

    Returns:
        sqrt price, округлённый вверх на последнем сдвиге

    Raises:
        ValueError: Если tick не i64
        TickOutOfRange: Если |tick| > config.max_tick

    Examples:
        >>> get_sqrt_price(0) == Q96
        True
        >>> get_sqrt_price(MIN_TICK)
        4295128739
    """
    config = config or DEFAULT_TICK_MATH_CONFIG
    require_i64(tick, "tick")
    abs_tick = i64_abs(tick)
    if abs_tick > config.max_tick:
        logger.debug("Rejected tick %d outside [-%d, %d]", tick, config.max_tick, config.max_tick)
        raise TickOutOfRange(f"tick {tick} is outside [{config.min_tick}, {config.max_tick}]")

    ratio = _RATIO_ODD_TICK if abs_tick & 0x1 else _RATIO_EVEN_TICK
    for mask, multiplier in _TICK_BIT_MULTIPLIERS:
        if abs_tick & mask:
            ratio = u256_shr(u256_mul(ratio, multiplier), 128)

    # Аккумулятор хранит sqrt(1.0001)^(-|tick|); для tick >= 0 обращаем.
    # При tick == 0 обращение 2^128 даёт 2^128 - 1, что после округления
    # вверх совпадает с 2^96.
    if not i64_is_neg(tick):
        ratio = u256_div(U256_MAX, ratio)

    # Q128.128 -> Q64.96 с округлением вверх
    sqrt_price = u256_shr(ratio, 32)
    if ratio & U32_MAX:
        sqrt_price = u256_add(sqrt_price, 1)
    return sqrt_price


# =============================================================================
# SQRT PRICE -> TICK
# =============================================================================


def _shr_wrapped(value: int, amount: int) -> int:
    # Сдвиг на произвольную величину порциями по байту
    while amount > MAX_SHIFT:
        value = u256_shr(value, MAX_SHIFT)
        amount -= MAX_SHIFT
    return u256_shr(value, amount)


def _most_significant_bit(value: int) -> int:
    msb = 0
    for threshold, offset in _MSB_THRESHOLDS:
        bit = (1 if value > threshold else 0) << offset
        msb |= bit
        value = u256_shr(value, bit)
    return msb | (1 if value > 1 else 0)


def get_log_sqrt_price_floor(sqrt_price: int, config: Optional[TickMathConfig] = None) -> int:
    """
    Наибольший тик, для которого get_sqrt_price(tick) <= sqrt_price.

    Алгоритм:
        1. ratio = sqrt_price << 32 (Q128.128), m = старший бит ratio
        2. r нормализуется в [2^127, 2^128), l2 = (m - 128) << 64 (знаковый Q64)
        3. 14 раундов: r = r^2 >> 127, старший бит r >> 128 даёт очередной
           бит дробной части l2 (через знаковый OR)
        4. ls10001 = l2 * LOG_SQRT_10001_MULTIPLIER (Q128.128)
        5. tick_low/tick_high из границ ошибки; при расхождении —
           пересчёт get_sqrt_price(tick_high) и сравнение с входом

    Args:
        sqrt_price: sqrt price в Q64.96
        config: Границы тиков (default: DEFAULT_TICK_MATH_CONFIG)

    Raises:
        ValueError: Если sqrt_price не U256
        SqrtPriceOutOfRange: Если sqrt_price вне [min_sqrt_price, max_sqrt_price)

    Examples:
        >>> get_log_sqrt_price_floor(Q96)
        0
    """
    config = config or DEFAULT_TICK_MATH_CONFIG
    require_u256(sqrt_price, "sqrt_price")
    # Верхняя граница строгая: цена тика max_tick недостижима как вход
    if not config.min_sqrt_price <= sqrt_price < config.max_sqrt_price:
        logger.debug("Rejected sqrt price %d outside the tick ladder", sqrt_price)
        raise SqrtPriceOutOfRange(
            f"sqrt_price {sqrt_price} is outside "
            f"[{config.min_sqrt_price}, {config.max_sqrt_price})"
        )

    ratio = u256_shl(sqrt_price, 32)
    msb = _most_significant_bit(ratio)

    if msb >= 128:
        r = u256_shr(ratio, msb - 127)
        log_2 = I256.from_u128((msb - 128) << 64, False)
    else:
        r = u256_shl(ratio, 127 - msb)
        log_2 = I256.from_u128((128 - msb) << 64, True)

    for offset in _REFINEMENT_OFFSETS:
        r = u256_shr(u256_mul(r, r), 127)
        bit = u256_shr(r, 128)
        log_2 = bit_or(log_2, I256.from_u128(bit << offset, False))
        r = _shr_wrapped(r, bit)

    r = u256_shr(u256_mul(r, r), 127)
    bit = u256_shr(r, 128)
    log_2 = bit_or(log_2, I256.from_u128(bit << _FINAL_REFINEMENT_OFFSET, False))

    log_sqrt10001 = log_2 * I256.from_u128(LOG_SQRT_10001_MULTIPLIER, False)

    tick_low = shr(log_sqrt10001 - I256.from_u128(LOG_FLOOR_ERROR, False), 128).as_i64()
    tick_high = shr(log_sqrt10001 + I256.from_u128(LOG_UPPER_ERROR, False), 128).as_i64()

    if tick_low == tick_high:
        return tick_low

    if get_sqrt_price(tick_high, config) <= sqrt_price:
        logger.debug("Tick boundary tie-break for %d: chose upper tick %d", sqrt_price, tick_high)
        return tick_high
    logger.debug("Tick boundary tie-break for %d: chose lower tick %d", sqrt_price, tick_low)
    return tick_low


# =============================================================================
# TICK SPACING
# =============================================================================


def _require_tick_spacing(tick_spacing: int) -> None:
    if not isinstance(tick_spacing, int) or isinstance(tick_spacing, bool) or tick_spacing <= 0:
        raise ValueError(f"tick_spacing must be a positive int, got {tick_spacing!r}")


def min_tick_for_spacing(tick_spacing: int, config: Optional[TickMathConfig] = None) -> int:
    """
    Наименьший тик, кратный tick_spacing, в пределах лестницы.

    Examples:
        >>> min_tick_for_spacing(60)
        -887220
    """
    config = config or DEFAULT_TICK_MATH_CONFIG
    _require_tick_spacing(tick_spacing)
    return -(config.max_tick // tick_spacing) * tick_spacing


def max_tick_for_spacing(tick_spacing: int, config: Optional[TickMathConfig] = None) -> int:
    """Наибольший тик, кратный tick_spacing, в пределах лестницы."""
    config = config or DEFAULT_TICK_MATH_CONFIG
    _require_tick_spacing(tick_spacing)
    return (config.max_tick // tick_spacing) * tick_spacing


def is_valid_tick(tick: int, tick_spacing: int, config: Optional[TickMathConfig] = None) -> bool:
    """Тик в пределах лестницы и кратен tick_spacing."""
    config = config or DEFAULT_TICK_MATH_CONFIG
    _require_tick_spacing(tick_spacing)
    return config.min_tick <= tick <= config.max_tick and tick % tick_spacing == 0


def round_tick_to_spacing(tick: int, tick_spacing: int) -> int:
    """
    Округление тика вниз до кратного tick_spacing (к -inf).

    Examples:
        >>> round_tick_to_spacing(-5, 10)
        -10
        >>> round_tick_to_spacing(15, 10)
        10
    """
    _require_tick_spacing(tick_spacing)
    return (tick // tick_spacing) * tick_spacing
