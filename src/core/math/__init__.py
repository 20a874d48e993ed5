"""
Core math modules для clmm-tickmath

Арифметика фиксированной ширины и конверсия tick <-> sqrt price
с точной детекцией переполнения на каждом шаге.
"""

# Errors
from src.core.math.errors import (
    AdditionOverflow,
    CastOverflow,
    ConversionOverflow,
    DivisionByZero,
    FixedWidthArithmeticError,
    InvariantViolation,
    LimbIndexOutOfRange,
    MultiplicationOverflow,
    SqrtPriceOutOfRange,
    SubtractionOverflow,
    TickMathDomainError,
    TickOutOfRange,
    Uint256Overflow,
    Uint256Underflow,
)

# Fixed-width substrate
from src.core.math.fixed_width import (
    I64_MAX,
    I64_MIN,
    U64_MAX,
    U128_MAX,
    U256_MAX,
    Ordering,
)

# I256
from src.core.math.i256 import (
    I256,
    abs_compare,
    add,
    bit_or,
    compare,
    get_complement,
    mul,
    shr,
    sub,
)

# Tick Math
from src.core.math.tick_math import (
    DEFAULT_TICK_MATH_CONFIG,
    MAX_SQRT_PRICE,
    MAX_TICK,
    MIN_SQRT_PRICE,
    MIN_TICK,
    Q96,
    TickMathConfig,
    get_log_sqrt_price_floor,
    get_sqrt_price,
    is_valid_tick,
    max_tick_for_spacing,
    min_tick_for_spacing,
    round_tick_to_spacing,
)

__all__ = [
    # Errors
    "FixedWidthArithmeticError",
    "ConversionOverflow",
    "AdditionOverflow",
    "SubtractionOverflow",
    "MultiplicationOverflow",
    "CastOverflow",
    "Uint256Overflow",
    "Uint256Underflow",
    "DivisionByZero",
    "InvariantViolation",
    "LimbIndexOutOfRange",
    "TickMathDomainError",
    "TickOutOfRange",
    "SqrtPriceOutOfRange",
    # Fixed-width - Constants
    "U64_MAX",
    "U128_MAX",
    "U256_MAX",
    "I64_MIN",
    "I64_MAX",
    # Fixed-width - Types
    "Ordering",
    # I256 - Types
    "I256",
    # I256 - Functions
    "abs_compare",
    "add",
    "bit_or",
    "compare",
    "get_complement",
    "mul",
    "shr",
    "sub",
    # Tick Math - Constants
    "MIN_TICK",
    "MAX_TICK",
    "MIN_SQRT_PRICE",
    "MAX_SQRT_PRICE",
    "Q96",
    "DEFAULT_TICK_MATH_CONFIG",
    # Tick Math - Types
    "TickMathConfig",
    # Tick Math - Functions
    "get_sqrt_price",
    "get_log_sqrt_price_floor",
    "is_valid_tick",
    "min_tick_for_spacing",
    "max_tick_for_spacing",
    "round_tick_to_spacing",
]
