"""
PriceLevel — Модель ценового уровня (tick + sqrt price)

Immutable Pydantic модель, связывающая тик с sqrt price в формате Q64.96.
Инвариант модели: tick — floor-тик своей sqrt price, т.е.
    get_sqrt_price(tick) <= sqrt_price < get_sqrt_price(tick + 1)
"""

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from src.core.math.tick_math import (
    MAX_SQRT_PRICE,
    MAX_TICK,
    MIN_SQRT_PRICE,
    MIN_TICK,
    get_log_sqrt_price_floor,
    get_sqrt_price,
    is_valid_tick,
)


class PriceLevel(BaseModel):
    """
    Ценовой уровень на лестнице тиков.

    Immutable модель (frozen=True); любые изменения создают новый экземпляр.
    """

    tick: int = Field(..., ge=MIN_TICK, le=MAX_TICK, description="Тик (floor-тик sqrt price)")
    sqrt_price: int = Field(..., description="sqrt price в формате Q64.96")

    model_config = {"frozen": True}  # Immutable

    @field_validator("sqrt_price")
    @classmethod
    def validate_sqrt_price_range(cls, v: int) -> int:
        """Проверка диапазона [MIN_SQRT_PRICE, MAX_SQRT_PRICE]."""
        if not MIN_SQRT_PRICE <= v <= MAX_SQRT_PRICE:
            raise ValueError(
                f"sqrt_price {v} outside [{MIN_SQRT_PRICE}, {MAX_SQRT_PRICE}]"
            )
        return v

    @model_validator(mode="after")
    def validate_floor_tick(self) -> "PriceLevel":
        """Проверка, что tick — floor-тик для sqrt_price."""
        lower = get_sqrt_price(self.tick)
        if self.sqrt_price < lower:
            raise ValueError(
                f"sqrt_price {self.sqrt_price} is below the price of tick {self.tick} ({lower})"
            )
        if self.tick < MAX_TICK:
            upper = get_sqrt_price(self.tick + 1)
            if self.sqrt_price >= upper:
                raise ValueError(
                    f"sqrt_price {self.sqrt_price} reaches the price of tick "
                    f"{self.tick + 1} ({upper})"
                )
        return self

    @classmethod
    def from_tick(cls, tick: int) -> "PriceLevel":
        """Уровень ровно на цене тика."""
        return cls(tick=tick, sqrt_price=get_sqrt_price(tick))

    @classmethod
    def from_sqrt_price(cls, sqrt_price: int) -> "PriceLevel":
        """
        Уровень для произвольной sqrt price.

        MAX_SQRT_PRICE (цена MAX_TICK) отображается в MAX_TICK.

        Raises:
            SqrtPriceOutOfRange: Если sqrt_price вне [MIN_SQRT_PRICE, MAX_SQRT_PRICE]
        """
        if sqrt_price == MAX_SQRT_PRICE:
            return cls.from_tick(MAX_TICK)
        return cls(tick=get_log_sqrt_price_floor(sqrt_price), sqrt_price=sqrt_price)

    def is_aligned(self, tick_spacing: int) -> bool:
        """Тик уровня кратен tick_spacing."""
        return is_valid_tick(self.tick, tick_spacing)

    @field_serializer("sqrt_price", when_used="json")
    def serialize_sqrt_price(self, v: int) -> str:
        # 160-битные значения не представимы в JSON number без потери точности
        return str(v)
