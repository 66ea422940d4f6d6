"""
Настройки ядра гостевых номеров.

Значения по умолчанию переопределяются переменными окружения с префиксом
``GUEST_ROOMS_``. Объект настроек неизменяем: он создается один раз в
точке сборки и явно передается каждому сервису.
"""
from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Optional, Tuple

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GuestRoomsSettings(BaseSettings):
    """Константы объекта размещения и тарифная политика."""

    model_config = SettingsConfigDict(
        env_prefix="GUEST_ROOMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    property_name: str = Field(
        default="Parsonage Living Community",
        description="Название объекта в уведомлениях гостям",
    )
    currency: str = Field(default="USD", max_length=3, description="Код валюты ISO 4217")

    monthly_threshold_nights: int = Field(default=28, description="С этого числа ночей действует месячный тариф")
    weekly_threshold_nights: int = Field(default=7, description="С этого числа ночей действует недельный тариф")
    monthly_discount: Decimal = Field(
        default=Decimal("0.8"), description="Коэффициент, если у номера нет месячной цены"
    )
    weekly_discount: Decimal = Field(
        default=Decimal("0.9"), description="Коэффициент, если у номера нет недельной цены"
    )
    weekend_premium: Decimal = Field(default=Decimal("1.25"), description="Наценка за ночь выходного дня")
    weekend_days: Tuple[int, ...] = Field(
        default=(4, 5), description="Выходные ночи как номера date.weekday() (пн=0)"
    )
    summer_months: Tuple[int, ...] = Field(default=(6, 7, 8))
    summer_multiplier: Decimal = Field(default=Decimal("1.15"))
    winter_months: Tuple[int, ...] = Field(default=(1, 2))
    winter_multiplier: Decimal = Field(default=Decimal("0.9"))

    ledger_category: str = Field(default="Guest Room", description="Категория дохода в финансовом журнале")
    ledger_type: str = Field(default="Guest Room Income", description="Тип записи дохода в финансовом журнале")

    enforce_guest_capacity: bool = Field(
        default=False,
        description="Отклонять брони, где гостей больше вместимости номера",
    )

    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    data_dir: Optional[Path] = Field(
        default=None, description="Каталог JSON-хранилищ; если не задан, данные хранятся в памяти"
    )

    @field_validator(
        "monthly_discount",
        "weekly_discount",
        "weekend_premium",
        "summer_multiplier",
        "winter_multiplier",
    )
    @classmethod
    def _positive_multiplier(cls, value: Decimal) -> Decimal:
        if value <= 0:
            raise ValueError("Коэффициенты должны быть положительными")
        return value

    @field_validator("weekend_days")
    @classmethod
    def _valid_weekdays(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if any(day < 0 or day > 6 for day in value):
            raise ValueError("Выходные дни задаются числами от 0 (пн) до 6 (вс)")
        return value

    @field_validator("summer_months", "winter_months")
    @classmethod
    def _valid_months(cls, value: Tuple[int, ...]) -> Tuple[int, ...]:
        if any(month < 1 or month > 12 for month in value):
            raise ValueError("Месяцы задаются числами от 1 до 12")
        return value

    @model_validator(mode="after")
    def _ordered_thresholds(self) -> "GuestRoomsSettings":
        if not 0 < self.weekly_threshold_nights < self.monthly_threshold_nights:
            raise ValueError("Ожидается 0 < weekly_threshold_nights < monthly_threshold_nights")
        return self

    def seasonal_multiplier(self, month: int) -> Decimal:
        """Сезонный коэффициент для месяца."""
        if month in self.summer_months:
            return self.summer_multiplier
        if month in self.winter_months:
            return self.winter_multiplier
        return Decimal("1")


def load_settings(**overrides) -> GuestRoomsSettings:
    """Создает настройки из окружения; явные значения имеют приоритет."""
    return GuestRoomsSettings(**overrides)
