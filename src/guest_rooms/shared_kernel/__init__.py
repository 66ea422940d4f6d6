"""
Общее ядро (Shared Kernel) системы управления гостевыми номерами.

Содержит общие типы данных и утилиты, используемые в различных ограниченных контекстах.
"""

from .domain import (
    BLOCKING_STATUSES,
    REALIZED_STATUSES,
    TERMINAL_STATUSES,
    BookingNotFound,
    BookingStatus,
    CapacityExceeded,
    DateRange,
    DomainEvent,
    # Исключения
    DomainException,
    # Базовые типы
    EntityId,
    InfrastructureError,
    InvalidDateRange,
    InvalidPayment,
    InvalidStateTransition,
    PaymentStatus,
    RoomNotFound,
    # Перечисления
    RoomStatus,
    RoomUnavailable,
    StoreUnavailable,
    generate_id,
    # Утилиты
    now,
    round_half_up,
    to_money,
    today,
)

__all__ = [
    # Базовые типы
    "EntityId",
    "generate_id",
    # Основные классы
    "DateRange",
    "DomainEvent",
    # Перечисления
    "RoomStatus",
    "BookingStatus",
    "PaymentStatus",
    "BLOCKING_STATUSES",
    "REALIZED_STATUSES",
    "TERMINAL_STATUSES",
    # Исключения
    "DomainException",
    "InvalidDateRange",
    "RoomNotFound",
    "BookingNotFound",
    "RoomUnavailable",
    "InvalidStateTransition",
    "InvalidPayment",
    "CapacityExceeded",
    "InfrastructureError",
    "StoreUnavailable",
    # Утилиты
    "now",
    "today",
    "to_money",
    "round_half_up",
]
