"""
Основные доменные типы и утилиты общего ядра.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Any, Iterator, Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

# Идентификатор бронирования хранится строкой вида "GB-20240105-1A2B3C"
EntityId = str

CENT = Decimal("0.01")


def generate_id() -> UUID:
    """Генерирует новый UUID."""
    return uuid4()


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Округляет сумму до копеек (половина округляется от нуля)."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def round_half_up(value: Union[Decimal, float]) -> int:
    """Округляет до целого, половина округляется от нуля."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# Общие исключения
class DomainException(Exception):
    """Базовое исключение для доменных ошибок (ожидаемых и исправимых)."""

    pass


class InvalidDateRange(DomainException):
    """Дата выезда не позже даты заезда или число ночей не положительно."""

    def __init__(self, check_in: Optional[date], check_out: Optional[date], message: str = ""):
        self.check_in = check_in
        self.check_out = check_out
        super().__init__(
            message
            or f"Дата выезда ({check_out}) должна быть позже даты заезда ({check_in})"
        )


class RoomNotFound(DomainException):
    """Номер отсутствует в каталоге."""

    def __init__(self, room_number: str):
        self.room_number = room_number
        super().__init__(f"Номер {room_number} не найден")


class BookingNotFound(DomainException):
    """Бронирование отсутствует в хранилище."""

    def __init__(self, booking_id: EntityId):
        self.booking_id = booking_id
        super().__init__(f"Бронирование {booking_id} не найдено")


class RoomUnavailable(DomainException):
    """Ни один номер (или запрошенный номер) не свободен на указанные даты."""

    def __init__(self, room_number: Optional[str], check_in: date, check_out: date):
        self.room_number = room_number
        self.check_in = check_in
        self.check_out = check_out
        target = f"Номер {room_number}" if room_number else "Свободных номеров"
        super().__init__(f"{target} недоступен на период {check_in} - {check_out}")


class InvalidStateTransition(DomainException):
    """Операция недопустима в текущем статусе бронирования."""

    def __init__(self, booking_id: EntityId, expected: Any, actual: Any, operation: str = ""):
        self.booking_id = booking_id
        self.expected = tuple(expected) if isinstance(expected, (list, tuple, set, frozenset)) else (expected,)
        self.actual = actual
        self.operation = operation
        expected_text = ", ".join(str(getattr(s, "value", s)) for s in self.expected)
        super().__init__(
            f"Невозможно выполнить {operation or 'переход'} для бронирования {booking_id}: "
            f"ожидался статус {expected_text}, текущий статус {getattr(actual, 'value', actual)}"
        )


class InvalidPayment(DomainException):
    """Некорректная сумма платежа."""

    pass


class CapacityExceeded(DomainException):
    """Количество гостей превышает вместимость номера."""

    def __init__(self, room_number: str, guest_count: int, max_occupancy: int):
        self.room_number = room_number
        self.guest_count = guest_count
        self.max_occupancy = max_occupancy
        super().__init__(
            f"Превышена вместимость номера {room_number} "
            f"(макс. {max_occupancy} человек, запрошено {guest_count})"
        )


class InfrastructureError(Exception):
    """Базовое исключение для неустранимых сбоев инфраструктуры."""

    pass


class StoreUnavailable(InfrastructureError):
    """Хранилище недоступно для чтения или записи."""

    pass


@dataclass(frozen=True)
class DateRange:
    """Полуинтервал дат [check_in, check_out)."""

    check_in: date
    check_out: date

    def __post_init__(self):
        if self.check_out <= self.check_in:
            raise InvalidDateRange(self.check_in, self.check_out)

    @property
    def nights(self) -> int:
        """Количество ночей в периоде."""
        return (self.check_out - self.check_in).days

    def overlaps(self, check_in: date, check_out: date) -> bool:
        """Пересекается ли период с [check_in, check_out); общая граница не конфликт."""
        return not (self.check_out <= check_in or self.check_in >= check_out)

    def contains(self, day: date) -> bool:
        return self.check_in <= day < self.check_out

    def each_night(self) -> Iterator[date]:
        """Даты всех ночей периода."""
        for offset in range(self.nights):
            yield self.check_in + timedelta(days=offset)


class DomainEvent(BaseModel):
    """Базовый класс для всех доменных событий."""

    model_config = ConfigDict(frozen=True)

    event_id: UUID = Field(default_factory=generate_id)
    occurred_on: datetime = Field(default_factory=lambda: now())


# Общие перечисления
class RoomStatus(str, Enum):
    """Статусы номеров."""

    VACANT = "Vacant"
    OCCUPIED = "Occupied"
    MAINTENANCE = "Maintenance"
    PENDING = "Pending"


class BookingStatus(str, Enum):
    """Статусы бронирования."""

    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CHECKED_IN = "Checked In"
    CHECKED_OUT = "Checked Out"
    CANCELLED = "Cancelled"


class PaymentStatus(str, Enum):
    """Статусы оплаты бронирования."""

    PAID = "Paid"
    DUE = "Due"
    PARTIAL = "Partial"


# Бронирования, которые занимают номер и участвуют в проверке пересечений
BLOCKING_STATUSES = frozenset({BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN})

# Бронирования, фактически занимавшие номер
REALIZED_STATUSES = frozenset({BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT})

TERMINAL_STATUSES = frozenset({BookingStatus.CHECKED_OUT, BookingStatus.CANCELLED})


# Общие утилиты
def now() -> datetime:
    """Возвращает текущую дату и время."""
    return datetime.now(timezone.utc)


def today() -> date:
    """Возвращает текущую дату."""
    return date.today()
