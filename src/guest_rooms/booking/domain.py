"""
Доменная модель контекста бронирования.

Содержит номера и бронирования, а также доменные сервисы
проверки доступности и расчета стоимости проживания.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..config import GuestRoomsSettings
from ..shared_kernel import (
    BLOCKING_STATUSES,
    TERMINAL_STATUSES,
    BookingStatus,
    DateRange,
    DomainEvent,
    EntityId,
    InvalidDateRange,
    InvalidStateTransition,
    PaymentStatus,
    RoomStatus,
    generate_id,
    now,
    to_money,
)


class Room(BaseModel):
    """Гостевой номер."""

    number: str  # Номер комнаты (например, "G1", "101")
    name: str
    daily_rate: Decimal = Field(..., gt=0)
    weekly_rate: Optional[Decimal] = Field(None, gt=0)  # Цена за всю недельную бронь
    monthly_rate: Optional[Decimal] = Field(None, gt=0)  # Цена за всю месячную бронь
    room_type: Optional[str] = None
    max_occupancy: int = Field(1, gt=0)
    amenities: List[str] = Field(default_factory=list)  # Удобства в номере
    status: RoomStatus = RoomStatus.VACANT
    current_guest: Optional[str] = None
    current_booking_id: Optional[EntityId] = None  # Обратная ссылка, не владение
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    last_cleaned: Optional[datetime] = None
    maintenance_notes: Optional[str] = None

    @property
    def is_under_maintenance(self) -> bool:
        return self.status == RoomStatus.MAINTENANCE


# Допустимые переходы конечного автомата бронирования
ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CHECKED_IN, BookingStatus.CANCELLED}),
    BookingStatus.CHECKED_IN: frozenset({BookingStatus.CHECKED_OUT}),
    BookingStatus.CHECKED_OUT: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}


def derive_payment_status(total_amount: Decimal, amount_paid: Decimal) -> PaymentStatus:
    """Определяет статус оплаты по сумме брони и внесенной сумме."""
    if amount_paid >= total_amount:
        return PaymentStatus.PAID
    if amount_paid > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.DUE


class Booking(BaseModel):
    """Бронирование гостевого номера."""

    id: EntityId
    created_at: datetime = Field(default_factory=now)
    guest_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    room_number: str
    check_in_date: date
    check_out_date: date
    guest_count: int = Field(1, gt=0)
    purpose: Optional[str] = None
    special_requests: Optional[str] = None
    total_amount: Decimal = Field(Decimal("0"), ge=0)
    amount_paid: Decimal = Field(Decimal("0"), ge=0)
    payment_status: PaymentStatus = PaymentStatus.DUE
    status: BookingStatus = BookingStatus.PENDING
    source: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("check_out_date")
    @classmethod
    def check_out_after_check_in(cls, v, info):
        check_in = info.data.get("check_in_date")
        if check_in is not None and v <= check_in:
            raise ValueError("Дата выезда должна быть позже даты заезда")
        return v

    @property
    def nights(self) -> int:
        """Количество ночей в бронировании."""
        return (self.check_out_date - self.check_in_date).days

    @property
    def period(self) -> DateRange:
        return DateRange(check_in=self.check_in_date, check_out=self.check_out_date)

    @property
    def balance_due(self) -> Decimal:
        """Остаток к оплате (не отрицательный)."""
        return max(self.total_amount - self.amount_paid, Decimal("0"))

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def require_status(self, operation: str, *expected: BookingStatus) -> None:
        """Проверяет, что бронирование находится в одном из ожидаемых статусов."""
        if self.status not in expected:
            raise InvalidStateTransition(
                booking_id=self.id,
                expected=expected,
                actual=self.status,
                operation=operation,
            )

    def can_transition_to(self, target: BookingStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]


class BookingCreated(DomainEvent):
    """Событие создания бронирования."""

    booking_id: EntityId
    room_number: str
    check_in_date: date
    check_out_date: date
    status: BookingStatus


class BookingConfirmed(DomainEvent):
    """Событие подтверждения бронирования."""

    booking_id: EntityId
    room_number: str


class PaymentRecorded(DomainEvent):
    """Событие поступления оплаты по бронированию."""

    booking_id: EntityId
    amount: Decimal
    amount_paid: Decimal


def generate_booking_id(clock: Callable[[], datetime] = now) -> EntityId:
    """Генерирует идентификатор бронирования вида GB-20240105-1A2B3C."""
    return f"GB-{clock().strftime('%Y%m%d')}-{generate_id().hex[:6].upper()}"


class AvailabilityEngine:
    """Доменный сервис проверки доступности номеров."""

    def conflicting_bookings(
        self,
        room_number: str,
        period: DateRange,
        bookings: Iterable[Booking],
        exclude_booking_id: Optional[EntityId] = None,
    ) -> List[Booking]:
        """Возвращает занимающие номер брони, пересекающиеся с периодом."""
        return [
            booking
            for booking in bookings
            if booking.room_number == room_number
            and booking.status in BLOCKING_STATUSES
            and booking.id != exclude_booking_id
            and period.overlaps(booking.check_in_date, booking.check_out_date)
        ]

    def is_room_available(
        self,
        room: Room,
        period: DateRange,
        bookings: Iterable[Booking],
        exclude_booking_id: Optional[EntityId] = None,
    ) -> bool:
        """Проверяет, свободен ли номер на указанные даты."""
        if room.is_under_maintenance:
            return False
        return not self.conflicting_bookings(
            room.number, period, bookings, exclude_booking_id=exclude_booking_id
        )

    def find_available_rooms(
        self, period: DateRange, rooms: Iterable[Room], bookings: Iterable[Booking]
    ) -> List[Room]:
        """Возвращает свободные номера в порядке каталога."""
        bookings = list(bookings)
        return [room for room in rooms if self.is_room_available(room, period, bookings)]


class PricingEngine:
    """Доменный сервис расчета стоимости проживания."""

    def __init__(self, settings: GuestRoomsSettings):
        self._settings = settings

    def nightly_rate(self, room: Room, night: date) -> Decimal:
        """Стоимость одной ночи без округления."""
        rate = room.daily_rate
        if night.weekday() in self._settings.weekend_days:
            rate = room.daily_rate * self._settings.weekend_premium
        return rate * self._settings.seasonal_multiplier(night.month)

    def quote(
        self,
        room: Room,
        check_in: date,
        check_out: date,
        nights: Optional[int] = None,
    ) -> Decimal:
        """Рассчитывает итоговую стоимость проживания, округленную до копеек."""
        if nights is None:
            nights = (check_out - check_in).days
        if nights <= 0:
            raise InvalidDateRange(
                check_in, check_out, f"Количество ночей должно быть положительным: {nights}"
            )

        settings = self._settings
        if nights >= settings.monthly_threshold_nights:
            if room.monthly_rate is not None:
                return to_money(room.monthly_rate)
            return to_money(room.daily_rate * nights * settings.monthly_discount)

        if nights >= settings.weekly_threshold_nights:
            if room.weekly_rate is not None:
                return to_money(room.weekly_rate)
            return to_money(room.daily_rate * nights * settings.weekly_discount)

        # Посуточный расчет: каждая ночь считается независимо, округление в конце
        total = sum(
            (
                self.nightly_rate(room, check_in + timedelta(days=offset))
                for offset in range(nights)
            ),
            Decimal("0"),
        )
        return to_money(total)
