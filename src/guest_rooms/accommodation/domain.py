"""
Доменная модель контекста проживания.

Содержит события заселения и выселения, результаты операций стойки
регистрации и правила изменения состояния номера.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..booking.domain import Booking
from ..shared_kernel import BookingStatus, DomainEvent, EntityId, RoomStatus


class GuestCheckedIn(DomainEvent):
    """Событие заселения гостя."""

    booking_id: EntityId
    room_number: str
    guest_name: str
    email: Optional[str] = None
    check_in_date: date
    check_out_date: date


class GuestCheckedOut(DomainEvent):
    """Событие выселения гостя."""

    booking_id: EntityId
    room_number: str
    guest_name: str
    email: Optional[str] = None
    total_amount: Decimal
    amount_paid: Decimal
    checked_out_at: datetime


class BookingCancelled(DomainEvent):
    """Событие отмены бронирования."""

    booking_id: EntityId
    room_number: str
    previous_status: BookingStatus
    reason: Optional[str] = None


class OutstandingBalance(BaseModel):
    """Предупреждение о неоплаченном остатке при заселении."""

    booking_id: EntityId
    total_amount: Decimal
    amount_paid: Decimal
    balance: Decimal

    @classmethod
    def for_booking(cls, booking: Booking) -> "OutstandingBalance":
        return cls(
            booking_id=booking.id,
            total_amount=booking.total_amount,
            amount_paid=booking.amount_paid,
            balance=booking.balance_due,
        )


class CheckInResult(BaseModel):
    """Результат попытки заселения.

    Если есть долг и заселение не подтверждено явно, ``checked_in`` равен
    False, а в ``warning`` лежит сумма долга; состояние не меняется.
    """

    booking: Booking
    checked_in: bool
    warning: Optional[OutstandingBalance] = None


class Arrival(BaseModel):
    """Ожидаемый заезд."""

    booking_id: EntityId
    guest_name: str
    room_number: str
    guest_count: int
    email: Optional[str] = None


class Departure(BaseModel):
    """Ожидаемый выезд."""

    booking_id: EntityId
    guest_name: str
    room_number: str
    balance: Decimal
    email: Optional[str] = None


class DailyActivity(BaseModel):
    """Заезды и выезды за день."""

    day: date
    arrivals: List[Arrival] = Field(default_factory=list)
    departures: List[Departure] = Field(default_factory=list)


def occupied_room_fields(booking: Booking) -> Dict[str, Any]:
    """Поля номера после заселения гостя по бронированию."""
    return {
        "status": RoomStatus.OCCUPIED,
        "current_guest": booking.guest_name,
        "current_booking_id": booking.id,
        "check_in_date": booking.check_in_date,
        "check_out_date": booking.check_out_date,
    }


def vacant_room_fields(cleaned_at: datetime) -> Dict[str, Any]:
    """Поля номера после выселения: номер свободен, данные гостя очищены."""
    return {
        "status": RoomStatus.VACANT,
        "current_guest": None,
        "current_booking_id": None,
        "check_in_date": None,
        "check_out_date": None,
        "last_cleaned": cleaned_at,
    }
