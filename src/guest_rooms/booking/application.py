"""
Прикладной слой контекста бронирования.

Содержит сервисы приложения, которые координируют
взаимодействие между внешними интерфейсами и доменной моделью.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, List, Optional

from pydantic import BaseModel, Field

from ..config import GuestRoomsSettings
from ..shared_kernel import (
    TERMINAL_STATUSES,
    BookingStatus,
    CapacityExceeded,
    DateRange,
    EntityId,
    InvalidPayment,
    InvalidStateTransition,
    RoomUnavailable,
    now,
    to_money,
)
from . import interfaces as ports
from .domain import (
    AvailabilityEngine,
    Booking,
    BookingConfirmed,
    BookingCreated,
    PaymentRecorded,
    PricingEngine,
    Room,
    derive_payment_status,
    generate_booking_id,
)
from .infrastructure import StandardLogger

# DTO (Data Transfer Objects) для входящих данных


class CreateBookingRequest(BaseModel):
    """Запрос на создание бронирования."""

    guest_name: str = Field(..., min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    room_number: Optional[str] = None  # Если не указан, берется первый подходящий номер
    check_in: date
    check_out: date
    guest_count: int = Field(1, gt=0)
    purpose: Optional[str] = None
    special_requests: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None
    amount_paid: Decimal = Field(Decimal("0"), ge=0)
    confirm: bool = False


# DTO для исходящих данных


class RoomQuote(BaseModel):
    """Свободный номер и стоимость проживания в нем."""

    room: Room
    nights: int
    total_amount: Decimal


# Сервисы приложения


class BookingApplicationService:
    """Сервис приложения для подбора номеров, расчета цены и приема бронирований."""

    def __init__(
        self,
        uow: ports.IBookingUnitOfWork,
        settings: GuestRoomsSettings,
        availability: Optional[AvailabilityEngine] = None,
        pricing: Optional[PricingEngine] = None,
        logger: Optional[ports.ILogger] = None,
        clock: Callable[[], datetime] = now,
    ):
        """Инициализирует сервис."""
        self._uow = uow
        self._settings = settings
        self._availability = availability or AvailabilityEngine()
        self._pricing = pricing or PricingEngine(settings)
        self._logger = logger or StandardLogger(__name__)
        self._clock = clock

    @property
    def uow(self) -> ports.IBookingUnitOfWork:
        return self._uow

    def find_available_rooms(self, check_in: date, check_out: date) -> List[Room]:
        """Возвращает список свободных номеров на период."""
        period = DateRange(check_in=check_in, check_out=check_out)
        with self._uow:
            rooms = self._uow.rooms.list()
            bookings = self._uow.bookings.list()
        return self._availability.find_available_rooms(period, rooms, bookings)

    def quote(self, room_number: str, check_in: date, check_out: date) -> Decimal:
        """Рассчитывает стоимость проживания в номере."""
        period = DateRange(check_in=check_in, check_out=check_out)
        with self._uow:
            room = self._uow.rooms.get(room_number)
        return self._pricing.quote(room, period.check_in, period.check_out, period.nights)

    def quote_available_rooms(self, check_in: date, check_out: date) -> List[RoomQuote]:
        """Возвращает свободные номера вместе со стоимостью проживания."""
        period = DateRange(check_in=check_in, check_out=check_out)
        return [
            RoomQuote(
                room=room,
                nights=period.nights,
                total_amount=self._pricing.quote(
                    room, period.check_in, period.check_out, period.nights
                ),
            )
            for room in self.find_available_rooms(check_in, check_out)
        ]

    def create_booking(self, request: CreateBookingRequest) -> Booking:
        """Создает бронирование: проверка доступности и запись выполняются атомарно."""
        period = DateRange(check_in=request.check_in, check_out=request.check_out)

        with self._uow:
            bookings = self._uow.bookings.list()

            if request.room_number is None:
                room = self._pick_room(period, bookings, request.guest_count)
            else:
                room = self._uow.rooms.get(request.room_number)
                if not self._availability.is_room_available(room, period, bookings):
                    raise RoomUnavailable(room.number, period.check_in, period.check_out)

            self._check_capacity(room, request.guest_count)

            total_amount = self._pricing.quote(
                room, period.check_in, period.check_out, period.nights
            )
            amount_paid = to_money(request.amount_paid)
            booking = Booking(
                id=generate_booking_id(self._clock),
                created_at=self._clock(),
                guest_name=request.guest_name,
                email=request.email,
                phone=request.phone,
                room_number=room.number,
                check_in_date=period.check_in,
                check_out_date=period.check_out,
                guest_count=request.guest_count,
                purpose=request.purpose,
                special_requests=request.special_requests,
                total_amount=total_amount,
                amount_paid=amount_paid,
                payment_status=derive_payment_status(total_amount, amount_paid),
                status=BookingStatus.CONFIRMED if request.confirm else BookingStatus.PENDING,
                source=request.source,
                notes=request.notes,
            )

            self._uow.bookings.append(booking)
            self._uow.collect(
                BookingCreated(
                    booking_id=booking.id,
                    room_number=booking.room_number,
                    check_in_date=booking.check_in_date,
                    check_out_date=booking.check_out_date,
                    status=booking.status,
                )
            )

        self._logger.info(
            "Booking created",
            booking_id=booking.id,
            room_number=booking.room_number,
            status=booking.status.value,
            total_amount=str(booking.total_amount),
        )
        return booking

    def confirm_booking(self, booking_id: EntityId) -> Booking:
        """Подтверждает бронирование, повторно проверяя пересечения."""
        with self._uow:
            booking = self._uow.bookings.get(booking_id)
            booking.require_status("confirm", BookingStatus.PENDING)

            conflicts = self._availability.conflicting_bookings(
                booking.room_number,
                booking.period,
                self._uow.bookings.list(),
                exclude_booking_id=booking.id,
            )
            if conflicts:
                raise RoomUnavailable(
                    booking.room_number, booking.check_in_date, booking.check_out_date
                )

            confirmed = self._uow.bookings.update(booking_id, {"status": BookingStatus.CONFIRMED})
            self._uow.collect(
                BookingConfirmed(booking_id=booking_id, room_number=booking.room_number)
            )

        self._logger.info("Booking confirmed", booking_id=booking_id)
        return confirmed

    def record_payment(self, booking_id: EntityId, amount: Decimal) -> Booking:
        """Регистрирует оплату по открытому бронированию."""
        amount = to_money(amount)
        if amount <= 0:
            raise InvalidPayment(f"Сумма платежа должна быть положительной: {amount}")

        with self._uow:
            booking = self._uow.bookings.get(booking_id)
            if booking.status in TERMINAL_STATUSES:
                raise InvalidStateTransition(
                    booking_id=booking_id,
                    expected=(
                        BookingStatus.PENDING,
                        BookingStatus.CONFIRMED,
                        BookingStatus.CHECKED_IN,
                    ),
                    actual=booking.status,
                    operation="record_payment",
                )

            amount_paid = booking.amount_paid + amount
            updated = self._uow.bookings.update(
                booking_id,
                {
                    "amount_paid": amount_paid,
                    "payment_status": derive_payment_status(booking.total_amount, amount_paid),
                },
            )
            self._uow.collect(
                PaymentRecorded(booking_id=booking_id, amount=amount, amount_paid=amount_paid)
            )

        self._logger.info("Payment recorded", booking_id=booking_id, amount=str(amount))
        return updated

    def get_booking(self, booking_id: EntityId) -> Booking:
        """Возвращает информацию о бронировании."""
        with self._uow:
            return self._uow.bookings.get(booking_id)

    def list_bookings(
        self,
        room_number: Optional[str] = None,
        status: Optional[BookingStatus] = None,
    ) -> List[Booking]:
        """Возвращает список бронирований с фильтрацией."""
        with self._uow:
            if room_number is not None:
                bookings = self._uow.bookings.find_by_room(room_number)
            else:
                bookings = self._uow.bookings.list()

        if status is not None:
            bookings = [booking for booking in bookings if booking.status == status]
        return bookings

    def _pick_room(self, period: DateRange, bookings: List[Booking], guest_count: int) -> Room:
        """Выбирает первый свободный номер подходящей вместимости."""
        available = self._availability.find_available_rooms(
            period, self._uow.rooms.list(), bookings
        )
        for room in available:
            if room.max_occupancy >= guest_count:
                return room
        raise RoomUnavailable(None, period.check_in, period.check_out)

    def _check_capacity(self, room: Room, guest_count: int) -> None:
        if guest_count <= room.max_occupancy:
            return
        if self._settings.enforce_guest_capacity:
            raise CapacityExceeded(room.number, guest_count, room.max_occupancy)
        self._logger.warning(
            "Guest count exceeds room capacity",
            room_number=room.number,
            guest_count=guest_count,
            max_occupancy=room.max_occupancy,
        )
