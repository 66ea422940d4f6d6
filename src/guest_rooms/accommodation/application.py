"""
Прикладной слой контекста проживания.

Содержит конечный автомат бронирования (заселение, выселение, отмена)
и сервис стойки регистрации.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional, Union

from ..booking import interfaces as ports
from ..booking.domain import Booking, derive_payment_status
from ..booking.infrastructure import StandardLogger
from ..config import GuestRoomsSettings
from ..shared_kernel import (
    BookingStatus,
    EntityId,
    InvalidPayment,
    now,
    to_money,
    today,
)
from .domain import (
    Arrival,
    BookingCancelled,
    CheckInResult,
    DailyActivity,
    Departure,
    GuestCheckedIn,
    GuestCheckedOut,
    OutstandingBalance,
    occupied_room_fields,
    vacant_room_fields,
)
from .interfaces import INotificationService


class BookingLifecycle:
    """Конечный автомат бронирования.

    Pending -> Confirmed -> Checked In -> Checked Out; отмена возможна из
    Pending и Confirmed. Каждый переход выполняется в единице работы целиком
    или не выполняется вовсе.
    """

    def __init__(
        self,
        uow: ports.IBookingUnitOfWork,
        settings: GuestRoomsSettings,
        logger: Optional[ports.ILogger] = None,
        clock: Callable[[], datetime] = now,
    ):
        self._uow = uow
        self._settings = settings
        self._logger = logger or StandardLogger(__name__)
        self._clock = clock

    def check_in(self, booking_id: EntityId, override_balance_warning: bool = False) -> CheckInResult:
        """Заселяет гостя по подтвержденному бронированию."""
        with self._uow:
            booking = self._uow.bookings.get(booking_id)
            booking.require_status("check_in", BookingStatus.CONFIRMED)

            warning = None
            if booking.balance_due > 0:
                warning = OutstandingBalance.for_booking(booking)
                if not override_balance_warning:
                    self._logger.warning(
                        "Check-in requires balance override",
                        booking_id=booking_id,
                        balance=str(warning.balance),
                    )
                    return CheckInResult(booking=booking, checked_in=False, warning=warning)

            room = self._uow.rooms.get(booking.room_number)
            checked_in = self._uow.bookings.update(
                booking_id, {"status": BookingStatus.CHECKED_IN}
            )
            self._uow.rooms.update(room.number, occupied_room_fields(checked_in))
            self._uow.collect(
                GuestCheckedIn(
                    booking_id=checked_in.id,
                    room_number=checked_in.room_number,
                    guest_name=checked_in.guest_name,
                    email=checked_in.email,
                    check_in_date=checked_in.check_in_date,
                    check_out_date=checked_in.check_out_date,
                )
            )

        self._logger.info(
            "Guest checked in",
            booking_id=booking_id,
            room_number=checked_in.room_number,
            balance_overridden=warning is not None,
        )
        return CheckInResult(booking=checked_in, checked_in=True, warning=warning)

    def check_out(
        self, booking_id: EntityId, additional_payment: Union[Decimal, int, str] = Decimal("0")
    ) -> Booking:
        """Выселяет гостя, принимая доплату, и освобождает номер."""
        additional_payment = to_money(additional_payment)
        if additional_payment < 0:
            raise InvalidPayment(
                f"Доплата при выселении не может быть отрицательной: {additional_payment}"
            )

        with self._uow:
            booking = self._uow.bookings.get(booking_id)
            booking.require_status("check_out", BookingStatus.CHECKED_IN)

            checked_out_at = self._clock()
            amount_paid = booking.amount_paid + additional_payment
            checked_out = self._uow.bookings.update(
                booking_id,
                {
                    "status": BookingStatus.CHECKED_OUT,
                    "amount_paid": amount_paid,
                    "payment_status": derive_payment_status(booking.total_amount, amount_paid),
                },
            )
            self._uow.rooms.update(booking.room_number, vacant_room_fields(checked_out_at))
            self._uow.collect(
                GuestCheckedOut(
                    booking_id=checked_out.id,
                    room_number=checked_out.room_number,
                    guest_name=checked_out.guest_name,
                    email=checked_out.email,
                    total_amount=checked_out.total_amount,
                    amount_paid=checked_out.amount_paid,
                    checked_out_at=checked_out_at,
                )
            )

        self._logger.info(
            "Guest checked out",
            booking_id=booking_id,
            room_number=checked_out.room_number,
            amount_paid=str(checked_out.amount_paid),
        )
        return checked_out

    def cancel(self, booking_id: EntityId, reason: Optional[str] = None) -> Booking:
        """Отменяет бронирование; состояние номера не меняется."""
        with self._uow:
            booking = self._uow.bookings.get(booking_id)
            booking.require_status("cancel", BookingStatus.PENDING, BookingStatus.CONFIRMED)

            fields = {"status": BookingStatus.CANCELLED}
            if reason:
                fields["notes"] = "\n".join(
                    filter(None, [booking.notes, f"Cancelled: {reason}"])
                )
            cancelled = self._uow.bookings.update(booking_id, fields)
            self._uow.collect(
                BookingCancelled(
                    booking_id=booking_id,
                    room_number=booking.room_number,
                    previous_status=booking.status,
                    reason=reason,
                )
            )

        self._logger.info("Booking cancelled", booking_id=booking_id, reason=reason)
        return cancelled


class FrontDeskService:
    """Сервис стойки регистрации: заезды и выезды дня, напоминания."""

    def __init__(
        self,
        uow: ports.IBookingUnitOfWork,
        notifications: INotificationService,
        settings: GuestRoomsSettings,
        logger: Optional[ports.ILogger] = None,
    ):
        self._uow = uow
        self._notifications = notifications
        self._settings = settings
        self._logger = logger or StandardLogger(__name__)

    def daily_activity(self, day: Optional[date] = None) -> DailyActivity:
        """Возвращает ожидаемые заезды и выезды на день."""
        day = day or today()
        activity = DailyActivity(day=day)

        with self._uow:
            bookings = self._uow.bookings.list()

        for booking in bookings:
            if booking.check_in_date == day and booking.status == BookingStatus.CONFIRMED:
                activity.arrivals.append(
                    Arrival(
                        booking_id=booking.id,
                        guest_name=booking.guest_name,
                        room_number=booking.room_number,
                        guest_count=booking.guest_count,
                        email=booking.email,
                    )
                )
            if booking.check_out_date == day and booking.status == BookingStatus.CHECKED_IN:
                activity.departures.append(
                    Departure(
                        booking_id=booking.id,
                        guest_name=booking.guest_name,
                        room_number=booking.room_number,
                        balance=booking.balance_due,
                        email=booking.email,
                    )
                )

        return activity

    def send_check_in_reminders(self, day: Optional[date] = None) -> int:
        """Отправляет напоминания гостям, заезжающим в указанный день."""
        activity = self.daily_activity(day)
        sent = 0

        for arrival in activity.arrivals:
            if not arrival.email:
                continue
            try:
                self._notifications.send_check_in_reminder(
                    arrival.email,
                    {
                        "guest_name": arrival.guest_name,
                        "room_number": arrival.room_number,
                        "check_in_date": activity.day.strftime("%B %d, %Y"),
                        "property_name": self._settings.property_name,
                    },
                )
            except Exception as e:
                self._logger.error(
                    "Check-in reminder failed",
                    booking_id=arrival.booking_id,
                    error=str(e),
                    exc_info=True,
                )
                continue
            sent += 1

        self._logger.info("Check-in reminders sent", day=activity.day, count=sent)
        return sent
