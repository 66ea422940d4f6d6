"""
Тесты сервиса приложения контекста бронирования.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

import pytest

from guest_rooms.booking.application import BookingApplicationService, CreateBookingRequest
from guest_rooms.booking.domain import BookingConfirmed, BookingCreated, PaymentRecorded, Room
from guest_rooms.booking.infrastructure import (
    BookingUnitOfWork,
    InMemoryBookingRepository,
    InMemoryRoomRepository,
)
from guest_rooms.config import GuestRoomsSettings
from guest_rooms.shared_kernel import (
    BookingNotFound,
    BookingStatus,
    CapacityExceeded,
    InvalidDateRange,
    InvalidPayment,
    InvalidStateTransition,
    PaymentStatus,
    RoomNotFound,
    RoomUnavailable,
)


@pytest.fixture
def service(uow, settings, clock) -> BookingApplicationService:
    return BookingApplicationService(uow, settings, clock=clock)


def _request(**fields) -> CreateBookingRequest:
    data = {
        "guest_name": "Иван Петров",
        "email": "ivan@example.com",
        "room_number": "G1",
        "check_in": date(2024, 4, 1),
        "check_out": date(2024, 4, 3),
        "purpose": "Business",
    }
    data.update(fields)
    return CreateBookingRequest(**data)


class TestCreateBooking:
    """Тесты создания бронирования."""

    def test_create_pending_booking(self, service, uow):
        """
        Тестирует создание бронирования.

        Проверяет цену, статус и сохранение в хранилище.
        """
        # Подготовка
        # 2024-04-01 понедельник, 2024-04-02 вторник

        # Действие
        booking = service.create_booking(_request())

        # Проверка
        assert booking.id.startswith("GB-20240315-")
        assert len(booking.id) == len("GB-20240315-") + 6
        assert booking.status == BookingStatus.PENDING
        assert booking.total_amount == Decimal("200.00")
        assert booking.payment_status == PaymentStatus.DUE
        assert uow.bookings.get(booking.id) == booking

    def test_pending_booking_does_not_block(self, service):
        service.create_booking(_request())
        second = service.create_booking(_request(guest_name="Мария"))
        assert second.room_number == "G1"

    def test_confirmed_booking_blocks_room(self, service):
        service.create_booking(_request(confirm=True))

        with pytest.raises(RoomUnavailable) as exc_info:
            service.create_booking(_request(check_in=date(2024, 4, 2), check_out=date(2024, 4, 5)))

        assert exc_info.value.room_number == "G1"

    def test_back_to_back_booking_succeeds(self, service):
        service.create_booking(_request(confirm=True))
        booking = service.create_booking(
            _request(check_in=date(2024, 4, 3), check_out=date(2024, 4, 5), confirm=True)
        )
        assert booking.status == BookingStatus.CONFIRMED

    def test_room_picked_automatically(self, service):
        service.create_booking(_request(confirm=True))

        booking = service.create_booking(_request(room_number=None))

        assert booking.room_number == "G2"

    def test_auto_pick_respects_capacity(self, service):
        booking = service.create_booking(_request(room_number=None, guest_count=3))
        assert booking.room_number == "G2"

    def test_no_rooms_left(self, service):
        service.create_booking(_request(confirm=True))
        service.create_booking(_request(room_number="G2", confirm=True))

        with pytest.raises(RoomUnavailable) as exc_info:
            service.create_booking(_request(room_number=None))

        assert exc_info.value.room_number is None

    def test_maintenance_room_rejected(self, service):
        with pytest.raises(RoomUnavailable):
            service.create_booking(_request(room_number="G3"))

    def test_unknown_room(self, service):
        with pytest.raises(RoomNotFound):
            service.create_booking(_request(room_number="Z9"))

    def test_invalid_dates(self, service, uow):
        with pytest.raises(InvalidDateRange):
            service.create_booking(_request(check_out=date(2024, 4, 1)))
        assert uow.bookings.list() == []

    def test_deposit_sets_payment_status(self, service):
        partial = service.create_booking(_request(amount_paid=Decimal("50")))
        paid = service.create_booking(_request(amount_paid=Decimal("200")))

        assert partial.payment_status == PaymentStatus.PARTIAL
        assert paid.payment_status == PaymentStatus.PAID

    def test_capacity_is_advisory_by_default(self, service):
        booking = service.create_booking(_request(guest_count=5))
        assert booking.guest_count == 5

    def test_capacity_enforced_when_configured(self, uow, clock):
        settings = GuestRoomsSettings(_env_file=None, enforce_guest_capacity=True)
        service = BookingApplicationService(uow, settings, clock=clock)

        with pytest.raises(CapacityExceeded) as exc_info:
            service.create_booking(_request(guest_count=5))

        assert exc_info.value.max_occupancy == 2
        assert uow.bookings.list() == []

    def test_booking_created_event_published(self, service, uow):
        received = []
        uow.event_bus.subscribe(BookingCreated, received.append)

        booking = service.create_booking(_request())

        assert [event.booking_id for event in received] == [booking.id]

    def test_concurrent_requests_for_same_room(self, service, uow):
        """Из параллельных запросов на один номер и даты успешен ровно один."""

        def attempt(index):
            try:
                return service.create_booking(_request(guest_name=f"Гость {index}", confirm=True))
            except RoomUnavailable:
                return None

        # Действие
        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(attempt, range(16)))

        # Проверка
        assert len([result for result in results if result is not None]) == 1
        assert len(uow.bookings.list()) == 1


class TestConfirmBooking:
    """Тесты подтверждения бронирования."""

    def test_confirm_pending(self, service, uow):
        received = []
        uow.event_bus.subscribe(BookingConfirmed, received.append)
        booking = service.create_booking(_request())

        confirmed = service.confirm_booking(booking.id)

        assert confirmed.status == BookingStatus.CONFIRMED
        assert len(received) == 1

    def test_confirm_conflicting_pending_rejected(self, service, uow):
        first = service.create_booking(_request())
        second = service.create_booking(_request(guest_name="Мария"))
        service.confirm_booking(first.id)

        with pytest.raises(RoomUnavailable):
            service.confirm_booking(second.id)

        assert uow.bookings.get(second.id).status == BookingStatus.PENDING

    def test_confirm_twice_rejected(self, service):
        booking = service.create_booking(_request(confirm=True))

        with pytest.raises(InvalidStateTransition) as exc_info:
            service.confirm_booking(booking.id)

        assert exc_info.value.actual == BookingStatus.CONFIRMED

    def test_confirm_unknown_booking(self, service):
        with pytest.raises(BookingNotFound):
            service.confirm_booking("GB-00000000-000000")


class TestRecordPayment:
    """Тесты регистрации оплаты."""

    def test_payments_accumulate(self, service, uow):
        received = []
        uow.event_bus.subscribe(PaymentRecorded, received.append)
        booking = service.create_booking(_request())

        partial = service.record_payment(booking.id, Decimal("120"))
        paid = service.record_payment(booking.id, Decimal("80"))

        assert partial.payment_status == PaymentStatus.PARTIAL
        assert paid.amount_paid == Decimal("200.00")
        assert paid.payment_status == PaymentStatus.PAID
        assert [event.amount for event in received] == [Decimal("120.00"), Decimal("80.00")]

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10")])
    def test_non_positive_amount_rejected(self, service, amount):
        booking = service.create_booking(_request())

        with pytest.raises(InvalidPayment):
            service.record_payment(booking.id, amount)

    def test_payment_on_cancelled_booking_rejected(self, service, uow):
        booking = service.create_booking(_request())
        uow.bookings.update(booking.id, {"status": BookingStatus.CANCELLED})

        with pytest.raises(InvalidStateTransition):
            service.record_payment(booking.id, Decimal("10"))


class TestQueries:
    """Тесты запросов к сервису."""

    def test_reads_during_concurrent_writes(self, settings, clock):
        """Чтение в другом потоке не падает, пока идет прием бронирований."""
        # Подготовка
        rooms = [
            Room(number=f"R{index:02d}", name=f"Room {index}", daily_rate=Decimal("80"))
            for index in range(50)
        ]
        uow = BookingUnitOfWork(InMemoryRoomRepository(rooms), InMemoryBookingRepository())
        service = BookingApplicationService(uow, settings, clock=clock)
        errors = []
        done = threading.Event()

        def reader():
            while not done.is_set():
                try:
                    service.list_bookings()
                    service.list_bookings(room_number="R00")
                    uow.bookings.list()
                    uow.rooms.list()
                except Exception as e:
                    errors.append(e)
                    return

        # Действие
        thread = threading.Thread(target=reader)
        thread.start()
        try:
            for room in rooms:
                service.create_booking(_request(room_number=room.number, confirm=True))
        finally:
            done.set()
            thread.join()

        # Проверка
        assert errors == []
        assert len(service.list_bookings()) == 50

    def test_quote(self, service):
        # 2024-03-15 пятница, 2024-03-16 суббота
        assert service.quote("G1", date(2024, 3, 15), date(2024, 3, 17)) == Decimal("250.00")

    def test_quote_available_rooms(self, service):
        service.create_booking(_request(confirm=True))

        quotes = service.quote_available_rooms(date(2024, 4, 1), date(2024, 4, 8))

        assert [quote.room.number for quote in quotes] == ["G2"]
        assert quotes[0].nights == 7
        assert quotes[0].total_amount == Decimal("400.00")

    def test_list_bookings_filters(self, service):
        first = service.create_booking(_request(confirm=True))
        service.create_booking(_request(room_number="G2"))

        assert [b.id for b in service.list_bookings(room_number="G1")] == [first.id]
        assert [b.id for b in service.list_bookings(status=BookingStatus.CONFIRMED)] == [first.id]
        assert len(service.list_bookings()) == 2
