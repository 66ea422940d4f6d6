"""
Сквозные тесты: бронирование, заселение, выселение, учет и аналитика.
"""

from datetime import date
from decimal import Decimal

import pytest

from conftest import FIXED_NOW, FailingNotifications
from guest_rooms.booking.application import CreateBookingRequest
from guest_rooms.bootstrap import bootstrap_app
from guest_rooms.config import GuestRoomsSettings
from guest_rooms.shared_kernel import BookingStatus, RoomStatus


@pytest.fixture
def app(settings, rooms, ledger, notifications, clock):
    return bootstrap_app(
        settings=settings,
        rooms=rooms,
        ledger=ledger,
        notifications=notifications,
        clock=clock,
    )


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


class TestGuestStay:
    """Полный цикл проживания гостя."""

    def test_full_stay(self, app, ledger, notifications):
        """
        Тестирует полный цикл: бронь, оплата, заселение, выселение.

        Проверяет запись в финансовом журнале, уведомления и показатели.
        """
        # Подготовка
        booking = app.bookings.create_booking(_request())
        app.bookings.confirm_booking(booking.id)
        app.bookings.record_payment(booking.id, Decimal("100"))

        # Действие
        warning = app.lifecycle.check_in(booking.id)
        result = app.lifecycle.check_in(booking.id, override_balance_warning=True)
        checked_out = app.lifecycle.check_out(booking.id, additional_payment=Decimal("100"))

        # Проверка
        assert not warning.checked_in
        assert warning.warning.balance == Decimal("100.00")
        assert result.checked_in
        assert checked_out.status == BookingStatus.CHECKED_OUT
        assert app.uow.rooms.get("G1").status == RoomStatus.VACANT

        assert len(ledger.entries) == 1
        entry = ledger.entries[0]
        assert entry.amount == Decimal("200.00")
        assert entry.date == FIXED_NOW.date()
        assert entry.category == "Guest Room"
        assert entry.type == "Guest Room Income"
        assert entry.reference == booking.id
        assert entry.description == "Guest room rental - Иван Петров (Room G1)"

        assert [kind for kind, _, _ in notifications.sent] == ["welcome", "checkout"]
        assert notifications.sent[1][2]["amount_paid"] == "200.00"

        metrics = app.analytics.compute_metrics(date(2024, 4, 10))
        assert metrics.total_bookings == 1
        assert metrics.monthly_revenue == Decimal("200.00")

    def test_cancelled_stay_records_nothing(self, app, ledger, notifications):
        booking = app.bookings.create_booking(_request(confirm=True))

        app.lifecycle.cancel(booking.id, reason="Болезнь")

        assert ledger.entries == []
        assert notifications.sent == []

    def test_notification_failure_keeps_transition(self, settings, rooms, clock):
        app = bootstrap_app(
            settings=settings, rooms=rooms, notifications=FailingNotifications(), clock=clock
        )
        booking = app.bookings.create_booking(_request(confirm=True, amount_paid=Decimal("200")))

        result = app.lifecycle.check_in(booking.id)

        assert result.checked_in
        assert app.bookings.get_booking(booking.id).status == BookingStatus.CHECKED_IN

    def test_default_ledger(self, settings, rooms, clock):
        app = bootstrap_app(settings=settings, rooms=rooms, clock=clock)
        booking = app.bookings.create_booking(_request(confirm=True, amount_paid=Decimal("200")))
        app.lifecycle.check_in(booking.id)
        app.lifecycle.check_out(booking.id)

        assert len(app.ledger.find_by_reference(booking.id)) == 1
        assert app.ledger.totals_by_category() == {"Guest Room": Decimal("200.00")}


class TestFileStores:
    """Тесты запуска с хранилищами в JSON-файлах."""

    def test_state_survives_restart(self, tmp_path, rooms, clock):
        # Подготовка
        settings = GuestRoomsSettings(_env_file=None, data_dir=tmp_path)
        first = bootstrap_app(settings=settings, rooms=rooms, clock=clock)
        booking = first.bookings.create_booking(_request(confirm=True))

        # Действие
        second = bootstrap_app(settings=settings, clock=clock)

        # Проверка
        assert second.bookings.get_booking(booking.id).status == BookingStatus.CONFIRMED
        assert [room.number for room in second.uow.rooms.list()] == ["G1", "G2", "G3"]
        assert (tmp_path / "bookings.json").exists()
