"""
Конфигурация тестов для pytest.
Добавляет каталог src в PYTHONPATH и предоставляет общие фикстуры.
"""
import sys
from datetime import date, datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

# Добавляем каталог с исходниками в PYTHONPATH
src_dir = str(Path(__file__).parent.parent / "src")
if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from guest_rooms.booking.domain import Booking, Room  # noqa: E402
from guest_rooms.booking.infrastructure import (  # noqa: E402
    BookingUnitOfWork,
    InMemoryBookingRepository,
    InMemoryRoomRepository,
)
from guest_rooms.config import GuestRoomsSettings  # noqa: E402
from guest_rooms.shared_kernel import BookingStatus, RoomStatus  # noqa: E402

FIXED_NOW = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)


class RecordingNotifications:
    """Тестовый сервис уведомлений, запоминающий запросы."""

    def __init__(self):
        self.sent: List[Tuple[str, str, Dict[str, Any]]] = []

    def send_guest_welcome(self, to: str, context: Dict[str, Any]) -> None:
        self.sent.append(("welcome", to, context))

    def send_check_in_reminder(self, to: str, context: Dict[str, Any]) -> None:
        self.sent.append(("reminder", to, context))

    def send_checkout_confirmation(self, to: str, context: Dict[str, Any]) -> None:
        self.sent.append(("checkout", to, context))


class FailingNotifications(RecordingNotifications):
    """Сервис уведомлений, который всегда падает."""

    def send_guest_welcome(self, to: str, context: Dict[str, Any]) -> None:
        raise ConnectionError("SMTP недоступен")

    def send_check_in_reminder(self, to: str, context: Dict[str, Any]) -> None:
        raise ConnectionError("SMTP недоступен")

    def send_checkout_confirmation(self, to: str, context: Dict[str, Any]) -> None:
        raise ConnectionError("SMTP недоступен")


class RecordingLedger:
    """Тестовый финансовый журнал."""

    def __init__(self):
        self.entries = []

    def record(self, entry) -> None:
        self.entries.append(entry)


@pytest.fixture
def settings() -> GuestRoomsSettings:
    """Настройки по умолчанию без чтения .env."""
    return GuestRoomsSettings(_env_file=None)


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def rooms() -> List[Room]:
    """Каталог из трех номеров; третий на обслуживании."""
    return [
        Room(number="G1", name="Garden Room", daily_rate=Decimal("100"), max_occupancy=2),
        Room(
            number="G2",
            name="Loft",
            daily_rate=Decimal("70"),
            weekly_rate=Decimal("400"),
            monthly_rate=Decimal("1500"),
            max_occupancy=3,
        ),
        Room(
            number="G3",
            name="Attic",
            daily_rate=Decimal("80"),
            status=RoomStatus.MAINTENANCE,
            maintenance_notes="Протекает крыша",
        ),
    ]


@pytest.fixture
def uow(rooms) -> BookingUnitOfWork:
    return BookingUnitOfWork(
        rooms_repo=InMemoryRoomRepository(rooms),
        bookings_repo=InMemoryBookingRepository(),
    )


@pytest.fixture
def notifications() -> RecordingNotifications:
    return RecordingNotifications()


@pytest.fixture
def ledger() -> RecordingLedger:
    return RecordingLedger()


_counter = {"value": 0}


def make_booking(
    room_number: str = "G1",
    check_in: date = date(2024, 4, 1),
    check_out: date = date(2024, 4, 3),
    status: BookingStatus = BookingStatus.CONFIRMED,
    **fields: Any,
) -> Booking:
    """Создает бронирование с разумными значениями по умолчанию."""
    _counter["value"] += 1
    data: Dict[str, Any] = {
        "id": f"GB-TEST-{_counter['value']:04d}",
        "guest_name": "Анна Смирнова",
        "email": "anna@example.com",
        "room_number": room_number,
        "check_in_date": check_in,
        "check_out_date": check_out,
        "total_amount": Decimal("200.00"),
        "amount_paid": Decimal("0"),
        "status": status,
    }
    data.update(fields)
    return Booking(**data)


@pytest.fixture
def booking_factory():
    return make_booking
