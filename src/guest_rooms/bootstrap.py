from dataclasses import dataclass
from datetime import datetime
from functools import partial
from typing import Callable, Iterable, Optional

from .accommodation import event_handlers as accommodation_handlers
from .accommodation.application import BookingLifecycle, FrontDeskService
from .accommodation.domain import GuestCheckedIn, GuestCheckedOut
from .accommodation.infrastructure import LoggingNotificationService
from .accommodation.interfaces import INotificationService
from .accounting import event_handlers as accounting_handlers
from .accounting.infrastructure import InMemoryFinancialLedger
from .accounting.interfaces import IFinancialLedger
from .analytics.application import AnalyticsApplicationService
from .booking.application import BookingApplicationService
from .booking.domain import AvailabilityEngine, PricingEngine, Room
from .booking.infrastructure import (
    BookingUnitOfWork,
    InMemoryBookingRepository,
    InMemoryRoomRepository,
    JsonFileBookingRepository,
    JsonFileRoomRepository,
    StandardLogger,
)
from .config import GuestRoomsSettings
from .logging import configure_logging
from .shared_kernel import now


@dataclass
class GuestRoomsApp:
    """Настроенные компоненты ядра."""

    settings: GuestRoomsSettings
    uow: BookingUnitOfWork
    bookings: BookingApplicationService
    lifecycle: BookingLifecycle
    front_desk: FrontDeskService
    analytics: AnalyticsApplicationService
    ledger: IFinancialLedger
    notifications: INotificationService


def bootstrap_app(
    settings: Optional[GuestRoomsSettings] = None,
    rooms: Iterable[Room] = (),
    ledger: Optional[IFinancialLedger] = None,
    notifications: Optional[INotificationService] = None,
    clock: Callable[[], datetime] = now,
) -> GuestRoomsApp:
    """Создает и настраивает все компоненты приложения."""
    settings = settings or GuestRoomsSettings()
    configure_logging(settings.log_level, settings.log_format)
    logger = StandardLogger("guest_rooms")

    # 1. Хранилища: JSON-файлы, если задан каталог данных, иначе память
    if settings.data_dir is not None:
        rooms_repo = JsonFileRoomRepository(
            str(settings.data_dir / "rooms.json"), initial_rooms=rooms, logger=logger
        )
        bookings_repo = JsonFileBookingRepository(
            str(settings.data_dir / "bookings.json"), logger=logger
        )
    else:
        rooms_repo = InMemoryRoomRepository(rooms)
        bookings_repo = InMemoryBookingRepository()

    uow = BookingUnitOfWork(rooms_repo=rooms_repo, bookings_repo=bookings_repo, logger=logger)

    # 2. Внешние соавторы
    ledger = ledger or InMemoryFinancialLedger(logger)
    notifications = notifications or LoggingNotificationService(logger)

    # 3. Подписываем обработчики на события
    uow.event_bus.subscribe(
        GuestCheckedIn,
        partial(accommodation_handlers.on_guest_checked_in, notifications=notifications, settings=settings),
    )
    uow.event_bus.subscribe(
        GuestCheckedOut,
        partial(accounting_handlers.on_guest_checked_out, ledger=ledger, settings=settings),
    )
    uow.event_bus.subscribe(
        GuestCheckedOut,
        partial(accommodation_handlers.on_guest_checked_out, notifications=notifications, settings=settings),
    )

    # 4. Сервисы получают зависимости явно
    availability = AvailabilityEngine()
    pricing = PricingEngine(settings)

    return GuestRoomsApp(
        settings=settings,
        uow=uow,
        bookings=BookingApplicationService(
            uow, settings, availability=availability, pricing=pricing, logger=logger, clock=clock
        ),
        lifecycle=BookingLifecycle(uow, settings, logger=logger, clock=clock),
        front_desk=FrontDeskService(uow, notifications, settings, logger=logger),
        analytics=AnalyticsApplicationService(uow, settings),
        ledger=ledger,
        notifications=notifications,
    )
