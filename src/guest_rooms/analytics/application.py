"""
Прикладной слой контекста аналитики.
"""

from datetime import date
from typing import Dict, Optional

from ..booking import interfaces as ports
from ..config import GuestRoomsSettings
from ..shared_kernel import today
from .domain import AnalyticsAggregator, GuestRoomMetrics, OccupancySlot


class AnalyticsApplicationService:
    """Сервис приложения для отчетов по гостевым номерам."""

    def __init__(
        self,
        uow: ports.IBookingUnitOfWork,
        settings: GuestRoomsSettings,
        aggregator: Optional[AnalyticsAggregator] = None,
    ):
        self._uow = uow
        self._aggregator = aggregator or AnalyticsAggregator(settings)

    def compute_metrics(self, as_of: Optional[date] = None) -> GuestRoomMetrics:
        """Показатели за месяц, содержащий ``as_of`` (по умолчанию сегодня)."""
        with self._uow:
            bookings = self._uow.bookings.list()
            rooms = self._uow.rooms.list()
        return self._aggregator.compute_metrics(bookings, rooms, as_of or today())

    def occupancy_calendar(self, start: date, end: date) -> Dict[date, Dict[str, OccupancySlot]]:
        """Календарь загрузки номеров."""
        with self._uow:
            bookings = self._uow.bookings.list()
        return self._aggregator.occupancy_calendar(bookings, start, end)
