"""
Доменная модель контекста аналитики.

Показатели загрузки и выручки вычисляются чистой сверткой по
бронированиям и каталогу номеров; хранилища не изменяются.
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, List

from pydantic import BaseModel, Field

from ..booking.domain import Booking, Room
from ..config import GuestRoomsSettings
from ..shared_kernel import (
    REALIZED_STATUSES,
    BookingStatus,
    EntityId,
    InvalidDateRange,
    round_half_up,
    to_money,
)

# Бронирования, отображаемые в календаре загрузки
CALENDAR_STATUSES = frozenset(
    {BookingStatus.CONFIRMED, BookingStatus.CHECKED_IN, BookingStatus.CHECKED_OUT}
)

DEFAULT_PURPOSE = "Other"
NO_PURPOSE = "None"


class RoomPerformance(BaseModel):
    """Показатели номера за месяц."""

    number: str
    name: str
    bookings: int = 0
    revenue: Decimal = Decimal("0")
    nights: int = 0
    occupancy: int = 0  # Процент ночей месяца


class GuestRoomMetrics(BaseModel):
    """Сводные показатели гостевых номеров."""

    as_of: date
    month_start: date
    month_end: date
    days_in_month: int
    room_count: int

    # Месячное окно (по дате заезда)
    total_bookings: int = 0
    monthly_revenue: Decimal = Decimal("0")
    occupied_nights: int = 0
    occupancy_rate: int = 0
    rev_par: Decimal = Decimal("0")

    ytd_revenue: Decimal = Decimal("0")

    # Все фактические бронирования
    realized_bookings: int = 0
    total_revenue: Decimal = Decimal("0")
    total_nights: int = 0
    avg_daily_rate: Decimal = Decimal("0")
    avg_booking_value: Decimal = Decimal("0")
    avg_stay_length: Decimal = Decimal("0")
    weekend_bookings: int = 0  # Процент
    weekday_bookings: int = 0  # Процент
    top_purpose: str = NO_PURPOSE
    purpose_counts: Dict[str, int] = Field(default_factory=dict)

    room_performance: List[RoomPerformance] = Field(default_factory=list)


class OccupancySlot(BaseModel):
    """Занятость номера в конкретную ночь."""

    booking_id: EntityId
    guest_name: str
    status: BookingStatus


class AnalyticsAggregator:
    """Вычисляет показатели загрузки, выручки и структуры бронирований."""

    def __init__(self, settings: GuestRoomsSettings):
        self._settings = settings

    def compute_metrics(
        self, bookings: Iterable[Booking], rooms: Iterable[Room], as_of: date
    ) -> GuestRoomMetrics:
        """Строит показатели за календарный месяц, содержащий ``as_of``."""
        rooms = list(rooms)
        days_in_month = calendar.monthrange(as_of.year, as_of.month)[1]
        month_start = as_of.replace(day=1)
        month_end = as_of.replace(day=days_in_month)

        metrics = GuestRoomMetrics(
            as_of=as_of,
            month_start=month_start,
            month_end=month_end,
            days_in_month=days_in_month,
            room_count=len(rooms),
        )
        room_stats: Dict[str, RoomPerformance] = {
            room.number: RoomPerformance(number=room.number, name=room.name) for room in rooms
        }
        weekend = 0

        for booking in bookings:
            if booking.status not in REALIZED_STATUSES:
                continue

            amount = booking.amount_paid
            nights = booking.nights
            arrival = booking.check_in_date

            if month_start <= arrival <= month_end:
                metrics.total_bookings += 1
                metrics.monthly_revenue += amount
                metrics.occupied_nights += nights

                stats = room_stats.get(booking.room_number)
                if stats is not None:
                    stats.bookings += 1
                    stats.revenue += amount
                    stats.nights += nights

            if arrival.year == as_of.year and arrival <= as_of:
                metrics.ytd_revenue += amount

            metrics.realized_bookings += 1
            metrics.total_revenue += amount
            metrics.total_nights += nights

            # Выходным считается только день заезда
            if arrival.weekday() in self._settings.weekend_days:
                weekend += 1

            purpose = booking.purpose or DEFAULT_PURPOSE
            metrics.purpose_counts[purpose] = metrics.purpose_counts.get(purpose, 0) + 1

        realized = metrics.realized_bookings
        if metrics.total_nights > 0:
            metrics.avg_daily_rate = to_money(metrics.total_revenue / metrics.total_nights)
        if realized > 0:
            metrics.avg_booking_value = to_money(metrics.total_revenue / realized)
            metrics.avg_stay_length = to_money(Decimal(metrics.total_nights) / realized)
            metrics.weekend_bookings = round_half_up(Decimal(weekend) * 100 / realized)
            metrics.weekday_bookings = 100 - metrics.weekend_bookings

        if rooms:
            metrics.occupancy_rate = round_half_up(
                Decimal(metrics.occupied_nights) * 100 / (len(rooms) * days_in_month)
            )
            metrics.rev_par = to_money(metrics.monthly_revenue / len(rooms))

        metrics.top_purpose = self._top_purpose(metrics.purpose_counts)

        for stats in room_stats.values():
            stats.occupancy = round_half_up(Decimal(stats.nights) * 100 / days_in_month)
        metrics.room_performance = list(room_stats.values())

        metrics.monthly_revenue = to_money(metrics.monthly_revenue)
        metrics.ytd_revenue = to_money(metrics.ytd_revenue)
        metrics.total_revenue = to_money(metrics.total_revenue)
        return metrics

    @staticmethod
    def _top_purpose(purpose_counts: Dict[str, int]) -> str:
        # При равенстве побеждает цель, встреченная первой
        top, best = NO_PURPOSE, 0
        for purpose, count in purpose_counts.items():
            if count > best:
                top, best = purpose, count
        return top

    def occupancy_calendar(
        self, bookings: Iterable[Booking], start: date, end: date
    ) -> Dict[date, Dict[str, OccupancySlot]]:
        """Занятость номеров по ночам в диапазоне [start, end] включительно."""
        if end < start:
            raise InvalidDateRange(start, end)

        result: Dict[date, Dict[str, OccupancySlot]] = {}
        for booking in bookings:
            if booking.status not in CALENDAR_STATUSES:
                continue

            night = max(booking.check_in_date, start)
            last_night = min(booking.check_out_date - timedelta(days=1), end)
            while night <= last_night:
                result.setdefault(night, {})[booking.room_number] = OccupancySlot(
                    booking_id=booking.id,
                    guest_name=booking.guest_name,
                    status=booking.status,
                )
                night += timedelta(days=1)

        return dict(sorted(result.items()))
