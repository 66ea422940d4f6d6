"""
Интерфейсы (порты) для контекста бронирования.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Protocol, Type, TypeVar

from ..shared_kernel import DomainEvent, EntityId
from .domain import Booking, Room

T_Event = TypeVar("T_Event", bound=DomainEvent)


class ILogger(Protocol):
    """Интерфейс для логгера."""

    def info(self, message: str, **kwargs: Any) -> None: ...
    def error(self, message: str, **kwargs: Any) -> None: ...
    def warning(self, message: str, **kwargs: Any) -> None: ...
    def debug(self, message: str, **kwargs: Any) -> None: ...


class IEventBus(Protocol):
    """Интерфейс для шины событий."""

    def publish(self, event: DomainEvent) -> None: ...
    def subscribe(
        self, event_type: Type[T_Event], handler: Callable[[T_Event], None]
    ) -> None: ...


class IRoomRepository(Protocol):
    """Интерфейс каталога номеров."""

    def list(self) -> List[Room]: ...
    def get(self, room_number: str) -> Room: ...
    def update(self, room_number: str, fields: Dict[str, Any]) -> Room: ...
    def snapshot(self) -> Any: ...
    def restore(self, state: Any) -> None: ...


class IBookingRepository(Protocol):
    """Интерфейс хранилища бронирований."""

    def list(self) -> List[Booking]: ...
    def get(self, booking_id: EntityId) -> Booking: ...
    def append(self, booking: Booking) -> EntityId: ...
    def update(self, booking_id: EntityId, fields: Dict[str, Any]) -> Booking: ...
    def find_by_room(self, room_number: str) -> List[Booking]: ...
    def snapshot(self) -> Any: ...
    def restore(self, state: Any) -> None: ...


class IBookingUnitOfWork(Protocol):
    """Интерфейс Unit of Work для контекста бронирования."""

    @property
    def bookings(self) -> IBookingRepository: ...
    @property
    def rooms(self) -> IRoomRepository: ...
    @property
    def event_bus(self) -> IEventBus: ...

    def collect(self, event: DomainEvent) -> None: ...
    def __enter__(self) -> IBookingUnitOfWork: ...
    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool: ...
    def commit(self) -> None: ...
    def rollback(self) -> None: ...
