"""
Инфраструктурный слой контекста бронирования.

Содержит реализации репозиториев и других интерфейсов,
зависимые от конкретных технологий (память, JSON-файлы, логирование).
"""
import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..shared_kernel import (
    BookingNotFound,
    DomainEvent,
    EntityId,
    RoomNotFound,
    StoreUnavailable,
)
from . import interfaces as ports
from .domain import Booking, Room

T = TypeVar("T", bound=BaseModel)


class StandardLogger(ports.ILogger):
    """Логгер поверх стандартного модуля logging; контекст пишется как JSON."""

    def __init__(self, name: str = "guest_rooms"):
        self._logger = logging.getLogger(name)

    def _log(self, level: int, message: str, kwargs: Dict[str, Any]) -> None:
        exc_info = kwargs.pop("exc_info", None)
        if kwargs:
            message = f"{message} {json.dumps(kwargs, default=str, ensure_ascii=False)}"
        self._logger.log(level, message, exc_info=exc_info)

    def info(self, message: str, **kwargs) -> None:
        self._log(logging.INFO, message, kwargs)

    def error(self, message: str, **kwargs) -> None:
        self._log(logging.ERROR, message, kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self._log(logging.WARNING, message, kwargs)

    def debug(self, message: str, **kwargs) -> None:
        self._log(logging.DEBUG, message, kwargs)


class JsonFileRepository(Generic[T]):
    """Чтение и запись списка моделей в JSON-файл."""

    def __init__(self, file_path: str, model_class: Type[T], logger: Optional[ports.ILogger] = None):
        """
        Инициализирует хранилище.

        Args:
            file_path: Путь к JSON-файлу с данными
            model_class: Класс модели данных
            logger: Логгер для отладочных сообщений
        """
        self._file_path = Path(file_path)
        self._model_class = model_class
        self._logger = logger or StandardLogger(__name__)

    def load(self) -> List[T]:
        """Загружает данные из JSON-файла."""
        if not self._file_path.exists():
            return []

        try:
            raw_data = self._file_path.read_text(encoding="utf-8")
            if not raw_data.strip():
                return []
            items = [self._model_class.model_validate(item) for item in json.loads(raw_data)]
        except (OSError, ValueError, ValidationError) as e:
            raise StoreUnavailable(f"Не удалось прочитать {self._file_path}: {e}") from e

        self._logger.debug("Loaded records", path=str(self._file_path), count=len(items))
        return items

    def save(self, items: Iterable[T]) -> None:
        """Сохраняет данные в JSON-файл."""
        data = [item.model_dump(mode="json") for item in items]
        try:
            # Создаем директорию, если она не существует
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            tmp_path.replace(self._file_path)
        except OSError as e:
            raise StoreUnavailable(f"Не удалось записать {self._file_path}: {e}") from e

        self._logger.debug("Saved records", path=str(self._file_path), count=len(data))


class InMemoryRepository(Generic[T]):
    """Базовый репозиторий в памяти; записи хранятся как неизменяемые копии.

    Каждое обращение выполняется под собственной блокировкой хранилища,
    поэтому чтение вне единицы работы безопасно при параллельной записи.
    """

    key_field: str = "id"
    model_class: Type[T]

    def __init__(self, items: Iterable[T] = ()):
        self._lock = threading.RLock()
        self._items: Dict[str, T] = {}
        for item in items:
            self._insert(item)

    def _not_found(self, key: str) -> Exception:
        return KeyError(key)

    def _insert(self, item: T) -> str:
        key = getattr(item, self.key_field)
        with self._lock:
            if key in self._items:
                raise ValueError(f"{self.model_class.__name__} with key {key} already exists")
            self._items[key] = item.model_copy(deep=True)
        return key

    def _persist(self) -> None:
        """Хук для хранилищ с внешним носителем."""

    def list(self) -> List[T]:
        with self._lock:
            items = list(self._items.values())
        return [item.model_copy(deep=True) for item in items]

    def get(self, key: str) -> T:
        with self._lock:
            if key not in self._items:
                raise self._not_found(key)
            item = self._items[key]
        return item.model_copy(deep=True)

    def update(self, key: str, fields: Dict[str, Any]) -> T:
        unknown = set(fields) - set(self.model_class.model_fields)
        if unknown:
            raise ValueError(f"Unknown {self.model_class.__name__} fields: {sorted(unknown)}")
        if self.key_field in fields and fields[self.key_field] != key:
            raise ValueError(f"{self.model_class.__name__} key cannot be changed")

        with self._lock:
            if key not in self._items:
                raise self._not_found(key)
            updated = self.model_class.model_validate({**self._items[key].model_dump(), **fields})
            self._items[key] = updated
            self._persist()
        return updated.model_copy(deep=True)

    def snapshot(self) -> Dict[str, T]:
        # Записи не изменяются на месте, поэтому достаточно поверхностной копии
        with self._lock:
            return dict(self._items)

    def restore(self, state: Dict[str, T]) -> None:
        with self._lock:
            self._items = dict(state)
            self._persist()


class InMemoryRoomRepository(InMemoryRepository[Room], ports.IRoomRepository):
    """Реализация каталога номеров в памяти."""

    key_field = "number"
    model_class = Room

    def _not_found(self, key: str) -> Exception:
        return RoomNotFound(key)

    def add(self, room: Room) -> None:
        """Добавляет номер в каталог (первичная настройка)."""
        with self._lock:
            self._insert(room)
            self._persist()


class InMemoryBookingRepository(InMemoryRepository[Booking], ports.IBookingRepository):
    """Реализация хранилища бронирований в памяти."""

    key_field = "id"
    model_class = Booking

    def _not_found(self, key: str) -> Exception:
        return BookingNotFound(key)

    def append(self, booking: Booking) -> EntityId:
        with self._lock:
            booking_id = self._insert(booking)
            self._persist()
        return booking_id

    def find_by_room(self, room_number: str) -> List[Booking]:
        with self._lock:
            bookings = [b for b in self._items.values() if b.room_number == room_number]
        return [booking.model_copy(deep=True) for booking in bookings]


class JsonFileRoomRepository(InMemoryRoomRepository):
    """Каталог номеров, сохраняемый в JSON-файл после каждой записи."""

    def __init__(
        self,
        file_path: str,
        initial_rooms: Iterable[Room] = (),
        logger: Optional[ports.ILogger] = None,
    ):
        self._store = JsonFileRepository(file_path, Room, logger)
        stored = self._store.load()
        super().__init__(stored or initial_rooms)
        if not stored and self._items:
            self._persist()

    def _persist(self) -> None:
        self._store.save(self._items.values())


class JsonFileBookingRepository(InMemoryBookingRepository):
    """Хранилище бронирований, сохраняемое в JSON-файл после каждой записи."""

    def __init__(self, file_path: str, logger: Optional[ports.ILogger] = None):
        self._store = JsonFileRepository(file_path, Booking, logger)
        super().__init__(self._store.load())

    def _persist(self) -> None:
        self._store.save(self._items.values())


class InMemoryEventBus(ports.IEventBus):
    """Реализация шины событий в памяти.

    Ошибки обработчиков логируются и не пробрасываются: событие публикуется
    уже после фиксации изменений, откатывать нечего.
    """

    def __init__(self, logger: Optional[ports.ILogger] = None):
        self._subscribers: Dict[Type[DomainEvent], List[Callable[[Any], None]]] = {}
        self._logger = logger or StandardLogger(__name__)

    def publish(self, event: DomainEvent) -> None:
        """Публикует событие."""
        event_type = type(event)
        handlers = self._subscribers.get(event_type, [])
        if not handlers:
            self._logger.debug(f"No subscribers for event type {event_type.__name__}")
            return

        self._logger.debug(f"Publishing event: {event_type.__name__}", event=event.model_dump())

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self._logger.error(
                    f"Error in event handler for {event_type.__name__}",
                    error=str(e),
                    event=event.model_dump(),
                    exc_info=True,
                )

    def subscribe(self, event_type: Type[DomainEvent], handler: Callable[[Any], None]) -> None:
        """Подписывает обработчик на события указанного типа."""
        self._subscribers.setdefault(event_type, []).append(handler)
        self._logger.debug(f"Subscribed handler to {event_type.__name__} events")


class BookingUnitOfWork(ports.IBookingUnitOfWork):
    """Единица работы для контекста бронирования.

    Удерживает блокировку на время операции, поэтому проверка доступности и
    запись брони выполняются атомарно. При ошибке хранилища восстанавливаются
    из снимка; события публикуются только после фиксации.
    """

    def __init__(
        self,
        rooms_repo: Optional[InMemoryRoomRepository] = None,
        bookings_repo: Optional[InMemoryBookingRepository] = None,
        event_bus: Optional[ports.IEventBus] = None,
        logger: Optional[ports.ILogger] = None,
    ):
        self._rooms = rooms_repo if rooms_repo is not None else InMemoryRoomRepository()
        self._bookings = bookings_repo if bookings_repo is not None else InMemoryBookingRepository()
        self._logger = logger or StandardLogger(__name__)
        self._event_bus = event_bus or InMemoryEventBus(self._logger)
        self._lock = threading.RLock()
        self._depth = 0
        self._snapshot: Optional[tuple] = None
        self._pending_events: List[DomainEvent] = []

    @property
    def bookings(self) -> ports.IBookingRepository:
        return self._bookings

    @property
    def rooms(self) -> ports.IRoomRepository:
        return self._rooms

    @property
    def event_bus(self) -> ports.IEventBus:
        return self._event_bus

    def collect(self, event: DomainEvent) -> None:
        """Откладывает событие до фиксации изменений."""
        self._pending_events.append(event)

    def commit(self) -> None:
        """Фиксирует все изменения."""
        self._snapshot = None
        self._logger.debug("BookingUnitOfWork committed")

    def rollback(self) -> None:
        """Откатывает все изменения."""
        if self._snapshot is not None:
            rooms_state, bookings_state = self._snapshot
            self._rooms.restore(rooms_state)
            self._bookings.restore(bookings_state)
            self._snapshot = None
        self._pending_events = []
        self._logger.warning("BookingUnitOfWork rolled back")

    def __enter__(self) -> "BookingUnitOfWork":
        self._lock.acquire()
        self._depth += 1
        if self._depth == 1:
            self._snapshot = (self._rooms.snapshot(), self._bookings.snapshot())
            self._pending_events = []
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        events: List[DomainEvent] = []
        try:
            if self._depth == 1:
                if exc_type is None:
                    self.commit()
                    events, self._pending_events = self._pending_events, []
                else:
                    self.rollback()
        finally:
            self._depth -= 1
            self._lock.release()

        for event in events:
            self._event_bus.publish(event)
        return False  # Пробрасываем исключение дальше, если оно было
