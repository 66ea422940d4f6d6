"""
Интерфейсы (порты) для контекста проживания.

Определяет контракты, которые должны быть реализованы внешними адаптерами.
"""
from typing import Any, Dict, Protocol


class INotificationService(Protocol):
    """Сервис уведомлений гостей.

    Доставка асинхронна с точки зрения ядра: сбои логируются адаптером
    и не возвращаются вызывающему.
    """

    def send_guest_welcome(self, to: str, context: Dict[str, Any]) -> None:
        """Отправляет приветствие после заселения."""
        ...

    def send_check_in_reminder(self, to: str, context: Dict[str, Any]) -> None:
        """Отправляет напоминание о заезде."""
        ...

    def send_checkout_confirmation(self, to: str, context: Dict[str, Any]) -> None:
        """Отправляет подтверждение выселения."""
        ...
