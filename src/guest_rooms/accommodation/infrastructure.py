"""
Инфраструктурный слой контекста проживания.
"""
from typing import Any, Dict, Optional

from ..booking.infrastructure import StandardLogger
from ..booking.interfaces import ILogger
from .interfaces import INotificationService


class LoggingNotificationService(INotificationService):
    """Адаптер уведомлений, который только записывает запросы в лог.

    Используется, пока к ядру не подключен реальный почтовый сервис.
    """

    def __init__(self, logger: Optional[ILogger] = None):
        self._logger = logger or StandardLogger(__name__)

    def send_guest_welcome(self, to: str, context: Dict[str, Any]) -> None:
        self._logger.info("Guest welcome requested", to=to, **context)

    def send_check_in_reminder(self, to: str, context: Dict[str, Any]) -> None:
        self._logger.info("Check-in reminder requested", to=to, **context)

    def send_checkout_confirmation(self, to: str, context: Dict[str, Any]) -> None:
        self._logger.info("Checkout confirmation requested", to=to, **context)
