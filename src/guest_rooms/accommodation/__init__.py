"""
Модуль контекста проживания (Accommodation Context).

Отвечает за заселение, выселение и отмену бронирований, а также
за состояние номеров и уведомления гостей.
"""

from . import application, domain, event_handlers, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "event_handlers",
    "infrastructure",
    "interfaces",
]
