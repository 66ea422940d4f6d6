"""
Модуль контекста учета (Accounting Context).

Передает во внешний финансовый журнал доход от гостевых номеров.
"""

from . import domain, event_handlers, infrastructure, interfaces

__all__ = [
    "domain",
    "event_handlers",
    "infrastructure",
    "interfaces",
]
