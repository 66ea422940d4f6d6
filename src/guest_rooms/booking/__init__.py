"""
Модуль контекста бронирования (Booking Context).

Отвечает за каталог гостевых номеров и бронирования, включая:
- Проверку доступности номеров на период
- Расчет стоимости проживания по тарифной политике
- Прием, подтверждение и оплату бронирований
"""

from . import application, domain, infrastructure, interfaces

__all__ = [
    "domain",
    "application",
    "infrastructure",
    "interfaces",
]
