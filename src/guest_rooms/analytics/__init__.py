"""
Модуль контекста аналитики (Analytics Context).

Показатели загрузки, выручки и структуры бронирований, календарь загрузки.
"""

from . import application, domain

__all__ = [
    "domain",
    "application",
]
