"""
Ядро управления краткосрочным бронированием гостевых номеров.

Подбор свободных номеров, расчет стоимости, жизненный цикл бронирования
и аналитика загрузки.
"""

__version__ = "0.1.0"
