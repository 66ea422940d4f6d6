"""
Интерфейсы (порты) для контекста учета.
"""

from typing import Protocol

from .domain import LedgerEntry


class IFinancialLedger(Protocol):
    """Финансовый журнал; запись выполняется по принципу fire-and-forget."""

    def record(self, entry: LedgerEntry) -> None: ...
