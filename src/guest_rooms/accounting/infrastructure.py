"""
Инфраструктурный слой контекста учета.
"""
import threading
from decimal import Decimal
from typing import Dict, List, Optional

from ..booking.infrastructure import StandardLogger
from ..booking.interfaces import ILogger
from ..shared_kernel import EntityId
from .domain import LedgerEntry
from .interfaces import IFinancialLedger


class InMemoryFinancialLedger(IFinancialLedger):
    """Реализация финансового журнала в памяти."""

    def __init__(self, logger: Optional[ILogger] = None):
        self._entries: List[LedgerEntry] = []
        self._lock = threading.Lock()
        self._logger = logger or StandardLogger(__name__)

    def record(self, entry: LedgerEntry) -> None:
        with self._lock:
            self._entries.append(entry)
        self._logger.info(
            "Ledger entry recorded",
            category=entry.category,
            amount=str(entry.amount),
            reference=entry.reference,
        )

    @property
    def entries(self) -> List[LedgerEntry]:
        with self._lock:
            return list(self._entries)

    def find_by_reference(self, reference: EntityId) -> List[LedgerEntry]:
        return [entry for entry in self.entries if entry.reference == reference]

    def totals_by_category(self) -> Dict[str, Decimal]:
        """Сводка сумм по категориям."""
        totals: Dict[str, Decimal] = {}
        for entry in self.entries:
            totals[entry.category] = totals.get(entry.category, Decimal("0")) + entry.amount
        return totals
