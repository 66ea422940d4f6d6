"""
Доменная модель контекста учета.

Содержит записи финансового журнала, которые ядро передает
внешней бухгалтерии.
"""
import datetime as dt
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..config import GuestRoomsSettings
from ..shared_kernel import EntityId, generate_id


class LedgerEntry(BaseModel):
    """Запись финансового журнала."""

    id: UUID = Field(default_factory=generate_id)
    date: dt.date
    type: str
    category: str
    amount: Decimal
    description: str
    reference: Optional[EntityId] = None  # Идентификатор бронирования
    payer: Optional[str] = None


def guest_room_income(
    booking_id: EntityId,
    guest_name: str,
    room_number: str,
    amount: Decimal,
    on: dt.date,
    settings: GuestRoomsSettings,
) -> LedgerEntry:
    """Создает запись о доходе от гостевого номера."""
    return LedgerEntry(
        date=on,
        type=settings.ledger_type,
        category=settings.ledger_category,
        amount=amount,
        description=f"Guest room rental - {guest_name} (Room {room_number})",
        reference=booking_id,
        payer=guest_name,
    )
