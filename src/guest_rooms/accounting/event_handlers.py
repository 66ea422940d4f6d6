from ..accommodation.domain import GuestCheckedOut
from ..config import GuestRoomsSettings
from .domain import guest_room_income
from .interfaces import IFinancialLedger


def on_guest_checked_out(
    event: GuestCheckedOut, ledger: IFinancialLedger, settings: GuestRoomsSettings
) -> None:
    """Обработчик события выселения: доход от номера в финансовый журнал."""
    ledger.record(
        guest_room_income(
            booking_id=event.booking_id,
            guest_name=event.guest_name,
            room_number=event.room_number,
            amount=event.amount_paid,
            on=event.checked_out_at.date(),
            settings=settings,
        )
    )
