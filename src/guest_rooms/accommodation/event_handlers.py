from ..config import GuestRoomsSettings
from .domain import GuestCheckedIn, GuestCheckedOut
from .interfaces import INotificationService


def on_guest_checked_in(
    event: GuestCheckedIn, notifications: INotificationService, settings: GuestRoomsSettings
) -> None:
    """Обработчик события заселения: приветственное письмо."""
    if not event.email:
        return
    notifications.send_guest_welcome(
        event.email,
        {
            "guest_name": event.guest_name,
            "room_number": event.room_number,
            "check_out_date": event.check_out_date.strftime("%B %d, %Y"),
            "property_name": settings.property_name,
        },
    )


def on_guest_checked_out(
    event: GuestCheckedOut, notifications: INotificationService, settings: GuestRoomsSettings
) -> None:
    """Обработчик события выселения: подтверждение с итоговыми суммами."""
    if not event.email:
        return
    notifications.send_checkout_confirmation(
        event.email,
        {
            "guest_name": event.guest_name,
            "room_number": event.room_number,
            "total_amount": str(event.total_amount),
            "amount_paid": str(event.amount_paid),
            "property_name": settings.property_name,
        },
    )
