"""Short-lived user notifications."""
from fastapi import APIRouter, Depends

from pharmadist.api.deps import get_notifier
from pharmadist.core.exceptions import BusinessError
from pharmadist.core.notifications import NotificationCenter

router = APIRouter()


@router.get("")
def list_notifications(notifier: NotificationCenter = Depends(get_notifier)):
    """Unexpired notifications, oldest first."""
    return [n.to_dict() for n in notifier.active()]


@router.delete("/{notification_id}")
def dismiss_notification(notification_id: int, notifier: NotificationCenter = Depends(get_notifier)):
    if not notifier.dismiss(notification_id):
        raise BusinessError.not_found("Notification not found")
    return {"dismissed": notification_id}

