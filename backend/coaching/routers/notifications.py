import logging

from fastapi import APIRouter, Depends, HTTPException

from coaching.core.auth import Capability, require_capability
from coaching.core.deps import get_notifier
from coaching.models.user import User
from coaching.schemas.notification import NotificationRequest, NotificationResponse
from coaching.services.email import EmailNotifier, announcement_recipient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=NotificationResponse)
def send_notification(
    body: NotificationRequest,
    notifier: EmailNotifier = Depends(get_notifier),
    user: User = Depends(require_capability(Capability.SEND_NOTIFICATIONS)),
):
    """Mail an announcement to the configured notifications mailbox."""
    sent = notifier.send(announcement_recipient(), body.subject, body.message)
    if not sent:
        raise HTTPException(status_code=503, detail="Failed to send notification")
    logger.info("Announcement %r sent by %s", body.subject, user.id)
    return NotificationResponse(sent=True)
