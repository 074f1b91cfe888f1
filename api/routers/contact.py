"""
Contact API Endpoints.

Endpoint for the website contact form.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_notification_service
from api.models import ContactRequest
from services.notification_service import NotificationError, NotificationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/contact",
    summary="Send Contact Message",
    description="Forward a contact form message to the owner and auto-reply to the sender."
)
def send_contact_message(
    request: ContactRequest,
    notifier: NotificationService = Depends(get_notification_service),
):
    """
    Forward a contact-form submission.

    The owner email (reply-to the sender) must be delivered; the auto-reply
    to the sender is best-effort.
    """
    try:
        notifier.notify_contact(
            name=request.name,
            email=request.email,
            phone=request.phone,
            message=request.message,
            coverages=request.coverages,
        )
        return {"success": True, "message": "Message sent successfully"}

    except NotificationError as e:
        logger.error("Contact message not delivered", extra={"sender": request.email, "error": str(e)})
        raise HTTPException(
            status_code=500,
            detail="Failed to send message. Please try again or call us directly."
        )
