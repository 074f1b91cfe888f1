"""
Bookings API Endpoints.

Endpoint for reserving a call slot with double-booking protection.
"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException

from api.dependencies import get_booking_guard, get_lead_intake_service, get_notification_service
from api.errors import store_unavailable
from api.models import BookingRequest, BookingResponse, ErrorResponse, error_detail
from domain.booking import BookingSlot
from repositories.errors import StoreUnavailableError
from services.booking_service import BookingGuard, BookingStatus
from services.lead_intake_service import LeadIntakeService
from services.notification_service import NotificationService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/book-appointment",
    response_model=BookingResponse,
    responses={
        409: {"model": ErrorResponse, "description": "Time slot already booked"},
        503: {"model": ErrorResponse, "description": "Store unavailable; retry later"},
    },
    summary="Book Appointment",
    description="Reserve a call slot. At most one booking is accepted per exact appointment_date."
)
def book_appointment(
    request: BookingRequest,
    background_tasks: BackgroundTasks,
    guard: BookingGuard = Depends(get_booking_guard),
    intake: LeadIntakeService = Depends(get_lead_intake_service),
    notifier: NotificationService = Depends(get_notification_service),
):
    """
    Book a call for a lead.

    **Process:**
    1. Reserves `appointment_date` in the bookings ledger (exact string match)
    2. If the slot is already taken, returns 409 `TIME_SLOT_TAKEN`
    3. Records the lead row marked `BOOKED: <appointment_formatted>`
    4. Sends the owner notification and lead confirmation in the background

    **Failure handling:**
    - Ledger unavailable: 503 with `Retry-After`; the booking was not recorded.
    - Lead row or email failure after the slot is reserved: logged, the
      booking stays confirmed.

    **Conflict response (409):**
    ```json
    {
      "detail": {
        "success": false,
        "error": "TIME_SLOT_TAKEN",
        "message": "Sorry, this time slot was just booked by someone else. Please select a different time."
      }
    }
    ```
    """
    try:
        lead = request.to_record()
        try:
            slot = BookingSlot(
                requested_time=request.appointment_date,
                display_time=request.appointment_formatted or "",
                metadata=lead,
            )
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        try:
            result = guard.book(slot)
        except StoreUnavailableError as e:
            raise store_unavailable(e, "We couldn't confirm this time right now. Please try again shortly.")

        if result.status is BookingStatus.CONFLICT:
            raise HTTPException(
                status_code=409,
                detail=error_detail(result.error_code or "", result.message or ""),
            )
        if result.status is BookingStatus.STORE_ERROR:
            raise store_unavailable(message=result.message or "")

        try:
            intake.record_booked_lead(lead, slot)
        except StoreUnavailableError as e:
            logger.error(
                "Booked lead row not recorded",
                extra={
                    "requested_time": slot.requested_time,
                    "lead_email": slot.meta("lead_email"),
                    "error": str(e),
                },
            )

        background_tasks.add_task(notifier.notify_booking, slot, lead)

        return BookingResponse(
            success=True,
            message="Appointment booked successfully",
            requested_time=slot.requested_time,
            display_time=slot.display_time,
            availability_checked=result.availability_checked,
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Booking failed")
        raise HTTPException(
            status_code=500,
            detail=f"Failed to book appointment: {str(e)}"
        )
