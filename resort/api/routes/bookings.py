from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from resort.api.rate_limit import booking_limiter, otp_limiter
from resort.core import messages, responses
from resort.core.config import settings
from resort.core.errors import AppError, NotFoundError
from resort.db.session import get_db
from resort.models.enums import ACTIVE_STATUSES
from resort.schemas.booking import BookingCreate, CancelBookingRequest, PhoneOtpRequest
from resort.services import booking_service, otp_service
from resort.services.notification_service import (
    booking_cancelled_message,
    booking_received_message,
    dispatch,
    otp_message,
)
from resort.services.whatsapp_service import WhatsAppService, get_notifier
from resort.utils.dates import format_date, format_date_localized
from resort.utils.visit_types import to_localized_label

router = APIRouter(tags=["bookings"])


@router.post("/booking", status_code=201, dependencies=[Depends(booking_limiter)])
def create_public_booking(body: BookingCreate, background: BackgroundTasks,
                          db: Session = Depends(get_db),
                          notifier: WhatsAppService = Depends(get_notifier)):
    if not otp_service.is_phone_verified(db, body.customerPhone):
        raise AppError(messages.PHONE_NOT_VERIFIED)
    b = booking_service.create_booking(db, body)
    dispatch(background, notifier, b.customer_phone, booking_received_message(db, b))
    return JSONResponse(status_code=201, content={
        "ok": True,
        "message": messages.BOOKING_CREATED,
        "bookingRef": b.booking_ref,
        "data": {
            "id": b.id,
            "bookingRef": b.booking_ref,
            "date": format_date(b.date),
            "visitType": b.visit_type,
            "customerName": b.customer_name,
            "status": b.status,
        },
    })


@router.get("/booking/{booking_ref}")
def get_booking(booking_ref: str, lang: str | None = None, db: Session = Depends(get_db)):
    b = booking_service.get_booking_by_ref(db, booking_ref)
    if not b:
        raise NotFoundError(messages.BOOKING_NOT_FOUND)
    language = lang or b.language or "ar"
    chalet = None
    if b.chalet is not None:
        chalet = {"name": b.chalet.name_en if language == "en" else b.chalet.name_ar}
    return responses.success(messages.BOOKING_FETCHED, {
        "bookingRef": b.booking_ref,
        "date": format_date_localized(b.date, language),
        "dateRaw": format_date(b.date),
        "visitType": to_localized_label(b.visit_type, language),
        "customerName": b.customer_name,
        "guests": b.guests,
        "status": b.status,
        "paymentStatus": b.payment_status,
        "chalet": chalet,
        "notes": b.notes,
        "canCancel": b.status in ACTIVE_STATUSES,
    })


@router.post("/booking/{booking_ref}/request-otp", dependencies=[Depends(otp_limiter)])
def request_cancellation_otp(booking_ref: str, body: PhoneOtpRequest, background: BackgroundTasks,
                             db: Session = Depends(get_db),
                             notifier: WhatsAppService = Depends(get_notifier)):
    b, code = booking_service.generate_cancellation_otp(db, booking_ref, body.phone)
    dispatch(background, notifier, body.phone, otp_message(code, b.language, purpose="cancel"))
    data = None if settings.is_production else {"otp": code}
    return responses.success(messages.OTP_SENT, data)


@router.post("/booking/{booking_ref}/cancel")
def cancel_booking(booking_ref: str, body: CancelBookingRequest, background: BackgroundTasks,
                   db: Session = Depends(get_db),
                   notifier: WhatsAppService = Depends(get_notifier)):
    if not body.otp:
        raise AppError(messages.OTP_REQUIRED)
    b = booking_service.cancel_booking_with_otp(db, booking_ref, body.phone, body.otp)
    dispatch(background, notifier, b.customer_phone, booking_cancelled_message(db, b))
    return responses.success(messages.BOOKING_CANCELLED, {
        "bookingRef": b.booking_ref,
        "status": b.status,
        "cancelledAt": b.cancelled_at.isoformat() if b.cancelled_at else None,
    })
