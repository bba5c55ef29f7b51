from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from resort.models.booking import Booking
from resort.models.chalet import Chalet
from resort.models.enums import BookingStatus, PaymentStatus
from resort.utils.dates import format_date

DATE_PATTERN = r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$"
PHONE_PATTERN = r"^9665[0-9]{8}$"  # Saudi mobile with country code, no leading +
OTP_PATTERN = r"^[0-9]{6}$"

VisitTypeLabel = Literal["زيارة نهارية", "إقامة ليلية"]


class BookingCreate(BaseModel):
    date: str = Field(pattern=DATE_PATTERN)
    visitType: VisitTypeLabel
    customerName: str = Field(min_length=2, max_length=100)
    customerPhone: str = Field(pattern=PHONE_PATTERN)
    guests: int = Field(default=2, ge=1, le=10)
    chaletType: str = ""
    email: Optional[str] = None  # plain str, the booking form allows it blank
    notes: Optional[str] = Field(default=None, max_length=500)
    language: Literal["ar", "en"] = "ar"

    @field_validator("email")
    @classmethod
    def blank_email_is_none(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        if not v:
            return None
        if "@" not in v or len(v) > 320:
            raise ValueError("Invalid email")
        return v


class PhoneOtpRequest(BaseModel):
    phone: str = Field(pattern=PHONE_PATTERN)


class PhoneOtpVerify(BaseModel):
    phone: str = Field(pattern=PHONE_PATTERN)
    otp: str = Field(pattern=OTP_PATTERN)


class CancelBookingRequest(BaseModel):
    phone: str = Field(pattern=PHONE_PATTERN)
    otp: Optional[str] = Field(default=None, pattern=OTP_PATTERN)


class BookingUpdate(BaseModel):
    status: Optional[BookingStatus] = None
    paymentStatus: Optional[PaymentStatus] = None
    adminConfirmed: Optional[bool] = None
    cancellationReason: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=500)


class AdminCancelRequest(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


def chalet_brief(c: Chalet | None) -> dict | None:
    if c is None:
        return None
    return {"id": c.id, "nameAr": c.name_ar, "nameEn": c.name_en, "slug": c.slug}


def booking_out(b: Booking) -> dict:
    return {
        "id": b.id,
        "bookingRef": b.booking_ref,
        "date": format_date(b.date),
        "visitType": b.visit_type,
        "customerName": b.customer_name,
        "customerPhone": b.customer_phone,
        "email": b.email,
        "guests": b.guests,
        "notes": b.notes,
        "language": b.language,
        "status": b.status,
        "paymentStatus": b.payment_status,
        "adminConfirmed": b.admin_confirmed,
        "chaletId": b.chalet_id,
        "chalet": chalet_brief(b.chalet),
        "cancellationReason": b.cancellation_reason,
        "cancelledAt": b.cancelled_at.isoformat() if b.cancelled_at else None,
        "createdAt": b.created_at.isoformat() if b.created_at else None,
        "updatedAt": b.updated_at.isoformat() if b.updated_at else None,
    }
