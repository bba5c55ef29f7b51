"""Customer WhatsApp messages.

Messages are rendered inside the request from templates in the settings
table; only the network send is deferred to a background task.
"""
import logging
import re

from fastapi import BackgroundTasks
from sqlalchemy.orm import Session

from resort.models.booking import Booking
from resort.models.pricing import ChaletPricing, Pricing
from resort.services.settings_service import get_setting
from resort.services.whatsapp_service import WhatsAppService
from resort.utils.dates import format_date
from resort.utils.visit_types import to_localized_label

logger = logging.getLogger(__name__)

DEFAULT_DEPOSIT = 700

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def render_template(template: str, variables: dict[str, str]) -> str:
    # Unknown placeholders are left as-is
    return _PLACEHOLDER.sub(lambda m: variables.get(m.group(1), m.group(0)), template)


def booking_variables(b: Booking) -> dict[str, str]:
    lang = b.language or "ar"
    chalet_name = ""
    if b.chalet is not None:
        chalet_name = b.chalet.name_en if lang == "en" else b.chalet.name_ar
    return {
        "customerName": b.customer_name,
        "date": format_date(b.date),
        "visitType": to_localized_label(b.visit_type, lang),
        "guests": str(b.guests),
        "bookingRef": b.booking_ref,
        "chalet": chalet_name,
    }


def deposit_amount(db: Session, b: Booking) -> int:
    """Deposit from the chalet pricing matrix, else the resort-wide price for the visit type."""
    if b.chalet_id:
        cp = (
            db.query(ChaletPricing)
            .filter(ChaletPricing.chalet_id == b.chalet_id, ChaletPricing.visit_type == b.visit_type, ChaletPricing.is_active == True)
            .first()
        )
        if cp:
            return cp.deposit_amount
    p = db.query(Pricing).filter(Pricing.visit_type == b.visit_type).first()
    return p.deposit_amount if p else DEFAULT_DEPOSIT


def _from_template(db: Session, kind: str, b: Booking, fallback: str, extra: dict[str, str] | None = None) -> str:
    lang = b.language or "ar"
    key = f"whatsapp_template_{kind}_{lang}"
    template = get_setting(db, key)
    if not template:
        logger.warning("WhatsApp template not found: %s", key)
        template = fallback
    return render_template(template, {**booking_variables(b), **(extra or {})})


def booking_received_message(db: Session, b: Booking) -> str:
    fallback = "Booking {bookingRef} received" if b.language == "en" else "تم استلام طلب الحجز {bookingRef}"
    return _from_template(db, "new_booking", b, fallback)


def booking_confirmed_message(db: Session, b: Booking) -> str:
    fallback = "Booking {bookingRef} confirmed" if b.language == "en" else "تم تأكيد الحجز {bookingRef}"
    return _from_template(db, "confirmed", b, fallback, {"depositAmount": str(deposit_amount(db, b))})


def booking_cancelled_message(db: Session, b: Booking, reason: str | None = None) -> str:
    en = b.language == "en"
    fallback = "Booking {bookingRef} cancelled" if en else "تم إلغاء الحجز {bookingRef}"
    default_reason = "As per your request" if en else "بناءً على طلبكم"
    return _from_template(db, "cancelled", b, fallback, {"reason": reason or default_reason})


def reminder_message(db: Session, b: Booking) -> str:
    fallback = "Reminder: booking {bookingRef} on {date}" if b.language == "en" else "تذكير: حجزك {bookingRef} بتاريخ {date}"
    return _from_template(db, "reminder", b, fallback)


def otp_message(code: str, lang: str | None = "ar", purpose: str = "cancel") -> str:
    if lang == "en":
        what = "to cancel your booking" if purpose == "cancel" else "to verify your phone"
        return f"Your verification code {what}: {code}\nValid for 10 minutes"
    what = "لإلغاء حجزك" if purpose == "cancel" else "للتحقق من رقم جوالك"
    return f"رمز التحقق {what}: {code}\nصالح لمدة 10 دقائق"


def dispatch(background: BackgroundTasks, notifier: WhatsAppService, phone: str, message: str) -> None:
    background.add_task(notifier.send_message, phone, message)
