import logging
from datetime import timedelta

from sqlalchemy.exc import ProgrammingError
from sqlalchemy.orm import Session

from resort.db.session import SessionLocal
from resort.models.booking import Booking
from resort.models.enums import BookingStatus
from resort.services import otp_service
from resort.services.notification_service import reminder_message
from resort.services.whatsapp_service import WhatsAppService
from resort.utils.dates import hours_until, today, utcnow

logger = logging.getLogger(__name__)


def purge_expired_otps(db: Session | None = None):
    own = db is None
    db = db or SessionLocal()
    try:
        try:
            n = otp_service.purge_expired(db)
        except ProgrammingError:
            # DB not migrated yet; don't crash the worker.
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}
        if n:
            logger.info("Purged %s expired OTP codes", n)
        return {"purged": n}
    finally:
        if own:
            db.close()


def send_booking_reminders(hours_ahead: int = 24, db: Session | None = None, notifier: WhatsAppService | None = None):
    """Remind CONFIRMED customers whose visit day starts within ``hours_ahead`` hours. Each booking is reminded once."""
    own = db is None
    db = db or SessionLocal()
    notifier = notifier or WhatsAppService.from_settings()
    try:
        start = today()
        end = start + timedelta(days=hours_ahead // 24 + 1)
        try:
            candidates = db.query(Booking).filter(
                Booking.status == BookingStatus.CONFIRMED.value,
                Booking.reminder_sent_at.is_(None),
                Booking.date >= start,
                Booking.date <= end,
            ).all()
        except ProgrammingError:
            db.rollback()
            return {"skipped": True, "reason": "missing_tables"}

        sent = 0
        for b in candidates:
            if not 0 <= hours_until(b.date) <= hours_ahead:
                continue
            if notifier.send_message(b.customer_phone, reminder_message(db, b)):
                b.reminder_sent_at = utcnow()
                db.commit()
                sent += 1
        return {"candidates": len(candidates), "sent": sent}
    finally:
        if own:
            db.close()
