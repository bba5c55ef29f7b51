import logging
import secrets
import uuid
from datetime import timedelta

from sqlalchemy.orm import Session

from resort.core import messages
from resort.core.config import settings
from resort.core.errors import AppError
from resort.models.enums import OtpPurpose
from resort.models.otp_code import OtpCode
from resort.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)


def generate_code() -> str:
    return f"{secrets.randbelow(900000) + 100000}"


def _get(db: Session, purpose: OtpPurpose, subject: str) -> OtpCode | None:
    return (
        db.query(OtpCode)
        .filter(OtpCode.purpose == purpose.value, OtpCode.subject_key == subject)
        .first()
    )


def _is_expired(otp: OtpCode) -> bool:
    return utcnow() >= as_utc(otp.expires_at)


def issue_otp(db: Session, purpose: OtpPurpose, subject: str) -> str:
    """Issue a fresh 6-digit code for (purpose, subject), replacing any previous one. Commits."""
    code = generate_code()
    expires_at = utcnow() + timedelta(minutes=settings.OTP_TTL_MINUTES)
    otp = _get(db, purpose, subject)
    if otp is None:
        db.add(OtpCode(
            id=str(uuid.uuid4()),
            purpose=purpose.value,
            subject_key=subject,
            code=code,
            expires_at=expires_at,
            verified=False,
        ))
    else:
        otp.code = code
        otp.expires_at = expires_at
        otp.verified = False
    db.commit()
    if not settings.is_production:
        logger.info("OTP issued purpose=%s subject=%s code=%s", purpose.value, subject, code)
    return code


def check_otp(db: Session, purpose: OtpPurpose, subject: str, code: str) -> OtpCode:
    """Validate a submitted code without consuming it. Each failure has its own message."""
    otp = _get(db, purpose, subject)
    if otp is None:
        raise AppError(messages.OTP_NOT_REQUESTED)
    if _is_expired(otp):
        raise AppError(messages.OTP_EXPIRED)
    # compare_digest rejects non-ASCII str, so compare the UTF-8 bytes
    if not secrets.compare_digest(otp.code.encode(), (code or "").encode()):
        raise AppError(messages.OTP_INCORRECT)
    return otp


def mark_verified(db: Session, purpose: OtpPurpose, subject: str, code: str) -> None:
    otp = check_otp(db, purpose, subject, code)
    otp.verified = True
    db.commit()


def is_verified(db: Session, purpose: OtpPurpose, subject: str) -> bool:
    otp = _get(db, purpose, subject)
    return bool(otp and otp.verified and not _is_expired(otp))


def discard_otp(db: Session, purpose: OtpPurpose, subject: str) -> None:
    """Delete the code. Does not commit; callers fold this into their own transaction."""
    db.query(OtpCode).filter(
        OtpCode.purpose == purpose.value, OtpCode.subject_key == subject
    ).delete(synchronize_session=False)


def purge_expired(db: Session) -> int:
    n = db.query(OtpCode).filter(OtpCode.expires_at <= utcnow()).delete(synchronize_session=False)
    db.commit()
    return int(n or 0)


# Pre-booking phone ownership check

def request_phone_otp(db: Session, phone: str) -> str:
    return issue_otp(db, OtpPurpose.PHONE_VERIFY, phone)


def verify_phone_otp(db: Session, phone: str, code: str) -> None:
    mark_verified(db, OtpPurpose.PHONE_VERIFY, phone, code)


def is_phone_verified(db: Session, phone: str) -> bool:
    return is_verified(db, OtpPurpose.PHONE_VERIFY, phone)
