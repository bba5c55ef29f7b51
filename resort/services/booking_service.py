import logging
import math
import uuid

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from resort.core import messages
from resort.core.errors import AppError, ConflictError, NotFoundError
from resort.models.booking import Booking
from resort.models.chalet import Chalet
from resort.models.enums import BookingStatus, OtpPurpose, PaymentStatus, VisitType
from resort.schemas.booking import BookingCreate, BookingUpdate
from resort.services import otp_service
from resort.services.availability_service import check_availability, slot_is_free
from resort.services.booking_ref_service import generate_booking_ref
from resort.utils.dates import parse_date, utcnow
from resort.utils.visit_types import CHALET_DECIDE_LATER, from_arabic_label

logger = logging.getLogger(__name__)

CUSTOMER_CANCEL_REASON = "Customer requested cancellation"
ADMIN_CANCEL_REASON = "Cancelled by admin"

BOOKING_TRANSITIONS: dict[str, set[str]] = {
    BookingStatus.PENDING.value: {BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value, BookingStatus.COMPLETED.value},
    BookingStatus.CONFIRMED.value: {BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value},
    BookingStatus.CANCELLED.value: set(),
    BookingStatus.COMPLETED.value: set(),
}

PAYMENT_TRANSITIONS: dict[str, set[str]] = {
    PaymentStatus.PENDING.value: {PaymentStatus.DEPOSIT_PAID.value, PaymentStatus.FULLY_PAID.value, PaymentStatus.REFUNDED.value, PaymentStatus.CANCELLED.value},
    PaymentStatus.DEPOSIT_PAID.value: {PaymentStatus.FULLY_PAID.value, PaymentStatus.REFUNDED.value, PaymentStatus.CANCELLED.value},
    PaymentStatus.FULLY_PAID.value: {PaymentStatus.REFUNDED.value},
    PaymentStatus.REFUNDED.value: set(),
    PaymentStatus.CANCELLED.value: set(),
}


def resolve_chalet(db: Session, chalet_type: str | None) -> Chalet | None:
    """Look up an active chalet by its Arabic or English name. Blank or "decide later" means none."""
    name = (chalet_type or "").strip()
    if not name or name == CHALET_DECIDE_LATER:
        return None
    chalet = (
        db.query(Chalet)
        .filter(Chalet.is_active == True, or_(Chalet.name_ar == name, Chalet.name_en == name))
        .first()
    )
    if chalet is None:
        logger.warning("Unknown chalet %r on booking request; booking stays unassigned", name)
    return chalet


def create_booking(db: Session, body: BookingCreate) -> Booking:
    chalet = resolve_chalet(db, body.chaletType)
    chalet_id = chalet.id if chalet else None

    if chalet and body.guests > chalet.max_guests:
        raise AppError(messages.TOO_MANY_GUESTS)

    availability = check_availability(db, body.date, body.visitType, chalet_id)
    if not availability.available:
        raise AppError(messages.DATE_NOT_AVAILABLE)

    day = parse_date(body.date)
    if day is None:
        raise AppError(messages.INVALID_DATE)
    visit_type = from_arabic_label(body.visitType)
    if visit_type is None:
        raise AppError(messages.INVALID_VISIT_TYPE)

    # Allocating the reference locks this year's counter row until commit,
    # so the re-check below is serialized against concurrent creations.
    ref = generate_booking_ref(db)
    if not slot_is_free(db, day, visit_type, chalet_id):
        db.rollback()
        raise ConflictError(messages.SLOT_TAKEN)

    booking = Booking(
        id=str(uuid.uuid4()),
        booking_ref=ref,
        date=day,
        visit_type=visit_type.value,
        customer_name=body.customerName,
        customer_phone=body.customerPhone,
        email=body.email,
        guests=body.guests,
        notes=body.notes,
        language=body.language,
        chalet_id=chalet_id,
        status=BookingStatus.PENDING.value,
        payment_status=PaymentStatus.PENDING.value,
    )
    db.add(booking)
    # Phone must be verified again for the next booking
    otp_service.discard_otp(db, OtpPurpose.PHONE_VERIFY, body.customerPhone)
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s created for %s %s", booking.booking_ref, body.date, visit_type.value)
    return booking


def get_booking_by_ref(db: Session, booking_ref: str) -> Booking | None:
    return db.query(Booking).filter(Booking.booking_ref == booking_ref).first()


def get_booking_by_id(db: Session, booking_id: str) -> Booking | None:
    return db.get(Booking, booking_id)


def _require_by_ref(db: Session, booking_ref: str) -> Booking:
    booking = get_booking_by_ref(db, booking_ref)
    if not booking:
        raise NotFoundError(messages.BOOKING_NOT_FOUND)
    return booking


def _require_by_id(db: Session, booking_id: str) -> Booking:
    booking = get_booking_by_id(db, booking_id)
    if not booking:
        raise NotFoundError(messages.BOOKING_NOT_FOUND)
    return booking


def list_bookings(
    db: Session,
    page: int = 1,
    limit: int = 20,
    status: BookingStatus | None = None,
    visit_type: VisitType | None = None,
    date_from=None,
    date_to=None,
    search: str | None = None,
) -> tuple[list[Booking], dict]:
    page = max(page, 1)
    limit = max(limit, 1)
    q = db.query(Booking)
    if status:
        q = q.filter(Booking.status == status.value)
    if visit_type:
        q = q.filter(Booking.visit_type == visit_type.value)
    if date_from:
        q = q.filter(Booking.date >= date_from)
    if date_to:
        q = q.filter(Booking.date <= date_to)
    if search:
        like = f"%{search.lower()}%"
        q = q.filter(or_(
            func.lower(Booking.customer_name).like(like),
            Booking.customer_phone.like(f"%{search}%"),
            func.lower(Booking.booking_ref).like(like),
        ))
    total = q.count()
    items = q.order_by(Booking.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    pagination = {
        "page": page,
        "limit": limit,
        "total": total,
        "totalPages": math.ceil(total / limit),
    }
    return items, pagination


def _check_transition(table: dict[str, set[str]], old: str, new: str, template: str) -> None:
    if old == new:
        return
    if new not in table.get(old, set()):
        raise ConflictError(template.format(old=old, new=new))


def update_booking_status(db: Session, booking_id: str, patch: BookingUpdate) -> tuple[Booking, dict]:
    """Apply an admin patch. Returns the booking and the {field: [old, new]} changes."""
    booking = _require_by_id(db, booking_id)
    changes: dict = {}

    if patch.status is not None:
        _check_transition(BOOKING_TRANSITIONS, booking.status, patch.status.value, messages.INVALID_STATUS_TRANSITION)
    if patch.paymentStatus is not None:
        _check_transition(PAYMENT_TRANSITIONS, booking.payment_status, patch.paymentStatus.value, messages.INVALID_PAYMENT_TRANSITION)

    def _set(attr: str, value) -> None:
        old = getattr(booking, attr)
        if old != value:
            changes[attr] = [old, value]
            setattr(booking, attr, value)

    if patch.status is not None:
        _set("status", patch.status.value)
        if patch.status == BookingStatus.CANCELLED and booking.cancelled_at is None:
            booking.cancelled_at = utcnow()
            otp_service.discard_otp(db, OtpPurpose.BOOKING_CANCEL, booking.booking_ref)
    if patch.paymentStatus is not None:
        _set("payment_status", patch.paymentStatus.value)
    if patch.adminConfirmed is not None:
        _set("admin_confirmed", patch.adminConfirmed)
    elif patch.status == BookingStatus.CONFIRMED:
        _set("admin_confirmed", True)
    if patch.notes is not None:
        _set("notes", patch.notes)
    if patch.cancellationReason is not None:
        _set("cancellation_reason", patch.cancellationReason)

    db.commit()
    db.refresh(booking)
    return booking, changes


def admin_cancel_booking(db: Session, booking_id: str, reason: str | None = None) -> Booking:
    booking = _require_by_id(db, booking_id)
    if booking.status == BookingStatus.CANCELLED.value:
        raise AppError(messages.ALREADY_CANCELLED)
    booking.status = BookingStatus.CANCELLED.value
    booking.cancelled_at = utcnow()
    booking.cancellation_reason = reason or ADMIN_CANCEL_REASON
    otp_service.discard_otp(db, OtpPurpose.BOOKING_CANCEL, booking.booking_ref)
    db.commit()
    db.refresh(booking)
    return booking


def _check_cancellable_by_customer(booking: Booking, phone: str) -> None:
    if booking.customer_phone != phone:
        raise AppError(messages.PHONE_MISMATCH)
    if booking.status == BookingStatus.CANCELLED.value:
        raise AppError(messages.ALREADY_CANCELLED)


def generate_cancellation_otp(db: Session, booking_ref: str, phone: str) -> tuple[Booking, str]:
    booking = _require_by_ref(db, booking_ref)
    _check_cancellable_by_customer(booking, phone)
    if booking.status == BookingStatus.COMPLETED.value:
        raise AppError(messages.CANNOT_CANCEL_COMPLETED)
    code = otp_service.issue_otp(db, OtpPurpose.BOOKING_CANCEL, booking.booking_ref)
    return booking, code


def cancel_booking_with_otp(db: Session, booking_ref: str, phone: str, otp: str) -> Booking:
    booking = _require_by_ref(db, booking_ref)
    _check_cancellable_by_customer(booking, phone)
    if booking.status == BookingStatus.COMPLETED.value:
        raise AppError(messages.CANNOT_CANCEL_COMPLETED)
    otp_service.check_otp(db, OtpPurpose.BOOKING_CANCEL, booking.booking_ref, otp)

    booking.status = BookingStatus.CANCELLED.value
    booking.cancelled_at = utcnow()
    booking.cancellation_reason = CUSTOMER_CANCEL_REASON
    otp_service.discard_otp(db, OtpPurpose.BOOKING_CANCEL, booking.booking_ref)
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s cancelled by customer", booking.booking_ref)
    return booking
