from dataclasses import dataclass
from datetime import date

from sqlalchemy import or_
from sqlalchemy.orm import Session

from resort.core import messages
from resort.core.errors import AppError
from resort.models.blackout_date import BlackoutDate
from resort.models.booking import Booking
from resort.models.enums import ACTIVE_STATUSES, VisitType
from resort.utils.dates import format_date, is_past_date, iter_days, parse_date
from resort.utils.visit_types import from_arabic_label

MAX_RANGE_DAYS = 366

AVAILABLE = "available"
BOOKED = "booked"
BLACKOUT = "blackout"


@dataclass
class AvailabilityResult:
    available: bool
    reason: str | None = None


def _blackout_filters(day: date, visit_type: VisitType, chalet_id: str | None) -> list:
    filters = [
        BlackoutDate.date == day,
        or_(BlackoutDate.visit_type.is_(None), BlackoutDate.visit_type == visit_type.value),
    ]
    if chalet_id:
        filters.append(or_(BlackoutDate.chalet_id.is_(None), BlackoutDate.chalet_id == chalet_id))
    return filters


def _booking_filters(day: date, visit_type: VisitType, chalet_id: str | None) -> list:
    filters = [
        Booking.date == day,
        Booking.visit_type == visit_type.value,
        Booking.status.in_(ACTIVE_STATUSES),
    ]
    if chalet_id:
        # A chalet-less booking holds the whole slot
        filters.append(or_(Booking.chalet_id.is_(None), Booking.chalet_id == chalet_id))
    return filters


def slot_block_reason(db: Session, day: date, visit_type: VisitType, chalet_id: str | None = None) -> str | None:
    """Blackout and booking steps only, on already-parsed values. Blackouts win."""
    if db.query(BlackoutDate.id).filter(*_blackout_filters(day, visit_type, chalet_id)).first():
        return "blackout_date"
    if db.query(Booking.id).filter(*_booking_filters(day, visit_type, chalet_id)).first():
        return "already_booked"
    return None


def slot_is_free(db: Session, day: date, visit_type: VisitType, chalet_id: str | None = None) -> bool:
    return slot_block_reason(db, day, visit_type, chalet_id) is None


def check_availability(db: Session, date_str: str, visit_type_label: str, chalet_id: str | None = None) -> AvailabilityResult:
    """Decide whether a date + visit type can be booked. Read-only; nothing is reserved.

    First match wins: invalid_date, past_date, invalid_visit_type,
    blackout_date, already_booked.
    """
    day = parse_date(date_str)
    if day is None:
        return AvailabilityResult(False, "invalid_date")
    if is_past_date(day):
        return AvailabilityResult(False, "past_date")
    visit_type = from_arabic_label(visit_type_label)
    if visit_type is None:
        return AvailabilityResult(False, "invalid_visit_type")

    reason = slot_block_reason(db, day, visit_type, chalet_id)
    if reason:
        return AvailabilityResult(False, reason)
    return AvailabilityResult(True)


def _check_range(start: date, end: date) -> None:
    if start > end or (end - start).days >= MAX_RANGE_DAYS:
        raise AppError(messages.INVALID_RANGE)


def get_day_states(db: Session, start: date, end: date, chalet_id: str | None = None) -> dict[str, dict[VisitType, str]]:
    """Per-day state of each visit type over [start, end].

    Bookings and blackouts are fetched once for the whole range and folded per day.
    """
    _check_range(start, end)

    bq = db.query(Booking.date, Booking.visit_type).filter(
        Booking.date >= start,
        Booking.date <= end,
        Booking.status.in_(ACTIVE_STATUSES),
    )
    xq = db.query(BlackoutDate.date, BlackoutDate.visit_type).filter(
        BlackoutDate.date >= start,
        BlackoutDate.date <= end,
    )
    if chalet_id:
        bq = bq.filter(or_(Booking.chalet_id.is_(None), Booking.chalet_id == chalet_id))
        xq = xq.filter(or_(BlackoutDate.chalet_id.is_(None), BlackoutDate.chalet_id == chalet_id))

    booked: set[tuple[date, str]] = {(d, vt) for d, vt in bq.all()}
    blacked: set[tuple[date, str | None]] = {(d, vt) for d, vt in xq.all()}

    out: dict[str, dict[VisitType, str]] = {}
    for day in iter_days(start, end):
        states = {}
        for vt in VisitType:
            if (day, None) in blacked or (day, vt.value) in blacked:
                states[vt] = BLACKOUT
            elif (day, vt.value) in booked:
                states[vt] = BOOKED
            else:
                states[vt] = AVAILABLE
        out[format_date(day)] = states
    return out


def get_availability_for_range(db: Session, start: date, end: date, chalet_id: str | None = None) -> dict[str, dict[str, bool]]:
    states = get_day_states(db, start, end, chalet_id)
    return {
        key: {
            "dayAvailable": s[VisitType.DAY_VISIT] == AVAILABLE,
            "nightAvailable": s[VisitType.OVERNIGHT_STAY] == AVAILABLE,
        }
        for key, s in states.items()
    }
