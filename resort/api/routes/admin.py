from calendar import monthrange
from datetime import MAXYEAR, MINYEAR

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from resort.api.deps import admin_or_above, viewer_or_above
from resort.core import messages, responses
from resort.core.errors import AppError, NotFoundError
from resort.db.session import get_db
from resort.models.admin_user import AdminUser
from resort.models.booking import Booking
from resort.models.enums import ACTIVE_STATUSES, BookingStatus, VisitType
from resort.schemas.admin import BlackoutCreate, BlockDatesRequest, UnblockDateRequest, blackout_out
from resort.schemas.booking import AdminCancelRequest, BookingUpdate, booking_out
from resort.services import blackout_service, booking_service
from resort.services.audit_service import audit_out, list_audit_logs, log_audit
from resort.services.availability_service import AVAILABLE, BLACKOUT, BOOKED, get_day_states
from resort.services.dashboard_service import dashboard_stats
from resort.services.notification_service import booking_cancelled_message, booking_confirmed_message, dispatch
from resort.services.whatsapp_service import WhatsAppService, get_notifier
from resort.utils.dates import format_date, parse_date, today
from resort.utils.visit_types import coerce_visit_type

router = APIRouter(prefix="/admin", tags=["admin"])

MAX_PAGE_SIZE = 100


def _optional_date(value: str | None):
    if not value:
        return None
    d = parse_date(value)
    if d is None:
        raise AppError(messages.INVALID_DATE)
    return d


def _optional_visit_type(value: str | None) -> VisitType | None:
    if not value:
        return None
    vt = coerce_visit_type(value)
    if vt is None:
        raise AppError(messages.INVALID_VISIT_TYPE)
    return vt


@router.get("/dashboard/stats")
def get_dashboard_stats(db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    return responses.success(messages.STATS_FETCHED, dashboard_stats(db))


# Calendar

@router.get("/calendar")
def get_calendar(year: int | None = None, month: int | None = None, chaletId: str | None = None,
                 db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    now = today()
    year = year or now.year
    month = month or now.month
    if not 1 <= month <= 12 or not MINYEAR <= year <= MAXYEAR:
        raise AppError(messages.INVALID_RANGE)
    start = now.replace(year=year, month=month, day=1)
    end = start.replace(day=monthrange(year, month)[1])

    states = get_day_states(db, start, end, chaletId or None)

    q = db.query(Booking).filter(Booking.date >= start, Booking.date <= end, Booking.status.in_(ACTIVE_STATUSES))
    if chaletId:
        q = q.filter(or_(Booking.chalet_id.is_(None), Booking.chalet_id == chaletId))
    by_day: dict[str, list[dict]] = {}
    bookings = q.order_by(Booking.date.asc()).all()
    for b in bookings:
        by_day.setdefault(format_date(b.date), []).append({
            "id": b.id,
            "bookingRef": b.booking_ref,
            "customerName": b.customer_name,
            "visitType": b.visit_type,
            "status": b.status,
        })

    dates = [
        {
            "date": key,
            "dayVisit": s[VisitType.DAY_VISIT],
            "overnight": s[VisitType.OVERNIGHT_STAY],
            "bookings": by_day.get(key, []),
        }
        for key, s in states.items()
    ]
    summary = {
        "available": sum(1 for d in dates if AVAILABLE in (d["dayVisit"], d["overnight"])),
        "booked": sum(1 for d in dates if BOOKED in (d["dayVisit"], d["overnight"])),
        "blackout": sum(1 for d in dates if d["dayVisit"] == BLACKOUT and d["overnight"] == BLACKOUT),
        "totalBookings": len(bookings),
    }
    return responses.success(messages.CALENDAR_FETCHED, {"year": year, "month": month, "dates": dates, "summary": summary})


@router.post("/calendar/block")
def block_dates(body: BlockDatesRequest, request: Request, db: Session = Depends(get_db),
                me: AdminUser = Depends(admin_or_above)):
    start = _optional_date(body.startDate)
    end = _optional_date(body.endDate) or start
    blocked = blackout_service.block_range(db, start, end, body.visitType, body.chaletId or None, body.reason, me.id)
    log_audit(db, me, "BLOCK", "BlackoutDate", None, {
        "startDate": body.startDate,
        "endDate": body.endDate or body.startDate,
        "visitType": body.visitType.value if body.visitType else None,
        "chaletId": body.chaletId,
        "blocked": blocked,
    }, request)
    return responses.success(messages.DATES_BLOCKED, {"blocked": blocked})


@router.post("/calendar/unblock")
def unblock_date(body: UnblockDateRequest, request: Request, db: Session = Depends(get_db),
                 me: AdminUser = Depends(admin_or_above)):
    removed = blackout_service.unblock(db, _optional_date(body.date), body.visitType, body.chaletId or None)
    log_audit(db, me, "UNBLOCK", "BlackoutDate", None, {
        "date": body.date,
        "visitType": body.visitType.value if body.visitType else None,
        "chaletId": body.chaletId,
        "removed": removed,
    }, request)
    return responses.success(messages.DATE_UNBLOCKED, {"removed": removed})


# Bookings

@router.get("/bookings")
def list_bookings(page: int = 1, limit: int = 20, status: BookingStatus | None = None,
                  visitType: str | None = None, dateFrom: str | None = None, dateTo: str | None = None,
                  search: str | None = None,
                  db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    items, pagination = booking_service.list_bookings(
        db,
        page=page,
        limit=min(limit, MAX_PAGE_SIZE),
        status=status,
        visit_type=_optional_visit_type(visitType),
        date_from=_optional_date(dateFrom),
        date_to=_optional_date(dateTo),
        search=(search or "").strip() or None,
    )
    return responses.success(messages.BOOKINGS_FETCHED, {
        "bookings": [booking_out(b) for b in items],
        "pagination": pagination,
    })


@router.get("/bookings/{booking_id}")
def get_booking(booking_id: str, db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    b = booking_service.get_booking_by_id(db, booking_id)
    if not b:
        raise NotFoundError(messages.BOOKING_NOT_FOUND)
    return responses.success(messages.BOOKING_FETCHED, booking_out(b))


@router.patch("/bookings/{booking_id}")
def update_booking(booking_id: str, body: BookingUpdate, request: Request, background: BackgroundTasks,
                   db: Session = Depends(get_db), me: AdminUser = Depends(admin_or_above),
                   notifier: WhatsAppService = Depends(get_notifier)):
    b, changes = booking_service.update_booking_status(db, booking_id, body)
    if "status" in changes:
        if b.status == BookingStatus.CONFIRMED.value:
            dispatch(background, notifier, b.customer_phone, booking_confirmed_message(db, b))
        elif b.status == BookingStatus.CANCELLED.value:
            dispatch(background, notifier, b.customer_phone, booking_cancelled_message(db, b, b.cancellation_reason))
    if changes:
        log_audit(db, me, "UPDATE", "Booking", b.id, changes, request)
    return responses.success(messages.BOOKING_UPDATED, booking_out(b))


@router.delete("/bookings/{booking_id}")
def cancel_booking(booking_id: str, request: Request, background: BackgroundTasks,
                   body: AdminCancelRequest | None = None,
                   db: Session = Depends(get_db), me: AdminUser = Depends(admin_or_above),
                   notifier: WhatsAppService = Depends(get_notifier)):
    reason = body.reason if body else None
    b = booking_service.admin_cancel_booking(db, booking_id, reason)
    dispatch(background, notifier, b.customer_phone, booking_cancelled_message(db, b, b.cancellation_reason))
    log_audit(db, me, "CANCEL", "Booking", b.id, {"reason": b.cancellation_reason}, request)
    return responses.success(messages.BOOKING_CANCELLED, booking_out(b))


# Blackout dates

@router.get("/blackout-dates")
def list_blackout_dates(dateFrom: str | None = None, dateTo: str | None = None, chaletId: str | None = None,
                        db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    items = blackout_service.list_blackouts(db, _optional_date(dateFrom), _optional_date(dateTo), chaletId or None)
    return responses.success(messages.BLACKOUTS_FETCHED, [blackout_out(b) for b in items])


@router.post("/blackout-dates", status_code=201)
def create_blackout_date(body: BlackoutCreate, request: Request, db: Session = Depends(get_db),
                         me: AdminUser = Depends(admin_or_above)):
    b = blackout_service.create_blackout(
        db, _optional_date(body.date), body.visitType, body.chaletId or None, body.reason, me.id,
    )
    log_audit(db, me, "CREATE", "BlackoutDate", b.id, {"date": body.date, "visitType": b.visit_type, "chaletId": b.chalet_id}, request)
    return responses.success(messages.BLACKOUT_CREATED, blackout_out(b), status_code=201)


@router.delete("/blackout-dates/{blackout_id}")
def delete_blackout_date(blackout_id: str, request: Request, db: Session = Depends(get_db),
                         me: AdminUser = Depends(admin_or_above)):
    removed = blackout_service.delete_blackout(db, blackout_id)
    log_audit(db, me, "DELETE", "BlackoutDate", blackout_id, removed, request)
    return responses.success(messages.BLACKOUT_DELETED)


# Audit log

@router.get("/audit-logs")
def get_audit_logs(page: int = 1, limit: int = 50, adminId: str | None = None, entity: str | None = None,
                   entityId: str | None = None,
                   db: Session = Depends(get_db), me: AdminUser = Depends(admin_or_above)):
    logs, pagination = list_audit_logs(db, adminId, entity, entityId, max(page, 1), max(1, min(limit, MAX_PAGE_SIZE)))
    return responses.success(messages.AUDIT_LOGS_FETCHED, {"logs": [audit_out(entry) for entry in logs], "pagination": pagination})
