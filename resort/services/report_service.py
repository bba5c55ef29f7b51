"""Admin reports over a date range, plus their CSV exports.

Amounts are list prices: the chalet pricing matrix when the booking has a
chalet with an active entry, else the resort-wide price for the visit type.
"""
import csv
import io
from collections import Counter
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.orm import Session

from resort.core import messages
from resort.core.errors import AppError
from resort.models.blackout_date import BlackoutDate
from resort.models.booking import Booking
from resort.models.enums import BookingStatus, VisitType
from resort.models.pricing import ChaletPricing, Pricing
from resort.schemas.booking import chalet_brief
from resort.services.availability_service import MAX_RANGE_DAYS
from resort.utils.dates import as_utc, format_date, iter_days, parse_date, resort_tz, today
from resort.utils.visit_types import to_arabic_label

CSV_BOM = "\ufeff"

EARNING_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)
OCCUPYING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)

# Sunday first, as on the admin calendar
WEEKDAYS = (
    ("الأحد", "Sun"), ("الاثنين", "Mon"), ("الثلاثاء", "Tue"), ("الأربعاء", "Wed"),
    ("الخميس", "Thu"), ("الجمعة", "Fri"), ("السبت", "Sat"),
)


def resolve_range(start_value: str | None, end_value: str | None) -> tuple[date, date]:
    """Defaults to the first of the current month through today."""
    now = today()
    start = parse_date(start_value) if start_value else now.replace(day=1)
    end = parse_date(end_value) if end_value else now
    if start is None or end is None:
        raise AppError(messages.INVALID_DATE)
    if start > end or (end - start).days >= MAX_RANGE_DAYS:
        raise AppError(messages.INVALID_RANGE)
    return start, end


class PriceBook:
    """All prices loaded once so a report does not query per booking."""

    def __init__(self, db: Session):
        self.legacy = {p.visit_type: p for p in db.query(Pricing).all()}
        self.matrix = {
            (p.chalet_id, p.visit_type): p
            for p in db.query(ChaletPricing).filter(ChaletPricing.is_active == True).all()
        }

    def _entry(self, b: Booking):
        if b.chalet_id and (b.chalet_id, b.visit_type) in self.matrix:
            return self.matrix[(b.chalet_id, b.visit_type)]
        return self.legacy.get(b.visit_type)

    def total(self, b: Booking) -> int:
        p = self._entry(b)
        return p.total_price if p else 0

    def deposit(self, b: Booking) -> int:
        p = self._entry(b)
        return p.deposit_amount if p else 0


def _bookings_between(db: Session, start: date, end: date, statuses=None):
    q = db.query(Booking).filter(Booking.date >= start, Booking.date <= end)
    if statuses:
        q = q.filter(Booking.status.in_(statuses))
    return q


def bookings_report(db: Session, start: date, end: date, visit_type: VisitType | None = None,
                    status: BookingStatus | None = None) -> dict:
    q = _bookings_between(db, start, end)
    if visit_type:
        q = q.filter(Booking.visit_type == visit_type.value)
    if status:
        q = q.filter(Booking.status == status.value)
    bookings = q.order_by(Booking.date.asc(), Booking.created_at.asc()).all()
    prices = PriceBook(db)

    statuses = Counter(b.status for b in bookings)
    visit_types = Counter(b.visit_type for b in bookings)
    return {
        "bookings": [
            {
                "id": b.id,
                "bookingRef": b.booking_ref,
                "date": format_date(b.date),
                "visitType": b.visit_type,
                "customerName": b.customer_name,
                "customerPhone": b.customer_phone,
                "guests": b.guests,
                "chalet": chalet_brief(b.chalet),
                "status": b.status,
                "paymentStatus": b.payment_status,
                "createdAt": b.created_at.isoformat() if b.created_at else None,
            }
            for b in bookings
        ],
        "summary": {
            "totalBookings": len(bookings),
            "confirmedBookings": statuses[BookingStatus.CONFIRMED.value],
            "cancelledBookings": statuses[BookingStatus.CANCELLED.value],
            "pendingBookings": statuses[BookingStatus.PENDING.value],
            "completedBookings": statuses[BookingStatus.COMPLETED.value],
            "dayVisits": visit_types[VisitType.DAY_VISIT.value],
            "overnightStays": visit_types[VisitType.OVERNIGHT_STAY.value],
            "estimatedRevenue": sum(prices.total(b) for b in bookings if b.status != BookingStatus.CANCELLED.value),
            "confirmedRevenue": sum(prices.total(b) for b in bookings if b.status in EARNING_STATUSES),
        },
        "dateRange": {"startDate": format_date(start), "endDate": format_date(end)},
    }


def revenue_report(db: Session, start: date, end: date) -> dict:
    bookings = _bookings_between(db, start, end, EARNING_STATUSES).order_by(Booking.date.asc()).all()
    prices = PriceBook(db)

    months: dict[str, dict] = {}
    by_type = {vt.value: 0 for vt in VisitType}
    for b in bookings:
        total, deposit = prices.total(b), prices.deposit(b)
        bucket = months.setdefault(b.date.strftime("%Y-%m"), {"total": 0, "deposits": 0, "count": 0})
        bucket["total"] += total
        bucket["deposits"] += deposit
        bucket["count"] += 1
        by_type[b.visit_type] = by_type.get(b.visit_type, 0) + total

    total_revenue = sum(m["total"] for m in months.values())
    total_deposits = sum(m["deposits"] for m in months.values())
    return {
        "chartData": [{"month": key, **months[key]} for key in sorted(months)],
        "summary": {
            "totalRevenue": total_revenue,
            "totalDeposits": total_deposits,
            "outstandingBalance": total_revenue - total_deposits,
            "totalBookings": len(bookings),
            "dayVisitRevenue": by_type[VisitType.DAY_VISIT.value],
            "overnightRevenue": by_type[VisitType.OVERNIGHT_STAY.value],
            "averagePerBooking": round(total_revenue / len(bookings)) if bookings else 0,
        },
        "dateRange": {"startDate": format_date(start), "endDate": format_date(end)},
    }


def occupancy_report(db: Session, start: date, end: date) -> dict:
    bookings = _bookings_between(db, start, end, OCCUPYING_STATUSES).all()
    blackout_days = {
        d for (d,) in db.query(BlackoutDate.date).filter(BlackoutDate.date >= start, BlackoutDate.date <= end).all()
    }

    taken: dict[date, set[str]] = {}
    weekday_counts = [0] * 7
    for b in bookings:
        taken.setdefault(b.date, set()).add(b.visit_type)
        weekday_counts[(b.date.weekday() + 1) % 7] += 1

    total_days = (end - start).days + 1
    available_days = total_days - len(blackout_days)
    return {
        "summary": {
            "totalDays": total_days,
            "availableDays": available_days,
            "bookedDays": len(taken),
            "blackoutDays": len(blackout_days),
            "occupancyRate": round(len(taken) / available_days * 100) if available_days > 0 else 0,
        },
        "dailyOccupancy": [
            {
                "date": format_date(d),
                "dayVisit": VisitType.DAY_VISIT.value in taken.get(d, ()),
                "overnight": VisitType.OVERNIGHT_STAY.value in taken.get(d, ()),
            }
            for d in iter_days(start, end)
        ],
        "byDayOfWeek": [
            {"day": ar, "dayEn": en, "count": weekday_counts[i]} for i, (ar, en) in enumerate(WEEKDAYS)
        ],
        "dateRange": {"startDate": format_date(start), "endDate": format_date(end)},
    }


def customers_report(db: Session, start: date, end: date) -> dict:
    """Customers grouped by phone, over bookings *created* in the range (resort-local days)."""
    tz = resort_tz()
    since = datetime.combine(start, time.min, tzinfo=tz).astimezone(timezone.utc)
    until = datetime.combine(end + timedelta(days=1), time.min, tzinfo=tz).astimezone(timezone.utc)
    bookings = (
        db.query(Booking)
        .filter(Booking.created_at >= since, Booking.created_at < until)
        .order_by(Booking.created_at.desc())
        .all()
    )

    customers: dict[str, dict] = {}
    for b in bookings:
        created = as_utc(b.created_at)
        c = customers.get(b.customer_phone)
        if c is None:
            # Newest first, so the first row seen carries the current name
            customers[b.customer_phone] = {
                "name": b.customer_name,
                "phone": b.customer_phone,
                "bookingCount": 1,
                "firstBooking": created,
                "lastBooking": created,
            }
            continue
        c["bookingCount"] += 1
        c["firstBooking"] = min(c["firstBooking"], created)
        c["lastBooking"] = max(c["lastBooking"], created)

    ranked = sorted(customers.values(), key=lambda c: c["bookingCount"], reverse=True)
    for c in ranked:
        c["firstBooking"] = c["firstBooking"].isoformat()
        c["lastBooking"] = c["lastBooking"].isoformat()

    total = len(ranked)
    repeat = sum(1 for c in ranked if c["bookingCount"] > 1)
    return {
        "customers": ranked,
        "topCustomers": ranked[:10],
        "summary": {
            "totalCustomers": total,
            "repeatCustomers": repeat,
            "newCustomers": total - repeat,
            "repeatRate": round(repeat / total * 100) if total else 0,
            "totalBookings": len(bookings),
            "averageBookingsPerCustomer": round(len(bookings) / total, 1) if total else 0,
        },
        "dateRange": {"startDate": format_date(start), "endDate": format_date(end)},
    }


def _to_csv(header: list[str], rows: list[list]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL)
    writer.writerow(header)
    writer.writerows(rows)
    # Excel needs the BOM to read the Arabic columns as UTF-8
    return CSV_BOM + buf.getvalue()


def bookings_csv(db: Session, start: date, end: date) -> str:
    bookings = _bookings_between(db, start, end).order_by(Booking.date.asc(), Booking.created_at.asc()).all()
    header = ["رقم الحجز", "التاريخ", "نوع الزيارة", "اسم العميل", "رقم الجوال", "عدد الضيوف",
              "الشاليه", "الحالة", "حالة الدفع", "تاريخ الإنشاء"]
    rows = [
        [
            b.booking_ref,
            format_date(b.date),
            to_arabic_label(b.visit_type),
            b.customer_name,
            b.customer_phone,
            b.guests,
            b.chalet.name_ar if b.chalet else "-",
            b.status,
            b.payment_status,
            format_date(as_utc(b.created_at).astimezone(resort_tz()).date()) if b.created_at else "",
        ]
        for b in bookings
    ]
    return _to_csv(header, rows)


def revenue_csv(db: Session, start: date, end: date) -> str:
    bookings = _bookings_between(db, start, end, EARNING_STATUSES).order_by(Booking.date.asc()).all()
    prices = PriceBook(db)
    header = ["رقم الحجز", "التاريخ", "نوع الزيارة", "اسم العميل", "المبلغ", "حالة الدفع"]
    rows = [
        [b.booking_ref, format_date(b.date), to_arabic_label(b.visit_type), b.customer_name, prices.total(b), b.payment_status]
        for b in bookings
    ]
    rows.append(["", "", "", "الإجمالي", sum(prices.total(b) for b in bookings), ""])
    return _to_csv(header, rows)
