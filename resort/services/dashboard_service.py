from datetime import timedelta

from sqlalchemy.orm import Session

from resort.models.booking import Booking
from resort.models.enums import ACTIVE_STATUSES, BookingStatus, PaymentStatus
from resort.models.pricing import Pricing
from resort.schemas.booking import booking_out
from resort.services.notification_service import DEFAULT_DEPOSIT
from resort.utils.dates import as_utc, format_date, resort_tz, today, utcnow


def dashboard_stats(db: Session) -> dict:
    """Headline numbers for the admin home page.

    Revenue is an estimate: paid bookings created in the last 30 days times
    the first configured deposit amount.
    """
    now = utcnow()
    day = today()
    week_ago = now - timedelta(days=7)
    month_ago = now - timedelta(days=30)

    total = db.query(Booking).count()
    pending = db.query(Booking).filter(Booking.status == BookingStatus.PENDING.value).count()
    confirmed = db.query(Booking).filter(Booking.status == BookingStatus.CONFIRMED.value).count()
    week = db.query(Booking).filter(Booking.created_at >= week_ago).count()

    paid = db.query(Booking).filter(
        Booking.payment_status.in_([PaymentStatus.DEPOSIT_PAID.value, PaymentStatus.FULLY_PAID.value]),
        Booking.created_at >= month_ago,
    ).count()
    first_price = db.query(Pricing).order_by(Pricing.visit_type.asc()).first()
    deposit = first_price.deposit_amount if first_price else DEFAULT_DEPOSIT

    todays = (
        db.query(Booking)
        .filter(Booking.date == day, Booking.status.in_(ACTIVE_STATUSES))
        .order_by(Booking.visit_type.asc())
        .all()
    )
    recent = db.query(Booking).order_by(Booking.created_at.desc()).limit(5).all()

    # Created-per-day for the last 7 resort-local days
    trend_start = day - timedelta(days=6)
    counts = {trend_start + timedelta(days=i): 0 for i in range(7)}
    for (created_at,) in db.query(Booking.created_at).filter(Booking.created_at >= now - timedelta(days=8)).all():
        local_day = as_utc(created_at).astimezone(resort_tz()).date()
        if local_day in counts:
            counts[local_day] += 1

    return {
        "overview": {
            "totalBookings": total,
            "pendingBookings": pending,
            "confirmedBookings": confirmed,
            "weekBookings": week,
            "estimatedRevenue": paid * deposit,
        },
        "todayBookings": [booking_out(b) for b in todays],
        "recentBookings": [booking_out(b) for b in recent],
        "weeklyTrend": [{"date": format_date(d), "count": c} for d, c in counts.items()],
    }
