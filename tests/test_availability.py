import uuid
from datetime import timedelta

import pytest

from conftest import future
from resort.core.errors import AppError
from resort.models.blackout_date import BlackoutDate
from resort.models.enums import BookingStatus, VisitType
from resort.services.availability_service import (
    check_availability,
    get_availability_for_range,
    get_day_states,
)
from resort.utils.dates import format_date, today
from resort.utils.visit_types import DAY_VISIT_AR, OVERNIGHT_STAY_AR


def blackout(db, day, visit_type=None, chalet_id=None):
    db.add(BlackoutDate(
        id=str(uuid.uuid4()),
        date=day,
        visit_type=visit_type.value if visit_type else None,
        chalet_id=chalet_id,
    ))
    db.commit()


def test_free_slot_is_available(db):
    result = check_availability(db, format_date(future()), DAY_VISIT_AR)
    assert result.available
    assert result.reason is None


def test_today_is_bookable(db):
    assert check_availability(db, format_date(today()), OVERNIGHT_STAY_AR).available


@pytest.mark.parametrize("date_str", ["2024/12/25", "not-a-date", "", "2024-13-01"])
def test_malformed_date(db, date_str):
    result = check_availability(db, date_str, DAY_VISIT_AR)
    assert (result.available, result.reason) == (False, "invalid_date")


def test_past_date_wins_over_everything(db, make_booking):
    yesterday = today() - timedelta(days=1)
    blackout(db, yesterday)
    make_booking(day=yesterday)
    result = check_availability(db, format_date(yesterday), DAY_VISIT_AR)
    assert result.reason == "past_date"


def test_unknown_visit_type_label(db):
    result = check_availability(db, format_date(future()), "DAY_VISIT")
    assert (result.available, result.reason) == (False, "invalid_visit_type")


def test_global_blackout_blocks_both_visit_types(db):
    day = future()
    blackout(db, day)
    for label in (DAY_VISIT_AR, OVERNIGHT_STAY_AR):
        result = check_availability(db, format_date(day), label)
        assert (result.available, result.reason) == (False, "blackout_date")


def test_visit_type_blackout_only_blocks_that_type(db):
    day = future()
    blackout(db, day, VisitType.OVERNIGHT_STAY)
    assert check_availability(db, format_date(day), DAY_VISIT_AR).available
    assert check_availability(db, format_date(day), OVERNIGHT_STAY_AR).reason == "blackout_date"


def test_blackout_is_reported_before_existing_booking(db, make_booking):
    day = future()
    make_booking(day=day)
    blackout(db, day)
    assert check_availability(db, format_date(day), DAY_VISIT_AR).reason == "blackout_date"


def test_active_booking_blocks_slot_until_cancelled(db, make_booking):
    day = future()
    b = make_booking(day=day, visit_type=VisitType.DAY_VISIT)
    assert check_availability(db, format_date(day), DAY_VISIT_AR).reason == "already_booked"
    assert check_availability(db, format_date(day), OVERNIGHT_STAY_AR).available

    b.status = BookingStatus.CANCELLED.value
    db.commit()
    assert check_availability(db, format_date(day), DAY_VISIT_AR).available


def test_confirmed_blocks_completed_does_not(db, make_booking):
    day = future()
    make_booking(day=day, status=BookingStatus.COMPLETED)
    assert check_availability(db, format_date(day), DAY_VISIT_AR).available
    make_booking(day=day, status=BookingStatus.CONFIRMED)
    assert check_availability(db, format_date(day), DAY_VISIT_AR).reason == "already_booked"


def test_chalet_scoped_blackout(db, make_chalet):
    a, b = make_chalet(), make_chalet(name_ar="ب", name_en="B")
    day = future()
    blackout(db, day, chalet_id=a.id)
    assert check_availability(db, format_date(day), DAY_VISIT_AR, a.id).reason == "blackout_date"
    assert check_availability(db, format_date(day), DAY_VISIT_AR, b.id).available
    # Without a chalet any blackout row counts
    assert check_availability(db, format_date(day), DAY_VISIT_AR).reason == "blackout_date"


def test_global_blackout_applies_to_every_chalet(db, make_chalet):
    c = make_chalet()
    day = future()
    blackout(db, day)
    assert check_availability(db, format_date(day), DAY_VISIT_AR, c.id).reason == "blackout_date"


def test_chalet_scoped_bookings(db, make_chalet, make_booking):
    a, b = make_chalet(), make_chalet(name_ar="ب", name_en="B")
    day = future()
    make_booking(day=day, chalet_id=a.id)
    assert check_availability(db, format_date(day), DAY_VISIT_AR, a.id).reason == "already_booked"
    assert check_availability(db, format_date(day), DAY_VISIT_AR, b.id).available


def test_unassigned_booking_holds_every_chalet(db, make_chalet, make_booking):
    c = make_chalet()
    day = future()
    make_booking(day=day, chalet_id=None)
    assert check_availability(db, format_date(day), DAY_VISIT_AR, c.id).reason == "already_booked"


def test_range_map_folds_each_visit_type_independently(db, make_booking):
    start = future(5)
    make_booking(day=start, visit_type=VisitType.DAY_VISIT)
    blackout(db, start + timedelta(days=1), VisitType.OVERNIGHT_STAY)
    blackout(db, start + timedelta(days=2))

    days = get_availability_for_range(db, start, start + timedelta(days=3))
    assert list(days) == [format_date(start + timedelta(days=i)) for i in range(4)]
    assert days[format_date(start)] == {"dayAvailable": False, "nightAvailable": True}
    assert days[format_date(start + timedelta(days=1))] == {"dayAvailable": True, "nightAvailable": False}
    assert days[format_date(start + timedelta(days=2))] == {"dayAvailable": False, "nightAvailable": False}
    assert days[format_date(start + timedelta(days=3))] == {"dayAvailable": True, "nightAvailable": True}


def test_day_states_prefer_blackout_over_booking(db, make_booking):
    day = future()
    make_booking(day=day, visit_type=VisitType.OVERNIGHT_STAY)
    blackout(db, day, VisitType.OVERNIGHT_STAY)
    states = get_day_states(db, day, day)
    assert states[format_date(day)] == {VisitType.DAY_VISIT: "available", VisitType.OVERNIGHT_STAY: "blackout"}


def test_range_ignores_cancelled_bookings(db, make_booking):
    day = future()
    make_booking(day=day, status=BookingStatus.CANCELLED)
    assert get_availability_for_range(db, day, day)[format_date(day)]["dayAvailable"]


@pytest.mark.parametrize("span", [-1, 366])
def test_invalid_ranges_raise(db, span):
    start = future()
    with pytest.raises(AppError):
        get_availability_for_range(db, start, start + timedelta(days=span))
