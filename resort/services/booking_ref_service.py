from sqlalchemy import select
from sqlalchemy.orm import Session

from resort.core.config import settings
from resort.models.booking_counter import BookingCounter
from resort.utils.dates import today


def format_booking_ref(year: int, seq: int) -> str:
    return f"{settings.BOOKING_REF_PREFIX}-{year}-{seq:04d}"


def _upsert_increment(db: Session, year: int, dialect: str) -> int:
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        from sqlalchemy.dialects.sqlite import insert
    stmt = insert(BookingCounter).values(year=year, last_seq=1)
    stmt = stmt.on_conflict_do_update(
        index_elements=[BookingCounter.year],
        set_={"last_seq": BookingCounter.last_seq + 1},
    ).returning(BookingCounter.last_seq)
    return int(db.execute(stmt).scalar_one())


def _locked_increment(db: Session, year: int) -> int:
    counter = db.execute(
        select(BookingCounter).where(BookingCounter.year == year).with_for_update()
    ).scalar_one_or_none()
    if counter is None:
        counter = BookingCounter(year=year, last_seq=0)
        db.add(counter)
    counter.last_seq += 1
    db.flush()
    return counter.last_seq


def generate_booking_ref(db: Session, year: int | None = None) -> str:
    """Allocate the next FR-<year>-<seq> reference.

    The counter row is incremented atomically in the caller's transaction. On
    PostgreSQL the upsert keeps that row locked until commit, so concurrent
    creations serialize from here on; a rollback gives the number back.
    """
    year = year or today().year
    dialect = db.get_bind().dialect.name
    if dialect in ("postgresql", "sqlite"):
        seq = _upsert_increment(db, year, dialect)
    else:
        seq = _locked_increment(db, year)
    return format_booking_ref(year, seq)
