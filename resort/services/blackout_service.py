import uuid
from datetime import date

from sqlalchemy.orm import Session

from resort.core import messages
from resort.core.errors import AppError, NotFoundError
from resort.models.blackout_date import BlackoutDate
from resort.models.chalet import Chalet
from resort.models.enums import VisitType
from resort.services.availability_service import MAX_RANGE_DAYS
from resort.utils.dates import format_date, iter_days


def _scope_filters(day: date, visit_type: VisitType | None, chalet_id: str | None) -> list:
    return [
        BlackoutDate.date == day,
        BlackoutDate.visit_type.is_(None) if visit_type is None else BlackoutDate.visit_type == visit_type.value,
        BlackoutDate.chalet_id.is_(None) if chalet_id is None else BlackoutDate.chalet_id == chalet_id,
    ]


def _require_chalet(db: Session, chalet_id: str | None) -> None:
    if chalet_id and db.get(Chalet, chalet_id) is None:
        raise NotFoundError(messages.CHALET_NOT_FOUND)


def list_blackouts(db: Session, date_from: date | None = None, date_to: date | None = None,
                   chalet_id: str | None = None) -> list[BlackoutDate]:
    q = db.query(BlackoutDate)
    if date_from:
        q = q.filter(BlackoutDate.date >= date_from)
    if date_to:
        q = q.filter(BlackoutDate.date <= date_to)
    if chalet_id:
        q = q.filter(BlackoutDate.chalet_id == chalet_id)
    return q.order_by(BlackoutDate.date.asc()).all()


def create_blackout(db: Session, day: date, visit_type: VisitType | None = None, chalet_id: str | None = None,
                    reason: str | None = None, created_by: str | None = None) -> BlackoutDate:
    """Block one date. The same (date, visit type, chalet) scope can only be blocked once."""
    _require_chalet(db, chalet_id)
    if db.query(BlackoutDate.id).filter(*_scope_filters(day, visit_type, chalet_id)).first():
        raise AppError(messages.BLACKOUT_EXISTS)
    b = BlackoutDate(
        id=str(uuid.uuid4()),
        date=day,
        visit_type=visit_type.value if visit_type else None,
        chalet_id=chalet_id,
        reason=reason,
        created_by=created_by,
    )
    db.add(b)
    db.commit()
    db.refresh(b)
    return b


def block_range(db: Session, start: date, end: date | None = None, visit_type: VisitType | None = None,
                chalet_id: str | None = None, reason: str | None = None, created_by: str | None = None) -> int:
    """Block every day in [start, end]. Days already blocked in the same scope are skipped. Returns the count created."""
    end = end or start
    if start > end or (end - start).days >= MAX_RANGE_DAYS:
        raise AppError(messages.INVALID_RANGE)
    _require_chalet(db, chalet_id)
    created = 0
    for day in iter_days(start, end):
        if db.query(BlackoutDate.id).filter(*_scope_filters(day, visit_type, chalet_id)).first():
            continue
        db.add(BlackoutDate(
            id=str(uuid.uuid4()),
            date=day,
            visit_type=visit_type.value if visit_type else None,
            chalet_id=chalet_id,
            reason=reason,
            created_by=created_by,
        ))
        created += 1
    db.commit()
    return created


def unblock(db: Session, day: date, visit_type: VisitType | None = None, chalet_id: str | None = None) -> int:
    n = db.query(BlackoutDate).filter(*_scope_filters(day, visit_type, chalet_id)).delete(synchronize_session=False)
    db.commit()
    return int(n or 0)


def delete_blackout(db: Session, blackout_id: str) -> dict:
    """Delete by id and return what was removed."""
    b = db.get(BlackoutDate, blackout_id)
    if not b:
        raise NotFoundError(messages.BLACKOUT_NOT_FOUND)
    removed = {"date": format_date(b.date), "visitType": b.visit_type, "chaletId": b.chalet_id}
    db.delete(b)
    db.commit()
    return removed
