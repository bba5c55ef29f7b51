import logging
import uuid

from sqlalchemy.orm import Session
from sqlalchemy import text
from sqlalchemy.exc import OperationalError, ProgrammingError

from resort.db.session import SessionLocal
from resort.core.config import settings
from resort.core.security import hash_password
from resort.models.admin_user import AdminUser
from resort.models.chalet import Chalet
from resort.models.enums import AdminRole, VisitType
from resort.models.pricing import ChaletPricing, Pricing
from resort.services.settings_service import ensure_defaults

logger = logging.getLogger(__name__)

# slug, Arabic name, English name, max guests, sort order
CHALETS = [
    ("palm-view", "شاليه إطلالة النخيل", "Palm View Chalet", 4, 1),
    ("family", "الشاليه العائلي", "Family Chalet", 8, 2),
    ("private", "الشاليه الخاص", "Private Chalet", 6, 3),
]

# total price, deposit (SAR)
PRICES = {
    VisitType.DAY_VISIT: (1400, 700),
    VisitType.OVERNIGHT_STAY: (1400, 700),
}


def ensure_admin(db: Session, email: str, password: str, name: str, role: AdminRole):
    if db.query(AdminUser).filter(AdminUser.email == email).first():
        return
    db.add(AdminUser(
        id=str(uuid.uuid4()),
        email=email,
        name=name,
        role=role.value,
        password_hash=hash_password(password),
        is_active=True,
    ))
    db.commit()


def ensure_chalets(db: Session) -> list[Chalet]:
    out = []
    for slug, name_ar, name_en, max_guests, order in CHALETS:
        c = db.query(Chalet).filter(Chalet.slug == slug).first()
        if not c:
            c = Chalet(
                id=str(uuid.uuid4()),
                slug=slug,
                name_ar=name_ar,
                name_en=name_en,
                max_guests=max_guests,
                sort_order=order,
                is_active=True,
            )
            db.add(c)
        out.append(c)
    db.commit()
    return out


def ensure_pricing(db: Session, chalets: list[Chalet]):
    for vt, (total, deposit) in PRICES.items():
        if not db.query(Pricing).filter(Pricing.visit_type == vt.value).first():
            db.add(Pricing(id=str(uuid.uuid4()), visit_type=vt.value, total_price=total, deposit_amount=deposit))
        for c in chalets:
            exists = db.query(ChaletPricing).filter(
                ChaletPricing.chalet_id == c.id,
                ChaletPricing.visit_type == vt.value,
            ).first()
            if not exists:
                db.add(ChaletPricing(
                    id=str(uuid.uuid4()),
                    chalet_id=c.id,
                    visit_type=vt.value,
                    total_price=total,
                    deposit_amount=deposit,
                ))
    db.commit()


def run(db=None):
    own = db is None
    if own:
        db = SessionLocal()
    try:
        # If migrations haven't been applied yet, seeding must not crash the API.
        try:
            db.execute(text("SELECT 1 FROM admin_users LIMIT 1"))
        except (ProgrammingError, OperationalError):
            db.rollback()
            logger.warning("admin_users table not found yet. Skipping seeding (run alembic upgrade head).")
            return

        ensure_admin(db, settings.ADMIN_EMAIL.lower(), settings.ADMIN_INITIAL_PASSWORD, "Super Admin", AdminRole.SUPER_ADMIN)
        chalets = ensure_chalets(db)
        ensure_pricing(db, chalets)
        created = ensure_defaults(db)
        logger.info("Seed complete: %s chalets, %s new settings", len(chalets), created)
    finally:
        if own:
            db.close()


if __name__ == "__main__":
    from resort.core.logging import configure_logging
    configure_logging()
    run()
