import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-0123456789-abcdefghijklmnop"
os.environ["ENV"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["GREENAPI_ENABLED"] = "false"

import uuid
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from resort.core.security import create_access_token, hash_password
from resort.db.base import Base
from resort.db.session import SessionLocal, engine
from resort.main import app
from resort.models.admin_user import AdminUser
from resort.models.booking import Booking
from resort.models.chalet import Chalet
from resort.models.enums import AdminRole, BookingStatus, VisitType
from resort.services.whatsapp_service import get_notifier
from resort.utils.dates import today

PHONE = "966512345678"
OTHER_PHONE = "966598765432"
PASSWORD = "secret-password"


class RecordingNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def send_message(self, phone: str, message: str) -> bool:
        self.sent.append((phone, message))
        return True


def future(days: int = 10):
    return today() + timedelta(days=days)


@pytest.fixture(autouse=True)
def _tables():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def client(notifier):
    app.dependency_overrides[get_notifier] = lambda: notifier
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_chalet(db):
    def _make(name_ar="شاليه النخيل", name_en="Palm Chalet", max_guests=4, slug=None, is_active=True):
        c = Chalet(
            id=str(uuid.uuid4()),
            name_ar=name_ar,
            name_en=name_en,
            slug=slug or uuid.uuid4().hex[:8],
            max_guests=max_guests,
            is_active=is_active,
        )
        db.add(c)
        db.commit()
        return c
    return _make


@pytest.fixture
def make_booking(db):
    counter = {"n": 0}

    def _make(day=None, visit_type=VisitType.DAY_VISIT, status=BookingStatus.PENDING, chalet_id=None,
              customer_name="Ali Hassan", phone=PHONE, language="ar"):
        counter["n"] += 1
        b = Booking(
            id=str(uuid.uuid4()),
            booking_ref=f"FR-TEST-{counter['n']:04d}",
            date=day or future(),
            visit_type=visit_type.value,
            customer_name=customer_name,
            customer_phone=phone,
            guests=2,
            language=language,
            status=status.value,
            payment_status="PENDING",
            chalet_id=chalet_id,
        )
        db.add(b)
        db.commit()
        return b
    return _make


@pytest.fixture
def make_admin(db):
    def _make(role=AdminRole.SUPER_ADMIN, email=None):
        u = AdminUser(
            id=str(uuid.uuid4()),
            email=email or f"{uuid.uuid4().hex[:8]}@resort.test",
            name=role.value.title(),
            role=role.value,
            password_hash=hash_password(PASSWORD),
            is_active=True,
        )
        db.add(u)
        db.commit()
        return u
    return _make


@pytest.fixture
def super_admin(make_admin):
    return make_admin(AdminRole.SUPER_ADMIN, email="root@resort.test")


def auth_headers(admin: AdminUser) -> dict:
    return {"Authorization": f"Bearer {create_access_token(admin.id, admin.role)}"}


@pytest.fixture
def admin_headers(super_admin):
    return auth_headers(super_admin)
