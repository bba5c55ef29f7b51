from datetime import timedelta

from jose import jwt

from conftest import PASSWORD, PHONE, auth_headers, future
from resort.core import messages
from resort.core.config import settings
from resort.core.security import create_access_token
from resort.models.admin_user import AdminUser
from resort.models.audit_log import AuditLog
from resort.models.blackout_date import BlackoutDate
from resort.models.booking import Booking
from resort.models.chalet import Chalet
from resort.models.enums import AdminRole, BookingStatus, PaymentStatus, VisitType
from resort.services.settings_service import ensure_defaults
from resort.utils.dates import format_date, today


def test_login_and_profile(client, db, super_admin):
    r = client.post("/api/admin/auth/login", json={"email": " ROOT@resort.test ", "password": PASSWORD})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["admin"]["email"] == "root@resort.test"
    assert data["expiresInMinutes"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES

    r = client.get("/api/admin/auth/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert r.status_code == 200
    assert r.json()["data"]["role"] == "SUPER_ADMIN"
    assert r.json()["data"]["lastLoginAt"]
    assert db.query(AuditLog).filter(AuditLog.action == "LOGIN").count() == 1


def test_login_failures_look_the_same(client, super_admin):
    for body in ({"email": "root@resort.test", "password": "wrong"}, {"email": "nobody@resort.test", "password": PASSWORD}):
        r = client.post("/api/admin/auth/login", json=body)
        assert r.status_code == 401
        assert r.json() == {"ok": False, "message": messages.INVALID_CREDENTIALS}


def test_inactive_admin_cannot_log_in(client, db, super_admin):
    super_admin.is_active = False
    db.commit()
    r = client.post("/api/admin/auth/login", json={"email": "root@resort.test", "password": PASSWORD})
    assert r.status_code == 401


def test_session_errors(client, super_admin):
    assert client.get("/api/admin/auth/me").json()["message"] == messages.UNAUTHORIZED

    r = client.get("/api/admin/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
    assert r.json()["message"] == messages.INVALID_SESSION

    expired = create_access_token(super_admin.id, expires_minutes=-1)
    r = client.get("/api/admin/auth/me", headers={"Authorization": f"Bearer {expired}"})
    assert r.status_code == 401
    assert r.json()["message"] == messages.SESSION_EXPIRED

    other = jwt.encode({"sub": super_admin.id, "type": "refresh"}, settings.SECRET_KEY, algorithm="HS256")
    r = client.get("/api/admin/auth/me", headers={"Authorization": f"Bearer {other}"})
    assert r.json()["message"] == messages.INVALID_SESSION


def test_roles(client, make_admin, make_booking):
    viewer = auth_headers(make_admin(AdminRole.VIEWER))
    admin = auth_headers(make_admin(AdminRole.ADMIN))
    b = make_booking()

    assert client.get("/api/admin/bookings", headers=viewer).status_code == 200
    r = client.patch(f"/api/admin/bookings/{b.id}", json={"status": "CONFIRMED"}, headers=viewer)
    assert r.status_code == 403
    assert r.json()["message"] == messages.FORBIDDEN

    assert client.get("/api/admin/users", headers=admin).status_code == 403
    assert client.patch(f"/api/admin/bookings/{b.id}", json={"status": "CONFIRMED"}, headers=admin).status_code == 200


def test_list_and_search_bookings(client, admin_headers, make_booking):
    make_booking(customer_name="Sara Ahmed")
    make_booking(customer_name="Omar", visit_type=VisitType.OVERNIGHT_STAY, status=BookingStatus.CONFIRMED)

    data = client.get("/api/admin/bookings", headers=admin_headers).json()["data"]
    assert data["pagination"]["total"] == 2
    assert {b["customerName"] for b in data["bookings"]} == {"Sara Ahmed", "Omar"}

    data = client.get("/api/admin/bookings", params={"search": "sara"}, headers=admin_headers).json()["data"]
    assert [b["customerName"] for b in data["bookings"]] == ["Sara Ahmed"]

    data = client.get("/api/admin/bookings", params={"visitType": "OVERNIGHT_STAY", "status": "CONFIRMED"},
                      headers=admin_headers).json()["data"]
    assert [b["customerName"] for b in data["bookings"]] == ["Omar"]

    data = client.get("/api/admin/bookings", params={"limit": 500}, headers=admin_headers).json()["data"]
    assert data["pagination"]["limit"] == 100

    r = client.get("/api/admin/bookings", params={"dateFrom": "01/01/2025"}, headers=admin_headers)
    assert r.status_code == 400


def test_get_booking(client, admin_headers, make_booking, make_chalet):
    c = make_chalet(name_en="Family Chalet")
    b = make_booking(chalet_id=c.id)
    data = client.get(f"/api/admin/bookings/{b.id}", headers=admin_headers).json()["data"]
    assert data["bookingRef"] == b.booking_ref
    assert data["chalet"]["nameEn"] == "Family Chalet"
    assert client.get("/api/admin/bookings/missing", headers=admin_headers).status_code == 404


def test_confirm_booking_notifies_with_deposit(client, db, admin_headers, notifier, make_booking, make_chalet):
    ensure_defaults(db)
    c = make_chalet()
    client.put("/api/admin/pricing/matrix", headers=admin_headers, json={"entries": [
        {"chaletId": c.id, "visitType": "DAY_VISIT", "totalPrice": 1200, "depositAmount": 550},
    ]})
    b = make_booking(chalet_id=c.id)

    r = client.patch(f"/api/admin/bookings/{b.id}", json={"status": "CONFIRMED"}, headers=admin_headers)
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "CONFIRMED"
    assert data["adminConfirmed"] is True

    assert len(notifier.sent) == 1
    phone, message = notifier.sent[0]
    assert phone == PHONE
    assert b.booking_ref in message
    assert "550" in message

    entry = db.query(AuditLog).filter(AuditLog.entity == "Booking").one()
    assert entry.action == "UPDATE"
    assert entry.entity_id == b.id


def test_payment_only_update_sends_nothing(client, admin_headers, notifier, make_booking):
    b = make_booking(status=BookingStatus.CONFIRMED)
    r = client.patch(f"/api/admin/bookings/{b.id}", json={"paymentStatus": "DEPOSIT_PAID"}, headers=admin_headers)
    assert r.json()["data"]["paymentStatus"] == PaymentStatus.DEPOSIT_PAID.value
    assert notifier.sent == []


def test_illegal_transition_is_409(client, admin_headers, make_booking):
    b = make_booking(status=BookingStatus.COMPLETED)
    r = client.patch(f"/api/admin/bookings/{b.id}", json={"status": "PENDING"}, headers=admin_headers)
    assert r.status_code == 409
    assert r.json()["ok"] is False


def test_admin_cancel(client, db, admin_headers, notifier, make_booking):
    ensure_defaults(db)
    b = make_booking()
    r = client.request("DELETE", f"/api/admin/bookings/{b.id}", json={"reason": "Maintenance"}, headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "CANCELLED"
    assert r.json()["data"]["cancellationReason"] == "Maintenance"
    assert "Maintenance" in notifier.sent[0][1]

    r = client.delete(f"/api/admin/bookings/{b.id}", headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == messages.ALREADY_CANCELLED


def test_admin_cancel_without_body(client, admin_headers, make_booking):
    b = make_booking()
    r = client.delete(f"/api/admin/bookings/{b.id}", headers=admin_headers)
    assert r.json()["data"]["cancellationReason"] == "Cancelled by admin"


def test_blackout_crud(client, db, admin_headers, make_chalet):
    day = format_date(future())
    r = client.post("/api/admin/blackout-dates", json={"date": day, "reason": "Eid"}, headers=admin_headers)
    assert r.status_code == 201
    created = r.json()["data"]
    assert created["visitType"] is None
    assert created["createdBy"]

    r = client.post("/api/admin/blackout-dates", json={"date": day}, headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == messages.BLACKOUT_EXISTS

    # A narrower scope on the same day is a different row
    c = make_chalet()
    r = client.post("/api/admin/blackout-dates", json={"date": day, "visitType": "OVERNIGHT_STAY", "chaletId": c.id},
                    headers=admin_headers)
    assert r.status_code == 201
    assert r.json()["data"]["chalet"]["id"] == c.id

    r = client.post("/api/admin/blackout-dates", json={"date": day, "chaletId": "missing"}, headers=admin_headers)
    assert r.status_code == 404

    items = client.get("/api/admin/blackout-dates", headers=admin_headers).json()["data"]
    assert len(items) == 2
    items = client.get("/api/admin/blackout-dates", params={"chaletId": c.id}, headers=admin_headers).json()["data"]
    assert len(items) == 1

    r = client.delete(f"/api/admin/blackout-dates/{created['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert client.delete(f"/api/admin/blackout-dates/{created['id']}", headers=admin_headers).status_code == 404
    assert db.query(BlackoutDate).count() == 1


def test_block_and_unblock_range(client, db, admin_headers):
    start = future(20)
    body = {"startDate": format_date(start), "endDate": format_date(start + timedelta(days=2)), "visitType": "DAY_VISIT"}
    r = client.post("/api/admin/calendar/block", json=body, headers=admin_headers)
    assert r.json()["data"] == {"blocked": 3}
    r = client.post("/api/admin/calendar/block", json=body, headers=admin_headers)
    assert r.json()["data"] == {"blocked": 0}

    # Unblocking needs the exact scope
    r = client.post("/api/admin/calendar/unblock", json={"date": format_date(start)}, headers=admin_headers)
    assert r.json()["data"] == {"removed": 0}
    r = client.post("/api/admin/calendar/unblock", json={"date": format_date(start), "visitType": "DAY_VISIT"},
                    headers=admin_headers)
    assert r.json()["data"] == {"removed": 1}
    assert db.query(BlackoutDate).count() == 2

    bad = {"startDate": format_date(start), "endDate": format_date(start - timedelta(days=1))}
    assert client.post("/api/admin/calendar/block", json=bad, headers=admin_headers).status_code == 400


def test_calendar_month(client, admin_headers, make_booking):
    day = future(10)
    make_booking(day=day, visit_type=VisitType.DAY_VISIT)
    client.post("/api/admin/blackout-dates", json={"date": format_date(day), "visitType": "OVERNIGHT_STAY"},
                headers=admin_headers)

    r = client.get("/api/admin/calendar", params={"year": day.year, "month": day.month}, headers=admin_headers)
    data = r.json()["data"]
    assert (data["year"], data["month"]) == (day.year, day.month)
    entry = next(d for d in data["dates"] if d["date"] == format_date(day))
    assert entry["dayVisit"] == "booked"
    assert entry["overnight"] == "blackout"
    assert len(entry["bookings"]) == 1
    assert data["summary"]["totalBookings"] == 1
    assert data["summary"]["booked"] == 1

    assert client.get("/api/admin/calendar", params={"month": 13}, headers=admin_headers).status_code == 400
    for year in (10000, -1):
        r = client.get("/api/admin/calendar", params={"year": year, "month": 1}, headers=admin_headers)
        assert r.status_code == 400
        assert r.json()["message"] == messages.INVALID_RANGE


def test_chalet_crud(client, db, admin_headers, make_booking):
    r = client.post("/api/admin/chalets", json={"nameAr": "شاليه جديد", "nameEn": "New Chalet", "maxGuests": 5},
                    headers=admin_headers)
    assert r.status_code == 201
    chalet = r.json()["data"]
    assert chalet["slug"] == "new-chalet"

    r = client.post("/api/admin/chalets", json={"nameAr": "آخر", "nameEn": "Other", "slug": "new-chalet"},
                    headers=admin_headers)
    assert r.status_code == 409

    r = client.patch(f"/api/admin/chalets/{chalet['id']}", json={"maxGuests": 7}, headers=admin_headers)
    assert r.json()["data"]["maxGuests"] == 7

    make_booking(chalet_id=chalet["id"])
    listed = client.get("/api/admin/chalets", headers=admin_headers).json()["data"]
    assert listed[0]["bookingsCount"] == 1
    detail = client.get(f"/api/admin/chalets/{chalet['id']}", headers=admin_headers).json()["data"]
    assert len(detail["recentBookings"]) == 1

    # Chalets with bookings are switched off rather than removed
    r = client.delete(f"/api/admin/chalets/{chalet['id']}", headers=admin_headers)
    assert r.json()["data"] == {"deleted": False, "deactivated": True}
    assert db.get(Chalet, chalet["id"]).is_active is False

    r = client.post("/api/admin/chalets", json={"nameAr": "فارغ", "nameEn": "Empty"}, headers=admin_headers)
    empty_id = r.json()["data"]["id"]
    r = client.delete(f"/api/admin/chalets/{empty_id}", headers=admin_headers)
    assert r.json()["data"] == {"deleted": True, "deactivated": False}
    assert client.get(f"/api/admin/chalets/{empty_id}", headers=admin_headers).status_code == 404


def test_chalet_images(client, db, admin_headers, make_chalet):
    c = make_chalet()
    other = make_chalet()
    base = f"/api/admin/chalets/{c.id}/images"

    ids = []
    for name in ("pool", "garden", "night"):
        r = client.post(base, json={"url": f"https://cdn.resort.test/{name}.jpg", "caption": name}, headers=admin_headers)
        assert r.status_code == 201
        ids.append(r.json()["data"]["id"])
    assert r.json()["data"]["sortOrder"] == 3

    r = client.post(base, json={"url": "not a url"}, headers=admin_headers)
    assert r.status_code == 400

    r = client.patch(f"{base}/reorder", json={"imageIds": list(reversed(ids))}, headers=admin_headers)
    assert r.status_code == 200
    assert [i["caption"] for i in r.json()["data"]] == ["night", "garden", "pool"]

    detail = client.get(f"/api/admin/chalets/{c.id}", headers=admin_headers).json()["data"]
    assert [i["id"] for i in detail["images"]] == list(reversed(ids))

    # Images belong to one chalet
    r = client.patch(f"/api/admin/chalets/{other.id}/images/reorder", json={"imageIds": ids}, headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["message"] == messages.IMAGE_NOT_FOUND
    assert client.delete(f"/api/admin/chalets/{other.id}/images/{ids[0]}", headers=admin_headers).status_code == 404

    assert client.delete(f"{base}/{ids[0]}", headers=admin_headers).status_code == 200
    public = next(x for x in client.get("/api/chalets").json()["data"] if x["id"] == c.id)
    assert [i["caption"] for i in public["images"]] == ["night", "garden"]
    assert db.query(AuditLog).filter(AuditLog.entity == "ChaletImage").count() == 5


def test_pricing_matrix_upsert(client, admin_headers, make_chalet):
    c = make_chalet()
    entry = {"chaletId": c.id, "visitType": "OVERNIGHT_STAY", "totalPrice": 1500, "depositAmount": 700}
    client.put("/api/admin/pricing/matrix", json={"entries": [entry]}, headers=admin_headers)
    r = client.put("/api/admin/pricing/matrix", json={"entries": [{**entry, "totalPrice": 1600}]}, headers=admin_headers)
    entries = r.json()["data"]["entries"]
    assert len(entries) == 1
    assert entries[0]["totalPrice"] == 1600

    matrix = client.get("/api/admin/pricing/matrix", headers=admin_headers).json()["data"]
    assert [x["id"] for x in matrix["chalets"]] == [c.id]

    r = client.put("/api/admin/pricing/matrix", json={"entries": [{**entry, "chaletId": "missing"}]}, headers=admin_headers)
    assert r.status_code == 404


def test_settings(client, db, admin_headers):
    ensure_defaults(db)
    items = client.get("/api/admin/settings", headers=admin_headers).json()["data"]
    assert any(s["key"] == "whatsapp_template_confirmed_ar" for s in items)

    r = client.patch("/api/admin/settings/resort_name_en", json={"value": "Palm Farm"}, headers=admin_headers)
    assert r.json()["data"] == {"key": "resort_name_en", "value": "Palm Farm", "type": "string"}

    r = client.patch("/api/admin/settings/unknown_key", json={"value": "x"}, headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["message"] == messages.SETTING_NOT_FOUND

    r = client.put("/api/admin/settings", json={"settings": {"unknown_key": "x", "resort_name_ar": "مزرعة"}},
                   headers=admin_headers)
    values = {s["key"]: s["value"] for s in r.json()["data"]}
    assert values["unknown_key"] == "x"
    assert values["resort_name_ar"] == "مزرعة"


def test_user_management(client, super_admin, admin_headers):
    body = {"email": "Staff@Resort.test", "name": "Staff", "password": "long-enough", "role": "VIEWER"}
    r = client.post("/api/admin/users", json=body, headers=admin_headers)
    assert r.status_code == 201
    user = r.json()["data"]
    assert user["email"] == "staff@resort.test"

    r = client.post("/api/admin/users", json=body, headers=admin_headers)
    assert r.status_code == 409
    assert r.json()["message"] == messages.EMAIL_EXISTS

    r = client.patch(f"/api/admin/users/{user['id']}", json={"role": "ADMIN"}, headers=admin_headers)
    assert r.json()["data"]["role"] == "ADMIN"

    r = client.delete(f"/api/admin/users/{super_admin.id}", headers=admin_headers)
    assert r.status_code == 400
    assert r.json()["message"] == messages.CANNOT_DELETE_SELF

    assert len(client.get("/api/admin/users", headers=admin_headers).json()["data"]) == 2
    assert client.delete(f"/api/admin/users/{user['id']}", headers=admin_headers).status_code == 200
    r = client.get(f"/api/admin/users/{user['id']}", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["data"]["isActive"] is False
    r = client.post("/api/admin/auth/login", json={"email": "staff@resort.test", "password": "long-enough"})
    assert r.status_code == 401


def test_deleting_an_admin_keeps_their_audit_history(client, db, make_admin, admin_headers):
    staff = make_admin(AdminRole.ADMIN)
    r = client.post("/api/admin/chalets", json={"nameAr": "شاليه", "nameEn": "Garden"}, headers=auth_headers(staff))
    assert r.status_code == 201
    assert db.query(AuditLog).filter(AuditLog.admin_id == staff.id).count() == 1

    assert client.delete(f"/api/admin/users/{staff.id}", headers=admin_headers).status_code == 200
    db.expire_all()
    assert db.query(AuditLog).filter(AuditLog.admin_id == staff.id).count() == 1
    assert db.get(AdminUser, staff.id).is_active is False

    fk = next(iter(AuditLog.__table__.c.admin_id.foreign_keys))
    assert fk.ondelete == "RESTRICT"


def test_change_password(client, make_admin, super_admin, admin_headers):
    staff = make_admin(AdminRole.ADMIN, email="staff@resort.test")
    staff_headers = auth_headers(staff)

    r = client.post(f"/api/admin/users/{staff.id}/change-password",
                    json={"currentPassword": "wrong", "newPassword": "new-password-1"}, headers=staff_headers)
    assert r.json()["message"] == messages.CURRENT_PASSWORD_INCORRECT

    r = client.post(f"/api/admin/users/{staff.id}/change-password",
                    json={"currentPassword": PASSWORD, "newPassword": "new-password-1"}, headers=staff_headers)
    assert r.status_code == 200
    r = client.post("/api/admin/auth/login", json={"email": "staff@resort.test", "password": "new-password-1"})
    assert r.status_code == 200

    # Only a super admin may reset someone else's password
    r = client.post(f"/api/admin/users/{super_admin.id}/change-password",
                    json={"newPassword": "hijacked-123"}, headers=staff_headers)
    assert r.status_code == 403
    r = client.post(f"/api/admin/users/{staff.id}/change-password",
                    json={"newPassword": "reset-by-root"}, headers=admin_headers)
    assert r.status_code == 200


def test_audit_logs(client, admin_headers, make_booking):
    b = make_booking()
    client.patch(f"/api/admin/bookings/{b.id}", json={"notes": "VIP"}, headers=admin_headers)
    client.post("/api/admin/blackout-dates", json={"date": format_date(future(30))}, headers=admin_headers)

    data = client.get("/api/admin/audit-logs", headers=admin_headers).json()["data"]
    assert data["pagination"]["total"] == 2
    assert {entry["entity"] for entry in data["logs"]} == {"Booking", "BlackoutDate"}

    data = client.get("/api/admin/audit-logs", params={"entity": "Booking"}, headers=admin_headers).json()["data"]
    entry = data["logs"][0]
    assert entry["changes"] == {"notes": [None, "VIP"]}
    assert entry["admin"]["email"] == "root@resort.test"


def test_dashboard(client, db, admin_headers, make_booking):
    make_booking(day=today())
    make_booking(day=future(), status=BookingStatus.CONFIRMED)
    b = make_booking(day=future(), visit_type=VisitType.OVERNIGHT_STAY, status=BookingStatus.CONFIRMED)
    b.payment_status = PaymentStatus.DEPOSIT_PAID.value
    db.commit()

    data = client.get("/api/admin/dashboard/stats", headers=admin_headers).json()["data"]
    overview = data["overview"]
    assert overview["totalBookings"] == 3
    assert overview["pendingBookings"] == 1
    assert overview["confirmedBookings"] == 2
    assert overview["weekBookings"] == 3
    assert overview["estimatedRevenue"] == 700
    assert len(data["todayBookings"]) == 1
    assert len(data["recentBookings"]) == 3
    assert len(data["weeklyTrend"]) == 7
    assert data["weeklyTrend"][-1]["count"] == 3
    assert db.query(Booking).count() == 3


def test_audit_records_forwarded_address_only_behind_trusted_proxy(client, db, admin_headers, monkeypatch):
    body = {"nameAr": "شاليه", "nameEn": "Lake"}
    client.post("/api/admin/chalets", json=body, headers={**admin_headers, "X-Forwarded-For": "203.0.113.9"})
    monkeypatch.setattr(settings, "TRUSTED_PROXIES", "testclient")
    client.post("/api/admin/chalets", json={**body, "nameEn": "River"},
                headers={**admin_headers, "X-Forwarded-For": "203.0.113.9"})

    ips = {e.changes_json: e.ip_address for e in db.query(AuditLog).filter(AuditLog.entity == "Chalet")}
    assert sorted(ips.values()) == ["203.0.113.9", "testclient"]
    assert next(ip for changes, ip in ips.items() if "River" in changes) == "203.0.113.9"
