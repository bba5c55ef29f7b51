from sqlalchemy.orm import Session
from resort.models.setting import Setting

DEFAULT_SETTINGS: list[tuple[str, str, str]] = [
    ("whatsapp_number", "966500000000", "string"),
    ("resort_name_ar", "منتجع المزرعة", "string"),
    ("resort_name_en", "Farm Resort", "string"),
    ("cancellation_free_hours", "48", "number"),
    ("cancellation_partial_hours", "24", "number"),
    (
        "whatsapp_template_new_booking_ar",
        "مرحباً {customerName}\nتم استلام طلب حجزك رقم {bookingRef}\nالتاريخ: {date}\nالنوع: {visitType}\nعدد الضيوف: {guests}",
        "text",
    ),
    (
        "whatsapp_template_new_booking_en",
        "Hi {customerName}\nWe received your booking {bookingRef}\nDate: {date}\nType: {visitType}\nGuests: {guests}",
        "text",
    ),
    (
        "whatsapp_template_confirmed_ar",
        "تم تأكيد حجزك رقم {bookingRef} بتاريخ {date}\nالعربون المطلوب: {depositAmount} ر.س",
        "text",
    ),
    (
        "whatsapp_template_confirmed_en",
        "Your booking {bookingRef} on {date} is confirmed\nDeposit due: {depositAmount} SAR",
        "text",
    ),
    ("whatsapp_template_cancelled_ar", "تم إلغاء حجزك رقم {bookingRef}\nالسبب: {reason}", "text"),
    ("whatsapp_template_cancelled_en", "Your booking {bookingRef} was cancelled\nReason: {reason}", "text"),
    (
        "whatsapp_template_reminder_ar",
        "تذكير بحجزك القادم\nمرحباً {customerName}\nرقم الحجز: {bookingRef}\nالتاريخ: {date}\nالنوع: {visitType}\nعدد الضيوف: {guests}",
        "text",
    ),
    (
        "whatsapp_template_reminder_en",
        "Booking Reminder\nHi {customerName}\nRef: {bookingRef}\nDate: {date}\nType: {visitType}\nGuests: {guests}",
        "text",
    ),
]


def get_setting(db: Session, key: str, default: str | None = None) -> str | None:
    s = db.get(Setting, key)
    if s and s.value is not None:
        return s.value
    return default


def get_int_setting(db: Session, key: str, default: int) -> int:
    raw = get_setting(db, key)
    try:
        return int(raw) if raw is not None else default
    except ValueError:
        return default


def set_setting(db: Session, key: str, value: str, type_: str | None = None) -> Setting:
    """Create or update a setting. Does not commit."""
    s = db.get(Setting, key)
    if not s:
        s = Setting(key=key, value=value, type=type_ or "string")
        db.add(s)
    else:
        s.value = value
        if type_:
            s.type = type_
    return s


def list_settings(db: Session) -> list[Setting]:
    return db.query(Setting).order_by(Setting.key.asc()).all()


def ensure_defaults(db: Session) -> int:
    created = 0
    for key, value, type_ in DEFAULT_SETTINGS:
        if db.get(Setting, key) is None:
            db.add(Setting(key=key, value=value, type=type_))
            created += 1
    db.commit()
    return created
