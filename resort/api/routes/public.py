from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from resort.api.rate_limit import otp_limiter
from resort.core import messages, responses
from resort.core.config import settings
from resort.core.errors import AppError
from resort.db.session import get_db
from resort.models.chalet import Chalet
from resort.models.pricing import ChaletPricing
from resort.schemas.booking import PhoneOtpRequest, PhoneOtpVerify
from resort.services import otp_service
from resort.services.availability_service import check_availability, get_availability_for_range
from resort.services.notification_service import dispatch, otp_message
from resort.services.whatsapp_service import WhatsAppService, get_notifier
from resort.utils.dates import parse_date

router = APIRouter(tags=["public"])


@router.get("/availability")
def availability(date: str = "", visitType: str = "", chaletId: str | None = None, db: Session = Depends(get_db)):
    """Single slot check. Unavailable is a normal 200 answer carrying the reason's message."""
    result = check_availability(db, date, visitType, chaletId or None)
    if result.available:
        return responses.availability(True, messages.AVAILABLE)
    return responses.availability(False, messages.UNAVAILABLE.get(result.reason, messages.UNAVAILABLE_DEFAULT))


@router.get("/availability/range")
def availability_range(start: str, end: str, chaletId: str | None = None, db: Session = Depends(get_db)):
    start_d, end_d = parse_date(start), parse_date(end)
    if start_d is None or end_d is None:
        raise AppError(messages.INVALID_RANGE)
    days = get_availability_for_range(db, start_d, end_d, chaletId or None)
    return responses.success(messages.AVAILABILITY_FETCHED, days)


@router.get("/chalets")
def list_chalets(db: Session = Depends(get_db)):
    chalets = db.query(Chalet).filter(Chalet.is_active == True).order_by(Chalet.sort_order.asc()).all()
    prices = db.query(ChaletPricing).filter(ChaletPricing.is_active == True).all()
    by_chalet: dict[str, dict] = {}
    for p in prices:
        by_chalet.setdefault(p.chalet_id, {})[p.visit_type] = {
            "totalPrice": p.total_price,
            "depositAmount": p.deposit_amount,
        }
    return responses.success(messages.CHALETS_FETCHED, [
        {
            "id": c.id,
            "nameAr": c.name_ar,
            "nameEn": c.name_en,
            "slug": c.slug,
            "maxGuests": c.max_guests,
            "description": c.description,
            "images": [{"url": i.url, "caption": i.caption} for i in c.images],
            "pricing": by_chalet.get(c.id, {}),
        }
        for c in chalets
    ])


@router.post("/phone/request-otp", dependencies=[Depends(otp_limiter)])
def request_phone_otp(body: PhoneOtpRequest, background: BackgroundTasks,
                      db: Session = Depends(get_db),
                      notifier: WhatsAppService = Depends(get_notifier)):
    code = otp_service.request_phone_otp(db, body.phone)
    dispatch(background, notifier, body.phone, otp_message(code, "ar", purpose="verify"))
    data = None if settings.is_production else {"otp": code}
    return responses.success(messages.OTP_SENT, data)


@router.post("/phone/verify-otp")
def verify_phone_otp(body: PhoneOtpVerify, db: Session = Depends(get_db)):
    otp_service.verify_phone_otp(db, body.phone, body.otp)
    return responses.success(messages.PHONE_VERIFIED, {"phone": body.phone, "verified": True})
