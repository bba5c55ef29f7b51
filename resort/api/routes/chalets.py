import re
import uuid

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from resort.api.deps import admin_or_above, viewer_or_above
from resort.core import messages, responses
from resort.core.errors import ConflictError, NotFoundError
from resort.db.session import get_db
from resort.models.admin_user import AdminUser
from resort.models.booking import Booking
from resort.models.chalet import Chalet, ChaletImage
from resort.models.pricing import ChaletPricing, Pricing
from resort.schemas.admin import (
    ChaletCreate,
    ChaletImageCreate,
    ChaletImageReorder,
    ChaletUpdate,
    PricingMatrixUpdate,
    PricingUpdate,
    chalet_image_out,
    chalet_out,
    chalet_pricing_out,
    pricing_out,
)
from resort.schemas.booking import booking_out
from resort.services.audit_service import log_audit

router = APIRouter(prefix="/admin", tags=["chalets"])


def slugify(name: str) -> str:
    s = re.sub(r"[^\w\s-]", "", name.lower())
    s = re.sub(r"\s+", "-", s.strip())
    return re.sub(r"-+", "-", s)


def _require_chalet(db: Session, chalet_id: str) -> Chalet:
    c = db.get(Chalet, chalet_id)
    if not c:
        raise NotFoundError(messages.CHALET_NOT_FOUND)
    return c


@router.get("/chalets")
def list_chalets(db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    chalets = db.query(Chalet).order_by(Chalet.sort_order.asc()).all()
    out = []
    for c in chalets:
        item = chalet_out(c)
        item["bookingsCount"] = db.query(Booking).filter(Booking.chalet_id == c.id).count()
        out.append(item)
    return responses.success(messages.CHALETS_FETCHED, out)


@router.get("/chalets/{chalet_id}")
def get_chalet(chalet_id: str, db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    c = _require_chalet(db, chalet_id)
    recent = (
        db.query(Booking)
        .filter(Booking.chalet_id == c.id)
        .order_by(Booking.created_at.desc())
        .limit(10)
        .all()
    )
    item = chalet_out(c)
    item["recentBookings"] = [booking_out(b) for b in recent]
    item["pricing"] = [
        chalet_pricing_out(p)
        for p in db.query(ChaletPricing).filter(ChaletPricing.chalet_id == c.id).all()
    ]
    return responses.success(messages.CHALET_FETCHED, item)


@router.post("/chalets", status_code=201)
def create_chalet(body: ChaletCreate, request: Request, db: Session = Depends(get_db),
                  me: AdminUser = Depends(admin_or_above)):
    if body.slug:
        slug = slugify(body.slug)
        if db.query(Chalet.id).filter(Chalet.slug == slug).first():
            raise ConflictError(messages.CHALET_SLUG_EXISTS)
    else:
        slug = slugify(body.nameEn) or uuid.uuid4().hex[:8]
        if db.query(Chalet.id).filter(Chalet.slug == slug).first():
            slug = f"{slug}-{uuid.uuid4().hex[:6]}"
    c = Chalet(
        id=str(uuid.uuid4()),
        name_ar=body.nameAr,
        name_en=body.nameEn,
        slug=slug,
        max_guests=body.maxGuests,
        description=body.description,
        is_active=body.isActive,
        sort_order=body.sortOrder,
    )
    db.add(c)
    db.commit()
    db.refresh(c)
    log_audit(db, me, "CREATE", "Chalet", c.id, {"nameAr": c.name_ar, "nameEn": c.name_en}, request)
    return responses.success(messages.CHALET_CREATED, chalet_out(c), status_code=201)


@router.patch("/chalets/{chalet_id}")
def update_chalet(chalet_id: str, body: ChaletUpdate, request: Request, db: Session = Depends(get_db),
                  me: AdminUser = Depends(admin_or_above)):
    c = _require_chalet(db, chalet_id)
    fields = {
        "nameAr": "name_ar",
        "nameEn": "name_en",
        "maxGuests": "max_guests",
        "description": "description",
        "isActive": "is_active",
        "sortOrder": "sort_order",
    }
    changes = {}
    for key, value in body.model_dump(exclude_unset=True).items():
        attr = fields[key]
        if getattr(c, attr) != value:
            changes[key] = [getattr(c, attr), value]
            setattr(c, attr, value)
    db.commit()
    db.refresh(c)
    if changes:
        log_audit(db, me, "UPDATE", "Chalet", c.id, changes, request)
    return responses.success(messages.CHALET_UPDATED, chalet_out(c))


@router.delete("/chalets/{chalet_id}")
def delete_chalet(chalet_id: str, request: Request, db: Session = Depends(get_db),
                  me: AdminUser = Depends(admin_or_above)):
    c = _require_chalet(db, chalet_id)
    # Bookings keep their chalet; such chalets are only switched off
    if db.query(Booking.id).filter(Booking.chalet_id == c.id).first():
        c.is_active = False
        db.commit()
        log_audit(db, me, "DEACTIVATE", "Chalet", chalet_id, {"isActive": [True, False]}, request)
        return responses.success(messages.CHALET_DEACTIVATED, {"deleted": False, "deactivated": True})
    name = {"nameAr": c.name_ar, "nameEn": c.name_en}
    db.delete(c)
    db.commit()
    log_audit(db, me, "DELETE", "Chalet", chalet_id, name, request)
    return responses.success(messages.CHALET_DELETED, {"deleted": True, "deactivated": False})


# Images

@router.post("/chalets/{chalet_id}/images", status_code=201)
def add_chalet_image(chalet_id: str, body: ChaletImageCreate, request: Request, db: Session = Depends(get_db),
                     me: AdminUser = Depends(admin_or_above)):
    c = _require_chalet(db, chalet_id)
    last = max((i.sort_order for i in c.images), default=0)
    image = ChaletImage(id=str(uuid.uuid4()), chalet_id=c.id, url=body.url, caption=body.caption, sort_order=last + 1)
    db.add(image)
    db.commit()
    db.refresh(image)
    log_audit(db, me, "CREATE", "ChaletImage", image.id, {"chaletId": c.id, "url": image.url}, request)
    return responses.success(messages.IMAGE_ADDED, chalet_image_out(image), status_code=201)


@router.delete("/chalets/{chalet_id}/images/{image_id}")
def delete_chalet_image(chalet_id: str, image_id: str, request: Request, db: Session = Depends(get_db),
                        me: AdminUser = Depends(admin_or_above)):
    image = db.query(ChaletImage).filter(ChaletImage.id == image_id, ChaletImage.chalet_id == chalet_id).first()
    if not image:
        raise NotFoundError(messages.IMAGE_NOT_FOUND)
    url = image.url
    db.delete(image)
    db.commit()
    log_audit(db, me, "DELETE", "ChaletImage", image_id, {"chaletId": chalet_id, "url": url}, request)
    return responses.success(messages.IMAGE_DELETED)


@router.patch("/chalets/{chalet_id}/images/reorder")
def reorder_chalet_images(chalet_id: str, body: ChaletImageReorder, request: Request, db: Session = Depends(get_db),
                          me: AdminUser = Depends(admin_or_above)):
    """Positions follow the order of ``imageIds``; every id must belong to this chalet."""
    c = _require_chalet(db, chalet_id)
    images = {i.id: i for i in c.images}
    if any(image_id not in images for image_id in body.imageIds):
        raise NotFoundError(messages.IMAGE_NOT_FOUND)
    for position, image_id in enumerate(body.imageIds):
        images[image_id].sort_order = position
    db.commit()
    log_audit(db, me, "REORDER", "ChaletImage", None, {"chaletId": c.id, "imageIds": body.imageIds}, request)
    return responses.success(messages.IMAGES_REORDERED, [chalet_image_out(i) for i in c.images])


# Pricing

@router.get("/pricing")
def list_pricing(db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    items = db.query(Pricing).order_by(Pricing.visit_type.asc()).all()
    return responses.success(messages.PRICING_FETCHED, [pricing_out(p) for p in items])


@router.patch("/pricing/{pricing_id}")
def update_pricing(pricing_id: str, body: PricingUpdate, request: Request, db: Session = Depends(get_db),
                   me: AdminUser = Depends(admin_or_above)):
    p = db.get(Pricing, pricing_id)
    if not p:
        raise NotFoundError(messages.PRICING_NOT_FOUND)
    changes = {}
    if body.totalPrice is not None and body.totalPrice != p.total_price:
        changes["totalPrice"] = [p.total_price, body.totalPrice]
        p.total_price = body.totalPrice
    if body.depositAmount is not None and body.depositAmount != p.deposit_amount:
        changes["depositAmount"] = [p.deposit_amount, body.depositAmount]
        p.deposit_amount = body.depositAmount
    if body.isActive is not None and body.isActive != p.is_active:
        changes["isActive"] = [p.is_active, body.isActive]
        p.is_active = body.isActive
    db.commit()
    db.refresh(p)
    if changes:
        log_audit(db, me, "UPDATE", "Pricing", p.id, changes, request)
    return responses.success(messages.PRICING_UPDATED, pricing_out(p))


@router.get("/pricing/matrix")
def get_pricing_matrix(db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    chalets = db.query(Chalet).order_by(Chalet.sort_order.asc()).all()
    prices = db.query(ChaletPricing).all()
    return responses.success(messages.PRICING_FETCHED, {
        "chalets": [chalet_out(c) for c in chalets],
        "entries": [chalet_pricing_out(p) for p in prices],
    })


@router.put("/pricing/matrix")
def update_pricing_matrix(body: PricingMatrixUpdate, request: Request, db: Session = Depends(get_db),
                          me: AdminUser = Depends(admin_or_above)):
    """Upsert chalet x visit type prices. Cells not mentioned are left alone."""
    for e in body.entries:
        _require_chalet(db, e.chaletId)
        p = (
            db.query(ChaletPricing)
            .filter(ChaletPricing.chalet_id == e.chaletId, ChaletPricing.visit_type == e.visitType.value)
            .first()
        )
        if p is None:
            p = ChaletPricing(id=str(uuid.uuid4()), chalet_id=e.chaletId, visit_type=e.visitType.value)
            db.add(p)
        p.total_price = e.totalPrice
        p.deposit_amount = e.depositAmount
        p.is_active = e.isActive
    db.commit()
    log_audit(db, me, "UPDATE", "ChaletPricing", None, {"entries": [e.model_dump(mode="json") for e in body.entries]}, request)
    prices = db.query(ChaletPricing).all()
    return responses.success(messages.PRICING_UPDATED, {"entries": [chalet_pricing_out(p) for p in prices]})
