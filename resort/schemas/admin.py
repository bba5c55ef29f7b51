from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from resort.models.admin_user import AdminUser
from resort.models.blackout_date import BlackoutDate
from resort.models.chalet import Chalet, ChaletImage
from resort.models.enums import AdminRole, VisitType
from resort.models.pricing import ChaletPricing, Pricing
from resort.models.setting import Setting
from resort.schemas.booking import DATE_PATTERN, PHONE_PATTERN, chalet_brief
from resort.utils.dates import format_date
from resort.utils.visit_types import coerce_visit_type


def _visit_type_or_none(v):
    if v is None or v == "":
        return None
    vt = coerce_visit_type(v) if isinstance(v, str) else VisitType(v)
    if vt is None:
        raise ValueError("Invalid visit type")
    return vt


# Accepts the enum name (DAY_VISIT) or an Arabic/English label
VisitTypeInput = Annotated[Optional[VisitType], BeforeValidator(_visit_type_or_none)]


class LoginRequest(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    password: str = Field(min_length=1, max_length=200)


class BlackoutCreate(BaseModel):
    date: str = Field(pattern=DATE_PATTERN)
    visitType: VisitTypeInput = None
    chaletId: Optional[str] = None
    reason: Optional[str] = Field(default=None, max_length=200)


class BlockDatesRequest(BaseModel):
    startDate: str = Field(pattern=DATE_PATTERN)
    endDate: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    visitType: VisitTypeInput = None
    chaletId: Optional[str] = None
    reason: Optional[str] = Field(default=None, max_length=200)


class UnblockDateRequest(BaseModel):
    date: str = Field(pattern=DATE_PATTERN)
    visitType: VisitTypeInput = None
    chaletId: Optional[str] = None


class ChaletCreate(BaseModel):
    nameAr: str = Field(min_length=1, max_length=100)
    nameEn: str = Field(min_length=1, max_length=100)
    slug: Optional[str] = Field(default=None, max_length=80)
    maxGuests: int = Field(default=4, ge=1, le=50)
    description: Optional[str] = None
    isActive: bool = True
    sortOrder: int = 0


class ChaletUpdate(BaseModel):
    nameAr: Optional[str] = Field(default=None, min_length=1, max_length=100)
    nameEn: Optional[str] = Field(default=None, min_length=1, max_length=100)
    maxGuests: Optional[int] = Field(default=None, ge=1, le=50)
    description: Optional[str] = None
    isActive: Optional[bool] = None
    sortOrder: Optional[int] = None


class ChaletImageCreate(BaseModel):
    url: str = Field(min_length=1, max_length=1000, pattern=r"^https?://\S+$")
    caption: Optional[str] = Field(default=None, max_length=200)


class ChaletImageReorder(BaseModel):
    imageIds: list[str] = Field(min_length=1)


class PricingUpdate(BaseModel):
    totalPrice: Optional[int] = Field(default=None, ge=0)
    depositAmount: Optional[int] = Field(default=None, ge=0)
    isActive: Optional[bool] = None


class PricingMatrixEntry(BaseModel):
    chaletId: str
    visitType: Annotated[VisitType, BeforeValidator(_visit_type_or_none)]
    totalPrice: int = Field(ge=0)
    depositAmount: int = Field(ge=0)
    isActive: bool = True


class PricingMatrixUpdate(BaseModel):
    entries: list[PricingMatrixEntry]


class SettingUpdate(BaseModel):
    value: str
    type: Optional[str] = None


class SettingsBulkUpdate(BaseModel):
    settings: dict[str, str]


class AdminUserCreate(BaseModel):
    email: str = Field(min_length=3, max_length=320)
    name: str = Field(min_length=1, max_length=200)
    password: str = Field(min_length=8, max_length=200)
    role: AdminRole = AdminRole.ADMIN
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v:
            raise ValueError("Invalid email")
        return v


class AdminUserUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    role: Optional[AdminRole] = None
    phone: Optional[str] = Field(default=None, pattern=PHONE_PATTERN)
    isActive: Optional[bool] = None


class ChangePasswordRequest(BaseModel):
    # Required when changing your own password
    currentPassword: Optional[str] = None
    newPassword: str = Field(min_length=8, max_length=200)


def admin_user_out(u: AdminUser) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "name": u.name,
        "role": u.role,
        "phone": u.phone,
        "isActive": u.is_active,
        "lastLoginAt": u.last_login_at.isoformat() if u.last_login_at else None,
        "createdAt": u.created_at.isoformat() if u.created_at else None,
    }


def blackout_out(b: BlackoutDate) -> dict:
    return {
        "id": b.id,
        "date": format_date(b.date),
        "visitType": b.visit_type,
        "chaletId": b.chalet_id,
        "chalet": chalet_brief(b.chalet),
        "reason": b.reason,
        "createdBy": b.created_by,
        "createdAt": b.created_at.isoformat() if b.created_at else None,
    }


def chalet_out(c: Chalet) -> dict:
    return {
        "id": c.id,
        "nameAr": c.name_ar,
        "nameEn": c.name_en,
        "slug": c.slug,
        "maxGuests": c.max_guests,
        "description": c.description,
        "isActive": c.is_active,
        "sortOrder": c.sort_order,
        "images": [chalet_image_out(i) for i in c.images],
        "createdAt": c.created_at.isoformat() if c.created_at else None,
    }


def chalet_image_out(i: ChaletImage) -> dict:
    return {"id": i.id, "url": i.url, "caption": i.caption, "sortOrder": i.sort_order}


def pricing_out(p: Pricing) -> dict:
    return {
        "id": p.id,
        "visitType": p.visit_type,
        "totalPrice": p.total_price,
        "depositAmount": p.deposit_amount,
        "isActive": p.is_active,
    }


def chalet_pricing_out(p: ChaletPricing) -> dict:
    return {
        "id": p.id,
        "chaletId": p.chalet_id,
        "visitType": p.visit_type,
        "totalPrice": p.total_price,
        "depositAmount": p.deposit_amount,
        "isActive": p.is_active,
    }


def setting_out(s: Setting) -> dict:
    return {"key": s.key, "value": s.value, "type": s.type}
