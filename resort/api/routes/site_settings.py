from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from resort.api.deps import admin_or_above, viewer_or_above
from resort.core import messages, responses
from resort.core.errors import NotFoundError
from resort.db.session import get_db
from resort.models.admin_user import AdminUser
from resort.schemas.admin import SettingsBulkUpdate, SettingUpdate, setting_out
from resort.services import settings_service
from resort.services.audit_service import log_audit

router = APIRouter(prefix="/admin", tags=["settings"])


@router.get("/settings")
def list_settings(db: Session = Depends(get_db), me: AdminUser = Depends(viewer_or_above)):
    return responses.success(messages.SETTINGS_FETCHED, [setting_out(s) for s in settings_service.list_settings(db)])


@router.patch("/settings/{key}")
def update_setting(key: str, body: SettingUpdate, request: Request, db: Session = Depends(get_db),
                   me: AdminUser = Depends(admin_or_above)):
    old = settings_service.get_setting(db, key)
    if old is None:
        raise NotFoundError(messages.SETTING_NOT_FOUND)
    s = settings_service.set_setting(db, key, body.value, body.type)
    db.commit()
    db.refresh(s)
    log_audit(db, me, "UPDATE", "Setting", key, {"value": [old, body.value]}, request)
    return responses.success(messages.SETTINGS_UPDATED, setting_out(s))


@router.put("/settings")
def bulk_update_settings(body: SettingsBulkUpdate, request: Request, db: Session = Depends(get_db),
                         me: AdminUser = Depends(admin_or_above)):
    """Create or update many keys at once."""
    for key, value in body.settings.items():
        settings_service.set_setting(db, key, value)
    db.commit()
    log_audit(db, me, "UPDATE", "Setting", None, {"keys": sorted(body.settings)}, request)
    return responses.success(messages.SETTINGS_UPDATED, [setting_out(s) for s in settings_service.list_settings(db)])
