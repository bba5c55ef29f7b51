import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from resort.api.deps import get_current_admin
from resort.api.rate_limit import login_limiter
from resort.core import messages, responses
from resort.core.config import settings
from resort.core.security import create_access_token, verify_password
from resort.db.session import get_db
from resort.models.admin_user import AdminUser
from resort.schemas.admin import LoginRequest, admin_user_out
from resort.services.audit_service import log_audit
from resort.utils.dates import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["auth"])


@router.post("/auth/login", dependencies=[Depends(login_limiter)])
def login(body: LoginRequest, request: Request, db: Session = Depends(get_db)):
    admin = db.query(AdminUser).filter(AdminUser.email == body.email.strip().lower()).first()
    if not admin or not admin.is_active or not verify_password(body.password, admin.password_hash):
        logger.info("Failed admin login for %s", body.email)
        raise HTTPException(status_code=401, detail=messages.INVALID_CREDENTIALS)
    admin.last_login_at = utcnow()
    db.commit()
    log_audit(db, admin, "LOGIN", "AdminUser", admin.id, request=request)
    return responses.success(messages.LOGIN_SUCCESS, {
        "token": create_access_token(admin.id, admin.role),
        "expiresInMinutes": settings.ACCESS_TOKEN_EXPIRE_MINUTES,
        "admin": admin_user_out(admin),
    })


@router.get("/auth/me")
def me(me: AdminUser = Depends(get_current_admin)):
    return responses.success(messages.PROFILE_FETCHED, admin_user_out(me))
