from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError
from sqlalchemy.orm import Session

from resort.core import messages
from resort.core.config import settings
from resort.core.security import decode_token
from resort.db.session import get_db
from resort.models.admin_user import AdminUser
from resort.models.enums import AdminRole

bearer = HTTPBearer(auto_error=False)

ROLE_LEVELS = {
    AdminRole.SUPER_ADMIN.value: 3,
    AdminRole.ADMIN.value: 2,
    AdminRole.VIEWER.value: 1,
}


def get_current_admin(
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    db: Session = Depends(get_db),
) -> AdminUser:
    if not creds:
        raise HTTPException(status_code=401, detail=messages.UNAUTHORIZED)
    try:
        payload = decode_token(creds.credentials)
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail=messages.SESSION_EXPIRED)
    except JWTError:
        raise HTTPException(status_code=401, detail=messages.INVALID_SESSION)
    admin_id = payload.get("sub")
    admin = db.get(AdminUser, admin_id) if admin_id else None
    if not admin or not admin.is_active:
        raise HTTPException(status_code=401, detail=messages.INVALID_SESSION)
    return admin


def require_roles(*roles: AdminRole):
    allowed = {r.value for r in roles}

    def _guard(admin: AdminUser = Depends(get_current_admin)) -> AdminUser:
        if admin.role not in allowed:
            raise HTTPException(status_code=403, detail=messages.FORBIDDEN)
        return admin
    return _guard


def require_min_role(role: AdminRole):
    """Allow ``role`` and everything above it (SUPER_ADMIN > ADMIN > VIEWER)."""
    needed = ROLE_LEVELS[role.value]

    def _guard(admin: AdminUser = Depends(get_current_admin)) -> AdminUser:
        if ROLE_LEVELS.get(admin.role, 0) < needed:
            raise HTTPException(status_code=403, detail=messages.FORBIDDEN)
        return admin
    return _guard


# Shorthands used by the admin routers
viewer_or_above = require_min_role(AdminRole.VIEWER)
admin_or_above = require_min_role(AdminRole.ADMIN)
super_admin_only = require_roles(AdminRole.SUPER_ADMIN)


def client_ip(request: Request) -> str:
    """Caller address for rate limiting and audit.

    X-Forwarded-For is read only when the socket peer is a configured proxy,
    walking right to left past any other trusted hops.
    """
    peer = request.client.host if request.client else "unknown"
    trusted = {p.strip() for p in settings.TRUSTED_PROXIES.split(",") if p.strip()}
    if peer not in trusted:
        return peer
    forwarded = request.headers.get("x-forwarded-for", "")
    hops = [h.strip() for h in forwarded.split(",") if h.strip()]
    for hop in reversed(hops):
        if hop not in trusted:
            return hop
    return peer
