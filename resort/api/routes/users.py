import uuid

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from resort.api.deps import get_current_admin, super_admin_only
from resort.core import messages, responses
from resort.core.errors import AppError, ConflictError, NotFoundError
from resort.core.security import hash_password, verify_password
from resort.db.session import get_db
from resort.models.admin_user import AdminUser
from resort.models.enums import AdminRole
from resort.schemas.admin import AdminUserCreate, AdminUserUpdate, ChangePasswordRequest, admin_user_out
from resort.services.audit_service import log_audit

router = APIRouter(prefix="/admin", tags=["users"])


def _require_user(db: Session, user_id: str) -> AdminUser:
    u = db.get(AdminUser, user_id)
    if not u:
        raise NotFoundError(messages.USER_NOT_FOUND)
    return u


@router.get("/users")
def list_users(db: Session = Depends(get_db), me: AdminUser = Depends(super_admin_only)):
    users = db.query(AdminUser).order_by(AdminUser.created_at.desc()).all()
    return responses.success(messages.USERS_FETCHED, [admin_user_out(u) for u in users])


@router.get("/users/{user_id}")
def get_user(user_id: str, db: Session = Depends(get_db), me: AdminUser = Depends(super_admin_only)):
    return responses.success(messages.USER_FETCHED, admin_user_out(_require_user(db, user_id)))


@router.post("/users", status_code=201)
def create_user(body: AdminUserCreate, request: Request, db: Session = Depends(get_db),
                me: AdminUser = Depends(super_admin_only)):
    if db.query(AdminUser.id).filter(AdminUser.email == body.email).first():
        raise ConflictError(messages.EMAIL_EXISTS)
    u = AdminUser(
        id=str(uuid.uuid4()),
        email=body.email,
        name=body.name,
        role=body.role.value,
        phone=body.phone,
        password_hash=hash_password(body.password),
        is_active=True,
        created_by_id=me.id,
    )
    db.add(u)
    db.commit()
    db.refresh(u)
    log_audit(db, me, "CREATE", "AdminUser", u.id, {"email": u.email, "role": u.role}, request)
    return responses.success(messages.USER_CREATED, admin_user_out(u), status_code=201)


@router.patch("/users/{user_id}")
def update_user(user_id: str, body: AdminUserUpdate, request: Request, db: Session = Depends(get_db),
                me: AdminUser = Depends(super_admin_only)):
    u = _require_user(db, user_id)
    changes = {}
    if body.name is not None and body.name != u.name:
        changes["name"] = [u.name, body.name]
        u.name = body.name
    if body.role is not None and body.role.value != u.role:
        changes["role"] = [u.role, body.role.value]
        u.role = body.role.value
    if body.phone is not None and body.phone != u.phone:
        changes["phone"] = [u.phone, body.phone]
        u.phone = body.phone
    if body.isActive is not None and body.isActive != u.is_active:
        changes["isActive"] = [u.is_active, body.isActive]
        u.is_active = body.isActive
    db.commit()
    db.refresh(u)
    if changes:
        log_audit(db, me, "UPDATE", "AdminUser", u.id, changes, request)
    return responses.success(messages.USER_UPDATED, admin_user_out(u))


@router.delete("/users/{user_id}")
def delete_user(user_id: str, request: Request, db: Session = Depends(get_db),
                me: AdminUser = Depends(super_admin_only)):
    if user_id == me.id:
        raise AppError(messages.CANNOT_DELETE_SELF)
    u = _require_user(db, user_id)
    # Soft delete: the audit trail keeps pointing at this row
    u.is_active = False
    db.commit()
    log_audit(db, me, "DELETE", "AdminUser", user_id, {"email": u.email, "name": u.name}, request)
    return responses.success(messages.USER_DELETED)


@router.post("/users/{user_id}/change-password")
def change_password(user_id: str, body: ChangePasswordRequest, request: Request, db: Session = Depends(get_db),
                    me: AdminUser = Depends(get_current_admin)):
    """Anyone may change their own password (current one required); SUPER_ADMIN may reset anyone's."""
    is_self = user_id == me.id
    if not is_self and me.role != AdminRole.SUPER_ADMIN.value:
        raise HTTPException(status_code=403, detail=messages.FORBIDDEN)
    u = _require_user(db, user_id)
    if is_self and not verify_password(body.currentPassword or "", u.password_hash):
        raise AppError(messages.CURRENT_PASSWORD_INCORRECT)
    u.password_hash = hash_password(body.newPassword)
    db.commit()
    log_audit(db, me, "CHANGE_PASSWORD", "AdminUser", u.id, None, request)
    return responses.success(messages.PASSWORD_CHANGED)
