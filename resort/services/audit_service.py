import uuid, json, logging, math
from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from resort.api.deps import client_ip
from resort.models.admin_user import AdminUser
from resort.models.audit_log import AuditLog

logger = logging.getLogger(__name__)


def log_audit(db: Session, admin: AdminUser, action: str, entity: str, entity_id: str | None = None,
              changes: dict | None = None, request: Request | None = None) -> None:
    """Write an audit entry after the primary change has been committed.

    Never raises: a failed audit write must not undo or fail the admin action.
    """
    try:
        db.add(AuditLog(
            id=str(uuid.uuid4()),
            admin_id=admin.id,
            action=action,
            entity=entity,
            entity_id=entity_id,
            changes_json=json.dumps(changes, ensure_ascii=False, default=str) if changes else None,
            ip_address=client_ip(request) if request else None,
            user_agent=request.headers.get("user-agent") if request else None,
        ))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to write audit log %s %s/%s", action, entity, entity_id)


def list_audit_logs(db: Session, admin_id: str | None = None, entity: str | None = None,
                    entity_id: str | None = None, page: int = 1, limit: int = 50):
    q = db.query(AuditLog)
    if admin_id:
        q = q.filter(AuditLog.admin_id == admin_id)
    if entity:
        q = q.filter(AuditLog.entity == entity)
    if entity_id:
        q = q.filter(AuditLog.entity_id == entity_id)
    total = q.count()
    logs = q.order_by(AuditLog.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return logs, {"page": page, "limit": limit, "total": total, "totalPages": math.ceil(total / limit)}


def audit_out(log: AuditLog) -> dict:
    return {
        "id": log.id,
        "action": log.action,
        "entity": log.entity,
        "entityId": log.entity_id,
        "changes": json.loads(log.changes_json) if log.changes_json else None,
        "ipAddress": log.ip_address,
        "userAgent": log.user_agent,
        "createdAt": log.created_at.isoformat() if log.created_at else None,
        "admin": {"id": log.admin.id, "name": log.admin.name, "email": log.admin.email} if log.admin else None,
    }
