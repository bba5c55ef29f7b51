from sqlalchemy import String, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from resort.db.session import Base

class AuditLog(Base):
    __tablename__ = "audit_logs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    admin_id: Mapped[str] = mapped_column(String(36), ForeignKey("admin_users.id", ondelete="RESTRICT"), index=True)  # admins are deactivated, never deleted
    action: Mapped[str] = mapped_column(String(80), index=True)  # e.g. booking.cancel
    entity: Mapped[str] = mapped_column(String(40), index=True)  # booking, blackout_date, chalet, pricing, setting, admin_user
    entity_id: Mapped[str | None] = mapped_column(String(80), index=True, nullable=True)
    changes_json: Mapped[str | None] = mapped_column(Text, nullable=True)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    admin = relationship("AdminUser", lazy="joined")
