from sqlalchemy import String, DateTime, Boolean, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone
from resort.db.session import Base

class OtpCode(Base):
    __tablename__ = "otp_codes"
    __table_args__ = (
        UniqueConstraint("purpose", "subject_key", name="uq_otp_purpose_subject"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    purpose: Mapped[str] = mapped_column(String(20))  # PHONE_VERIFY, BOOKING_CANCEL
    subject_key: Mapped[str] = mapped_column(String(40))  # phone or booking ref
    code: Mapped[str] = mapped_column(String(6))
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    verified: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
