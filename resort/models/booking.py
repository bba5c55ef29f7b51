from sqlalchemy import String, Integer, Date, DateTime, Boolean, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
import datetime as dt
from datetime import datetime, timezone
from resort.db.session import Base

class Booking(Base):
    __tablename__ = "bookings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    booking_ref: Mapped[str] = mapped_column(String(20), unique=True, index=True)  # FR-2024-0001

    date: Mapped[dt.date] = mapped_column(Date, index=True)
    visit_type: Mapped[str] = mapped_column(String(20), index=True)  # DAY_VISIT, OVERNIGHT_STAY

    customer_name: Mapped[str] = mapped_column(String(100))
    customer_phone: Mapped[str] = mapped_column(String(20), index=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    guests: Mapped[int] = mapped_column(Integer, default=2)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    language: Mapped[str] = mapped_column(String(2), default="ar")  # ar|en

    status: Mapped[str] = mapped_column(String(20), default="PENDING", index=True)  # PENDING, CONFIRMED, CANCELLED, COMPLETED
    payment_status: Mapped[str] = mapped_column(String(20), default="PENDING")  # PENDING, DEPOSIT_PAID, FULLY_PAID, REFUNDED, CANCELLED
    admin_confirmed: Mapped[bool] = mapped_column(Boolean, default=False)

    chalet_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("chalets.id", ondelete="SET NULL"), nullable=True, index=True)

    cancellation_reason: Mapped[str | None] = mapped_column(String(500), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reminder_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    chalet = relationship("Chalet", lazy="joined")
