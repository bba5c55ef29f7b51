from sqlalchemy import String, Integer, Boolean, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from resort.db.session import Base

class Pricing(Base):
    """Legacy resort-wide price per visit type."""
    __tablename__ = "pricing"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    visit_type: Mapped[str] = mapped_column(String(20), unique=True)
    total_price: Mapped[int] = mapped_column(Integer, default=0)  # SAR
    deposit_amount: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))


class ChaletPricing(Base):
    __tablename__ = "chalet_pricing"
    __table_args__ = (
        UniqueConstraint("chalet_id", "visit_type", name="uq_chalet_pricing_chalet_visit_type"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    chalet_id: Mapped[str] = mapped_column(String(36), ForeignKey("chalets.id", ondelete="CASCADE"), index=True)
    visit_type: Mapped[str] = mapped_column(String(20))
    total_price: Mapped[int] = mapped_column(Integer, default=0)
    deposit_amount: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    chalet = relationship("Chalet", lazy="joined")
