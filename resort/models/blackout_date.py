from sqlalchemy import String, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
import datetime as dt
from datetime import datetime, timezone
from resort.db.session import Base

class BlackoutDate(Base):
    __tablename__ = "blackout_dates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    date: Mapped[dt.date] = mapped_column(Date, index=True)
    visit_type: Mapped[str | None] = mapped_column(String(20), nullable=True)  # null blocks both visit types
    chalet_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("chalets.id", ondelete="CASCADE"), nullable=True, index=True)  # null = global
    reason: Mapped[str | None] = mapped_column(String(200), nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    chalet = relationship("Chalet", lazy="joined")
