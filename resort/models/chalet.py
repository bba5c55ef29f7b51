from sqlalchemy import String, Integer, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import datetime, timezone
from resort.db.session import Base

class Chalet(Base):
    __tablename__ = "chalets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name_ar: Mapped[str] = mapped_column(String(100))
    name_en: Mapped[str] = mapped_column(String(100))
    slug: Mapped[str] = mapped_column(String(80), unique=True, index=True)
    max_guests: Mapped[int] = mapped_column(Integer, default=4)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    images = relationship(
        "ChaletImage",
        order_by="ChaletImage.sort_order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ChaletImage(Base):
    __tablename__ = "chalet_images"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    chalet_id: Mapped[str] = mapped_column(String(36), ForeignKey("chalets.id", ondelete="CASCADE"), index=True)
    url: Mapped[str] = mapped_column(String(1000))
    caption: Mapped[str | None] = mapped_column(String(200), nullable=True)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
