from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column
from resort.db.session import Base

class BookingCounter(Base):
    __tablename__ = "booking_counters"

    year: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    last_seq: Mapped[int] = mapped_column(Integer, default=0)
