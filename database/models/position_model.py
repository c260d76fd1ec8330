from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..base import Base

class Position(Base):
    __tablename__ = "positions"

    id: Mapped[int] = mapped_column(primary_key=True)
    event_id: Mapped[int] = mapped_column(ForeignKey("events.id", ondelete="CASCADE"))
    name: Mapped[str] = mapped_column(String(255))
    start_time: Mapped[datetime]
    end_time: Mapped[datetime]
    volunteers_needed: Mapped[int] = mapped_column(Integer, default=1, server_default="1")

    event: Mapped["Event"] = relationship(back_populates="positions")
    slots: Mapped[list["Slot"]] = relationship(
        back_populates="position", cascade="all, delete-orphan", order_by="Slot.start_time"
    )

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_position_window"),
    )
