from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from scheduling.time_range import TimeRange, utcnow
from ..base import Base

class Slot(Base):
    __tablename__ = "slots"

    id: Mapped[int] = mapped_column(primary_key=True)
    position_id: Mapped[int] = mapped_column(ForeignKey("positions.id", ondelete="CASCADE"), index=True)
    # Слот без времени активен всегда
    start_time: Mapped[datetime | None]
    end_time: Mapped[datetime | None]
    capacity: Mapped[int] = mapped_column(Integer, default=1, server_default="1")
    created_at: Mapped[datetime] = mapped_column(default=utcnow)

    position: Mapped["Position"] = relationship(back_populates="slots")
    volunteers: Mapped[list["SlotVolunteer"]] = relationship(
        back_populates="slot", cascade="all, delete-orphan", lazy="selectin"
    )

    __table_args__ = (
        CheckConstraint(
            "start_time IS NULL OR end_time IS NULL OR start_time < end_time", name="ck_slot_window"
        ),
    )

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(self.start_time, self.end_time)
