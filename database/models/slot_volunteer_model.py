from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, String, false
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..base import Base

class SlotVolunteer(Base):
    __tablename__ = "slot_volunteers"

    slot_id: Mapped[int] = mapped_column(ForeignKey("slots.id", ondelete="CASCADE"), primary_key=True)
    volunteer_id: Mapped[int] = mapped_column(ForeignKey("volunteers.id"), primary_key=True)
    checked_in: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())
    check_in_time: Mapped[datetime | None]
    name: Mapped[str | None] = mapped_column(String(255))

    slot: Mapped["Slot"] = relationship(back_populates="volunteers")
    volunteer: Mapped["Volunteer"] = relationship(back_populates="memberships", lazy="selectin")

    __table_args__ = (
        CheckConstraint(
            "(checked_in AND check_in_time IS NOT NULL) OR (NOT checked_in AND check_in_time IS NULL)",
            name="ck_check_in_time_set",
        ),
    )

    @property
    def display_name(self) -> str:
        return self.name or self.volunteer.name or self.volunteer.email
