from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class SlotStaffing:
    slot_id: int
    capacity: int
    assigned: int
    checked_in: int

    @property
    def open_spots(self) -> int:
        # Вместимость справочная: перебор не запрещен, просто открытых мест 0
        return max(0, self.capacity - self.assigned)


@dataclass(frozen=True)
class PositionStaffing:
    position_id: int
    needed: int
    assigned: int
    checked_in: int
    slots: tuple[SlotStaffing, ...]

    @property
    def is_fully_staffed(self) -> bool:
        return self.assigned >= self.needed


def summarize_slot(slot) -> SlotStaffing:
    return SlotStaffing(
        slot_id=slot.id,
        capacity=slot.capacity,
        assigned=len(slot.volunteers),
        checked_in=sum(1 for v in slot.volunteers if v.checked_in),
    )


def summarize_position(position, slots: Iterable) -> PositionStaffing:
    per_slot = tuple(summarize_slot(s) for s in slots)
    return PositionStaffing(
        position_id=position.id,
        needed=position.volunteers_needed,
        assigned=sum(s.assigned for s in per_slot),
        checked_in=sum(s.checked_in for s in per_slot),
        slots=per_slot,
    )
