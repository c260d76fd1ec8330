from database.crud import crud_slot
from scheduling.checkin_guard import check_in
from scheduling.roster import RosterEntry
from scheduling.slot_scheduler import upsert_slot
from scheduling.staffing import summarize_position
from scheduling.time_range import TimeRange
from tests.helpers import at


async def test_position_counts(session, position):
    morning = await upsert_slot(
        session, position.id, TimeRange(at(9), at(12)),
        [RosterEntry("a@x.com"), RosterEntry("b@x.com"), RosterEntry("c@x.com")], capacity=2,
    )
    await upsert_slot(session, position.id, TimeRange(at(12), at(15)), [RosterEntry("d@x.com")], capacity=3)
    await check_in(session, morning.id, "a@x.com", None, now=at(9, 30))

    slots = list(await crud_slot.list_slots(session, position.id))
    staffing = summarize_position(position, slots)

    assert staffing.needed == 4
    assert staffing.assigned == 4
    assert staffing.checked_in == 1
    assert staffing.is_fully_staffed

    first, second = staffing.slots
    # Вместимость не ограничивает запись
    assert (first.assigned, first.capacity, first.open_spots) == (3, 2, 0)
    assert (second.assigned, second.capacity, second.open_spots) == (1, 3, 2)


async def test_empty_position(session, position):
    staffing = summarize_position(position, [])
    assert staffing.assigned == 0
    assert not staffing.is_fully_staffed
