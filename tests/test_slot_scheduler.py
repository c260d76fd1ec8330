import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from database.crud import crud_slot, crud_volunteer
from scheduling.errors import RuleViolation, StorageFailure
from scheduling.overlap_validator import OVERLAPS_EXISTING, STARTS_BEFORE_POSITION
from scheduling.roster import INVALID_EMAIL, RosterEntry
from scheduling.slot_scheduler import INVALID_SLOT, POSITION_NOT_FOUND, remove_slot, upsert_slot
from scheduling.time_range import TimeRange, to_utc
from tests.helpers import at


class TestUpsertSlot:
    """Сценарий из 09:00-17:00 с правкой слотов."""

    async def test_full_scenario(self, session, position):
        slot_a = await upsert_slot(session, position.id, TimeRange(at(9), at(12)), capacity=2)
        assert to_utc(slot_a.start_time) == at(9)
        assert to_utc(slot_a.end_time) == at(12)
        assert slot_a.capacity == 2

        slot_b = await upsert_slot(session, position.id, TimeRange(at(12), at(15)))
        assert slot_b.id != slot_a.id

        with pytest.raises(RuleViolation) as exc_info:
            await upsert_slot(session, position.id, TimeRange(at(11), at(13)))
        assert exc_info.value.reason == OVERLAPS_EXISTING

        with pytest.raises(RuleViolation) as exc_info:
            await upsert_slot(session, position.id, TimeRange(at(9), at(12, 30)), editing_slot_id=slot_a.id)
        assert exc_info.value.reason == OVERLAPS_EXISTING

        with pytest.raises(RuleViolation) as exc_info:
            await upsert_slot(session, position.id, TimeRange(at(8, 30), at(12)), editing_slot_id=slot_a.id)
        assert exc_info.value.reason == STARTS_BEFORE_POSITION

        slots = await crud_slot.list_slots(session, position.id)
        assert [(to_utc(s.start_time), to_utc(s.end_time)) for s in slots] == [
            (at(9), at(12)),
            (at(12), at(15)),
        ]

    async def test_edit_does_not_conflict_with_itself(self, session, position):
        slot = await upsert_slot(session, position.id, TimeRange(at(9), at(12)))
        edited = await upsert_slot(
            session, position.id, TimeRange(at(10), at(13)), capacity=3, editing_slot_id=slot.id
        )
        assert edited.id == slot.id
        assert to_utc(edited.start_time) == at(10)
        assert edited.capacity == 3

    async def test_capacity_is_clamped_to_one(self, session, position):
        slot = await upsert_slot(session, position.id, TimeRange(at(9), at(10)), capacity=0)
        assert slot.capacity == 1

    async def test_unscheduled_slot_bypasses_overlap(self, session, position):
        await upsert_slot(session, position.id, TimeRange(at(9), at(17)))
        slot = await upsert_slot(session, position.id, TimeRange())
        assert slot.start_time is None and slot.end_time is None

    async def test_unknown_position(self, session, position):
        with pytest.raises(RuleViolation) as exc_info:
            await upsert_slot(session, position.id + 100, TimeRange(at(9), at(10)))
        assert exc_info.value.reason == POSITION_NOT_FOUND

    async def test_editing_unknown_slot(self, session, position):
        with pytest.raises(RuleViolation) as exc_info:
            await upsert_slot(session, position.id, TimeRange(at(9), at(10)), editing_slot_id=999)
        assert exc_info.value.reason == INVALID_SLOT

    async def test_assigns_roster(self, session, position):
        slot = await upsert_slot(
            session, position.id, TimeRange(at(9), at(12)),
            [RosterEntry("Ann@Example.com", "Ann"), {"email": "bob@example.com"}],
        )
        emails = sorted(m.volunteer.email for m in slot.volunteers)
        assert emails == ["ann@example.com", "bob@example.com"]

    async def test_invalid_email_rejects_before_any_write(self, session, position):
        with pytest.raises(RuleViolation) as exc_info:
            await upsert_slot(
                session, position.id, TimeRange(at(9), at(12)),
                [RosterEntry("ann@example.com"), RosterEntry("not-an-email")],
            )
        assert exc_info.value.reason == INVALID_EMAIL
        assert list(await crud_slot.list_slots(session, position.id)) == []
        assert await crud_volunteer.find_volunteer_by_email(session, "ann@example.com") is None

    async def test_slot_survives_roster_failure(self, session, position, monkeypatch):
        async def broken_upsert(*args, **kwargs):
            raise OperationalError("INSERT INTO volunteers", {}, Exception("connection lost"))

        monkeypatch.setattr(crud_volunteer, "upsert_volunteer", broken_upsert)

        with pytest.raises(StorageFailure):
            await upsert_slot(session, position.id, TimeRange(at(9), at(12)), [RosterEntry("ann@example.com")])

        slots = await crud_slot.list_slots(session, position.id)
        assert len(slots) == 1
        assert slots[0].volunteers == []

    async def test_storage_error_is_not_a_rule_violation(self, session, position, monkeypatch):
        async def broken_fetch(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(crud_slot, "fetch_sibling_slots", broken_fetch)

        with pytest.raises(StorageFailure) as exc_info:
            await upsert_slot(session, position.id, TimeRange(at(9), at(12)))
        assert not isinstance(exc_info.value, RuleViolation)
        assert isinstance(exc_info.value.__cause__, OperationalError)


class TestRemoveSlot:
    async def test_removed_slot_leaves_sibling_set(self, session, position):
        slot = await upsert_slot(session, position.id, TimeRange(at(9), at(12)), [RosterEntry("ann@example.com")])

        assert await remove_slot(session, slot.id) is True
        assert await crud_slot.get_slot_by_id(session, slot.id) is None

        volunteer = await crud_volunteer.find_volunteer_by_email(session, "ann@example.com")
        assert volunteer is not None
        assert await crud_volunteer.find_membership(session, slot.id, volunteer.id) is None

        await upsert_slot(session, position.id, TimeRange(at(10), at(11)))
        slots = await crud_slot.list_slots(session, position.id)
        assert [(to_utc(s.start_time), to_utc(s.end_time)) for s in slots] == [(at(10), at(11))]

    async def test_missing_slot(self, session, position):
        assert await remove_slot(session, 12345) is False


class TestSlotTable:
    async def test_reversed_times_are_refused_by_storage(self, session, position):
        position_id = position.id
        with pytest.raises(IntegrityError):
            await crud_slot.persist_slot(session, None, position_id, at(12), at(9), 1)
        await session.rollback()

        assert list(await crud_slot.list_slots(session, position_id)) == []

    async def test_half_specified_times_are_stored(self, session, position):
        slot = await crud_slot.persist_slot(session, None, position.id, at(9), None, 1)
        assert to_utc(slot.start_time) == at(9)
        assert slot.end_time is None
