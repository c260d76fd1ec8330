import disnake
from disnake.ext import commands

from database.session import async_session_maker
from database.crud import crud_position, crud_slot
from scheduling.errors import RuleViolation, StorageFailure, storage_errors
from scheduling.roster import RosterEntry
from scheduling.slot_scheduler import remove_slot, upsert_slot
from scheduling.time_range import TimeRange
from .event_cog import DATETIME_HINT, ensure_organizer
from ._common import format_slots_embed, parse_datetime, parse_volunteers, send_failure


HALF_RANGE = "Set both start and end, or leave both empty"


def require_both_ends(candidate: TimeRange) -> None:
    if (candidate.start is None) != (candidate.end is None):
        raise RuleViolation(HALF_RANGE)


def parse_optional_range(start: str | None, end: str | None) -> TimeRange | None:
    """Пустые start и end дают слот без времени. None - если формат неверный."""
    start_time = parse_datetime(start) if start else None
    end_time = parse_datetime(end) if end else None
    if (start and not start_time) or (end and not end_time):
        return None
    return TimeRange(start_time, end_time)


class SlotCog(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.slash_command(name="slot", description="Manage position time slots")
    async def slot(self, inter: disnake.ApplicationCommandInteraction):
        pass

    async def _save(self, inter, position_id, candidate, volunteers, capacity, editing_slot_id=None):
        async with async_session_maker() as session:
            with storage_errors("organizer check"):
                if not await ensure_organizer(session, inter):
                    return
            await upsert_slot(
                session, position_id, candidate, volunteers, capacity, editing_slot_id=editing_slot_id
            )
            # Перечитываем все слоты заново, а не правим список в памяти
            with storage_errors("slot list"):
                position = await crud_position.get_position_by_id(session, position_id)
                slots = list(await crud_slot.list_slots(session, position_id))

        verb = "updated" if editing_slot_id else "created"
        await inter.followup.send(f"✅ Slot {verb}.", embed=format_slots_embed(position, slots), ephemeral=True)

    @slot.sub_command(name="create", description="Add a time slot to a position")
    async def create(
        self,
        inter: disnake.ApplicationCommandInteraction,
        position_id: int = commands.Param(description="Position ID"),
        start: str = commands.Param(default=None, description="Slot start; leave empty for an always-open slot"),
        end: str = commands.Param(default=None, description="Slot end; leave empty for an always-open slot"),
        capacity: int = commands.Param(default=1, ge=1, description="How many volunteers the slot holds"),
        volunteers: str = commands.Param(default=None, description="Volunteers: 'email[:name] | email[:name]'"),
    ):
        await inter.response.defer(ephemeral=True)
        candidate = parse_optional_range(start, end)
        if candidate is None:
            await inter.followup.send(f"Invalid date/time format. {DATETIME_HINT}", ephemeral=True)
            return

        try:
            require_both_ends(candidate)
            await self._save(inter, position_id, candidate, parse_volunteers(volunteers), capacity)
        except (RuleViolation, StorageFailure) as exc:
            await send_failure(inter, exc)

    @slot.sub_command(name="edit", description="Change a slot's time, capacity or volunteers")
    async def edit(
        self,
        inter: disnake.ApplicationCommandInteraction,
        slot_id: int = commands.Param(description="Slot ID"),
        start: str = commands.Param(default=None, description="New start; empty keeps the current one"),
        end: str = commands.Param(default=None, description="New end; empty keeps the current one"),
        capacity: int = commands.Param(default=None, ge=1, description="New capacity"),
        volunteers: str = commands.Param(default=None, description="Full new volunteer list; empty keeps the current one"),
    ):
        await inter.response.defer(ephemeral=True)
        try:
            async with async_session_maker() as session:
                with storage_errors("slot lookup"):
                    existing = await crud_slot.get_slot_by_id(session, slot_id)
            if existing is None:
                raise RuleViolation("Invalid slot")

            candidate = parse_optional_range(start, end)
            if candidate is None:
                await inter.followup.send(f"Invalid date/time format. {DATETIME_HINT}", ephemeral=True)
                return
            candidate = TimeRange(
                candidate.start if start else existing.start_time,
                candidate.end if end else existing.end_time,
            )
            require_both_ends(candidate)

            if volunteers is None:
                roster = [RosterEntry(m.volunteer.email, m.name) for m in existing.volunteers]
            else:
                roster = parse_volunteers(volunteers)

            await self._save(
                inter, existing.position_id, candidate, roster,
                capacity or existing.capacity, editing_slot_id=slot_id,
            )
        except (RuleViolation, StorageFailure) as exc:
            await send_failure(inter, exc)

    @slot.sub_command(name="delete", description="Delete a slot and its roster")
    async def delete(
        self,
        inter: disnake.ApplicationCommandInteraction,
        slot_id: int = commands.Param(description="Slot ID"),
    ):
        await inter.response.defer(ephemeral=True)
        try:
            async with async_session_maker() as session:
                with storage_errors("organizer check"):
                    if not await ensure_organizer(session, inter):
                        return
                success = await remove_slot(session, slot_id)
        except StorageFailure as exc:
            await send_failure(inter, exc)
            return

        if success:
            await inter.followup.send(f"🗑️ Slot `{slot_id}` was deleted.", ephemeral=True)
        else:
            await inter.followup.send(f"❓ Slot `{slot_id}` not found.", ephemeral=True)


def setup(bot: commands.Bot):
    bot.add_cog(SlotCog(bot))
