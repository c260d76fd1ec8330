import logging

import disnake
from disnake.ext import commands

from database.session import async_session_maker
from database.crud import crud_event, crud_position, crud_slot, crud_user
from scheduling.errors import RuleViolation, StorageFailure, storage_errors
from scheduling.overlap_validator import END_BEFORE_START
from ._common import format_slots_embed, format_time, parse_datetime, send_failure

logger = logging.getLogger(__name__)

DATETIME_HINT = "Use 'HH:MM DD.MM', 'HH:MM DD.MM.YYYY' or 'YYYY-MM-DD HH:MM'."


async def ensure_organizer(session, inter: disnake.ApplicationCommandInteraction) -> bool:
    user = await crud_user.get_or_create_user(session, inter.author.id, inter.author.name)
    if not user.can_organize:
        await inter.followup.send("You are not allowed to organize events.", ephemeral=True)
        return False
    return True


class EventCog(commands.Cog):
    """События и позиции. Обычный CRUD без логики расписания."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.slash_command(name="event", description="Manage volunteer events")
    async def event(self, inter: disnake.ApplicationCommandInteraction):
        pass

    @event.sub_command(name="create", description="Create a new event")
    async def create_event(
        self,
        inter: disnake.ApplicationCommandInteraction,
        title: str = commands.Param(description="Event title"),
    ):
        await inter.response.defer(ephemeral=True)
        try:
            async with async_session_maker() as session:
                with storage_errors("event create"):
                    if not await ensure_organizer(session, inter):
                        return
                    new_event = await crud_event.create_event(session, inter.guild.id, inter.author.id, title)
        except StorageFailure as exc:
            await send_failure(inter, exc)
            return

        logger.info("Event %s created by %s", new_event.id, inter.author.id)
        await inter.followup.send(f"✅ Event **{title}** created (ID: {new_event.id}).", ephemeral=True)

    @event.sub_command(name="list", description="Show events on this server")
    async def list_events(self, inter: disnake.ApplicationCommandInteraction):
        await inter.response.defer(ephemeral=True)
        try:
            async with async_session_maker() as session:
                with storage_errors("event list"):
                    events = await crud_event.get_events_for_guild(session, inter.guild.id)
        except StorageFailure as exc:
            await send_failure(inter, exc)
            return

        if not events:
            await inter.followup.send("There are no events on this server yet.", ephemeral=True)
            return

        embed = disnake.Embed(title="📋 Events", color=disnake.Color.blurple())
        for e in events[:25]:
            embed.add_field(
                name=f"🔹 {e.title}",
                value=f"ID: {e.id} · positions: {len(e.positions)} · organizer: <@{e.owner_id}>",
                inline=False,
            )
        await inter.followup.send(embed=embed, ephemeral=True)

    @commands.slash_command(name="position", description="Manage event positions")
    async def position(self, inter: disnake.ApplicationCommandInteraction):
        pass

    @position.sub_command(name="create", description="Add a position to an event")
    async def create_position(
        self,
        inter: disnake.ApplicationCommandInteraction,
        event_id: int = commands.Param(description="Event ID"),
        name: str = commands.Param(description="Position name"),
        start: str = commands.Param(description="Start time, e.g. '09:00 21.10.2026'"),
        end: str = commands.Param(description="End time, e.g. '17:00 21.10.2026'"),
        volunteers_needed: int = commands.Param(default=1, ge=1, description="How many volunteers are needed"),
    ):
        await inter.response.defer(ephemeral=True)
        start_time, end_time = parse_datetime(start), parse_datetime(end)
        if not start_time or not end_time:
            await inter.followup.send(f"Invalid date/time format. {DATETIME_HINT}", ephemeral=True)
            return
        if end_time <= start_time:
            await inter.followup.send(f"❌ {END_BEFORE_START}", ephemeral=True)
            return

        try:
            async with async_session_maker() as session:
                with storage_errors("position create"):
                    if not await ensure_organizer(session, inter):
                        return
                    if await crud_event.get_event_by_id(session, event_id) is None:
                        raise RuleViolation("Event not found")
                    position = await crud_position.create_position(
                        session, event_id, name, start_time, end_time, volunteers_needed
                    )
        except (RuleViolation, StorageFailure) as exc:
            await send_failure(inter, exc)
            return

        await inter.followup.send(
            f"✅ Position **{name}** created (ID: {position.id}): "
            f"{format_time(position.start_time)} – {format_time(position.end_time)}.",
            ephemeral=True,
        )

    @position.sub_command(name="list", description="Show positions of an event")
    async def list_positions(
        self,
        inter: disnake.ApplicationCommandInteraction,
        event_id: int = commands.Param(description="Event ID"),
    ):
        await inter.response.defer(ephemeral=True)
        try:
            async with async_session_maker() as session:
                with storage_errors("position list"):
                    positions = await crud_position.get_positions_for_event(session, event_id)
        except StorageFailure as exc:
            await send_failure(inter, exc)
            return

        if not positions:
            await inter.followup.send("This event has no positions.", ephemeral=True)
            return

        lines = [
            f"`{p.id}` **{p.name}** · {format_time(p.start_time)} – {format_time(p.end_time)} · "
            f"needed: {p.volunteers_needed}"
            for p in positions
        ]
        await inter.followup.send("\n".join(lines), ephemeral=True)

    @position.sub_command(name="slots", description="Show slots and roster of a position")
    async def show_slots(
        self,
        inter: disnake.ApplicationCommandInteraction,
        position_id: int = commands.Param(description="Position ID"),
    ):
        await inter.response.defer(ephemeral=True)
        try:
            async with async_session_maker() as session:
                with storage_errors("slot list"):
                    position = await crud_position.get_position_by_id(session, position_id)
                    if position is None:
                        raise RuleViolation("Position not found")
                    slots = list(await crud_slot.list_slots(session, position_id))
        except (RuleViolation, StorageFailure) as exc:
            await send_failure(inter, exc)
            return

        await inter.followup.send(embed=format_slots_embed(position, slots), ephemeral=True)

    @position.sub_command(name="delete", description="Delete a position with all its slots")
    async def delete_position(
        self,
        inter: disnake.ApplicationCommandInteraction,
        position_id: int = commands.Param(description="Position ID"),
    ):
        await inter.response.defer(ephemeral=True)
        try:
            async with async_session_maker() as session:
                with storage_errors("position delete"):
                    if not await ensure_organizer(session, inter):
                        return
                    success = await crud_position.delete_position(session, position_id)
        except StorageFailure as exc:
            await send_failure(inter, exc)
            return

        if success:
            await inter.followup.send(f"🗑️ Position `{position_id}` was deleted.", ephemeral=True)
        else:
            await inter.followup.send(f"❓ Position `{position_id}` not found.", ephemeral=True)


def setup(bot: commands.Bot):
    bot.add_cog(EventCog(bot))
