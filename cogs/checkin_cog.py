import logging
import re

import disnake
from disnake.ext import commands

from database.session import async_session_maker
from database.crud import crud_position
from scheduling.checkin_guard import check_in, resolve_active_slot
from scheduling.errors import RuleViolation, StorageFailure, storage_errors
from ._common import format_slot_time, format_time, send_failure

logger = logging.getLogger(__name__)

FOOTER_RE = re.compile(r"Position ID: (\d+)(?: \| Slot ID: (\d+))?")


def format_footer(position_id: int, slot_id: int | None) -> str:
    footer = f"Position ID: {position_id}"
    if slot_id is not None:
        footer += f" | Slot ID: {slot_id}"
    return footer


def parse_footer(text: str) -> tuple[int, int | None] | None:
    """Достает ID позиции и слота из подписи сообщения с кнопкой."""
    match = FOOTER_RE.search(text or "")
    if not match:
        return None
    slot_id = int(match.group(2)) if match.group(2) else None
    return int(match.group(1)), slot_id


async def perform_check_in(position_id: int, slot_id: int | None, email: str, name: str) -> str:
    """Находит активный слот и отмечает волонтера. Возвращает текст для ответа."""
    async with async_session_maker() as session:
        slot = await resolve_active_slot(session, position_id, slot_id)
        await check_in(session, slot.id, email, name)
    return f"✅ Successfully checked in for {format_slot_time(slot)}! Thank you for volunteering."


class CheckInModal(disnake.ui.Modal):
    def __init__(self, position_id: int, slot_id: int | None):
        self.position_id = position_id
        self.slot_id = slot_id
        components = [
            disnake.ui.TextInput(
                label="Email",
                placeholder="The email you registered with",
                custom_id="email",
                style=disnake.TextInputStyle.short,
                max_length=320,
            ),
            disnake.ui.TextInput(
                label="Name",
                placeholder="Your name",
                custom_id="name",
                style=disnake.TextInputStyle.short,
                max_length=255,
            ),
        ]
        super().__init__(title="Volunteer check-in", components=components)

    async def callback(self, inter: disnake.ModalInteraction):
        await inter.response.defer(ephemeral=True)
        email = inter.text_values["email"]
        name = inter.text_values["name"]
        try:
            message = await perform_check_in(self.position_id, self.slot_id, email, name)
        except (RuleViolation, StorageFailure) as exc:
            await send_failure(inter, exc)
            return
        await inter.followup.send(message, ephemeral=True)


class CheckInView(disnake.ui.View):
    def __init__(self):
        super().__init__(timeout=None)

    @disnake.ui.button(label="Check in", style=disnake.ButtonStyle.success, custom_id="checkin_button")
    async def checkin_button(self, button: disnake.ui.Button, inter: disnake.MessageInteraction):
        ids = parse_footer(inter.message.embeds[0].footer.text if inter.message.embeds else "")
        if ids is None:
            await inter.response.send_message("This check-in message is broken. Ask an organizer for a new one.", ephemeral=True)
            return
        await inter.response.send_modal(CheckInModal(*ids))


class CheckInCog(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot
        self.view_added = False

    @commands.Cog.listener()
    async def on_ready(self):
        if not self.view_added:
            self.bot.add_view(CheckInView())
            self.view_added = True
            logger.info("Persistent view 'CheckInView' has been added.")

    @commands.slash_command(name="checkin", description="Volunteer check-in")
    async def checkin(self, inter: disnake.ApplicationCommandInteraction):
        pass

    @checkin.sub_command(name="post", description="Post a check-in button for a position")
    async def post(
        self,
        inter: disnake.ApplicationCommandInteraction,
        position_id: int = commands.Param(description="Position ID"),
        slot_id: int = commands.Param(default=None, description="Pin the button to one slot instead of the active one"),
    ):
        await inter.response.defer(ephemeral=True)
        try:
            async with async_session_maker() as session:
                with storage_errors("position lookup"):
                    position = await crud_position.get_position_by_id(session, position_id)
            if position is None:
                raise RuleViolation("Position not found")
        except (RuleViolation, StorageFailure) as exc:
            await send_failure(inter, exc)
            return

        embed = disnake.Embed(
            title=f"📍 Check in: {position.name}",
            description=(
                f"{format_time(position.start_time)} – {format_time(position.end_time)}\n"
                "Press the button and enter the email you were registered with."
            ),
            color=disnake.Color.green(),
        )
        embed.set_footer(text=format_footer(position.id, slot_id))
        await inter.channel.send(embed=embed, view=CheckInView())
        await inter.followup.send("Check-in message posted.", ephemeral=True)

    @checkin.sub_command(name="submit", description="Check in for your volunteer slot")
    async def submit(
        self,
        inter: disnake.ApplicationCommandInteraction,
        position_id: int = commands.Param(description="Position ID"),
        email: str = commands.Param(description="The email you registered with"),
        name: str = commands.Param(description="Your name"),
        slot_id: int = commands.Param(default=None, description="Slot ID, if you were given one"),
    ):
        await inter.response.defer(ephemeral=True)
        try:
            message = await perform_check_in(position_id, slot_id, email, name)
        except (RuleViolation, StorageFailure) as exc:
            await send_failure(inter, exc)
            return
        await inter.followup.send(message, ephemeral=True)


def setup(bot: commands.Bot):
    bot.add_cog(CheckInCog(bot))
