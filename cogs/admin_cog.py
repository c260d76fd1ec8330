import logging

import disnake
from disnake.ext import commands

from database.session import async_session_maker
from database.models import BotRole
from database.crud.crud_user import set_user_role

logger = logging.getLogger(__name__)


class AdminCog(commands.Cog):
    def __init__(self, bot):
        self.bot = bot

    @commands.slash_command(
        name="admin",
        description="Administrative commands"
    )
    @commands.is_owner() # Только владелец бота может использовать эти команды
    async def admin(self, inter: disnake.ApplicationCommandInteraction):
        pass

    @admin.sub_command(name="setrole", description="Give a user a bot role")
    async def set_role(
        self,
        inter: disnake.ApplicationCommandInteraction,
        user: disnake.User,
        role: str = commands.Param(choices=[BotRole.USER, BotRole.ORGANIZER, BotRole.ADMIN])
    ):
        async with async_session_maker() as session:
            await set_user_role(session, user.id, user.name, role)

        logger.info("Role %s granted to %s by %s", role, user.id, inter.author.id)
        await inter.response.send_message(
            f"{user.mention} now has the `{role}` role.",
            ephemeral=True
        )

def setup(bot):
    bot.add_cog(AdminCog(bot))
