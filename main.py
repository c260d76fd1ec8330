import logging
import os

import disnake
from disnake.ext import commands

from config import Config
from logger import setup_logging

setup_logging()
logger = logging.getLogger("bot")

from database.session import init_models  # noqa: E402  после настройки логов

intents = disnake.Intents.default()
intents.members = True

bot = commands.Bot(
    command_prefix="!",
    intents=intents,
    test_guilds=[Config.TEST_GUILD_ID] if Config.TEST_GUILD_ID else None, # Сервер для быстрой регистрации команд
)

@bot.event
async def on_ready():
    await init_models()
    logger.info("Bot %s is ready (disnake %s)", bot.user, disnake.__version__)

# Загружаем все файлы .py из папки cogs, кроме служебных
cogs_dir = os.path.join(os.path.dirname(__file__), "cogs")
for filename in sorted(os.listdir(cogs_dir)):
    if filename.endswith(".py") and not filename.startswith("_"):
        try:
            bot.load_extension(f"cogs.{filename[:-3]}")
            logger.info("Loaded cog %s", filename)
        except Exception:
            logger.exception("Failed to load cog %s", filename)

if __name__ == "__main__":
    bot.run(Config.DISCORD_TOKEN)
