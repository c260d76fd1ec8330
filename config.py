import os
from dotenv import load_dotenv

load_dotenv()


def _optional_int(name: str) -> int | None:
    value = os.getenv(name)
    return int(value) if value else None


class Config:
    DISCORD_TOKEN = os.getenv("DISCORD_TOKEN")
    TEST_GUILD_ID = _optional_int("TEST_GUILD_ID")
    DATABASE_URL = os.getenv("DATABASE_URL")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE = os.getenv("LOG_FILE")
