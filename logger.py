"""
Настройка логирования для бота.

Консольный вывод с цветными уровнями и, если задан LOG_FILE,
файл с ротацией.
"""

import logging
import logging.handlers
import sys

from config import Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class ColoredFormatter(logging.Formatter):
    """Форматтер с цветом уровня логирования."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record):
        color = self.COLORS.get(record.levelname)
        if not color:
            return super().format(record)
        original = record.levelname
        record.levelname = f"{color}{original}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def setup_logging(level: str | None = None, log_file: str | None = None) -> None:
    """Настраивает корневой логгер. Повторный вызов заменяет обработчики."""
    level = level or Config.LOG_LEVEL
    log_file = log_file or Config.LOG_FILE

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(ColoredFormatter(LOG_FORMAT))
    root.addHandler(console)

    if log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    # disnake очень разговорчив на DEBUG
    logging.getLogger("disnake").setLevel(max(root.level, logging.INFO))
