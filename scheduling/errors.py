import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class SchedulingError(Exception):
    """Базовая ошибка ядра расписания."""


class RuleViolation(SchedulingError):
    """Ошибка во вводе пользователя. Текст причины показывается как есть."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class StorageFailure(SchedulingError):
    """Хранилище не смогло выполнить запрос (недоступно, конфликт, мусор в ответе)."""

    def __init__(self, operation: str):
        super().__init__(f"Storage failure during {operation}")
        self.operation = operation


@contextmanager
def storage_errors(operation: str):
    """Превращает ошибки SQLAlchemy в StorageFailure. RuleViolation проходит насквозь."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Storage error during %s", operation)
        raise StorageFailure(operation) from exc
