import logging
from typing import Iterable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from database.crud import crud_position, crud_slot
from database.models import Slot
from .errors import RuleViolation, storage_errors
from .overlap_validator import validate_range
from .roster import RosterEntry, collapse_roster, reconcile_roster
from .time_range import SiblingRange, TimeRange

logger = logging.getLogger(__name__)

POSITION_NOT_FOUND = "Position not found"
INVALID_SLOT = "Invalid slot"


async def upsert_slot(
    session: AsyncSession,
    position_id: int,
    candidate: TimeRange,
    volunteers: Iterable[RosterEntry | Mapping] = (),
    capacity: int = 1,
    editing_slot_id: int | None = None,
) -> Slot:
    """Создает или редактирует слот позиции и назначает ему волонтеров.

    Время проверяется по свежему списку соседних слотов прямо перед
    записью. Гонка двух одновременных созданий не исключена: оба могут
    пройти проверку. Если слот сохранен, а состав назначить не удалось,
    слот остается сохраненным.

    Raises:
        RuleViolation: время или список волонтеров некорректны.
        StorageFailure: хранилище не смогло выполнить запрос.
    """
    entries = collapse_roster(volunteers)

    with storage_errors("slot validation"):
        window = await crud_position.fetch_position_window(session, position_id)
        if window is None:
            raise RuleViolation(POSITION_NOT_FOUND)

        if editing_slot_id is not None:
            existing = await crud_slot.get_slot_by_id(session, editing_slot_id)
            if existing is None or existing.position_id != position_id:
                raise RuleViolation(INVALID_SLOT)

        siblings = await crud_slot.fetch_sibling_slots(session, position_id, exclude_id=editing_slot_id)

    reason = validate_range(
        candidate,
        window,
        [SiblingRange(s.id, s.time_range) for s in siblings],
        exclude_id=editing_slot_id,
    )
    if reason:
        logger.info("Slot for position %s rejected: %s", position_id, reason)
        raise RuleViolation(reason)

    with storage_errors("slot save"):
        slot = await crud_slot.persist_slot(
            session,
            editing_slot_id,
            position_id,
            candidate.start,
            candidate.end,
            max(1, int(capacity or 1)),
        )
    if slot is None:
        # Слот удалили между проверкой и записью
        raise RuleViolation(INVALID_SLOT)

    slot_id = slot.id
    await reconcile_roster(session, slot_id, entries)

    with storage_errors("slot reload"):
        slot = await crud_slot.get_slot_by_id(session, slot_id)

    logger.info(
        "Slot %s %s for position %s", slot_id, "updated" if editing_slot_id else "created", position_id
    )
    return slot


async def remove_slot(session: AsyncSession, slot_id: int) -> bool:
    """Удаляет слот. Его записи волонтеров удаляются вместе с ним."""
    with storage_errors("slot delete"):
        deleted = await crud_slot.delete_slot(session, slot_id)
    if deleted:
        logger.info("Slot %s deleted", slot_id)
    return deleted
