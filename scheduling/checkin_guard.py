"""
Отметка волонтеров о приходе.

Запись на слот проходит состояния NOT_REGISTERED -> REGISTERED -> CHECKED_IN.
Последнее конечно: вернуться из него нельзя. Единственная защита от двойной
отметки при параллельных запросах - условный UPDATE в хранилище, который
срабатывает только для строки с checked_in = false.
"""

import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from database.crud import crud_slot, crud_volunteer
from database.models import Slot, SlotVolunteer
from .errors import RuleViolation, storage_errors
from .roster import normalize_email
from .time_range import to_utc, utcnow

logger = logging.getLogger(__name__)

INVALID_SLOT = "Invalid slot"
NO_ACTIVE_SLOT = "No active time slot found for check-in."
NOT_REGISTERED = "No registration found for this email address"
ALREADY_CHECKED_IN = "You have already checked in for this slot"


def pick_active_slot(slots, now: datetime) -> Slot | None:
    """Выбирает слот, активный в момент now.

    Среди слотов со временем побеждает начавшийся позже всех: на стыке
    двух слотов отмечаемся в следующем. Если таких нет, берется самый
    старый слот без времени.
    """
    now = to_utc(now)
    timed = [s for s in slots if s.time_range.is_scheduled and s.time_range.is_active_at(now)]
    if timed:
        return max(timed, key=lambda s: to_utc(s.start_time))
    unscheduled = [s for s in slots if not s.time_range.is_scheduled]
    if unscheduled:
        return min(unscheduled, key=lambda s: (to_utc(s.created_at), s.id))
    return None


async def resolve_active_slot(
    session: AsyncSession,
    position_id: int,
    explicit_slot_id: int | None = None,
    now: datetime | None = None,
) -> Slot:
    """Находит слот для отметки: явно указанный или активный сейчас."""
    with storage_errors("active slot lookup"):
        if explicit_slot_id is not None:
            slot = await crud_slot.get_slot_by_id(session, explicit_slot_id)
            if slot is None or slot.position_id != position_id:
                raise RuleViolation(INVALID_SLOT)
            return slot

        slots = await crud_slot.list_slots(session, position_id)

    slot = pick_active_slot(slots, now or utcnow())
    if slot is None:
        raise RuleViolation(NO_ACTIVE_SLOT)
    return slot


async def check_in(
    session: AsyncSession,
    slot_id: int,
    email: str,
    name: str | None = None,
    now: datetime | None = None,
) -> SlotVolunteer:
    """Отмечает приход волонтера на слот.

    Повторять вызов после сбоя нельзя вслепую: повтор может вернуть
    "уже отмечен", и это ожидаемое поведение.

    Raises:
        RuleViolation: слот не найден, волонтер не записан или уже отмечен.
        StorageFailure: хранилище не ответило. Если сбой случился при
            обновлении имени, отметка уже сохранена.
    """
    now = to_utc(now) if now else utcnow()
    email = normalize_email(email)

    with storage_errors("check-in"):
        slot = await crud_slot.get_slot_by_id(session, slot_id)
        if slot is None:
            raise RuleViolation(INVALID_SLOT)

        volunteer = await crud_volunteer.find_volunteer_by_email(session, email)
        if volunteer is None:
            raise RuleViolation(NOT_REGISTERED)

        membership = await crud_volunteer.find_membership(session, slot_id, volunteer.id)
        if membership is None:
            raise RuleViolation(NOT_REGISTERED)
        if membership.checked_in:
            raise RuleViolation(ALREADY_CHECKED_IN)

        marked = await crud_volunteer.conditional_mark_checked_in(session, slot_id, volunteer.id, now)
        if not marked:
            logger.info("Concurrent check-in for slot %s volunteer %s lost the race", slot_id, volunteer.id)
            raise RuleViolation(ALREADY_CHECKED_IN)

    logger.info("Volunteer %s checked in for slot %s", volunteer.id, slot_id)

    name = (name or "").strip()
    if name:
        with storage_errors("volunteer name update"):
            await crud_volunteer.update_volunteer_name(session, volunteer.id, name)

    with storage_errors("check-in reload"):
        return await crud_volunteer.find_membership(session, slot_id, volunteer.id)
