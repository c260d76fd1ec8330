import logging
from dataclasses import dataclass
from typing import Iterable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from database.crud import crud_volunteer
from .errors import RuleViolation, storage_errors

logger = logging.getLogger(__name__)

INVALID_EMAIL = "Please enter a valid email address"


@dataclass(frozen=True)
class RosterEntry:
    email: str
    name: str | None = None


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def collapse_roster(desired: Iterable[RosterEntry | Mapping]) -> list[RosterEntry]:
    """Нормализует список волонтеров и схлопывает дубли.

    Порядок первого появления сохраняется, имя берется из последней
    записи, где оно указано. Некорректный email отклоняет весь список.
    """
    merged: dict[str, str | None] = {}
    for entry in desired:
        if isinstance(entry, Mapping):
            entry = RosterEntry(entry.get("email", ""), entry.get("name"))
        email = normalize_email(entry.email)
        if "@" not in email:
            raise RuleViolation(INVALID_EMAIL)
        name = (entry.name or "").strip() or None
        if name or email not in merged:
            merged[email] = name or merged.get(email)
    return [RosterEntry(email, name) for email, name in merged.items()]


async def reconcile_roster(
    session: AsyncSession, slot_id: int, desired: Iterable[RosterEntry | Mapping]
) -> None:
    """Приводит состав слота к переданному списку.

    Записи, которых нет в списке, удаляются, если волонтер еще не
    отметился. Отметки о приходе никогда не теряются.
    """
    entries = collapse_roster(desired)

    with storage_errors("roster reconciliation"):
        keep_ids = []
        for entry in entries:
            volunteer = await crud_volunteer.upsert_volunteer(session, entry.email, entry.name)
            await crud_volunteer.create_membership(session, slot_id, volunteer.id, entry.name)
            keep_ids.append(volunteer.id)

        removed = await crud_volunteer.remove_unchecked_memberships(session, slot_id, keep_ids)

    logger.info(
        "Roster for slot %s reconciled: %d assigned, %d removed", slot_id, len(keep_ids), removed
    )
