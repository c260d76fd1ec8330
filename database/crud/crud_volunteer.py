from datetime import datetime
from typing import Iterable
from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from ..models import SlotVolunteer, Volunteer

async def find_volunteer_by_email(session: AsyncSession, email: str) -> Volunteer | None:
    """Ищет волонтера по email. Email должен быть уже нормализован."""
    result = await session.execute(select(Volunteer).filter_by(email=email))
    return result.scalar_one_or_none()

async def upsert_volunteer(session: AsyncSession, email: str, name: str | None = None) -> Volunteer:
    """Получает волонтера или создает нового. Имя существующего не меняется."""
    volunteer = await find_volunteer_by_email(session, email)
    if volunteer is not None:
        return volunteer

    volunteer = Volunteer(email=email, name=name or None)
    try:
        # Откатывается только эта вставка, остальные объекты сессии не трогаются
        async with session.begin_nested():
            session.add(volunteer)
    except IntegrityError:
        # Параллельный запрос успел создать такого же волонтера
        volunteer = await find_volunteer_by_email(session, email)
        if volunteer is None:
            raise
        return volunteer
    await session.commit()
    await session.refresh(volunteer)
    return volunteer

async def find_membership(session: AsyncSession, slot_id: int, volunteer_id: int) -> SlotVolunteer | None:
    result = await session.execute(
        select(SlotVolunteer)
        .filter_by(slot_id=slot_id, volunteer_id=volunteer_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()

async def create_membership(
    session: AsyncSession, slot_id: int, volunteer_id: int, name: str | None = None
) -> SlotVolunteer:
    """Записывает волонтера на слот. Повторный вызов не сбрасывает отметку о приходе."""
    membership = await find_membership(session, slot_id, volunteer_id)
    if membership is not None:
        if name and membership.name != name:
            membership.name = name
            await session.commit()
        return membership

    membership = SlotVolunteer(slot_id=slot_id, volunteer_id=volunteer_id, name=name or None)
    try:
        async with session.begin_nested():
            session.add(membership)
    except IntegrityError:
        membership = await find_membership(session, slot_id, volunteer_id)
        if membership is None:
            raise
        return membership
    await session.commit()
    await session.refresh(membership)
    return membership

async def remove_unchecked_memberships(
    session: AsyncSession, slot_id: int, keep_volunteer_ids: Iterable[int]
) -> int:
    """Удаляет записи на слот, которых нет в списке. Отметившихся не трогает."""
    query = delete(SlotVolunteer).where(
        SlotVolunteer.slot_id == slot_id,
        SlotVolunteer.checked_in.is_(False),
    )
    keep = list(keep_volunteer_ids)
    if keep:
        query = query.where(SlotVolunteer.volunteer_id.not_in(keep))
    result = await session.execute(query)
    await session.commit()
    return result.rowcount

async def conditional_mark_checked_in(
    session: AsyncSession, slot_id: int, volunteer_id: int, now: datetime
) -> bool:
    """Отмечает приход одним условным UPDATE.

    True, если отметку поставил именно этот вызов; False, если волонтер уже отмечен.
    """
    query = (
        update(SlotVolunteer)
        .where(
            SlotVolunteer.slot_id == slot_id,
            SlotVolunteer.volunteer_id == volunteer_id,
            SlotVolunteer.checked_in.is_(False),
        )
        .values(checked_in=True, check_in_time=now)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(query)
    await session.commit()
    return result.rowcount == 1

async def update_volunteer_name(session: AsyncSession, volunteer_id: int, name: str) -> None:
    await session.execute(
        update(Volunteer)
        .where(Volunteer.id == volunteer_id)
        .values(name=name)
        .execution_options(synchronize_session=False)
    )
    await session.commit()
