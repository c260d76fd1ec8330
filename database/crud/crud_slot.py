from datetime import datetime
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from ..models import Slot

async def get_slot_by_id(session: AsyncSession, slot_id: int) -> Slot | None:
    """Получает слот по ID, подгружая состав."""
    result = await session.execute(
        select(Slot).filter_by(id=slot_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()

async def list_slots(session: AsyncSession, position_id: int) -> Sequence[Slot]:
    """Все слоты позиции с составом. Слоты без времени идут последними."""
    result = await session.execute(
        select(Slot)
        .where(Slot.position_id == position_id)
        .order_by(Slot.start_time.is_(None), Slot.start_time, Slot.created_at)
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()

async def fetch_sibling_slots(
    session: AsyncSession, position_id: int, exclude_id: int | None = None
) -> Sequence[Slot]:
    """Слоты позиции со временем, кроме редактируемого."""
    query = select(Slot).where(
        Slot.position_id == position_id,
        Slot.start_time.is_not(None),
        Slot.end_time.is_not(None),
    )
    if exclude_id is not None:
        query = query.where(Slot.id != exclude_id)
    result = await session.execute(query.execution_options(populate_existing=True))
    return result.scalars().all()

async def persist_slot(
    session: AsyncSession, slot_id: int | None, position_id: int,
    start_time: datetime | None, end_time: datetime | None, capacity: int
) -> Slot | None:
    """Создает слот, если slot_id не задан, иначе обновляет существующий.

    Возвращает None, если обновляемого слота нет.
    """
    if slot_id is None:
        slot = Slot(position_id=position_id)
        session.add(slot)
    else:
        slot = await get_slot_by_id(session, slot_id)
        if slot is None:
            return None
    slot.start_time = start_time
    slot.end_time = end_time
    slot.capacity = capacity
    await session.commit()
    await session.refresh(slot)
    return slot

async def delete_slot(session: AsyncSession, slot_id: int) -> bool:
    """Удаляет слот вместе с записями волонтеров."""
    slot = await get_slot_by_id(session, slot_id)
    if slot:
        await session.delete(slot)
        await session.commit()
        return True
    return False
