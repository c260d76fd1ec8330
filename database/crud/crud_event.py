from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from ..models import Event

async def create_event(session: AsyncSession, guild_id: int, owner_id: int, title: str) -> Event:
    """Создает событие."""
    new_event = Event(guild_id=guild_id, owner_id=owner_id, title=title)
    session.add(new_event)
    await session.commit()
    await session.refresh(new_event)
    return new_event

async def get_event_by_id(session: AsyncSession, event_id: int) -> Event | None:
    """Получает событие по его ID вместе с позициями."""
    result = await session.execute(select(Event).filter_by(id=event_id))
    return result.scalar_one_or_none()

async def get_events_for_guild(session: AsyncSession, guild_id: int) -> Sequence[Event]:
    """Возвращает все события сервера, новые первыми."""
    result = await session.execute(
        select(Event).where(Event.guild_id == guild_id).order_by(Event.created_at.desc())
    )
    return result.scalars().all()
