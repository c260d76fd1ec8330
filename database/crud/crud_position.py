from datetime import datetime
from typing import Sequence
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from scheduling.time_range import TimeRange, to_utc
from ..models import Position

async def create_position(
    session: AsyncSession, event_id: int, name: str,
    start_time: datetime, end_time: datetime, volunteers_needed: int = 1
) -> Position:
    """Создает позицию с окном времени."""
    position = Position(
        event_id=event_id,
        name=name,
        start_time=to_utc(start_time),
        end_time=to_utc(end_time),
        volunteers_needed=max(1, volunteers_needed),
    )
    session.add(position)
    await session.commit()
    await session.refresh(position)
    return position

async def get_position_by_id(session: AsyncSession, position_id: int) -> Position | None:
    result = await session.execute(select(Position).filter_by(id=position_id))
    return result.scalar_one_or_none()

async def get_positions_for_event(session: AsyncSession, event_id: int) -> Sequence[Position]:
    """Возвращает позиции события по времени начала."""
    result = await session.execute(
        select(Position).where(Position.event_id == event_id).order_by(Position.start_time)
    )
    return result.scalars().all()

async def fetch_position_window(session: AsyncSession, position_id: int) -> TimeRange | None:
    """Возвращает окно позиции или None, если позиции нет."""
    result = await session.execute(
        select(Position.start_time, Position.end_time).where(Position.id == position_id)
    )
    row = result.one_or_none()
    if row is None:
        return None
    return TimeRange(row.start_time, row.end_time)

async def delete_position(session: AsyncSession, position_id: int) -> bool:
    """Удаляет позицию вместе со слотами."""
    position = await get_position_by_id(session, position_id)
    if position:
        await session.delete(position)
        await session.commit()
        return True
    return False
