from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from ..models import BotRole, User

async def get_user(session: AsyncSession, user_id: int) -> User | None:
    result = await session.execute(select(User).filter_by(user_id=user_id))
    return result.scalar_one_or_none()

async def get_or_create_user(session: AsyncSession, user_id: int, username: str) -> User:
    """Получает оператора бота или создает его с ролью user. Обновляет ник, если он сменился."""
    user = await get_user(session, user_id)

    if user is None:
        user = User(user_id=user_id, username=username, bot_role=BotRole.USER)
        session.add(user)
        await session.commit()
        await session.refresh(user)
    elif user.username != username:
        user.username = username
        await session.commit()

    return user

async def set_user_role(session: AsyncSession, user_id: int, username: str, role: str) -> User:
    """Выдает роль, создавая пользователя при необходимости."""
    user = await get_or_create_user(session, user_id, username)
    if user.bot_role != role:
        user.bot_role = role
        await session.commit()
    return user
