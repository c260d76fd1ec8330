from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from ..base import Base

class BotRole:
    USER = "user"
    ORGANIZER = "organizer"
    ADMIN = "admin"

class User(Base):
    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    username: Mapped[str] = mapped_column(String(255))
    bot_role: Mapped[str] = mapped_column(String(50), default=BotRole.USER, server_default=BotRole.USER, nullable=False)

    # Связь: организатор может создать много событий
    events: Mapped[list["Event"]] = relationship(back_populates="owner")

    @property
    def can_organize(self) -> bool:
        return self.bot_role in (BotRole.ORGANIZER, BotRole.ADMIN)
