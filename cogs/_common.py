import datetime
import logging
import re

import disnake

from database.models import Position, Slot
from scheduling.errors import RuleViolation, StorageFailure
from scheduling.roster import RosterEntry
from scheduling.staffing import summarize_position

logger = logging.getLogger(__name__)

STORAGE_FAILURE_TEXT = "⚠️ Could not reach the database. Please try again in a moment."

# --- Разбор ввода ---

def parse_datetime(
    datetime_str: str,
    now: datetime.datetime | None = None,
    tz: datetime.tzinfo | None = None,
) -> datetime.datetime | None:
    """Парсит дату и время в момент UTC. Время без зоны считается местным (tz)."""
    datetime_str = (datetime_str or "").strip()
    now = now or datetime.datetime.now()

    try:
        # "ЧЧ:ММ ДД.ММ" - ближайшая такая дата в будущем
        if re.match(r"^\d{2}:\d{2}\s\d{2}\.\d{2}$", datetime_str):
            dt_obj = datetime.datetime.strptime(datetime_str, "%H:%M %d.%m")
            dt_obj = dt_obj.replace(year=now.year)
            if dt_obj < now:
                dt_obj = dt_obj.replace(year=now.year + 1)
        elif re.match(r"^\d{2}:\d{2}\s\d{2}\.\d{2}\.\d{4}$", datetime_str):
            dt_obj = datetime.datetime.strptime(datetime_str, "%H:%M %d.%m.%Y")
        elif re.match(r"^\d{4}-\d{2}-\d{2}[T ]\d{2}:\d{2}", datetime_str):
            dt_obj = datetime.datetime.fromisoformat(datetime_str)
        else:
            return None
    except ValueError:
        return None

    if dt_obj.tzinfo is None:
        dt_obj = dt_obj.replace(tzinfo=tz) if tz else dt_obj.astimezone()
    return dt_obj.astimezone(datetime.timezone.utc)


def parse_volunteers(volunteers_str: str | None) -> list[RosterEntry]:
    """Разбирает 'email[:имя] | email[:имя]'. Проверка email - дело ядра."""
    entries = []
    for chunk in (volunteers_str or "").split("|"):
        chunk = chunk.strip()
        if not chunk:
            continue
        email, _, name = chunk.partition(":")
        entries.append(RosterEntry(email.strip(), name.strip() or None))
    return entries


# --- Форматирование ---

def format_time(value: datetime.datetime | None) -> str:
    if value is None:
        return "—"
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return f"<t:{int(value.timestamp())}:f>"


def format_slot_time(slot: Slot) -> str:
    if not slot.time_range.is_scheduled:
        return "any time"
    return f"{format_time(slot.start_time)} – {format_time(slot.end_time)}"


def format_slots_embed(position: Position, slots: list[Slot]) -> disnake.Embed:
    """Создает Embed со слотами позиции и отметками о приходе."""
    staffing = summarize_position(position, slots)
    embed = disnake.Embed(
        title=f"🕒 {position.name}",
        description=(
            f"{format_time(position.start_time)} – {format_time(position.end_time)}\n"
            f"Volunteers: **{staffing.assigned} / {staffing.needed}** needed, "
            f"{staffing.checked_in} checked in"
        ),
        color=disnake.Color.green() if staffing.is_fully_staffed else disnake.Color.orange(),
    )

    for slot, slot_staffing in zip(slots, staffing.slots):
        lines = [f"{slot_staffing.assigned} / {slot_staffing.capacity} volunteers"]
        for member in slot.volunteers:
            mark = " ✅" if member.checked_in else ""
            lines.append(f"• {member.display_name}{mark}")
        embed.add_field(
            name=f"#{slot.id} · {format_slot_time(slot)}",
            value="\n".join(lines)[:1024],
            inline=False,
        )

    if not slots:
        embed.add_field(name="Slots", value="No slots yet.", inline=False)
    embed.set_footer(text=f"Position ID: {position.id}")
    return embed


# --- Ответы ---

async def send_failure(inter: disnake.Interaction, exc: Exception) -> None:
    """Показывает пользователю причину отказа или общее сообщение о сбое."""
    if isinstance(exc, RuleViolation):
        text = f"❌ {exc.reason}"
    elif isinstance(exc, StorageFailure):
        text = STORAGE_FAILURE_TEXT
    else:
        raise exc
    await inter.followup.send(text, ephemeral=True)
