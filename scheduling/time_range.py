from dataclasses import dataclass
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime | None) -> datetime | None:
    """Приводит момент времени к UTC. Наивные значения считаются уже UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class TimeRange:
    """Полуоткрытый интервал [start, end). Любая из границ может отсутствовать."""
    start: datetime | None = None
    end: datetime | None = None

    def __post_init__(self):
        object.__setattr__(self, "start", to_utc(self.start))
        object.__setattr__(self, "end", to_utc(self.end))

    @property
    def is_scheduled(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def is_ordered(self) -> bool:
        return self.is_scheduled and self.start < self.end

    def overlaps(self, other: "TimeRange") -> bool:
        """Общие концы не считаются пересечением."""
        if not (self.is_scheduled and other.is_scheduled):
            return False
        return self.start < other.end and self.end > other.start

    def contains_range(self, other: "TimeRange") -> bool:
        if not (self.is_scheduled and other.is_scheduled):
            return False
        return self.start <= other.start and other.end <= self.end

    def is_active_at(self, instant: datetime) -> bool:
        """Окно активности слота включает обе границы. Без времени слот активен всегда."""
        if not self.is_scheduled:
            return True
        instant = to_utc(instant)
        return self.start <= instant <= self.end


@dataclass(frozen=True)
class SiblingRange:
    id: int
    range: TimeRange
