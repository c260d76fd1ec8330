from typing import Iterable

from .time_range import SiblingRange, TimeRange

END_BEFORE_START = "End time must be after start time"
STARTS_BEFORE_POSITION = "Start time must be after position start time"
ENDS_AFTER_POSITION = "End time must be before position end time"
OVERLAPS_EXISTING = "This time slot overlaps with an existing slot"


def validate_range(
    candidate: TimeRange,
    parent: TimeRange,
    siblings: Iterable[SiblingRange],
    exclude_id: int | None = None,
) -> str | None:
    """Проверяет время слота. Возвращает причину отказа или None, если всё в порядке.

    Слот без начала или конца не проверяется вовсе: такой слот активен
    всегда и в пересечениях не участвует.
    """
    if not candidate.is_scheduled:
        return None

    if candidate.end <= candidate.start:
        return END_BEFORE_START

    if parent.start is not None and candidate.start < parent.start:
        return STARTS_BEFORE_POSITION
    if parent.end is not None and candidate.end > parent.end:
        return ENDS_AFTER_POSITION

    for sibling in siblings:
        if exclude_id is not None and sibling.id == exclude_id:
            continue
        if candidate.overlaps(sibling.range):
            return OVERLAPS_EXISTING

    return None
