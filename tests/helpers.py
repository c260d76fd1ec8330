from datetime import datetime, timezone


def at(hour: int, minute: int = 0, day: int = 21) -> datetime:
    """Момент времени в день тестового события, UTC."""
    return datetime(2026, 10, day, hour, minute, tzinfo=timezone.utc)
