from .errors import RuleViolation, SchedulingError, StorageFailure
from .overlap_validator import validate_range
from .time_range import SiblingRange, TimeRange, to_utc, utcnow

__all__ = [
    "RuleViolation",
    "SchedulingError",
    "SiblingRange",
    "StorageFailure",
    "TimeRange",
    "to_utc",
    "utcnow",
    "validate_range",
]
