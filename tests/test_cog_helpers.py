from datetime import datetime, timedelta, timezone

import pytest

from cogs._common import parse_datetime, parse_volunteers
from cogs.checkin_cog import format_footer, parse_footer
from cogs.slot_cog import HALF_RANGE, parse_optional_range, require_both_ends
from scheduling.errors import RuleViolation
from scheduling.roster import RosterEntry
from scheduling.time_range import TimeRange
from tests.helpers import at

NOW = datetime(2026, 10, 19, 12, 0)


class TestParseDatetime:
    def test_full_date(self):
        assert parse_datetime("09:00 21.10.2026", tz=timezone.utc) == at(9)

    def test_short_date_rolls_to_next_year_when_passed(self):
        assert parse_datetime("09:00 21.10", now=NOW, tz=timezone.utc) == at(9)
        assert parse_datetime("09:00 01.01", now=NOW, tz=timezone.utc) == datetime(2027, 1, 1, 9, tzinfo=timezone.utc)

    def test_local_time_is_converted_to_utc(self):
        plus_three = timezone(timedelta(hours=3))
        assert parse_datetime("12:00 21.10.2026", tz=plus_three) == at(9)

    def test_iso_with_offset(self):
        assert parse_datetime("2026-10-21T11:00+02:00") == at(9)

    @pytest.mark.parametrize("value", ["", "tomorrow", "25:00 21.10.2026", "09:00 32.10.2026"])
    def test_invalid(self, value):
        assert parse_datetime(value, tz=timezone.utc) is None


class TestParseVolunteers:
    def test_emails_with_optional_names(self):
        assert parse_volunteers("a@x.com:Ann | b@x.com |  | c@x.com: ") == [
            RosterEntry("a@x.com", "Ann"),
            RosterEntry("b@x.com", None),
            RosterEntry("c@x.com", None),
        ]

    def test_empty(self):
        assert parse_volunteers(None) == []


class TestParseOptionalRange:
    def test_empty_means_unscheduled(self):
        r = parse_optional_range(None, None)
        assert r is not None and not r.is_scheduled

    def test_bad_format(self):
        assert parse_optional_range("soon", None) is None

    @pytest.mark.parametrize("start, end", [("09:00 21.10.2026", None), (None, "12:00 21.10.2026")])
    def test_single_end_is_rejected(self, start, end):
        candidate = parse_optional_range(start, end)
        with pytest.raises(RuleViolation) as exc_info:
            require_both_ends(candidate)
        assert exc_info.value.reason == HALF_RANGE

    def test_both_or_neither_end_is_accepted(self):
        require_both_ends(TimeRange())
        require_both_ends(TimeRange(at(9), at(12)))


class TestFooter:
    def test_round_trip_with_and_without_slot(self):
        assert parse_footer(format_footer(3, None)) == (3, None)
        assert parse_footer(format_footer(3, 7)) == (3, 7)

    def test_garbage(self):
        assert parse_footer("Event ID: 5") is None
