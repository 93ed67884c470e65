from datetime import date, datetime, timedelta

import pytest

from flow_app.program.curriculum import all_weeks, get_week
from flow_app.program.selector import is_rest_day, select_variant, time_of_day, weekday_name

MONDAY = date(2026, 10, 19)


def test_every_week_and_weekday_resolves_to_existing_key():
    for week in all_weeks():
        for offset in range(7):
            day = MONDAY + timedelta(days=offset)
            assert select_variant(week, day) in week.sessions


@pytest.mark.parametrize(
    "offset, expected",
    [
        (0, "Mon/Wed/Fri"),
        (1, "Tue/Thu/Sat"),
        (2, "Mon/Wed/Fri"),
        (3, "Tue/Thu/Sat"),
        (4, "Mon/Wed/Fri"),
        (5, "Tue/Thu/Sat"),
        (6, "Mon/Wed/Fri"),
    ],
)
def test_week_two_variants(offset, expected):
    assert select_variant(get_week(2), MONDAY + timedelta(days=offset)) == expected


def test_saturday_matches_combined_label():
    saturday = MONDAY + timedelta(days=5)
    assert select_variant(get_week(6), saturday) == "Mon/Wed/Fri/Sat"


def test_saturday_without_match_falls_back_to_first():
    saturday = MONDAY + timedelta(days=5)
    assert select_variant(get_week(1), saturday) == "Mon/Wed/Fri"


def test_free_text_labels_fall_back_to_first():
    assert select_variant(get_week(7), MONDAY) == "High Energy Days"
    assert select_variant(get_week(10), MONDAY + timedelta(days=1)) == "Morning"


def test_sunday_selection_is_independent_of_rest_day():
    sunday = MONDAY + timedelta(days=6)
    assert is_rest_day(sunday)
    assert not is_rest_day(MONDAY)
    assert select_variant(get_week(3), sunday) == "Mon/Wed/Fri"
    assert weekday_name(sunday) == "Sunday"


def test_time_of_day():
    assert time_of_day(datetime(2026, 1, 1, 11, 59)) == "morning"
    assert time_of_day(datetime(2026, 1, 1, 12, 0)) == "afternoon"
    assert time_of_day(datetime(2026, 1, 1, 17, 0)) == "evening"
