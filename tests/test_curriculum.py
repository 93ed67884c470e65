import pytest

from flow_app.program.curriculum import all_weeks, clamp_week, get_week, phase_progress
from flow_app.program.errors import OutOfRangeError, ValidationError
from flow_app.program.models import ACTIVITY_TYPES, PHASES


def test_twelve_weeks_in_order():
    weeks = all_weeks()
    assert [w.week_number for w in weeks] == list(range(1, 13))
    for week in weeks:
        assert week.phase in PHASES
        assert week.sessions
        for session in week.sessions.values():
            assert session.activities
            assert all(a.type in ACTIVITY_TYPES for a in session.activities)


def test_variant_order_is_declared_order():
    assert get_week(10).variant_keys == ("Morning", "Afternoon", "Evening")
    assert get_week(1).variant_keys == ("Mon/Wed/Fri", "Tue/Thu")


@pytest.mark.parametrize("number", [0, 13, -1, "3", 2.0, True])
def test_get_week_out_of_range(number):
    with pytest.raises(OutOfRangeError):
        get_week(number)


def test_out_of_range_is_validation_error():
    assert issubclass(OutOfRangeError, ValidationError)


def test_sessions_are_read_only():
    week = get_week(1)
    with pytest.raises(TypeError):
        week.sessions["Sunday"] = week.sessions["Tue/Thu"]


def test_clamp_week():
    assert clamp_week(0) == 1
    assert clamp_week(7) == 7
    assert clamp_week(99) == 12


def test_phase_progress():
    assert phase_progress(2) == ("Foundation", 50.0)
    assert phase_progress(8) == ("Integration", 100.0)
    assert phase_progress(9) == ("Mastery", 25.0)
