from typer.testing import CliRunner

from flow_app.main import app

runner = CliRunner()


def _invoke(tmp_path, *args):
    return runner.invoke(app, ["--home", str(tmp_path), *args], env={"COLUMNS": "200"})


def test_weeks_lists_program(tmp_path):
    result = _invoke(tmp_path, "weeks")
    assert result.exit_code == 0, result.output
    assert "Activation & Awareness" in result.output
    assert "Graduation & Beyond" in result.output


def test_week_navigation_persists(tmp_path):
    assert _invoke(tmp_path, "week", "5").exit_code == 0
    result = _invoke(tmp_path, "next-week")
    assert "Current week: 6" in result.output
    result = _invoke(tmp_path, "progress")
    assert "Integration" in result.output


def test_week_out_of_range_is_clamped(tmp_path):
    result = _invoke(tmp_path, "week", "40")
    assert result.exit_code == 0
    assert "Current week: 12" in result.output


def test_set_and_show_settings(tmp_path):
    result = _invoke(tmp_path, "set", "reminder_time", "07:45")
    assert result.exit_code == 0, result.output
    result = _invoke(tmp_path, "settings")
    assert "07:45" in result.output


def test_set_rejects_invalid_time(tmp_path):
    result = _invoke(tmp_path, "set", "reminder_time", "25:00")
    assert result.exit_code == 1
    assert "out of range" in result.output


def test_today_shows_session(tmp_path):
    result = _invoke(tmp_path, "today")
    assert result.exit_code == 0, result.output
    assert "Week 1" in result.output


def test_reset_settings_with_yes(tmp_path):
    _invoke(tmp_path, "set", "skip_complex", "true")
    result = _invoke(tmp_path, "reset-settings", "--yes")
    assert result.exit_code == 0
    assert "skip_complex" in _invoke(tmp_path, "settings").output
    assert "True" not in _invoke(tmp_path, "settings").output.split("skip_complex")[1].splitlines()[0]


def test_name_command_updates_profile(tmp_path):
    result = _invoke(tmp_path, "name", "Robin")
    assert result.exit_code == 0, result.output
    assert "Robin" in _invoke(tmp_path, "progress").output


def test_name_command_rejects_blank(tmp_path):
    result = _invoke(tmp_path, "name", "   ")
    assert result.exit_code == 1


def test_set_rejects_unrecognised_flag(tmp_path):
    assert _invoke(tmp_path, "set", "notifications", "false").exit_code == 0
    result = _invoke(tmp_path, "set", "notifications", "maybe")
    assert result.exit_code == 1
    assert "expects true or false" in result.output
    settings = _invoke(tmp_path, "settings").output
    assert "False" in settings.split("notifications")[1].splitlines()[0]
