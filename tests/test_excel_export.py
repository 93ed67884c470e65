import importlib.util

import pytest

from flow_app.program.models import UserProfile

PANDAS_AVAILABLE = importlib.util.find_spec("pandas") is not None and importlib.util.find_spec("openpyxl") is not None

pytestmark = pytest.mark.skipif(not PANDAS_AVAILABLE, reason="pandas/openpyxl not installed")


def test_export_writes_sessions_weeks_and_meta(tmp_path):
    import pandas as pd

    from reports.excel_export import ProgressExporter

    profile = UserProfile(user_id="user_1", current_week=2)
    keys = {
        "week1-Mon/Wed/Fri-Mon Oct 19 2026",
        "week1-Tue/Thu-Tue Oct 20 2026",
        "week2-Tue/Thu/Sat-Sat Oct 31 2026",
        "not-a-ledger-key",
    }
    path = ProgressExporter(tmp_path / "out" / "progress.xlsx").export(profile, keys)
    assert path.exists()

    sessions = pd.read_excel(path, sheet_name="Sessions")
    assert list(sessions["Variant"]) == ["Mon/Wed/Fri", "Tue/Thu", "Tue/Thu/Sat"]

    weeks = pd.read_excel(path, sheet_name="Weeks")
    assert len(weeks) == 12
    assert list(weeks["CompletedSessions"][:3]) == [2, 1, 0]

    meta = pd.read_excel(path, sheet_name="Meta")
    assert meta.loc[0, "UserId"] == "user_1"
    assert meta.loc[0, "SessionCount"] == 3


def test_export_empty_ledger(tmp_path):
    import pandas as pd

    from reports.excel_export import ProgressExporter

    path = ProgressExporter(tmp_path / "empty.xlsx").export(UserProfile(), set())
    weeks = pd.read_excel(path, sheet_name="Weeks")
    assert weeks["CompletedSessions"].sum() == 0
