"""Excel export of program progress."""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable

import pandas as pd

from flow_app.program.curriculum import all_weeks
from flow_app.program.models import UserProfile, parse_ledger_date, parse_ledger_key

LOGGER = logging.getLogger(__name__)


class ProgressExporter:
    def __init__(self, export_path: Path):
        self.export_path = Path(export_path)
        self.export_path.parent.mkdir(parents=True, exist_ok=True)

    def export(self, profile: UserProfile, ledger_keys: Iterable[str]) -> Path:
        """Write the completion ledger and per-week totals to an Excel workbook."""
        rows = []
        for key in sorted(ledger_keys):
            parsed = parse_ledger_key(key)
            if parsed is None:
                LOGGER.warning("Skipping unrecognised ledger key %r", key)
                continue
            week_number, variant, date_text = parsed
            rows.append((week_number, variant, parse_ledger_date(date_text), key))

        sessions_df = pd.DataFrame(rows, columns=["Week", "Variant", "Date", "Key"])
        sessions_df.sort_values(["Date", "Week", "Variant"], inplace=True, ignore_index=True)

        counts = sessions_df.groupby("Week").size() if not sessions_df.empty else pd.Series(dtype=int)
        weeks_df = pd.DataFrame(
            [
                (week.week_number, week.title, week.phase, int(counts.get(week.week_number, 0)))
                for week in all_weeks()
            ],
            columns=["Week", "Title", "Phase", "CompletedSessions"],
        )

        with pd.ExcelWriter(self.export_path, engine="openpyxl", mode="w") as writer:
            sessions_df.to_excel(writer, sheet_name="Sessions", index=False)
            weeks_df.to_excel(writer, sheet_name="Weeks", index=False)
            meta_df = pd.DataFrame(
                [[datetime.now(), profile.user_id, profile.current_week, len(sessions_df)]],
                columns=["ExportedAt", "UserId", "CurrentWeek", "SessionCount"],
            )
            meta_df.to_excel(writer, sheet_name="Meta", index=False)
        LOGGER.info("Exported progress for %s to %s", profile.user_id, self.export_path)
        return self.export_path
