"""Application entry point for Focus & Flow (terminal edition)."""
from __future__ import annotations

import logging
import os
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from flow_app.program import __version__
from flow_app.program.controllers import ConfigManager, ProgramController
from flow_app.program.cues import Cue
from flow_app.program.curriculum import all_weeks
from flow_app.program.errors import ValidationError
from flow_app.program.models import AdaptedActivity, CompletionRecord, UserPreferences
from flow_app.program.notifications import NotificationScheduler
from flow_app.program.selector import time_based_message, time_of_day, weekday_name
from flow_app.program.storage import Storage
from flow_app.program.timers import CountdownDriver
from reports.excel_export import ProgressExporter

LOGGER = logging.getLogger(__name__)

HOME_ENV = "FOCUS_FLOW_HOME"

app = typer.Typer(help="Focus & Flow: a self-guided 12-week program.", no_args_is_help=True)
console = Console()


def app_home(override: Optional[Path] = None) -> Path:
    if override is not None:
        return Path(override)
    return Path(os.getenv(HOME_ENV, str(Path.home() / ".focus_flow")))


def configure_logging(home: Path, verbose: bool = False) -> None:
    log_dir = home / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_dir / "app.log", maxBytes=1024 * 1024, backupCount=3)
    stream = logging.StreamHandler()
    stream.setLevel(logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[handler, stream],
        force=True,
    )
    logging.info("Focus & Flow v%s starting", __version__)


class ConsoleNotificationSurface:
    """Shows reminders as panels in the terminal."""

    def permission_granted(self) -> bool:
        return True

    def show(self, title: str, body: str) -> None:
        console.print(Panel(body, title=title, border_style="yellow"))


class TerminalCueSink:
    def emit(self, cue: Cue) -> None:
        if cue in (Cue.SESSION_START, Cue.SESSION_COMPLETE):
            console.bell()


def build_controller(home: Path) -> tuple[ProgramController, ConfigManager]:
    config_manager = ConfigManager(home)
    config = config_manager.config
    storage = Storage(config.resolved_database_path(home))
    scheduler = NotificationScheduler(
        ConsoleNotificationSurface(),
        test_delay_seconds=config.test_notification_delay_seconds,
    )
    return ProgramController(storage, scheduler, cues=TerminalCueSink()), config_manager


def _controller(ctx: typer.Context) -> ProgramController:
    return ctx.obj["controller"]


@app.callback()
def main_callback(
    ctx: typer.Context,
    home: Optional[Path] = typer.Option(None, "--home", help="Data directory (defaults to ~/.focus_flow)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log to the console as well."),
) -> None:
    root = app_home(home)
    configure_logging(root, verbose)
    controller, config_manager = build_controller(root)
    ctx.obj = {"controller": controller, "config": config_manager, "home": root}
    ctx.call_on_close(controller.close)


@app.command()
def today(ctx: typer.Context) -> None:
    """Show today's session for the current week."""
    controller = _controller(ctx)
    info = controller.today_session()
    now = controller.clock.now()
    console.print(f"[bold]Week {info.week.week_number}[/bold] - {info.week.title} ({info.week.phase} phase)")
    console.print(f"{weekday_name(info.calendar_date)} {time_of_day(now)}: {info.variant_key}")
    if info.rest_day:
        console.print("[green]Sunday is a rest day. Enjoy the break![/green]")
        return
    table = Table("#", "Type", "Activity", "Minutes", "Description")
    for index, activity in enumerate(info.session.activities, start=1):
        table.add_row(str(index), activity.type, activity.name, str(activity.duration), activity.description)
    console.print(table)
    console.print(f"Total: {info.session.duration} min")
    if controller.is_completed_today():
        console.print("[green]Already completed today.[/green]")
    console.print(time_based_message(time_of_day(now)))
    console.print(f"Week goal: {info.week.milestone}")


@app.command()
def weeks(ctx: typer.Context) -> None:
    """List the 12 program weeks."""
    controller = _controller(ctx)
    table = Table("Week", "Title", "Phase", "Milestone", "Status")
    for week in all_weeks():
        completed, current = controller.week_status(week.week_number)
        status = "done" if completed else "current" if current else ""
        table.add_row(str(week.week_number), week.title, week.phase, week.milestone, status)
    console.print(table)


@app.command()
def week(ctx: typer.Context, number: int = typer.Argument(..., help="Week to jump to (1-12).")) -> None:
    """Jump to a program week."""
    current = _controller(ctx).set_week(number)
    console.print(f"Current week: {current}")


@app.command("next-week")
def next_week(ctx: typer.Context) -> None:
    console.print(f"Current week: {_controller(ctx).next_week()}")


@app.command("prev-week")
def prev_week(ctx: typer.Context) -> None:
    console.print(f"Current week: {_controller(ctx).previous_week()}")


@app.command()
def progress(ctx: typer.Context) -> None:
    """Show overall progress."""
    summary = _controller(ctx).progress_summary()
    table = Table(show_header=False)
    table.add_row("Name", summary["name"])
    table.add_row("Program started", summary["start_date"])
    table.add_row("Current week", str(summary["current_week"]))
    table.add_row("Phase", f"{summary['phase']} ({summary['phase_progress']:.0f}%)")
    table.add_row("Sessions completed", str(summary["completed_sessions"]))
    console.print(table)


@app.command()
def settings(ctx: typer.Context) -> None:
    """Show current preferences."""
    prefs = _controller(ctx).preferences
    table = Table("Preference", "Value")
    for name in UserPreferences.field_names():
        table.add_row(name, str(getattr(prefs, name)))
    console.print(table)


@app.command("set")
def set_preference(ctx: typer.Context, name: str, value: str) -> None:
    """Change one preference, e.g. ``set reminder_time 07:30``."""
    try:
        _controller(ctx).update_preference(name, value)
    except ValidationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print(f"{name} = {value}")


@app.command("name")
def set_name(ctx: typer.Context, value: str = typer.Argument(..., help="New display name.")) -> None:
    """Change your display name."""
    try:
        _controller(ctx).update_profile(name=value)
    except ValidationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print(f"Name set to {value.strip()}")


@app.command("reset-settings")
def reset_settings(ctx: typer.Context, yes: bool = typer.Option(False, "--yes", "-y")) -> None:
    """Restore default preferences; progress is kept."""
    if not yes and not typer.confirm("Reset all settings to defaults? Your progress will be kept."):
        raise typer.Abort()
    _controller(ctx).reset_preferences()
    console.print("Settings restored to defaults.")


@app.command("reset-all")
def reset_all(ctx: typer.Context, yes: bool = typer.Option(False, "--yes", "-y")) -> None:
    """Delete all progress and start over."""
    if not yes and not typer.confirm("This will delete ALL your progress and start over. Continue?"):
        raise typer.Abort()
    _controller(ctx).reset_all()
    console.print("All data cleared.")


@app.command()
def export(ctx: typer.Context, path: Optional[Path] = typer.Option(None, "--path", "-o")) -> None:
    """Export progress to an Excel workbook."""
    controller = _controller(ctx)
    target = path or Path(ctx.obj["config"].config.export_path).expanduser()
    written = ProgressExporter(target).export(controller.profile, controller.completed_sessions)
    console.print(f"Exported to {written}")


@app.command()
def run(ctx: typer.Context, force: bool = typer.Option(False, "--force", help="Run even on a rest day.")) -> None:
    """Run today's session in the terminal. Ctrl-C skips the current activity."""
    controller = _controller(ctx)
    info = controller.today_session()
    if info.rest_day and not force:
        console.print("Sunday is a rest day. Use --force to train anyway.")
        return

    def _advanced(index: int, activity: AdaptedActivity) -> None:
        console.print(f"[cyan]Next up ({index + 1}/{len(info.session.activities)}):[/cyan] {activity.name}")

    def _completed(record: CompletionRecord) -> None:
        console.print(Panel(f"Session complete! Logged {record.key}", border_style="green"))

    progression = controller.begin_session(on_advance=_advanced, on_complete=_completed)
    driver = CountdownDriver(progression, interval=ctx.obj["config"].config.tick_seconds)
    console.print(f"Week {info.week.week_number} - {info.variant_key}")
    try:
        while not progression.is_complete:
            activity = progression.current_activity
            console.print(f"[bold]{activity.name}[/bold] - {activity.description} ({progression.formatted_remaining})")
            if not driver.start():
                progression.skip()
                continue
            try:
                while progression.is_running:
                    time.sleep(0.2)
            except KeyboardInterrupt:
                console.print("Skipping activity")
                driver.skip()
    finally:
        driver.close()
        controller.end_session()


@app.command()
def remind(ctx: typer.Context) -> None:
    """Keep the daily reminder armed until interrupted."""
    controller = _controller(ctx)
    if not controller.activate():
        console.print("Reminders are off or the reminder time is invalid.")
        return
    console.print(f"Next reminder at {controller.scheduler.next_fire_time:%Y-%m-%d %H:%M}. Ctrl-C to stop.")
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        LOGGER.info("Reminder loop stopped by user")
        console.print("Reminders stopped.")


@app.command()
def version() -> None:
    console.print(f"Focus & Flow v{__version__}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
