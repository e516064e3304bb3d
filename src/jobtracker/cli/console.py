from __future__ import annotations

from collections.abc import Callable

import typer

from jobtracker.core.runtime import Tracker
from jobtracker.errors import TrackerError

MENU = """
=== Job Tracker Console ===
1) Show row counts
2) List recent applications (joined view)
3) Show activity for an application
4) Update application status
5) Show recent activity feed
0) Exit"""


def _parse_int(value: str, default: int) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return default


class ConsoleBrowser:
    def __init__(
        self,
        tracker: Tracker,
        *,
        prompt: Callable[..., str] = typer.prompt,
        echo: Callable[[str], None] = typer.echo,
    ):
        self.tracker = tracker
        self.prompt = prompt
        self.echo = echo
        self.actions: dict[str, Callable[[], None]] = {
            "1": self.show_row_counts,
            "2": self.list_applications,
            "3": self.show_application_activity,
            "4": self.update_status,
            "5": self.show_recent_activity,
        }

    def run(self) -> None:
        while True:
            self.echo(MENU)
            choice = self.prompt(">", default="0", show_default=False).strip()
            if choice == "0":
                self.echo("Bye.")
                return
            action = self.actions.get(choice)
            if action is None:
                self.echo("Invalid option.")
                continue
            try:
                action()
            except TrackerError as exc:
                self.echo(f"Error ({exc.kind.value}): {exc.message}")

    def show_row_counts(self) -> None:
        self.echo("\nRow counts:")
        for table, count in self.tracker.repo.row_counts().items():
            self.echo(f"  {table}: {count}")

    def list_applications(self) -> None:
        limit = _parse_int(self.prompt("How many?", default="10"), 10)
        rows = self.tracker.applications.list_applications(limit, 0)
        self.echo("\nRecent applications:")
        for row in rows:
            self.echo(
                f"id={row.id} | {row.user_name} ({row.user_email}) | {row.company_name} | "
                f"{row.job_title} | {row.status} | {row.applied_at.isoformat()}"
            )
        if not rows:
            self.echo("(none)")

    def show_application_activity(self) -> None:
        application_id = self.prompt("Application id").strip()
        events = self.tracker.activities.list_for_application(application_id)
        self.echo("\nActivity timeline:")
        for event in events:
            self.echo(
                f"{event.event_time.isoformat()} | {event.event_type} | "
                f"{event.old_status} -> {event.new_status} | {event.details or ''}"
            )
        if not events:
            self.echo("(none / unknown application)")

    def update_status(self) -> None:
        application_id = self.prompt("Application id").strip()
        status = self.prompt("New status").strip()
        detail = self.tracker.applications.update_application_status(application_id, status)
        self.echo(f"Updated {detail.id}: {detail.company_name} / {detail.job_title} is now {detail.status}")

    def show_recent_activity(self) -> None:
        limit = _parse_int(self.prompt("How many?", default="10"), 10)
        events = self.tracker.activities.list_activities(limit, 0)
        self.echo("\nRecent activity:")
        for event in events:
            self.echo(
                f"{event.event_time.isoformat()} | application={event.application_id} | "
                f"{event.event_type} | {event.old_status} -> {event.new_status}"
            )
        if not events:
            self.echo("(none)")
