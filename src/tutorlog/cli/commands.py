"""CLI commands for tutorlog.

Commands:
- init: Create the database
- add-student / edit / delete-student / import-students: Manage profiles
- list: Students with their top weaknesses
- show: Student dashboard (progress, attendance, chart, recommendation)
- log / delete-log: Record or remove lesson and consultation notes
"""

import json
from datetime import date, timedelta
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.markup import escape

from tutorlog.config.app_config import load_app_config
from tutorlog.core.errors import (
    GoalAuditError,
    NotFoundError,
    SessionCapReachedError,
    StoreError,
    ValidationError,
)
from tutorlog.core.records import LogKind, PlanMode
from tutorlog.core.student_service import StudentService
from tutorlog.db.database import init_db
from tutorlog.db.sqlite_store import SqliteStore

app = typer.Typer(
    name="tutorlog",
    help="Per-student lesson and consultation record keeper for tutors.",
    no_args_is_help=True,
)

console = Console()


def _get_service() -> StudentService:
    """Build the service over the configured SQLite database, or exit."""
    config = load_app_config()
    try:
        return StudentService(SqliteStore(config.db_path), config)
    except StoreError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise typer.Exit(code=1)


def _fail(message: str) -> NoReturn:
    console.print(f"[red]✗ {escape(message)}[/red]")
    raise typer.Exit(code=1)


def _truncate(text: str, max_len: int = 120) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + "..."


@app.command()
def init() -> None:
    """Create the database and its tables."""
    config = load_app_config()
    init_db(config.db_path)
    console.print(f"[green]✓ Database ready:[/green] {config.db_path}")


# =============================================================================
# STUDENTS
# =============================================================================


@app.command(name="add-student")
def add_student(
    name: str = typer.Argument(..., help="Student name"),
    school: str = typer.Option("", "--school", "-s", help="School"),
    grade: str = typer.Option("", "--grade", "-g", help="Grade, e.g. 'middle 1'"),
    goal: str = typer.Option("", "--goal", help="Learning goal"),
    phone: str = typer.Option("", "--phone", help="Student phone"),
    guardian: str = typer.Option("", "--guardian", help="Guardian name"),
    guardian_phone: str = typer.Option("", "--guardian-phone", help="Guardian phone"),
    plan: str = typer.Option("count", "--plan", help="Billing plan: count or date"),
    sessions: int | None = typer.Option(
        None, "--sessions", "-n", help="Sessions per block (count plan)"
    ),
    end_date: str | None = typer.Option(
        None, "--end-date", help="Plan end date YYYY-MM-DD (date plan)"
    ),
    notes: str = typer.Option("", "--notes", help="Intake notes"),
) -> None:
    """Register a new student."""
    service = _get_service()
    try:
        profile = service.register_student(
            name=name,
            school=school,
            grade=grade,
            goal=goal,
            student_phone=phone,
            guardian_name=guardian,
            guardian_phone=guardian_phone,
            plan_mode=plan,
            total_sessions=sessions,
            end_date=end_date,
            notes=notes,
        )
    except (ValidationError, StoreError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Student registered:[/green] {escape(profile.name)}")
    console.print(f"  [dim]id:[/dim]   {profile.student_id}")
    if profile.plan.mode is PlanMode.COUNT:
        console.print(f"  [dim]plan:[/dim] {profile.plan.total_sessions} sessions")
    else:
        console.print(f"  [dim]plan:[/dim] until {profile.plan.end_date}")


@app.command(name="list")
def list_students(
    search: str = typer.Option("", "--search", "-q", help="Filter by name or school"),
) -> None:
    """List students with their top weaknesses."""
    from rich.table import Table

    service = _get_service()
    try:
        summaries = service.list_students(search=search)
    except StoreError as e:
        _fail(str(e))

    if not summaries:
        console.print("[yellow]No students found[/yellow]")
        console.print("  Use: tutorlog add-student <name>")
        return

    table = Table(title=f"Students ({len(summaries)})")
    table.add_column("id", justify="right")
    table.add_column("name", style="bold")
    table.add_column("grade")
    table.add_column("school · goal")
    table.add_column("weaknesses", style="red")

    for summary in summaries:
        p = summary.profile
        table.add_row(
            str(p.student_id),
            escape(p.name),
            escape(p.grade),
            escape(" · ".join(filter(None, [p.school, p.goal]))),
            escape(", ".join(summary.top_weaknesses)) or "[dim]no records[/dim]",
        )

    console.print(table)


@app.command()
def show(
    student_id: int = typer.Argument(..., help="Student id"),
    limit: int = typer.Option(10, "--limit", "-l", help="Logs to display"),
) -> None:
    """Show a student's dashboard."""
    from rich.panel import Panel

    service = _get_service()
    try:
        dash = service.load_dashboard(student_id)
    except (NotFoundError, StoreError) as e:
        _fail(str(e))

    p = dash.profile
    progress = dash.progress
    badge = ""
    if progress.displayed and progress.end_date is not None:
        badge = f"[cyan]until {progress.end_date.isoformat()}[/cyan]"
    elif progress.displayed:
        if progress.exhausted:
            badge = "[red]payment due[/red]"
        else:
            badge = f"[green]{progress.current}/{progress.total} sessions[/green]"

    header = (
        f"[bold]{escape(p.name)}[/bold] {escape(p.grade)} {badge}\n"
        f"{escape(' · '.join(filter(None, [p.school, p.goal])))}"
    )
    if p.guardian_name or p.guardian_phone:
        header += f"\n[dim]guardian:[/dim] {escape(p.guardian_name)} {escape(p.guardian_phone)}".rstrip()
    console.print(Panel(header, title=f"[bold]student {p.student_id}[/bold]", expand=False))

    rec = dash.recommendation
    console.print("\n[bold]Before the consultation[/bold]")
    console.print(f"  [dim]last:[/dim]    {escape(rec.summary)}")
    console.print(f"  [dim]suggest:[/dim] {escape(rec.suggestion)}")

    # Last four weeks, one mark per attended day
    today = date.today()
    recent = [d for d in dash.attended_days if d > today - timedelta(days=28)]
    console.print(f"\n[bold]Attendance[/bold] ({len(dash.attended_days)} days total)")
    if recent:
        console.print("  " + "  ".join(f"{d.month}/{d.day}" for d in recent))

    if dash.chart:
        console.print("\n[bold]Weakness trend[/bold]")
        for point in dash.chart:
            console.print(f"  {point.label:>5} {'█' * point.tag_count} {point.tag_count}")

    console.print(f"\n[bold]Logs ({len(dash.logs)})[/bold]")
    if not dash.logs:
        console.print("  [dim]No records yet.[/dim]")
    for log in dash.logs[:limit]:
        kind = "[magenta]consult[/magenta]" if log.kind is LogKind.CONSULTATION else "lesson"
        stamp = log.created_at.astimezone().strftime("%Y-%m-%d %H:%M")
        tags = " ".join(f"[red]#{escape(t)}[/red]" for t in log.tags)
        image = " [dim](image)[/dim]" if log.image else ""
        console.print(f"  [dim]{log.log_id:>4}[/dim] {stamp} {kind}{image} {escape(_truncate(log.text))} {tags}")


@app.command()
def edit(
    student_id: int = typer.Argument(..., help="Student id"),
    name: str | None = typer.Option(None, "--name"),
    school: str | None = typer.Option(None, "--school", "-s"),
    grade: str | None = typer.Option(None, "--grade", "-g"),
    goal: str | None = typer.Option(None, "--goal"),
    phone: str | None = typer.Option(None, "--phone"),
    guardian: str | None = typer.Option(None, "--guardian"),
    guardian_phone: str | None = typer.Option(None, "--guardian-phone"),
    plan: str | None = typer.Option(None, "--plan", help="count or date"),
    sessions: int | None = typer.Option(None, "--sessions", "-n"),
    end_date: str | None = typer.Option(None, "--end-date"),
    notes: str | None = typer.Option(None, "--notes"),
) -> None:
    """Edit a student's profile. A goal change is recorded as a log."""
    options = {
        "name": name,
        "school": school,
        "grade": grade,
        "goal": goal,
        "student_phone": phone,
        "guardian_name": guardian,
        "guardian_phone": guardian_phone,
        "plan_mode": plan,
        "total_sessions": sessions,
        "end_date": end_date,
        "notes": notes,
    }
    fields = {k: v for k, v in options.items() if v is not None}
    if not fields:
        console.print("[yellow]Nothing to change[/yellow]")
        return

    service = _get_service()
    try:
        result = service.update_profile(student_id, fields)
    except GoalAuditError as e:
        console.print("[green]✓ Profile updated[/green]")
        _fail(str(e))
    except (ValidationError, NotFoundError, StoreError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Profile updated:[/green] {escape(result.profile.name)}")
    if result.goal_changed:
        console.print(f"  [dim]goal change logged as #{result.audit_log_id}[/dim]")


@app.command(name="delete-student")
def delete_student(
    student_id: int = typer.Argument(..., help="Student id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Delete a student together with all of their logs."""
    service = _get_service()
    try:
        profile = service.store.get_student(student_id)
    except (NotFoundError, StoreError) as e:
        _fail(str(e))

    if not yes:
        confirm = typer.confirm(f"Delete {profile.name} and all of their logs?")
        if not confirm:
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(code=0)

    try:
        service.delete_student(student_id)
    except (NotFoundError, StoreError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Deleted:[/green] {escape(profile.name)}")


@app.command(name="import-students")
def import_students(
    file: Path = typer.Argument(..., help="JSON file with a list of student records"),
) -> None:
    """Import student records exported from older versions."""
    try:
        records = json.loads(file.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        _fail(f"Cannot read {file}: {e}")

    if isinstance(records, dict):
        records = records.get("students", [])
    if not isinstance(records, list):
        _fail(f"{file} must hold a list of records or an object with a 'students' list")

    service = _get_service()
    try:
        ids = service.import_records(records)
    except (ValidationError, StoreError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Imported {len(ids)} students[/green]")


# =============================================================================
# LOGS
# =============================================================================


@app.command()
def log(
    student_id: int = typer.Argument(..., help="Student id"),
    text: str = typer.Argument("", help="What happened in the session"),
    consultation: bool = typer.Option(
        False, "--consultation", "-c", help="Record a consultation instead of a lesson"
    ),
    image: str | None = typer.Option(None, "--image", help="Image reference to attach"),
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Save even if the session block is used up"
    ),
) -> None:
    """Record a lesson or consultation note."""
    kind = LogKind.CONSULTATION if consultation else LogKind.LESSON
    service = _get_service()

    try:
        try:
            saved = service.save_log(student_id, text, kind=kind, image=image, confirm=yes)
        except SessionCapReachedError as e:
            console.print(
                f"[yellow]⚠ The session block is used up "
                f"({e.progress.current}/{e.progress.total}).[/yellow]"
            )
            if not typer.confirm("Add the lesson anyway?"):
                console.print("[yellow]Cancelled[/yellow]")
                raise typer.Exit(code=0)
            saved = service.save_log(student_id, text, kind=kind, image=image, confirm=True)
    except (ValidationError, NotFoundError, StoreError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Saved {saved.kind.value} #{saved.log_id}[/green]")
    if saved.tags:
        console.print("  " + " ".join(f"[red]#{escape(t)}[/red]" for t in saved.tags))


@app.command(name="delete-log")
def delete_log(
    log_id: int = typer.Argument(..., help="Log id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
) -> None:
    """Delete a single log."""
    if not yes:
        if not typer.confirm(f"Delete log #{log_id}?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(code=0)

    service = _get_service()
    try:
        service.delete_log(log_id)
    except (NotFoundError, StoreError) as e:
        _fail(str(e))

    console.print(f"[green]✓ Log #{log_id} deleted[/green]")
