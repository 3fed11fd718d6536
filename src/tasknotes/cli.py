"""tasknotes CLI - tasks and notes."""

import json
import logging
import sys
from datetime import date, datetime

import click

from .adapters.supabase_api import SupabaseAdapter
from .config import load_config
from .core.board import format_board_sections
from .core.calendar import format_day, format_month, shift_month
from .core.tasks import Category, Priority, SortMode, Task
from .errors import AuthenticationError, NotFoundError, StoreError, ValidationError
from .workflows import (
    add_note,
    add_task,
    build_filters,
    due_soon_window,
    edit_note,
    edit_task,
    get_note_store,
    get_task_store,
    list_notes,
    load_board,
    load_day,
    load_month,
    remove_note,
    remove_task,
    toggle_task,
)

EXPECTED_ERRORS = (AuthenticationError, StoreError, NotFoundError, ValidationError)

CATEGORY_CHOICES = [c.value for c in Category]
PRIORITY_CHOICES = [p.value for p in Priority]
SORT_CHOICES = [m.value for m in SortMode]


def _fail(e: Exception) -> None:
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


def _task_json(t: Task, now: datetime, config) -> dict:
    return {
        **t.to_api(),
        "status": t.due_status(now, due_soon_window(config)).value,
    }


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="tasknotes")
def main(debug: bool):
    """tasknotes - tasks and notes from the terminal."""
    if debug:
        logging.basicConfig(
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            level=logging.DEBUG,
        )


@main.command()
@click.option("--email", default=None, help="Account email (defaults to EMAIL in config)")
@click.password_option(confirmation_prompt=False)
def login(email: str | None, password: str):
    """Sign in to Supabase."""
    config = load_config()
    if config.backend != "supabase":
        click.echo("The local backend doesn't need a login.")
        return
    email = email or config.email or click.prompt("Email")
    try:
        SupabaseAdapter(config).sign_in(email, password)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Signed in as {email}.")


@main.command()
def logout():
    """Sign out and forget the stored session."""
    config = load_config()
    if config.backend != "supabase":
        click.echo("The local backend doesn't need a login.")
        return
    try:
        SupabaseAdapter(config).sign_out()
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo("Signed out.")


@main.command()
@click.option("--search", "-s", default="", help="Match text in title or description")
@click.option("--category", "-c", type=click.Choice(["all"] + CATEGORY_CHOICES), default="all")
@click.option("--priority", "-p", type=click.Choice(["all"] + PRIORITY_CHOICES), default="all")
@click.option("--sort", type=click.Choice(SORT_CHOICES), default=None, help="Defaults to DEFAULT_SORT")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def tasks(search: str, category: str, priority: str, sort: str | None, as_json: bool):
    """List tasks, pending first then completed."""
    config = load_config()
    now = datetime.now()
    try:
        filters = build_filters(search, category, priority, sort or config.default_sort)
        board = load_board(get_task_store(config), filters)
    except EXPECTED_ERRORS as e:
        _fail(e)

    if as_json:
        click.echo(
            json.dumps(
                {
                    "pending": [_task_json(t, now, config) for t in board.pending],
                    "completed": [_task_json(t, now, config) for t in board.completed],
                    "stats": {
                        "total": board.stats.total,
                        "completed": board.stats.completed,
                        "pending": board.stats.pending,
                    },
                },
                indent=2,
            )
        )
        return

    sections = format_board_sections(board, now, due_soon_window(config))
    click.echo(sections["stats"])
    if board.is_empty:
        click.echo(f"\nNo tasks found. {board.empty_message()}.")
        return
    for key in ("pending", "completed"):
        if sections[key]:
            click.echo(f"\n{sections[key]}")


@main.command()
@click.argument("title")
@click.option("--description", "-d", default="")
@click.option("--category", "-c", type=click.Choice(CATEGORY_CHOICES), default="other")
@click.option("--priority", "-p", type=click.Choice(PRIORITY_CHOICES), default="medium")
@click.option("--due", default=None, help="Due date (YYYY-MM-DD)")
def add(title: str, description: str, category: str, priority: str, due: str | None):
    """Add a task."""
    config = load_config()
    try:
        task = add_task(get_task_store(config), title, description, category, priority, due)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Added {task.id[:8]}: {task.title}")


@main.command()
@click.argument("task_id")
@click.option("--title", default=None)
@click.option("--description", "-d", default=None)
@click.option("--category", "-c", type=click.Choice(CATEGORY_CHOICES), default=None)
@click.option("--priority", "-p", type=click.Choice(PRIORITY_CHOICES), default=None)
@click.option("--due", default=None, help="Due date (YYYY-MM-DD)")
@click.option("--no-due", is_flag=True, help="Remove the due date")
def edit(task_id, title, description, category, priority, due, no_due):
    """Edit fields of a task (id or unique id prefix)."""
    changes = {
        name: value
        for name, value in {
            "title": title,
            "description": description,
            "category": category,
            "priority": priority,
            "due_date": due,
        }.items()
        if value is not None
    }
    if no_due:
        changes["due_date"] = None
    if not changes:
        click.echo("Nothing to change.")
        return

    config = load_config()
    try:
        task = edit_task(get_task_store(config), task_id, **changes)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Updated {task.id[:8]}: {task.title}")


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Toggle a task between pending and completed."""
    config = load_config()
    try:
        task = toggle_task(get_task_store(config), task_id)
    except EXPECTED_ERRORS as e:
        _fail(e)
    state = "completed" if task.completed else "pending"
    click.echo(f"{task.title}: {state}")


@main.command()
@click.argument("task_id")
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation")
def rm(task_id: str, yes: bool):
    """Delete a task."""
    if not yes and not click.confirm(f"Delete task {task_id}?"):
        return
    config = load_config()
    try:
        task = remove_task(get_task_store(config), task_id)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Deleted {task.title}")


@main.command()
@click.option("--month", "-m", "month_str", default=None, help="Month to show (YYYY-MM), defaults to this month")
@click.option("--prev", "offset", flag_value=-1, help="Show the previous month")
@click.option("--next", "offset", flag_value=1, help="Show the next month")
def calendar(month_str: str | None, offset: int | None):
    """Show a month grid of tasks by due date."""
    config = load_config()
    today = date.today()
    try:
        if month_str:
            year, month = (int(part) for part in month_str.split("-", 1))
            if not 1 <= month <= 12:
                raise ValueError(month_str)
        else:
            year, month = today.year, today.month
    except ValueError:
        _fail(ValidationError("month", f"Invalid month '{month_str}' (expected YYYY-MM)"))
    year, month = shift_month(year, month, offset or 0)

    try:
        grid = load_month(get_task_store(config), year, month, today)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(format_month(grid))

    selected = grid.day(today)
    if selected is not None:
        click.echo()
        click.echo(format_day(today, selected.tasks, datetime.now(), due_soon_window(config)))


@main.command()
@click.argument("day", required=False)
def day(day: str | None):
    """List tasks due on a day (YYYY-MM-DD), defaults to today."""
    config = load_config()
    try:
        target = date.fromisoformat(day) if day else date.today()
    except ValueError:
        _fail(ValidationError("day", f"Invalid date '{day}' (expected YYYY-MM-DD)"))

    try:
        due = load_day(get_task_store(config), target)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(format_day(target, due, datetime.now(), due_soon_window(config)))


# ============== Notes ==============


@main.group()
def notes():
    """Free-form notes."""
    pass


@notes.command("list")
@click.option("--search", "-s", default="", help="Match text in title or content")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def notes_list(search: str, as_json: bool):
    """List notes, most recently updated first."""
    config = load_config()
    try:
        items = list_notes(get_note_store(config), search)
    except EXPECTED_ERRORS as e:
        _fail(e)

    if as_json:
        click.echo(json.dumps([n.to_api() for n in items], indent=2))
        return

    if not items:
        click.echo("No notes yet.")
        return

    for note in items:
        click.echo(f"{note.id[:8]} {note.title} ({note.updated_at.strftime('%b %d, %Y %H:%M')})")
        if note.content:
            click.echo(f"    {note.content.splitlines()[0]}")


@notes.command("add")
@click.argument("title")
@click.option("--content", default=None, help="Note body (opens an editor when omitted)")
def notes_add(title: str, content: str | None):
    """Create a note."""
    if content is None:
        content = (click.edit("") or "").strip()
    config = load_config()
    try:
        note = add_note(get_note_store(config), title, content)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Added note {note.id[:8]}: {note.title}")


@notes.command("edit")
@click.argument("note_id")
@click.option("--title", default=None)
@click.option("--content", default=None)
def notes_edit(note_id: str, title: str | None, content: str | None):
    """Edit a note's title or content."""
    if title is None and content is None:
        click.echo("Nothing to change.")
        return
    config = load_config()
    try:
        note = edit_note(get_note_store(config), note_id, title=title, content=content)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Updated note {note.id[:8]}: {note.title}")


@notes.command("rm")
@click.argument("note_id")
@click.option("--yes", "-y", is_flag=True, help="Don't ask for confirmation")
def notes_rm(note_id: str, yes: bool):
    """Delete a note."""
    if not yes and not click.confirm("Are you sure you want to delete this note?"):
        return
    config = load_config()
    try:
        note = remove_note(get_note_store(config), note_id)
    except EXPECTED_ERRORS as e:
        _fail(e)
    click.echo(f"Deleted note {note.title}")
