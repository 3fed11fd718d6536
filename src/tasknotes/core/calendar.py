"""Pure calendar view logic - no I/O dependencies."""

import calendar
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from .board import format_task_line
from .tasks import DUE_SOON_WINDOW, Priority, Task

MAX_INDICATORS = 3
CELL_WIDTH = 9
WEEKDAY_HEADERS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
INDICATOR_MARKERS = {
    Priority.HIGH: "!",
    Priority.MEDIUM: "*",
    Priority.LOW: ".",
}


@dataclass
class CalendarDay:
    """One cell of the month grid."""

    day: date
    tasks: list[Task]
    is_today: bool = False

    @property
    def indicators(self) -> list[Task]:
        """Tasks shown as dots in the cell."""
        return self.tasks[:MAX_INDICATORS]

    @property
    def overflow(self) -> int:
        """How many tasks don't fit in the cell ("+N")."""
        return max(0, len(self.tasks) - MAX_INDICATORS)


@dataclass
class CalendarMonth:
    year: int
    month: int
    days: list[CalendarDay]

    @property
    def title(self) -> str:
        return date(self.year, self.month, 1).strftime("%B %Y")

    def day(self, target: date) -> CalendarDay | None:
        return next((d for d in self.days if d.day == target), None)

    def weeks(self) -> list[list[CalendarDay | None]]:
        """Sunday-first rows; cells outside the month are None."""
        by_date = {d.day: d for d in self.days}
        cal = calendar.Calendar(firstweekday=calendar.SUNDAY)
        return [
            [by_date.get(d) if d.month == self.month else None for d in week]
            for week in cal.monthdatescalendar(self.year, self.month)
        ]


def tasks_for_date(tasks: list[Task], day: date) -> list[Task]:
    """
    Tasks due on a given day, in input order.

    Pure function - no I/O.
    """
    return [t for t in tasks if t.due_date is not None and t.due_date.date() == day]


def month_days(year: int, month: int) -> list[date]:
    """Every day of a month."""
    _, count = calendar.monthrange(year, month)
    return [date(year, month, d) for d in range(1, count + 1)]


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move delta months forward (or back, if negative)."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def assemble_month(
    tasks: list[Task],
    year: int,
    month: int,
    today: date | None = None,
) -> CalendarMonth:
    """
    Assemble the month grid with each day's tasks.

    Pure function - no I/O.
    """
    today = today or date.today()
    days = [
        CalendarDay(day=d, tasks=tasks_for_date(tasks, d), is_today=d == today)
        for d in month_days(year, month)
    ]
    return CalendarMonth(year=year, month=month, days=days)


def format_cell(cell: CalendarDay) -> str:
    """Day number, one marker per indicator, then "+N" for the overflow."""
    label = f"[{cell.day.day}]" if cell.is_today else str(cell.day.day)
    label += "".join(INDICATOR_MARKERS[t.priority] for t in cell.indicators)
    if cell.overflow:
        label += f"+{cell.overflow}"
    return label


def format_month(month: CalendarMonth) -> str:
    """
    Render the month as a text grid. Today is bracketed; each task due on
    a day adds a priority marker (! high, * medium, . low), at most three,
    followed by the count of the rest.

    Pure function - no I/O.
    """
    width = CELL_WIDTH * 7 + 6
    lines = [
        month.title.center(width).rstrip(),
        " ".join(f"{h:>{CELL_WIDTH}}" for h in WEEKDAY_HEADERS),
    ]
    for week in month.weeks():
        cells = [" " * CELL_WIDTH if cell is None else f"{format_cell(cell):>{CELL_WIDTH}}" for cell in week]
        lines.append(" ".join(cells).rstrip())
    return "\n".join(lines)


def format_day(
    day: date,
    tasks: list[Task],
    now: datetime,
    window: timedelta = DUE_SOON_WINDOW,
) -> str:
    """Detail panel for a selected day."""
    header = day.strftime("%B %d, %Y")
    if not tasks:
        return f"{header}\nNo tasks scheduled for this date."
    body = "\n".join(format_task_line(t, now, window) for t in tasks)
    return f"{header}\n{body}"
