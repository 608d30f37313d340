"""
Dashboard Statistics.

Pure computations over a note collection. Weeks start on Monday; "today"
and week boundaries are taken in the timezone of ``now``, which defaults to
the local clock. A naive ``now`` is read as local time.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable

from notely.schemas.base import local_now
from notely.schemas.note import Note

RECENT_LIMIT = 5
STREAK_WINDOW_DAYS = 30
WEEKLY_GOAL = 10


@dataclass(frozen=True)
class DashboardStats:
    total: int
    pinned: int
    bookmarked: int
    trashed: int
    today: int
    this_week: int
    last_week: int
    trend: int
    streak: int
    weekly_goal: int
    recent: list[Note] = field(default_factory=list)

    @property
    def weekly_progress(self) -> float:
        """Share of the weekly goal reached, as a percentage (may exceed 100)."""
        if self.weekly_goal <= 0:
            return 0.0
        return self.this_week / self.weekly_goal * 100


def calculate_trend(current: int, previous: int) -> int:
    """Week-over-week change in percent."""
    if previous == 0:
        return 100 if current > 0 else 0
    return round((current - previous) / previous * 100)


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _start_of_week(moment: datetime) -> datetime:
    return _start_of_day(moment) - timedelta(days=moment.weekday())


def writing_streak(notes: Iterable[Note], now: datetime) -> int:
    """
    Consecutive days, counting back from today, with at least one note created.

    A day without notes today does not break the streak; the count starts
    from yesterday instead. Only the last STREAK_WINDOW_DAYS are examined.
    """
    days = {note.date_created.astimezone(now.tzinfo).date() for note in notes if not note.is_deleted}
    if not days:
        return 0

    today = now.date()
    streak = 0
    for offset in range(STREAK_WINDOW_DAYS):
        if today - timedelta(days=offset) in days:
            streak += 1
        elif offset > 0:
            break
    return streak


def dashboard_stats(
    notes: Iterable[Note],
    now: datetime | None = None,
    weekly_goal: int = WEEKLY_GOAL,
) -> DashboardStats:
    """
    Compute dashboard statistics.

    Counts created today, this week and last week cover every note,
    trashed ones included. Recent notes are the five most recently
    updated active notes.
    """
    notes = list(notes)
    now = now or local_now()
    if now.tzinfo is None:
        now = now.astimezone()

    today_start = _start_of_day(now)
    tomorrow_start = today_start + timedelta(days=1)
    week_start = _start_of_week(now)
    next_week_start = week_start + timedelta(days=7)
    last_week_start = week_start - timedelta(days=7)

    def created_between(start: datetime, end: datetime) -> int:
        return sum(1 for note in notes if start <= note.date_created < end)

    active = [note for note in notes if not note.is_deleted]
    this_week = created_between(week_start, next_week_start)
    last_week = created_between(last_week_start, week_start)

    return DashboardStats(
        total=len(active),
        pinned=sum(1 for note in active if note.is_pinned),
        bookmarked=sum(1 for note in active if note.is_bookmarked),
        trashed=len(notes) - len(active),
        today=created_between(today_start, tomorrow_start),
        this_week=this_week,
        last_week=last_week,
        trend=calculate_trend(this_week, last_week),
        streak=writing_streak(active, now),
        weekly_goal=weekly_goal,
        recent=sorted(active, key=lambda note: note.last_updated, reverse=True)[:RECENT_LIMIT],
    )
