"""
Schedule helpers — build and describe the trigger dicts stored on a Job.

The reconciler never interprets schedules. These helpers exist for the
generator (building dicts) and for listing (describing them and their
next run).

Schedule dict shapes:
    {"kind": "cron",  "expr": "0 9 * * 1"}
    {"kind": "every", "everyMs": 1800000}
    {"kind": "at",    "atMs": 1740481200000}

Usage:
    schedule = make_schedule({"kind": "cron", "expr": "0 9 * * *"})
    next_ms = schedule.next_fire_ms(now_ms=...)
    describe_next_fire(job.schedule)   # "2025-03-03 09:00"
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod


def cron_schedule(expr: str) -> dict:
    """Schedule dict for a 5-field cron expression."""
    return {"kind": "cron", "expr": expr}


class Schedule(ABC):
    """Computes the next fire time of a stored schedule."""

    @abstractmethod
    def next_fire_ms(self, now_ms: int | None = None) -> int:
        """
        Return the next unix time in milliseconds at which the job fires.

        Returns 0 if the schedule has expired (one-shot in the past).
        """
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description, e.g. 'cron(0 9 * * 1)'."""
        ...


class CronSchedule(Schedule):
    """
    Fires on a cron schedule.

    Requires the `croniter` package.
    """

    def __init__(self, expr: str) -> None:
        self._expr = expr

    def next_fire_ms(self, now_ms: int | None = None) -> int:
        from croniter import croniter
        base = (now_ms / 1000) if now_ms else time.time()
        it = croniter(self._expr, base)
        return int(it.get_next(float) * 1000)

    @property
    def description(self) -> str:
        return f"cron({self._expr})"


class EverySchedule(Schedule):
    """Fires every N milliseconds, counted from now."""

    def __init__(self, every_ms: int) -> None:
        if every_ms < 1000:
            raise ValueError("Interval must be at least 1 second")
        self._every_ms = every_ms

    def next_fire_ms(self, now_ms: int | None = None) -> int:
        t = now_ms or int(time.time() * 1000)
        return t + self._every_ms

    @property
    def description(self) -> str:
        s = self._every_ms // 1000
        if s % 3600 == 0:
            return f"every {s // 3600}h"
        if s % 60 == 0:
            return f"every {s // 60}m"
        return f"every {s}s"


class AtSchedule(Schedule):
    """Fires once at a fixed time; 0 once that time has passed."""

    def __init__(self, at_ms: int) -> None:
        self._at_ms = at_ms

    def next_fire_ms(self, now_ms: int | None = None) -> int:
        t = now_ms or int(time.time() * 1000)
        return 0 if t > self._at_ms else self._at_ms

    @property
    def description(self) -> str:
        return f"once at {_format_ms(self._at_ms)}"


def make_schedule(schedule: dict) -> Schedule:
    """
    Build a Schedule from the dict stored in a Job.

    Raises ValueError for unknown or incomplete schedules.
    """
    kind = schedule.get("kind", "") if isinstance(schedule, dict) else ""
    try:
        if kind == "cron":
            return CronSchedule(str(schedule["expr"]))
        elif kind == "every":
            return EverySchedule(int(schedule["everyMs"]))
        elif kind == "at":
            return AtSchedule(int(schedule["atMs"]))
    except (KeyError, TypeError, OverflowError) as e:
        raise ValueError(f"Incomplete {kind} schedule: {schedule!r}") from e
    raise ValueError(f"Unknown schedule kind: {kind!r}")


def describe_schedule(schedule: dict) -> str:
    """Short description for display; never raises."""
    try:
        return make_schedule(schedule).description
    except (ValueError, OverflowError, OSError):
        return "?"


def describe_next_fire(schedule: dict, now_ms: int | None = None) -> str:
    """Local time of the next run for display; never raises."""
    try:
        next_ms = make_schedule(schedule).next_fire_ms(now_ms=now_ms)
        if not next_ms:
            return "expired"
        return _format_ms(next_ms)
    except (ValueError, KeyError, OverflowError, OSError):
        return "?"


def _format_ms(ms: int) -> str:
    import datetime
    return datetime.datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")
