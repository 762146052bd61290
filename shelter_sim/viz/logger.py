"""Structured event logging and player-facing notifications."""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from typing import Optional, TextIO


@dataclass
class LogEntry:
    """A single log entry."""

    day: int
    category: str
    message: str
    tenant_ids: list[int] = field(default_factory=list)
    data: dict = field(default_factory=dict)


@dataclass
class Notification:
    """A structured warning raised for the host UI."""

    day: int
    kind: str   # "resource_threshold", "satisfaction", ...
    level: str  # "warning", "critical", "emergency"
    data: dict = field(default_factory=dict)


def _ensure_parent(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


class SimLogger:
    """Day-buffered logging with categories, verbosity and notifications."""

    EVENT = "EVENT"
    RESOURCE = "RESOURCE"
    TENANT = "TENANT"
    SATISFACTION = "SATISFACTION"
    CONFLICT = "CONFLICT"
    TRADE = "TRADE"
    DANGER = "DANGER"
    SYSTEM = "SYSTEM"

    # Minimum verbosity at which a category is echoed
    _VERBOSITY_MAP: dict[str, int] = {
        EVENT: 0,
        DANGER: 0,
        SYSTEM: 0,
        CONFLICT: 1,
        TENANT: 1,
        RESOURCE: 2,
        TRADE: 2,
        SATISFACTION: 3,
    }

    def __init__(
        self,
        verbosity: int = 1,
        log_file: Optional[str] = None,
        stdout: bool = True,
    ) -> None:
        """
        verbosity levels:
            0 = only events, dangers and system errors
            1 = + conflicts and tenant comings/goings
            2 = + resource and trade activity
            3 = everything (debug)
        """
        self.verbosity = verbosity
        self._stdout = stdout
        self._pending: list[LogEntry] = []
        self._flushed: list[LogEntry] = []
        self._notifications: list[Notification] = []
        self._file: Optional[TextIO] = None
        if log_file:
            _ensure_parent(log_file)
            self._file = open(log_file, "w", encoding="utf-8")

    @property
    def entries(self) -> list[LogEntry]:
        """Flushed and still-buffered entries, oldest first."""
        return self._flushed + self._pending

    @property
    def notifications(self) -> list[Notification]:
        return self._notifications

    def log(
        self,
        category: str,
        message: str,
        tenant_ids: Optional[list[int]] = None,
        day: int = 0,
        **data,
    ) -> None:
        self._pending.append(LogEntry(day, category, message, list(tenant_ids or []), data))

    def notify(self, kind: str, level: str, day: int = 0, **data) -> Notification:
        """Record a warning/critical notification and mirror it into the log."""
        note = Notification(day=day, kind=kind, level=level, data=data)
        self._notifications.append(note)
        category = self.RESOURCE if kind.startswith("resource") else self.SATISFACTION
        self.log(category, f"{kind} {level}: {data}", day=day, level=level)
        return note

    def notifications_of(self, kind: str) -> list[Notification]:
        return [n for n in self._notifications if n.kind == kind]

    def by_category(self, category: str) -> list[LogEntry]:
        return [e for e in self.entries if e.category == category]

    def flush_day(self, day: int) -> None:
        """Echo the day's buffered entries that pass the verbosity filter."""
        for entry in self._pending:
            if self._VERBOSITY_MAP.get(entry.category, 1) <= self.verbosity:
                self._write(f"[Day {entry.day:>4}] [{entry.category:<12}] {entry.message}")
        self._flushed.extend(self._pending)
        self._pending.clear()
        if self._file:
            self._file.flush()

    def get_narrative(self, day: int) -> str:
        """Human-readable account of one day."""
        todays = [e for e in self.entries if e.day == day]
        if not todays:
            return f"Day {day}: Nothing notable happened."
        body = [f"  [{e.category}] {e.message}" for e in todays]
        return "\n".join([f"=== Day {day} ===", *body])

    def export_json(self, filepath: str) -> None:
        """Dump every entry and notification to one JSON document."""
        _ensure_parent(filepath)
        payload = {
            "entries": [asdict(e) for e in self.entries],
            "notifications": [asdict(n) for n in self._notifications],
        }
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, default=str)

    def close(self) -> None:
        if self._file:
            self._file.close()
            self._file = None

    # ---- Internal ----

    def _write(self, line: str) -> None:
        if self._stdout:
            print(line)
        if self._file:
            self._file.write(line + "\n")
