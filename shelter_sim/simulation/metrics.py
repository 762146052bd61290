"""Daily data collection, statistics and export."""

from __future__ import annotations

import csv
import os
from dataclasses import dataclass, field
from typing import Optional

from shelter_sim.core.config import RESOURCE_TYPES


@dataclass
class DailySnapshot:
    """A snapshot of simulation state for one day."""

    day: int = 0
    tenant_count: int = 0
    resources: dict[str, int] = field(default_factory=dict)
    avg_satisfaction: float = 0.0
    satisfaction_distribution: dict[str, int] = field(default_factory=dict)
    landlord_hunger: int = 0
    rooms_needing_repair: int = 0
    events_triggered: int = 0
    choices_executed: int = 0
    conflicts_raised: int = 0
    active_conflicts: int = 0
    trade_count: int = 0
    scavenge_missions: int = 0
    scavenge_successes: int = 0


class MetricsCollector:
    """Collects time-series data every day."""

    def __init__(self) -> None:
        self.snapshots: list[DailySnapshot] = []
        self._daily_events: int = 0
        self._daily_choices: int = 0
        self._daily_conflicts: int = 0
        self._daily_trades: int = 0
        self._daily_missions: int = 0
        self._daily_mission_successes: int = 0

    def record_event(self) -> None:
        self._daily_events += 1

    def record_choice(self) -> None:
        self._daily_choices += 1

    def record_conflicts(self, count: int) -> None:
        self._daily_conflicts += count

    def record_trade(self, count: int = 1) -> None:
        self._daily_trades += count

    def record_scavenge(self, success: bool) -> None:
        self._daily_missions += 1
        if success:
            self._daily_mission_successes += 1

    def collect_daily(
        self,
        state: "WorldState",  # noqa: F821
        satisfaction: "SatisfactionModel",  # noqa: F821
        conflicts: "ConflictDetector",  # noqa: F821
    ) -> DailySnapshot:
        """Collect all metrics for this day."""
        snapshot = DailySnapshot(
            day=state.day,
            tenant_count=len(state.tenants),
            resources=state.ledger.snapshot(),
            avg_satisfaction=float(satisfaction.average()),
            satisfaction_distribution=satisfaction.distribution(),
            landlord_hunger=state.landlord_hunger,
            rooms_needing_repair=sum(1 for r in state.tenants.rooms if r.needs_repair),
            events_triggered=self._daily_events,
            choices_executed=self._daily_choices,
            conflicts_raised=self._daily_conflicts,
            active_conflicts=len(conflicts.active),
            trade_count=self._daily_trades,
            scavenge_missions=self._daily_missions,
            scavenge_successes=self._daily_mission_successes,
        )
        self.snapshots.append(snapshot)

        # Reset daily counters
        self._daily_events = 0
        self._daily_choices = 0
        self._daily_conflicts = 0
        self._daily_trades = 0
        self._daily_missions = 0
        self._daily_mission_successes = 0

        return snapshot

    def series(self, resource: str) -> list[int]:
        return [s.resources.get(resource, 0) for s in self.snapshots]

    def export_csv(self, filepath: str) -> None:
        """Export all snapshots to CSV."""
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "day", "tenants", *RESOURCE_TYPES, "avg_satisfaction",
                "landlord_hunger", "rooms_needing_repair", "events", "choices",
                "conflicts", "active_conflicts", "trades", "missions", "mission_successes",
            ])
            for s in self.snapshots:
                writer.writerow([
                    s.day, s.tenant_count,
                    *[s.resources.get(r, 0) for r in RESOURCE_TYPES],
                    f"{s.avg_satisfaction:.1f}", s.landlord_hunger,
                    s.rooms_needing_repair, s.events_triggered, s.choices_executed,
                    s.conflicts_raised, s.active_conflicts, s.trade_count,
                    s.scavenge_missions, s.scavenge_successes,
                ])

    def summary_report(self, start_day: int = 0, end_day: Optional[int] = None) -> str:
        """Generate a human-readable summary of the simulation period."""
        relevant = [
            s for s in self.snapshots
            if s.day >= start_day and (end_day is None or s.day <= end_day)
        ]
        if not relevant:
            return "No data available for the specified period."

        first = relevant[0]
        last = relevant[-1]
        total_events = sum(s.events_triggered for s in relevant)
        total_conflicts = sum(s.conflicts_raised for s in relevant)
        total_trades = sum(s.trade_count for s in relevant)
        total_missions = sum(s.scavenge_missions for s in relevant)
        total_successes = sum(s.scavenge_successes for s in relevant)

        lines = [
            f"=== Shelter Summary: Day {first.day} to Day {last.day} ===",
            f"Duration: {last.day - first.day + 1} days",
            f"",
            f"Tenants: {first.tenant_count} -> {last.tenant_count}",
            f"  Avg satisfaction: {first.avg_satisfaction:.0f} -> {last.avg_satisfaction:.0f}",
            f"  Landlord hunger (final): {last.landlord_hunger}",
            f"",
            f"Activity:",
            f"  Events triggered: {total_events}",
            f"  Conflicts raised: {total_conflicts}",
            f"  Trades and aid: {total_trades}",
            f"  Scavenging: {total_successes}/{total_missions} successful",
            f"",
            f"Resources (first -> final):",
        ]
        for r in RESOURCE_TYPES:
            lines.append(f"  {r}: {first.resources.get(r, 0)} -> {last.resources.get(r, 0)}")

        if last.satisfaction_distribution:
            lines.append(f"")
            lines.append(f"Satisfaction Distribution (final day):")
            for level, count in last.satisfaction_distribution.items():
                if count:
                    lines.append(f"  {level}: {count}")

        return "\n".join(lines)
