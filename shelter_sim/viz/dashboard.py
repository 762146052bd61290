"""Static matplotlib charts for a finished simulation run."""

from __future__ import annotations

import os

import matplotlib
matplotlib.use("Agg")  # headless: reports are written to disk
import matplotlib.pyplot as plt
import numpy as np

from shelter_sim.core.config import REPORT_DPI, RESOURCE_THRESHOLDS, RESOURCE_TYPES


class Dashboard:
    """Post-hoc report plots built from collected daily snapshots."""

    @staticmethod
    def comprehensive_report(metrics: "MetricsCollector", output_dir: str) -> list[str]:  # noqa: F821
        """Generate all plots and save to output directory. Returns the file paths."""
        os.makedirs(output_dir, exist_ok=True)

        snapshots = metrics.snapshots
        if not snapshots:
            return []

        days = np.array([s.day for s in snapshots])
        written: list[str] = []

        # Resource stocks, one panel per type with its warning line
        fig, axes = plt.subplots(len(RESOURCE_TYPES), 1, figsize=(10, 2.2 * len(RESOURCE_TYPES)), sharex=True)
        for ax, resource in zip(axes, RESOURCE_TYPES):
            ax.plot(days, metrics.series(resource), linewidth=1.5)
            ax.axhline(y=RESOURCE_THRESHOLDS[resource]["warning"], color="orange", linestyle="--", alpha=0.6)
            ax.axhline(y=RESOURCE_THRESHOLDS[resource]["critical"], color="r", linestyle="--", alpha=0.6)
            ax.set_ylabel(resource)
            ax.grid(True, alpha=0.3)
        axes[0].set_title("Landlord Resources Over Time")
        axes[-1].set_xlabel("Day")
        written.append(_save(fig, output_dir, "resources.png"))

        # Satisfaction
        fig, ax = plt.subplots(figsize=(10, 5))
        ax.plot(days, [s.avg_satisfaction for s in snapshots])
        ax.set_title("Average Tenant Satisfaction")
        ax.set_xlabel("Day")
        ax.set_ylabel("Satisfaction (0-100)")
        ax.set_ylim(0, 100)
        ax.axhline(y=40, color="r", linestyle="--", alpha=0.5)
        ax.grid(True, alpha=0.3)
        written.append(_save(fig, output_dir, "satisfaction.png"))

        # Events and conflicts
        fig, ax = plt.subplots(figsize=(10, 5))
        ax.bar(days - 0.2, [s.events_triggered for s in snapshots], width=0.4, label="events")
        ax.bar(days + 0.2, [s.conflicts_raised for s in snapshots], width=0.4, label="conflicts")
        ax.plot(days, [s.active_conflicts for s in snapshots], "k-", linewidth=1, label="unresolved")
        ax.set_title("Events and Conflicts per Day")
        ax.set_xlabel("Day")
        ax.legend(fontsize=8)
        ax.grid(True, alpha=0.3)
        written.append(_save(fig, output_dir, "events_conflicts.png"))

        # Tenants
        fig, ax = plt.subplots(figsize=(10, 5))
        ax.step(days, [s.tenant_count for s in snapshots], where="post")
        ax.set_title("Tenants Over Time")
        ax.set_xlabel("Day")
        ax.set_ylabel("Tenants")
        ax.grid(True, alpha=0.3)
        written.append(_save(fig, output_dir, "tenants.png"))

        return written


def _save(fig, output_dir: str, filename: str) -> str:
    path = os.path.join(output_dir, filename)
    fig.savefig(path, dpi=REPORT_DPI)
    plt.close(fig)
    return path
