"""Consumption tracking and scarcity analysis."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from shelter_sim.core.config import (
    BUILDING_DAILY_FUEL,
    CONSUMPTION_TREND_SMOOTHING,
    CONSUMPTION_WINDOW_DAYS,
    DEPLETION_SENTINEL_DAYS,
    ELDER_DAILY_MEDICAL,
    LANDLORD_DAILY_FOOD,
    SCARCITY_WARNING_MULTIPLIER,
    TENANT_DAILY_FOOD,
    TREND_BAND,
)
from shelter_sim.economy.resources import ResourceLedger, ResourceType
from shelter_sim.economy.thresholds import ThresholdClassifier


@dataclass
class ConsumptionStats:
    """Rolling consumption figures for one resource."""

    daily_consumption: float = 0.0
    weekly_average: float = 0.0
    trend: float = 0.0
    last_updated_day: int = 0
    samples: deque = field(default_factory=lambda: deque(maxlen=CONSUMPTION_WINDOW_DAYS))

    def update(self, rate: float, day: int) -> None:
        """Set a new daily rate and refresh the smoothed derivative."""
        derivative = rate - self.daily_consumption
        self.trend = (
            CONSUMPTION_TREND_SMOOTHING * derivative
            + (1.0 - CONSUMPTION_TREND_SMOOTHING) * self.trend
        )
        self.daily_consumption = rate
        self.samples.append(rate)
        self.weekly_average = float(np.mean(self.samples))
        self.last_updated_day = day


@dataclass
class ScarcityAnalysis:
    """Derived view of how close a resource is to running out."""

    resource: ResourceType
    scarcity_index: float   # 0 (plenty) .. 100 (none)
    consumption_rate: float
    net_change: float
    trend: str              # "increasing", "decreasing", "stable"
    depletion_days: int


class ConsumptionTracker:
    """Per-resource consumption statistics."""

    def __init__(self) -> None:
        self._stats: dict[ResourceType, ConsumptionStats] = {
            rt: ConsumptionStats() for rt in ResourceType
        }

    def stats(self, resource) -> Optional[ConsumptionStats]:
        """None for anything that is not a resource type."""
        rt = ResourceType.parse(resource)
        return self._stats[rt] if rt is not None else None

    def daily_rate(self, resource) -> float:
        rt = ResourceType.parse(resource)
        return self._stats[rt].daily_consumption if rt is not None else 0.0

    def update_daily(self, tenant_count: int, elder_count: int = 0, day: int = 0) -> None:
        """Refresh the rates that follow directly from head counts."""
        food = LANDLORD_DAILY_FOOD + TENANT_DAILY_FOOD * tenant_count
        self._stats[ResourceType.FOOD].update(food, day)
        self._stats[ResourceType.FUEL].update(BUILDING_DAILY_FUEL, day)
        self._stats[ResourceType.MEDICAL].update(ELDER_DAILY_MEDICAL * elder_count, day)

    def record_consumption(self, consumed: dict, day: int = 0) -> None:
        """Fold an ad-hoc consumption into the moving average."""
        for key, amount in consumed.items():
            rt = ResourceType.parse(key)
            if rt is None or amount <= 0:
                continue
            stats = self._stats[rt]
            stats.update((stats.daily_consumption + amount) / 2, day)


class ScarcityAnalyzer:
    """Scarcity index, trend and depletion estimate for a resource."""

    def __init__(
        self,
        ledger: ResourceLedger,
        classifier: ThresholdClassifier,
        tracker: ConsumptionTracker,
    ) -> None:
        self._ledger = ledger
        self._classifier = classifier
        self._tracker = tracker

    def analyze(self, resource) -> Optional[ScarcityAnalysis]:
        rt = ResourceType.parse(resource)
        if rt is None:
            return None
        current = self._ledger.get(rt)
        stats = self._tracker.stats(rt)
        rate = stats.daily_consumption

        full_stock = self._classifier.warning_level(rt) * SCARCITY_WARNING_MULTIPLIER
        if full_stock > 0:
            index = 100.0 - (current / full_stock) * 100.0
        else:
            index = 0.0 if current > 0 else 100.0
        index = max(0.0, min(100.0, index))

        if stats.trend > TREND_BAND:
            trend = "increasing"
        elif stats.trend < -TREND_BAND:
            trend = "decreasing"
        else:
            trend = "stable"

        if rate > 0:
            depletion = min(math.floor(current / rate), DEPLETION_SENTINEL_DAYS)
        else:
            depletion = DEPLETION_SENTINEL_DAYS

        return ScarcityAnalysis(
            resource=rt,
            scarcity_index=index,
            consumption_rate=rate,
            net_change=-rate,
            trend=trend,
            depletion_days=depletion,
        )
