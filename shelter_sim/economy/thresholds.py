"""Classify resource stocks into warning bands."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional

from shelter_sim.core.config import ABUNDANT_MULTIPLIER, RESOURCE_THRESHOLDS
from shelter_sim.economy.resources import ResourceType

LEVELS: list[str] = ["emergency", "critical", "warning", "normal", "abundant"]
ALERT_LEVELS: tuple[str, ...] = ("warning", "critical", "emergency")

_RECOMMENDATIONS: dict[str, list[str]] = {
    "emergency": [
        "Immediate action required",
        "Consider emergency trading",
        "Reduce consumption",
    ],
    "critical": [
        "Prioritize acquiring this resource",
        "Look for trading opportunities",
    ],
    "warning": [
        "Monitor consumption closely",
        "Plan to acquire more soon",
    ],
    "normal": [],
    "abundant": ["Consider trading excess for other resources"],
}


@dataclass
class ResourceStatus:
    """Current band for one resource with a runway estimate."""

    resource: ResourceType
    current_value: int
    level: str
    days_remaining: int
    recommendations: list[str] = field(default_factory=list)


class ThresholdClassifier:
    """Maps a stock to emergency / critical / warning / normal / abundant."""

    def __init__(self, thresholds: Optional[Mapping[str, Mapping[str, int]]] = None) -> None:
        merged = {k: dict(v) for k, v in RESOURCE_THRESHOLDS.items()}
        for key, bands in (thresholds or {}).items():
            merged.setdefault(key, {}).update(bands)
        self._thresholds: dict[ResourceType, dict[str, int]] = {}
        for key, bands in merged.items():
            rt = ResourceType.parse(key)
            if rt is not None:
                self._thresholds[rt] = {
                    "warning": bands.get("warning", 0),
                    "critical": bands.get("critical", 0),
                    "emergency": bands.get("emergency", 0),
                }

    def bands(self, resource) -> dict[str, int]:
        rt = ResourceType.parse(resource)
        return dict(self._thresholds.get(rt, {"warning": 0, "critical": 0, "emergency": 0}))

    def warning_level(self, resource) -> int:
        return self.bands(resource)["warning"]

    def classify(self, resource, value) -> str:
        """Lowest band whose ceiling the value does not exceed."""
        bands = self.bands(resource)
        if value <= bands["emergency"]:
            return "emergency"
        if value <= bands["critical"]:
            return "critical"
        if value <= bands["warning"]:
            return "warning"
        if value <= bands["warning"] * ABUNDANT_MULTIPLIER:
            return "normal"
        return "abundant"

    def alert_level(self, resource, value) -> Optional[str]:
        """The band if it deserves a notification, else None."""
        level = self.classify(resource, value)
        return level if level in ALERT_LEVELS else None

    def status(self, resource, value: int, daily_consumption: float = 0.0) -> ResourceStatus:
        rt = ResourceType.parse(resource)
        level = self.classify(rt, value)
        rate = daily_consumption or 1
        return ResourceStatus(
            resource=rt,
            current_value=value,
            level=level,
            days_remaining=math.floor(value / rate),
            recommendations=list(_RECOMMENDATIONS[level]),
        )
