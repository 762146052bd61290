"""Shared world state read by conditions and mutated by effects."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any

from shelter_sim.agents.tenant import TenantRegistry
from shelter_sim.core.clock import SimClock
from shelter_sim.economy.resources import ResourceLedger

# Roots a dotted path may write through
WRITABLE_ROOTS: tuple[str, ...] = ("building", "daily", "flags")

_MISSING = object()


class StatePathError(KeyError):
    """A dotted path that cannot be read or written."""


@dataclass
class BuildingState:
    """Building-wide upgrades that feed satisfaction."""

    defense: int = 0
    quality: int = 0
    emergency_training: bool = False
    patrol_system: bool = False
    social_network: bool = False


@dataclass
class DailyActions:
    """Per-day action counters, reset at dawn."""

    harvest_used: bool = False
    harvest_cooldown: int = 0
    scavenge_used: int = 0


@dataclass
class WorldState:
    """Everything a condition can observe or an effect can change."""

    clock: SimClock
    ledger: ResourceLedger
    tenants: TenantRegistry
    building: BuildingState = field(default_factory=BuildingState)
    daily: DailyActions = field(default_factory=DailyActions)
    satisfaction: dict[int, int] = field(default_factory=dict)
    flags: dict[str, Any] = field(default_factory=dict)
    landlord_hunger: int = 0

    @property
    def day(self) -> int:
        return self.clock.day

    def get_path(self, path: str, default: Any = None) -> Any:
        """Read a dotted path such as ``building.defense``."""
        node: Any = self
        for part in path.split("."):
            node = _child(node, part)
            if node is _MISSING:
                return default
        return node

    def set_path(self, path: str, value: Any) -> None:
        """Write a dotted path below one of the writable roots.

        Missing intermediate keys inside dicts are created; dataclass
        attributes must already exist.
        """
        parts = path.split(".")
        if not parts[0] or parts[0] not in WRITABLE_ROOTS or len(parts) < 2:
            raise StatePathError(path)
        node: Any = self
        for part in parts[:-1]:
            child = _child(node, part)
            if child is _MISSING:
                if not isinstance(node, dict):
                    raise StatePathError(path)
                child = node[part] = {}
            node = child
        leaf = parts[-1]
        if isinstance(node, dict):
            node[leaf] = value
        elif dataclasses.is_dataclass(node) and leaf in {f.name for f in dataclasses.fields(node)}:
            setattr(node, leaf, value)
        else:
            raise StatePathError(path)


def _child(node: Any, part: str) -> Any:
    if isinstance(node, dict):
        return node.get(part, _MISSING)
    if dataclasses.is_dataclass(node) and part in {f.name for f in dataclasses.fields(node)}:
        return getattr(node, part)
    return _MISSING
