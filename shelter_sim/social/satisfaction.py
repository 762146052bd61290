"""Tenant satisfaction scores derived from room, pocket and building."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass
from typing import Mapping, Optional

from shelter_sim.core.config import (
    HIGH_DEFENSE_AT,
    HIGH_PERSONAL_CASH_ABOVE,
    LOW_DEFENSE_AT,
    LOW_PERSONAL_FOOD_BELOW,
    MAX_SATISFACTION_HISTORY,
    RELATIONSHIP_BONUS_RATE,
    RELATIONSHIP_NEUTRAL,
    SATISFACTION_ALERT_LEVELS,
    SATISFACTION_BASE,
    SATISFACTION_FACTORS,
    SATISFACTION_LEVELS,
    SATISFACTION_MAX,
    SATISFACTION_MIN,
)
from shelter_sim.core.state import WorldState
from shelter_sim.economy.resources import ResourceType
from shelter_sim.social.relationships import RelationshipManager


def round_half_up(value: float) -> int:
    """Round .5 toward positive infinity (so -2.5 -> -2)."""
    return math.floor(value + 0.5)


def clamp_score(value: float) -> int:
    return int(max(SATISFACTION_MIN, min(SATISFACTION_MAX, value)))


def satisfaction_level(score: float) -> str:
    for floor, level in SATISFACTION_LEVELS:
        if score >= floor:
            return level
    return SATISFACTION_LEVELS[-1][1]


@dataclass
class SatisfactionChange:
    """One logged score movement."""

    tenant_id: int
    day: int
    old_value: int
    new_value: int
    reason: str


class SatisfactionModel:
    """Computes and stores per-tenant satisfaction on the world state."""

    def __init__(
        self,
        state: WorldState,
        relationships: RelationshipManager,
        logger: Optional["SimLogger"] = None,  # noqa: F821
        factors: Optional[Mapping[str, int]] = None,
    ) -> None:
        self._state = state
        self._relationships = relationships
        self._logger = logger
        self.factors: dict[str, int] = dict(SATISFACTION_FACTORS)
        self.factors.update(factors or {})
        self._history: deque[SatisfactionChange] = deque(maxlen=MAX_SATISFACTION_HISTORY)

    @property
    def scores(self) -> dict[int, int]:
        return self._state.satisfaction

    @property
    def history(self) -> list[SatisfactionChange]:
        return list(self._history)

    def get(self, tenant_id: int) -> int:
        return self.scores.get(tenant_id, SATISFACTION_BASE)

    def compute(self, tenant: "Tenant") -> int:  # noqa: F821
        """Score from scratch; does not store anything."""
        f = self.factors
        building = self._state.building
        score = float(SATISFACTION_BASE)

        room = self._state.tenants.room_of(tenant)
        if room is not None:
            if room.reinforced:
                score += f["reinforced_room"]
            if room.needs_repair:
                score += f["needs_repair"]

        if tenant.pocket.get(ResourceType.FOOD, 0) < LOW_PERSONAL_FOOD_BELOW:
            score += f["low_personal_food"]
        if tenant.pocket.get(ResourceType.CASH, 0) > HIGH_PERSONAL_CASH_ABOVE:
            score += f["high_personal_cash"]

        if building.defense >= HIGH_DEFENSE_AT:
            score += f["high_building_defense"]
        elif building.defense <= LOW_DEFENSE_AT:
            score += f["low_building_defense"]
        if building.emergency_training:
            score += f["emergency_training"]
        if building.quality >= 1:
            score += f["building_quality"]
        if building.patrol_system:
            score += f["patrol_system"]
        if building.social_network:
            score += f["social_network"]

        score += f["elder_harmony_bonus"] * self._state.tenants.count_type("elder")

        avg = self._relationships.average_for(tenant.id)
        score += round_half_up((avg - RELATIONSHIP_NEUTRAL) * RELATIONSHIP_BONUS_RATE)

        return clamp_score(round_half_up(score))

    def recompute(self, tenant_id: Optional[int] = None) -> dict[int, int]:
        """Refresh one tenant (or all) and return the changed scores."""
        if tenant_id is None:
            targets = self._state.tenants.tenants
        else:
            tenant = self._state.tenants.get(tenant_id)
            targets = [tenant] if tenant is not None else []

        changed: dict[int, int] = {}
        for tenant in targets:
            new_value = self.compute(tenant)
            if self._store(tenant.id, new_value, "daily_update"):
                changed[tenant.id] = new_value
        return changed

    def adjust(self, tenant_id: int, delta: int, reason: str) -> int:
        """Shift a stored score, clamped. Returns the new score."""
        new_value = clamp_score(self.get(tenant_id) + delta)
        self._store(tenant_id, new_value, reason)
        return new_value

    def initialize_tenant(self, tenant_id: int) -> None:
        self.scores[tenant_id] = SATISFACTION_BASE

    def forget(self, tenant_id: int) -> None:
        self.scores.pop(tenant_id, None)

    def average(self) -> int:
        """Rounded mean over current tenants; base when nobody lives here."""
        values = list(self.scores.values())
        if not values:
            return SATISFACTION_BASE
        return round_half_up(sum(values) / len(values))

    def distribution(self) -> dict[str, int]:
        counts = {level: 0 for _, level in SATISFACTION_LEVELS}
        for value in self.scores.values():
            counts[satisfaction_level(value)] += 1
        return counts

    def dissatisfied(self, below: int) -> list[int]:
        return [tid for tid, value in self.scores.items() if value < below]

    # ---- Internal ----

    def _store(self, tenant_id: int, new_value: int, reason: str) -> bool:
        old_value = self.scores.get(tenant_id, SATISFACTION_BASE)
        self.scores[tenant_id] = new_value
        if abs(new_value - old_value) < 1:
            return False

        self._history.append(SatisfactionChange(
            tenant_id=tenant_id,
            day=self._state.day,
            old_value=old_value,
            new_value=new_value,
            reason=reason,
        ))

        old_level = satisfaction_level(old_value)
        new_level = satisfaction_level(new_value)
        if self._logger is not None:
            self._logger.log(
                "SATISFACTION", f"Tenant {tenant_id} satisfaction {old_value} -> {new_value} ({reason})",
                tenant_ids=[tenant_id], day=self._state.day,
            )
            if new_level != old_level and new_level in SATISFACTION_ALERT_LEVELS:
                self._logger.notify(
                    "satisfaction", new_level, day=self._state.day,
                    tenant_id=tenant_id, value=new_value,
                )
        return True
