"""Conflict detection, resolution and the daily conflict probability."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from numpy.random import Generator

from shelter_sim.core.config import (
    CONFLICT_FOOD_PER_TENANT,
    CONFLICT_FUEL_MIN,
    CONFLICT_INTERPERSONAL_CHANCE,
    CONFLICT_MIN_DISSATISFIED,
    CONFLICT_POOR_RELATIONSHIP,
    CONFLICT_PROBABILITY_PARAMS,
    CONFLICT_RESOLUTION_AFFINITY,
    CONFLICT_RESOLUTION_BONUS,
    CONFLICT_SATISFACTION_BASELINE,
    CONFLICT_SATISFACTION_THRESHOLD,
    CONFLICT_SEVERITY,
    SATISFACTION_BASE,
    SCARCITY_TRACKED_TYPES,
)
from shelter_sim.core.state import WorldState
from shelter_sim.economy.resources import ResourceType
from shelter_sim.social.relationships import RelationshipManager
from shelter_sim.social.satisfaction import SatisfactionModel


@dataclass
class ConflictEvent:
    """A detected dispute awaiting resolution."""

    id: str
    conflict_type: str
    involved_tenant_ids: list[int]
    severity: int
    description: str
    day: int
    resolved: bool = False
    resolution: str = ""


@dataclass
class ConflictInputs:
    """Everything the conflict probability depends on."""

    tenant_count: int
    avg_satisfaction: float
    resource_scarce: bool
    elder_count: int
    params: dict = field(default_factory=lambda: dict(CONFLICT_PROBABILITY_PARAMS))


def conflict_probability(inputs: ConflictInputs) -> float:
    """Chance that a conflict event fires today, clamped to [0, 1]."""
    p = inputs.params
    value = (
        p["base_chance"]
        + inputs.tenant_count * p["tenant_count_multiplier"]
        + max(0.0, CONFLICT_SATISFACTION_BASELINE - inputs.avg_satisfaction) * p["satisfaction_penalty"]
        + (p["resource_scarcity_bonus"] if inputs.resource_scarce else 0.0)
        - (p["elder_reduction"] if inputs.elder_count > 0 else 0.0)
    )
    return max(0.0, min(1.0, value))


def gather_conflict_inputs(
    state: WorldState,
    classifier: "ThresholdClassifier",  # noqa: F821
    params: Optional[Mapping[str, float]] = None,
) -> ConflictInputs:
    """Read head counts, mean satisfaction and scarcity from the world."""
    scores = list(state.satisfaction.values())
    avg = sum(scores) / len(scores) if scores else float(SATISFACTION_BASE)
    scarce = any(
        state.ledger.get(key) < classifier.warning_level(key)
        for key in SCARCITY_TRACKED_TYPES
    )
    merged = dict(CONFLICT_PROBABILITY_PARAMS)
    merged.update(params or {})
    return ConflictInputs(
        tenant_count=len(state.tenants),
        avg_satisfaction=avg,
        resource_scarce=scarce,
        elder_count=state.tenants.count_type("elder"),
        params=merged,
    )


class ConflictDetector:
    """Raises satisfaction, scarcity and interpersonal conflicts."""

    def __init__(
        self,
        state: WorldState,
        satisfaction: SatisfactionModel,
        relationships: RelationshipManager,
        rng: Generator,
        logger: Optional["SimLogger"] = None,  # noqa: F821
        threshold: int = CONFLICT_SATISFACTION_THRESHOLD,
    ) -> None:
        self._state = state
        self._satisfaction = satisfaction
        self._relationships = relationships
        self._rng = rng
        self._logger = logger
        self.threshold = threshold
        self._conflicts: dict[str, ConflictEvent] = {}
        self._next_seq: int = 1

    @property
    def conflicts(self) -> list[ConflictEvent]:
        return list(self._conflicts.values())

    @property
    def active(self) -> list[ConflictEvent]:
        return [c for c in self._conflicts.values() if not c.resolved]

    def get(self, conflict_id: str) -> Optional[ConflictEvent]:
        return self._conflicts.get(conflict_id)

    def check_all(self) -> list[ConflictEvent]:
        """Run every check once. Needs at least two tenants."""
        tenants = self._state.tenants.tenants
        if len(tenants) < 2:
            return []

        raised: list[ConflictEvent] = []

        # Satisfaction dispute
        unhappy = [
            tid for tid in self._satisfaction.dissatisfied(self.threshold)
            if self._state.tenants.get(tid) is not None
        ]
        if len(unhappy) >= CONFLICT_MIN_DISSATISFIED:
            raised.append(self._raise(
                "satisfaction_dispute", unhappy,
                f"{len(unhappy)} tenants are unhappy with living conditions",
            ))

        # Resource scarcity
        ledger = self._state.ledger
        first_two = [t.id for t in tenants[:2]]
        if ledger.get(ResourceType.FOOD) < CONFLICT_FOOD_PER_TENANT * len(tenants):
            raised.append(self._raise(
                "resource_scarcity", first_two, "Tenants are arguing over scarce food",
            ))
        if ledger.get(ResourceType.FUEL) < CONFLICT_FUEL_MIN:
            raised.append(self._raise(
                "resource_scarcity", first_two, "Tenants are arguing over heating fuel",
            ))

        # Interpersonal
        for rel in self._relationships.poor_relationships(CONFLICT_POOR_RELATIONSHIP):
            if self._rng.random() < CONFLICT_INTERPERSONAL_CHANCE:
                raised.append(self._raise(
                    "interpersonal_conflict", [rel.tenant_a_id, rel.tenant_b_id],
                    "Two tenants are feuding",
                ))

        return raised

    def resolve(self, conflict_id: str, resolution: str = "mediated") -> bool:
        conflict = self._conflicts.get(conflict_id)
        if conflict is None or conflict.resolved:
            return False
        conflict.resolved = True
        conflict.resolution = resolution
        for tid in conflict.involved_tenant_ids:
            if self._state.tenants.get(tid) is not None:
                self._satisfaction.adjust(tid, CONFLICT_RESOLUTION_BONUS, "conflict_resolved")
        if conflict.conflict_type == "interpersonal_conflict":
            a, b = conflict.involved_tenant_ids[:2]
            if self._state.tenants.get(a) is not None and self._state.tenants.get(b) is not None:
                self._relationships.get_or_create(a, b).adjust(
                    CONFLICT_RESOLUTION_AFFINITY, f"{conflict_id} {resolution}",
                )
        if self._logger is not None:
            self._logger.log(
                "CONFLICT", f"Conflict {conflict_id} resolved ({resolution})",
                tenant_ids=list(conflict.involved_tenant_ids), day=self._state.day,
            )
        return True

    # ---- Internal ----

    def _raise(self, conflict_type: str, involved: list[int], description: str) -> ConflictEvent:
        conflict = ConflictEvent(
            id=f"conflict_{self._state.day}_{self._next_seq}",
            conflict_type=conflict_type,
            involved_tenant_ids=list(involved),
            severity=CONFLICT_SEVERITY[conflict_type],
            description=description,
            day=self._state.day,
        )
        self._next_seq += 1
        self._conflicts[conflict.id] = conflict
        if self._logger is not None:
            self._logger.log(
                "CONFLICT", description, tenant_ids=list(involved),
                day=self._state.day, severity=conflict.severity,
            )
        return conflict
