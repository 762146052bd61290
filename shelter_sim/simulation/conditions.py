"""Condition evaluation for event triggers and choices.

A condition is a mapping tagged by ``type``.  Evaluation is fail-closed:
unknown kinds, malformed payloads and handler errors all read as False.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional

from numpy.random import Generator

from shelter_sim.core.state import WorldState
from shelter_sim.economy.thresholds import ThresholdClassifier

ConditionHandler = Callable[[Mapping[str, Any]], bool]

COMPOSITE_KINDS: tuple[str, ...] = ("and", "or")


def condition_depth(condition: Any) -> int:
    """Nesting depth: a leaf is 1, each and/or adds a level."""
    if not isinstance(condition, Mapping):
        return 1
    if condition.get("type") in COMPOSITE_KINDS:
        children = condition.get("conditions") or []
        return 1 + max((condition_depth(c) for c in children), default=0)
    return 1


class ConditionEvaluator:
    """Dispatches conditions to per-kind handlers."""

    def __init__(
        self,
        state: WorldState,
        rng: Generator,
        classifier: ThresholdClassifier,
        logger: Optional["SimLogger"] = None,  # noqa: F821
    ) -> None:
        self._state = state
        self._rng = rng
        self._classifier = classifier
        self._logger = logger
        self._handlers: dict[str, ConditionHandler] = {
            "hasResource": self._has_resource,
            "dayRange": self._day_range,
            "hasTenantType": self._has_tenant_type,
            "probability": self._probability,
            "resourceScarcity": self._resource_scarcity,
            "and": self._all_of,
            "or": self._any_of,
        }

    @property
    def kinds(self) -> list[str]:
        return list(self._handlers)

    def register(self, kind: str, handler: ConditionHandler) -> None:
        self._handlers[kind] = handler

    def evaluate(self, condition: Any) -> bool:
        if not isinstance(condition, Mapping):
            self._warn(f"Malformed condition: {condition!r}")
            return False
        kind = condition.get("type")
        handler = self._handlers.get(kind)
        if handler is None:
            self._warn(f"Unknown condition type: {kind!r}")
            return False
        try:
            return bool(handler(condition))
        except Exception as exc:
            self._warn(f"Condition {kind} failed: {exc}")
            return False

    def evaluate_all(self, conditions: Optional[Iterable[Any]]) -> bool:
        """Conjunction; an empty or missing list holds."""
        return all(self.evaluate(c) for c in (conditions or []))

    # ---- Handlers ----

    def _has_resource(self, cond: Mapping[str, Any]) -> bool:
        return self._state.ledger.get(cond["resource"]) >= cond["amount"]

    def _day_range(self, cond: Mapping[str, Any]) -> bool:
        return self._state.clock.in_range(cond.get("min"), cond.get("max"))

    def _has_tenant_type(self, cond: Mapping[str, Any]) -> bool:
        wanted = cond["tenantType"]
        count = cond.get("count", 1)
        registry = self._state.tenants
        if wanted == "any":
            present = len(registry)
        elif wanted == "infected":
            present = len(registry.infected())
        else:
            present = registry.count_type(wanted)
        return present >= count

    def _probability(self, cond: Mapping[str, Any]) -> bool:
        return self._rng.random() < cond["chance"]

    def _resource_scarcity(self, cond: Mapping[str, Any]) -> bool:
        resource = cond["resource"]
        current = self._state.ledger.get(resource)
        warning = self._classifier.warning_level(resource)
        threshold = cond.get("threshold")
        if threshold == "insufficient":
            return current < warning
        if threshold == "critical":
            return current < warning / 2
        return False

    def _all_of(self, cond: Mapping[str, Any]) -> bool:
        return all(self.evaluate(c) for c in cond.get("conditions") or [])

    def _any_of(self, cond: Mapping[str, Any]) -> bool:
        return any(self.evaluate(c) for c in cond.get("conditions") or [])

    # ---- Internal ----

    def _warn(self, message: str) -> None:
        if self._logger is not None:
            self._logger.log("SYSTEM", message, day=self._state.day)
