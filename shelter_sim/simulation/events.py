"""Event scheduling: gating, priority selection, triggering and choice execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

from numpy.random import Generator

from shelter_sim.core.config import (
    CONFLICT_PROBABILITY_PARAMS,
    EXECUTION_HISTORY_KEEP,
    MAX_EXECUTION_HISTORY,
    RANDOM_EVENT_CHANCE,
)
from shelter_sim.core.state import WorldState
from shelter_sim.simulation.catalog import Choice, EventCatalog, EventDefinition
from shelter_sim.simulation.conditions import ConditionEvaluator
from shelter_sim.simulation.effects import EffectExecutor
from shelter_sim.social.conflict import conflict_probability, gather_conflict_inputs


@dataclass
class TriggeredEvent:
    """An event raised for the player, with the choices valid right now."""

    event: EventDefinition
    choices: list[Choice]
    day: int

    @property
    def event_id(self) -> str:
        return self.event.id


@dataclass
class ExecutionRecord:
    """One executed choice and the effect results it produced."""

    event_id: str
    choice_id: str
    day: int
    results: list[dict] = field(default_factory=list)


class EventScheduler:
    """Decides whether and which event fires, and runs chosen choices."""

    def __init__(
        self,
        catalog: EventCatalog,
        conditions: ConditionEvaluator,
        effects: EffectExecutor,
        state: WorldState,
        rng: Generator,
        classifier: "ThresholdClassifier",  # noqa: F821
        logger: Optional["SimLogger"] = None,  # noqa: F821
        random_event_chance: float = RANDOM_EVENT_CHANCE,
        conflict_params: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.catalog = catalog
        self._conditions = conditions
        self._effects = effects
        self._state = state
        self._rng = rng
        self._classifier = classifier
        self._logger = logger
        self.random_event_chance = random_event_chance
        self.conflict_params = dict(CONFLICT_PROBABILITY_PARAMS)
        self.conflict_params.update(conflict_params or {})
        self._pending: list[TriggeredEvent] = []
        self._triggered: list[TriggeredEvent] = []
        self._executions: list[ExecutionRecord] = []

    @property
    def pending(self) -> list[TriggeredEvent]:
        return self._pending

    @property
    def triggered(self) -> list[TriggeredEvent]:
        return self._triggered

    @property
    def executions(self) -> list[ExecutionRecord]:
        return self._executions

    def dismiss(self, event_id: str) -> None:
        """Drop a raised event without executing any choice."""
        self._pending = [p for p in self._pending if p.event_id != event_id]

    # ---- Processing ----

    def process_random_events(self) -> Optional[TriggeredEvent]:
        return self._process("random", lambda: self._rng.random() <= self.random_event_chance)

    def process_conflict_events(self) -> Optional[TriggeredEvent]:
        return self._process("conflict", lambda: self._rng.random() <= self.conflict_chance())

    def process_special_events(self) -> Optional[TriggeredEvent]:
        return self._process("special", lambda: True)

    def conflict_chance(self) -> float:
        inputs = gather_conflict_inputs(self._state, self._classifier, self.conflict_params)
        return conflict_probability(inputs)

    def eligible(self, category: str) -> list[EventDefinition]:
        return [
            e for e in self.catalog.category(category)
            if self._conditions.evaluate_all(e.conditions)
        ]

    def select_by_priority(self, events: list[EventDefinition]) -> Optional[EventDefinition]:
        """Uniform pick among the events sharing the highest priority."""
        if not events:
            return None
        if len(events) == 1:
            return events[0]
        top = max(e.priority for e in events)
        best = [e for e in events if e.priority == top]
        return best[int(self._rng.integers(len(best)))]

    def generate_choices(self, event: EventDefinition) -> list[Choice]:
        available = [c for c in event.choices if self._conditions.evaluate_all(c.conditions)]
        dynamic = event.dynamic_choices
        if dynamic is not None:
            available.extend(c for c in dynamic.base if self._conditions.evaluate_all(c.conditions))
            for entry in dynamic.conditional:
                if self._conditions.evaluate(entry.condition):
                    available.append(entry.choice)
        return available

    def trigger(self, event: EventDefinition) -> TriggeredEvent:
        raised = TriggeredEvent(event=event, choices=self.generate_choices(event), day=self._state.day)
        self._triggered.append(raised)
        self._trim(self._triggered)
        self._pending.append(raised)
        self._log("EVENT", f"{event.title}: {event.description}", event_id=event.id)
        return raised

    def execute_choice(self, event_id: str, choice_id: str) -> dict:
        event = self.catalog.find_event(event_id)
        if event is None:
            self._log("SYSTEM", f"Choice for unknown event {event_id!r}")
            return {"success": False, "reason": "event_not_found", "results": []}
        choice = event.find_choice(choice_id)
        if choice is None:
            self._log("SYSTEM", f"Unknown choice {choice_id!r} for event {event_id!r}")
            return {"success": False, "reason": "choice_not_found", "results": []}
        if not self._conditions.evaluate_all(choice.conditions):
            return {"success": False, "reason": "conditions_not_met", "results": []}

        results = self._effects.execute_all(choice.effects)
        self._executions.append(ExecutionRecord(
            event_id=event_id, choice_id=choice_id, day=self._state.day, results=results,
        ))
        self._trim(self._executions)
        self.dismiss(event_id)
        self._log("EVENT", f"Chose '{choice.text or choice.id}' for {event.title}", event_id=event_id)
        return {"success": True, "results": results}

    # ---- Internal ----

    def _process(self, category: str, gate: Callable[[], bool]) -> Optional[TriggeredEvent]:
        try:
            if not gate():
                return None
            chosen = self.select_by_priority(self.eligible(category))
            if chosen is None:
                return None
            return self.trigger(chosen)
        except Exception as exc:
            self._log("SYSTEM", f"Processing {category} events failed: {exc}")
            return None

    @staticmethod
    def _trim(history: list) -> None:
        if len(history) > MAX_EXECUTION_HISTORY:
            del history[:-EXECUTION_HISTORY_KEEP]

    def _log(self, category: str, message: str, **data) -> None:
        if self._logger is not None:
            self._logger.log(category, message, day=self._state.day, **data)
