"""Event definitions and the loader that validates them."""

from __future__ import annotations

import numbers
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from shelter_sim.core.config import (
    EVENT_CATEGORIES,
    MAX_CHOICES_PER_EVENT,
    MAX_CONDITIONS_PER_CHOICE,
    MAX_EFFECTS_PER_CHOICE,
    MAX_NESTED_CONDITIONS,
)
from shelter_sim.simulation.conditions import condition_depth


class EventConfigError(ValueError):
    """A single event definition that failed validation."""


@dataclass
class Choice:
    id: str
    text: str = ""
    conditions: list[dict] = field(default_factory=list)
    effects: list[dict] = field(default_factory=list)


@dataclass
class ConditionalChoice:
    condition: dict
    choice: Choice


@dataclass
class DynamicChoices:
    base: list[Choice] = field(default_factory=list)
    conditional: list[ConditionalChoice] = field(default_factory=list)


@dataclass
class EventDefinition:
    """A declarative event: trigger conditions plus player choices."""

    id: str
    category: str
    title: str
    description: str = ""
    priority: float = 0.0
    conditions: list[dict] = field(default_factory=list)
    choices: list[Choice] = field(default_factory=list)
    dynamic_choices: Optional[DynamicChoices] = None

    def all_choices(self) -> list[Choice]:
        """Static, dynamic base and conditional choices, in that order."""
        found = list(self.choices)
        if self.dynamic_choices is not None:
            found.extend(self.dynamic_choices.base)
            found.extend(c.choice for c in self.dynamic_choices.conditional)
        return found

    def find_choice(self, choice_id: str) -> Optional[Choice]:
        return next((c for c in self.all_choices() if c.id == choice_id), None)


@dataclass
class EventCatalog:
    """Validated events by category plus the errors met while loading."""

    events: dict[str, list[EventDefinition]] = field(
        default_factory=lambda: {c: [] for c in EVENT_CATEGORIES}
    )
    errors: list[str] = field(default_factory=list)

    def category(self, name: str) -> list[EventDefinition]:
        return self.events.get(name, [])

    def find_event(self, event_id: str) -> Optional[EventDefinition]:
        for category in EVENT_CATEGORIES:
            for event in self.events.get(category, []):
                if event.id == event_id:
                    return event
        return None

    def __len__(self) -> int:
        return sum(len(v) for v in self.events.values())


# =============================================================================
# Loading
# =============================================================================

def load_event_catalog(
    config: Mapping[str, Any],
    logger: Optional["SimLogger"] = None,  # noqa: F821
) -> EventCatalog:
    """Build a catalog from ``{"random_events": [...], "conflict_events": [...], ...}``.

    Invalid events are logged and skipped; the rest still load.
    """
    catalog = EventCatalog()
    for category in EVENT_CATEGORIES:
        raw_events = config.get(f"{category}_events") or []
        if not isinstance(raw_events, list):
            _reject(catalog, logger, f"{category}_events must be a list")
            continue
        seen: set[str] = set()
        for raw in raw_events:
            try:
                event = parse_event(raw, category)
                if event.id in seen:
                    raise EventConfigError(f"duplicate event id {event.id!r}")
            except EventConfigError as exc:
                _reject(catalog, logger, f"{category} event rejected: {exc}")
                continue
            seen.add(event.id)
            catalog.events[category].append(event)
    return catalog


def parse_event(raw: Any, category: str) -> EventDefinition:
    if not isinstance(raw, Mapping):
        raise EventConfigError("event must be a mapping")
    for required in ("id", "title", "description"):
        if required not in raw:
            raise EventConfigError(f"missing required field {required!r}")
    event_id = str(raw["id"])

    priority = raw.get("priority", 0)
    if isinstance(priority, bool) or not isinstance(priority, numbers.Real) or priority < 0:
        raise EventConfigError(f"{event_id}: priority must be a non-negative number")

    if "choices" not in raw and "dynamic_choices" not in raw:
        raise EventConfigError(f"{event_id}: needs choices or dynamic_choices")

    conditions = _condition_list(raw.get("conditions"), f"{event_id}.conditions")
    choices = [_parse_choice(c, event_id) for c in _as_list(raw.get("choices"), f"{event_id}.choices")]

    dynamic = None
    if "dynamic_choices" in raw:
        dynamic = _parse_dynamic(raw["dynamic_choices"], event_id)

    event = EventDefinition(
        id=event_id,
        category=category,
        title=str(raw["title"]),
        description=str(raw["description"]),
        priority=float(priority),
        conditions=conditions,
        choices=choices,
        dynamic_choices=dynamic,
    )
    if len(event.all_choices()) > MAX_CHOICES_PER_EVENT:
        raise EventConfigError(f"{event_id}: more than {MAX_CHOICES_PER_EVENT} choices")
    return event


# ---- Internal ----

def _parse_dynamic(raw: Any, event_id: str) -> DynamicChoices:
    if not isinstance(raw, Mapping):
        raise EventConfigError(f"{event_id}: dynamic_choices must be a mapping")
    base_raw = raw.get("base", [])
    if not isinstance(base_raw, list):
        raise EventConfigError(f"{event_id}: dynamic_choices.base must be a list")
    base = [_parse_choice(c, event_id) for c in base_raw]

    conditional: list[ConditionalChoice] = []
    for entry in _as_list(raw.get("conditional"), f"{event_id}.dynamic_choices.conditional"):
        if not isinstance(entry, Mapping) or "condition" not in entry or "choice" not in entry:
            raise EventConfigError(f"{event_id}: conditional entries need condition and choice")
        condition = _condition_list([entry["condition"]], f"{event_id}.conditional")[0]
        conditional.append(ConditionalChoice(condition=condition, choice=_parse_choice(entry["choice"], event_id)))
    return DynamicChoices(base=base, conditional=conditional)


def _parse_choice(raw: Any, event_id: str) -> Choice:
    if not isinstance(raw, Mapping) or "id" not in raw:
        raise EventConfigError(f"{event_id}: every choice needs an id")
    where = f"{event_id}.{raw['id']}"
    conditions = _condition_list(raw.get("conditions"), where)
    if len(conditions) > MAX_CONDITIONS_PER_CHOICE:
        raise EventConfigError(f"{where}: more than {MAX_CONDITIONS_PER_CHOICE} conditions")
    effects = _as_list(raw.get("effects"), f"{where}.effects")
    if len(effects) > MAX_EFFECTS_PER_CHOICE:
        raise EventConfigError(f"{where}: more than {MAX_EFFECTS_PER_CHOICE} effects")
    for effect in effects:
        if not isinstance(effect, Mapping) or "type" not in effect:
            raise EventConfigError(f"{where}: effects must be mappings with a type")
    return Choice(
        id=str(raw["id"]),
        text=str(raw.get("text", "")),
        conditions=[dict(c) for c in conditions],
        effects=[dict(e) for e in effects],
    )


def _condition_list(raw: Any, where: str) -> list[dict]:
    conditions = _as_list(raw, where)
    for cond in conditions:
        if not isinstance(cond, Mapping) or "type" not in cond:
            raise EventConfigError(f"{where}: conditions must be mappings with a type")
        if condition_depth(cond) > MAX_NESTED_CONDITIONS:
            raise EventConfigError(f"{where}: conditions nested deeper than {MAX_NESTED_CONDITIONS}")
    return [dict(c) for c in conditions]


def _as_list(raw: Any, where: str) -> list:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise EventConfigError(f"{where} must be a list")
    return raw


def _reject(catalog: EventCatalog, logger, message: str) -> None:
    catalog.errors.append(message)
    if logger is not None:
        logger.log("SYSTEM", message)
