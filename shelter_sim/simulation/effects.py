"""Effect execution for event choices.

Every effect returns a result dict with at least ``success``.  No effect
raises: handler errors come back as ``{"success": False, "error": ...}``.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, Optional

from numpy.random import Generator

from shelter_sim.core.config import PROBABILITY_CHECK_DEFAULT_BASE
from shelter_sim.core.state import StatePathError, WorldState
from shelter_sim.simulation.conditions import ConditionEvaluator

EffectHandler = Callable[[Mapping[str, Any]], dict]
EvictFn = Callable[[int, str], bool]

STATE_OPERATIONS: tuple[str, ...] = ("set", "add", "multiply")


class EffectExecutor:
    """Dispatches effects to per-kind handlers."""

    def __init__(
        self,
        state: WorldState,
        rng: Generator,
        conditions: ConditionEvaluator,
        evict: Optional[EvictFn] = None,
        logger: Optional["SimLogger"] = None,  # noqa: F821
    ) -> None:
        self._state = state
        self._rng = rng
        self._conditions = conditions
        self._evict = evict
        self._logger = logger
        self._handlers: dict[str, EffectHandler] = {
            "modifyResource": self._modify_resource,
            "logMessage": self._log_message,
            "damageRandomRoom": self._damage_random_room,
            "probabilityCheck": self._probability_check,
            "removeTenant": self._remove_tenant,
            "healTenant": self._heal_tenant,
            "checkSoldierBonus": self._check_soldier_bonus,
            "modifyState": self._modify_state,
        }

    @property
    def kinds(self) -> list[str]:
        return list(self._handlers)

    def register(self, kind: str, handler: EffectHandler) -> None:
        self._handlers[kind] = handler

    def execute(self, effect: Any) -> dict:
        if not isinstance(effect, Mapping):
            self._log("SYSTEM", f"Malformed effect: {effect!r}")
            return {"success": False, "reason": "malformed_effect"}
        kind = effect.get("type")
        handler = self._handlers.get(kind)
        if handler is None:
            self._log("SYSTEM", f"Unknown effect type: {kind!r}")
            return {"success": False, "reason": "unknown_effect_type"}
        try:
            return handler(effect)
        except Exception as exc:
            self._log("SYSTEM", f"Effect {kind} failed: {exc}")
            return {"success": False, "error": str(exc)}

    def execute_all(self, effects: Optional[Iterable[Any]]) -> list[dict]:
        """Run each effect in order; one failure does not stop the rest."""
        return [self.execute(e) for e in (effects or [])]

    # ---- Handlers ----

    def _modify_resource(self, effect: Mapping[str, Any]) -> dict:
        ledger = self._state.ledger
        resource = effect["resource"]
        old_value = ledger.get(resource)
        ok = ledger.modify(
            resource, effect["amount"], reason="event_effect", source="event", validate=False,
        )
        if not ok:
            return {"success": False, "reason": "invalid_resource_change"}
        return {
            "success": True,
            "resource": resource,
            "old_value": old_value,
            "new_value": ledger.get(resource),
        }

    def _log_message(self, effect: Mapping[str, Any]) -> dict:
        message = str(effect.get("message", ""))
        log_type = str(effect.get("logType", "event"))
        self._log(log_type.upper(), message)
        return {"success": True, "message": message}

    def _damage_random_room(self, effect: Mapping[str, Any]) -> dict:
        intact = [r for r in self._state.tenants.rooms if not r.needs_repair]
        if not intact:
            return {"success": False, "reason": "no_rooms_to_damage"}
        room = intact[int(self._rng.integers(len(intact)))]
        room.needs_repair = True
        self._log("DANGER", f"Room {room.id} was damaged and needs repair")
        return {"success": True, "room_id": room.id}

    def _probability_check(self, effect: Mapping[str, Any]) -> dict:
        formula = effect.get("condition") or {}
        probability = float(formula.get("base", PROBABILITY_CHECK_DEFAULT_BASE))
        for modifier in formula.get("modifiers") or []:
            if self._conditions.evaluate(modifier):
                probability += float(modifier.get("bonus", 0.0))
        probability = max(0.0, min(1.0, probability))

        passed = bool(self._rng.random() < probability)
        branch = effect.get("success") if passed else effect.get("failure")
        return {
            "success": True,
            "probability_result": passed,
            "probability": probability,
            "effects": self.execute_all(branch),
        }

    def _remove_tenant(self, effect: Mapping[str, Any]) -> dict:
        target = effect.get("target")
        if target in ("infected", "sick"):
            infected = self._state.tenants.infected()
            if infected and self._evict is not None:
                tenant = infected[0]
                if self._evict(tenant.id, "infected"):
                    return {"success": True, "tenant_id": tenant.id, "name": tenant.name}
        return {"success": False, "reason": "no_target_found"}

    def _heal_tenant(self, effect: Mapping[str, Any]) -> dict:
        infected = self._state.tenants.infected()
        if not infected:
            return {"success": False, "reason": "no_infected_tenants"}
        tenant = infected[0]
        tenant.infected = False
        self._log("TENANT", f"{tenant.name} has recovered", tenant_ids=[tenant.id])
        return {"success": True, "tenant_id": tenant.id}

    def _check_soldier_bonus(self, effect: Mapping[str, Any]) -> dict:
        if self._state.tenants.count_type("soldier") > 0:
            return {
                "success": True,
                "soldier_bonus": True,
                "effects": self.execute_all(effect.get("effects")),
            }
        return {"success": True, "soldier_bonus": False}

    def _modify_state(self, effect: Mapping[str, Any]) -> dict:
        path = effect["path"]
        value = effect.get("value")
        operation = effect.get("operation", "set")
        if operation not in STATE_OPERATIONS:
            return {"success": False, "reason": "unknown_operation"}

        old_value = self._state.get_path(path)
        if operation == "add":
            new_value = (old_value or 0) + value
        elif operation == "multiply":
            new_value = (old_value or 0) * value
        else:
            new_value = value

        try:
            self._state.set_path(path, new_value)
        except StatePathError:
            return {"success": False, "reason": "path_not_writable", "path": path}
        return {"success": True, "path": path, "old_value": old_value, "new_value": new_value}

    # ---- Internal ----

    def _log(self, category: str, message: str, **kwargs) -> None:
        if self._logger is not None:
            self._logger.log(category, message, day=self._state.day, **kwargs)
