"""Daily upkeep and landlord actions: consumption, yard harvest, scavenging, repairs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from numpy.random import Generator

from shelter_sim.core.config import (
    BUILDING_DAILY_FUEL,
    ELDER_DAILY_MEDICAL,
    LANDLORD_DAILY_FOOD,
    MAX_SCAVENGE_PER_DAY,
    ROOM_REPAIR_COST,
    ROOM_REPAIR_COST_WITH_WORKER,
    SCAVENGE_DEFAULT_SUCCESS_RATE,
    SCAVENGE_INFECTION_CHANCE,
    SCAVENGE_INJURY_CHANCE,
    SCAVENGE_MAX_REWARD_TYPES,
    SCAVENGE_REWARDS,
    SCAVENGE_SUCCESS_RATES,
    TENANT_DAILY_FOOD,
    YARD_HARVEST_COOLDOWN_DAYS,
    YARD_HARVEST_FOOD,
)
from shelter_sim.core.state import WorldState
from shelter_sim.economy.resources import ResourceType


@dataclass
class UpkeepReport:
    """What the building consumed today and who went without."""

    landlord_ate: int = 0
    fuel_burned: int = 0
    tenants_fed: list[int] = field(default_factory=list)
    tenants_hungry: list[int] = field(default_factory=list)
    elders_without_medicine: list[int] = field(default_factory=list)


@dataclass
class ScavengeResult:
    """Outcome of one scavenging mission."""

    tenant_id: int
    success: bool
    rewards: dict[str, int] = field(default_factory=dict)
    injured: bool = False
    infection_scare: bool = False
    reason: str = ""


class UpkeepSystem:
    """Daily consumption and once-a-day yard harvest."""

    def __init__(self, state: WorldState, logger: Optional["SimLogger"] = None) -> None:  # noqa: F821
        self._state = state
        self._logger = logger

    def reset_daily(self) -> None:
        daily = self._state.daily
        daily.harvest_used = False
        daily.harvest_cooldown = max(0, daily.harvest_cooldown - 1)
        daily.scavenge_used = 0

    def process_daily_consumption(self) -> UpkeepReport:
        state = self._state
        ledger = state.ledger
        report = UpkeepReport()

        # Landlord
        food = ledger.get(ResourceType.FOOD)
        if food >= LANDLORD_DAILY_FOOD:
            ledger.modify(ResourceType.FOOD, -LANDLORD_DAILY_FOOD, "landlord_meal", "consumption")
            report.landlord_ate = LANDLORD_DAILY_FOOD
            state.landlord_hunger = max(0, state.landlord_hunger - 1)
        elif food >= 1:
            ledger.modify(ResourceType.FOOD, -1, "landlord_meal", "consumption")
            report.landlord_ate = 1
            state.landlord_hunger += 1
        else:
            state.landlord_hunger += 2
            self._log("DANGER", "The landlord went to bed hungry")

        # Building
        if ledger.get(ResourceType.FUEL) >= BUILDING_DAILY_FUEL:
            ledger.modify(ResourceType.FUEL, -BUILDING_DAILY_FUEL, "building_heating", "consumption")
            report.fuel_burned = BUILDING_DAILY_FUEL
        else:
            self._log("DANGER", "No fuel left to heat the building")

        # Tenants eat from their own pockets
        for tenant in state.tenants.tenants:
            pocket = tenant.pocket
            if pocket.get(ResourceType.FOOD, 0) >= TENANT_DAILY_FOOD:
                pocket[ResourceType.FOOD] -= TENANT_DAILY_FOOD
                report.tenants_fed.append(tenant.id)
            else:
                pocket[ResourceType.FOOD] = 0
                report.tenants_hungry.append(tenant.id)
                self._log("TENANT", f"{tenant.name} did not have enough food", tenant_ids=[tenant.id])
            if tenant.tenant_type.value == "elder":
                if pocket.get(ResourceType.MEDICAL, 0) >= ELDER_DAILY_MEDICAL:
                    pocket[ResourceType.MEDICAL] -= ELDER_DAILY_MEDICAL
                else:
                    report.elders_without_medicine.append(tenant.id)
        return report

    def can_harvest(self) -> bool:
        daily = self._state.daily
        return not daily.harvest_used and daily.harvest_cooldown == 0

    def harvest_yard(self) -> bool:
        if not self.can_harvest():
            return False
        self._state.ledger.modify(ResourceType.FOOD, YARD_HARVEST_FOOD, "yard_harvest", "harvest")
        self._state.daily.harvest_used = True
        self._state.daily.harvest_cooldown = YARD_HARVEST_COOLDOWN_DAYS
        self._log("RESOURCE", f"Harvested {YARD_HARVEST_FOOD} food from the yard")
        return True

    def repair_room(self, room_id: int) -> bool:
        state = self._state
        room = state.tenants.get_room(room_id)
        if room is None or not room.needs_repair:
            return False
        cost = ROOM_REPAIR_COST_WITH_WORKER if state.tenants.count_type("worker") else ROOM_REPAIR_COST
        if not state.ledger.modify(ResourceType.MATERIALS, -cost, "room_repair", "repair", validate=True):
            return False
        room.needs_repair = False
        self._log("RESOURCE", f"Room {room_id} repaired for {cost} materials")
        return True

    def _log(self, category: str, message: str, **kwargs) -> None:
        if self._logger is not None:
            self._logger.log(category, message, day=self._state.day, **kwargs)


class ScavengeSystem:
    """Send tenants out to search the ruins."""

    def __init__(
        self,
        state: WorldState,
        rng: Generator,
        logger: Optional["SimLogger"] = None,  # noqa: F821
    ) -> None:
        self._state = state
        self._rng = rng
        self._logger = logger

    @property
    def remaining_today(self) -> int:
        return max(0, MAX_SCAVENGE_PER_DAY - self._state.daily.scavenge_used)

    @staticmethod
    def success_rate(tenant: "Tenant") -> int:  # noqa: F821
        return SCAVENGE_SUCCESS_RATES.get(tenant.tenant_type.value, SCAVENGE_DEFAULT_SUCCESS_RATE)

    def send(self, tenant_id: int) -> ScavengeResult:
        state = self._state
        tenant = state.tenants.get(tenant_id)
        if tenant is None:
            return ScavengeResult(tenant_id=tenant_id, success=False, reason="tenant_not_found")
        if self.remaining_today == 0:
            return ScavengeResult(tenant_id=tenant_id, success=False, reason="daily_limit_reached")
        if tenant.infected or tenant.on_mission:
            return ScavengeResult(tenant_id=tenant_id, success=False, reason="tenant_unavailable")

        state.daily.scavenge_used += 1
        result = ScavengeResult(tenant_id=tenant_id, success=False)
        if self._rng.random() * 100 < self.success_rate(tenant):
            result.success = True
            result.rewards = self._roll_rewards()
            for key, amount in result.rewards.items():
                state.ledger.modify(key, amount, "scavenging", f"tenant:{tenant.id}")
            self._log("RESOURCE", f"{tenant.name} came back with {result.rewards}", [tenant.id])
        else:
            result.reason = "nothing_found"
            if self._rng.random() < SCAVENGE_INJURY_CHANCE:
                result.injured = True
                food = tenant.pocket.get(ResourceType.FOOD, 0)
                tenant.pocket[ResourceType.FOOD] = max(0, food - 1)
                self._log("DANGER", f"{tenant.name} got hurt while scavenging", [tenant.id])
            elif self._rng.random() < SCAVENGE_INFECTION_CHANCE:
                result.infection_scare = True
                self._log("DANGER", f"{tenant.name} may have been exposed to infection", [tenant.id])
            else:
                self._log("TENANT", f"{tenant.name} found nothing useful", [tenant.id])
        return result

    def _roll_rewards(self) -> dict[str, int]:
        kinds = list(SCAVENGE_REWARDS)
        count = int(self._rng.integers(1, SCAVENGE_MAX_REWARD_TYPES + 1))
        picked = [kinds[i] for i in self._rng.permutation(len(kinds))[:count]]
        rewards: dict[str, int] = {}
        for key in picked:
            low, high = SCAVENGE_REWARDS[key]
            rewards[key] = int(self._rng.integers(low, high + 1))
        return rewards

    def _log(self, category: str, message: str, tenant_ids: Optional[list[int]] = None) -> None:
        if self._logger is not None:
            self._logger.log(category, message, tenant_ids=tenant_ids, day=self._state.day)
