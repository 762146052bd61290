"""Main simulation loop and the facade the host calls into."""

from __future__ import annotations

from typing import Callable, Mapping, Optional

import numpy as np
from numpy.random import Generator

from shelter_sim.agents.tenant import (
    Applicant,
    Tenant,
    TenantRegistry,
    TenantType,
    generate_applicants,
    random_tenant_profile,
)
from shelter_sim.core.clock import SimClock
from shelter_sim.core.config import (
    AID_AFFINITY_BONUS,
    RANDOM_EVENT_CHANCE,
    RESOURCE_VALIDATION_DEFAULT,
    STARTING_ROOMS,
    STARTING_TENANTS,
)
from shelter_sim.core.state import WorldState
from shelter_sim.economy.activities import ScavengeResult, ScavengeSystem, UpkeepSystem
from shelter_sim.economy.resources import ModificationRecord, ResourceLedger, ResourceType
from shelter_sim.economy.scarcity import ConsumptionTracker, ScarcityAnalysis, ScarcityAnalyzer
from shelter_sim.economy.thresholds import ResourceStatus, ThresholdClassifier
from shelter_sim.economy.trade import RentReport, TradeCalculator, TradeRecord, TradeSystem
from shelter_sim.simulation.catalog import load_event_catalog
from shelter_sim.simulation.conditions import ConditionEvaluator
from shelter_sim.simulation.effects import EffectExecutor
from shelter_sim.simulation.events import EventScheduler, TriggeredEvent
from shelter_sim.simulation.library import DEFAULT_EVENT_CONFIG
from shelter_sim.simulation.metrics import MetricsCollector
from shelter_sim.social.conflict import ConflictDetector, ConflictEvent
from shelter_sim.social.relationships import RelationshipManager
from shelter_sim.social.satisfaction import SatisfactionModel
from shelter_sim.viz.logger import SimLogger

ChoicePolicy = Callable[[TriggeredEvent, Generator], Optional[str]]


def first_choice(raised: TriggeredEvent, rng: Generator) -> Optional[str]:
    """Always take the first available choice."""
    return raised.choices[0].id if raised.choices else None


def random_choice(raised: TriggeredEvent, rng: Generator) -> Optional[str]:
    """Pick uniformly among the available choices."""
    if not raised.choices:
        return None
    return raised.choices[int(rng.integers(len(raised.choices)))].id


class SimulationEngine:
    """Orchestrates the shelter simulation."""

    def __init__(
        self,
        seed: int = 42,
        tenants: int = STARTING_TENANTS,
        rooms: int = STARTING_ROOMS,
        event_config: Optional[Mapping] = None,
        initial_resources: Optional[Mapping] = None,
        thresholds: Optional[Mapping] = None,
        validate_resources: bool = RESOURCE_VALIDATION_DEFAULT,
        random_event_chance: float = RANDOM_EVENT_CHANCE,
        logger: Optional[SimLogger] = None,
        choice_policy: ChoicePolicy = first_choice,
        autopilot: bool = False,
    ) -> None:
        self.rng: Generator = np.random.default_rng(seed)
        self._starting_tenants = tenants
        self.logger = logger or SimLogger(stdout=False)
        self.choice_policy = choice_policy
        self.autopilot = autopilot
        self._in_tick = False

        # Core state
        self.clock = SimClock()
        self.registry = TenantRegistry(room_count=rooms)
        self.ledger = ResourceLedger(
            initial=initial_resources,
            validate=validate_resources,
            tenants=self.registry,
            clock=self.clock,
            on_modified=self._on_resource_modified,
        )
        self.state = WorldState(clock=self.clock, ledger=self.ledger, tenants=self.registry)

        # Economy
        self.classifier = ThresholdClassifier(thresholds)
        self.consumption = ConsumptionTracker()
        self.scarcity = ScarcityAnalyzer(self.ledger, self.classifier, self.consumption)
        self.trade = TradeSystem(self.ledger, TradeCalculator(), self.rng, self.logger)
        self.upkeep = UpkeepSystem(self.state, self.logger)
        self.scavenging = ScavengeSystem(self.state, self.rng, self.logger)

        # Social
        self.relationships = RelationshipManager()
        self.satisfaction = SatisfactionModel(self.state, self.relationships, self.logger)
        self.conflicts = ConflictDetector(
            self.state, self.satisfaction, self.relationships, self.rng, self.logger,
        )

        # Rule engine
        self.conditions = ConditionEvaluator(self.state, self.rng, self.classifier, self.logger)
        self.effects = EffectExecutor(
            self.state, self.rng, self.conditions, evict=self.evict_tenant, logger=self.logger,
        )
        catalog = load_event_catalog(
            DEFAULT_EVENT_CONFIG if event_config is None else event_config, self.logger,
        )
        self.events = EventScheduler(
            catalog, self.conditions, self.effects, self.state, self.rng,
            self.classifier, self.logger, random_event_chance=random_event_chance,
        )

        self.metrics = MetricsCollector()
        self.applicants: list[Applicant] = []

    def initialize(self) -> None:
        """Move in the starting tenants, who already know each other."""
        for _ in range(self._starting_tenants):
            name, tenant_type = random_tenant_profile(self.rng, self.registry.names())
            tenant = self.registry.hire(name, tenant_type, day=self.clock.day)
            if tenant is None:
                break
            self.satisfaction.initialize_tenant(tenant.id)
        self.relationships.seed_neutral([t.id for t in self.registry.tenants])
        self.satisfaction.recompute()
        self.consumption.update_daily(
            len(self.registry), self.registry.count_type("elder"), self.clock.day,
        )
        self._refresh_applicants()
        self.logger.log(
            "TENANT", f"Shelter opened with {len(self.registry)} tenants", day=self.clock.day,
        )

    def run(self, days: int) -> None:
        """Run the simulation for a number of days."""
        for _ in range(days):
            self.tick()

    def tick(self) -> None:
        """One day of simulation."""
        if self._in_tick:
            raise RuntimeError("tick() is not re-entrant")
        self._in_tick = True
        try:
            self._tick()
        finally:
            self._in_tick = False

    def _tick(self) -> None:
        # 1. DAWN: clock and daily counters
        self.clock.advance()
        day = self.clock.day
        self.upkeep.reset_daily()
        self.trade.reset_daily()
        self._refresh_applicants()

        # 2. MORNING: events, resolved automatically in headless runs
        for process in (
            self.process_special_events,
            self.process_random_events,
            self.process_conflict_events,
        ):
            raised = process()
            if raised is not None:
                self._auto_resolve(raised)

        # 3. DAYTIME: rent, then landlord actions
        self.collect_rent()
        if self.autopilot:
            self._autopilot_actions()

        # 4. EVENING: consumption and mutual aid
        self.upkeep.process_daily_consumption()
        self.consumption.update_daily(len(self.registry), self.registry.count_type("elder"), day)
        self.process_mutual_aid()
        self.metrics.record_trade(self.trade.daily_trades)

        # 5. NIGHT: satisfaction and conflicts
        self.satisfaction.recompute()
        raised_conflicts = self.conflicts.check_all()
        self.metrics.record_conflicts(len(raised_conflicts))

        # 6. METRICS & LOG
        self.metrics.collect_daily(self.state, self.satisfaction, self.conflicts)
        self.logger.flush_day(day)

    # ------------------------------------------------------------------
    # Host-facing operations
    # ------------------------------------------------------------------

    def process_random_events(self) -> Optional[TriggeredEvent]:
        return self._counted(self.events.process_random_events())

    def process_conflict_events(self) -> Optional[TriggeredEvent]:
        return self._counted(self.events.process_conflict_events())

    def process_special_events(self) -> Optional[TriggeredEvent]:
        return self._counted(self.events.process_special_events())

    def execute_choice(self, event_id: str, choice_id: str) -> dict:
        outcome = self.events.execute_choice(event_id, choice_id)
        if outcome["success"]:
            self.metrics.record_choice()
        return outcome

    def modify_resource(self, resource, amount, reason: str = "manual", source: str = "player") -> bool:
        return self.ledger.modify(resource, amount, reason, source)

    def transfer_resource(self, from_owner, to_owner, resources: Mapping, reason: str = "transfer") -> bool:
        return self.ledger.transfer(from_owner, to_owner, resources, reason)

    def get_resource_status(self, resource) -> Optional[ResourceStatus]:
        rt = ResourceType.parse(resource)
        if rt is None:
            self.logger.log("SYSTEM", f"Unknown resource type {resource!r}", day=self.clock.day)
            return None
        return self.classifier.status(rt, self.ledger.get(rt), self.consumption.daily_rate(rt))

    def analyze_resource_scarcity(self, resource) -> Optional[ScarcityAnalysis]:
        rt = ResourceType.parse(resource)
        if rt is None:
            self.logger.log("SYSTEM", f"Unknown resource type {resource!r}", day=self.clock.day)
            return None
        return self.scarcity.analyze(rt)

    def recompute_satisfaction(self, tenant_id: Optional[int] = None) -> dict[int, int]:
        return self.satisfaction.recompute(tenant_id)

    def hire_tenant(
        self,
        name: str,
        tenant_type,
        room_id: Optional[int] = None,
        pocket: Optional[Mapping] = None,
        rent: Optional[int] = None,
        infected: bool = False,
    ) -> Optional[Tenant]:
        residents = self.registry.tenants
        tenant = self.registry.hire(
            name, tenant_type, room_id, pocket, day=self.clock.day, rent=rent, infected=infected,
        )
        if tenant is None:
            return None
        self.relationships.introduce(tenant, residents, self.rng)
        self.satisfaction.initialize_tenant(tenant.id)
        self.satisfaction.recompute(tenant.id)
        self.logger.log(
            "TENANT", f"{tenant.name} the {tenant.tenant_type.value} moved into room {tenant.room_id}",
            tenant_ids=[tenant.id], day=self.clock.day,
        )
        return tenant

    def hire_applicant(self, name: str, room_id: Optional[int] = None) -> Optional[Tenant]:
        """Move an applicant from today's queue in, hidden infection and all."""
        applicant = next((a for a in self.applicants if a.name.lower() == name.lower()), None)
        if applicant is None:
            return None
        tenant = self.hire_tenant(
            applicant.name, applicant.tenant_type, room_id, applicant.pocket,
            rent=applicant.rent, infected=applicant.infected,
        )
        if tenant is not None:
            self.applicants.remove(applicant)
        return tenant

    def inspect_applicants(self) -> list[Applicant]:
        """A healthy resident doctor exposes infected applicants. Returns those found."""
        doctors = [
            t for t in self.registry.tenants
            if t.tenant_type is TenantType.DOCTOR and not t.infected
        ]
        if not doctors:
            return []
        found = []
        for applicant in self.applicants:
            applicant.revealed_infection = applicant.infected
            if applicant.infected:
                found.append(applicant)
        if found:
            self.logger.log(
                "DANGER", f"Dr. {doctors[0].name} spotted infection in {', '.join(a.name for a in found)}",
                tenant_ids=[doctors[0].id], day=self.clock.day,
            )
        return found

    def collect_rent(self) -> Optional[RentReport]:
        return self.trade.collect_rent(self.registry, day=self.clock.day)

    def process_mutual_aid(self) -> Optional[TradeRecord]:
        """Let tenants help each other; helper and recipient grow closer."""
        aid = self.trade.process_mutual_aid(self.registry.tenants, self.clock.day)
        if aid is not None:
            helper_id, needy_id = aid.parties
            self.relationships.get_or_create(helper_id, needy_id).adjust(AID_AFFINITY_BONUS, aid.kind)
        return aid

    def evict_tenant(self, tenant_id: int, reason: str = "evicted") -> bool:
        tenant = self.registry.evict(tenant_id)
        if tenant is None:
            return False
        self.relationships.remove_tenant(tenant_id)
        self.satisfaction.forget(tenant_id)
        self.logger.log(
            "TENANT", f"{tenant.name} left the shelter ({reason})",
            tenant_ids=[tenant_id], day=self.clock.day,
        )
        return True

    def harvest_yard(self) -> bool:
        return self.upkeep.harvest_yard()

    def send_scavenging(self, tenant_id: int) -> ScavengeResult:
        result = self.scavenging.send(tenant_id)
        if result.reason not in ("tenant_not_found", "daily_limit_reached", "tenant_unavailable"):
            self.metrics.record_scavenge(result.success)
        return result

    def exchange(self, from_resource, amount, to_resource) -> int:
        return self.trade.exchange(from_resource, amount, to_resource, day=self.clock.day)

    def repair_room(self, room_id: int) -> bool:
        return self.upkeep.repair_room(room_id)

    def resolve_conflict(self, conflict_id: str, resolution: str = "mediated") -> bool:
        return self.conflicts.resolve(conflict_id, resolution)

    @property
    def active_conflicts(self) -> list[ConflictEvent]:
        return self.conflicts.active

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _counted(self, raised: Optional[TriggeredEvent]) -> Optional[TriggeredEvent]:
        if raised is not None:
            self.metrics.record_event()
        return raised

    def _refresh_applicants(self) -> None:
        self.applicants = generate_applicants(self.rng, taken_names=self.registry.names())

    def _auto_resolve(self, raised: TriggeredEvent) -> None:
        choice_id = self.choice_policy(raised, self.rng)
        if choice_id is None:
            self.events.dismiss(raised.event_id)
            return
        self.execute_choice(raised.event_id, choice_id)

    def _autopilot_actions(self) -> None:
        """Simple landlord routine for unattended runs."""
        self.harvest_yard()
        for room in self.registry.rooms:
            if room.needs_repair:
                self.repair_room(room.id)
        if self.registry.vacant_rooms():
            self.inspect_applicants()
            trusted = next((a for a in self.applicants if not a.revealed_infection), None)
            if trusted is not None:
                self.hire_applicant(trusted.name)
        candidates = [t for t in self.registry.tenants if not t.infected]
        candidates.sort(key=ScavengeSystem.success_rate, reverse=True)
        for tenant in candidates[:self.scavenging.remaining_today]:
            self.send_scavenging(tenant.id)
        for conflict in self.conflicts.active:
            self.resolve_conflict(conflict.id)

    def _on_resource_modified(self, record: ModificationRecord) -> None:
        level = self.classifier.alert_level(record.resource, record.new_value)
        if level is None:
            return
        analysis = self.scarcity.analyze(record.resource)
        self.logger.notify(
            "resource_threshold", level, day=record.day,
            resource=record.resource.value, value=record.new_value,
            scarcity_index=analysis.scarcity_index,
            depletion_days=analysis.depletion_days,
        )
