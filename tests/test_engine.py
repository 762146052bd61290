import pytest

from conftest import ScriptedRng
from shelter_sim.agents.tenant import Applicant, TenantType
from shelter_sim.simulation.engine import SimulationEngine, random_choice
from shelter_sim.viz.logger import SimLogger


def _engine(**kwargs) -> SimulationEngine:
    kwargs.setdefault("logger", SimLogger(verbosity=3, stdout=False))
    engine = SimulationEngine(**kwargs)
    engine.initialize()
    return engine


def test_initialize_moves_in_starting_tenants() -> None:
    engine = _engine(seed=1, tenants=3)

    assert len(engine.registry) == 3
    assert len(engine.relationships) == 3
    assert all(r.affinity == 50 for r in engine.relationships.all())
    assert set(engine.state.satisfaction) == {t.id for t in engine.registry.tenants}


def test_run_collects_a_snapshot_per_day() -> None:
    engine = _engine(seed=5, autopilot=True, choice_policy=random_choice)

    engine.run(10)

    assert engine.clock.day == 11
    assert [s.day for s in engine.metrics.snapshots] == list(range(2, 12))
    for snapshot in engine.metrics.snapshots:
        assert all(v >= 0 for v in snapshot.resources.values())
        assert 0 <= snapshot.avg_satisfaction <= 100


def test_same_seed_same_history() -> None:
    def history(seed):
        engine = _engine(seed=seed, tenants=3, autopilot=True, choice_policy=random_choice)
        engine.run(15)
        return [(s.resources, s.avg_satisfaction, s.events_triggered) for s in engine.metrics.snapshots]

    assert history(21) == history(21)


def test_facade_resource_operations() -> None:
    engine = _engine(seed=2, tenants=0, initial_resources={"food": 5, "cash": 30})
    tenant = engine.hire_tenant("Ida", "doctor", pocket={"food": 4})

    assert engine.modify_resource("food", -3, "test")
    assert engine.ledger.get("food") == 2
    assert not engine.transfer_resource(tenant.id, "landlord", {"food": 10})
    assert engine.transfer_resource("landlord", "Ida", {"cash": 10})
    assert tenant.holding("cash") == 10

    status = engine.get_resource_status("food")
    assert status.level == "emergency"
    assert engine.get_resource_status("gold") is None

    analysis = engine.analyze_resource_scarcity("food")
    assert 0 <= analysis.scarcity_index <= 100
    assert engine.analyze_resource_scarcity("gold") is None


def test_threshold_notifications_follow_modifications() -> None:
    engine = _engine(seed=3, tenants=0, initial_resources={"food": 30})

    engine.modify_resource("food", -5)
    assert engine.logger.notifications_of("resource_threshold") == []

    engine.modify_resource("food", -22)
    notes = engine.logger.notifications_of("resource_threshold")
    assert notes[-1].level == "critical"
    assert notes[-1].data["resource"] == "food"
    # 3 food against a full stock of 30
    assert abs(notes[-1].data["scarcity_index"] - 90.0) < 1e-9
    assert notes[-1].data["depletion_days"] == 1


def test_hire_and_evict_keep_social_state_consistent() -> None:
    engine = _engine(seed=4, tenants=2)
    newcomer = engine.hire_tenant("Jon", "elder")

    assert len(engine.relationships.get_all_for(newcomer.id)) == 2
    assert newcomer.id in engine.state.satisfaction

    assert engine.evict_tenant(newcomer.id)
    assert engine.relationships.get_all_for(newcomer.id) == []
    assert newcomer.id not in engine.state.satisfaction
    assert not engine.evict_tenant(newcomer.id)


def test_hire_fails_without_vacant_room() -> None:
    engine = _engine(seed=4, tenants=2, rooms=2)
    assert engine.hire_tenant("Late", "worker") is None


def test_fever_event_evicts_through_engine() -> None:
    engine = _engine(seed=6, tenants=2, initial_resources={"medical": 0})
    patient = engine.registry.tenants[0]
    patient.infected = True

    raised = engine.process_special_events()
    assert raised.event_id == "fever_outbreak"
    assert [c.id for c in raised.choices] == ["quarantine_out"]

    outcome = engine.execute_choice("fever_outbreak", "quarantine_out")
    assert outcome["success"]
    assert engine.registry.get(patient.id) is None
    assert patient.id not in engine.state.satisfaction


def test_recompute_satisfaction_facade() -> None:
    engine = _engine(seed=8, tenants=1)
    tenant = engine.registry.tenants[0]
    before = engine.state.satisfaction[tenant.id]

    engine.state.building.patrol_system = True
    changed = engine.recompute_satisfaction(tenant.id)

    assert changed == {tenant.id: before + 4}


def test_tick_is_not_reentrant() -> None:
    engine = _engine(seed=9)
    engine._in_tick = True

    with pytest.raises(RuntimeError):
        engine.tick()


def test_conflicts_raised_and_resolved() -> None:
    engine = _engine(seed=10, tenants=3, initial_resources={"food": 0, "fuel": 10})
    engine.run(1)

    assert engine.active_conflicts
    conflict = engine.active_conflicts[0]
    assert engine.resolve_conflict(conflict.id)
    assert conflict.resolved


def test_exchange_and_harvest() -> None:
    engine = _engine(seed=12, tenants=0, initial_resources={"food": 0, "medical": 2, "cash": 0})

    assert engine.exchange("medical", 1, "cash") == 4
    assert engine.harvest_yard()
    assert not engine.harvest_yard()
    assert engine.ledger.get("food") == 2


def _walk_in(name: str, infected: bool) -> Applicant:
    return Applicant(
        name=name, tenant_type=TenantType.WORKER, rent=12, infection_risk=0.2,
        infected=infected, appearance="Quiet", pocket={"food": 4, "cash": 15},
    )


def test_applicant_queue_avoids_resident_names() -> None:
    engine = _engine(seed=14, tenants=3)
    residents = set(engine.registry.names())
    queued = [a.name for a in engine.applicants]

    assert 1 <= len(queued) <= 3
    assert len(set(queued)) == len(queued)
    assert not residents & set(queued)


def test_hired_applicant_brings_hidden_infection() -> None:
    engine = _engine(seed=6, tenants=1, initial_resources={"medical": 0})
    engine.applicants = [_walk_in("Mara", infected=True)]

    tenant = engine.hire_applicant("mara")

    assert tenant.infected
    assert tenant.rent == 12
    assert tenant.holding("food") == 4
    assert engine.applicants == []
    assert engine.hire_applicant("Mara") is None
    assert engine.process_special_events().event_id == "fever_outbreak"


def test_doctor_inspection_exposes_infection() -> None:
    engine = _engine(seed=7, tenants=0)
    engine.applicants = [_walk_in("Mara", infected=True), _walk_in("Tom", infected=False)]

    assert engine.inspect_applicants() == []
    assert not engine.applicants[0].revealed_infection

    engine.hire_tenant("Ida", "doctor")
    found = engine.inspect_applicants()

    assert [a.name for a in found] == ["Mara"]
    assert engine.applicants[0].revealed_infection
    assert not engine.applicants[1].revealed_infection


def test_rent_collected_once_each_day() -> None:
    engine = _engine(seed=15, tenants=0, initial_resources={"cash": 0}, random_event_chance=0.0)
    tenant = engine.hire_tenant("Ida", "worker", pocket={"cash": 15})

    report = engine.collect_rent()
    assert report.cash_total == 12
    assert engine.ledger.get("cash") == 12
    assert engine.collect_rent() is None

    engine.tick()
    rent_days = [r.day for r in engine.trade.trade_log if r.kind == "rent"]
    assert rent_days == [1, engine.clock.day]
    assert tenant.holding("cash") == 0


def test_mutual_aid_brings_tenants_closer() -> None:
    engine = _engine(seed=16, tenants=0)
    needy = engine.hire_tenant("Nell", "worker", pocket={"food": 0, "cash": 10})
    helper = engine.hire_tenant("Hugo", "farmer", pocket={"food": 6, "cash": 10})
    rel = engine.relationships.get(needy.id, helper.id)
    before = rel.affinity
    engine.trade._rng = ScriptedRng(randoms=[0.1])

    aid = engine.process_mutual_aid()

    assert aid.kind == "food_aid"
    assert rel.affinity == min(100, before + 5)
    assert rel.interactions == ["food_aid"]
