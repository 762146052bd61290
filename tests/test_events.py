import numpy as np

from conftest import ScriptedRng
from shelter_sim.core.config import EXECUTION_HISTORY_KEEP, MAX_EXECUTION_HISTORY
from shelter_sim.economy.thresholds import ThresholdClassifier
from shelter_sim.simulation.catalog import load_event_catalog
from shelter_sim.simulation.events import EventScheduler


def _event(event_id, priority=0, conditions=None, choices=None, **extra):
    event = {
        "id": event_id,
        "title": event_id,
        "description": f"{event_id} happens",
        "priority": priority,
        "conditions": conditions or [],
        "choices": choices if choices is not None else [
            {"id": "ok", "effects": [{"type": "modifyResource", "resource": "food", "amount": 1}]},
        ],
    }
    event.update(extra)
    return event


def _scheduler(rule_engine, config, resources=None, rng=None, logger=None):
    rng = rng if rng is not None else np.random.default_rng(7)
    state, evaluator, executor = rule_engine(resources, rng=rng)
    catalog = load_event_catalog(config)
    scheduler = EventScheduler(
        catalog, evaluator, executor, state, rng, ThresholdClassifier(), logger,
    )
    return scheduler, state


def test_lower_priority_never_selected(rule_engine) -> None:
    config = {"random_events": [_event("a", 10), _event("b", 10), _event("c", 5)]}
    scheduler, _ = _scheduler(rule_engine, config)
    events = scheduler.catalog.category("random")

    picks = [scheduler.select_by_priority(events).id for _ in range(1000)]

    assert "c" not in picks
    assert {"a", "b"} == set(picks)


def test_missing_priority_counts_as_zero(rule_engine) -> None:
    plain = _event("plain")
    del plain["priority"]
    config = {"random_events": [plain, _event("urgent", 1)]}
    scheduler, _ = _scheduler(rule_engine, config)

    assert scheduler.select_by_priority(scheduler.catalog.category("random")).id == "urgent"


def test_selection_is_deterministic_with_seed(rule_engine) -> None:
    config = {"random_events": [_event(str(i), 3) for i in range(6)]}

    def picks(seed):
        scheduler, _ = _scheduler(rule_engine, config, rng=np.random.default_rng(seed))
        events = scheduler.catalog.category("random")
        return [scheduler.select_by_priority(events).id for _ in range(50)]

    assert picks(11) == picks(11)


def test_random_gate(rule_engine) -> None:
    config = {"random_events": [_event("only")]}

    blocked, _ = _scheduler(rule_engine, config, rng=ScriptedRng(randoms=[0.31]))
    assert blocked.process_random_events() is None

    passed, _ = _scheduler(rule_engine, config, rng=ScriptedRng(randoms=[0.3]))
    raised = passed.process_random_events()
    assert raised is not None and raised.event_id == "only"
    assert passed.pending == [raised]


def test_trigger_conditions_filter(rule_engine) -> None:
    config = {
        "special_events": [
            _event("rich", 9, conditions=[{"type": "hasResource", "resource": "cash", "amount": 100}]),
            _event("early", 1, conditions=[{"type": "dayRange", "max": 3}]),
        ],
    }
    scheduler, state = _scheduler(rule_engine, config, resources={"cash": 10})

    assert scheduler.process_special_events().event_id == "early"
    state.clock.day = 4
    assert scheduler.process_special_events() is None


def test_conflict_gate_uses_conflict_probability(rule_engine) -> None:
    config = {"conflict_events": [_event("fight")]}
    plenty = {"food": 50, "materials": 50, "medical": 50, "fuel": 50}

    # No tenants, satisfaction defaults to 50: 0.25 + 20 * 0.003 = 0.31
    scheduler, _ = _scheduler(rule_engine, config, plenty, rng=ScriptedRng(randoms=[0.32]))
    assert abs(scheduler.conflict_chance() - 0.31) < 1e-9
    assert scheduler.process_conflict_events() is None

    scheduler, _ = _scheduler(rule_engine, config, plenty, rng=ScriptedRng(randoms=[0.30]))
    assert scheduler.process_conflict_events().event_id == "fight"


def test_generated_choices(rule_engine) -> None:
    event = _event(
        "mixed",
        choices=[
            {"id": "free"},
            {"id": "costly", "conditions": [{"type": "hasResource", "resource": "cash", "amount": 50}]},
        ],
        dynamic_choices={
            "base": [
                {"id": "base_ok"},
                {"id": "base_blocked", "conditions": [{"type": "hasTenantType", "tenantType": "elder"}]},
            ],
            "conditional": [
                {"condition": {"type": "hasResource", "resource": "cash", "amount": 5}, "choice": {"id": "cond_ok"}},
                {"condition": {"type": "hasResource", "resource": "cash", "amount": 500}, "choice": {"id": "cond_no"}},
            ],
        },
    )
    scheduler, _ = _scheduler(rule_engine, {"special_events": [event]}, resources={"cash": 10})

    raised = scheduler.process_special_events()

    assert [c.id for c in raised.choices] == ["free", "base_ok", "cond_ok"]


def test_execute_choice_runs_effects_and_records(rule_engine) -> None:
    scheduler, state = _scheduler(rule_engine, {"special_events": [_event("gift")]}, resources={"food": 0})
    scheduler.process_special_events()

    outcome = scheduler.execute_choice("gift", "ok")

    assert outcome["success"]
    assert state.ledger.get("food") == 1
    record = scheduler.executions[-1]
    assert (record.event_id, record.choice_id, record.day) == ("gift", "ok", state.day)
    assert scheduler.pending == []


def test_execute_choice_failures(rule_engine) -> None:
    locked = {"id": "locked", "conditions": [{"type": "hasResource", "resource": "cash", "amount": 99}]}
    scheduler, _ = _scheduler(rule_engine, {"random_events": [_event("e", choices=[locked])]})

    assert scheduler.execute_choice("missing", "x")["reason"] == "event_not_found"
    assert scheduler.execute_choice("e", "x")["reason"] == "choice_not_found"
    assert scheduler.execute_choice("e", "locked")["reason"] == "conditions_not_met"
    assert scheduler.executions == []


def test_conditional_choice_can_be_executed(rule_engine) -> None:
    event = _event(
        "dyn",
        choices=[],
        dynamic_choices={"conditional": [{
            "condition": {"type": "dayRange", "min": 1},
            "choice": {"id": "late", "effects": [{"type": "modifyResource", "resource": "fuel", "amount": 2}]},
        }]},
    )
    scheduler, state = _scheduler(rule_engine, {"scripted_events": [event]}, resources={"fuel": 0})

    assert scheduler.execute_choice("dyn", "late")["success"]
    assert state.ledger.get("fuel") == 2


def test_execution_history_trims_to_last_fifty(rule_engine) -> None:
    scheduler, _ = _scheduler(rule_engine, {"random_events": [_event("loop")]})

    for _ in range(MAX_EXECUTION_HISTORY + 1):
        scheduler.execute_choice("loop", "ok")

    assert len(scheduler.executions) == EXECUTION_HISTORY_KEEP


def test_processing_errors_are_contained(rule_engine, logger) -> None:
    scheduler, _ = _scheduler(rule_engine, {"random_events": [_event("x")]}, logger=logger)

    def explode(events):
        raise RuntimeError("boom")

    scheduler.select_by_priority = explode
    assert scheduler.process_special_events() is None
    assert any("boom" in e.message for e in logger.by_category("SYSTEM"))
