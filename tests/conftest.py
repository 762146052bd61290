from __future__ import annotations

import numpy as np
import pytest

from shelter_sim.agents.tenant import TenantRegistry
from shelter_sim.core.clock import SimClock
from shelter_sim.core.state import WorldState
from shelter_sim.economy.resources import ResourceLedger
from shelter_sim.economy.thresholds import ThresholdClassifier
from shelter_sim.simulation.conditions import ConditionEvaluator
from shelter_sim.simulation.effects import EffectExecutor
from shelter_sim.viz.logger import SimLogger


class ScriptedRng:
    """Replays fixed draws in place of a numpy Generator."""

    def __init__(self, randoms=(), integers=()) -> None:
        self.randoms = list(randoms)
        self.ints = list(integers)
        self.random_calls = 0

    def random(self) -> float:
        self.random_calls += 1
        return self.randoms.pop(0) if self.randoms else 0.0

    def integers(self, low, high=None):
        if self.ints:
            return self.ints.pop(0)
        return 0 if high is None else low

    def permutation(self, n):
        return np.arange(n)

    def choice(self, items):
        return items[0]


@pytest.fixture
def logger() -> SimLogger:
    return SimLogger(verbosity=3, stdout=False)


@pytest.fixture
def make_state():
    def _make(resources=None, rooms: int = 4, validate: bool = False) -> WorldState:
        clock = SimClock()
        registry = TenantRegistry(room_count=rooms)
        ledger = ResourceLedger(
            initial=resources if resources is not None else {},
            validate=validate,
            tenants=registry,
            clock=clock,
        )
        return WorldState(clock=clock, ledger=ledger, tenants=registry)

    return _make


@pytest.fixture
def rule_engine(make_state, logger):
    """Factory for (state, evaluator, executor) sharing one rng."""

    def _make(resources=None, rng=None, evict=None):
        state = make_state(resources)
        rng = rng if rng is not None else np.random.default_rng(0)
        evaluator = ConditionEvaluator(state, rng, ThresholdClassifier(), logger)
        if evict is None:
            def evict(tenant_id, reason):
                return state.tenants.evict(tenant_id) is not None
        executor = EffectExecutor(state, rng, evaluator, evict=evict, logger=logger)
        return state, evaluator, executor

    return _make
