import numpy as np

from conftest import ScriptedRng
from shelter_sim.economy.resources import ResourceLedger, ResourceType
from shelter_sim.economy.trade import TradeCalculator, TradeSystem


def test_value_of_floors() -> None:
    calc = TradeCalculator()

    assert calc.value_of("food", 3) == 4      # 4.5
    assert calc.value_of("medical", 2) == 8
    assert calc.value_of("cash", 7) == 7
    assert calc.value_of("water", 5) == 0
    assert calc.value_of("food", float("nan")) == 0


def test_equivalent() -> None:
    calc = TradeCalculator()

    assert calc.equivalent("food", 3, "materials") == 1   # floor(4 / 3)
    assert calc.equivalent("medical", 3, "cash") == 12
    assert calc.equivalent("cash", 5, "medical") == 1


def test_round_trip_never_gains() -> None:
    calc = TradeCalculator()
    types = list(ResourceType)
    for a in types:
        for b in types:
            for n in range(0, 60):
                there = calc.equivalent(a, n, b)
                back = calc.equivalent(b, there, a)
                assert back <= n


def test_bundle_value() -> None:
    calc = TradeCalculator()

    assert calc.bundle_value({"food": 3, "fuel": 1, "cash": 2}) == 9  # 4.5 + 3 + 2


def test_exchange_converts_landlord_stock() -> None:
    ledger = ResourceLedger(initial={"medical": 3, "cash": 0})
    trade = TradeSystem(ledger, TradeCalculator(), np.random.default_rng(1))

    received = trade.exchange("medical", 2, "cash")

    assert received == 8
    assert ledger.get("medical") == 1
    assert ledger.get("cash") == 8
    assert trade.trade_log[-1].kind == "exchange"
    assert trade.daily_trades == 1


def test_exchange_rejects_shortfall_and_zero_yield() -> None:
    ledger = ResourceLedger(initial={"food": 1, "cash": 2})
    trade = TradeSystem(ledger, TradeCalculator(), np.random.default_rng(1))

    assert trade.exchange("food", 5, "cash") == 0
    assert trade.exchange("cash", 2, "medical") == 0  # floor(2 / 4)
    assert ledger.snapshot()["food"] == 1
    assert ledger.snapshot()["cash"] == 2


def test_mutual_aid_moves_food_to_needy_tenant(make_state) -> None:
    state = make_state({})
    needy = state.tenants.hire("Nell", "worker", pocket={"food": 0, "cash": 10})
    helper = state.tenants.hire("Hugo", "farmer", pocket={"food": 6, "cash": 10})
    trade = TradeSystem(state.ledger, TradeCalculator(), ScriptedRng(randoms=[0.1]))

    record = trade.process_mutual_aid(state.tenants.tenants, day=3)

    assert record is not None and record.kind == "food_aid"
    assert needy.holding("food") == 2
    assert helper.holding("food") == 4


def test_mutual_aid_skipped_when_roll_fails(make_state) -> None:
    state = make_state({})
    state.tenants.hire("Nell", "worker", pocket={"food": 0})
    state.tenants.hire("Hugo", "farmer", pocket={"food": 6})
    trade = TradeSystem(state.ledger, TradeCalculator(), ScriptedRng(randoms=[0.9]))

    assert trade.process_mutual_aid(state.tenants.tenants) is None


def _rent_desk(state):
    return TradeSystem(state.ledger, TradeCalculator(), ScriptedRng())


def test_rent_paid_in_cash(make_state) -> None:
    state = make_state({})
    tenant = state.tenants.hire("Nell", "worker", pocket={"cash": 15})
    trade = _rent_desk(state)

    report = trade.collect_rent(state.tenants, day=2)

    assert report.cash_total == 12
    assert report.defaulters == []
    assert tenant.holding("cash") == 3
    assert state.ledger.get("cash") == 12
    assert trade.trade_log[-1].kind == "rent"


def test_reinforced_room_pays_bonus(make_state) -> None:
    state = make_state({})
    state.tenants.get_room(1).reinforced = True
    tenant = state.tenants.hire("Nell", "worker", pocket={"cash": 12})
    trade = _rent_desk(state)

    report = trade.collect_rent(state.tenants)

    assert report.payments[0].bonus == 2   # floor(12 * 0.2)
    assert tenant.holding("cash") == 0
    assert state.ledger.get("cash") == 14


def test_rent_shortfall_taken_in_goods(make_state) -> None:
    state = make_state({})
    tenant = state.tenants.hire("Hugo", "farmer", pocket={"cash": 4, "food": 3, "materials": 5})
    trade = _rent_desk(state)

    payment = trade.collect_rent(state.tenants).payments[0]

    # 6 owed: 3 food (4.5) then 1 materials (3)
    assert payment.cash == 4
    assert payment.resources == {"food": 3, "materials": 1}
    assert payment.paid_in_full
    assert tenant.holding("food") == 0
    assert tenant.holding("materials") == 4
    assert state.ledger.get("food") == 3
    assert state.ledger.get("materials") == 1
    assert state.ledger.get("cash") == 4


def test_rent_shortage_is_reported(make_state) -> None:
    state = make_state({})
    tenant = state.tenants.hire("Old Bo", "elder", pocket={"cash": 2, "food": 1})
    trade = _rent_desk(state)

    report = trade.collect_rent(state.tenants)

    # 8 owed, 2 cash and 1 food (1.5) leave 4.5
    assert report.payments[0].shortage == 5
    assert report.defaulters == [tenant.id]
    assert report.payments[0].bonus == 0
    assert state.ledger.get("cash") == 2
    assert state.ledger.get("food") == 1


def test_rent_once_per_day_and_never_from_the_sick(make_state) -> None:
    state = make_state({})
    healthy = state.tenants.hire("Nell", "worker", pocket={"cash": 30})
    sick = state.tenants.hire("Hugo", "farmer", pocket={"cash": 30})
    sick.infected = True
    trade = _rent_desk(state)

    report = trade.collect_rent(state.tenants)
    assert [p.tenant_id for p in report.payments] == [healthy.id]
    assert sick.holding("cash") == 30
    assert trade.rent_collected
    assert trade.collect_rent(state.tenants) is None

    trade.reset_daily()
    assert trade.collect_rent(state.tenants) is not None
    assert healthy.holding("cash") == 6
