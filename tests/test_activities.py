from conftest import ScriptedRng
from shelter_sim.economy.activities import ScavengeSystem, UpkeepSystem
from shelter_sim.economy.resources import ResourceType


def test_daily_consumption(make_state) -> None:
    state = make_state({"food": 10, "fuel": 3})
    fed = state.tenants.hire("Fed", "worker", pocket={"food": 5})
    hungry = state.tenants.hire("Hungry", "farmer", pocket={"food": 1})
    elder = state.tenants.hire("Elder", "elder", pocket={"food": 2, "medical": 0})
    upkeep = UpkeepSystem(state)

    report = upkeep.process_daily_consumption()

    assert state.ledger.get("food") == 8
    assert state.ledger.get("fuel") == 2
    assert fed.holding("food") == 3
    assert hungry.holding("food") == 0
    assert report.tenants_fed == [fed.id, elder.id]
    assert report.tenants_hungry == [hungry.id]
    assert report.elders_without_medicine == [elder.id]


def test_landlord_hunger(make_state) -> None:
    state = make_state({"food": 1})
    upkeep = UpkeepSystem(state)

    upkeep.process_daily_consumption()
    assert state.ledger.get("food") == 0
    assert state.landlord_hunger == 1

    upkeep.process_daily_consumption()
    assert state.landlord_hunger == 3

    state.ledger.modify("food", 5)
    upkeep.process_daily_consumption()
    assert state.landlord_hunger == 2


def test_yard_harvest_once_per_day_with_cooldown(make_state) -> None:
    state = make_state({"food": 0})
    upkeep = UpkeepSystem(state)

    assert upkeep.harvest_yard()
    assert not upkeep.harvest_yard()
    assert state.ledger.get("food") == 2

    upkeep.reset_daily()
    assert not upkeep.harvest_yard()  # cooldown 1 left
    upkeep.reset_daily()
    assert upkeep.harvest_yard()
    assert state.ledger.get("food") == 4


def test_repair_room_costs_less_with_worker(make_state) -> None:
    state = make_state({"materials": 5})
    room = state.tenants.rooms[0]
    room.needs_repair = True
    upkeep = UpkeepSystem(state)

    assert upkeep.repair_room(room.id)
    assert not room.needs_repair
    assert state.ledger.get("materials") == 2

    room.needs_repair = True
    state.tenants.hire("Handy", "worker")
    assert upkeep.repair_room(room.id)
    assert state.ledger.get("materials") == 0

    room.needs_repair = True
    assert not upkeep.repair_room(room.id)
    assert room.needs_repair


def test_scavenging_success_adds_rewards(make_state) -> None:
    state = make_state({"food": 0, "materials": 0, "medical": 0})
    scout = state.tenants.hire("Scout", "soldier")
    # roll 0.5*100 < 85; two reward types; food 6, materials 4
    rng = ScriptedRng(randoms=[0.5], integers=[2, 6, 4])
    scavenging = ScavengeSystem(state, rng)

    result = scavenging.send(scout.id)

    assert result.success
    assert result.rewards == {"food": 6, "materials": 4}
    assert state.ledger.get("food") == 6
    assert state.ledger.get("materials") == 4
    assert scavenging.remaining_today == 1


def test_scavenging_failure_can_injure(make_state) -> None:
    state = make_state({})
    elder = state.tenants.hire("Gran", "elder", pocket={"food": 3})
    scavenging = ScavengeSystem(state, ScriptedRng(randoms=[0.45, 0.05]))

    result = scavenging.send(elder.id)

    assert not result.success
    assert result.injured
    assert elder.holding(ResourceType.FOOD) == 2


def test_scavenging_daily_limit_and_availability(make_state) -> None:
    state = make_state({})
    a = state.tenants.hire("A", "worker")
    b = state.tenants.hire("B", "worker")
    b.infected = True
    scavenging = ScavengeSystem(state, ScriptedRng(randoms=[0.99, 0.99, 0.99, 0.99]))

    assert scavenging.send(b.id).reason == "tenant_unavailable"
    assert scavenging.send(999).reason == "tenant_not_found"
    scavenging.send(a.id)
    scavenging.send(a.id)
    assert scavenging.send(a.id).reason == "daily_limit_reached"
    assert ScavengeSystem.success_rate(a) == 75
