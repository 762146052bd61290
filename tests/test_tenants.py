from conftest import ScriptedRng
from shelter_sim.agents.tenant import (
    _TENANT_NAMES,
    TenantRegistry,
    TenantType,
    create_applicant,
    generate_applicants,
    random_tenant_profile,
)


def test_hire_sets_rent_by_occupation() -> None:
    registry = TenantRegistry(room_count=3)

    doctor = registry.hire("Ann", "doctor")
    elder = registry.hire("Bo", "elder")
    free = registry.hire("Cy", "worker", rent=-3)

    assert doctor.rent == 15
    assert elder.rent == 8
    assert free.rent == 0
    assert registry.names() == ["Ann", "Bo", "Cy"]


def test_profile_names_skip_taken_ones() -> None:
    name, tenant_type = random_tenant_profile(ScriptedRng(), taken_names=["aldric", "Brynn"])

    assert name == "Cedric"
    assert tenant_type is TenantType.DOCTOR


def test_profile_names_stay_unique_once_the_list_runs_out() -> None:
    taken = list(_TENANT_NAMES)

    first, _ = random_tenant_profile(ScriptedRng(), taken_names=taken)
    second, _ = random_tenant_profile(ScriptedRng(), taken_names=taken + [first])

    assert first == "Aldric 2"
    assert second == "Aldric 3"


def test_healthy_applicant() -> None:
    applicant = create_applicant(ScriptedRng(randoms=[0.5]))

    assert applicant.name == "Aldric"
    assert applicant.tenant_type is TenantType.DOCTOR
    assert applicant.rent == 15
    assert not applicant.infected
    assert not applicant.revealed_infection
    assert applicant.appearance == "Looks alert and well rested"
    assert applicant.pocket["medical"] == 5


def test_infected_applicant_looks_unwell() -> None:
    applicant = create_applicant(ScriptedRng(randoms=[0.05]))

    assert applicant.infected
    assert applicant.infection_risk == 0.1
    assert applicant.appearance == "Glassy stare and slow reactions"


def test_applicant_queue_names_are_unique() -> None:
    queue = generate_applicants(ScriptedRng(), count=3, taken_names=["Aldric"])

    assert [a.name for a in queue] == ["Brynn", "Cedric", "Dara"]


def test_applicant_queue_size_is_drawn() -> None:
    assert len(generate_applicants(ScriptedRng())) == 1
    assert len(generate_applicants(ScriptedRng(integers=[3]))) == 3
