"""Tenants, rooms and the registry that hires and evicts them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Mapping, Optional, Union

from numpy.random import Generator

from shelter_sim.core.config import (
    APPLICANT_POCKETS,
    APPLICANTS_PER_DAY,
    DEFAULT_INFECTION_RISK,
    DEFAULT_RENT,
    STARTING_POCKET,
    STARTING_ROOMS,
    TENANT_INFECTION_RISK,
    TENANT_RENT,
)
from shelter_sim.economy.resources import ResourceType

_TENANT_NAMES: list[str] = [
    "Aldric", "Brynn", "Cedric", "Dara", "Edwin", "Fiona", "Gareth", "Helena",
    "Ivor", "Jessa", "Kael", "Lyra", "Magnus", "Nessa", "Oswin", "Petra",
    "Quinn", "Rhea", "Silas", "Thea", "Ulric", "Vera", "Wren", "Yara",
]

_NORMAL_APPEARANCES: list[str] = [
    "Looks alert and well rested",
    "Neatly dressed and speaks clearly",
    "Clear eyes and quick to answer",
    "Firm, warm handshake",
    "Calm and organised in conversation",
]

_INFECTED_APPEARANCES: list[str] = [
    "Glassy stare and slow reactions",
    "Pale skin and a slight tremor in the hands",
    "Pauses mid-sentence as if lost in thought",
    "Bloodstains on the sleeve, blamed on an accident",
    "Shivering despite the warm room",
]


class TenantType(Enum):
    DOCTOR = "doctor"
    WORKER = "worker"
    FARMER = "farmer"
    SOLDIER = "soldier"
    ELDER = "elder"

    @classmethod
    def parse(cls, value) -> Optional["TenantType"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


@dataclass
class Room:
    """A rentable room in the building."""

    id: int
    reinforced: bool = False
    needs_repair: bool = False
    tenant_id: Optional[int] = None

    @property
    def occupied(self) -> bool:
        return self.tenant_id is not None


@dataclass
class Tenant:
    """A resident with an occupation and a personal pocket of resources."""

    id: int
    name: str
    tenant_type: TenantType
    room_id: Optional[int] = None
    pocket: dict[ResourceType, int] = field(default_factory=dict)
    rent: int = DEFAULT_RENT
    infected: bool = False
    on_mission: bool = False
    hired_day: int = 0

    def holding(self, resource) -> int:
        return self.pocket.get(ResourceType.parse(resource), 0)


class TenantRegistry:
    """Owns rooms and current tenants."""

    def __init__(self, room_count: int = STARTING_ROOMS) -> None:
        self._tenants: dict[int, Tenant] = {}
        self._rooms: dict[int, Room] = {i: Room(id=i) for i in range(1, room_count + 1)}
        self._next_id: int = 1

    @property
    def tenants(self) -> list[Tenant]:
        return list(self._tenants.values())

    @property
    def rooms(self) -> list[Room]:
        return list(self._rooms.values())

    def __len__(self) -> int:
        return len(self._tenants)

    def get(self, tenant_id: int) -> Optional[Tenant]:
        return self._tenants.get(tenant_id)

    def get_room(self, room_id: int) -> Optional[Room]:
        return self._rooms.get(room_id)

    def room_of(self, tenant: Tenant) -> Optional[Room]:
        return self._rooms.get(tenant.room_id) if tenant.room_id is not None else None

    def find(self, key: Union[int, str]) -> Optional[Tenant]:
        """Look up by id, or by case-insensitive name."""
        if isinstance(key, int) and not isinstance(key, bool):
            return self._tenants.get(key)
        if isinstance(key, str):
            lowered = key.lower()
            for t in self._tenants.values():
                if t.name.lower() == lowered:
                    return t
        return None

    def count_type(self, tenant_type) -> int:
        tt = TenantType.parse(tenant_type)
        return sum(1 for t in self._tenants.values() if t.tenant_type is tt)

    def names(self) -> list[str]:
        return [t.name for t in self._tenants.values()]

    def infected(self) -> list[Tenant]:
        return [t for t in self._tenants.values() if t.infected]

    def vacant_rooms(self) -> list[Room]:
        return [r for r in self._rooms.values() if not r.occupied]

    def hire(
        self,
        name: str,
        tenant_type,
        room_id: Optional[int] = None,
        pocket: Optional[Mapping] = None,
        day: int = 0,
        rent: Optional[int] = None,
        infected: bool = False,
    ) -> Optional[Tenant]:
        """Move a new tenant into a vacant room. None when no room fits.

        Rent defaults to the occupation's rate.
        """
        tt = TenantType.parse(tenant_type)
        if tt is None:
            return None
        if room_id is None:
            vacant = self.vacant_rooms()
            room = vacant[0] if vacant else None
        else:
            room = self._rooms.get(room_id)
        if room is None or room.occupied:
            return None

        holdings = {rt: 0 for rt in ResourceType}
        for key, amount in (STARTING_POCKET if pocket is None else pocket).items():
            rt = ResourceType.parse(key)
            if rt is not None:
                holdings[rt] = max(0, int(amount))

        tenant = Tenant(
            id=self._next_id,
            name=name,
            tenant_type=tt,
            room_id=room.id,
            pocket=holdings,
            rent=TENANT_RENT.get(tt.value, DEFAULT_RENT) if rent is None else max(0, int(rent)),
            infected=infected,
            hired_day=day,
        )
        self._next_id += 1
        self._tenants[tenant.id] = tenant
        room.tenant_id = tenant.id
        return tenant

    def evict(self, tenant_id: int) -> Optional[Tenant]:
        tenant = self._tenants.pop(tenant_id, None)
        if tenant is None:
            return None
        room = self.room_of(tenant)
        if room is not None:
            room.tenant_id = None
        tenant.room_id = None
        return tenant


@dataclass
class Applicant:
    """A walk-in asking for a room.

    ``infected`` is hidden from the landlord: only ``appearance`` hints at
    it, until a doctor inspects the queue or the applicant moves in and the
    illness shows.
    """

    name: str
    tenant_type: TenantType
    rent: int
    infection_risk: float
    infected: bool
    appearance: str
    pocket: dict[str, int] = field(default_factory=dict)
    revealed_infection: bool = False


def _pick_name(rng: Generator, taken: Iterable[str]) -> str:
    """A name nobody in *taken* already uses (case-insensitive)."""
    taken_lower = {n.lower() for n in taken}
    free = [n for n in _TENANT_NAMES if n.lower() not in taken_lower]
    if free:
        return free[int(rng.integers(len(free)))]
    base = _TENANT_NAMES[int(rng.integers(len(_TENANT_NAMES)))]
    suffix = 2
    while f"{base} {suffix}".lower() in taken_lower:
        suffix += 1
    return f"{base} {suffix}"


def random_tenant_profile(rng: Generator, taken_names: Iterable[str] = ()) -> tuple[str, TenantType]:
    """Unused name and random occupation."""
    name = _pick_name(rng, taken_names)
    types = list(TenantType)
    return name, types[int(rng.integers(len(types)))]


def create_applicant(rng: Generator, taken_names: Iterable[str] = ()) -> Applicant:
    name, tt = random_tenant_profile(rng, taken_names)
    risk = TENANT_INFECTION_RISK.get(tt.value, DEFAULT_INFECTION_RISK)
    infected = bool(rng.random() < risk)
    looks = _INFECTED_APPEARANCES if infected else _NORMAL_APPEARANCES
    return Applicant(
        name=name,
        tenant_type=tt,
        rent=TENANT_RENT.get(tt.value, DEFAULT_RENT),
        infection_risk=risk,
        infected=infected,
        appearance=looks[int(rng.integers(len(looks)))],
        pocket=dict(APPLICANT_POCKETS.get(tt.value, STARTING_POCKET)),
    )


def generate_applicants(
    rng: Generator,
    count: Optional[int] = None,
    taken_names: Iterable[str] = (),
) -> list[Applicant]:
    """Today's queue; names are unique across the queue and *taken_names*."""
    if count is None:
        low, high = APPLICANTS_PER_DAY
        count = int(rng.integers(low, high + 1))
    taken = list(taken_names)
    queue: list[Applicant] = []
    for _ in range(count):
        applicant = create_applicant(rng, taken)
        taken.append(applicant.name)
        queue.append(applicant)
    return queue
