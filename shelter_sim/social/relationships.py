"""Pairwise tenant relationships on a 0-100 affinity scale."""

from __future__ import annotations

from dataclasses import dataclass, field

from numpy.random import Generator

from shelter_sim.core.config import (
    COMPATIBILITY_MATRIX,
    RELATIONSHIP_MAX,
    RELATIONSHIP_MIN,
    RELATIONSHIP_NEUTRAL,
    RELATIONSHIP_NOISE,
)


@dataclass
class Relationship:
    """Unordered relationship between two tenants."""

    tenant_a_id: int
    tenant_b_id: int
    affinity: int = RELATIONSHIP_NEUTRAL
    interactions: list[str] = field(default_factory=list)

    def adjust(self, delta: int, note: str = "") -> None:
        self.affinity = max(RELATIONSHIP_MIN, min(RELATIONSHIP_MAX, self.affinity + delta))
        if note:
            self.interactions.append(note)


def _pair_key(a: int, b: int) -> tuple[int, int]:
    """Canonical key for a pair of tenants."""
    return (min(a, b), max(a, b))


def compatibility(type_a: str, type_b: str) -> int:
    return COMPATIBILITY_MATRIX.get(type_a, {}).get(type_b, 0)


class RelationshipManager:
    """Manages all pairwise relationships."""

    def __init__(self) -> None:
        self._relationships: dict[tuple[int, int], Relationship] = {}

    def __len__(self) -> int:
        return len(self._relationships)

    def get(self, a_id: int, b_id: int):
        return self._relationships.get(_pair_key(a_id, b_id))

    def get_or_create(self, a_id: int, b_id: int) -> Relationship:
        key = _pair_key(a_id, b_id)
        if key not in self._relationships:
            self._relationships[key] = Relationship(tenant_a_id=key[0], tenant_b_id=key[1])
        return self._relationships[key]

    def affinity(self, a_id: int, b_id: int) -> int:
        rel = self.get(a_id, b_id)
        return rel.affinity if rel else RELATIONSHIP_NEUTRAL

    def get_all_for(self, tenant_id: int) -> list[Relationship]:
        return [r for key, r in self._relationships.items() if tenant_id in key]

    def all(self) -> list[Relationship]:
        return list(self._relationships.values())

    def average_for(self, tenant_id: int) -> float:
        """Mean affinity; neutral when the tenant knows nobody."""
        rels = self.get_all_for(tenant_id)
        if not rels:
            return float(RELATIONSHIP_NEUTRAL)
        return sum(r.affinity for r in rels) / len(rels)

    def introduce(
        self,
        newcomer: "Tenant",  # noqa: F821
        residents: list["Tenant"],  # noqa: F821
        rng: Generator,
    ) -> None:
        """Seed a relationship between a newcomer and each existing resident."""
        for other in residents:
            if other.id == newcomer.id:
                continue
            base = RELATIONSHIP_NEUTRAL + compatibility(
                newcomer.tenant_type.value, other.tenant_type.value,
            )
            noise = int(rng.integers(-RELATIONSHIP_NOISE, RELATIONSHIP_NOISE + 1))
            rel = self.get_or_create(newcomer.id, other.id)
            rel.affinity = max(RELATIONSHIP_MIN, min(RELATIONSHIP_MAX, base + noise))

    def seed_neutral(self, tenant_ids: list[int]) -> None:
        """Neutral relationships for tenants already living together."""
        for i, a in enumerate(tenant_ids):
            for b in tenant_ids[i + 1:]:
                self.get_or_create(a, b)

    def remove_tenant(self, tenant_id: int) -> None:
        for key in [k for k in self._relationships if tenant_id in k]:
            del self._relationships[key]

    def poor_relationships(self, below: int) -> list[Relationship]:
        return [r for r in self._relationships.values() if r.affinity < below]
