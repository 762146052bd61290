"""Landlord resource ledger with audited modifications and transfers."""

from __future__ import annotations

import math
import numbers
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Mapping, Optional, Union

from shelter_sim.core.config import (
    LANDLORD_OWNER,
    MAX_MODIFICATION_HISTORY,
    MAX_TRANSFER_HISTORY,
    RESOURCE_VALIDATION_DEFAULT,
    STARTING_RESOURCES,
)


class ResourceType(Enum):
    FOOD = "food"
    MATERIALS = "materials"
    MEDICAL = "medical"
    FUEL = "fuel"
    CASH = "cash"

    @classmethod
    def parse(cls, value) -> Optional["ResourceType"]:
        """Accept a member or its string value; anything else is None."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                return None
        return None


Owner = Union[str, int]


@dataclass
class ModificationRecord:
    """Audit entry for one ledger change."""

    resource: ResourceType
    old_value: int
    new_value: int
    delta: int
    reason: str
    source: str
    day: int = 0
    timestamp: float = field(default_factory=time.time)


@dataclass
class TransferRecord:
    """Audit entry for a transfer attempt, successful or not."""

    from_owner: Owner
    to_owner: Owner
    resources: dict[ResourceType, int]
    reason: str
    success: bool
    day: int = 0
    failure: str = ""
    timestamp: float = field(default_factory=time.time)


def valid_amount(amount) -> bool:
    """Finite, integral, non-boolean number."""
    if isinstance(amount, bool) or not isinstance(amount, numbers.Real):
        return False
    value = float(amount)
    return math.isfinite(value) and value.is_integer()


class ResourceLedger:
    """The landlord's stock of each resource type.

    Every change goes through :meth:`modify` (or the bulk/transfer paths built
    on it) so the audit trail and threshold listener see all of them.
    """

    def __init__(
        self,
        initial: Optional[Mapping] = None,
        validate: bool = RESOURCE_VALIDATION_DEFAULT,
        tenants: Optional["TenantRegistry"] = None,  # noqa: F821
        clock: Optional["SimClock"] = None,  # noqa: F821
        on_modified: Optional[Callable[[ModificationRecord], None]] = None,
    ) -> None:
        self.validate = validate
        self.tenants = tenants
        self.clock = clock
        self.on_modified = on_modified
        self._stock: dict[ResourceType, int] = {rt: 0 for rt in ResourceType}
        source = STARTING_RESOURCES if initial is None else initial
        for key, amount in source.items():
            rt = ResourceType.parse(key)
            if rt is not None and valid_amount(amount):
                self._stock[rt] = max(0, int(amount))
        self._history: deque[ModificationRecord] = deque(maxlen=MAX_MODIFICATION_HISTORY)
        self._transfers: deque[TransferRecord] = deque(maxlen=MAX_TRANSFER_HISTORY)

    # ---- Queries ----

    @property
    def history(self) -> list[ModificationRecord]:
        return list(self._history)

    @property
    def transfers(self) -> list[TransferRecord]:
        return list(self._transfers)

    def get(self, resource) -> int:
        rt = ResourceType.parse(resource)
        return self._stock[rt] if rt is not None else 0

    def snapshot(self) -> dict[str, int]:
        return {rt.value: qty for rt, qty in self._stock.items()}

    def has_enough(self, resource, amount) -> bool:
        rt = ResourceType.parse(resource)
        if rt is None or not valid_amount(amount):
            return False
        return self._stock[rt] >= amount

    def has_enough_all(self, requirements: Mapping) -> bool:
        return all(self.has_enough(rt, amt) for rt, amt in requirements.items())

    # ---- Mutation ----

    def modify(
        self,
        resource,
        amount,
        reason: str = "unknown",
        source: str = "system",
        validate: Optional[bool] = None,
    ) -> bool:
        """Add *amount* (may be negative). Returns False when rejected.

        With validation active an over-draft is rejected; otherwise the stock
        is clamped at zero.
        """
        rt = ResourceType.parse(resource)
        if rt is None or not valid_amount(amount):
            return False
        amount = int(amount)
        strict = self.validate if validate is None else validate
        old_value = self._stock[rt]
        if strict and old_value + amount < 0:
            return False

        new_value = max(0, old_value + amount)
        self._stock[rt] = new_value
        record = ModificationRecord(
            resource=rt,
            old_value=old_value,
            new_value=new_value,
            delta=amount,  # requested, even when clamping absorbed part of it
            reason=reason,
            source=source,
            day=self._day(),
        )
        self._history.append(record)
        if self.on_modified is not None:
            self.on_modified(record)
        return True

    def bulk_modify(
        self,
        changes: Mapping,
        reason: str = "bulk",
        source: str = "system",
        allow_negative: bool = False,
    ) -> bool:
        """Apply several changes all-or-nothing.

        Unless *allow_negative* is set, a change that would drive a stock
        below zero rejects the whole batch.
        """
        parsed: list[tuple[ResourceType, int]] = []
        for key, amount in changes.items():
            rt = ResourceType.parse(key)
            if rt is None or not valid_amount(amount):
                return False
            if not allow_negative and self._stock[rt] + int(amount) < 0:
                return False
            parsed.append((rt, int(amount)))

        for rt, amount in parsed:
            self.modify(rt, amount, reason, source, validate=False)
        return True

    def transfer(
        self,
        from_owner: Owner,
        to_owner: Owner,
        resources: Mapping,
        reason: str = "transfer",
    ) -> bool:
        """Move resources between the landlord and tenant pockets atomically."""
        parsed: dict[ResourceType, int] = {}
        failure = ""
        for key, amount in resources.items():
            rt = ResourceType.parse(key)
            if rt is None or not valid_amount(amount) or amount <= 0:
                failure = "invalid_resource"
                break
            parsed[rt] = parsed.get(rt, 0) + int(amount)

        if not failure and not parsed:
            failure = "nothing_to_transfer"

        from_pocket = to_pocket = None
        if not failure:
            from_pocket = self._pocket_of(from_owner)
            to_pocket = self._pocket_of(to_owner)
            if from_pocket is None or to_pocket is None:
                failure = "unknown_owner"
            elif from_pocket is to_pocket:
                failure = "same_owner"

        if not failure:
            for rt, amount in parsed.items():
                if from_pocket.get(rt, 0) < amount:
                    failure = f"insufficient_{rt.value}"
                    break

        if failure:
            self._record_transfer(from_owner, to_owner, parsed, reason, False, failure)
            return False

        for rt, amount in parsed.items():
            self._move(from_owner, from_pocket, rt, -amount, reason)
            self._move(to_owner, to_pocket, rt, amount, reason)
        self._record_transfer(from_owner, to_owner, parsed, reason, True)
        return True

    # ---- Internal ----

    def _day(self) -> int:
        return self.clock.day if self.clock is not None else 0

    def _pocket_of(self, owner: Owner) -> Optional[dict[ResourceType, int]]:
        if owner == LANDLORD_OWNER:
            return self._stock
        if self.tenants is None:
            return None
        tenant = self.tenants.find(owner)
        return tenant.pocket if tenant is not None else None

    def _move(self, owner: Owner, pocket: dict, rt: ResourceType, amount: int, reason: str) -> None:
        if pocket is self._stock:
            self.modify(rt, amount, reason, source="transfer", validate=False)
        else:
            pocket[rt] = max(0, pocket.get(rt, 0) + amount)

    def _record_transfer(
        self,
        from_owner: Owner,
        to_owner: Owner,
        parsed: dict[ResourceType, int],
        reason: str,
        success: bool,
        failure: str = "",
    ) -> None:
        self._transfers.append(TransferRecord(
            from_owner=from_owner,
            to_owner=to_owner,
            resources=dict(parsed),
            reason=reason,
            success=success,
            day=self._day(),
            failure=failure,
        ))
