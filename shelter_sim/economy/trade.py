"""Fixed-rate trade valuation, landlord exchanges and tenant mutual aid.

Every resource has a fixed unit value.  Conversions always floor, so a
round trip A -> B -> A can lose units but never creates them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Mapping, Optional

from numpy.random import Generator

from shelter_sim.core.config import (
    AID_CASH_AMOUNT,
    AID_CASH_HELPER_MIN,
    AID_CASH_NEEDY_MAX,
    AID_FOOD_AMOUNT,
    AID_FOOD_HELPER_MIN,
    AID_FOOD_NEEDY_MAX,
    AID_MEDICAL_AMOUNT,
    AID_MEDICAL_HELPER_MIN,
    AID_MEDICAL_NEEDY_MAX,
    MUTUAL_AID_PROBABILITY,
    REINFORCED_RENT_BONUS_RATE,
    RENT_RESOURCE_ORDER,
    RESOURCE_UNIT_VALUES,
)
from shelter_sim.economy.resources import ResourceLedger, ResourceType, valid_amount


# =============================================================================
# Valuation
# =============================================================================

class TradeCalculator:
    """Unit-value table and floor-rounded conversions."""

    def __init__(self, unit_values: Optional[Mapping[str, float]] = None) -> None:
        merged = dict(RESOURCE_UNIT_VALUES)
        merged.update(unit_values or {})
        self._values: dict[ResourceType, float] = {}
        for key, value in merged.items():
            rt = ResourceType.parse(key)
            if rt is not None:
                self._values[rt] = float(value)

    def unit_value(self, resource) -> float:
        return self._values.get(ResourceType.parse(resource), 0.0)

    def value_of(self, resource, amount) -> int:
        """floor(unit * amount); unknown types and bad amounts are worth 0."""
        rt = ResourceType.parse(resource)
        if rt is None or not valid_amount(amount):
            return 0
        return math.floor(self._values.get(rt, 0.0) * amount)

    def equivalent(self, from_resource, amount, to_resource) -> int:
        """How many units of *to_resource* the given amount buys."""
        target = self.unit_value(to_resource)
        if target <= 0:
            return 0
        return math.floor(self.value_of(from_resource, amount) / target)

    def bundle_value(self, resources: Mapping) -> int:
        total = 0.0
        for key, amount in resources.items():
            if valid_amount(amount):
                total += self.unit_value(key) * amount
        return math.floor(total)


# =============================================================================
# Records
# =============================================================================

@dataclass
class TradeRecord:
    """Record of a completed exchange or aid hand-over for metrics."""

    day: int
    kind: str  # "exchange", "food_aid", "cash_loan", "medical_aid"
    given: dict[str, int]
    received: dict[str, int]
    parties: list = field(default_factory=list)


@dataclass
class RentPayment:
    """What one tenant handed over today."""

    tenant_id: int
    rent: int
    cash: int = 0
    bonus: int = 0
    resources: dict[str, int] = field(default_factory=dict)
    shortage: int = 0

    @property
    def paid_in_full(self) -> bool:
        return self.shortage == 0


@dataclass
class RentReport:
    """Outcome of one day's rent collection."""

    day: int
    payments: list[RentPayment] = field(default_factory=list)

    @property
    def cash_total(self) -> int:
        return sum(p.cash for p in self.payments)

    @property
    def bonus_total(self) -> int:
        return sum(p.bonus for p in self.payments)

    @property
    def defaulters(self) -> list[int]:
        return [p.tenant_id for p in self.payments if not p.paid_in_full]


# =============================================================================
# Trade system
# =============================================================================

class TradeSystem:
    """Landlord fixed-rate exchanges and tenant-to-tenant mutual aid."""

    def __init__(
        self,
        ledger: ResourceLedger,
        calculator: TradeCalculator,
        rng: Generator,
        logger: Optional["SimLogger"] = None,  # noqa: F821
    ) -> None:
        self._ledger = ledger
        self.calculator = calculator
        self._rng = rng
        self._logger = logger
        self.trade_log: list[TradeRecord] = []
        self._daily_trades: int = 0
        self._rent_collected: bool = False

    @property
    def daily_trades(self) -> int:
        return self._daily_trades

    @property
    def rent_collected(self) -> bool:
        return self._rent_collected

    def reset_daily(self) -> None:
        self._daily_trades = 0
        self._rent_collected = False

    def exchange(self, from_resource, amount, to_resource, day: int = 0) -> int:
        """Convert landlord stock at the fixed rate. Returns units received (0 = rejected)."""
        src = ResourceType.parse(from_resource)
        dst = ResourceType.parse(to_resource)
        if src is None or dst is None or src is dst:
            return 0
        if not valid_amount(amount) or amount <= 0 or not self._ledger.has_enough(src, amount):
            return 0
        received = self.calculator.equivalent(src, amount, dst)
        if received <= 0:
            return 0

        ok = self._ledger.bulk_modify(
            {src: -int(amount), dst: received}, reason="fixed_rate_exchange", source="trade",
        )
        if not ok:
            return 0
        self._record(day, "exchange", {src.value: int(amount)}, {dst.value: received}, ["landlord"])
        return received

    def collect_rent(self, registry: "TenantRegistry", day: int = 0) -> Optional[RentReport]:  # noqa: F821
        """Charge every healthy tenant, at most once per day.

        Cash comes first. A shortfall is covered from the tenant's pocket
        resources at their unit value, rounded up per resource. Reinforced
        rooms add a bonus on top when the rent is covered in full.
        """
        if self._rent_collected:
            return None
        payers = [t for t in registry.tenants if not t.infected]
        if not payers:
            return None

        report = RentReport(day=day)
        for tenant in payers:
            report.payments.append(self._charge_rent(tenant, registry.room_of(tenant)))
        self._rent_collected = True

        income = report.cash_total + report.bonus_total
        if income > 0:
            self._ledger.modify(ResourceType.CASH, income, reason="rent_collection", source="rent")

        received: dict[str, int] = {ResourceType.CASH.value: income}
        for payment in report.payments:
            for key, amount in payment.resources.items():
                received[key] = received.get(key, 0) + amount
        self._record(day, "rent", {}, received, [p.tenant_id for p in report.payments])

        if self._logger is not None:
            self._logger.log(
                "TRADE", f"Collected ${income} rent from {len(payers)} tenants",
                tenant_ids=[t.id for t in payers], day=day, received=received,
            )
            for payment in report.payments:
                if not payment.paid_in_full:
                    self._logger.log(
                        "DANGER", f"Tenant {payment.tenant_id} is ${payment.shortage} short on rent",
                        tenant_ids=[payment.tenant_id], day=day,
                    )
        return report

    def process_mutual_aid(self, tenants: list["Tenant"], day: int = 0) -> Optional[TradeRecord]:  # noqa: F821
        """At most one aid hand-over per day between tenants."""
        if len(tenants) < 2 or self._rng.random() >= MUTUAL_AID_PROBABILITY:
            return None

        food, cash, medical = ResourceType.FOOD, ResourceType.CASH, ResourceType.MEDICAL
        checks = [
            ("food_aid", food, AID_FOOD_NEEDY_MAX, AID_FOOD_HELPER_MIN, AID_FOOD_AMOUNT, None),
            ("cash_loan", cash, AID_CASH_NEEDY_MAX, AID_CASH_HELPER_MIN, AID_CASH_AMOUNT, None),
            ("medical_aid", medical, AID_MEDICAL_NEEDY_MAX, AID_MEDICAL_HELPER_MIN, AID_MEDICAL_AMOUNT, "elder"),
        ]
        for kind, rt, needy_max, helper_min, amount, needy_type in checks:
            needy = next(
                (t for t in tenants
                 if t.pocket.get(rt, 0) <= needy_max
                 and (needy_type is None or t.tenant_type.value == needy_type)),
                None,
            )
            if needy is None:
                continue
            helper = next(
                (t for t in tenants if t.id != needy.id and t.pocket.get(rt, 0) >= helper_min),
                None,
            )
            if helper is None:
                continue
            if not self._ledger.transfer(helper.id, needy.id, {rt: amount}, reason=kind):
                continue
            if self._logger is not None:
                self._logger.log(
                    "TRADE", f"{helper.name} gave {amount} {rt.value} to {needy.name} ({kind})",
                    tenant_ids=[helper.id, needy.id], day=day,
                )
            return self._record(day, kind, {rt.value: amount}, {}, [helper.id, needy.id])
        return None

    # ---- Internal ----

    def _charge_rent(self, tenant: "Tenant", room: Optional["Room"]) -> RentPayment:  # noqa: F821
        payment = RentPayment(tenant_id=tenant.id, rent=tenant.rent)
        cash = ResourceType.CASH
        payment.cash = min(tenant.rent, tenant.pocket.get(cash, 0))
        tenant.pocket[cash] = tenant.pocket.get(cash, 0) - payment.cash

        debt = float(tenant.rent - payment.cash)
        for key in RENT_RESOURCE_ORDER:
            if debt <= 0:
                break
            rt = ResourceType.parse(key)
            available = tenant.pocket.get(rt, 0)
            if available <= 0:
                continue
            rate = self.calculator.unit_value(rt) or 1.0
            used = min(math.ceil(debt / rate), available)
            tenant.pocket[rt] = available - used
            self._ledger.modify(rt, used, reason="rent_payment", source="rent")
            payment.resources[rt.value] = used
            debt -= used * rate

        if debt > 0:
            payment.shortage = math.ceil(debt)
        elif room is not None and room.reinforced:
            payment.bonus = math.floor(tenant.rent * REINFORCED_RENT_BONUS_RATE)
        return payment

    def _record(self, day: int, kind: str, given: dict, received: dict, parties: list) -> TradeRecord:
        record = TradeRecord(day=day, kind=kind, given=given, received=received, parties=parties)
        self.trade_log.append(record)
        self._daily_trades += 1
        if self._logger is not None and kind == "exchange":
            self._logger.log("TRADE", f"Exchanged {given} for {received}", day=day)
        return record
