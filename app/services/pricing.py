"""
Pricing engine.

Pure functions over catalog snapshots. Every amount is VAT-inclusive, exactly
as stored in the catalog; VAT display is applied later by the presentation
layer through a VatPolicy. Nothing here raises for in-range inputs, and an
empty catalog or a missing plan simply yields zero totals.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Optional, Sequence

from ..config import settings
from .catalog import PlanSnapshot, AddonSnapshot


class PlanChange(str, Enum):
    UPGRADE = "upgrade"
    DOWNGRADE = "downgrade"
    NONE = "none"


def is_professional(plan: Optional[PlanSnapshot], professional_code: str | None = None) -> bool:
    if plan is None:
        return False
    return plan.code == (professional_code or settings.PROFESSIONAL_PLAN_CODE)


def is_ota_registration(addon: AddonSnapshot, ota_code: str | None = None) -> bool:
    return addon.code == (ota_code or settings.OTA_ADDON_CODE)


# ---- Proration ----

def remaining_days(start: Optional[date], end: Optional[date]) -> int:
    """Whole days from start to end, never negative; 0 when a date is missing."""
    if start is None or end is None:
        return 0
    return max(0, math.ceil((end - start).days))


def prorated_amount(price: float, days: int, days_in_year: int | None = None) -> float:
    year = days_in_year or settings.DAYS_IN_YEAR
    return price * days / year


def discounted_price(plan: PlanSnapshot) -> float:
    return plan.yearly_price * (1 - plan.discount_percentage / 100)


def plan_difference(current: Optional[PlanSnapshot], new: Optional[PlanSnapshot], days: int) -> float:
    """Prorated cost of moving from current to new; negative is a credit."""
    if current is None or new is None:
        return 0.0
    return prorated_amount(discounted_price(new) - discounted_price(current), days)


def change_direction(current: Optional[PlanSnapshot], new: Optional[PlanSnapshot]) -> PlanChange:
    if current is None or new is None:
        return PlanChange.NONE
    if new.yearly_price > current.yearly_price:
        return PlanChange.UPGRADE
    if new.yearly_price < current.yearly_price:
        return PlanChange.DOWNGRADE
    return PlanChange.NONE


# ---- Units and plan price (new customers) ----

def extra_units(plan: PlanSnapshot, units_count: int) -> int:
    return max(0, units_count - plan.units_quota)


def extra_units_cost(plan: PlanSnapshot, units_count: int) -> float:
    return extra_units(plan, units_count) * plan.additional_unit_price


def plan_base_price(plan: PlanSnapshot, manual_discount_percentage: float = 0.0) -> float:
    """Plan price after the plan discount and then the manual discount."""
    after_plan_discount = discounted_price(plan)
    return after_plan_discount * (1 - manual_discount_percentage / 100)


def plan_total(plan: PlanSnapshot, units_count: int, manual_discount_percentage: float = 0.0) -> float:
    return plan_base_price(plan, manual_discount_percentage) + extra_units_cost(plan, units_count)


def recommend_plan(plans: Sequence[PlanSnapshot], units_count: int) -> Optional[PlanSnapshot]:
    """
    Smallest-quota plan that covers units_count, else the largest-quota plan.
    Returns None for an empty catalog.
    """
    if not plans:
        return None
    by_quota = sorted(plans, key=lambda p: p.units_quota)
    for plan in by_quota:
        if plan.units_quota >= units_count:
            return plan
    return by_quota[-1]


# ---- Add-ons ----

def addon_price(addon: AddonSnapshot) -> float:
    return addon.onetime_price if addon.is_onetime else addon.yearly_price


def addon_charge(addon: AddonSnapshot, days: Optional[int] = None) -> float:
    """
    Chargeable price of one add-on. days=None means a full year (new customers);
    otherwise recurring add-ons are prorated. One-time add-ons are never prorated.
    """
    price = addon_price(addon)
    if addon.is_onetime or days is None:
        return price
    return prorated_amount(price, days)


@dataclass(frozen=True)
class AddonLine:
    addon: AddonSnapshot
    amount: float
    included: bool = False

    @property
    def chargeable(self) -> bool:
        return not self.included


def addon_lines(
    plan: Optional[PlanSnapshot],
    addons: Iterable[AddonSnapshot],
    selected_codes: Iterable[str],
    days: Optional[int] = None,
) -> list[AddonLine]:
    """
    One line per selected add-on, in catalog order.
    On the Professional plan everything but OTA Registration is bundled
    (included, zero price).
    """
    selected = set(selected_codes)
    bundled = is_professional(plan)
    lines: list[AddonLine] = []
    for addon in addons:
        if addon.code not in selected:
            continue
        if bundled and not is_ota_registration(addon):
            lines.append(AddonLine(addon=addon, amount=0.0, included=True))
        else:
            lines.append(AddonLine(addon=addon, amount=addon_charge(addon, days)))
    return lines


def addons_total(lines: Iterable[AddonLine]) -> float:
    return sum((line.amount for line in lines if line.chargeable), 0.0)


def bundled_addon_codes(plan: Optional[PlanSnapshot], addons: Iterable[AddonSnapshot]) -> set[str]:
    """Add-on selection implied by choosing plan: all non-OTA add-ons for Professional, none otherwise."""
    if not is_professional(plan):
        return set()
    return {a.code for a in addons if not is_ota_registration(a)}


# ---- Breakdowns ----

@dataclass(frozen=True)
class NewCustomerBreakdown:
    plan: Optional[PlanSnapshot]
    units_count: int
    manual_discount_percentage: float = 0.0
    list_price: float = 0.0
    plan_discount_amount: float = 0.0
    manual_discount_amount: float = 0.0
    extra_units: int = 0
    extra_units_cost: float = 0.0
    plan_total: float = 0.0
    addon_lines: list[AddonLine] = field(default_factory=list)
    addons_total: float = 0.0
    grand_total: float = 0.0

    @property
    def has_plan_adjustments(self) -> bool:
        if self.plan is None:
            return False
        return self.extra_units > 0 or self.manual_discount_percentage > 0 or self.plan.discount_percentage > 0


def price_new_customer(
    plan: Optional[PlanSnapshot],
    units_count: int,
    manual_discount_percentage: float,
    addons: Sequence[AddonSnapshot],
    selected_codes: Iterable[str],
) -> NewCustomerBreakdown:
    if plan is None:
        return NewCustomerBreakdown(plan=None, units_count=units_count, manual_discount_percentage=manual_discount_percentage)
    after_plan_discount = discounted_price(plan)
    lines = addon_lines(plan, addons, selected_codes)
    total_plan = plan_total(plan, units_count, manual_discount_percentage)
    total_addons = addons_total(lines)
    return NewCustomerBreakdown(
        plan=plan,
        units_count=units_count,
        manual_discount_percentage=manual_discount_percentage,
        list_price=plan.yearly_price,
        plan_discount_amount=plan.yearly_price - after_plan_discount,
        manual_discount_amount=after_plan_discount * manual_discount_percentage / 100,
        extra_units=extra_units(plan, units_count),
        extra_units_cost=extra_units_cost(plan, units_count),
        plan_total=total_plan,
        addon_lines=lines,
        addons_total=total_addons,
        grand_total=total_plan + total_addons,
    )


@dataclass(frozen=True)
class ExistingCustomerBreakdown:
    current_plan: Optional[PlanSnapshot]
    new_plan: Optional[PlanSnapshot]
    remaining_days: int = 0
    direction: PlanChange = PlanChange.NONE
    plan_difference: float = 0.0
    addon_lines: list[AddonLine] = field(default_factory=list)
    addons_total: float = 0.0
    grand_total: float = 0.0

    @property
    def is_credit(self) -> bool:
        return self.grand_total < 0

    @property
    def is_plan_change(self) -> bool:
        if self.current_plan is None or self.new_plan is None:
            return False
        return self.current_plan.code != self.new_plan.code


def price_existing_customer(
    current_plan: Optional[PlanSnapshot],
    new_plan: Optional[PlanSnapshot],
    start: Optional[date],
    end: Optional[date],
    addons: Sequence[AddonSnapshot],
    selected_codes: Iterable[str],
) -> ExistingCustomerBreakdown:
    days = remaining_days(start, end)
    difference = plan_difference(current_plan, new_plan, days)
    lines = addon_lines(new_plan, addons, selected_codes, days=days)
    total_addons = addons_total(lines)
    return ExistingCustomerBreakdown(
        current_plan=current_plan,
        new_plan=new_plan,
        remaining_days=days,
        direction=change_direction(current_plan, new_plan),
        plan_difference=difference,
        addon_lines=lines,
        addons_total=total_addons,
        grand_total=difference + total_addons,
    )
