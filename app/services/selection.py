"""
Selection state for both calculator flows.

A selection is rebuilt from raw request values on every interaction, one
event is applied to it, and it is priced from scratch. Raw values are
sanitized here so the pricing engine only ever sees in-range inputs.
"""
from __future__ import annotations

import calendar
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from ..config import settings
from . import pricing
from .catalog import CatalogSnapshot, PlanSnapshot

logger = logging.getLogger(__name__)


class InvalidSelection(ValueError):
    pass


class NewCustomerEvent(str, Enum):
    REFRESH = "refresh"
    UNITS = "units"
    PLAN = "plan"
    ADDON = "addon"
    DISCOUNT = "discount"


class ExistingCustomerEvent(str, Enum):
    REFRESH = "refresh"
    CURRENT_PLAN = "current_plan"
    PLAN = "plan"
    ADDON = "addon"
    DATES = "dates"


# ---- Input boundary ----

def parse_units_count(raw) -> int:
    """Positive unit count; anything non-numeric or below 1 becomes 1."""
    try:
        value = float(str(raw).strip())
        if math.isnan(value) or math.isinf(value):
            return 1
        return max(1, int(value))
    except (TypeError, ValueError):
        return 1


def parse_discount(raw) -> float:
    """Manual discount percentage clamped to [0, 100]; non-numeric becomes 0."""
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(value):
        return 0.0
    return min(100.0, max(0.0, value))


def parse_date(raw: Optional[str]) -> Optional[date]:
    """ISO date (YYYY-MM-DD). Empty means not set; malformed raises InvalidSelection."""
    if raw is None:
        return None
    if isinstance(raw, date):
        return raw
    value = str(raw).strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError as e:
        raise InvalidSelection(f"Invalid date: {value!r}") from e


def add_months(d: date, months: int) -> date:
    """Same day-of-month `months` later, clamped to the last day of the target month."""
    month_index = d.month - 1 + months
    year = d.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def _known_addon_codes(catalog: CatalogSnapshot, codes: Iterable[str]) -> set[str]:
    known = {a.code for a in catalog.addons}
    return {c for c in codes if c in known}


# ---- New customers ----

@dataclass
class NewCustomerSelection:
    units_count: int = 1
    plan_code: Optional[str] = None
    addon_codes: set[str] = field(default_factory=set)
    discount_percentage: float = 0.0

    @classmethod
    def start(cls, catalog: CatalogSnapshot) -> "NewCustomerSelection":
        selection = cls()
        selection.recommend(catalog)
        return selection

    @classmethod
    def from_raw(
        cls,
        catalog: CatalogSnapshot,
        units_count=1,
        plan_code: Optional[str] = None,
        addon_codes: Iterable[str] = (),
        discount_percentage=0,
    ) -> "NewCustomerSelection":
        selection = cls(
            units_count=parse_units_count(units_count),
            plan_code=plan_code if catalog.plan_by_code(plan_code) else None,
            addon_codes=_known_addon_codes(catalog, addon_codes),
            discount_percentage=parse_discount(discount_percentage),
        )
        # Missing or retired plan: fall back to the recommendation
        if selection.plan_code is None:
            selection.recommend(catalog)
        return selection

    def plan(self, catalog: CatalogSnapshot) -> Optional[PlanSnapshot]:
        return catalog.plan_by_code(self.plan_code)

    def recommend(self, catalog: CatalogSnapshot) -> None:
        recommended = pricing.recommend_plan(catalog.plans, self.units_count)
        self._select(catalog, recommended)

    def set_units_count(self, catalog: CatalogSnapshot, raw) -> None:
        # Recommendation overwrites any manual plan pick
        self.units_count = parse_units_count(raw)
        self.recommend(catalog)

    def select_plan(self, catalog: CatalogSnapshot, code: Optional[str]) -> None:
        plan = catalog.plan_by_code(code)
        if plan is None:
            logger.debug("Ignoring unknown plan code %r", code)
            return
        self._select(catalog, plan)

    def toggle_addon(self, catalog: CatalogSnapshot, code: Optional[str]) -> None:
        if catalog.addon_by_code(code) is None:
            logger.debug("Ignoring unknown add-on code %r", code)
            return
        self.addon_codes ^= {code}

    def set_discount(self, raw) -> None:
        self.discount_percentage = parse_discount(raw)

    def _select(self, catalog: CatalogSnapshot, plan: Optional[PlanSnapshot]) -> None:
        if plan is None:
            self.plan_code = None
            return
        if plan.code == self.plan_code:
            return
        self.plan_code = plan.code
        self.addon_codes = pricing.bundled_addon_codes(plan, catalog.addons)

    def dispatch(self, catalog: CatalogSnapshot, event: NewCustomerEvent | str, value=None) -> None:
        event = NewCustomerEvent(event)
        if event == NewCustomerEvent.UNITS:
            self.set_units_count(catalog, self.units_count if value is None else value)
        elif event == NewCustomerEvent.PLAN:
            self.select_plan(catalog, value)
        elif event == NewCustomerEvent.ADDON:
            self.toggle_addon(catalog, value)
        elif event == NewCustomerEvent.DISCOUNT and value is not None:
            self.set_discount(value)

    def price(self, catalog: CatalogSnapshot) -> pricing.NewCustomerBreakdown:
        return pricing.price_new_customer(
            self.plan(catalog),
            self.units_count,
            self.discount_percentage,
            catalog.addons,
            self.addon_codes,
        )


# ---- Existing customers ----

def default_term(today: Optional[date] = None) -> tuple[date, date]:
    start = today or date.today()
    return start, add_months(start, settings.DEFAULT_TERM_MONTHS)


@dataclass
class ExistingCustomerSelection:
    current_plan_code: Optional[str] = None
    new_plan_code: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    addon_codes: set[str] = field(default_factory=set)
    # Fields whose raw value was rejected at the boundary
    invalid_fields: set[str] = field(default_factory=set, compare=False)

    @classmethod
    def start(cls, catalog: CatalogSnapshot, today: Optional[date] = None) -> "ExistingCustomerSelection":
        start, end = default_term(today)
        selection = cls(start_date=start, end_date=end)
        first = catalog.plans[0] if catalog.plans else None
        if first is not None:
            selection.current_plan_code = first.code
            selection._select_new(catalog, first)
        return selection

    @classmethod
    def from_raw(
        cls,
        catalog: CatalogSnapshot,
        current_plan_code: Optional[str] = None,
        new_plan_code: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        addon_codes: Iterable[str] = (),
    ) -> "ExistingCustomerSelection":
        selection = cls(addon_codes=_known_addon_codes(catalog, addon_codes))
        first = catalog.plans[0] if catalog.plans else None
        current = catalog.plan_by_code(current_plan_code) or first
        selection.current_plan_code = current.code if current else None
        new = catalog.plan_by_code(new_plan_code)
        if new is not None:
            selection.new_plan_code = new.code
        elif first is not None:
            selection._select_new(catalog, first)
        selection.set_dates(start_date, end_date)
        return selection

    def current_plan(self, catalog: CatalogSnapshot) -> Optional[PlanSnapshot]:
        return catalog.plan_by_code(self.current_plan_code)

    def new_plan(self, catalog: CatalogSnapshot) -> Optional[PlanSnapshot]:
        return catalog.plan_by_code(self.new_plan_code)

    @property
    def remaining_days(self) -> int:
        return pricing.remaining_days(self.start_date, self.end_date)

    def set_current_plan(self, catalog: CatalogSnapshot, code: Optional[str]) -> None:
        if catalog.plan_by_code(code) is not None:
            self.current_plan_code = code

    def select_new_plan(self, catalog: CatalogSnapshot, code: Optional[str]) -> None:
        plan = catalog.plan_by_code(code)
        if plan is None:
            logger.debug("Ignoring unknown plan code %r", code)
            return
        self._select_new(catalog, plan)

    def set_dates(self, start_raw, end_raw) -> None:
        self.invalid_fields.clear()
        for name, raw in (("start_date", start_raw), ("end_date", end_raw)):
            try:
                value = parse_date(raw)
            except InvalidSelection:
                logger.debug("Rejected %s=%r", name, raw)
                self.invalid_fields.add(name)
                value = None
            setattr(self, name, value)

    def toggle_addon(self, catalog: CatalogSnapshot, code: Optional[str]) -> None:
        if catalog.addon_by_code(code) is None:
            logger.debug("Ignoring unknown add-on code %r", code)
            return
        self.addon_codes ^= {code}

    def _select_new(self, catalog: CatalogSnapshot, plan: PlanSnapshot) -> None:
        if plan.code == self.new_plan_code:
            return
        self.new_plan_code = plan.code
        self.addon_codes = pricing.bundled_addon_codes(plan, catalog.addons)

    def dispatch(self, catalog: CatalogSnapshot, event: ExistingCustomerEvent | str, value=None) -> None:
        event = ExistingCustomerEvent(event)
        if event == ExistingCustomerEvent.PLAN:
            self.select_new_plan(catalog, value)
        elif event == ExistingCustomerEvent.CURRENT_PLAN and value is not None:
            self.set_current_plan(catalog, value)
        elif event == ExistingCustomerEvent.ADDON:
            self.toggle_addon(catalog, value)

    def price(self, catalog: CatalogSnapshot) -> pricing.ExistingCustomerBreakdown:
        return pricing.price_existing_customer(
            self.current_plan(catalog),
            self.new_plan(catalog),
            self.start_date,
            self.end_date,
            catalog.addons,
            self.addon_codes,
        )
