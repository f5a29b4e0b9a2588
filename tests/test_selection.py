from datetime import date

import pytest

from app.config import settings
from app.services.selection import (
    ExistingCustomerSelection,
    InvalidSelection,
    NewCustomerSelection,
    add_months,
    default_term,
    parse_date,
    parse_discount,
    parse_units_count,
)

PRO = settings.PROFESSIONAL_PLAN_CODE
OTA = settings.OTA_ADDON_CODE


# --- Input boundary -----------------------------------------------------------

@pytest.mark.parametrize("raw,expected", [
    ("12", 12),
    ("12.7", 12),
    ("0", 1),
    ("-5", 1),
    ("abc", 1),
    ("", 1),
    (None, 1),
    ("nan", 1),
    ("inf", 1),
])
def test_parse_units_count(raw, expected):
    assert parse_units_count(raw) == expected


@pytest.mark.parametrize("raw,expected", [
    ("12.5", 12.5),
    ("150", 100.0),
    ("-3", 0.0),
    ("x", 0.0),
    (None, 0.0),
])
def test_parse_discount(raw, expected):
    assert parse_discount(raw) == expected


def test_parse_date():
    assert parse_date("2025-02-03") == date(2025, 2, 3)
    assert parse_date("") is None
    assert parse_date(None) is None
    with pytest.raises(InvalidSelection):
        parse_date("2025-13-01")
    with pytest.raises(InvalidSelection):
        parse_date("next tuesday")


@pytest.mark.parametrize("start,expected", [
    (date(2025, 1, 15), date(2025, 7, 15)),
    (date(2025, 8, 31), date(2026, 2, 28)),
    (date(2023, 8, 31), date(2024, 2, 29)),
    (date(2025, 10, 31), date(2026, 4, 30)),
])
def test_add_six_months(start, expected):
    assert add_months(start, 6) == expected


def test_default_term_is_six_months():
    start, end = default_term(date(2025, 3, 10))
    assert start == date(2025, 3, 10)
    assert end == date(2025, 9, 10)


# --- New customers --------------------------------------------------------------

def test_new_selection_starts_with_recommendation(catalog):
    selection = NewCustomerSelection.start(catalog)
    assert selection.units_count == 1
    assert selection.plan_code == "BASIC"
    assert selection.addon_codes == set()


def test_selecting_professional_auto_selects_non_ota_addons(catalog):
    selection = NewCustomerSelection.start(catalog)
    selection.select_plan(catalog, PRO)
    assert selection.addon_codes == {"channel_manager", "smart_locks"}


def test_switching_away_from_professional_clears_addons(catalog):
    selection = NewCustomerSelection.start(catalog)
    selection.select_plan(catalog, PRO)
    selection.toggle_addon(catalog, OTA)
    selection.select_plan(catalog, "PLUS")
    assert selection.addon_codes == set()


def test_units_change_overwrites_manual_plan_pick(catalog):
    selection = NewCustomerSelection.start(catalog)
    selection.select_plan(catalog, PRO)
    selection.set_units_count(catalog, "12")
    assert selection.plan_code == "PLUS"
    assert selection.addon_codes == set()


def test_units_change_keeping_plan_keeps_addons(catalog):
    selection = NewCustomerSelection.start(catalog)
    selection.toggle_addon(catalog, "smart_locks")
    selection.set_units_count(catalog, "7")
    assert selection.plan_code == "BASIC"
    assert selection.addon_codes == {"smart_locks"}


def test_toggle_addon_and_unknown_codes(catalog):
    selection = NewCustomerSelection.start(catalog)
    selection.toggle_addon(catalog, "smart_locks")
    selection.toggle_addon(catalog, "does_not_exist")
    assert selection.addon_codes == {"smart_locks"}
    selection.toggle_addon(catalog, "smart_locks")
    assert selection.addon_codes == set()
    selection.select_plan(catalog, "NOPE")
    assert selection.plan_code == "BASIC"


def test_from_raw_sanitizes_inputs(catalog):
    selection = NewCustomerSelection.from_raw(
        catalog,
        units_count="abc",
        plan_code="PLUS",
        addon_codes=["smart_locks", "ghost"],
        discount_percentage="250",
    )
    assert selection.units_count == 1
    assert selection.plan_code == "PLUS"
    assert selection.addon_codes == {"smart_locks"}
    assert selection.discount_percentage == 100


def test_from_raw_with_retired_plan_recommends(catalog):
    selection = NewCustomerSelection.from_raw(catalog, units_count="500", plan_code="OLD")
    assert selection.plan_code == PRO
    assert selection.addon_codes == {"channel_manager", "smart_locks"}


def test_dispatch_events(catalog):
    selection = NewCustomerSelection.start(catalog)
    selection.dispatch(catalog, "plan", PRO)
    selection.dispatch(catalog, "addon", OTA)
    selection.dispatch(catalog, "discount", "10")
    breakdown = selection.price(catalog)
    assert breakdown.plan.code == PRO
    assert [line.addon.code for line in breakdown.addon_lines if line.chargeable] == [OTA]
    # 5000 * 0.8 * 0.9 + OTA one-time
    assert breakdown.grand_total == pytest.approx(3600 + 500)
    with pytest.raises(ValueError):
        selection.dispatch(catalog, "explode")


def test_new_selection_on_empty_catalog():
    from app.services.catalog import CatalogSnapshot

    empty = CatalogSnapshot()
    selection = NewCustomerSelection.start(empty)
    assert selection.plan_code is None
    assert selection.price(empty).grand_total == 0


# --- Existing customers ---------------------------------------------------------

def test_existing_selection_defaults(catalog):
    selection = ExistingCustomerSelection.start(catalog, today=date(2025, 1, 31))
    assert selection.current_plan_code == "BASIC"
    assert selection.new_plan_code == "BASIC"
    assert selection.start_date == date(2025, 1, 31)
    assert selection.end_date == date(2025, 7, 31)
    assert selection.remaining_days == 181


def test_existing_selection_professional_bundling(catalog):
    selection = ExistingCustomerSelection.start(catalog, today=date(2025, 1, 1))
    selection.select_new_plan(catalog, PRO)
    assert selection.addon_codes == {"channel_manager", "smart_locks"}
    selection.select_new_plan(catalog, "PLUS")
    assert selection.addon_codes == set()


def test_existing_selection_rejects_malformed_dates(catalog):
    selection = ExistingCustomerSelection.from_raw(
        catalog,
        current_plan_code="BASIC",
        new_plan_code="PLUS",
        start_date="2025-02-30",
        end_date="2025-08-01",
    )
    assert selection.invalid_fields == {"start_date"}
    assert selection.start_date is None
    assert selection.remaining_days == 0
    assert selection.price(catalog).grand_total == 0


def test_existing_selection_current_plan_change_keeps_candidate(catalog):
    selection = ExistingCustomerSelection.from_raw(
        catalog,
        current_plan_code="BASIC",
        new_plan_code="PLUS",
        start_date="2025-01-01",
        end_date="2026-01-01",
    )
    selection.dispatch(catalog, "current_plan", "PLUS")
    assert selection.current_plan_code == "PLUS"
    assert selection.new_plan_code == "PLUS"
    assert selection.price(catalog).grand_total == 0
