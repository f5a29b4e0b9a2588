import csv
from datetime import date
from io import StringIO

import pytest

from app.i18n import Language
from app.services import pricing, reporting
from app.services.quotes import existing_customer_quote, new_customer_quote
from app.services.vat import VatPolicy


@pytest.fixture
def upgrade(catalog):
    basic, plus = catalog.plan_by_code("BASIC"), catalog.plan_by_code("PLUS")
    return pricing.price_existing_customer(
        basic, plus, date(2025, 1, 1), date(2026, 1, 1), catalog.addons, {"channel_manager"},
    )


def test_pdf_rows_use_core_font_characters(upgrade):
    quote = existing_customer_quote(upgrade, VatPolicy(include_vat=True), Language.EN)
    assert "→" in quote.lines[0].label
    rows = reporting.pdf_rows(quote)
    assert rows[0] == ["Item", "Amount"]
    assert rows[1][0] == "Plan Upgrade: Plan BASIC -> Plan PLUS"
    for row in rows:
        for cell in row:
            cell.encode("cp1252")


def test_pdf_export_builds(upgrade):
    quote = existing_customer_quote(upgrade, VatPolicy(include_vat=False), Language.EN)
    pdf = reporting.generate_pdf_quote(quote, issued_on=date(2025, 1, 1))
    assert pdf.startswith(b"%PDF")


def test_csv_header_and_summary_follow_language(upgrade):
    quote = existing_customer_quote(upgrade, VatPolicy(include_vat=True), Language.AR)
    rows = list(csv.reader(StringIO(reporting.generate_csv_quote(quote, Language.AR))))
    assert rows[0] == ["البند", "ملاحظة", "المبلغ", "العملة"]
    labels = [row[0] for row in rows]
    assert "المجموع الفرعي" in labels
    assert any(label.startswith("ضريبة القيمة المضافة 15") for label in labels)
    assert "Subtotal" not in labels


def test_csv_defaults_to_english(catalog):
    plan = catalog.plan_by_code("BASIC")
    breakdown = pricing.price_new_customer(plan, 12, 0, catalog.addons, set())
    quote = new_customer_quote(breakdown, VatPolicy(include_vat=True), Language.EN)
    rows = list(csv.reader(StringIO(reporting.generate_csv_quote(quote))))
    assert rows[0] == ["Item", "Note", "Amount", "Currency"]
    labels = [row[0] for row in rows]
    assert "Subtotal" in labels
    assert "VAT 15%" in labels
    total = next(row for row in rows if row[0] == "Total")
    # 1000 + 2 extra units at 5
    assert total[2] == "1010.00"
