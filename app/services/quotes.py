"""
Display-ready quotes built from pricing breakdowns.

This is the only place where VAT display and language are applied to
computed prices; templates and exports render a Quote as-is.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..i18n import Language, t, localized
from . import pricing
from .catalog import AddonSnapshot, PlanSnapshot
from .currency import get_currency_label
from .vat import VatPolicy


@dataclass(frozen=True)
class QuoteLine:
    label: str
    # Displayed amount; None means the line is bundled ("Included")
    amount: Optional[float]
    kind: str = "item"
    sign: str = ""
    note: str = ""

    @property
    def included(self) -> bool:
        return self.amount is None


@dataclass(frozen=True)
class VatSummary:
    include_vat: bool
    rate_percent: float
    subtotal: float
    vat_amount: float
    total: float


@dataclass(frozen=True)
class Quote:
    title: str
    lines: list[QuoteLine]
    vat: VatSummary
    total_label: str
    total_sign: str = ""
    footnotes: list[str] = field(default_factory=list)
    currency: str = ""
    raw_total: float = 0.0


@dataclass(frozen=True)
class PlanCard:
    plan: PlanSnapshot
    list_price: float
    discounted_price: float
    extra_unit_price: float = 0.0
    extra_units: int = 0

    @property
    def fits_units(self) -> bool:
        return self.extra_units == 0


@dataclass(frozen=True)
class AddonCard:
    addon: AddonSnapshot
    price: float
    prorated_days: Optional[int] = None


def _pct(value: float, lang: Language) -> str:
    return f"{value:g}" + t(lang, "%", "٪")


def summarize_vat(total: float, vat: VatPolicy) -> VatSummary:
    return VatSummary(
        include_vat=vat.include_vat,
        rate_percent=vat.rate_percent,
        subtotal=vat.net_amount(total),
        vat_amount=vat.calculate_vat_amount(total),
        total=vat.apply_vat(total),
    )


def plan_cards(plans: Sequence[PlanSnapshot], vat: VatPolicy, units_count: Optional[int] = None) -> list[PlanCard]:
    return [
        PlanCard(
            plan=plan,
            list_price=vat.apply_vat(plan.yearly_price),
            discounted_price=vat.apply_vat(pricing.discounted_price(plan)),
            extra_unit_price=vat.apply_vat(plan.additional_unit_price),
            extra_units=pricing.extra_units(plan, units_count) if units_count else 0,
        )
        for plan in plans
    ]


def addon_cards(addons: Sequence[AddonSnapshot], vat: VatPolicy, days: Optional[int] = None) -> list[AddonCard]:
    return [
        AddonCard(
            addon=addon,
            price=vat.apply_vat(pricing.addon_charge(addon, days)),
            prorated_days=None if addon.is_onetime or days is None else days,
        )
        for addon in addons
    ]


def _addon_quote_lines(lines: Sequence[pricing.AddonLine], vat: VatPolicy, lang: Language) -> list[QuoteLine]:
    out = []
    for line in lines:
        label = localized(line.addon, "name", lang)
        if line.included:
            out.append(QuoteLine(label=label, amount=None, kind="addon", note=t(lang, "included", "مشمول")))
            continue
        note = t(lang, "one-time", "مرة واحدة") if line.addon.is_onetime else ""
        out.append(QuoteLine(label=label, amount=vat.apply_vat(line.amount), kind="addon", note=note))
    return out


def new_customer_quote(breakdown: pricing.NewCustomerBreakdown, vat: VatPolicy, lang: Language) -> Quote:
    lines: list[QuoteLine] = []
    plan = breakdown.plan
    if plan is not None:
        units = t(lang, "units", "وحدة")
        lines.append(QuoteLine(
            label=f"{localized(plan, 'name', lang)} ({plan.units_quota} {units})",
            amount=vat.apply_vat(breakdown.list_price),
            kind="plan",
        ))
        if plan.discount_percentage > 0:
            lines.append(QuoteLine(
                label=f"{t(lang, 'Plan Discount', 'خصم الخطة')} ({_pct(plan.discount_percentage, lang)})",
                amount=vat.apply_vat(breakdown.plan_discount_amount),
                kind="discount",
                sign="-",
            ))
        if breakdown.extra_units > 0:
            lines.append(QuoteLine(
                label=f"{breakdown.extra_units} {t(lang, 'extra units', 'وحدة إضافية')}",
                amount=vat.apply_vat(breakdown.extra_units_cost),
                kind="extra",
                note=f"× {vat.apply_vat(plan.additional_unit_price):,.0f}",
            ))
        if breakdown.manual_discount_percentage > 0:
            lines.append(QuoteLine(
                label=f"{t(lang, 'Additional Discount', 'خصم إضافي')} ({_pct(breakdown.manual_discount_percentage, lang)})",
                amount=vat.apply_vat(breakdown.manual_discount_amount),
                kind="discount",
                sign="-",
            ))
        if breakdown.has_plan_adjustments:
            lines.append(QuoteLine(
                label=t(lang, "Plan Subtotal", "المجموع الفرعي للخطة"),
                amount=vat.apply_vat(breakdown.plan_total),
                kind="subtotal",
            ))
    lines.extend(_addon_quote_lines(breakdown.addon_lines, vat, lang))
    return Quote(
        title=t(lang, "Pricing Summary", "ملخص الأسعار"),
        lines=lines,
        vat=summarize_vat(breakdown.grand_total, vat),
        total_label=t(lang, "Total", "المجموع"),
        footnotes=[t(lang, "Billed annually", "يتم الدفع سنوياً")],
        currency=get_currency_label(lang),
        raw_total=breakdown.grand_total,
    )


def existing_customer_quote(breakdown: pricing.ExistingCustomerBreakdown, vat: VatPolicy, lang: Language) -> Quote:
    lines: list[QuoteLine] = []
    if breakdown.is_plan_change:
        if breakdown.direction == pricing.PlanChange.UPGRADE:
            label, sign = t(lang, "Plan Upgrade", "ترقية الخطة"), "+"
        elif breakdown.direction == pricing.PlanChange.DOWNGRADE:
            label, sign = t(lang, "Plan Downgrade", "تخفيض الخطة"), ""
        else:
            label, sign = t(lang, "Plan Change", "تغيير الخطة"), ""
        lines.append(QuoteLine(
            label=f"{label}: {localized(breakdown.current_plan, 'name', lang)} → {localized(breakdown.new_plan, 'name', lang)}",
            amount=vat.apply_vat(breakdown.plan_difference),
            kind="change",
            sign=sign,
        ))
    lines.extend(_addon_quote_lines(breakdown.addon_lines, vat, lang))

    days = f"{breakdown.remaining_days} {t(lang, 'days', 'يوم')}"
    footnotes = [f"{t(lang, 'Prorated for remaining', 'محسوب للأيام المتبقية')} {days}"]
    if breakdown.is_credit:
        footnotes.append(t(lang, "Credit will be applied to your account", "سيتم إضافة الرصيد إلى حسابك"))
    else:
        footnotes.append(t(lang, "Payment due immediately", "الدفع مطلوب فوراً"))
    return Quote(
        title=t(lang, "Payment Summary", "ملخص الدفع"),
        lines=lines,
        vat=summarize_vat(breakdown.grand_total, vat),
        total_label=t(lang, "Amount Due", "المبلغ المستحق"),
        total_sign="" if breakdown.is_credit else "+",
        footnotes=footnotes,
        currency=get_currency_label(lang),
        raw_total=breakdown.grand_total,
    )
