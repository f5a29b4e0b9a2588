from datetime import date
from typing import Optional, List
from fastapi import APIRouter, Depends, Request, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from ..db import get_db
from ..limiter import limiter
from ..config import settings
from ..preferences import get_vat_policy
from ..services import pricing
from ..services.catalog import CatalogSnapshot, CatalogUnavailable, load_catalog
from ..services.quotes import summarize_vat
from ..services.vat import VatPolicy, default_vat_policy

router = APIRouter(prefix="/api/v1", tags=["pricing-api"])

# ==== Schemas ====

class PlanOut(BaseModel):
    code: str
    name_en: str
    name_ar: str
    target_customer_en: str
    target_customer_ar: str
    yearly_price: float
    discounted_price: float
    discount_percentage: float
    units_quota: int
    additional_unit_price: float
    reservations_quota: int
    unlimited_reservations: bool
    support_type_en: str
    support_type_ar: str
    is_professional: bool

class AddonOut(BaseModel):
    code: str
    name_en: str
    name_ar: str
    description_en: str
    description_ar: str
    yearly_price: float
    is_onetime: bool
    onetime_price: float
    price: float

class VatOut(BaseModel):
    include_vat: bool
    rate_percent: float
    subtotal: float
    vat_amount: float
    total: float

class AddonLineOut(BaseModel):
    code: str
    name_en: str
    name_ar: str
    is_onetime: bool
    included: bool
    amount: float

class NewCustomerQuoteIn(BaseModel):
    units_count: int = Field(default=1, ge=1)
    # Omit to use the recommended plan for units_count
    plan_code: Optional[str] = None
    addon_codes: List[str] = Field(default_factory=list)
    discount_percentage: float = Field(default=0.0, ge=0, le=100)
    # Omit to use the session's VAT display preference
    include_vat: Optional[bool] = None

class NewCustomerQuoteOut(BaseModel):
    plan_code: Optional[str] = None
    recommended_plan_code: Optional[str] = None
    units_count: int
    list_price: float
    plan_discount_amount: float
    manual_discount_percentage: float
    manual_discount_amount: float
    extra_units: int
    extra_units_cost: float
    plan_total: float
    addons: List[AddonLineOut]
    addons_total: float
    grand_total: float
    vat: VatOut

class ExistingCustomerQuoteIn(BaseModel):
    current_plan_code: str
    new_plan_code: str
    start_date: date
    end_date: date
    addon_codes: List[str] = Field(default_factory=list)
    include_vat: Optional[bool] = None

class ExistingCustomerQuoteOut(BaseModel):
    current_plan_code: str
    new_plan_code: str
    remaining_days: int
    direction: pricing.PlanChange
    plan_difference: float
    addons: List[AddonLineOut]
    addons_total: float
    grand_total: float
    is_credit: bool
    vat: VatOut

    class Config:
        use_enum_values = True

# ==== Helpers ====

def _money(value: float) -> float:
    return round(value, 2)

def require_catalog(db: Session = Depends(get_db)) -> CatalogSnapshot:
    try:
        return load_catalog(db)
    except CatalogUnavailable:
        raise HTTPException(status_code=503, detail="Pricing catalog is unavailable")

def _vat_for(request: Request, include_vat: Optional[bool]) -> VatPolicy:
    if include_vat is None:
        return get_vat_policy(request)
    return default_vat_policy(include_vat)

def _check_addon_codes(catalog: CatalogSnapshot, codes: List[str]) -> None:
    unknown = [c for c in codes if catalog.addon_by_code(c) is None]
    if unknown:
        raise HTTPException(status_code=422, detail=f"Unknown add-on codes: {', '.join(unknown)}")

def _require_plan(catalog: CatalogSnapshot, code: str):
    plan = catalog.plan_by_code(code)
    if plan is None:
        raise HTTPException(status_code=422, detail=f"Unknown plan code: {code}")
    return plan

def _addon_lines_out(lines: List[pricing.AddonLine]) -> List[AddonLineOut]:
    return [
        AddonLineOut(
            code=line.addon.code,
            name_en=line.addon.name_en,
            name_ar=line.addon.name_ar,
            is_onetime=line.addon.is_onetime,
            included=line.included,
            amount=_money(line.amount),
        )
        for line in lines
    ]

def _vat_out(total: float, vat: VatPolicy) -> VatOut:
    summary = summarize_vat(total, vat)
    return VatOut(
        include_vat=summary.include_vat,
        rate_percent=summary.rate_percent,
        subtotal=_money(summary.subtotal),
        vat_amount=_money(summary.vat_amount),
        total=_money(summary.total),
    )

# ==== Catalog ====

@router.get("/plans", response_model=List[PlanOut])
def api_plans(catalog: CatalogSnapshot = Depends(require_catalog)):
    return [
        PlanOut(
            **plan.model_dump(exclude={"sort_order"}),
            discounted_price=_money(pricing.discounted_price(plan)),
            unlimited_reservations=plan.has_unlimited_reservations,
            is_professional=pricing.is_professional(plan),
        )
        for plan in catalog.plans
    ]

@router.get("/addons", response_model=List[AddonOut])
def api_addons(catalog: CatalogSnapshot = Depends(require_catalog)):
    return [
        AddonOut(**addon.model_dump(exclude={"sort_order"}), price=pricing.addon_price(addon))
        for addon in catalog.addons
    ]

# ==== Quotes ====

@router.post("/quotes/new", response_model=NewCustomerQuoteOut)
@limiter.limit(settings.RATE_LIMIT_API)
def api_quote_new(request: Request, payload: NewCustomerQuoteIn, catalog: CatalogSnapshot = Depends(require_catalog)):
    _check_addon_codes(catalog, payload.addon_codes)
    recommended = pricing.recommend_plan(catalog.plans, payload.units_count)
    plan = _require_plan(catalog, payload.plan_code) if payload.plan_code else recommended
    breakdown = pricing.price_new_customer(
        plan,
        payload.units_count,
        payload.discount_percentage,
        catalog.addons,
        payload.addon_codes,
    )
    vat = _vat_for(request, payload.include_vat)
    return NewCustomerQuoteOut(
        plan_code=plan.code if plan else None,
        recommended_plan_code=recommended.code if recommended else None,
        units_count=breakdown.units_count,
        list_price=_money(breakdown.list_price),
        plan_discount_amount=_money(breakdown.plan_discount_amount),
        manual_discount_percentage=breakdown.manual_discount_percentage,
        manual_discount_amount=_money(breakdown.manual_discount_amount),
        extra_units=breakdown.extra_units,
        extra_units_cost=_money(breakdown.extra_units_cost),
        plan_total=_money(breakdown.plan_total),
        addons=_addon_lines_out(breakdown.addon_lines),
        addons_total=_money(breakdown.addons_total),
        grand_total=_money(breakdown.grand_total),
        vat=_vat_out(breakdown.grand_total, vat),
    )

@router.post("/quotes/existing", response_model=ExistingCustomerQuoteOut)
@limiter.limit(settings.RATE_LIMIT_API)
def api_quote_existing(request: Request, payload: ExistingCustomerQuoteIn, catalog: CatalogSnapshot = Depends(require_catalog)):
    _check_addon_codes(catalog, payload.addon_codes)
    current = _require_plan(catalog, payload.current_plan_code)
    new = _require_plan(catalog, payload.new_plan_code)
    breakdown = pricing.price_existing_customer(
        current,
        new,
        payload.start_date,
        payload.end_date,
        catalog.addons,
        payload.addon_codes,
    )
    vat = _vat_for(request, payload.include_vat)
    return ExistingCustomerQuoteOut(
        current_plan_code=current.code,
        new_plan_code=new.code,
        remaining_days=breakdown.remaining_days,
        direction=breakdown.direction,
        plan_difference=_money(breakdown.plan_difference),
        addons=_addon_lines_out(breakdown.addon_lines),
        addons_total=_money(breakdown.addons_total),
        grand_total=_money(breakdown.grand_total),
        is_credit=breakdown.is_credit,
        vat=_vat_out(breakdown.grand_total, vat),
    )
