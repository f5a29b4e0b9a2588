import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from ..config import settings
from ..db import get_db
from ..i18n import Language
from ..preferences import get_language, get_vat_policy
from ..services import quotes, reporting
from ..services.catalog import CatalogSnapshot, CatalogUnavailable, load_catalog
from ..services.selection import (
    ExistingCustomerEvent,
    ExistingCustomerSelection,
    NewCustomerEvent,
    NewCustomerSelection,
)
from ..services.vat import VatPolicy
from ..templating import templates

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/htmx", tags=["calculator"])

EXPORT_FORMATS = ("csv", "pdf")


# ==== Context builders (shared with the full-page views) ====

def new_customer_context(request: Request, catalog: CatalogSnapshot, selection: NewCustomerSelection, vat: VatPolicy, lang: Language) -> dict:
    breakdown = selection.price(catalog)
    return {
        "request": request,
        "lang": lang,
        "vat": vat,
        "catalog": catalog,
        "selection": selection,
        "breakdown": breakdown,
        "plan_cards": quotes.plan_cards(catalog.plans, vat, selection.units_count),
        "addon_cards": quotes.addon_cards(catalog.addons, vat),
        "quote": quotes.new_customer_quote(breakdown, vat, lang),
        "professional_code": settings.PROFESSIONAL_PLAN_CODE,
        "ota_code": settings.OTA_ADDON_CODE,
    }


def existing_customer_context(request: Request, catalog: CatalogSnapshot, selection: ExistingCustomerSelection, vat: VatPolicy, lang: Language) -> dict:
    breakdown = selection.price(catalog)
    return {
        "request": request,
        "lang": lang,
        "vat": vat,
        "catalog": catalog,
        "selection": selection,
        "breakdown": breakdown,
        "plan_cards": quotes.plan_cards(catalog.plans, vat),
        "addon_cards": quotes.addon_cards(catalog.addons, vat, days=breakdown.remaining_days),
        "quote": quotes.existing_customer_quote(breakdown, vat, lang),
        "professional_code": settings.PROFESSIONAL_PLAN_CODE,
        "ota_code": settings.OTA_ADDON_CODE,
    }


def catalog_error_response(request: Request, lang: Language) -> HTMLResponse:
    context = {"request": request, "lang": lang}
    if request.headers.get("HX-Request") == "true":
        # htmx only swaps 2xx responses; replace the whole tab with the error panel
        headers = {"HX-Retarget": "#calculator", "HX-Reswap": "innerHTML"}
        return templates.TemplateResponse(request, "partials/catalog_error.html", context, headers=headers)
    return templates.TemplateResponse(request, "partials/catalog_error.html", context, status_code=503)


# ==== New customers ====

def _new_selection(catalog: CatalogSnapshot, units_count: str, plan_code: str, addon_codes: list[str], discount_percentage: str, event: str, value: Optional[str]) -> NewCustomerSelection:
    selection = NewCustomerSelection.from_raw(
        catalog,
        units_count=units_count,
        plan_code=plan_code or None,
        addon_codes=addon_codes,
        discount_percentage=discount_percentage,
    )
    try:
        selection.dispatch(catalog, event, value)
    except ValueError:
        logger.debug("Unknown new-customer event %r", event)
    return selection


@router.post("/new/quote", response_class=HTMLResponse)
def new_customer_quote(
    request: Request,
    db: Session = Depends(get_db),
    vat: VatPolicy = Depends(get_vat_policy),
    units_count: str = Form("1"),
    plan_code: str = Form(""),
    addon_codes: list[str] = Form([]),
    discount_percentage: str = Form("0"),
    event: str = Form(NewCustomerEvent.REFRESH.value),
    value: Optional[str] = Form(None),
):
    lang = get_language(request)
    try:
        catalog = load_catalog(db)
    except CatalogUnavailable:
        return catalog_error_response(request, lang)
    selection = _new_selection(catalog, units_count, plan_code, addon_codes, discount_percentage, event, value)
    return templates.TemplateResponse(
        request,
        "partials/new_customer.html",
        new_customer_context(request, catalog, selection, vat, lang),
    )


@router.post("/new/export.{fmt}")
def new_customer_export(
    request: Request,
    fmt: str,
    db: Session = Depends(get_db),
    vat: VatPolicy = Depends(get_vat_policy),
    units_count: str = Form("1"),
    plan_code: str = Form(""),
    addon_codes: list[str] = Form([]),
    discount_percentage: str = Form("0"),
):
    lang = get_language(request)
    if fmt not in EXPORT_FORMATS:
        return HTMLResponse("<h2>Unknown export format</h2>", status_code=404)
    try:
        catalog = load_catalog(db)
    except CatalogUnavailable:
        return catalog_error_response(request, lang)
    selection = _new_selection(catalog, units_count, plan_code, addon_codes, discount_percentage, NewCustomerEvent.REFRESH, None)
    breakdown = selection.price(catalog)
    return _export(fmt, "new-customer-quote", lambda export_lang: quotes.new_customer_quote(breakdown, vat, export_lang), lang)


# ==== Existing customers ====

def _existing_selection(catalog: CatalogSnapshot, current_plan_code: str, new_plan_code: str, start_date: str, end_date: str, addon_codes: list[str], event: str, value: Optional[str]) -> ExistingCustomerSelection:
    selection = ExistingCustomerSelection.from_raw(
        catalog,
        current_plan_code=current_plan_code or None,
        new_plan_code=new_plan_code or None,
        start_date=start_date,
        end_date=end_date,
        addon_codes=addon_codes,
    )
    try:
        selection.dispatch(catalog, event, value)
    except ValueError:
        logger.debug("Unknown existing-customer event %r", event)
    return selection


@router.post("/existing/quote", response_class=HTMLResponse)
def existing_customer_quote(
    request: Request,
    db: Session = Depends(get_db),
    vat: VatPolicy = Depends(get_vat_policy),
    current_plan_code: str = Form(""),
    new_plan_code: str = Form(""),
    start_date: str = Form(""),
    end_date: str = Form(""),
    addon_codes: list[str] = Form([]),
    event: str = Form(ExistingCustomerEvent.REFRESH.value),
    value: Optional[str] = Form(None),
):
    lang = get_language(request)
    try:
        catalog = load_catalog(db)
    except CatalogUnavailable:
        return catalog_error_response(request, lang)
    selection = _existing_selection(catalog, current_plan_code, new_plan_code, start_date, end_date, addon_codes, event, value)
    return templates.TemplateResponse(
        request,
        "partials/existing_customer.html",
        existing_customer_context(request, catalog, selection, vat, lang),
    )


@router.post("/existing/export.{fmt}")
def existing_customer_export(
    request: Request,
    fmt: str,
    db: Session = Depends(get_db),
    vat: VatPolicy = Depends(get_vat_policy),
    current_plan_code: str = Form(""),
    new_plan_code: str = Form(""),
    start_date: str = Form(""),
    end_date: str = Form(""),
    addon_codes: list[str] = Form([]),
):
    lang = get_language(request)
    if fmt not in EXPORT_FORMATS:
        return HTMLResponse("<h2>Unknown export format</h2>", status_code=404)
    try:
        catalog = load_catalog(db)
    except CatalogUnavailable:
        return catalog_error_response(request, lang)
    selection = _existing_selection(catalog, current_plan_code, new_plan_code, start_date, end_date, addon_codes, ExistingCustomerEvent.REFRESH, None)
    breakdown = selection.price(catalog)
    return _export(fmt, "plan-change-quote", lambda export_lang: quotes.existing_customer_quote(breakdown, vat, export_lang), lang)


def _export(fmt: str, basename: str, build_quote, lang: Language) -> Response:
    if fmt == "csv":
        content = reporting.generate_csv_quote(build_quote(lang), lang)
        return Response(
            content=content.encode("utf-8-sig"),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{basename}.csv"'},
        )
    # PDF core fonts have no Arabic glyphs
    pdf = reporting.generate_pdf_quote(build_quote(Language.EN))
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{basename}.pdf"'},
    )
