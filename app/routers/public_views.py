from fastapi import APIRouter, Request, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session
from ..db import get_db
from ..preferences import get_language, set_language, get_vat_policy, toggle_vat
from ..services.catalog import CatalogUnavailable, load_catalog
from ..services.selection import NewCustomerSelection, ExistingCustomerSelection
from ..services.vat import VatPolicy
from ..templating import templates
from .calculator_htmx_views import new_customer_context, existing_customer_context

router = APIRouter(tags=["public"])

TABS = ("new", "existing")


def _render_tab(request: Request, db: Session, vat: VatPolicy, tab: str):
    lang = get_language(request)
    base = {"request": request, "lang": lang, "vat": vat, "active_tab": tab}
    try:
        catalog = load_catalog(db)
    except CatalogUnavailable:
        # Distinct error state instead of an endless spinner
        return templates.TemplateResponse(request, "calculator.html", {**base, "catalog_error": True}, status_code=503)
    if tab == "existing":
        ctx = existing_customer_context(request, catalog, ExistingCustomerSelection.start(catalog), vat, lang)
    else:
        ctx = new_customer_context(request, catalog, NewCustomerSelection.start(catalog), vat, lang)
    return templates.TemplateResponse(request, "calculator.html", {**ctx, **base, "catalog_error": False})


@router.get("/", response_class=HTMLResponse)
def new_customers(request: Request, db: Session = Depends(get_db), vat: VatPolicy = Depends(get_vat_policy)):
    return _render_tab(request, db, vat, "new")


@router.get("/existing", response_class=HTMLResponse)
def existing_customers(request: Request, db: Session = Depends(get_db), vat: VatPolicy = Depends(get_vat_policy)):
    return _render_tab(request, db, vat, "existing")


@router.post("/preferences/language")
def switch_language(request: Request, next: str = Form("/")):
    set_language(request, get_language(request).other)
    # Only redirect back inside the app
    target = next if next in ("/", "/existing") else "/"
    return RedirectResponse(url=target, status_code=303)


@router.post("/preferences/vat", response_class=HTMLResponse)
def switch_vat(request: Request):
    vat = toggle_vat(request)
    # Quote forms listen for this event and re-render themselves
    headers = {"HX-Trigger": "vatToggled"}
    return templates.TemplateResponse(
        request,
        "partials/vat_toggle.html",
        {"request": request, "lang": get_language(request), "vat": vat},
        headers=headers,
    )
