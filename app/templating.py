from pathlib import Path

from fastapi.templating import Jinja2Templates
from .i18n import t, localized
from .services.currency import format_money, get_currency_label

def money_filter(amount: float) -> str:
    """A Jinja2 filter rendering an amount with thousands separators and no decimals."""
    return format_money(amount)

def currency_filter(lang) -> str:
    """A Jinja2 filter to get the localized currency label for the active language."""
    return get_currency_label(lang)

# Create a single, shared Jinja2Templates instance
templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
# Add the custom filters and bilingual helpers to the environment
templates.env.filters["money"] = money_filter
templates.env.filters["currency"] = currency_filter
templates.env.globals["t"] = t
templates.env.globals["localized"] = localized
