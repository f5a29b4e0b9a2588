from ..config import settings
from ..i18n import Language, t

# code -> (English label, Arabic label)
CURRENCY_LABELS = {
    "SAR": ("SAR", "ريال"),
    "USD": ("USD", "دولار"),
    "AED": ("AED", "درهم"),
}

def get_currency_label(lang: Language | str, currency_code: str | None = None) -> str:
    """Returns the localized currency label, e.g. SAR / ريال."""
    code = (currency_code or settings.CURRENCY_CODE).upper()
    en, ar = CURRENCY_LABELS.get(code, (code, code))
    return t(lang, en, ar)

def format_money(amount: float) -> str:
    """Thousands separator, no decimals (e.g. 12,345)."""
    rounded = round(amount or 0.0)
    if rounded == 0:
        rounded = 0  # avoid "-0"
    return f"{rounded:,.0f}"
