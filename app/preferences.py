from fastapi import Request

from .config import settings
from .i18n import Language, resolve_language
from .services.vat import VatPolicy, default_vat_policy

# Keys in the signed session cookie (SessionMiddleware)
LANGUAGE_KEY = "lang"
VAT_KEY = "include_vat"


def get_language(request: Request) -> Language:
    return resolve_language(request.session.get(LANGUAGE_KEY))


def set_language(request: Request, lang: Language) -> None:
    request.session[LANGUAGE_KEY] = lang.value


def get_vat_policy(request: Request) -> VatPolicy:
    """
    Dependency: the session's VAT display preference as a VatPolicy.
    Passed explicitly to everything that formats prices.
    """
    include_vat = request.session.get(VAT_KEY, settings.VAT_DISPLAY_DEFAULT)
    return default_vat_policy(bool(include_vat))


def toggle_vat(request: Request) -> VatPolicy:
    policy = get_vat_policy(request).toggled()
    request.session[VAT_KEY] = policy.include_vat
    return policy
