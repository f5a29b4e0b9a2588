from enum import Enum

from .config import settings


class Language(str, Enum):
    EN = "en"
    AR = "ar"

    @property
    def direction(self) -> str:
        return "rtl" if self is Language.AR else "ltr"

    @property
    def other(self) -> "Language":
        return Language.EN if self is Language.AR else Language.AR


def resolve_language(value: str | None) -> Language:
    """Map any stored/requested value onto one of the two supported languages."""
    try:
        return Language((value or settings.DEFAULT_LANGUAGE).lower())
    except ValueError:
        return Language.EN


def t(lang: Language | str, en: str, ar: str) -> str:
    return ar if resolve_language(lang) is Language.AR else en


def localized(obj, field: str, lang: Language | str) -> str:
    """Read `<field>_en` or `<field>_ar` from a catalog entity, falling back to English."""
    suffix = resolve_language(lang).value
    value = getattr(obj, f"{field}_{suffix}", "") or ""
    return value or (getattr(obj, f"{field}_en", "") or "")


