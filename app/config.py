import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "Jaras Pricing Calculator")
    # Core settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-me")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Session (language + VAT display preferences only)
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "pricing_session")
    SESSION_MAX_AGE_DAYS: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "30"))

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pricing.db")
    SEED_DEMO_CATALOG: bool = os.getenv("SEED_DEMO_CATALOG", "true").lower() == "true"

    # Pricing
    VAT_RATE: float = float(os.getenv("VAT_RATE", "0.15"))
    VAT_DISPLAY_DEFAULT: bool = os.getenv("VAT_DISPLAY_DEFAULT", "false").lower() == "true"
    CURRENCY_CODE: str = os.getenv("CURRENCY_CODE", "SAR")
    DAYS_IN_YEAR: int = int(os.getenv("DAYS_IN_YEAR", "365"))
    DEFAULT_TERM_MONTHS: int = int(os.getenv("DEFAULT_TERM_MONTHS", "6"))
    PROFESSIONAL_PLAN_CODE: str = os.getenv("PROFESSIONAL_PLAN_CODE", "P-0026")
    OTA_ADDON_CODE: str = os.getenv("OTA_ADDON_CODE", "ota_registration")

    # Localization
    DEFAULT_LANGUAGE: str = os.getenv("DEFAULT_LANGUAGE", "en").lower()

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
    RATE_LIMIT_API: str = os.getenv("RATE_LIMIT_API", "60/minute")

settings = Settings()
