import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .db import SessionLocal, ensure_catalog_schema
from .limiter import limiter
from .routers import public_views, calculator_htmx_views, api_v1
from .services.seed import seed_if_empty

# --- Logging configuration ---
_level = logging.DEBUG if getattr(settings, "DEBUG", False) else logging.INFO
logging.basicConfig(
    level=_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
# Align uvicorn loggers with our level (useful under Docker Compose)
for _name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
    logging.getLogger(_name).setLevel(_level)
logger = logging.getLogger("app.startup")
logger.info("Starting %s (DEBUG=%s)", settings.APP_NAME, getattr(settings, "DEBUG", False))

app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        f"{settings.APP_NAME}: bilingual subscription pricing for new and existing customers.\n\n"
        "Swagger UI lists the JSON endpoints under the 'pricing-api' tag."
    ),
    openapi_tags=[
        {
            "name": "pricing-api",
            "description": (
                "Catalog listing and VAT-aware quotes for new subscriptions and plan changes. "
                "Endpoints under /api/v1."
            ),
        }
    ],
)

# Session cookie holds only the language and VAT display preferences
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie=settings.SESSION_COOKIE_NAME,
    max_age=settings.SESSION_MAX_AGE_DAYS * 24 * 60 * 60, # days in seconds
    https_only=settings.ENVIRONMENT == "production",
)

@app.on_event("startup")
def startup_event():
    """Runs startup tasks: create catalog tables and seed the demo catalog if enabled."""
    logger.info("Running startup tasks...")
    if not settings.SEED_DEMO_CATALOG:
        logger.info("Demo catalog seeding disabled.")
        return

    db = SessionLocal()
    try:
        ensure_catalog_schema()
        if seed_if_empty(db):
            logger.info("Empty catalog seeded with demo plans.")
    except SQLAlchemyError:
        # The calculator shows a catalog error until the store is reachable
        logger.exception("Could not prepare the catalog store")
        db.rollback()
    finally:
        db.close()
    logger.info("Startup tasks complete.")


# Add the limiter to the app state
app.state.limiter = limiter
# Add the exception handler for rate limit exceeded errors
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(public_views.router)
app.include_router(calculator_htmx_views.router)
app.include_router(api_v1.router)

# Static (placeholder)
app.mount("/static", StaticFiles(directory=str(Path(__file__).parent / "static"), check_dir=False), name="static")

@app.get("/healthz")
@limiter.exempt
def healthz():
    return {"status": "ok"}


# Convenience: API Swagger shortcut
@app.get("/api/v1/docs", include_in_schema=False)
@limiter.exempt
def api_docs_redirect():
    # Jump to the pricing-api tag section in Swagger UI
    return RedirectResponse(url="/docs#/pricing-api")
