# conftest.py: isolated in-memory database and factories for catalog snapshots

import os

# Must be set before the app (and its settings) are imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ["SEED_DEMO_CATALOG"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["VAT_DISPLAY_DEFAULT"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import settings
from app.db import get_db, ensure_catalog_schema
from app.main import app
from app.services.catalog import AddonSnapshot, CatalogSnapshot, PlanSnapshot
from app.services.seed import seed_catalog


def _memory_engine():
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def engine():
    eng = _memory_engine()
    ensure_catalog_schema(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False, autocommit=False)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def seeded_db(db_session):
    seed_catalog(db_session)
    return db_session


def _client_for(session_factory):
    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    return TestClient(app)


@pytest.fixture
def client(engine, seeded_db):
    yield _client_for(sessionmaker(bind=engine, autoflush=False, autocommit=False))
    app.dependency_overrides.clear()


@pytest.fixture
def empty_client(engine):
    yield _client_for(sessionmaker(bind=engine, autoflush=False, autocommit=False))
    app.dependency_overrides.clear()


@pytest.fixture
def broken_client():
    # No tables were created, so every catalog query fails
    eng = _memory_engine()
    yield _client_for(sessionmaker(bind=eng, autoflush=False, autocommit=False))
    app.dependency_overrides.clear()
    eng.dispose()


# --- Snapshot factories for pure pricing tests --------------------------------

@pytest.fixture
def plan_factory():
    def make(code="P-1", yearly_price=1000.0, discount_percentage=0.0, units_quota=10, additional_unit_price=5.0, **kw):
        return PlanSnapshot(
            code=code,
            name_en=kw.pop("name_en", f"Plan {code}"),
            name_ar=kw.pop("name_ar", f"خطة {code}"),
            yearly_price=yearly_price,
            discount_percentage=discount_percentage,
            units_quota=units_quota,
            additional_unit_price=additional_unit_price,
            **kw,
        )
    return make


@pytest.fixture
def addon_factory():
    def make(code="addon", yearly_price=100.0, is_onetime=False, onetime_price=0.0, **kw):
        return AddonSnapshot(
            code=code,
            name_en=kw.pop("name_en", code.replace("_", " ").title()),
            name_ar=kw.pop("name_ar", code),
            yearly_price=yearly_price,
            is_onetime=is_onetime,
            onetime_price=onetime_price,
            **kw,
        )
    return make


@pytest.fixture
def catalog(plan_factory, addon_factory):
    """Three plans (one Professional) and three add-ons (one OTA Registration)."""
    plans = (
        plan_factory("BASIC", yearly_price=1000, units_quota=10, additional_unit_price=5, sort_order=1),
        plan_factory("PLUS", yearly_price=2000, discount_percentage=10, units_quota=30, additional_unit_price=4, sort_order=2),
        plan_factory(settings.PROFESSIONAL_PLAN_CODE, yearly_price=5000, discount_percentage=20, units_quota=100, additional_unit_price=3, sort_order=3),
    )
    addons = (
        addon_factory("channel_manager", yearly_price=365, sort_order=1),
        addon_factory("smart_locks", yearly_price=730, sort_order=2),
        addon_factory(settings.OTA_ADDON_CODE, is_onetime=True, onetime_price=500, sort_order=3),
    )
    return CatalogSnapshot(plans=plans, addons=addons)
