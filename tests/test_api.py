import pytest

from app.config import settings

PRO = settings.PROFESSIONAL_PLAN_CODE
OTA = settings.OTA_ADDON_CODE


def test_health(client):
    resp = client.get("/healthz")
    assert resp.status_code == 200
    assert resp.json().get("status") == "ok"


def test_list_plans(client):
    resp = client.get("/api/v1/plans")
    assert resp.status_code == 200
    plans = resp.json()
    assert [p["code"] for p in plans] == ["P-0023", "P-0024", "P-0025", PRO]
    pro = plans[-1]
    assert pro["is_professional"] is True
    assert pro["unlimited_reservations"] is True
    assert pro["discounted_price"] == pytest.approx(15992)


def test_list_addons(client):
    addons = client.get("/api/v1/addons").json()
    ota = next(a for a in addons if a["code"] == OTA)
    assert ota["is_onetime"] is True
    assert ota["price"] == 1500


def test_new_quote_with_extra_units(client):
    resp = client.post("/api/v1/quotes/new", json={"units_count": 12, "plan_code": "P-0023", "include_vat": True})
    assert resp.status_code == 200
    data = resp.json()
    assert data["extra_units"] == 2
    assert data["extra_units_cost"] == 300
    assert data["plan_total"] == 3290
    assert data["vat"]["total"] == 3290
    assert data["vat"]["vat_amount"] == pytest.approx(429.13, abs=0.01)


def test_new_quote_without_vat_shows_net_total(client):
    data = client.post("/api/v1/quotes/new", json={"units_count": 12, "plan_code": "P-0023", "include_vat": False}).json()
    assert data["grand_total"] == 3290
    assert data["vat"]["total"] == pytest.approx(2860.87, abs=0.01)
    assert data["vat"]["vat_amount"] == 0


def test_new_quote_recommends_plan(client):
    data = client.post("/api/v1/quotes/new", json={"units_count": 25}).json()
    assert data["plan_code"] == "P-0024"
    assert data["recommended_plan_code"] == "P-0024"


def test_new_quote_professional_only_charges_ota(client):
    payload = {
        "units_count": 1,
        "plan_code": PRO,
        "addon_codes": ["channel_manager", "smart_locks", "website_builder", OTA],
    }
    data = client.post("/api/v1/quotes/new", json=payload).json()
    charged = [line for line in data["addons"] if not line["included"]]
    assert [line["code"] for line in charged] == [OTA]
    assert data["addons_total"] == 1500
    assert data["grand_total"] == pytest.approx(15992 + 1500)


@pytest.mark.parametrize("payload", [
    {"units_count": 0},
    {"discount_percentage": 150},
    {"discount_percentage": -1},
    {"addon_codes": ["ghost"]},
    {"plan_code": "NOPE"},
])
def test_new_quote_rejects_invalid_input(client, payload):
    resp = client.post("/api/v1/quotes/new", json=payload)
    assert resp.status_code == 422


def test_existing_quote_upgrade(client):
    payload = {
        "current_plan_code": "P-0023",
        "new_plan_code": "P-0024",
        "start_date": "2025-01-01",
        "end_date": "2025-07-02",
        "include_vat": True,
    }
    data = client.post("/api/v1/quotes/existing", json=payload).json()
    assert data["remaining_days"] == 182
    assert data["direction"] == "upgrade"
    # (5990 * 0.9 - 2990) * 182 / 365
    assert data["plan_difference"] == pytest.approx(1197.21, abs=0.01)
    assert data["is_credit"] is False


def test_existing_quote_downgrade_is_credit(client):
    payload = {
        "current_plan_code": PRO,
        "new_plan_code": "P-0023",
        "start_date": "2025-01-01",
        "end_date": "2026-01-01",
        "addon_codes": ["smart_locks"],
    }
    data = client.post("/api/v1/quotes/existing", json=payload).json()
    assert data["direction"] == "downgrade"
    assert data["addons_total"] == 1200
    assert data["grand_total"] == pytest.approx(2990 - 15992 + 1200)
    assert data["is_credit"] is True


def test_existing_quote_rejects_bad_dates(client):
    payload = {
        "current_plan_code": "P-0023",
        "new_plan_code": "P-0024",
        "start_date": "not-a-date",
        "end_date": "2025-07-02",
    }
    assert client.post("/api/v1/quotes/existing", json=payload).status_code == 422


def test_api_reports_catalog_failure(broken_client):
    resp = broken_client.get("/api/v1/plans")
    assert resp.status_code == 503
    assert "unavailable" in resp.json()["detail"]


def test_api_on_empty_catalog(empty_client):
    assert empty_client.get("/api/v1/plans").json() == []
    data = empty_client.post("/api/v1/quotes/new", json={"units_count": 3}).json()
    assert data["plan_code"] is None
    assert data["grand_total"] == 0
