import pytest
from fastapi.testclient import TestClient

from farmassist import authorization, logic
from farmassist.api import app


client = TestClient(app)

SCENARIO_A = {
    "current": {"temperature": 28, "humidity": 85, "wind_speed": 5, "precipitation": 2},
    "farming_type": "crops",
}


@pytest.fixture(autouse=True)
def open_access(monkeypatch):
    monkeypatch.setattr(authorization, "api_key", None)
    monkeypatch.setattr(logic, "WEATHER_API_KEY", None)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_version_and_info():
    assert client.get("/version").json() == {"version": "1.0"}
    assert client.get("/info").json()["app"] == "Farm Assist API"


def test_routes_lists_endpoints():
    paths = [r["path"] for r in client.get("/routes").json()]
    assert "/disease_risk" in paths
    assert "/weather" in paths


def test_disease_risk_endpoint():
    r = client.post("/disease_risk", json=SCENARIO_A)
    assert r.status_code == 200

    body = r.json()
    assert body["animal_diseases"] is None
    assert body["plant_diseases"]["fungal_risk"] == 30
    assert body["plant_diseases"]["bacterial_risk"] == 36
    assert body["plant_diseases"]["pest_risk"] == 19
    assert len(body["plant_diseases"]["recommended_actions"]) == 3


def test_disease_risk_with_air_quality():
    payload = {
        "current": {"temperature": 33, "humidity": 50, "wind_speed": 20, "precipitation": 0},
        "air_quality": {"pm2_5": 10, "pm10": 15},
        "farming_type": "animals",
    }
    body = client.post("/disease_risk", json=payload).json()

    assert body["plant_diseases"] is None
    assert body["animal_diseases"]["heat_stress_risk"] == 40
    assert body["animal_diseases"]["recommended_actions"] == [
        "High heat stress risk - provide shade and water",
    ]


def test_disease_risk_rejects_bad_humidity():
    payload = {**SCENARIO_A, "current": {**SCENARIO_A["current"], "humidity": 120}}
    assert client.post("/disease_risk", json=payload).status_code == 422


def test_disease_risk_rejects_unknown_farming_type():
    payload = {**SCENARIO_A, "farming_type": "forestry"}
    assert client.post("/disease_risk", json=payload).status_code == 422


def test_weather_fallback_without_key():
    r = client.post("/weather", json={"location": "Lagos", "farming_type": "animals"})
    assert r.status_code == 200

    body = r.json()
    assert body["is_fallback"] is True
    assert body["disease_risk"]["plant_diseases"] is None
    assert body["disease_risk"]["animal_diseases"]["heat_stress_risk"] == 24


def test_weather_requires_location():
    r = client.post("/weather", json={"location": "   "})
    assert r.status_code == 400


def test_api_key_enforced(monkeypatch):
    monkeypatch.setattr(authorization, "api_key", "secret")

    assert client.post("/disease_risk", json=SCENARIO_A).status_code == 401
    r = client.post("/disease_risk", json=SCENARIO_A, headers={"X-API-Key": "secret"})
    assert r.status_code == 200
