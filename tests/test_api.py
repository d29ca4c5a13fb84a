# tests/test_api.py
"""End-to-end API tests against an in-memory SQLite database."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import httpx
import pytest
import requests
from unittest.mock import AsyncMock, patch
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.database import create_tables, get_db, make_engine
from app.main import app
from app.models import Favorite, StudyPlan, User
from app.models.user import ROLE_ADMIN


@pytest.fixture
def session_factory():
    engine = make_engine("sqlite://")
    create_tables(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()


@pytest.fixture
def users(session_factory):
    db = session_factory()
    admin = User(name="Admin", email="admin@example.be", role=ROLE_ADMIN)
    student = User(name="Student", email="student@example.be")
    other = User(name="Other", email="other@example.be")
    db.add_all([admin, student, other])
    db.commit()
    ids = {"admin": admin.id, "student": student.id, "other": other.id}
    db.close()
    return ids


@pytest.fixture
def client(session_factory, users):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def as_user(user_id):
    return {"X-User-Id": str(user_id)}


def create_location(client, admin_id, name="De Krook", lat=51.0479, capacity=50):
    response = client.post("/api/v1/locations", headers=as_user(admin_id), json={
        "name": name,
        "address": "Miriam Makebaplein 1, 9000 Gent",
        "latitude": lat,
        "longitude": 3.7271,
        "capacity": capacity,
    })
    assert response.status_code == 201, response.text
    return response.json()


def set_reading(client, admin_id, sensor_id, noise, occupancy, override=True):
    response = client.put(f"/api/v1/sensors/{sensor_id}", headers=as_user(admin_id), json={
        "current_noise_level": noise,
        "current_occupancy": occupancy,
        "is_manual_override": override,
    })
    assert response.status_code == 200, response.text
    return response.json()


def future(hours):
    return (datetime.now(timezone.utc) + timedelta(days=1, hours=hours)).isoformat()


class TestLocations:
    def test_new_location_gets_default_sensor(self, client, users):
        location = create_location(client, users["admin"])
        assert location["sensor"]["current_noise_level"] == 30
        assert location["sensor"]["current_occupancy"] == 0
        assert location["status"]["noise_level"] == "quiet"
        assert location["status"]["occupancy_level"] == "available"
        assert location["status"]["available_seats"] == 50
        assert location["status"]["color"] == "green"

    def test_writes_require_admin(self, client, users):
        body = {"name": "Test", "address": "Somewhere 1, Gent", "latitude": 51, "longitude": 3.7}
        assert client.post("/api/v1/locations", json=body).status_code == 401
        assert client.post("/api/v1/locations", headers=as_user(999), json=body).status_code == 401
        assert client.post("/api/v1/locations", headers=as_user(users["student"]),
                           json=body).status_code == 403

    def test_invalid_capacity_rejected(self, client, users):
        body = {"name": "Test", "address": "Somewhere 1, Gent", "latitude": 51,
                "longitude": 3.7, "capacity": 0}
        response = client.post("/api/v1/locations", headers=as_user(users["admin"]), json=body)
        assert response.status_code == 422

    def test_list_is_public_sorted_and_filterable(self, client, users):
        krook = create_location(client, users["admin"], "De Krook")
        create_location(client, users["admin"], "Agora")
        set_reading(client, users["admin"], krook["sensor"]["id"], 85, 10)

        names = [loc["name"] for loc in client.get("/api/v1/locations").json()]
        assert names == ["Agora", "De Krook"]

        loud = client.get("/api/v1/locations", params={"noise_level": "loud"}).json()
        assert [loc["name"] for loc in loud] == ["De Krook"]

    @pytest.mark.parametrize("field", ["name", "address", "latitude", "longitude", "capacity"])
    def test_required_field_cannot_be_cleared(self, client, users, field):
        location = create_location(client, users["admin"])
        response = client.put(f"/api/v1/locations/{location['id']}", headers=as_user(users["admin"]),
                              json={field: None})
        assert response.status_code == 422
        assert client.get(f"/api/v1/locations/{location['id']}").json()[field] == location[field]

    def test_capacity_shrink_clamps_occupancy(self, client, users):
        location = create_location(client, users["admin"], capacity=50)
        set_reading(client, users["admin"], location["sensor"]["id"], 30, 40)

        response = client.put(f"/api/v1/locations/{location['id']}", headers=as_user(users["admin"]),
                              json={"capacity": 20})
        assert response.status_code == 200
        assert response.json()["sensor"]["current_occupancy"] == 20
        assert response.json()["status"]["occupancy_level"] == "full"

    def test_delete_cascades(self, client, users, session_factory):
        location = create_location(client, users["admin"])
        client.post("/api/v1/favorites", headers=as_user(users["student"]),
                    json={"location_id": location["id"]})
        client.post("/api/v1/plans", headers=as_user(users["student"]), json={
            "location_id": location["id"], "start_time": future(1), "end_time": future(2),
        })

        response = client.delete(f"/api/v1/locations/{location['id']}", headers=as_user(users["admin"]))
        assert response.json() == {"success": True}
        assert client.get(f"/api/v1/locations/{location['id']}").status_code == 404

        db = session_factory()
        assert db.query(Favorite).count() == 0
        assert db.query(StudyPlan).count() == 0
        db.close()


class TestSensors:
    def test_admin_edit_clamps_and_classifies(self, client, users):
        location = create_location(client, users["admin"])
        sensor = set_reading(client, users["admin"], location["sensor"]["id"], 85, 60)

        assert sensor["current_occupancy"] == 50
        assert sensor["is_manual_override"] is True
        assert sensor["status"]["noise_level"] == "loud"
        assert sensor["status"]["occupancy_level"] == "full"
        assert sensor["status"]["color"] == "red"

    def test_out_of_range_noise_rejected(self, client, users):
        location = create_location(client, users["admin"])
        response = client.put(f"/api/v1/sensors/{location['sensor']['id']}",
                              headers=as_user(users["admin"]), json={"current_noise_level": 120})
        assert response.status_code in (400, 422)

    def test_second_sensor_rejected(self, client, users):
        location = create_location(client, users["admin"])
        response = client.post("/api/v1/sensors", headers=as_user(users["admin"]),
                               json={"location_id": location["id"]})
        assert response.status_code == 400

    def test_simulate_requires_admin(self, client, users):
        response = client.post("/api/v1/sensors/simulate", headers=as_user(users["student"]))
        assert response.status_code == 403

    def test_overridden_sensor_untouched_by_simulation(self, client, users):
        frozen = create_location(client, users["admin"], "Frozen")
        create_location(client, users["admin"], "Live")
        set_reading(client, users["admin"], frozen["sensor"]["id"], 77, 12, override=True)

        result = client.post("/api/v1/sensors/simulate", headers=as_user(users["admin"])).json()
        assert result["success"] is True
        assert result["updated"] == 1

        sensor = client.get(f"/api/v1/sensors/{frozen['sensor']['id']}").json()
        assert sensor["current_noise_level"] == 77
        assert sensor["current_occupancy"] == 12


class TestCron:
    def test_rejected_without_configured_secret(self, client, monkeypatch):
        monkeypatch.setattr(settings, "CRON_SECRET", None)
        response = client.get("/api/v1/cron/simulate-sensors")
        assert response.status_code == 401

    def test_wrong_secret(self, client, monkeypatch):
        monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")
        response = client.get("/api/v1/cron/simulate-sensors", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401

    def test_valid_secret_runs_tick(self, client, users, monkeypatch):
        monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")
        create_location(client, users["admin"])
        response = client.get("/api/v1/cron/simulate-sensors",
                              headers={"Authorization": "Bearer s3cret"})
        assert response.status_code == 200
        assert response.json()["updated"] == 1


class TestFavorites:
    def test_add_list_remove(self, client, users):
        location = create_location(client, users["admin"])
        headers = as_user(users["student"])

        assert client.post("/api/v1/favorites", headers=headers,
                           json={"location_id": location["id"]}).status_code == 201
        assert client.post("/api/v1/favorites", headers=headers,
                           json={"location_id": location["id"]}).status_code == 400

        favorites = client.get("/api/v1/favorites", headers=headers).json()
        assert [f["location_id"] for f in favorites] == [location["id"]]
        assert favorites[0]["location"]["status"]["noise_level"] == "quiet"
        assert client.get("/api/v1/favorites", headers=as_user(users["other"])).json() == []

        assert client.delete("/api/v1/favorites", headers=headers,
                             params={"location_id": location["id"]}).status_code == 200
        assert client.delete("/api/v1/favorites", headers=headers,
                             params={"location_id": location["id"]}).status_code == 404

    def test_unknown_location(self, client, users):
        response = client.post("/api/v1/favorites", headers=as_user(users["student"]),
                               json={"location_id": 12345})
        assert response.status_code == 404


class TestPlans:
    def test_past_start_rejected(self, client, users):
        location = create_location(client, users["admin"])
        past = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
        response = client.post("/api/v1/plans", headers=as_user(users["student"]), json={
            "location_id": location["id"], "start_time": past, "end_time": future(1),
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "Cannot create plan in the past"

    def test_end_not_after_start_rejected(self, client, users):
        location = create_location(client, users["admin"])
        response = client.post("/api/v1/plans", headers=as_user(users["student"]), json={
            "location_id": location["id"], "start_time": future(2), "end_time": future(2),
        })
        assert response.status_code == 400
        assert response.json()["detail"] == "End time must be after start time"

    def test_unknown_location(self, client, users):
        response = client.post("/api/v1/plans", headers=as_user(users["student"]), json={
            "location_id": 999, "start_time": future(1), "end_time": future(2),
        })
        assert response.status_code == 404

    def test_quiet_location_has_no_alternatives(self, client, users):
        location = create_location(client, users["admin"])
        response = client.post("/api/v1/plans", headers=as_user(users["student"]), json={
            "location_id": location["id"], "start_time": future(1), "end_time": future(3),
            "notes": "Chapter 4",
        })
        assert response.status_code == 201
        body = response.json()
        assert body["warnings"] == []
        assert body["alternatives"] is None
        assert body["plan"]["notes"] == "Chapter 4"

    def test_crowded_location_suggests_alternatives(self, client, users):
        crowded = create_location(client, users["admin"], "Crowded", lat=51.0479)
        create_location(client, users["admin"], "Far", lat=51.0579)
        create_location(client, users["admin"], "Near", lat=51.0489)
        set_reading(client, users["admin"], crowded["sensor"]["id"], 85, 50)

        response = client.post("/api/v1/plans", headers=as_user(users["student"]), json={
            "location_id": crowded["id"], "start_time": future(1), "end_time": future(3),
        })

        assert response.status_code == 201
        body = response.json()
        assert len(body["warnings"]) == 2
        assert [a["name"] for a in body["alternatives"]] == ["Near", "Far"]
        assert body["alternatives"][0]["distance"] == 111
        assert body["alternatives"][0]["available_seats"] == 50

    def test_plans_are_private(self, client, users):
        location = create_location(client, users["admin"])
        plan = client.post("/api/v1/plans", headers=as_user(users["student"]), json={
            "location_id": location["id"], "start_time": future(1), "end_time": future(2),
        }).json()["plan"]

        assert client.get(f"/api/v1/plans/{plan['id']}", headers=as_user(users["other"])).status_code == 404
        assert client.delete(f"/api/v1/plans/{plan['id']}", headers=as_user(users["other"])).status_code == 404
        assert client.get(f"/api/v1/plans/{plan['id']}", headers=as_user(users["student"])).status_code == 200

    def test_update_plan(self, client, users):
        location = create_location(client, users["admin"])
        headers = as_user(users["student"])
        plan = client.post("/api/v1/plans", headers=headers, json={
            "location_id": location["id"], "start_time": future(1), "end_time": future(2),
        }).json()["plan"]

        response = client.put(f"/api/v1/plans/{plan['id']}", headers=headers,
                              json={"notes": "Bring laptop"})
        assert response.status_code == 200
        assert response.json()["notes"] == "Bring laptop"

        response = client.put(f"/api/v1/plans/{plan['id']}", headers=headers,
                              json={"end_time": future(0)})
        assert response.status_code == 400


class TestUsers:
    def test_me(self, client, users):
        response = client.get("/api/v1/users/me", headers=as_user(users["student"]))
        assert response.json()["email"] == "student@example.be"

    def test_admin_user_list(self, client, users):
        assert client.get("/api/v1/admin/users", headers=as_user(users["student"])).status_code == 403
        assert len(client.get("/api/v1/admin/users", headers=as_user(users["admin"])).json()) == 3


class TestSync:
    def test_upstream_failure_is_502_and_logged(self, client, users):
        failing = AsyncMock(side_effect=httpx.ConnectError("connection refused"))
        with patch("app.services.sync_service.fetch_block_locations", failing):
            response = client.post("/api/v1/admin/sync-locations", headers=as_user(users["admin"]))
        assert response.status_code == 502

        logs = client.get("/api/v1/admin/sync-logs", headers=as_user(users["admin"])).json()
        assert logs[0]["status"] == "error"
        assert logs[0]["message"].startswith("Manual sync: ")

    def test_sync_requires_admin(self, client, users):
        response = client.post("/api/v1/admin/sync-locations", headers=as_user(users["student"]))
        assert response.status_code == 403


class TestHealth:
    def test_unreachable_open_data_does_not_degrade(self, client):
        with patch("app.routers.health.requests.get",
                   side_effect=requests.exceptions.ConnectionError()):
            body = client.get("/api/v1/health").json()
        assert body["status"] == "ok"
        assert body["database"] == "ok"
        assert body["open_data_api"] == "unreachable"
