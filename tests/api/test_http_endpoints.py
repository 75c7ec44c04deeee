from decimal import Decimal

import pytest

from conftest import ALICE, ANNUAL, ORG, make_balance
from workbeat.main import create_app

# Mon 2099-01-05 .. Fri 2099-01-09
FUTURE_START = "2099-01-05"
FUTURE_END = "2099-01-09"


@pytest.fixture
def client(container, balances, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    balances.put(make_balance(ALICE, ANNUAL, 2099, allocated="20"))
    app = create_app(container)
    return app.test_client()


def test_sign_in_uses_employee_schedule(client):
    res = client.post(
        "/api/attendance/events",
        json={"employee_id": ALICE, "organization_id": ORG, "type": "sign-in", "timestamp": "2024-03-04T09:07:00"},
    )

    body = res.get_json()
    assert res.status_code == 201
    assert body["success"] is True
    assert body["is_late"] is True
    assert body["data"]["status"] == "late"
    assert body["data"]["date"] == "2024-03-04"


def test_explicit_schedule_overrides_employee(client):
    res = client.post(
        "/api/attendance/events",
        json={
            "employee_id": ALICE,
            "organization_id": ORG,
            "type": "sign-in",
            "timestamp": "2024-03-04T09:07:00",
            "schedule": None,
        },
    )

    assert res.get_json()["is_late"] is False


def test_day_record_roundtrip(client):
    client.post(
        "/api/attendance/events",
        json={"employee_id": ALICE, "organization_id": ORG, "type": "sign-in", "timestamp": "2024-03-04T09:00:00"},
    )
    client.post(
        "/api/attendance/events",
        json={"employee_id": ALICE, "organization_id": ORG, "type": "sign-out", "timestamp": "2024-03-04T17:00:00"},
    )

    res = client.get(f"/api/attendance/{ALICE}/2024-03-04?organization_id={ORG}")
    body = res.get_json()
    assert res.status_code == 200
    assert body["data"]["work_duration_minutes"] == 480
    assert body["data"]["status"] == "present"

    missing = client.get(f"/api/attendance/{ALICE}/2024-03-05?organization_id={ORG}")
    assert missing.status_code == 404

    history = client.get(f"/api/attendance/{ALICE}?organization_id={ORG}")
    assert len(history.get_json()["data"]) == 1


def test_attendance_validation_errors(client):
    bad_type = client.post(
        "/api/attendance/events",
        json={"employee_id": ALICE, "organization_id": ORG, "type": "nap", "timestamp": "2024-03-04T09:00:00"},
    )
    bad_time = client.post(
        "/api/attendance/events",
        json={"employee_id": ALICE, "organization_id": ORG, "type": "sign-in", "timestamp": "yesterday"},
    )
    unknown = client.post(
        "/api/attendance/events",
        json={"employee_id": 999, "organization_id": ORG, "type": "sign-in"},
    )
    bad_date = client.get(f"/api/attendance/{ALICE}/04-03-2024?organization_id={ORG}")

    assert bad_type.status_code == 400
    assert bad_type.get_json()["error"] == "ValidationError"
    assert bad_time.status_code == 400
    assert unknown.status_code == 404
    assert bad_date.status_code == 400


def test_leave_lifecycle_over_http(client):
    created = client.post(
        "/api/leave/requests",
        json={
            "organization_id": ORG,
            "employee_id": ALICE,
            "leave_type_id": ANNUAL,
            "start_date": FUTURE_START,
            "end_date": FUTURE_END,
            "reason": "ski trip",
        },
    )
    assert created.status_code == 201
    request_id = created.get_json()["data"]["request_id"]
    assert created.get_json()["data"]["days_requested"] == 5.0

    balances = client.get(f"/api/leave/balances/{ALICE}?organization_id={ORG}&year=2099").get_json()
    assert balances["summary"]["total_pending"] == 5.0

    approved = client.post(f"/api/leave/requests/{request_id}/approve", json={"organization_id": ORG, "approver_id": 7})
    assert approved.status_code == 200
    assert approved.get_json()["data"]["status"] == "approved"

    again = client.post(f"/api/leave/requests/{request_id}/reject", json={"organization_id": ORG})
    assert again.status_code == 409
    assert again.get_json()["error"] == "InvalidTransition"

    cancelled = client.post(f"/api/leave/requests/{request_id}/cancel", json={"organization_id": ORG})
    assert cancelled.status_code == 200
    assert cancelled.get_json()["data"]["status"] == "cancelled"

    listed = client.get(f"/api/leave/requests?organization_id={ORG}&employee_id={ALICE}&status=cancelled")
    assert [r["request_id"] for r in listed.get_json()["data"]] == [request_id]

    balances = client.get(f"/api/leave/balances/{ALICE}?organization_id={ORG}&year=2099").get_json()
    assert balances["summary"]["total_remaining"] == 20.0


def test_overlap_maps_to_conflict(client):
    payload = {
        "organization_id": ORG,
        "employee_id": ALICE,
        "leave_type_id": ANNUAL,
        "start_date": FUTURE_START,
        "end_date": FUTURE_END,
    }
    first = client.post("/api/leave/requests", json=payload)
    second = client.post("/api/leave/requests", json=dict(payload, start_date=FUTURE_END, end_date=FUTURE_END))

    assert second.status_code == 409
    body = second.get_json()
    assert body["error"] == "OverlapConflict"
    assert body["conflicting_ids"] == [first.get_json()["data"]["request_id"]]


def test_insufficient_balance_maps_to_bad_request(client):
    res = client.post(
        "/api/leave/requests",
        json={
            "organization_id": ORG,
            "employee_id": ALICE,
            "leave_type_id": ANNUAL,
            "start_date": "2099-01-05",
            "end_date": "2099-03-31",
        },
    )

    assert res.status_code == 400
    assert res.get_json()["error"] == "InsufficientBalance"


def test_missing_fields_rejected(client):
    res = client.post("/api/leave/requests", json={"organization_id": ORG, "employee_id": ALICE})

    assert res.status_code == 400


def test_initialize_balances(client, container):
    res = client.post("/api/leave/balances/initialize", json={"organization_id": ORG, "year": 2030})

    assert res.status_code == 200
    assert res.get_json()["created"] == 4
    assert container.leave_ledger.remaining(ALICE, ANNUAL, 2030) == Decimal("20")


def test_adjust_balance(client, container):
    res = client.put(
        f"/api/leave/balances/{ALICE}/{ANNUAL}/2099",
        json={"allocated_days": 25, "reason": "carry-over"},
    )

    assert res.status_code == 200
    assert res.get_json()["data"]["allocated_days"] == 25.0
    assert res.get_json()["data"]["remaining_days"] == 25.0
    assert container.leave_ledger.remaining(ALICE, ANNUAL, 2099) == Decimal("25")


def test_adjust_balance_rejects_bad_input(client):
    empty = client.put(f"/api/leave/balances/{ALICE}/{ANNUAL}/2099", json={"reason": "nothing"})
    negative = client.put(f"/api/leave/balances/{ALICE}/{ANNUAL}/2099", json={"used_days": -1})
    missing = client.put(f"/api/leave/balances/{ALICE}/{ANNUAL}/2031", json={"allocated_days": 5})

    assert empty.status_code == 400
    assert negative.status_code == 400
    assert missing.status_code == 404
    assert missing.get_json()["error"] == "BalanceNotFound"


def test_fractional_id_rejected(client):
    res = client.post(
        "/api/attendance/events",
        json={"employee_id": 10.5, "organization_id": ORG, "type": "sign-in"},
    )

    assert res.status_code == 400
