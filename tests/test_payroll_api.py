"""Integration tests for the payroll HTTP endpoints."""
from datetime import date
import pytest


@pytest.fixture
def worker(seed):
    emp = seed.employee(name="Maria Santos", hire_date=date(2024, 1, 1), regularization_date=date(2022, 1, 1))
    seed.full_attendance(emp, date(2025, 1, 1), date(2025, 1, 15))
    return emp


def _create_run(client, **body):
    body.setdefault("cutoff_start", "2025-01-01")
    body.setdefault("cutoff_end", "2025-01-15")
    return client.post("/organizations/1/payroll-runs", json=body)


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_create_run_returns_201(client, worker):
    resp = _create_run(client)
    assert resp.status_code == 201
    body = resp.json()
    assert body["status"] == "draft"
    assert body["period"] == "Jan 1 - Jan 15, 2025"
    assert body["employee_ids"] == [worker.id]


def test_create_run_with_reversed_cutoff_returns_422(client, worker):
    resp = _create_run(client, cutoff_start="2025-01-15", cutoff_end="2025-01-01")
    assert resp.status_code == 422


def test_list_runs_returns_items_and_total(client, worker):
    _create_run(client)
    _create_run(client, cutoff_start="2025-01-16", cutoff_end="2025-01-31")
    body = client.get("/organizations/1/payroll-runs").json()
    assert body["total"] == 2
    assert body["items"][0]["cutoff_start"] == "2025-01-16"
    assert client.get("/organizations/2/payroll-runs").json()["total"] == 0


def test_get_missing_run_returns_404(client):
    assert client.get("/payroll-runs/9999").status_code == 404


def test_payslips_endpoint(client, worker):
    run = _create_run(client).json()
    body = client.get(f"/payroll-runs/{run['id']}/payslips").json()
    assert body["total"] == 1
    slip = body["items"][0]
    assert slip["net_pay"] == 12175
    assert slip["total_deductions"] == 2825
    assert {d["name"] for d in slip["deductions"]} == {"SSS", "PhilHealth", "Pag-IBIG", "Withholding Tax"}

    fetched = client.get(f"/payslips/{slip['id']}").json()
    assert fetched["id"] == slip["id"]
    assert client.get(f"/employees/{worker.id}/payslips").json()["total"] == 1


def test_status_lifecycle_and_ledger(client, worker):
    run = _create_run(client).json()
    resp = client.post(f"/payroll-runs/{run['id']}/status", json={"status": "finalized"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "finalized"

    ledger = client.get("/organizations/1/cost-ledger").json()
    assert ledger["total"] == 5
    names = {e["name"]: e for e in ledger["items"]}
    assert names["Payroll - Jan 1 - Jan 15, 2025"]["amount"] == 12175
    assert names["Payroll - Jan 1 - Jan 15, 2025"]["status"] == "pending"

    client.post(f"/payroll-runs/{run['id']}/status", json={"status": "paid"})
    ledger = client.get("/organizations/1/cost-ledger").json()
    assert all(e["status"] == "paid" for e in ledger["items"])


def test_invalid_transition_returns_409(client, worker):
    run = _create_run(client).json()
    resp = client.post(f"/payroll-runs/{run['id']}/status", json={"status": "paid"})
    assert resp.status_code == 409
    assert "draft" in resp.json()["detail"]


def test_unknown_status_returns_422(client, worker):
    run = _create_run(client).json()
    resp = client.post(f"/payroll-runs/{run['id']}/status", json={"status": "processing"})
    assert resp.status_code == 422


def test_patch_finalized_run_returns_409(client, worker):
    run = _create_run(client).json()
    client.post(f"/payroll-runs/{run['id']}/status", json={"status": "finalized"})
    resp = client.patch(f"/payroll-runs/{run['id']}", json={"deductions_enabled": False})
    assert resp.status_code == 409


def test_patch_draft_run_regenerates(client, worker):
    run = _create_run(client).json()
    resp = client.patch(f"/payroll-runs/{run['id']}", json={"deductions_enabled": False})
    assert resp.status_code == 200
    slip = client.get(f"/payroll-runs/{run['id']}/payslips").json()["items"][0]
    assert slip["deductions"] == []
    assert slip["net_pay"] == 15000


def test_delete_run_returns_204(client, worker):
    run = _create_run(client).json()
    assert client.delete(f"/payroll-runs/{run['id']}").status_code == 204
    assert client.get(f"/payroll-runs/{run['id']}").status_code == 404


def test_patch_payslip(client, worker):
    run = _create_run(client).json()
    slip = client.get(f"/payroll-runs/{run['id']}/payslips").json()["items"][0]
    resp = client.patch(f"/payslips/{slip['id']}", json={
        "incentives": [{"name": "Bonus", "amount": 500, "type": "bonus"}],
        "edited_by": "hr",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["gross_pay"] == 15500
    assert body["net_pay"] == 12675
    assert body["edit_history"][0]["edited_by"] == "hr"


def test_preview_endpoint(client, worker):
    resp = client.post(f"/employees/{worker.id}/payroll-preview", json={
        "cutoff_start": "2025-01-01", "cutoff_end": "2025-01-15",
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["net_pay"] == 12175
    assert body["total_deductions"] == 2825
    assert client.get("/organizations/1/payroll-runs").json()["total"] == 0


def test_preview_unknown_employee_returns_404(client):
    resp = client.post("/employees/9999/payroll-preview", json={
        "cutoff_start": "2025-01-01", "cutoff_end": "2025-01-15",
    })
    assert resp.status_code == 404


def test_summary_and_notes(client, worker):
    run = _create_run(client).json()
    summary = client.get(f"/payroll-runs/{run['id']}/summary").json()
    assert len(summary["dates"]) == 15
    assert summary["employees"][0]["totals"]["absent_days"] == 0

    resp = client.post(f"/payroll-runs/{run['id']}/notes", json={
        "employee_id": worker.id, "date": "2025-01-06", "note": "Client site visit",
    })
    assert resp.status_code == 201
    assert resp.json()["notes"][0]["note"] == "Client site visit"


def test_leave_entitlement_endpoint(client, seed, worker):
    seed.leave_type(1, "Birthday Leave", default_credits=1)
    resp = client.get(
        f"/employees/{worker.id}/leave-entitlement", params={"reference_date": "2024-07-01"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["reference_date"] == "2024-07-01"
    assert body["months_of_service"] == 6
    items = {i["leave_type"]: i for i in body["items"]}
    assert set(items) == {"vacation", "sick", "Birthday Leave"}
    assert items["vacation"]["anniversary"] == 2
    assert items["sick"]["anniversary"] == 0
    assert items["Birthday Leave"]["prorated"] == 0.5


def test_leave_entitlement_uses_credit_totals(client, seed):
    emp = seed.employee(
        hire_date=date(2020, 1, 1),
        leave_credits={"vacation": {"total": 15, "used": 12}, "sick": {"total": 10}},
    )
    body = client.get(
        f"/employees/{emp.id}/leave-entitlement", params={"reference_date": "2025-01-01"},
    ).json()
    items = {i["leave_type"]: i for i in body["items"]}
    assert items["vacation"]["total"] == 15
    assert items["vacation"]["balance"] == 3
    assert items["vacation"]["convertible_days"] == 3
    assert items["sick"]["convertible_days"] == 5
