"""Shared test fixtures.

  use_test_engine: redirects UoW + infra layer to a temp-file SQLite DB.
  client         : FastAPI TestClient wired to the test engine.
  seed           : helpers that insert employees, attendance and calendar rows.
"""
from datetime import date, timedelta
import pytest
from sqlmodel import SQLModel, Session, create_engine


@pytest.fixture
def use_test_engine(tmp_path, monkeypatch):
    """Monkeypatch infra/db engine references to an isolated temp-file SQLite DB."""
    db_path = tmp_path / "test_payrun.db"
    test_engine = create_engine(f"sqlite:///{db_path}", echo=False)

    import payrun.models  # noqa: F401  register all ORM mappers
    SQLModel.metadata.create_all(test_engine)

    monkeypatch.setattr("payrun.infra.db.engine.engine", test_engine)
    monkeypatch.setattr("payrun.infra.db.uow.engine", test_engine)

    yield test_engine

    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def client(use_test_engine):
    """FastAPI TestClient backed by the isolated test engine."""
    from fastapi.testclient import TestClient
    from payrun.api.app import create_app

    app = create_app()
    with TestClient(app) as c:
        yield c


class Seeder:
    """Insert rows straight through a session, bypassing the services."""

    def __init__(self, engine):
        self._engine = engine

    def _add(self, row):
        with Session(self._engine) as s:
            s.add(row)
            s.commit()
            s.refresh(row)
            return row

    def employee(self, organization_id: int = 1, **fields):
        from payrun.models.core import Employee
        fields.setdefault("name", "Juan Dela Cruz")
        fields.setdefault("basic_salary", 30000.0)
        return self._add(Employee(organization_id=organization_id, **fields))

    def attendance(self, employee, day: date, **fields):
        from payrun.models.core import AttendanceRecord
        fields.setdefault("status", "present")
        if fields["status"] in ("present", "half-day"):
            fields.setdefault("actual_in", "09:00")
            fields.setdefault("actual_out", "18:00")
        return self._add(AttendanceRecord(
            organization_id=employee.organization_id, employee_id=employee.id, date=day, **fields,
        ))

    def full_attendance(self, employee, start: date, end: date, **fields):
        """Present on every Monday-Friday of the inclusive range."""
        day = start
        while day <= end:
            if day.weekday() < 5:
                self.attendance(employee, day, **fields)
            day += timedelta(days=1)

    def holiday(self, organization_id: int, day: date, type: str = "regular", **fields):
        from payrun.models.core import Holiday
        fields.setdefault("name", "Holiday")
        return self._add(Holiday(organization_id=organization_id, date=day, type=type, **fields))

    def leave(self, employee, start: date, end: date, leave_type: str = "vacation", **fields):
        from payrun.models.core import LeaveRequest
        fields.setdefault("status", "approved")
        return self._add(LeaveRequest(
            organization_id=employee.organization_id, employee_id=employee.id,
            leave_type=leave_type, start_date=start, end_date=end, **fields,
        ))

    def leave_type(self, organization_id: int, name: str, **fields):
        from payrun.models.core import LeaveTypeSetting
        return self._add(LeaveTypeSetting(organization_id=organization_id, name=name, **fields))


@pytest.fixture
def seed(use_test_engine):
    return Seeder(use_test_engine)
