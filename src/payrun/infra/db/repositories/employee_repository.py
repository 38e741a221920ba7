"""Repository for employees and their calendar inputs. No business logic; caller owns the transaction."""
from __future__ import annotations
from datetime import date
from sqlmodel import Session, col, select
from payrun.models.core import (
    AttendanceRecord, Employee, Holiday, LeaveRequest, LeaveTypeSetting,
)


class EmployeeRepository:
    def __init__(self, session: Session) -> None:
        self._s = session

    # --- Employee ---

    def get_by_id(self, employee_id: int) -> Employee | None:
        return self._s.get(Employee, employee_id)

    def list_for_organization(
        self, organization_id: int, employee_ids: list[int] | None = None,
    ) -> list[Employee]:
        stmt = select(Employee).where(Employee.organization_id == organization_id)
        if employee_ids is not None:
            stmt = stmt.where(col(Employee.id).in_(employee_ids))
        return list(self._s.exec(stmt.order_by(Employee.id)).all())

    # --- Attendance ---

    def list_attendance(self, employee_id: int, start: date, end: date) -> list[AttendanceRecord]:
        return list(self._s.exec(
            select(AttendanceRecord).where(
                AttendanceRecord.employee_id == employee_id,
                AttendanceRecord.date >= start,
                AttendanceRecord.date <= end,
            ).order_by(AttendanceRecord.date)
        ).all())

    # --- Leave ---

    def list_leave_requests(
        self, employee_id: int, start: date, end: date, *, status: str | None = "approved",
    ) -> list[LeaveRequest]:
        """Requests overlapping the inclusive range."""
        stmt = select(LeaveRequest).where(
            LeaveRequest.employee_id == employee_id,
            LeaveRequest.start_date <= end,
            LeaveRequest.end_date >= start,
        )
        if status:
            stmt = stmt.where(LeaveRequest.status == status)
        return list(self._s.exec(stmt).all())

    def list_leave_types(self, organization_id: int) -> list[LeaveTypeSetting]:
        return list(self._s.exec(
            select(LeaveTypeSetting).where(LeaveTypeSetting.organization_id == organization_id)
        ).all())

    # --- Holidays ---

    def list_holidays(self, organization_id: int) -> list[Holiday]:
        return list(self._s.exec(
            select(Holiday).where(Holiday.organization_id == organization_id)
        ).all())
