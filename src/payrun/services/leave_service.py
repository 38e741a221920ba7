"""Leave entitlement use-case service."""
from __future__ import annotations
from datetime import date, datetime, timezone
from payrun.calc.leave import (
    convertible_leave_days, leave_entitlement, months_worked, years_since,
)
from payrun.calc.schedule import to_local_date
from payrun.config import settings
from payrun.domain.exceptions import NotFoundError
from payrun.infra.db.uow import UnitOfWork
from payrun.infra.db.repositories.employee_repository import EmployeeRepository
from payrun.api.schemas.leave import LeaveEntitlementResponse, LeaveTypeEntitlement
from payrun.services import mapping


class LeaveService:
    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def get_entitlement(self, employee_id: int, reference: date | None = None) -> LeaveEntitlementResponse:
        """Prorated + anniversary entitlement per leave type as of *reference* (default: today, local)."""
        repo = EmployeeRepository(self._uow.session)
        row = repo.get_by_id(employee_id)
        if row is None:
            raise NotFoundError(f"Employee {employee_id} not found")

        profile = mapping.employee_profile(row)
        ref = reference or to_local_date(datetime.now(timezone.utc), settings.TIMEZONE)
        credits = profile.leave_credits
        policies = {p.name.strip().lower(): p for p in repo.list_leave_types(row.organization_id)}

        # (label, annual credits, used, anniversary applies)
        sources: list[tuple[str, float, float, bool]] = [
            ("vacation", credits.vacation.total, credits.vacation.used, True),
            ("sick", credits.sick.total, credits.sick.used, False),
        ]
        seen = {"vacation", "sick"}
        for name, balance in credits.custom.items():
            policy = policies.get(name.strip().lower())
            annual = balance.total or (policy.default_credits if policy else 0.0)
            sources.append((name, annual, balance.used, bool(policy and policy.is_anniversary)))
            seen.add(name.strip().lower())
        for key, policy in policies.items():
            if key not in seen and policy.default_credits > 0:
                sources.append((policy.name, policy.default_credits, 0.0, policy.is_anniversary))

        items: list[LeaveTypeEntitlement] = []
        for label, annual, used, with_anniversary in sources:
            figures = leave_entitlement(
                annual,
                profile.hire_date,
                profile.regularization_date if with_anniversary else None,
                ref,
            )
            balance = round(figures["total"] - used, 2)
            items.append(LeaveTypeEntitlement(
                leave_type=label,
                annual=annual,
                prorated=figures["prorated"],
                anniversary=figures["anniversary"],
                total=figures["total"],
                used=used,
                balance=balance,
                convertible_days=convertible_leave_days(balance),
            ))

        return LeaveEntitlementResponse(
            employee_id=employee_id,
            reference_date=ref,
            hire_date=profile.hire_date,
            regularization_date=profile.regularization_date,
            months_of_service=round(months_worked(profile.hire_date, ref), 2) if profile.hire_date else 0.0,
            years_since_regularization=(
                round(years_since(profile.regularization_date, ref), 2)
                if profile.regularization_date else 0.0
            ),
            items=items,
        )
