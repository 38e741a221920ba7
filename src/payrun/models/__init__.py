from payrun.models.core import (  # noqa: F401
    AttendanceRecord,
    Employee,
    Holiday,
    LeaveRequest,
    LeaveTypeSetting,
)
from payrun.models.ledger import CostLedgerEntry, LedgerStatus  # noqa: F401
from payrun.models.payroll import PayrollRun, PayrollSettings, Payslip, RunStatus  # noqa: F401
