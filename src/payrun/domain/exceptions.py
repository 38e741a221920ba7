class PayrunError(Exception):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(PayrunError):
    """Requested resource does not exist."""


class ConflictError(PayrunError):
    """Operation conflicts with existing state (e.g. editing a finalized run)."""


class InvalidTransitionError(ConflictError):
    """Payroll run status change not allowed by the lifecycle."""

    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot move payroll run from '{current}' to '{target}'")


class NotAuthorizedError(PayrunError):
    """Caller may not perform the operation. Raised by the access-control layer."""
