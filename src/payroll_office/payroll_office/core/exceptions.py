class DomainError(Exception):
    """Base exception for business rule violations."""

    status_code = 400


class ValidationError(DomainError):
    """Raised when input data is missing, malformed or violates domain rules."""

    status_code = 400


class NotFoundError(DomainError):
    """Raised when an employee, structure, payroll or slip does not exist."""

    status_code = 404


class ConflictError(DomainError):
    """Raised when a uniqueness rule would be broken (duplicate payroll, slip, active structure)."""

    status_code = 409


class PreconditionFailedError(DomainError):
    """Raised when a dependent record blocks the operation."""

    status_code = 412


class TransientStoreError(DomainError):
    """Raised when the store connection fails mid-operation.

    The unit of work has been rolled back, so retrying the whole call is safe.
    """

    status_code = 503


class SlipNumberTakenError(ConflictError):
    """Raised when another transaction claimed the same slip number first."""


class EmployeeNotFoundError(NotFoundError):
    pass


class SalaryStructureNotFoundError(NotFoundError):
    pass


class StoreContentionError(TransientStoreError):
    """Raised when the store aborted the transaction on a deadlock or lock wait timeout."""
