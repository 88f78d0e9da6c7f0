"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Request validation
  2xxx: Customer
  9xxx: System / dependencies

Category base classes (ValidationError, NotFoundError, ConflictError,
DependencyError) let callers catch a whole family without listing codes.
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class ValidationError(AppError):
    """Rejected before any store or cache access."""


class NotFoundError(AppError):
    pass


class ConflictError(AppError):
    pass


class DependencyError(AppError):
    """Store or cache could not be reached."""


# --- 1xxx: Validation ---

class InvalidRequestError(ValidationError):
    def __init__(self, detail: str) -> None:
        super().__init__(1000, f"Invalid request: {detail}", 400)


class MissingFieldError(ValidationError):
    def __init__(self, *fields: str) -> None:
        names = ", ".join(fields)
        verb = "is" if len(fields) == 1 else "are"
        super().__init__(1001, f"{names} {verb} required", 400)


class NoFieldsToUpdateError(ValidationError):
    def __init__(self) -> None:
        super().__init__(1002, "No fields to update", 400)


class InvalidFieldError(ValidationError):
    def __init__(self, field: str, detail: str) -> None:
        super().__init__(1003, f"Invalid {field}: {detail}", 400)


# --- 2xxx: Customer ---

class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: str) -> None:
        super().__init__(2001, f"Customer not found: {customer_id}", 404)


class CustomerExistsError(ConflictError):
    def __init__(self) -> None:
        super().__init__(2002, "Customer already exists", 409)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class StoreUnavailableError(DependencyError):
    def __init__(self) -> None:
        super().__init__(9003, "Customer store is unavailable", 503)


class CacheUnavailableError(DependencyError):
    def __init__(self) -> None:
        super().__init__(9004, "Cache is unavailable", 503)
