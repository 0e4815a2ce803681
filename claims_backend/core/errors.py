"""Domain error kinds raised by the services and normalized by the operations layer."""


class DomainError(Exception):
    """Base exception for business rule violations."""

    kind = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DomainError):
    """Raised when input data is invalid. Carries a field -> message map."""

    kind = "validation"

    def __init__(self, field_errors: dict[str, str], message: str = "Invalid data provided.") -> None:
        super().__init__(message)
        self.field_errors = dict(field_errors)


class AuthorizationError(DomainError):
    """Raised when the actor may not perform an operation."""

    kind = "authorization"

    def __init__(self, message: str = "not permitted") -> None:
        super().__init__(message)


class ConflictError(DomainError):
    """Raised when the current stored state forbids the change."""

    kind = "conflict"


class ClaimAlreadyProcessed(ConflictError):
    def __init__(self, status: str) -> None:
        super().__init__(f"Claim is already {status.lower()}. Cannot change status.")
        self.status = status


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    kind = "not_found"


DATABASE_FAILURE = "Database unavailable. Please try again later."
REQUIRED_MESSAGE = "This field is required."


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _pydantic_message(error: dict) -> str:
    error_type = error["type"]
    if error_type == "value_error":
        return str(error["ctx"]["error"])
    if error_type == "missing" or _is_blank(error.get("input")):
        return REQUIRED_MESSAGE
    return error["msg"]


def field_errors_from_pydantic(exc, root_field: str = "__root__") -> dict[str, str]:
    """Flatten a pydantic ``ValidationError`` into ``{"a.0.b": message}``."""
    field_errors: dict[str, str] = {}
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or root_field
        field_errors.setdefault(field, _pydantic_message(error))
    return field_errors
