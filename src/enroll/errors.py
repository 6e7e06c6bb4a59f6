"""Enroll exception hierarchy.

Shared across the schema, controller, transport, and CLI so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class EnrollError(Exception):
    """Base for all enroll-specific errors."""


class ConfigurationError(EnrollError):
    """Raised when form configuration is invalid.

    Typically raised by ``FormConfig`` at construction or by
    ``FormConfig.from_env()`` when an environment value does not parse.
    """


class UnknownFieldError(EnrollError):
    """Raised when a field name is not part of the registration schema."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown field: {name!r}")


class ControllerStateError(EnrollError):
    """Raised when a FormController is used outside its mounted lifetime."""


@dataclass(frozen=True, slots=True)
class ValidationError(EnrollError):
    """A single field failed one of its rules.

    Recovered locally: the controller turns it into the field's entry in
    ``ErrorState`` and never escalates it.
    """

    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


class SubmissionError(EnrollError):
    """The registration endpoint rejected a submission.

    ``message`` is the user-facing text from the endpoint's error payload.
    ``status`` is the HTTP status when one was received.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        self.message = message
        self.status = status
        super().__init__(message)


class ContractViolation(SubmissionError):  # noqa: N818
    """The endpoint failed without a usable ``message``.

    Carries no user-facing message; the controller substitutes
    ``FormConfig.failure_fallback_message``.
    """

    def __init__(self, detail: str, status: int | None = None) -> None:
        self.detail = detail
        super().__init__("", status)

    def __str__(self) -> str:
        if self.status is not None:
            return f"{self.status}: {self.detail}"
        return self.detail
