"""Validation result — immutable container for validated data or errors."""

from dataclasses import dataclass

from enroll.validation.rules import FieldValue


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """The outcome of validating form data against a set of rules.

    ``is_valid`` is True when there are no errors.
    The result is falsy when invalid, so you can write::

        result = validate(values, rules)
        if not result:
            report(result.errors)

    ``data`` contains the values of every field that passed.

    ``errors`` maps each failing field to its first violated rule's
    message::

        {"username": "username must be at least 3 characters"}
    """

    data: dict[str, FieldValue]
    errors: dict[str, str]

    @property
    def is_valid(self) -> bool:
        """True if validation passed with no errors."""
        return not self.errors

    def __bool__(self) -> bool:
        """Falsy when invalid — enables ``if not result:`` pattern."""
        return self.is_valid
