"""Form validation — composable rules, clean results.

Usage::

    from enroll.validation import validate, required, max_length, min_length, with_message

    result = validate(values, {
        "username": [with_message(required, "username is required"), min_length(3), max_length(20)],
        "agreement": [accepted("the agreement must be accepted")],
    })
    if not result:
        # result.errors == {"username": "Must be at least 3 characters"}
        ...
"""

from collections.abc import Mapping, Sequence

from enroll.validation.result import ValidationResult
from enroll.validation.rules import (
    FieldValue,
    Validator,
    accepted,
    max_length,
    min_length,
    one_of,
    required,
    with_message,
)

__all__ = [
    "FieldValue",
    "ValidationResult",
    "Validator",
    "accepted",
    "first_error",
    "max_length",
    "min_length",
    "one_of",
    "required",
    "validate",
    "with_message",
]


def first_error(value: FieldValue, validators: Sequence[Validator]) -> str | None:
    """Run *validators* in order and return the first failure message.

    Later rules never see a value an earlier rule rejected, so
    ``min_length`` does not run on an empty string ``required`` already
    refused.
    """
    for validator in validators:
        error = validator(value)
        if error is not None:
            return error
    return None


def validate(
    data: Mapping[str, FieldValue],
    rules: Mapping[str, Sequence[Validator]],
) -> ValidationResult:
    """Validate data against a set of rules.

    Args:
        data: Any mapping of field names to values. Missing fields are
            validated as the empty string.
        rules: A mapping of field names to ordered rule lists. Each rule
            returns an error message string on failure, or ``None``.

    Returns:
        A ``ValidationResult`` with ``.data`` (values that passed) and
        ``.errors`` (field → first failure message).
    """
    errors: dict[str, str] = {}
    cleaned: dict[str, FieldValue] = {}

    for field_name, validators in rules.items():
        value = data.get(field_name, "")
        error = first_error(value, validators)
        if error is not None:
            errors[field_name] = error
        else:
            cleaned[field_name] = value

    return ValidationResult(data=cleaned, errors=errors)
