"""Registration schema — field rules and the whole-form validity policy.

Field-level errors (shown inline) and form-level validity (gates the
submit control) are computed independently. A freshly mounted form is
invalid, yet shows no errors until a field changes.

Usage::

    from enroll.schema import REGISTRATION_SCHEMA

    REGISTRATION_SCHEMA.check_field("username", "bo")
    # 'username must be at least 3 characters'

    REGISTRATION_SCHEMA.validate_form(state)
    # False
"""

from collections.abc import Mapping, Sequence
from types import MappingProxyType

from enroll.errors import UnknownFieldError, ValidationError
from enroll.fields import AGREEMENT, FAV_FOOD, FAV_LANGUAGE, REGISTRATION_FIELDS, USERNAME
from enroll.validation import (
    FieldValue,
    Validator,
    accepted,
    first_error,
    max_length,
    min_length,
    one_of,
    required,
    validate,
    with_message,
)

USERNAME_REQUIRED = "username is required"
USERNAME_MIN = "username must be at least 3 characters"
USERNAME_MAX = "username cannot exceed 20 characters"
FAV_FOOD_REQUIRED = "a favorite food must be selected"
FAV_LANGUAGE_REQUIRED = "favLanguage is a required field"
AGREEMENT_REQUIRED = "the agreement must be accepted"

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 20


class ValidationSchema:
    """An ordered set of rules per field.

    Rules for a field run in declaration order and the first failure
    wins. The schema is immutable after construction and carries no
    per-form state, so one instance serves every controller.
    """

    __slots__ = ("_rules",)

    def __init__(self, rules: Mapping[str, Sequence[Validator]]) -> None:
        self._rules: Mapping[str, tuple[Validator, ...]] = MappingProxyType(
            {name: tuple(validators) for name, validators in rules.items()}
        )

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self._rules)

    def _rules_for(self, name: str) -> tuple[Validator, ...]:
        try:
            return self._rules[name]
        except KeyError:
            raise UnknownFieldError(name) from None

    def validate_field(self, name: str, value: FieldValue) -> None:
        """Apply *name*'s rules to *value*.

        Raises:
            ValidationError: carrying the first violated rule's message.
            UnknownFieldError: if *name* is not a schema field.
        """
        error = first_error(value, self._rules_for(name))
        if error is not None:
            raise ValidationError(field=name, message=error)

    def check_field(self, name: str, value: FieldValue) -> str:
        """Like ``validate_field`` but return the message, or ``""`` when valid."""
        try:
            self.validate_field(name, value)
        except ValidationError as exc:
            return exc.message
        return ""

    def validate_form(self, state: Mapping[str, FieldValue]) -> bool:
        """True iff every schema field in *state* passes its rules.

        Produces no field-level errors; use ``errors_for`` for those.
        """
        return all(
            first_error(state.get(name, ""), validators) is None
            for name, validators in self._rules.items()
        )

    def errors_for(self, state: Mapping[str, FieldValue]) -> dict[str, str]:
        """First failure message for every failing field in *state*."""
        return validate(state, self._rules).errors


REGISTRATION_SCHEMA = ValidationSchema({
    USERNAME: [
        with_message(required, USERNAME_REQUIRED),
        min_length(USERNAME_MIN_LENGTH, USERNAME_MIN),
        max_length(USERNAME_MAX_LENGTH, USERNAME_MAX),
    ],
    FAV_FOOD: [
        one_of(*REGISTRATION_FIELDS[FAV_FOOD].choice_values, message=FAV_FOOD_REQUIRED),
    ],
    # The UI offers javascript and rust, but any non-empty language is accepted
    FAV_LANGUAGE: [
        with_message(required, FAV_LANGUAGE_REQUIRED),
    ],
    AGREEMENT: [
        accepted(AGREEMENT_REQUIRED),
    ],
})
