"""Built-in validation rules for enroll forms.

Each rule is a callable with the signature::

    def rule(value: FieldValue) -> str | None:
        '''Return error message, or None if valid.'''

Parameterized rules are factory functions that return a rule::

    def max_length(n: int) -> Callable[[FieldValue], str | None]:
        def check(value: FieldValue) -> str | None:
            if len(value) > n:
                return f"Must be at most {n} characters"
            return None
        return check

Every factory takes an optional ``message`` that replaces its default
text. ``with_message()`` does the same for plain rules such as
``required``.
"""

from collections.abc import Callable
from typing import TypeAlias

# A field holds free text, an enumerated choice, or a checkbox state
FieldValue: TypeAlias = str | bool

# Type alias for a rule function
Validator: TypeAlias = Callable[[FieldValue], str | None]


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def required(value: FieldValue) -> str | None:
    """Field must be present and non-empty.

    Whitespace counts as content; only the empty string is missing.
    """
    if value is None or value == "":
        return "This field is required"
    return None


def accepted(message: str | None = None) -> Validator:
    """Value must be the boolean ``True`` (a ticked checkbox)."""

    def check(value: FieldValue) -> str | None:
        if value is not True:
            return message or "Must be accepted"
        return None

    return check


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


def max_length(n: int, message: str | None = None) -> Validator:
    """String must be at most *n* characters."""

    def check(value: FieldValue) -> str | None:
        if len(str(value)) > n:
            return message or f"Must be at most {n} characters"
        return None

    return check


def min_length(n: int, message: str | None = None) -> Validator:
    """String must be at least *n* characters."""

    def check(value: FieldValue) -> str | None:
        if len(str(value)) < n:
            return message or f"Must be at least {n} characters"
        return None

    return check


# ---------------------------------------------------------------------------
# Choice
# ---------------------------------------------------------------------------


def one_of(*choices: str, message: str | None = None) -> Validator:
    """Value must be one of the given choices."""
    allowed = frozenset(choices)

    def check(value: FieldValue) -> str | None:
        if not isinstance(value, str) or value not in allowed:
            options = ", ".join(sorted(allowed))
            return message or f"Must be one of: {options}"
        return None

    return check


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------


def with_message(rule: Validator, message: str) -> Validator:
    """Wrap *rule* so any failure reports *message* instead."""

    def check(value: FieldValue) -> str | None:
        if rule(value) is not None:
            return message
        return None

    return check
