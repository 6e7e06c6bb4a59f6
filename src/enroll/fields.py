"""Field catalog — what each registration input is and how it reports values.

The schema decides whether a value is acceptable; this module decides
what a raw input event *means*. A checkbox reports its ``checked`` state,
everything else reports a string.
"""

from dataclasses import dataclass
from enum import Enum

from enroll.errors import UnknownFieldError
from enroll.validation import FieldValue

USERNAME = "username"
FAV_LANGUAGE = "favLanguage"
FAV_FOOD = "favFood"
AGREEMENT = "agreement"

FIELD_NAMES: tuple[str, ...] = (USERNAME, FAV_LANGUAGE, FAV_FOOD, AGREEMENT)

_TRUTHY = ("true", "1", "yes", "on")


class FieldKind(Enum):
    TEXT = "text"
    RADIO = "radio"
    SELECT = "select"
    CHECKBOX = "checkbox"


@dataclass(frozen=True, slots=True)
class Choice:
    value: str
    label: str


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One input of the registration form.

    ``choices`` is empty for free-text and checkbox inputs.
    """

    name: str
    label: str
    kind: FieldKind
    choices: tuple[Choice, ...] = ()

    @property
    def choice_values(self) -> tuple[str, ...]:
        return tuple(choice.value for choice in self.choices)


REGISTRATION_FIELDS: dict[str, FieldSpec] = {
    USERNAME: FieldSpec(USERNAME, "Username", FieldKind.TEXT),
    FAV_LANGUAGE: FieldSpec(
        FAV_LANGUAGE,
        "Favorite Language",
        FieldKind.RADIO,
        (Choice("javascript", "JavaScript"), Choice("rust", "Rust")),
    ),
    FAV_FOOD: FieldSpec(
        FAV_FOOD,
        "Favorite Food",
        FieldKind.SELECT,
        (Choice("pizza", "Pizza"), Choice("spaghetti", "Spaghetti"), Choice("broccoli", "Broccoli")),
    ),
    AGREEMENT: FieldSpec(AGREEMENT, "Agree to our terms", FieldKind.CHECKBOX),
}


def get_field(name: str) -> FieldSpec:
    """Look up a field by wire name, raising ``UnknownFieldError``."""
    try:
        return REGISTRATION_FIELDS[name]
    except KeyError:
        raise UnknownFieldError(name) from None


def normalize(name: str, raw: object, *, checked: bool | None = None) -> FieldValue:
    """Turn a raw input event into the field's value.

    Checkbox inputs map to a boolean: ``checked`` wins when given,
    otherwise ``raw`` is coerced (``"on"``, ``"true"``, ``"1"``, ``"yes"``
    are true). Every other input passes through as a string; a ``bool``
    there is a checkbox value sent to the wrong field and raises
    ``TypeError``.
    """
    spec = get_field(name)
    if spec.kind is FieldKind.CHECKBOX:
        if checked is not None:
            return checked
        if isinstance(raw, bool):
            return raw
        if raw is None:
            return False
        return str(raw).strip().lower() in _TRUTHY
    if isinstance(raw, bool):
        msg = f"{name} is a {spec.kind.value} field and takes a string, not {raw!r}"
        raise TypeError(msg)
    if raw is None:
        return ""
    return str(raw)
