"""Form state records — values, errors, outcome, and the snapshot bundling them.

All records are frozen. Transitions build new records with
``dataclasses.replace``; nothing outside the controller ever holds a
mutable view of form state.

``FormState`` and ``ErrorState`` are read through their wire names
(``favFood``), the same keys the registration endpoint receives::

    state = FormState().replace("favFood", "pizza")
    state["favFood"]      # 'pizza'
    state.fav_food        # 'pizza'
    state.to_payload()    # {'username': '', 'favLanguage': '', 'favFood': 'pizza', 'agreement': False}
"""

import dataclasses
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

from enroll.errors import UnknownFieldError
from enroll.fields import AGREEMENT, FAV_FOOD, FAV_LANGUAGE, FIELD_NAMES, USERNAME
from enroll.validation import FieldValue

# wire name -> attribute name
_ATTRS: Mapping[str, str] = MappingProxyType({
    USERNAME: "username",
    FAV_LANGUAGE: "fav_language",
    FAV_FOOD: "fav_food",
    AGREEMENT: "agreement",
})


class _FieldRecord(Mapping[str, FieldValue]):
    """Mapping view over a dataclass keyed by field wire names.

    Exactly the four registration fields are present, always.
    """

    __slots__ = ()

    def __getitem__(self, name: str) -> FieldValue:
        try:
            return getattr(self, _ATTRS[name])
        except KeyError:
            raise KeyError(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(FIELD_NAMES)

    def __len__(self) -> int:
        return len(FIELD_NAMES)

    def replace(self, name: str, value: FieldValue) -> "_FieldRecord":
        """Return a copy with *name* set to *value*."""
        try:
            attr = _ATTRS[name]
        except KeyError:
            raise UnknownFieldError(name) from None
        return dataclasses.replace(self, **{attr: value})  # type: ignore[type-var]

    def to_payload(self) -> dict[str, FieldValue]:
        """Flat dict keyed by wire name, ready for JSON encoding."""
        return {name: self[name] for name in FIELD_NAMES}


@dataclass(frozen=True, slots=True)
class FormState(_FieldRecord):
    """Current value of every field. Defaults are the initial, empty form."""

    username: str = ""
    fav_language: str = ""
    fav_food: str = ""
    agreement: bool = False


@dataclass(frozen=True, slots=True)
class ErrorState(_FieldRecord):
    """Inline error per field; ``""`` means no error is shown."""

    username: str = ""
    fav_language: str = ""
    fav_food: str = ""
    agreement: str = ""

    def visible(self) -> dict[str, str]:
        """Only the fields that currently show an error."""
        return {name: message for name, message in self.items() if message}

    @property
    def has_errors(self) -> bool:
        return any(self.values())


class Phase(Enum):
    EDITING = "editing"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class OutcomeKind(Enum):
    NONE = "none"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True, slots=True)
class SubmissionOutcome:
    """The banner left behind by the most recent submission.

    ``submission_id`` ties the outcome to the submission that produced
    it; the success-expiry timer only clears an outcome with its own id.
    """

    kind: OutcomeKind = OutcomeKind.NONE
    message: str = ""
    submission_id: int = 0

    @classmethod
    def success(cls, submission_id: int, message: str) -> "SubmissionOutcome":
        return cls(OutcomeKind.SUCCESS, message, submission_id)

    @classmethod
    def failure(cls, submission_id: int, message: str) -> "SubmissionOutcome":
        return cls(OutcomeKind.FAILURE, message, submission_id)

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.kind is OutcomeKind.FAILURE


NO_OUTCOME = SubmissionOutcome()


def _zero_sequences() -> Mapping[str, int]:
    return MappingProxyType(dict.fromkeys(FIELD_NAMES, 0))


@dataclass(frozen=True, slots=True)
class FormSnapshot:
    """Everything a renderer needs to draw the form, at one instant.

    Attributes:
        values: Current field values.
        errors: Inline errors; only touched fields ever carry one.
        phase: Where the submission lifecycle stands.
        valid: Latest whole-form validity result.
        outcome: Success or failure banner, if any.
        touched: Fields that received at least one change event.
        field_seq: Per-field counter of validation requests; a result
            tagged with an older number is stale.
        form_seq: Counter of whole-form validation requests.
        submission_id: Id of the most recent submission (0 = none yet).
    """

    values: FormState = field(default_factory=FormState)
    errors: ErrorState = field(default_factory=ErrorState)
    phase: Phase = Phase.EDITING
    valid: bool = False
    outcome: SubmissionOutcome = NO_OUTCOME
    touched: frozenset[str] = frozenset()
    field_seq: Mapping[str, int] = field(default_factory=_zero_sequences)
    form_seq: int = 0
    submission_id: int = 0

    @property
    def enabled(self) -> bool:
        """Whether the submit control accepts a click."""
        return self.valid and self.phase is not Phase.SUBMITTING

    @property
    def success_message(self) -> str:
        return self.outcome.message if self.outcome.is_success else ""

    @property
    def failure_message(self) -> str:
        return self.outcome.message if self.outcome.is_failure else ""

    def bump_field_seq(self, name: str) -> Mapping[str, int]:
        """Sequence mapping with *name*'s counter advanced by one."""
        updated = dict(self.field_seq)
        updated[name] = updated.get(name, 0) + 1
        return MappingProxyType(updated)
