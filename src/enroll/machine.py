"""Form transition function — ``(snapshot, event) -> (snapshot, effects)``.

The whole submission lifecycle lives here as one pure function, testable
without a controller, an event loop, or a network:

    editing ──submit──▶ submitting ──ok──▶ succeeded ──change──▶ editing
                             │                              (values reset)
                             └─────error──▶ failed ────change──▶ editing
                                                          (values kept)

Side effects are returned, not performed. ``FormController`` executes
them and feeds their results back in as new events.

Staleness:
    Every validation request carries a sequence number. A result whose
    number is no longer current is dropped, so the error shown always
    belongs to the latest value even when checks finish out of order.
    The success-expiry effect carries the submission id for the same
    reason.
"""

import dataclasses
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TypeAlias

from enroll.fields import get_field
from enroll.state import (
    NO_OUTCOME,
    ErrorState,
    FormSnapshot,
    FormState,
    Phase,
    SubmissionOutcome,
)
from enroll.validation import FieldValue

logger = logging.getLogger("enroll.machine")


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Mounted:
    """The form was mounted; compute initial validity."""


@dataclass(frozen=True, slots=True)
class FieldChanged:
    name: str
    value: FieldValue


@dataclass(frozen=True, slots=True)
class FieldChecked:
    name: str
    seq: int
    message: str


@dataclass(frozen=True, slots=True)
class FormChecked:
    seq: int
    valid: bool


@dataclass(frozen=True, slots=True)
class SubmitRequested:
    pass


@dataclass(frozen=True, slots=True)
class SubmitSucceeded:
    submission_id: int
    message: str


@dataclass(frozen=True, slots=True)
class SubmitFailed:
    submission_id: int
    message: str


@dataclass(frozen=True, slots=True)
class SuccessExpired:
    submission_id: int


Event: TypeAlias = (
    Mounted
    | FieldChanged
    | FieldChecked
    | FormChecked
    | SubmitRequested
    | SubmitSucceeded
    | SubmitFailed
    | SuccessExpired
)


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CheckField:
    """Validate one field; report back with ``FieldChecked``."""

    name: str
    value: FieldValue
    seq: int


@dataclass(frozen=True, slots=True)
class CheckForm:
    """Validate the whole form; report back with ``FormChecked``."""

    state: FormState
    seq: int


@dataclass(frozen=True, slots=True)
class SendRequest:
    """Post *payload*; report back with ``SubmitSucceeded``/``SubmitFailed``."""

    submission_id: int
    payload: dict[str, FieldValue]


@dataclass(frozen=True, slots=True)
class ScheduleExpiry:
    """Fire ``SuccessExpired`` once the success banner's time is up."""

    submission_id: int


Effect: TypeAlias = CheckField | CheckForm | SendRequest | ScheduleExpiry

_NO_EFFECTS: tuple[Effect, ...] = ()


# ---------------------------------------------------------------------------
# Transition
# ---------------------------------------------------------------------------


def transition(snapshot: FormSnapshot, event: Event) -> tuple[FormSnapshot, tuple[Effect, ...]]:
    """Apply *event* to *snapshot*.

    Returns the new snapshot and the effects the caller must run.
    Events that do not apply (a submit while disabled, a stale check)
    return the snapshot unchanged with no effects.
    """
    match event:
        case Mounted():
            return _recheck_form(snapshot)
        case FieldChanged(name=name, value=value):
            return _field_changed(snapshot, name, value)
        case FieldChecked(name=name, seq=seq, message=message):
            return _field_checked(snapshot, name, seq, message), _NO_EFFECTS
        case FormChecked(seq=seq, valid=valid):
            return _form_checked(snapshot, seq, valid), _NO_EFFECTS
        case SubmitRequested():
            return _submit_requested(snapshot)
        case SubmitSucceeded(submission_id=submission_id, message=message):
            return _submit_succeeded(snapshot, submission_id, message)
        case SubmitFailed(submission_id=submission_id, message=message):
            return _submit_failed(snapshot, submission_id, message)
        case SuccessExpired(submission_id=submission_id):
            return _success_expired(snapshot, submission_id), _NO_EFFECTS
    msg = f"Unhandled form event: {event!r}"
    raise TypeError(msg)


def _recheck_form(snapshot: FormSnapshot) -> tuple[FormSnapshot, tuple[Effect, ...]]:
    seq = snapshot.form_seq + 1
    updated = dataclasses.replace(snapshot, form_seq=seq)
    return updated, (CheckForm(state=updated.values, seq=seq),)


def _field_changed(
    snapshot: FormSnapshot, name: str, value: FieldValue
) -> tuple[FormSnapshot, tuple[Effect, ...]]:
    get_field(name)  # unknown names raise before any state changes

    phase = snapshot.phase
    if phase in (Phase.SUCCEEDED, Phase.FAILED):
        phase = Phase.EDITING

    field_seq = snapshot.bump_field_seq(name)
    form_seq = snapshot.form_seq + 1
    values = snapshot.values.replace(name, value)
    updated = dataclasses.replace(
        snapshot,
        values=values,
        phase=phase,
        touched=snapshot.touched | {name},
        field_seq=field_seq,
        form_seq=form_seq,
    )
    return updated, (
        CheckField(name=name, value=value, seq=field_seq[name]),
        CheckForm(state=values, seq=form_seq),
    )


def _field_checked(snapshot: FormSnapshot, name: str, seq: int, message: str) -> FormSnapshot:
    if seq != snapshot.field_seq.get(name):
        logger.debug("Dropping stale check for %s (seq %d)", name, seq)
        return snapshot
    if name not in snapshot.touched:
        logger.debug("Dropping check for untouched field %s", name)
        return snapshot
    if snapshot.errors[name] == message:
        return snapshot
    return dataclasses.replace(snapshot, errors=snapshot.errors.replace(name, message))


def _form_checked(snapshot: FormSnapshot, seq: int, valid: bool) -> FormSnapshot:
    if seq != snapshot.form_seq:
        logger.debug("Dropping stale form check (seq %d)", seq)
        return snapshot
    if snapshot.valid == valid:
        return snapshot
    return dataclasses.replace(snapshot, valid=valid)


def _submit_requested(snapshot: FormSnapshot) -> tuple[FormSnapshot, tuple[Effect, ...]]:
    if not snapshot.enabled:
        logger.debug("Ignoring submit: control is disabled (phase=%s)", snapshot.phase.value)
        return snapshot, _NO_EFFECTS

    submission_id = snapshot.submission_id + 1
    updated = dataclasses.replace(
        snapshot,
        phase=Phase.SUBMITTING,
        outcome=NO_OUTCOME,
        submission_id=submission_id,
    )
    return updated, (SendRequest(submission_id=submission_id, payload=snapshot.values.to_payload()),)


def _is_current_submission(snapshot: FormSnapshot, submission_id: int) -> bool:
    if snapshot.phase is not Phase.SUBMITTING or submission_id != snapshot.submission_id:
        logger.debug("Dropping completion for submission %d", submission_id)
        return False
    return True


def _submit_succeeded(
    snapshot: FormSnapshot, submission_id: int, message: str
) -> tuple[FormSnapshot, tuple[Effect, ...]]:
    if not _is_current_submission(snapshot, submission_id):
        return snapshot, _NO_EFFECTS

    # Checks started before the reset belong to discarded values
    field_seq = MappingProxyType({name: seq + 1 for name, seq in snapshot.field_seq.items()})
    # The empty form fails its required rules; stay disabled until rechecked
    form_seq = snapshot.form_seq + 1
    values = FormState()
    updated = dataclasses.replace(
        snapshot,
        values=values,
        errors=ErrorState(),
        phase=Phase.SUCCEEDED,
        valid=False,
        outcome=SubmissionOutcome.success(submission_id, message),
        touched=frozenset(),
        field_seq=field_seq,
        form_seq=form_seq,
    )
    return updated, (
        CheckForm(state=values, seq=form_seq),
        ScheduleExpiry(submission_id=submission_id),
    )


def _submit_failed(
    snapshot: FormSnapshot, submission_id: int, message: str
) -> tuple[FormSnapshot, tuple[Effect, ...]]:
    if not _is_current_submission(snapshot, submission_id):
        return snapshot, _NO_EFFECTS

    form_seq = snapshot.form_seq + 1
    updated = dataclasses.replace(
        snapshot,
        phase=Phase.FAILED,
        outcome=SubmissionOutcome.failure(submission_id, message),
        form_seq=form_seq,
    )
    return updated, (CheckForm(state=updated.values, seq=form_seq),)


def _success_expired(snapshot: FormSnapshot, submission_id: int) -> FormSnapshot:
    outcome = snapshot.outcome
    if not outcome.is_success or outcome.submission_id != submission_id:
        logger.debug("Expiry for submission %d no longer applies", submission_id)
        return snapshot
    return dataclasses.replace(snapshot, outcome=NO_OUTCOME)
