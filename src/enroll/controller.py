"""FormController — the single owner of one mounted registration form.

Usage::

    async with FormController(HttpTransport(config), config=config) as form:
        await form.on_field_change("username", "bob")
        await form.on_field_change("favFood", "pizza")
        await form.on_field_change("favLanguage", "rust")
        await form.on_field_change("agreement", None, checked=True)

        if form.enabled:
            outcome = await form.on_submit()

Every event goes through ``enroll.machine.transition``; the controller
only runs the effects it returns. Transitions are applied synchronously
on the event loop, so no two ever interleave. Only effects suspend:
validation (when the schema is async), the transport call, and the
success-banner timer.

Lifetime:
    Entering the controller mounts the form and computes its initial
    validity. Expiry timers run in an anyio task group owned by the
    controller; leaving the ``async with`` block cancels any that are
    still pending.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeAlias

import anyio
from anyio.abc import TaskGroup

from enroll._internal.invoke import invoke
from enroll.config import FormConfig
from enroll.errors import ContractViolation, ControllerStateError, SubmissionError
from enroll.fields import normalize
from enroll.machine import (
    CheckField,
    CheckForm,
    Effect,
    Event,
    FieldChanged,
    FieldChecked,
    FormChecked,
    Mounted,
    ScheduleExpiry,
    SendRequest,
    SubmitFailed,
    SubmitRequested,
    SubmitSucceeded,
    SuccessExpired,
    transition,
)
from enroll.schema import REGISTRATION_SCHEMA, ValidationSchema
from enroll.state import ErrorState, FormSnapshot, FormState, Phase, SubmissionOutcome
from enroll.transport import Transport

logger = logging.getLogger("enroll.controller")

Listener: TypeAlias = Callable[[FormSnapshot], None]
Sleep: TypeAlias = Callable[[float], Awaitable[Any]]


class FormController:
    """Holds form values, inline errors, the enabled flag, and the last outcome.

    Nothing outside the controller mutates form state: callers report
    input events and read immutable ``FormSnapshot`` objects back.

    Args:
        transport: Delivers the payload on submit.
        schema: Field rules; ``check_field`` and ``validate_form`` may be
            sync or async.
        config: Banner timing and fallback message.
        sleep: Timer primitive for the success-banner expiry. Tests pass
            a manual clock here.
    """

    __slots__ = (
        "_completed",
        "_config",
        "_listeners",
        "_schema",
        "_sleep",
        "_snapshot",
        "_task_group",
        "_transport",
    )

    def __init__(
        self,
        transport: Transport,
        *,
        schema: ValidationSchema = REGISTRATION_SCHEMA,
        config: FormConfig | None = None,
        sleep: Sleep = anyio.sleep,
    ) -> None:
        self._transport = transport
        self._schema = schema
        self._config = config or FormConfig()
        self._sleep = sleep
        self._snapshot = FormSnapshot()
        self._listeners: list[Listener] = []
        self._task_group: TaskGroup | None = None
        self._completed: dict[int, SubmissionOutcome] = {}

    # -- Lifetime ----------------------------------------------------------

    async def __aenter__(self) -> "FormController":
        if self._task_group is not None:
            msg = "FormController is already mounted"
            raise ControllerStateError(msg)
        task_group = anyio.create_task_group()
        await task_group.__aenter__()
        self._task_group = task_group
        logger.debug("Form mounted")
        await self._dispatch(Mounted())
        return self

    async def __aexit__(self, exc_type: Any, exc: Any, tb: Any) -> bool | None:
        task_group = self._task_group
        self._task_group = None
        if task_group is None:
            return None
        task_group.cancel_scope.cancel()
        logger.debug("Form unmounted")
        return await task_group.__aexit__(exc_type, exc, tb)

    @property
    def mounted(self) -> bool:
        return self._task_group is not None

    def _require_mounted(self) -> TaskGroup:
        if self._task_group is None:
            msg = "FormController must be mounted (use 'async with') before handling events"
            raise ControllerStateError(msg)
        return self._task_group

    # -- Read access -------------------------------------------------------

    @property
    def snapshot(self) -> FormSnapshot:
        return self._snapshot

    @property
    def values(self) -> FormState:
        return self._snapshot.values

    @property
    def errors(self) -> ErrorState:
        return self._snapshot.errors

    @property
    def enabled(self) -> bool:
        return self._snapshot.enabled

    @property
    def phase(self) -> Phase:
        return self._snapshot.phase

    @property
    def outcome(self) -> SubmissionOutcome:
        return self._snapshot.outcome

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with every new snapshot. Returns an unsubscribe function.

        A listener that raises is logged and skipped; the form keeps going.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -- Events ------------------------------------------------------------

    async def on_field_change(
        self, name: str, raw_value: object, *, checked: bool | None = None
    ) -> FormSnapshot:
        """Record a change to *name* and revalidate.

        Checkbox fields take *checked* (or a truthy *raw_value*); every
        other field stores *raw_value* as a string. Returns the snapshot
        after both the field and the form checks have been applied.
        """
        self._require_mounted()
        value = normalize(name, raw_value, checked=checked)
        await self._dispatch(FieldChanged(name=name, value=value))
        return self._snapshot

    async def on_submit(self) -> SubmissionOutcome | None:
        """Submit the current values if the control is enabled.

        Returns the outcome of this submission, or ``None`` when the
        submit was ignored because the control was disabled.
        """
        self._require_mounted()
        # The id this submit gets if the control accepts it
        submission_id = self._snapshot.submission_id + 1
        await self._dispatch(SubmitRequested())
        return self._completed.pop(submission_id, None)

    # -- Machinery ---------------------------------------------------------

    def _apply(self, event: Event) -> tuple[Effect, ...]:
        snapshot, effects = transition(self._snapshot, event)
        if snapshot is not self._snapshot:
            self._snapshot = snapshot
            for listener in list(self._listeners):
                try:
                    listener(snapshot)
                except Exception:
                    # A failing listener never stops the effects below
                    logger.exception("Form listener %r raised", listener)
        return effects

    async def _dispatch(self, event: Event) -> None:
        for effect in self._apply(event):
            await self._run(effect)

    async def _run(self, effect: Effect) -> None:
        match effect:
            case CheckField(name=name, value=value, seq=seq):
                message = await invoke(self._schema.check_field, name, value)
                await self._dispatch(FieldChecked(name=name, seq=seq, message=message))
            case CheckForm(state=state, seq=seq):
                valid = await invoke(self._schema.validate_form, state)
                await self._dispatch(FormChecked(seq=seq, valid=bool(valid)))
            case SendRequest():
                await self._send(effect)
            case ScheduleExpiry(submission_id=submission_id):
                self._require_mounted().start_soon(self._expire_later, submission_id)

    async def _send(self, request: SendRequest) -> None:
        submission_id = request.submission_id
        fallback = self._config.failure_fallback_message
        logger.info("Submitting registration #%d", submission_id)

        event: SubmitSucceeded | SubmitFailed
        try:
            message = await self._transport.submit(request.payload)
        except ContractViolation as exc:
            logger.warning("Registration #%d: endpoint broke its contract: %s", submission_id, exc)
            event = SubmitFailed(submission_id=submission_id, message=fallback)
        except SubmissionError as exc:
            logger.info("Registration #%d rejected: %s", submission_id, exc.message)
            event = SubmitFailed(submission_id=submission_id, message=exc.message or fallback)
        except Exception:
            logger.exception("Registration #%d: transport raised", submission_id)
            event = SubmitFailed(submission_id=submission_id, message=fallback)
        else:
            logger.info("Registration #%d accepted", submission_id)
            event = SubmitSucceeded(submission_id=submission_id, message=message)

        if isinstance(event, SubmitSucceeded):
            self._completed[submission_id] = SubmissionOutcome.success(submission_id, event.message)
        else:
            self._completed[submission_id] = SubmissionOutcome.failure(submission_id, event.message)
        await self._dispatch(event)

    async def _expire_later(self, submission_id: int) -> None:
        await self._sleep(self._config.success_message_ttl)
        await self._dispatch(SuccessExpired(submission_id=submission_id))
