"""Tests for enroll.controller — the mounted form, end to end with fakes."""

import asyncio
import logging

import pytest

from enroll.errors import ContractViolation, ControllerStateError, SubmissionError
from enroll.schema import REGISTRATION_SCHEMA, USERNAME_MIN, USERNAME_REQUIRED
from enroll.state import FormSnapshot, FormState, Phase

BOB = {"username": "bob", "favFood": "pizza", "favLanguage": "rust", "agreement": True}


# ---------------------------------------------------------------------------
# Mounting
# ---------------------------------------------------------------------------


class TestMount:
    async def test_fresh_form_disabled(self, make_form) -> None:
        async with make_form() as form:
            assert form.enabled is False
            assert form.phase is Phase.EDITING
            assert form.values == FormState()
            assert form.errors.visible() == {}

    async def test_events_require_mount(self, make_form) -> None:
        form = make_form()
        with pytest.raises(ControllerStateError):
            await form.on_field_change("username", "bob")
        with pytest.raises(ControllerStateError):
            await form.on_submit()

    async def test_cannot_mount_twice(self, make_form) -> None:
        async with make_form() as form:
            with pytest.raises(ControllerStateError):
                await form.__aenter__()

    async def test_unmounted_after_exit(self, make_form) -> None:
        async with make_form() as form:
            assert form.mounted
        assert not form.mounted


# ---------------------------------------------------------------------------
# Field changes
# ---------------------------------------------------------------------------


class TestFieldChange:
    async def test_complete_form_enables_submit(self, make_form, fill) -> None:
        async with make_form() as form:
            await fill(form)
            assert form.enabled is True
            assert form.errors.visible() == {}
            assert form.values.to_payload() == BOB

    async def test_only_touched_fields_show_errors(self, make_form) -> None:
        async with make_form() as form:
            await form.on_field_change("username", "bo")
            assert form.errors.visible() == {"username": USERNAME_MIN}
            assert form.enabled is False

    async def test_error_clears_when_fixed(self, make_form) -> None:
        async with make_form() as form:
            await form.on_field_change("username", "")
            assert form.errors.username == USERNAME_REQUIRED
            await form.on_field_change("username", "bobby")
            assert form.errors.username == ""

    async def test_same_value_twice_is_idempotent(self, make_form) -> None:
        async with make_form() as form:
            once = await form.on_field_change("username", "bo")
            twice = await form.on_field_change("username", "bo")
            assert twice.errors == once.errors
            assert twice.enabled == once.enabled

    async def test_checkbox_normalized(self, make_form) -> None:
        async with make_form() as form:
            await form.on_field_change("agreement", "on", checked=False)
            assert form.values.agreement is False
            assert form.errors.agreement == "the agreement must be accepted"
            await form.on_field_change("agreement", "on")
            assert form.values.agreement is True

    async def test_invalidating_a_field_disables(self, make_form, fill) -> None:
        async with make_form() as form:
            await fill(form)
            await form.on_field_change("favFood", "")
            assert form.enabled is False

    async def test_stale_async_validation_dropped(self, make_form) -> None:
        release_short = asyncio.Event()

        class GatedSchema:
            """Validates "b" slowly, everything else immediately."""

            async def check_field(self, name: str, value: object) -> str:
                if value == "b":
                    await release_short.wait()
                return REGISTRATION_SCHEMA.check_field(name, value)  # type: ignore[arg-type]

            def validate_form(self, state: FormState) -> bool:
                return REGISTRATION_SCHEMA.validate_form(state)

        async with make_form(schema=GatedSchema()) as form:
            slow = asyncio.create_task(form.on_field_change("username", "b"))
            await asyncio.sleep(0)
            await form.on_field_change("username", "bob")
            assert form.errors.username == ""

            release_short.set()
            await slow
            assert form.values.username == "bob"
            assert form.errors.username == ""


# ---------------------------------------------------------------------------
# Submission
# ---------------------------------------------------------------------------


class TestSubmitSuccess:
    async def test_resets_and_shows_banner(self, make_form, fill, transport) -> None:
        transport.replies.append("Welcome, bob!")
        async with make_form() as form:
            await fill(form)
            outcome = await form.on_submit()

            assert outcome is not None
            assert outcome.is_success
            assert outcome.message == "Welcome, bob!"
            assert transport.payloads == [BOB]
            assert form.values == FormState()
            assert form.errors.visible() == {}
            assert form.snapshot.success_message == "Welcome, bob!"
            assert form.phase is Phase.SUCCEEDED
            assert form.enabled is False

    async def test_banner_clears_after_ttl(self, make_form, fill, transport, clock) -> None:
        transport.replies.append("Welcome, bob!")
        async with make_form() as form:
            await fill(form)
            await form.on_submit()

            await clock.advance(4.9)
            assert form.snapshot.success_message == "Welcome, bob!"

            await clock.advance(0.2)
            assert form.snapshot.success_message == ""
            assert form.values == FormState()
            assert form.phase is Phase.SUCCEEDED

    async def test_old_timer_spares_newer_banner(self, make_form, fill, transport, clock) -> None:
        transport.replies.extend(["Welcome, bob!", "Welcome, amy!"])
        async with make_form() as form:
            await fill(form)
            await form.on_submit()

            await clock.advance(3)
            await fill(form, username="amy")
            await form.on_submit()
            assert form.snapshot.success_message == "Welcome, amy!"

            # First submission's timer fires here
            await clock.advance(2.5)
            assert form.snapshot.success_message == "Welcome, amy!"

            await clock.advance(3)
            assert form.snapshot.success_message == ""

    async def test_unmount_cancels_timer(self, make_form, fill, transport, clock) -> None:
        transport.replies.append("Welcome, bob!")
        async with make_form() as form:
            await fill(form)
            await form.on_submit()
            await clock.advance(0)
            assert clock.pending == 1
        assert clock.pending == 0
        await clock.advance(10)
        assert form.snapshot.success_message == "Welcome, bob!"


class TestSubmitFailure:
    async def test_keeps_values_and_shows_banner(self, make_form, fill, transport) -> None:
        transport.replies.append(SubmissionError("username taken", status=409))
        async with make_form() as form:
            await fill(form)
            outcome = await form.on_submit()

            assert outcome is not None
            assert outcome.is_failure
            assert form.snapshot.failure_message == "username taken"
            assert form.values.to_payload() == BOB
            assert form.phase is Phase.FAILED
            assert form.enabled is True

    async def test_retry_after_failure(self, make_form, fill, transport) -> None:
        transport.replies.extend([SubmissionError("username taken"), "Welcome, bobby!"])
        async with make_form() as form:
            await fill(form)
            await form.on_submit()
            await form.on_field_change("username", "bobby")
            assert form.phase is Phase.EDITING
            assert form.snapshot.failure_message == "username taken"

            outcome = await form.on_submit()
            assert outcome is not None
            assert outcome.message == "Welcome, bobby!"
            assert form.snapshot.failure_message == ""
            assert transport.payloads[1]["username"] == "bobby"

    async def test_contract_violation_uses_fallback(self, make_form, fill, transport, config) -> None:
        transport.replies.append(ContractViolation("no message", status=500))
        async with make_form() as form:
            await fill(form)
            outcome = await form.on_submit()
            assert outcome is not None
            assert outcome.message == config.failure_fallback_message
            assert form.snapshot.failure_message == config.failure_fallback_message

    async def test_unexpected_error_uses_fallback(
        self, make_form, fill, transport, config, caplog: pytest.LogCaptureFixture
    ) -> None:
        transport.replies.append(RuntimeError("socket exploded"))
        async with make_form() as form:
            await fill(form)
            with caplog.at_level(logging.ERROR, logger="enroll.controller"):
                outcome = await form.on_submit()
            assert outcome is not None
            assert outcome.is_failure
            assert outcome.message == config.failure_fallback_message
            assert "transport raised" in caplog.text


class TestSubmitGating:
    async def test_ignored_while_disabled(self, make_form, transport) -> None:
        async with make_form() as form:
            assert await form.on_submit() is None
            assert transport.payloads == []
            assert form.phase is Phase.EDITING

    async def test_single_submission_in_flight(self, make_form, fill, transport) -> None:
        transport.gate = asyncio.Event()
        transport.replies.append("Welcome, bob!")
        async with make_form() as form:
            await fill(form)
            pending = asyncio.create_task(form.on_submit())
            await asyncio.sleep(0)

            assert form.phase is Phase.SUBMITTING
            assert form.enabled is False
            assert await form.on_submit() is None

            transport.gate.set()
            outcome = await pending
            assert outcome is not None
            assert outcome.is_success
            assert len(transport.payloads) == 1

    async def test_edits_while_submitting_stay_disabled(self, make_form, fill, transport) -> None:
        transport.gate = asyncio.Event()
        transport.replies.append(SubmissionError("username taken"))
        async with make_form() as form:
            await fill(form)
            pending = asyncio.create_task(form.on_submit())
            await asyncio.sleep(0)

            await form.on_field_change("username", "carol")
            assert form.enabled is False

            transport.gate.set()
            await pending
            assert form.values.username == "carol"
            assert form.enabled is True

    async def test_edit_checked_after_reset_leaves_form_pristine(
        self, make_form, fill, transport
    ) -> None:
        release = asyncio.Event()

        class GatedSchema:
            """Validates "ca" slowly, everything else immediately."""

            async def check_field(self, name: str, value: object) -> str:
                if value == "ca":
                    await release.wait()
                return REGISTRATION_SCHEMA.check_field(name, value)  # type: ignore[arg-type]

            def validate_form(self, state: FormState) -> bool:
                return REGISTRATION_SCHEMA.validate_form(state)

        transport.gate = asyncio.Event()
        transport.replies.append("Welcome, bob!")
        async with make_form(schema=GatedSchema()) as form:
            await fill(form)
            pending = asyncio.create_task(form.on_submit())
            await asyncio.sleep(0)
            edit = asyncio.create_task(form.on_field_change("username", "ca"))
            await asyncio.sleep(0)

            transport.gate.set()
            outcome = await pending
            assert outcome is not None
            assert outcome.is_success

            release.set()
            await edit
            assert form.values.username == ""
            assert form.errors.username == ""
            assert form.snapshot.touched == frozenset()


# ---------------------------------------------------------------------------
# Listeners
# ---------------------------------------------------------------------------


class TestSubscribe:
    async def test_listener_sees_every_change(self, make_form) -> None:
        seen: list[FormSnapshot] = []
        form = make_form()
        form.subscribe(seen.append)
        async with form:
            await form.on_field_change("username", "bo")
        assert seen[-1].errors.username == USERNAME_MIN
        assert seen[-1] is form.snapshot

    async def test_unsubscribe(self, make_form) -> None:
        seen: list[FormSnapshot] = []
        async with make_form() as form:
            unsubscribe = form.subscribe(seen.append)
            await form.on_field_change("username", "bo")
            count = len(seen)
            unsubscribe()
            await form.on_field_change("username", "bob")
        assert len(seen) == count

    async def test_failing_listener_does_not_stall_submission(
        self, make_form, fill, transport, caplog: pytest.LogCaptureFixture
    ) -> None:
        def explode(snapshot: FormSnapshot) -> None:
            if snapshot.phase is Phase.SUBMITTING:
                raise RuntimeError("render failed")

        seen: list[FormSnapshot] = []
        transport.replies.append("Welcome, bob!")
        async with make_form() as form:
            await fill(form)
            form.subscribe(explode)
            form.subscribe(seen.append)
            with caplog.at_level(logging.ERROR, logger="enroll.controller"):
                outcome = await form.on_submit()

        assert outcome is not None
        assert outcome.is_success
        assert transport.payloads == [BOB]
        assert form.phase is Phase.SUCCEEDED
        assert any(s.phase is Phase.SUBMITTING for s in seen)
        assert "listener" in caplog.text
