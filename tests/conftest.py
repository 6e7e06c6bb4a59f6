"""Shared fixtures for enroll tests.

Controllers are always mounted inside the test body (``async with``),
never in an async fixture: the controller's task group must be entered
and exited by the same task.
"""

import asyncio

import pytest

from enroll.config import FormConfig
from enroll.controller import FormController
from enroll.validation import FieldValue


class FakeTransport:
    """Records payloads and answers with queued replies.

    Queue a ``str`` for a success message or an exception to raise.
    Set ``gate`` to hold every submission until the event is set.
    """

    def __init__(self) -> None:
        self.payloads: list[dict[str, FieldValue]] = []
        self.replies: list[str | Exception] = []
        self.gate: asyncio.Event | None = None
        self.endpoint = "http://registration.test/register"

    async def submit(self, payload: dict[str, FieldValue]) -> str:
        self.payloads.append(payload)
        if self.gate is not None:
            await self.gate.wait()
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class ManualClock:
    """A ``sleep`` replacement that only wakes when the test advances time."""

    def __init__(self) -> None:
        self.now = 0.0
        self._waiters: list[tuple[float, asyncio.Future[None]]] = []

    async def sleep(self, delay: float) -> None:
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._waiters.append((self.now + delay, future))
        await future

    @property
    def pending(self) -> int:
        return sum(1 for _, future in self._waiters if not future.done())

    async def advance(self, seconds: float) -> None:
        """Move time forward and let every task that woke up run."""
        await _settle()
        self.now += seconds
        still_waiting = []
        for due, future in self._waiters:
            if future.done():
                continue
            if due <= self.now:
                future.set_result(None)
            else:
                still_waiting.append((due, future))
        self._waiters = still_waiting
        await _settle()


async def _settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def config() -> FormConfig:
    return FormConfig(endpoint="http://registration.test/register")


@pytest.fixture
def make_form(transport: FakeTransport, clock: ManualClock, config: FormConfig):
    """Build an unmounted controller wired to the fake transport and clock."""

    def factory(**kwargs: object) -> FormController:
        kwargs.setdefault("config", config)
        kwargs.setdefault("sleep", clock.sleep)
        return FormController(transport, **kwargs)  # type: ignore[arg-type]

    return factory


async def _fill(
    form: FormController,
    *,
    username: str = "bob",
    fav_food: str = "pizza",
    fav_language: str = "rust",
    agreement: bool = True,
) -> None:
    """Enter a complete form the way a browser reports it."""
    await form.on_field_change("username", username)
    await form.on_field_change("favFood", fav_food)
    await form.on_field_change("favLanguage", fav_language)
    await form.on_field_change("agreement", "on", checked=agreement)


@pytest.fixture
def fill():
    return _fill
