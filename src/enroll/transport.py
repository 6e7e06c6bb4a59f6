"""Registration transport — deliver a form payload, get back a message.

The controller only depends on the ``Transport`` protocol::

    class Transport(Protocol):
        async def submit(self, payload: dict[str, FieldValue]) -> str: ...

``submit`` returns the endpoint's success message, or raises
``SubmissionError`` carrying the endpoint's failure message.
``ContractViolation`` is raised when the endpoint fails without one.

``HttpTransport`` is the production implementation: one JSON ``POST``
via httpx, with no retries.
"""

import logging
from typing import Any, Protocol

import httpx

from enroll.config import FormConfig
from enroll.errors import ContractViolation, SubmissionError
from enroll.validation import FieldValue

logger = logging.getLogger("enroll.transport")


class Transport(Protocol):
    """Anything that can deliver a registration payload."""

    async def submit(self, payload: dict[str, FieldValue]) -> str: ...


class HttpTransport:
    """POST the payload as JSON to the configured registration endpoint.

    Usage::

        transport = HttpTransport(FormConfig())
        message = await transport.submit({"username": "bob", ...})

    Pass ``client`` to share a connection pool or to inject an
    ``httpx.MockTransport`` in tests. Without one, an
    ``httpx.AsyncClient`` is created per request (no shared mutable
    state between submissions).
    """

    __slots__ = ("_client", "_endpoint", "_timeout")

    def __init__(self, config: FormConfig, *, client: httpx.AsyncClient | None = None) -> None:
        self._endpoint = config.endpoint
        self._timeout = config.request_timeout
        self._client = client

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def submit(self, payload: dict[str, FieldValue]) -> str:
        try:
            if self._client is not None:
                response = await self._client.post(
                    self._endpoint, json=payload, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient() as client:
                    response = await client.post(
                        self._endpoint, json=payload, timeout=self._timeout
                    )
        except httpx.HTTPError as exc:
            raise ContractViolation(f"request to {self._endpoint} failed: {exc}") from exc

        body = _json_body(response)
        message = body.get("message") if isinstance(body, dict) else None

        if response.is_success:
            if not isinstance(message, str):
                logger.warning(
                    "Registration succeeded (%d) without a message", response.status_code
                )
                return ""
            return message

        if not isinstance(message, str) or not message:
            raise ContractViolation(
                f"error response without a message: {response.text[:200]!r}",
                status=response.status_code,
            )
        raise SubmissionError(message, status=response.status_code)


def _json_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None
