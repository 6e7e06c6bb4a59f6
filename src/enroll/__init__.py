"""Enroll — an account registration form: validation, gating, submission.

Collects a username, a favorite language, a favorite food, and a terms
agreement; validates each field as it changes; enables submission only
when the whole form is valid; posts the values to a registration
endpoint and surfaces its message.

Basic usage::

    from enroll import FormConfig, FormController, HttpTransport

    config = FormConfig()
    async with FormController(HttpTransport(config), config=config) as form:
        await form.on_field_change("username", "bob")
        ...
        outcome = await form.on_submit()

Rules only::

    from enroll import REGISTRATION_SCHEMA
    REGISTRATION_SCHEMA.check_field("username", "bo")
"""

__version__ = "0.1.0"
__all__ = [
    "REGISTRATION_SCHEMA",
    "ConfigurationError",
    "ContractViolation",
    "EnrollError",
    "ErrorState",
    "FormConfig",
    "FormController",
    "FormSnapshot",
    "FormState",
    "HttpTransport",
    "Phase",
    "SubmissionError",
    "SubmissionOutcome",
    "Transport",
    "ValidationError",
    "ValidationSchema",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import enroll`` fast (httpx and anyio load on first use)
    while providing a clean top-level API.
    """
    if name == "FormController":
        from enroll.controller import FormController

        return FormController

    if name == "FormConfig":
        from enroll.config import FormConfig

        return FormConfig

    if name in ("HttpTransport", "Transport"):
        from enroll import transport as _transport

        return getattr(_transport, name)

    if name in ("REGISTRATION_SCHEMA", "ValidationSchema"):
        from enroll import schema as _schema

        return getattr(_schema, name)

    if name in ("ErrorState", "FormSnapshot", "FormState", "Phase", "SubmissionOutcome"):
        from enroll import state as _state

        return getattr(_state, name)

    if name in (
        "ConfigurationError",
        "ContractViolation",
        "EnrollError",
        "SubmissionError",
        "ValidationError",
    ):
        from enroll import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
