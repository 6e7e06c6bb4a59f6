"""Form configuration.

FormConfig is a frozen dataclass. Values are fixed after creation and read
as attributes, never through string-keyed lookups.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from enroll.errors import ConfigurationError

DEFAULT_ENDPOINT = "https://webapis.bloomtechdev.com/registration"

_LOG_LEVELS = frozenset({"debug", "info", "warning", "error", "critical"})


@dataclass(frozen=True, slots=True)
class FormConfig:
    """Form configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = FormConfig(endpoint="http://localhost:8000/register", success_message_ttl=2.0)
    """

    # Transport
    endpoint: str = DEFAULT_ENDPOINT
    request_timeout: float = 10.0

    # Banners
    success_message_ttl: float = 5.0  # Seconds before the success banner clears
    failure_fallback_message: str = "registration failed, please try again"

    # Logging
    log_level: str = "info"

    def __post_init__(self) -> None:
        if not self.endpoint.startswith(("http://", "https://")):
            msg = f"endpoint must be an http(s) URL, got {self.endpoint!r}"
            raise ConfigurationError(msg)
        if self.request_timeout <= 0:
            msg = f"request_timeout must be positive, got {self.request_timeout}"
            raise ConfigurationError(msg)
        if self.success_message_ttl <= 0:
            msg = f"success_message_ttl must be positive, got {self.success_message_ttl}"
            raise ConfigurationError(msg)
        if self.log_level.lower() not in _LOG_LEVELS:
            options = ", ".join(sorted(_LOG_LEVELS))
            msg = f"log_level must be one of: {options}; got {self.log_level!r}"
            raise ConfigurationError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **overrides: object) -> "FormConfig":
        """Build a config from ``ENROLL_*`` environment variables.

        Resolution order for every setting:
            1. Explicit keyword override (``None`` means "not given")
            2. Environment variable
            3. Dataclass default

        Recognized variables: ``ENROLL_ENDPOINT``, ``ENROLL_TIMEOUT``,
        ``ENROLL_SUCCESS_TTL``, ``ENROLL_LOG_LEVEL``.
        """
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}

        if "ENROLL_ENDPOINT" in env:
            values["endpoint"] = env["ENROLL_ENDPOINT"].strip()
        if "ENROLL_TIMEOUT" in env:
            values["request_timeout"] = _parse_float("ENROLL_TIMEOUT", env["ENROLL_TIMEOUT"])
        if "ENROLL_SUCCESS_TTL" in env:
            values["success_message_ttl"] = _parse_float(
                "ENROLL_SUCCESS_TTL", env["ENROLL_SUCCESS_TTL"]
            )
        if "ENROLL_LOG_LEVEL" in env:
            values["log_level"] = env["ENROLL_LOG_LEVEL"].strip().lower()

        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)  # type: ignore[arg-type]


def _parse_float(name: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        msg = f"{name} must be a number, got {raw!r}"
        raise ConfigurationError(msg) from None
