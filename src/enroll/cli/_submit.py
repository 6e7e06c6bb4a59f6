"""``enroll submit`` — drive a FormController against the real endpoint.

Replays the values as change events, exactly as a browser would, then
submits if the form ends up enabled. Prints the endpoint's banner
message. Exits with code 1 on invalid input or a rejected submission.
"""

import argparse
import logging
import sys

import anyio

from enroll.cli._validate import state_from_args
from enroll.config import FormConfig
from enroll.controller import FormController
from enroll.errors import ConfigurationError
from enroll.fields import AGREEMENT, FIELD_NAMES
from enroll.state import FormState
from enroll.transport import HttpTransport, Transport

logger = logging.getLogger("enroll.cli")


def run_submit(args: argparse.Namespace) -> None:
    try:
        config = FormConfig.from_env(
            endpoint=args.endpoint,
            request_timeout=args.timeout,
            log_level=args.log_level,
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    state = state_from_args(args)
    exit_code = anyio.run(submit_state, state, config)
    if exit_code:
        raise SystemExit(exit_code)


async def submit_state(
    state: FormState,
    config: FormConfig,
    *,
    transport: Transport | None = None,
) -> int:
    """Feed *state* through a controller and submit it. Returns an exit code."""
    transport = transport or HttpTransport(config)

    async with FormController(transport, config=config) as form:
        for name in FIELD_NAMES:
            if name == AGREEMENT:
                await form.on_field_change(name, None, checked=bool(state[name]))
            else:
                await form.on_field_change(name, state[name])

        if not form.enabled:
            for name, message in form.errors.visible().items():
                print(f"{name}: {message}", file=sys.stderr)
            return 1

        logger.debug("Posting registration to %s", config.endpoint)
        outcome = await form.on_submit()

    if outcome is None:
        print("Error: form was not submitted", file=sys.stderr)
        return 1
    if outcome.is_failure:
        print(f"Registration failed: {outcome.message}", file=sys.stderr)
        return 1
    print(outcome.message or "Registration complete")
    return 0
