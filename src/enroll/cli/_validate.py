"""``enroll validate`` — report every field error for a set of values.

Exits with code 1 if any field fails its rules.
"""

import argparse
import sys

from enroll.fields import AGREEMENT, FAV_FOOD, FAV_LANGUAGE, USERNAME
from enroll.schema import REGISTRATION_SCHEMA
from enroll.state import FormState


def state_from_args(args: argparse.Namespace) -> FormState:
    """Build a ``FormState`` from the shared field arguments."""
    return (
        FormState()
        .replace(USERNAME, args.username)
        .replace(FAV_LANGUAGE, args.fav_language)
        .replace(FAV_FOOD, args.fav_food)
        .replace(AGREEMENT, bool(args.agreement))
    )


def run_validate(args: argparse.Namespace) -> None:
    state = state_from_args(args)
    errors = REGISTRATION_SCHEMA.errors_for(state)

    if not errors:
        print("OK: form is valid")
        return

    for name, message in errors.items():
        print(f"{name}: {message}", file=sys.stderr)
    raise SystemExit(1)
