"""Invoke helpers — call sync or async callables uniformly.

Schemas may validate synchronously (plain predicates) or asynchronously
(a username-availability lookup, say). Any code that calls a schema
method must handle both cases. This module provides a single helper so
the sync/async check lives in exactly one place.

Usage::

    from enroll._internal.invoke import invoke

    message = await invoke(schema.check_field, name, value)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable."""
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
