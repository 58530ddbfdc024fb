"""
Helpers for the asynchronous values accepted by a Flow.

Besides native awaitables, a Flow accepts "thenables": objects exposing a `then`
method that registers a success callback and, optionally, a failure callback.
"""

import inspect
import logging
from typing import TYPE_CHECKING

from .exceptions import RejectedValueError
from .handle import ResultHandle

if TYPE_CHECKING:  # pragma: no cover
    from typing import Any

logger = logging.getLogger(__name__)


def is_thenable(value: "Any") -> bool:
    return not inspect.isclass(value) and callable(getattr(value, "then", None))


def is_async_value(value: "Any") -> bool:
    return inspect.isawaitable(value) or is_thenable(value)


def _accepts_failure_callback(then: "Any") -> bool:
    try:
        parameters = inspect.signature(then).parameters.values()
    except (TypeError, ValueError):
        # builtins and C extensions may not expose a signature
        return True

    positional = 0
    for param in parameters:
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return True
        elif param.kind in (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        ):
            positional += 1

    return positional >= 2


async def _wait_thenable(thenable: "Any") -> "Any":
    handle: ResultHandle["Any"] = ResultHandle(type(thenable).__name__)

    def _on_success(value: "Any" = None) -> None:
        if not handle.settled:
            handle.set_result(value)

    def _on_failure(reason: "Any" = None) -> None:
        if handle.settled:
            return

        if not isinstance(reason, BaseException):
            reason = RejectedValueError(reason)

        handle.set_exception(reason)

    if _accepts_failure_callback(thenable.then):
        thenable.then(_on_success, _on_failure)
    else:
        thenable.then(_on_success)

    return await handle.wait()


async def settle(value: "Any") -> "Any":
    """
    Resolve `value` to a plain value, awaiting awaitables and thenables until
    something else is produced.
    """
    while True:
        if inspect.isawaitable(value):
            value = await value
        elif is_thenable(value):
            logger.debug("Waiting on thenable %r", value)
            value = await _wait_thenable(value)
        else:
            return value
