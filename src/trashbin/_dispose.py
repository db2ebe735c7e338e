"""Disposal dispatcher — picks a release strategy from a value's shape.

Shapes, in precedence order:

- None                                   -> nothing to do
- callable                               -> call it
- connected flag + disconnect()          -> disconnect if still connected
- generator / coroutine                  -> close() (cancellation requested, not awaited)
- cancel()                               -> cancel, then dispose/destroy/close if present
- dispose() / destroy() / close()        -> call the first one found
- anything else                          -> dropped

Every release action runs inside a result-capturing wrapper. A disposer that
raises is logged and its exception returned; it never escapes, so one bad
resource cannot leak the others.
"""

from __future__ import annotations

import enum
import inspect
import logging
from typing import Callable

logger = logging.getLogger("trashbin.dispose")

DISPOSE_METHODS = ("dispose", "destroy", "close")
CANCEL_METHODS = ("cancel",)


class DisposableKind(enum.Enum):
    EMPTY = "empty"
    CALLBACK = "callback"
    SUBSCRIPTION = "subscription"
    SUSPENDED = "suspended"
    COMPOSITE = "composite"
    DISPOSABLE = "disposable"


def _find_method(value: object, names: tuple[str, ...]) -> Callable[[], object] | None:
    for name in names:
        method = getattr(value, name, None)
        if callable(method):
            return method
    return None


def _is_subscription(value: object) -> bool:
    return isinstance(getattr(value, "connected", None), bool) and callable(
        getattr(value, "disconnect", None)
    )


def _is_suspended(value: object) -> bool:
    return inspect.isgenerator(value) or inspect.iscoroutine(value)


def classify(value: object) -> DisposableKind:
    """Return the kind of release action value needs."""
    if value is None:
        return DisposableKind.EMPTY
    if callable(value):
        return DisposableKind.CALLBACK
    if _is_subscription(value):
        return DisposableKind.SUBSCRIPTION
    if _is_suspended(value):
        return DisposableKind.SUSPENDED
    if _find_method(value, CANCEL_METHODS) is not None:
        return DisposableKind.COMPOSITE
    if _find_method(value, DISPOSE_METHODS) is not None:
        return DisposableKind.DISPOSABLE
    return DisposableKind.COMPOSITE


def _release_actions(kind: DisposableKind, value) -> list[Callable[[], object]]:
    """The calls that release value, in order."""
    if kind is DisposableKind.EMPTY:
        return []
    if kind is DisposableKind.CALLBACK:
        return [value]
    if kind is DisposableKind.SUBSCRIPTION:
        return [value.disconnect] if value.connected else []
    if kind is DisposableKind.SUSPENDED:
        return [value.close]
    if kind is DisposableKind.DISPOSABLE:
        return [_find_method(value, DISPOSE_METHODS)]
    # Composite: cancel and dispose are independent, both run when present.
    actions = [
        method
        for method in (_find_method(value, CANCEL_METHODS), _find_method(value, DISPOSE_METHODS))
        if method is not None
    ]
    if not actions:
        logger.debug("Dropping %r: no cancel or dispose method", value)
    return actions


def dispose(value: object) -> Exception | None:
    """Release value. Returns the first exception a disposer raised, if any.

    Each release call is isolated: when cancel() raises, dispose() still runs.

    Usage:
        dispose(lambda: print("bye"))     # prints "bye"
        dispose(None)                     # no-op
        err = dispose(raising_callback)   # err is the exception, nothing raised
    """
    try:
        kind = classify(value)
        actions = _release_actions(kind, value)
    except Exception as exc:
        # Shape probes read attributes, and properties can raise.
        logger.exception("Could not classify %r for disposal", value)
        return exc
    error = None
    for action in actions:
        try:
            action()
        except Exception as exc:
            logger.exception("Disposer for %s %r raised", kind.value, value)
            if error is None:
                error = exc
    return error
