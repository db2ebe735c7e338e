"""Errors raised by Bin operations.

Failures inside individual disposers are never raised; see trashbin._dispose.
"""


class BinError(Exception):
    """Base class for errors surfaced by a Bin."""


class UninitializedContainerError(BinError, RuntimeError):
    """The Bin's storage was never established, or has been destroyed."""


class FrozenContainerError(BinError, RuntimeError):
    """A new resource was added while the Bin is frozen."""

    def __init__(self, message: str = "Bin is currently frozen, so no new tasks may be added") -> None:
        super().__init__(message)


class NotAPromiseError(BinError, TypeError):
    """add_promise() received a value without done/add_done_callback/cancel."""
