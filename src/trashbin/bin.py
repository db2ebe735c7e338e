"""Bin — a container that releases everything put into it, exactly once.

Two storage regions:
- keyed slots: bin["name"] = task. Reassigning a key disposes the previous
  task first; assigning None disposes and clears it.
- ordered log: bin.add(task) appends and returns a stable 1-based position.
  clear_position() leaves a hole, so earlier positions stay valid.

All state lives in _anchor — instances are thin handles holding an _id.
"""

from __future__ import annotations

import functools
import logging
import operator
import uuid
import weakref
from collections.abc import Hashable
from dataclasses import dataclass
from typing import TypeVar

from trashbin import _anchor
from trashbin._dispose import dispose
from trashbin.errors import FrozenContainerError, NotAPromiseError, UninitializedContainerError

logger = logging.getLogger("trashbin.bin")

P = TypeVar("P")

_PROMISE_METHODS = ("done", "add_done_callback", "cancel")


@dataclass(frozen=True)
class Occupancy:
    """Number of occupied slots in each storage region."""

    keyed: int
    ordered: int


def is_promise(value: object) -> bool:
    """Does value look like a future (done / add_done_callback / cancel)?"""
    return all(callable(getattr(value, name, None)) for name in _PROMISE_METHODS)


def _untrack(bin_ref: weakref.ref, key: Hashable, _promise: object) -> None:
    """Done-callback for add_promise. Holds the Bin weakly."""
    bin = bin_ref()
    if bin is not None:
        bin.clear(key)


class Bin:
    """Collects disposable tasks and releases them on demand.

    A task is any of: a zero-argument callable, a subscription (connected +
    disconnect()), a generator or coroutine, or an object with cancel() and/or
    dispose()/destroy()/close(). Disposer errors are logged, never raised.

    Usage:
        bin = Bin()
        bin["poller"] = poll_thread_stop     # keyed
        bin["poller"] = None                 # runs poll_thread_stop

        pos = bin.add(stream.subscribe(on_event))
        bin.clear_position(pos)              # unsubscribes

        bin.destroy()                        # releases everything left
    """

    __slots__ = ("_id", "__weakref__")

    def __init__(self) -> None:
        self._id = _anchor.new_id()
        _anchor.keyed_slots[self._id] = {}
        _anchor.ordered_logs[self._id] = []
        _anchor.frozen_flags[self._id] = False
        weakref.finalize(self, _anchor.forget, self._id)

    # --- Storage access ---

    @property
    def _slots(self) -> dict[Hashable, object] | None:
        return _anchor.keyed_slots.get(self._id)

    @property
    def _log(self) -> list[object] | None:
        return _anchor.ordered_logs.get(self._id)

    def _require_log(self, operation: str) -> list[object]:
        log = self._log
        if log is None:
            raise UninitializedContainerError(f"The Bin must be created to use Bin.{operation}")
        return log

    # --- Keyed slots ---

    def __getitem__(self, key: Hashable) -> object:
        slots = self._slots
        return slots.get(key) if slots is not None else None

    def __setitem__(self, key: Hashable, value: object) -> None:
        if value is not None and self.is_frozen():
            raise FrozenContainerError()
        slots = self._slots
        if slots is None:
            if value is None:
                return
            raise UninitializedContainerError("The Bin must be created to store tasks")
        # Pop before disposing so a disposer that clears this key finds nothing.
        dispose(slots.pop(key, None))
        if value is not None:
            slots[key] = value

    def __delitem__(self, key: Hashable) -> None:
        self[key] = None

    def __contains__(self, key: Hashable) -> bool:
        slots = self._slots
        return slots is not None and key in slots

    def set(self, key: Hashable, value: object) -> None:
        """Same as bin[key] = value."""
        self[key] = value

    def clear(self, key: Hashable) -> None:
        """Dispose whatever is stored at key and leave it empty."""
        self[key] = None

    # --- Ordered log ---

    def add(self, task: object) -> int:
        """Append task to the log and return its 1-based position.

        The task can be read back with get() and released with clear_position().
        """
        if self.is_frozen():
            raise FrozenContainerError()
        log = self._require_log("add")
        log.append(task)
        return len(log)

    def get(self, position: int) -> object:
        """Task at position, or None if cleared or out of range.

        position must be an integer (anything with __index__); floats raise TypeError.
        """
        log = self._require_log("get")
        position = operator.index(position)
        if 1 <= position <= len(log):
            return log[position - 1]
        return None

    def clear_position(self, position: int) -> None:
        """Dispose the task at position. Later positions do not move."""
        log = self._require_log("clear_position")
        position = operator.index(position)
        if not 1 <= position <= len(log):
            return
        task = log[position - 1]
        if task is None:
            return
        log[position - 1] = None
        dispose(task)

    # --- Async values ---

    def add_promise(self, promise: P) -> P:
        """Track a pending future until it settles, cancelling it on clean().

        - Anything without done/add_done_callback/cancel raises NotAPromiseError.
        - A future that is already done is returned untracked.
        - A pending one is stored under a unique key that is cleared again
          when it completes, so settled futures do not pile up.

        The future itself is always returned, so calls can be chained.
        """
        if not is_promise(promise):
            raise NotAPromiseError(f"{promise!r} is not a promise")
        if not promise.done():
            key = f"promise:{uuid.uuid4().hex}"
            self[key] = promise
            promise.add_done_callback(functools.partial(_untrack, weakref.ref(self), key))
        return promise

    # --- Bulk cleanup ---

    def clean(self) -> None:
        """Dispose every task in both regions and empty them.

        The frozen flag is untouched and the Bin stays usable. Disposers that
        add or clear tasks while running are handled: each pass snapshots and
        empties the storage before disposing, until nothing is left.
        """
        slots = self._slots
        log = self._log
        keyed = ordered = failed = 0
        # A disposer in one region may add to the other, so repeat until both are empty.
        while slots or log:
            while slots:
                # Snapshot and clear — disposers may touch the Bin while running.
                batch = list(slots.values())
                slots.clear()
                for task in batch:
                    keyed += 1
                    failed += dispose(task) is not None
            while log:
                batch = [task for task in log if task is not None]
                log.clear()
                for task in batch:
                    ordered += 1
                    failed += dispose(task) is not None
        if keyed or ordered:
            logger.debug(
                "Cleaned %d keyed, %d ordered tasks (%d disposers failed)",
                keyed, ordered, failed,
            )

    # --- Lifecycle ---

    def freeze(self) -> None:
        """Stop new tasks from being added. Existing ones can still be cleaned."""
        if self.is_frozen():
            return
        _anchor.frozen_flags[self._id] = True

    def unfreeze(self) -> None:
        """Allow new tasks again. A destroyed Bin stays frozen."""
        if not self.is_frozen() or self.destroyed:
            return
        _anchor.frozen_flags[self._id] = False

    def is_frozen(self) -> bool:
        return _anchor.frozen_flags.get(self._id, True)

    @property
    def destroyed(self) -> bool:
        return self._slots is None and self._log is None

    def destroy(self) -> None:
        """Freeze, clean, and drop the storage. Irreversible."""
        if self.destroyed:
            return
        self.freeze()
        self.clean()
        _anchor.drop_storage(self._id)
        logger.debug("Destroyed Bin %d", self._id)

    def __enter__(self) -> Bin:
        return self

    def __exit__(self, *args) -> None:
        self.destroy()

    # --- Diagnostics ---

    def occupancy(self) -> Occupancy:
        slots = self._slots or {}
        log = self._log or []
        return Occupancy(len(slots), sum(task is not None for task in log))

    def __repr__(self) -> str:
        if self.destroyed:
            return "Bin(destroyed)"
        counts = self.occupancy()
        frozen = ", frozen" if self.is_frozen() else ""
        return f"Bin(keyed={counts.keyed}, ordered={counts.ordered}{frozen})"
