"""Scope helpers — temporary lifecycle changes bound to a with-block."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from trashbin.bin import Bin


@contextmanager
def frozen(bin: Bin) -> Iterator[Bin]:
    """Freeze bin for the duration of the block, then restore its state.

    A Bin that was already frozen stays frozen, so nested blocks are safe.

    Usage:
        with frozen(bin):
            bin.add(task)      # raises FrozenContainerError
            bin.clean()        # still allowed
        bin.add(task)          # fine again
    """
    was_frozen = bin.is_frozen()
    bin.freeze()
    try:
        yield bin
    finally:
        if not was_frozen:
            bin.unfreeze()
