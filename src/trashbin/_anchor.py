"""Data anchor — plain Python structures that hold every Bin's storage.

Bin instances are thin handles holding an _id. Separating data from behavior
keeps the method surface and the keyed resource map apart: nothing a caller
stores under a key can reach the internal bookkeeping below.
"""

import itertools
from collections.abc import Hashable

# Per-Bin storage, keyed by bin id
keyed_slots: dict[int, dict[Hashable, object]] = {}
ordered_logs: dict[int, list[object]] = {}
frozen_flags: dict[int, bool] = {}

# ID generation — itertools.count is thread-safe (C-level GIL atomic)
_id_counter = itertools.count(1)


def new_id() -> int:
    return next(_id_counter)


def drop_storage(bin_id: int) -> None:
    """Forget a Bin's storage regions. The frozen flag is kept."""
    keyed_slots.pop(bin_id, None)
    ordered_logs.pop(bin_id, None)


def forget(bin_id: int) -> None:
    """Remove every trace of a Bin. Called when its handle is collected."""
    drop_storage(bin_id)
    frozen_flags.pop(bin_id, None)
