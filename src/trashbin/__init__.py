"""trashbin: deterministic cleanup of callbacks, subscriptions and disposables."""

from importlib.metadata import version as _version

__version__ = _version("trashbin")

from trashbin._dispose import DisposableKind, classify, dispose
from trashbin.bin import Bin, Occupancy, is_promise
from trashbin.errors import (
    BinError,
    FrozenContainerError,
    NotAPromiseError,
    UninitializedContainerError,
)
from trashbin.scope import frozen
# textual NOT auto-imported — opt-in only

__all__ = [
    "Bin",
    "Occupancy",
    "is_promise",
    "DisposableKind",
    "classify",
    "dispose",
    "frozen",
    "BinError",
    "FrozenContainerError",
    "NotAPromiseError",
    "UninitializedContainerError",
]
