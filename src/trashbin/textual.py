"""Textual integration for trashbin. Opt-in — requires textual.

Cleanup that touches a widget tree (removing widgets, querying them to reset
state) is only valid while the app is running, may find the widget already
gone, and has to run on the app thread. guarded() enforces all three so the
callsites that register cleanup with a Bin do not have to.
"""

import threading
from typing import Callable

from textual.css.query import NoMatches

from trashbin.bin import Bin


def is_safe(app) -> bool:
    """Is the widget tree in a queryable state?"""
    return app.is_running


def guarded(app, fn: Callable[[], object]) -> Callable[[], None]:
    """Wrap a widget cleanup so it is safe to hand to a Bin.

    Skips fn when the app is not running, catches NoMatches from widget
    queries, and marshals calls from other threads via call_from_thread.
    """
    _main = threading.get_ident()

    def _guarded() -> None:
        if not is_safe(app):
            return
        if threading.get_ident() != _main:
            app.call_from_thread(_safe)
        else:
            _safe()

    def _safe() -> None:
        try:
            fn()
        except NoMatches:
            pass

    return _guarded


def add(bin: Bin, app, fn: Callable[[], object]) -> int:
    """bin.add() for a widget cleanup. Returns the task's position."""
    return bin.add(guarded(app, fn))
