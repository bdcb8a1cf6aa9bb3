"""Progress reporting hooks used while collecting data."""

import logging
from collections.abc import Callable
from typing import Protocol, runtime_checkable

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


@runtime_checkable
class ProgressObserver(Protocol):
    """Receives human-readable progress messages during collection."""

    def on_progress(self, message: str) -> None:
        """Handle a progress message."""
        ...


def as_callback(observer: ProgressObserver | ProgressCallback | None) -> ProgressCallback:
    """Return a callback that never lets observer failures escape.

    Progress is advisory only, so a missing observer becomes a no-op and an
    observer raising an exception is logged and otherwise ignored.
    """
    if observer is None:
        return _ignore
    handler = observer.on_progress if isinstance(observer, ProgressObserver) else observer

    def notify(message: str) -> None:
        try:
            handler(message)
        except Exception:
            LOGGER.warning("Progress observer failed for message %r", message, exc_info=True)

    return notify


def _ignore(message: str) -> None:
    del message
