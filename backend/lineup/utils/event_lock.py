"""
Per-event exclusivity for mutating engine commands.

Non-blocking: a second writer for the same event fails fast with
AlreadyGeneratingConflict instead of queueing behind the first.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from lineup.errors import AlreadyGeneratingConflict

logger = logging.getLogger(__name__)

_registry_lock = threading.Lock()
_event_locks: Dict[int, threading.Lock] = {}


def _lock_for(event_id: int) -> threading.Lock:
    with _registry_lock:
        lock = _event_locks.get(event_id)
        if lock is None:
            lock = threading.Lock()
            _event_locks[event_id] = lock
        return lock


def is_locked(event_id: int) -> bool:
    return _lock_for(event_id).locked()


@contextmanager
def event_lock(event_id: int, operation: str) -> Iterator[None]:
    """
    Hold the event's writer lock for the duration of the block.

    Raises:
        AlreadyGeneratingConflict: another command for this event is in flight
    """
    lock = _lock_for(event_id)
    if not lock.acquire(blocking=False):
        logger.warning("Rejected %s for event %s: another command is in flight", operation, event_id)
        raise AlreadyGeneratingConflict(f"Another command is already running for event {event_id}")
    try:
        yield
    finally:
        lock.release()
