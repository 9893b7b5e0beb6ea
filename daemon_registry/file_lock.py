"""Advisory inter-process lock acquired per operation and released before returning."""

import logging

import filelock

logger = logging.getLogger(__name__)


class OnDemandFileLock:
    """Exclusive lock over *target*, backed by an OS lock on ``<target>.lock``.

    The lock file handle is opened on :meth:`acquire` and closed on
    :meth:`release`, so nothing stays open between operations.
    """

    def __init__(self, target: str, label: str):
        self._target = target
        self._label = label
        self._lock = filelock.FileLock(target + ".lock")

    @property
    def target(self) -> str:
        return self._target

    @property
    def label(self) -> str:
        return self._label

    @property
    def lock_file(self) -> str:
        return self._lock.lock_file

    @property
    def is_locked(self) -> bool:
        return self._lock.is_locked

    def acquire(self) -> None:
        """Block until the lock is held. Raises OSError if the lock file cannot be opened."""
        logger.debug("Waiting for lock on %s (%s)", self._target, self._label)
        self._lock.acquire()
        logger.debug("Acquired lock on %s (%s)", self._target, self._label)

    def release(self) -> None:
        """Release the lock. Safe to call when not held."""
        if not self._lock.is_locked:
            return
        self._lock.release(force=True)
        logger.debug("Released lock on %s (%s)", self._target, self._label)

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False
