"""File-backed state cell: locked reads and locked read-modify-write of the registry."""

import enum
import logging
import os
import tempfile
import threading
from typing import Callable, Union

from daemon_registry import serializer
from daemon_registry.daemon_dir import DaemonDir
from daemon_registry.file_lock import OnDemandFileLock
from daemon_registry.models import RegistryContent

logger = logging.getLogger(__name__)


class Absent(enum.Enum):
    """Marker for a registry file that has not been written yet."""

    ABSENT = "absent"


ABSENT = Absent.ABSENT

Snapshot = Union[RegistryContent, Absent]
UpdateAction = Callable[[Snapshot], Snapshot]


class StateCache:
    """Guarded cell over the registry file.

    Every call takes an in-process mutex and then the inter-process file lock,
    so two threads sharing one cache never contend on the OS lock with each
    other. The lock is always released before the call returns.
    """

    def __init__(self, daemon_dir: DaemonDir, lock: OnDemandFileLock):
        self._daemon_dir = daemon_dir
        self._path = daemon_dir.registry_file
        self._lock = lock
        self._mutex = threading.Lock()

    @property
    def path(self) -> str:
        return self._path

    def get(self) -> Snapshot:
        """Return the current registry content, or ABSENT if nothing was written yet."""
        with self._mutex:
            # Locking would create the lock file, and reads must not create anything.
            if not self._daemon_dir.exists():
                return ABSENT
            with self._lock:
                return self._read()

    def update(self, action: UpdateAction) -> Snapshot:
        """Apply *action* to the current content and persist the result.

        *action* runs with the lock held and receives ABSENT when the registry
        file does not exist. It may hand ABSENT back to leave a missing
        registry missing; otherwise it must return a RegistryContent. If it
        raises, nothing is written.
        """
        with self._mutex:
            self._daemon_dir.ensure_exists()
            with self._lock:
                old_value = self._read()
                new_value = action(old_value)
                if new_value is ABSENT and old_value is ABSENT:
                    return ABSENT
                if not isinstance(new_value, RegistryContent):
                    raise TypeError(
                        f"Update action must return RegistryContent, got {type(new_value).__name__}"
                    )
                self._write(new_value)
                return new_value

    def _read(self) -> Snapshot:
        try:
            with open(self._path, "rb") as f:
                data = f.read()
        except FileNotFoundError:
            return ABSENT

        if not data:
            logger.warning("Registry file %s is empty, treating it as absent", self._path)
            return ABSENT
        try:
            return serializer.decode(data)
        except serializer.SerializationError as e:
            raise serializer.SerializationError(f"Corrupt registry file {self._path}: {e}") from e

    def _write(self, content: RegistryContent) -> None:
        """Atomic write: write to a temp file in the same directory then replace."""
        data = serializer.encode(content)
        created = not os.path.exists(self._path)

        fd, tmp = tempfile.mkstemp(dir=os.path.dirname(self._path), prefix=".registry-", suffix=".tmp")
        replaced = False
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self._path)
            replaced = True
        finally:
            # Also covers KeyboardInterrupt between mkstemp and replace.
            if not replaced and os.path.exists(tmp):
                os.unlink(tmp)

        if created:
            logger.info("Created registry file %s", self._path)
