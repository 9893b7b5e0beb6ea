"""Persistent registry of daemon addresses and their busy/idle state.

The registry is shared by every client and daemon process pointed at the same
base directory. Each operation takes the registry file lock for its whole
duration, so operations from different processes never interleave.
"""

import logging
from typing import Callable

from daemon_registry.config import Config
from daemon_registry.daemon_dir import DaemonDir
from daemon_registry.file_lock import OnDemandFileLock
from daemon_registry.models import Address, DaemonStatus, RegistryContent
from daemon_registry.state_cache import ABSENT, Snapshot, StateCache

logger = logging.getLogger(__name__)

LOCK_LABEL = "daemon addresses registry"


class PersistentDaemonRegistry:
    def __init__(self, base_dir: str):
        self._daemon_dir = DaemonDir(base_dir)
        lock = OnDemandFileLock(self._daemon_dir.registry_file, LOCK_LABEL)
        self._cache = StateCache(self._daemon_dir, lock)

    @classmethod
    def from_config(cls, config: Config) -> "PersistentDaemonRegistry":
        return cls(config.base_dir)

    @property
    def daemon_dir(self) -> DaemonDir:
        return self._daemon_dir

    # ── Queries ────────────────────────────────────────────────────

    def list_all(self) -> list[DaemonStatus]:
        return self._select(lambda status: True)

    def list_idle(self) -> list[DaemonStatus]:
        """Daemons without an active client connection."""
        return self._select(lambda status: status.idle)

    def list_busy(self) -> list[DaemonStatus]:
        """Daemons with an active client connection."""
        return self._select(lambda status: not status.idle)

    def _select(self, predicate: Callable[[DaemonStatus], bool]) -> list[DaemonStatus]:
        content = self._cache.get()
        if content is ABSENT:
            return []
        return [status for status in content.statuses() if predicate(status)]

    # ── Mutations ──────────────────────────────────────────────────

    def insert(self, address: Address) -> None:
        """Register *address* as idle, replacing any existing entry for it."""

        def action(content: Snapshot) -> RegistryContent:
            if content is ABSENT:
                content = RegistryContent()
            content.put(DaemonStatus(address, idle=True))
            return content

        self._cache.update(action)
        logger.info("Registered daemon %s", address)

    def remove(self, address: Address) -> None:
        def action(content: RegistryContent) -> None:
            if content.remove(address) is None:
                logger.debug("Remove: daemon %s is not registered", address)
            else:
                logger.info("Removed daemon %s", address)

        self._update_existing(action)

    def mark_busy(self, address: Address) -> None:
        self._set_idle(address, False)

    def mark_idle(self, address: Address) -> None:
        self._set_idle(address, True)

    def _set_idle(self, address: Address, idle: bool) -> None:
        def action(content: RegistryContent) -> None:
            status = content.get(address)
            if status is None:
                # Lost a race with remove(); the caller copes upstream.
                logger.debug("Cannot mark daemon %s %s: not registered",
                             address, "idle" if idle else "busy")
                return
            status.idle = idle

        self._update_existing(action)

    def _update_existing(self, mutate: Callable[[RegistryContent], None]) -> None:
        """Mutate the registry in place; a registry that was never written stays unwritten."""
        if not self._daemon_dir.exists():
            return

        def action(content: Snapshot) -> Snapshot:
            if content is ABSENT:
                return ABSENT
            mutate(content)
            return content

        self._cache.update(action)
