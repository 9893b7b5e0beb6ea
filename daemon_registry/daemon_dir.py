"""On-disk layout of the daemon registry."""

import os

REGISTRY_FILENAME = "registry.bin"


class DaemonDir:
    def __init__(self, base_dir: str):
        self._base_dir = os.path.abspath(os.path.expanduser(base_dir))
        self._registry_file = os.path.join(self._base_dir, REGISTRY_FILENAME)

    @property
    def base_dir(self) -> str:
        return self._base_dir

    @property
    def registry_file(self) -> str:
        return self._registry_file

    @property
    def lock_file(self) -> str:
        return self._registry_file + ".lock"

    def exists(self) -> bool:
        return os.path.isdir(self._base_dir)

    def ensure_exists(self) -> None:
        """Create the base directory (and parents). Only called on write paths."""
        os.makedirs(self._base_dir, exist_ok=True)
