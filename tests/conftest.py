"""Shared pytest fixtures for the daemon registry test suite."""

import pytest

from daemon_registry.models import Address
from daemon_registry.registry import PersistentDaemonRegistry


@pytest.fixture()
def base_dir(tmp_path) -> str:
    """A registry base directory that does not exist yet."""
    return str(tmp_path / "daemon" / "registry")


@pytest.fixture()
def registry(base_dir) -> PersistentDaemonRegistry:
    return PersistentDaemonRegistry(base_dir)


@pytest.fixture()
def addr_a() -> Address:
    return Address("127.0.0.1", 50001)


@pytest.fixture()
def addr_b() -> Address:
    return Address("127.0.0.1", 50002)
