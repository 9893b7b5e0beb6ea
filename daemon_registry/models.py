"""Registry data model: daemon addresses, their status, and the registry content."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Address:
    host: str
    port: int

    @property
    def display_name(self) -> str:
        return f"{self.host}:{self.port}"

    def __str__(self) -> str:
        return self.display_name


@dataclass
class DaemonStatus:
    address: Address
    idle: bool = True    # no active client connection


@dataclass
class RegistryContent:
    """Mapping of daemon address to status.

    Entries are keyed by ``status.address``; use :meth:`put` rather than
    writing to ``entries`` directly so the key always matches the status.
    """

    entries: dict[Address, DaemonStatus] = field(default_factory=dict)

    def get(self, address: Address) -> DaemonStatus | None:
        return self.entries.get(address)

    def put(self, status: DaemonStatus) -> None:
        self.entries[status.address] = status

    def remove(self, address: Address) -> DaemonStatus | None:
        """Drop the entry for *address*. Returns the removed status, or None if missing."""
        return self.entries.pop(address, None)

    def statuses(self) -> list[DaemonStatus]:
        return list(self.entries.values())

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, address) -> bool:
        return address in self.entries
