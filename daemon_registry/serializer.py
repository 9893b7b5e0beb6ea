"""Binary encoding of the registry content.

Layout (all integers big-endian):

  Header:  4-byte magic b"DREG" + 1-byte format version + 4-byte entry count
  Entry:   2-byte host length + host (UTF-8) + 2-byte port + 1-byte idle flag

The idle flag is 0x01 for idle and 0x00 for busy; any other value is rejected.
"""

import io
import struct

from daemon_registry.models import Address, DaemonStatus, RegistryContent

MAGIC = b"DREG"
FORMAT_VERSION = 1

HEADER_FORMAT = "!4sBI"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)
HOST_LENGTH_FORMAT = "!H"
ENTRY_TAIL_FORMAT = "!HB"   # port + idle flag

MAX_HOST_BYTES = 0xFFFF
MAX_PORT = 0xFFFF


class SerializationError(Exception):
    """Raised when registry content cannot be encoded or decoded."""


def encode(content: RegistryContent) -> bytes:
    """Encode registry content into bytes.

    Raises:
        SerializationError: If an address cannot be represented in the format.
    """
    out = io.BytesIO()
    out.write(struct.pack(HEADER_FORMAT, MAGIC, FORMAT_VERSION, len(content)))
    for status in content.statuses():
        host = status.address.host.encode("utf-8")
        if len(host) > MAX_HOST_BYTES:
            raise SerializationError(f"Host name too long ({len(host)} bytes)")
        port = status.address.port
        if not 0 <= port <= MAX_PORT:
            raise SerializationError(f"Port out of range: {port}")
        out.write(struct.pack(HOST_LENGTH_FORMAT, len(host)))
        out.write(host)
        out.write(struct.pack(ENTRY_TAIL_FORMAT, port, 1 if status.idle else 0))
    return out.getvalue()


def _read_exact(stream: io.BytesIO, n: int) -> bytes:
    data = stream.read(n)
    if len(data) != n:
        raise SerializationError(
            f"Truncated registry data: expected {n} bytes, got {len(data)}"
        )
    return data


def decode(data: bytes) -> RegistryContent:
    """Decode bytes produced by :func:`encode`.

    Raises:
        SerializationError: If the data is empty, truncated, or malformed.
    """
    if not data:
        raise SerializationError("Cannot decode empty registry data")

    stream = io.BytesIO(data)
    magic, version, count = struct.unpack(HEADER_FORMAT, _read_exact(stream, HEADER_SIZE))
    if magic != MAGIC:
        raise SerializationError(f"Bad registry magic: {magic!r}")
    if version != FORMAT_VERSION:
        raise SerializationError(f"Unsupported registry format version: {version}")

    content = RegistryContent()
    for _ in range(count):
        (host_len,) = struct.unpack(HOST_LENGTH_FORMAT, _read_exact(stream, 2))
        try:
            host = _read_exact(stream, host_len).decode("utf-8")
        except UnicodeDecodeError as e:
            raise SerializationError(f"Invalid host name encoding: {e}") from e
        port, idle_flag = struct.unpack(ENTRY_TAIL_FORMAT, _read_exact(stream, 3))
        if idle_flag not in (0, 1):
            raise SerializationError(f"Invalid idle flag: {idle_flag:#04x}")

        address = Address(host, port)
        if address in content:
            raise SerializationError(f"Duplicate registry entry for {address}")
        content.put(DaemonStatus(address, idle=bool(idle_flag)))

    trailing = len(data) - stream.tell()
    if trailing:
        raise SerializationError(f"{trailing} unexpected trailing byte(s) in registry data")
    return content
