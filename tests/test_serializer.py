"""Tests for daemon_registry/serializer.py — binary registry encoding."""

import struct

import pytest

from daemon_registry.models import Address, DaemonStatus, RegistryContent
from daemon_registry.serializer import (
    FORMAT_VERSION,
    HEADER_FORMAT,
    HEADER_SIZE,
    MAGIC,
    SerializationError,
    decode,
    encode,
)


def _content(*entries) -> RegistryContent:
    content = RegistryContent()
    for host, port, idle in entries:
        content.put(DaemonStatus(Address(host, port), idle=idle))
    return content


# ── Header ───────────────────────────────────────────────────────


class TestHeader:
    def test_header_size_is_nine(self):
        assert HEADER_SIZE == 9

    def test_empty_content_is_header_only(self):
        data = encode(RegistryContent())
        assert data == struct.pack(HEADER_FORMAT, MAGIC, FORMAT_VERSION, 0)

    def test_entry_count_in_header(self):
        data = encode(_content(("a", 1, True), ("b", 2, False)))
        _, _, count = struct.unpack(HEADER_FORMAT, data[:HEADER_SIZE])
        assert count == 2


# ── Entry layout ─────────────────────────────────────────────────


class TestEntryLayout:
    def test_single_entry_bytes(self):
        data = encode(_content(("host", 8080, True)))
        body = data[HEADER_SIZE:]
        assert body == b"\x00\x04host" + struct.pack("!H", 8080) + b"\x01"

    def test_busy_flag_is_zero(self):
        data = encode(_content(("h", 1, False)))
        assert data[-1:] == b"\x00"

    def test_non_ascii_host(self):
        content = _content(("hôte-ünïcode", 4000, True))
        assert decode(encode(content)) == content


# ── Round trip ───────────────────────────────────────────────────


class TestRoundTrip:
    def test_empty(self):
        assert decode(encode(RegistryContent())) == RegistryContent()

    def test_mixed_idle_and_busy(self):
        content = _content(
            ("127.0.0.1", 50001, True),
            ("127.0.0.1", 50002, False),
            ("::1", 65535, True),
            ("", 0, False),
        )
        decoded = decode(encode(content))
        assert decoded == content
        for address, status in decoded.entries.items():
            assert status.address == address

    def test_decoded_value_is_independent(self):
        content = _content(("h", 1, True))
        decoded = decode(encode(content))
        decoded.get(Address("h", 1)).idle = False
        assert content.get(Address("h", 1)).idle is True


# ── Decode errors ────────────────────────────────────────────────


class TestDecodeErrors:
    def test_empty_data(self):
        with pytest.raises(SerializationError, match="empty"):
            decode(b"")

    def test_short_header(self):
        with pytest.raises(SerializationError, match="Truncated"):
            decode(b"DREG")

    def test_bad_magic(self):
        data = struct.pack(HEADER_FORMAT, b"XXXX", FORMAT_VERSION, 0)
        with pytest.raises(SerializationError, match="magic"):
            decode(data)

    def test_unsupported_version(self):
        data = struct.pack(HEADER_FORMAT, MAGIC, FORMAT_VERSION + 1, 0)
        with pytest.raises(SerializationError, match="version"):
            decode(data)

    def test_truncated_entry(self):
        data = encode(_content(("localhost", 1234, True)))
        with pytest.raises(SerializationError, match="Truncated"):
            decode(data[:-2])

    def test_count_larger_than_entries(self):
        data = struct.pack(HEADER_FORMAT, MAGIC, FORMAT_VERSION, 3)
        with pytest.raises(SerializationError):
            decode(data)

    def test_invalid_idle_flag(self):
        data = bytearray(encode(_content(("h", 1, True))))
        data[-1] = 0x07
        with pytest.raises(SerializationError, match="idle flag"):
            decode(bytes(data))

    def test_duplicate_entries(self):
        entry = b"\x00\x01h" + struct.pack("!HB", 1, 1)
        data = struct.pack(HEADER_FORMAT, MAGIC, FORMAT_VERSION, 2) + entry + entry
        with pytest.raises(SerializationError, match="Duplicate"):
            decode(data)

    def test_trailing_bytes(self):
        data = encode(_content(("h", 1, True))) + b"\x00"
        with pytest.raises(SerializationError, match="trailing"):
            decode(data)

    def test_invalid_utf8_host(self):
        entry = b"\x00\x02\xff\xfe" + struct.pack("!HB", 1, 1)
        data = struct.pack(HEADER_FORMAT, MAGIC, FORMAT_VERSION, 1) + entry
        with pytest.raises(SerializationError, match="encoding"):
            decode(data)


# ── Encode errors ────────────────────────────────────────────────


class TestEncodeErrors:
    def test_port_out_of_range(self):
        with pytest.raises(SerializationError, match="Port"):
            encode(_content(("h", 70000, True)))

    def test_negative_port(self):
        with pytest.raises(SerializationError, match="Port"):
            encode(_content(("h", -1, True)))

    def test_host_too_long(self):
        with pytest.raises(SerializationError, match="too long"):
            encode(_content(("x" * 70000, 1, True)))
