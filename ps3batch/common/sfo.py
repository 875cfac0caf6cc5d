"""PARAM.SFO (PSF) key/value container parser.

Layout (little-endian):

    0x00  u32  magic "\\0PSF"
    0x04  u32  version
    0x08  u32  key table start
    0x0C  u32  data table start
    0x10  u32  entry count
    0x14  entries, 16 bytes each:
          u16 key offset, u16 data format, u32 data length,
          u32 data max length, u32 data offset

Every read is bounds-checked; a bad entry is skipped and reported in
``SfoDocument.skipped`` instead of aborting the parse.
"""

from __future__ import annotations

import struct
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from ps3batch import config
from ps3batch.common.exceptions import (
    BadMagicError,
    EntryOutOfBoundsError,
    SfoEntryError,
    TruncatedError,
    UnreadableSourceError,
)

_HEADER = struct.Struct("<IIIII")
_ENTRY = struct.Struct("<HHIII")
_U32 = struct.Struct("<I")


class SfoDocument(Mapping):
    """Read-only, insertion-ordered view of the decoded entries."""

    def __init__(
        self,
        entries: dict[str, str],
        version: int = 0,
        skipped: tuple[SfoEntryError, ...] = (),
    ):
        self._entries = MappingProxyType(dict(entries))
        self.version = version
        self.skipped = tuple(skipped)

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"SfoDocument({dict(self._entries)!r}, skipped={len(self.skipped)})"


def _read_cstring(data: bytes, start: int, limit: int | None = None) -> str:
    end = data.find(b"\x00", start)
    if end == -1:
        end = len(data)
    if limit is not None and end > start + limit:
        end = start + limit
    return data[start:end].decode("utf-8", errors="replace").rstrip("\x00")


def _decode_value(data: bytes, index: int, data_fmt: int, start: int, length: int) -> str:
    # 0x0404 shares its low byte with the string formats, test it first
    if data_fmt == config.SFO_FMT_INT32:
        if start + _U32.size > len(data):
            raise EntryOutOfBoundsError(index, f"integer at {start} past end of buffer")
        return str(_U32.unpack_from(data, start)[0])

    if data_fmt & 0xFF == config.SFO_FMT_STRING_LOW:
        if start + length > len(data):
            raise EntryOutOfBoundsError(
                index, f"string {start}+{length} past end of buffer ({len(data)})"
            )
        return _read_cstring(data, start, length)

    return ""


def parse_sfo(data: bytes) -> SfoDocument:
    """Decode a PARAM.SFO buffer.

    Raises:
        TruncatedError: buffer shorter than the 20-byte header
        BadMagicError: buffer does not start with "\\0PSF"
    """
    if len(data) < config.SFO_HEADER_SIZE:
        raise TruncatedError(len(data), config.SFO_HEADER_SIZE)

    magic, version, key_table_start, data_table_start, num_entries = _HEADER.unpack_from(data, 0)
    if magic != config.SFO_MAGIC:
        raise BadMagicError(magic)

    entries: dict[str, str] = {}
    skipped: list[SfoEntryError] = []

    for i in range(num_entries):
        offset = config.SFO_HEADER_SIZE + i * config.SFO_ENTRY_SIZE
        if offset + config.SFO_ENTRY_SIZE > len(data):
            # Every later header is out of range too
            skipped.append(
                EntryOutOfBoundsError(
                    i, f"entry table ends at {len(data)}, {num_entries - i} entries missing"
                )
            )
            break

        key_offset, data_fmt, data_len, _max_len, data_offset = _ENTRY.unpack_from(data, offset)

        key_start = key_table_start + key_offset
        if key_start >= len(data):
            skipped.append(EntryOutOfBoundsError(i, f"key at {key_start} past end of buffer"))
            continue

        key = _read_cstring(data, key_start)
        if not key:
            skipped.append(SfoEntryError(i, "empty key"))
            continue

        try:
            value = _decode_value(data, i, data_fmt, data_table_start + data_offset, data_len)
        except EntryOutOfBoundsError as e:
            skipped.append(e)
            continue

        # First occurrence wins
        entries.setdefault(key, value)

    return SfoDocument(entries, version=version, skipped=tuple(skipped))


def read_sfo(path: Path | str) -> SfoDocument:
    """Read and parse a PARAM.SFO file.

    Raises:
        UnreadableSourceError: the file could not be read
        SfoParseError: the contents are not a valid SFO
    """
    try:
        with open(path, "rb") as f:
            data = f.read()
    except OSError as e:
        raise UnreadableSourceError(str(path), str(e)) from e
    return parse_sfo(data)
