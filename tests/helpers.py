import struct
from pathlib import Path
from typing import Iterable, Union

FMT_UTF8_S = 0x0004
FMT_UTF8 = 0x0204
FMT_INT32 = 0x0404


def build_sfo(entries: Iterable[tuple], magic: bytes = b"\x00PSF") -> bytes:
    """Build a PARAM.SFO buffer.

    entries: (key, value) or (key, value, fmt). Strings default to 0x0204,
    ints to 0x0404.
    """
    entries = list(entries)
    key_table = b""
    data_table = b""
    index = b""

    for entry in entries:
        key, value = entry[0], entry[1]
        if len(entry) > 2:
            fmt = entry[2]
        else:
            fmt = FMT_INT32 if isinstance(value, int) else FMT_UTF8

        if fmt == FMT_INT32:
            raw = struct.pack("<I", value)
        else:
            raw = value.encode("utf-8")
            if fmt == FMT_UTF8:
                raw += b"\x00"
        max_len = (len(raw) + 3) & ~3
        padded = raw.ljust(max_len, b"\x00")

        index += struct.pack("<HHIII", len(key_table), fmt, len(raw), max_len, len(data_table))
        key_table += key.encode("utf-8") + b"\x00"
        data_table += padded

    key_table = key_table.ljust((len(key_table) + 3) & ~3, b"\x00")
    key_table_start = 20 + len(index)
    data_table_start = key_table_start + len(key_table)
    header = magic + struct.pack("<IIII", 0x0101, key_table_start, data_table_start, len(entries))
    return header + index + key_table + data_table


def make_game(
    root: Path,
    name: str,
    layout: str = "hdd",
    sfo: Union[bytes, None] = None,
    eboot: bool = True,
) -> Path:
    """Create a fake game folder. layout: 'hdd' or 'disc'."""
    game = root / name
    base = game / "PS3_GAME" if layout == "disc" else game
    base.mkdir(parents=True, exist_ok=True)
    if eboot:
        (base / "USRDIR").mkdir(exist_ok=True)
        (base / "USRDIR" / "EBOOT.BIN").write_bytes(b"SCE\x00")
    if sfo is not None:
        (base / "PARAM.SFO").write_bytes(sfo)
    return game
