"""Configuration and constants for the ps3batch package."""
from __future__ import annotations

from typing import Dict, FrozenSet, Tuple

# Default location of the persisted user settings (overridable via env)
SETTINGS_ENV = "PS3BATCH_CONFIG"
SETTINGS_DEFAULT = "~/.ps3batch/settings.json"
LOG_FORMAT_ENV = "PS3BATCH_LOG_FORMAT"
# Non-propagating logger that carries per-run batch lines
BATCH_LOGGER = "ps3batch.batch"

# Game folder layout
EBOOT_NAME = "EBOOT.BIN"
PARAM_SFO = "PARAM.SFO"
PS3_GAME_DIR = "PS3_GAME"
USRDIR = "USRDIR"

# Where RPCS3 installs HDD titles, relative to the folder holding rpcs3.exe
HDD_GAME_SUBDIR = ("dev_hdd0", "game")

# PARAM.SFO
SFO_MAGIC = 0x46535000  # "\0PSF" read as little-endian u32
SFO_HEADER_SIZE = 20
SFO_ENTRY_SIZE = 16
SFO_FMT_INT32 = 0x0404
SFO_FMT_STRING_LOW = 0x04

# Keys used to pick a display name, in order of preference
TITLE_KEY = "TITLE"
TITLE_ID_KEY = "TITLE_ID"

# Launcher scripts
SCRIPT_EXTENSION = ".bat"
NO_GUI_FLAG = "--no-gui"

# Glyph substitutions applied before tokenizing a title. Order matters:
# ":" becomes " -" so subtitles keep a visible separator.
GLYPH_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    ("™", ""),  # trademark
    ("®", ""),  # registered
    (":", " -"),
    ("Σ", "Sigma"),  # Ninja Gaiden Sigma
)

# Tokens that keep a fixed spelling instead of being title-cased
KEEP_AS_IS: Dict[str, str] = {
    token.casefold(): token
    for token in (
        "FFX",
        "GTA",
        "HD",
        "DLC",
        "NBA",
        "NFL",
        "NHL",
        "MLB",
        "WWE",
        "UFC",
        "WRC",
        "PES",
        "FIFA",
        "LEGO",
    )
}

TOKEN_SEPARATORS: FrozenSet[str] = frozenset(" .-_:")

# Characters Windows refuses in a file name (Path.GetInvalidFileNameChars)
INVALID_FILENAME_CHARS: FrozenSet[str] = frozenset(
    '"<>|:*?\\/' + "".join(chr(i) for i in range(32))
)
