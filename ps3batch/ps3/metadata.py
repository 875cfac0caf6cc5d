from __future__ import annotations

from pathlib import Path
from typing import Mapping, Optional

from ps3batch import config
from ps3batch.common.sanitize import sanitize_filename
from ps3batch.common.sfo import SfoDocument, read_sfo
from ps3batch.ps3.scanner import detect_kind


def get_metadata(doc: Mapping[str, str]) -> dict:
    """
    Pick the interesting PARAM.SFO keys.
    Returns dict with keys: title, serial, version (missing keys are omitted).
    """
    meta = {}
    if doc.get(config.TITLE_KEY):
        meta["title"] = doc[config.TITLE_KEY]
    if doc.get(config.TITLE_ID_KEY):
        meta["serial"] = doc[config.TITLE_ID_KEY].strip().upper()
    version = doc.get("APP_VER") or doc.get("VERSION")
    if version:
        meta["version"] = version
    return meta


def name_candidates(doc: Mapping[str, str], folder_name: str) -> list[tuple[str, str]]:
    """(source, raw name) pairs in order of preference: TITLE, TITLE_ID, folder."""
    meta = get_metadata(doc)
    return [
        ("TITLE", meta.get("title", "")),
        ("TITLE_ID", meta.get("serial", "")),
        ("folder", folder_name),
    ]


def choose_base_name(doc: Mapping[str, str], folder_name: str) -> tuple[str, str]:
    """Return (sanitized name, source) for the first candidate that survives sanitizing.

    ("", "") when even the folder name sanitizes to nothing.
    """
    for source, raw in name_candidates(doc, folder_name):
        if not raw:
            continue
        name = sanitize_filename(raw)
        if name:
            return name, source
    return "", ""


def load_document(path: Path) -> Optional[SfoDocument]:
    """Read PARAM.SFO from a file or from a game folder of either layout."""
    if path.is_file():
        return read_sfo(path)
    kind = detect_kind(path)
    if kind is not None:
        return read_sfo(path / kind.sfo_relpath)
    for rel in (Path(config.PARAM_SFO), Path(config.PS3_GAME_DIR, config.PARAM_SFO)):
        if (path / rel).is_file():
            return read_sfo(path / rel)
    return None
