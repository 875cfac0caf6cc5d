from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from ps3batch import config
from ps3batch.common.exceptions import MissingRequiredFileError, UnreadableSourceError


class GameFolderKind(enum.Enum):
    """Folder layouts RPCS3 can boot.

    DISC: a dumped disc, ``<game>/PS3_GAME/USRDIR/EBOOT.BIN``.
    HDD:  an installed title, ``<game>/USRDIR/EBOOT.BIN`` (dev_hdd0/game).
    """

    DISC = "disc"
    HDD = "hdd"

    @property
    def eboot_relpath(self) -> Path:
        if self is GameFolderKind.DISC:
            return Path(config.PS3_GAME_DIR, config.USRDIR, config.EBOOT_NAME)
        return Path(config.USRDIR, config.EBOOT_NAME)

    @property
    def sfo_relpath(self) -> Path:
        if self is GameFolderKind.DISC:
            return Path(config.PS3_GAME_DIR, config.PARAM_SFO)
        return Path(config.PARAM_SFO)


@dataclass(frozen=True)
class CandidateFolder:
    path: Path
    kind: GameFolderKind
    eboot_path: Path
    sfo_path: Path

    @property
    def name(self) -> str:
        return self.path.name


def probe(sub: Path, kind: GameFolderKind) -> CandidateFolder:
    """Check ``sub`` against the layout of ``kind``.

    Raises MissingRequiredFileError listing whatever is absent (possibly both).
    """
    eboot = sub / kind.eboot_relpath
    sfo = sub / kind.sfo_relpath
    missing = [str(p.relative_to(sub)) for p in (eboot, sfo) if not p.is_file()]
    if missing:
        raise MissingRequiredFileError(str(sub), missing)
    return CandidateFolder(path=sub.resolve(), kind=kind, eboot_path=eboot.resolve(), sfo_path=sfo.resolve())


def detect_kind(sub: Path) -> Optional[GameFolderKind]:
    """Return the layout ``sub`` satisfies, disc layout first."""
    for kind in (GameFolderKind.DISC, GameFolderKind.HDD):
        try:
            probe(sub, kind)
        except MissingRequiredFileError:
            continue
        return kind
    return None


def read_metadata_bytes(candidate: CandidateFolder) -> bytes:
    try:
        return candidate.sfo_path.read_bytes()
    except OSError as e:
        raise UnreadableSourceError(str(candidate.sfo_path), str(e)) from e


def hdd_game_dir(executable: Path | str) -> Path:
    """``<folder of rpcs3.exe>/dev_hdd0/game``, where RPCS3 installs HDD titles."""
    return Path(executable).parent.joinpath(*config.HDD_GAME_SUBDIR)


class FolderScanner:
    """Lazily walk the immediate subdirectories of ``root``.

    Iterating yields a CandidateFolder for every subdirectory that holds both
    the EBOOT.BIN stub and PARAM.SFO of ``kind``. Folders with only one of the
    two are logged and recorded in ``skipped``; folders that cannot be
    inspected (permissions, I/O errors) are logged and recorded in
    ``unreadable``; folders with neither file are counted in ``scanned`` and
    nothing else. Each iteration lists the directory again and resets the
    counters.
    """

    def __init__(
        self,
        root: Path | str,
        kind: GameFolderKind,
        logger: Optional[logging.Logger] = None,
    ):
        self.root = Path(root)
        self.kind = kind
        self.logger = logger or logging.getLogger(__name__)
        self.scanned = 0
        self.skipped: list[MissingRequiredFileError] = []
        self.unreadable: list[UnreadableSourceError] = []

    def _unreadable(self, sub: Path, e: OSError) -> None:
        self.unreadable.append(UnreadableSourceError(str(sub), str(e)))
        self.logger.error("Could not read %s, skipping. (%s)", sub.name, e.strerror or e)

    def _subdirectories(self) -> list[Path]:
        subs = []
        for d in self.root.iterdir():
            try:
                if d.is_dir():
                    subs.append(d)
            except OSError as e:
                self._unreadable(d, e)
        return sorted(subs, key=lambda d: d.name)

    def __iter__(self) -> Iterator[CandidateFolder]:
        self.scanned = 0
        self.skipped = []
        self.unreadable = []

        for sub in self._subdirectories():
            self.scanned += 1
            try:
                candidate = probe(sub, self.kind)
            except MissingRequiredFileError as e:
                if len(e.missing) == 2:
                    # Not a game folder for this layout
                    continue
                self.skipped.append(e)
                self.logger.warning(
                    "%s not found in %s, skipping.", e.missing[0], sub.name
                )
                continue
            except OSError as e:
                self._unreadable(sub, e)
                continue
            yield candidate
