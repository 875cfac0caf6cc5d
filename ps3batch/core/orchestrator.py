from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from ps3batch.common.exceptions import (
    ScriptWriteError,
    SfoParseError,
    UnreadableSourceError,
)
from ps3batch.common.sfo import parse_sfo
from ps3batch.common.types import LogCallback, ProcessResult
from ps3batch.common.validation import validate_path_exists, validate_writable_directory
from ps3batch.config import BATCH_LOGGER
from ps3batch.core.launcher import write_launcher
from ps3batch.logging_cfg import (
    bind_log_sink,
    get_logger,
    set_correlation_id,
    unbind_log_sink,
)
from ps3batch.ps3.metadata import choose_base_name
from ps3batch.ps3.scanner import (
    CandidateFolder,
    FolderScanner,
    GameFolderKind,
    hdd_game_dir,
    read_metadata_bytes,
)


class Orchestrator:
    """
    Coordinates scanner, PARAM.SFO parser, sanitizer and launcher writer.

    Every line logged during a run lands in ``ProcessResult.log_lines`` and,
    when given, in ``log_callback``. Per-folder problems are logged and
    counted; only invalid inputs (executable, root, output folder) raise,
    and they do so before anything is scanned.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        log_callback: Optional[LogCallback] = None,
    ):
        self.logger = logger or get_logger(BATCH_LOGGER, propagate=False)
        self.log_callback = log_callback

    # --- Workflow: single root ---

    def process_root(
        self,
        executable: Path | str,
        root: Path | str,
        kind: GameFolderKind,
        output_dir: Path | str | None = None,
    ) -> ProcessResult:
        """Write one launcher per valid ``kind`` folder under ``root``.

        Scripts go to ``output_dir`` (default: ``root``).
        """
        exe = validate_path_exists(executable, "RPCS3 executable", must_be_file=True)
        root = validate_path_exists(root, "game folder", must_be_dir=True)
        out = validate_writable_directory(output_dir or root, "output folder")

        lines: list[str] = []
        with self._capture(lines):
            set_correlation_id()
            result = self._run(exe, root, kind, out, set())
        result.log_lines = lines
        return result

    # --- Workflow: RPCS3 install + disc folder ---

    def create_batch_files(
        self,
        executable: Path | str,
        games_dir: Path | str,
        output_dir: Path | str | None = None,
        include_hdd: bool = True,
        include_disc: bool = True,
    ) -> ProcessResult:
        """HDD titles from ``<rpcs3 dir>/dev_hdd0/game``, then disc titles from ``games_dir``."""
        exe = validate_path_exists(executable, "RPCS3 executable", must_be_file=True)
        games = validate_path_exists(games_dir, "game folder", must_be_dir=True)
        out = validate_writable_directory(output_dir or games, "output folder")

        result = ProcessResult()
        written: set[Path] = set()
        lines: list[str] = []
        with self._capture(lines):
            set_correlation_id()
            if include_hdd:
                hdd_dir = hdd_game_dir(exe)
                if hdd_dir.is_dir():
                    self.logger.info("--- Scanning RPCS3 game folder: %s ---", hdd_dir)
                    result = result.merge(self._run(exe, hdd_dir, GameFolderKind.HDD, out, written))
                else:
                    self.logger.info("--- RPCS3 game folder not found at %s, skipping. ---", hdd_dir)

            if include_disc:
                self.logger.info("--- Scanning disc game folder: %s ---", games)
                result = result.merge(self._run(exe, games, GameFolderKind.DISC, out, written))

            self.logger.info("--- Process Complete ---")
            self.logger.info("Scanned %d potential game folders.", result.folders_scanned)
            self.logger.info(
                "Successfully created %d batch files in '%s'.", result.files_created, out
            )
        result.log_lines = lines
        return result

    # --- Internals ---

    def _capture(self, lines: list[str]) -> "_LogCapture":
        return _LogCapture(self.logger, lines, self.log_callback)

    def _run(
        self,
        exe: Path,
        root: Path,
        kind: GameFolderKind,
        out: Path,
        written: set[Path],
    ) -> ProcessResult:
        """One scan of ``root``. ``written`` carries script paths across passes."""
        result = ProcessResult()
        start = time.perf_counter()
        scanner = FolderScanner(root, kind, logger=self.logger)

        for candidate in scanner:
            path = self._process_candidate(exe, candidate, out, result)
            if path is None:
                continue
            if path in written:
                self.logger.warning("Overwrote %s (duplicate name)", path.name)
            written.add(path)
            result.created.append(path)
            result.files_created += 1

        result.folders_scanned = scanner.scanned
        result.skipped = len(scanner.skipped)
        result.failed += len(scanner.unreadable)
        result.duration_ms = (time.perf_counter() - start) * 1000.0
        return result

    def _process_candidate(
        self,
        exe: Path,
        candidate: CandidateFolder,
        out: Path,
        result: ProcessResult,
    ) -> Optional[Path]:
        try:
            doc = parse_sfo(read_metadata_bytes(candidate))
        except UnreadableSourceError as e:
            self.logger.error("Could not read PARAM.SFO for %s, skipping. (%s)", candidate.name, e.reason)
            result.failed += 1
            return None
        except SfoParseError as e:
            self.logger.error("Invalid PARAM.SFO for %s, skipping. (%s)", candidate.name, e.message)
            result.failed += 1
            return None

        for entry_error in doc.skipped:
            self.logger.warning("%s: %s", candidate.name, entry_error.message)
            result.entry_errors += 1

        base_name, source = choose_base_name(doc, candidate.name)
        if not base_name:
            self.logger.error("No usable name for %s, skipping.", candidate.name)
            result.failed += 1
            return None
        self.logger.debug("%s: name %r from %s", candidate.name, base_name, source)

        try:
            path = write_launcher(exe, candidate.eboot_path, out, base_name)
        except ScriptWriteError as e:
            self.logger.error("Failed to create batch file for %s: %s", candidate.name, e.cause)
            result.failed += 1
            return None

        self.logger.info("Batch file created: %s", path)
        return path


class _LogCapture:
    """Route the logger's records emitted in this context into ``lines``
    (and a callback) for one run."""

    def __init__(self, logger: logging.Logger, lines: list[str], callback: Optional[LogCallback]):
        self.logger = logger
        self.lines = lines
        self.callback = callback
        self._token = None

    def _emit(self, line: str) -> None:
        self.lines.append(line)
        if self.callback:
            self.callback(line)

    def __enter__(self):
        self._token = bind_log_sink(self.logger, self._emit)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        unbind_log_sink(self._token)
        return False


def process_root(
    executable: Path | str,
    root: Path | str,
    kind: GameFolderKind,
    output_dir: Path | str | None = None,
    log_callback: Optional[LogCallback] = None,
) -> ProcessResult:
    return Orchestrator(log_callback=log_callback).process_root(executable, root, kind, output_dir)


def create_batch_files(
    executable: Path | str,
    games_dir: Path | str,
    output_dir: Path | str | None = None,
    log_callback: Optional[LogCallback] = None,
    include_hdd: bool = True,
    include_disc: bool = True,
) -> ProcessResult:
    return Orchestrator(log_callback=log_callback).create_batch_files(
        executable, games_dir, output_dir, include_hdd=include_hdd, include_disc=include_disc
    )
