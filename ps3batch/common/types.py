"""
Tipos partilhados e type aliases para o ps3batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable


# Type alias for the log-line side channel
LogCallback = Callable[[str], None]  # (message)


@dataclass
class ProcessResult:
    """Tally of one scan-and-generate run."""
    folders_scanned: int = 0
    files_created: int = 0
    skipped: int = 0
    failed: int = 0
    entry_errors: int = 0
    duration_ms: float = 0
    created: list[Path] = field(default_factory=list)
    log_lines: list[str] = field(default_factory=list)

    def merge(self, other: "ProcessResult") -> "ProcessResult":
        return ProcessResult(
            folders_scanned=self.folders_scanned + other.folders_scanned,
            files_created=self.files_created + other.files_created,
            skipped=self.skipped + other.skipped,
            failed=self.failed + other.failed,
            entry_errors=self.entry_errors + other.entry_errors,
            duration_ms=self.duration_ms + other.duration_ms,
            created=self.created + other.created,
            log_lines=self.log_lines + other.log_lines,
        )

    def __str__(self) -> str:
        return (
            f"{self.folders_scanned} scanned, "
            f"{self.files_created} created, "
            f"{self.skipped} skipped, "
            f"{self.failed} failed "
            f"({self.duration_ms:.0f}ms)"
        )
