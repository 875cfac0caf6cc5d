"""Batch launcher generation.

Each script is two CRLF-terminated lines:

    cd /d "C:\\RPCS3"
    start "" "C:\\RPCS3\\rpcs3.exe" --no-gui "D:\\Games\\BLUS30001\\PS3_GAME\\USRDIR\\EBOOT.BIN"
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ps3batch import config
from ps3batch.common.exceptions import ScriptWriteError
from ps3batch.common.validation import validate_not_empty


@dataclass(frozen=True)
class ScriptSpec:
    executable: Path
    working_dir: Path
    payload: Path
    output_path: Path


def _absolute(path: Path | str) -> Path:
    return Path(path).expanduser().absolute()


def build_script_spec(
    executable: Path | str,
    payload: Path | str,
    output_dir: Path | str,
    base_name: str,
) -> ScriptSpec:
    validate_not_empty(base_name, "script name")
    exe = _absolute(executable)
    return ScriptSpec(
        executable=exe,
        working_dir=exe.parent,
        payload=_absolute(payload),
        output_path=_absolute(output_dir) / f"{base_name}{config.SCRIPT_EXTENSION}",
    )


def render_launcher(spec: ScriptSpec) -> str:
    lines = [
        f'cd /d "{spec.working_dir}"',
        f'start "" "{spec.executable}" {config.NO_GUI_FLAG} "{spec.payload}"',
    ]
    return "\r\n".join(lines) + "\r\n"


def write_script(spec: ScriptSpec) -> Path:
    """Write (overwrite) the launcher described by ``spec``.

    Raises:
        ScriptWriteError: on any OSError; nothing is retried.
    """
    try:
        with open(spec.output_path, "w", encoding="utf-8", newline="") as f:
            f.write(render_launcher(spec))
    except OSError as e:
        raise ScriptWriteError(str(spec.output_path), e) from e
    return spec.output_path


def write_launcher(
    executable: Path | str,
    payload: Path | str,
    output_dir: Path | str,
    base_name: str,
) -> Path:
    return write_script(build_script_spec(executable, payload, output_dir, base_name))
