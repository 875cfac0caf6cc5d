from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional

from ps3batch import config
from ps3batch.common.exceptions import ConfigurationError


def default_settings_path() -> Path:
    return Path(os.getenv(config.SETTINGS_ENV) or config.SETTINGS_DEFAULT).expanduser()


class ConfigManager:
    """Gere a persistência das configurações do utilizador em formato JSON."""

    DEFAULTS: dict[str, Any] = {
        "rpcs3_path": "",
        "games_dir": "",
        "output_dir": "",
        "kind": "all",
        "log_format": "auto",
    }

    def __init__(self, config_file: Path | str | None = None, strict: bool = False):
        self.config_path = Path(config_file) if config_file else default_settings_path()
        self.values: dict[str, Any] = {}
        self.load(strict=strict)

    def load(self, strict: bool = False) -> None:
        """Carrega as configurações do disco, fundindo com os defaults.

        Um ficheiro ilegível é ignorado, a não ser que ``strict`` seja True.
        """
        self.values = dict(self.DEFAULTS)

        if not self.config_path.exists():
            return
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                stored = json.load(f)
        except (OSError, ValueError) as e:
            if strict:
                raise ConfigurationError(
                    f"Could not load settings from {self.config_path}", {"error": str(e)}
                ) from e
            return
        if isinstance(stored, dict):
            self.values.update(stored)
        elif strict:
            raise ConfigurationError(f"Settings file {self.config_path} is not a JSON object")

    def save(self) -> bool:
        """Grava as configurações atuais no disco."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                json.dump(self.values, f, indent=4, ensure_ascii=False)
            return True
        except OSError:
            return False

    def get(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def get_path(self, key: str) -> Optional[Path]:
        value = self.values.get(key)
        return Path(value).expanduser() if value else None

    def set(self, key: str, value: Any) -> None:
        if isinstance(value, Path):
            value = str(value)
        self.values[key] = value
