"""Configuration loading helpers for Subsidy Navigator."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .models import AppConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
APP_CONFIG_FILENAME = "app_config.yaml"
HOME_ENV = "SUBSIDY_NAVIGATOR_HOME"


def read_data_file(path: Path) -> Any:
    """Parse a YAML or JSON file, picking the parser from the suffix."""

    if path.suffix not in CONFIG_EXTENSIONS:
        raise ConfigError(f"Unsupported file type: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix in (".yaml", ".yml"):
            return yaml.safe_load(text)
        return json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot parse {path}: {exc}") from exc


def _read_file(path: Path) -> dict:
    data = read_data_file(path) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def app_config_path(self) -> Path:
        return self.data_dir / APP_CONFIG_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._cache: AppConfig | None = None

    def load_app_config(self) -> AppConfig:
        if self._cache is not None:
            return self._cache
        path = self.locator.app_config_path()
        if path.exists():
            payload = _read_file(path)
            try:
                config = AppConfig.model_validate(payload)
            except ValidationError as exc:
                raise ConfigError(f"Invalid configuration in {path}:\n{exc}") from exc
        else:
            config = AppConfig()
        self._cache = config
        return config

    def save_app_config(self, config: AppConfig) -> Path:
        path = self.locator.app_config_path()
        _write_file(path, config.model_dump(mode="json"))
        self._cache = config
        return path

    def resolve_path(self, path: Path) -> Path:
        """Anchor a relative configured path at the project root."""

        if path.is_absolute():
            return path
        return (self.locator.project_root / path).resolve()


__all__ = [
    "APP_CONFIG_FILENAME",
    "CONFIG_EXTENSIONS",
    "ConfigLocator",
    "ConfigRepository",
    "HOME_ENV",
    "read_data_file",
]
