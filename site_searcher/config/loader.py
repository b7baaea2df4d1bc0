"""Configuration loading helpers for Site-Searcher."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .models import SearchConfig

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
HOME_ENV_VAR = "SITE_SEARCHER_HOME"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def _merge(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = _merge(dict(merged[key]), value)
        elif isinstance(value, Mapping):
            merged[key] = {k: v for k, v in value.items() if v is not None}
        else:
            merged[key] = value
    return merged


@dataclass(slots=True)
class ConfigLocator:
    """Resolve the project home and its log directory."""

    project_root: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get(HOME_ENV_VAR)
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.logs_dir = (root / "logs").resolve()

    def ensure_directories(self) -> None:
        self.logs_dir.mkdir(parents=True, exist_ok=True)

    def default_config_path(self) -> Path:
        return self.project_root / "site_searcher.yaml"


class ConfigRepository:
    """Read, merge and validate run configuration."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()

    def load_search_config(
        self,
        path: Path | None = None,
        overrides: Mapping[str, Any] | None = None,
    ) -> SearchConfig:
        """Build a ``SearchConfig`` from an optional file plus CLI overrides.

        An explicitly given file must exist; the default file under the
        project home is only read when present. ``None`` overrides are ignored
        so unset CLI options keep file or model defaults.
        """

        payload: dict[str, Any] = {}
        if path is not None:
            if not path.exists():
                raise FileNotFoundError(f"Configuration file not found: {path}")
            payload = _read_file(path)
        else:
            default_path = self.locator.default_config_path()
            if default_path.exists():
                payload = _read_file(default_path)
        if overrides:
            payload = _merge(payload, overrides)
        return SearchConfig.model_validate(payload)

    def save_search_config(self, config: SearchConfig, path: Path) -> Path:
        if path.suffix not in CONFIG_EXTENSIONS:
            raise ValueError(f"Unsupported configuration extension: {path.suffix}")
        path.parent.mkdir(parents=True, exist_ok=True)
        _write_file(path, config.model_dump(mode="json"))
        return path


__all__ = ["CONFIG_EXTENSIONS", "ConfigLocator", "ConfigRepository", "HOME_ENV_VAR"]
