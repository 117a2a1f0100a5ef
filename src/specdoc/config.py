from __future__ import annotations

from pathlib import Path
from typing import Any
import tomllib

from pydantic import BaseModel, ValidationError, field_validator

from specdoc.logging import get_logger

DEFAULT_CONFIG_NAME = "specdoc.toml"
PYPROJECT_NAME = "pyproject.toml"

logger = get_logger("config")


class SpecdocConfig(BaseModel):
    marker: str = "spec"
    fence_language: str = "python"

    @field_validator("marker")
    @classmethod
    def _marker_is_word(cls, value: str) -> str:
        value = value.strip()
        if not value or any(ch.isspace() or ch == ":" for ch in value):
            raise ValueError("marker must be a single word without ':'")
        return value

    @field_validator("fence_language")
    @classmethod
    def _fence_language_is_word(cls, value: str) -> str:
        value = value.strip()
        if any(ch.isspace() or ch == "`" for ch in value):
            raise ValueError("fence_language must not contain whitespace or backticks")
        return value


def _load_toml(path: Path) -> dict[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        logger.warning("ignoring unreadable config %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def _config_table(root: Path, config_path: Path | None) -> dict[str, Any]:
    if config_path is not None:
        return _load_toml(config_path)
    dedicated = root / DEFAULT_CONFIG_NAME
    if dedicated.is_file():
        return _load_toml(dedicated)
    pyproject = _load_toml(root / PYPROJECT_NAME)
    tool = pyproject.get("tool", {})
    section = tool.get("specdoc", {}) if isinstance(tool, dict) else {}
    return section if isinstance(section, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> SpecdocConfig:
    """Load settings from ``specdoc.toml`` or ``[tool.specdoc]`` in pyproject.

    Missing files give the defaults; invalid values raise ``ValueError``.
    """
    base = root if root is not None else Path.cwd()
    table = _config_table(base, config_path)
    try:
        return SpecdocConfig(**table)
    except ValidationError as exc:
        raise ValueError(f"invalid specdoc configuration: {exc}") from exc


__all__ = ["DEFAULT_CONFIG_NAME", "SpecdocConfig", "load_config"]
