"""
Configuration — Layered settings for scanning and display

Layers, later wins:
  defaults < ~/.gitloupe/config.yaml < <repo>/.gitloupe/config.yaml < GITLOUPE_* env

Every setting has one coercer. Values read from files or the environment
that fail it are logged and replaced by the default; `set` returns the
same message instead of writing anything.

Parallelism settings live with the orchestrator (orchestrator/config.py).
"""

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from .core.query import SORT_METHODS
from .presentation.symbols import get_symbols


logger = logging.getLogger(__name__)

DEFAULT_GIT_TIMEOUT = 30.0

VALID_SYMBOLS = ("unicode", "ascii", "auto")
VALID_FORMATS = ("auto", "table", "detail", "json")

TRUE_VALUES = ("true", "1", "yes", "on")
FALSE_VALUES = ("false", "0", "no", "off")


def _parse_bool(value: Any) -> Optional[bool]:
    """Interpret YAML/env values as bool. None when unrecognized."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return None


# =============================================================================
# Coercers: raw value -> typed value, ValueError with a user message
# =============================================================================

def _to_augment(value: Any) -> bool:
    parsed = _parse_bool(value)
    if parsed is None:
        raise ValueError(f"Invalid augment setting '{value}'. Use true or false")
    return parsed


def _to_timeout(value: Any) -> float:
    if isinstance(value, bool):
        raise ValueError(f"Invalid git_timeout '{value}'. Must be a number of seconds")
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid git_timeout '{value}'. Must be a number of seconds")
    if seconds <= 0:
        raise ValueError("git_timeout must be > 0")
    return seconds


def _one_of(label: str, valid: Tuple[str, ...]) -> Callable[[Any], str]:
    def coerce(value: Any) -> str:
        if value not in valid:
            raise ValueError(f"Unknown {label} '{value}'. Valid: {', '.join(valid)}")
        return value
    return coerce


COERCERS: Dict[str, Dict[str, Callable[[Any], Any]]] = {
    "scan": {
        "augment": _to_augment,
        "git_timeout": _to_timeout,
    },
    "display": {
        "symbols": _one_of("symbols setting", VALID_SYMBOLS),
        "format": _one_of("format", VALID_FORMATS),
        "sort": _one_of("sort method", SORT_METHODS),
    },
}

ENV_OVERRIDES = {
    "GITLOUPE_AUGMENT": ("scan", "augment"),
    "GITLOUPE_GIT_TIMEOUT": ("scan", "git_timeout"),
    "GITLOUPE_SYMBOLS": ("display", "symbols"),
    "GITLOUPE_FORMAT": ("display", "format"),
}


def _first_error(section: str, values: Any) -> Optional[str]:
    for name, coerce in COERCERS[section].items():
        try:
            coerce(getattr(values, name))
        except ValueError as e:
            return str(e)
    return None


@dataclass
class ScanConfig:
    """Snapshot build settings."""
    augment: bool = True              # Ask git for packed objects when available
    git_timeout: float = DEFAULT_GIT_TIMEOUT

    def validate(self) -> Optional[str]:
        """Error message for the first bad field, or None."""
        return _first_error("scan", self)


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"
    format: str = "auto"   # "auto" | "table" | "detail" | "json"
    sort: str = "none"     # default sort method for `list`

    def validate(self) -> Optional[str]:
        return _first_error("display", self)


@dataclass
class Config:
    """Application configuration."""
    scan: ScanConfig = field(default_factory=ScanConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def to_dict(self) -> Dict[str, Any]:
        return {
            section: {f.name: getattr(getattr(self, section), f.name)
                      for f in fields(getattr(self, section))}
            for section in COERCERS
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Build from merged layers. Each unusable value falls back to its default."""
        config = cls()
        for section, coercers in COERCERS.items():
            raw = data.get(section) or {}
            if not isinstance(raw, dict):
                logger.warning("Ignoring config section %s: not a mapping", section)
                continue
            target = getattr(config, section)
            for name, coerce in coercers.items():
                if name not in raw:
                    continue
                try:
                    setattr(target, name, coerce(raw[name]))
                except ValueError as e:
                    logger.warning("Ignoring %s.%s: %s", section, name, e)
        return config


class ConfigManager:
    """Loads the layered configuration and writes single settings back."""

    CONFIG_DIR = ".gitloupe"
    CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None, user_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.user_dir = Path(user_dir) if user_dir else Path.home() / self.CONFIG_DIR
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.CONFIG_DIR / self.CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.user_dir / self.CONFIG_FILE

    def _read_layer(self, path: Path) -> Dict[str, Any]:
        """Load one YAML file. Malformed files are logged and skipped."""
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level is not a mapping", path)
            return {}
        return data

    def _env_layer(self) -> Dict[str, Any]:
        layer: Dict[str, Any] = {}
        for var, (section, name) in ENV_OVERRIDES.items():
            value = os.environ.get(var)
            if value:
                layer.setdefault(section, {})[name] = value
        return layer

    def load(self) -> Config:
        if self._config is None:
            merged: Dict[str, Any] = {}
            for layer in (self._read_layer(self.user_config_path),
                          self._read_layer(self.project_config_path),
                          self._env_layer()):
                merged = self._merge(merged, layer)
            self._config = Config.from_dict(merged)
        return self._config

    def _save(self, config: Config, path: Path):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)
        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set "section.setting" and persist it to the project or user file.

        Returns:
            Error message, or None when saved
        """
        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'scan.augment')"

        section, setting = parts
        if section not in COERCERS:
            return f"Unknown section: {section}. Valid: {', '.join(COERCERS)}"
        coercers = COERCERS[section]
        if setting not in coercers:
            return f"Unknown {section} setting: {setting}. Valid: {', '.join(coercers)}"

        try:
            typed = coercers[setting](value)
        except ValueError as e:
            return str(e)

        config = self.load()
        setattr(getattr(config, section), setting, typed)
        self._save(config, self.project_config_path if scope == "project" else self.user_config_path)
        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value as text."""
        section, _, setting = key.partition(".")
        value = self.load().to_dict().get(section, {}).get(setting)
        if value is None:
            return None
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        symbols = get_symbols(config.display.symbols)

        augment_status = f"{symbols.check_pass} On" if config.scan.augment else f"{symbols.check_fail} Off"
        lines = [
            "Configuration:",
            "",
            "Scan:",
            f"  Augment with git: {augment_status}",
            f"  Git timeout: {config.scan.git_timeout:g}s",
            "",
            "Display:",
            f"  Symbols: {config.display.symbols}",
            f"  Format: {config.display.format}",
            f"  Sort: {config.display.sort}",
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ]

        return "\n".join(lines)


def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
