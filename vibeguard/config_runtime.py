"""Runtime configuration for VibeGuard - centralized configuration management."""

import copy
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from vibeguard.errors import ConfigError
from vibeguard.utils import constants
from vibeguard.utils.logging import logger

DEFAULTS = {
    "analysis": {
        "enable_realtime": True,
        "debounce_ms": constants.DEFAULT_DEBOUNCE_MS,
        "max_file_size": constants.DEFAULT_MAX_FILE_SIZE,
        "max_analysis_ms": constants.DEFAULT_MAX_ANALYSIS_MS,
        "max_matches_per_rule": constants.DEFAULT_MAX_MATCHES_PER_RULE,
        "supported_languages": list(constants.SUPPORTED_LANGUAGES),
    },
    "cache": {
        "ttl_seconds": constants.DEFAULT_CACHE_TTL_SECONDS,
        "capacity": constants.DEFAULT_CACHE_CAPACITY,
        "sweep_interval_seconds": constants.DEFAULT_CACHE_SWEEP_SECONDS,
    },
    "presentation": {
        "max_diagnostics_per_file": constants.DEFAULT_MAX_DIAGNOSTICS_PER_FILE,
        "group_similar": True,
        "show_quick_fixes": True,
        "max_batch_fixes": constants.DEFAULT_MAX_BATCH_FIXES,
    },
    "scan": {
        "excluded_folders": list(constants.EXCLUDED_FOLDERS),
        "rules_file": str(constants.VG_DIR / constants.RULES_FILE_NAME),
    },
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}

# (section, key, smallest accepted value)
_LOWER_BOUNDS = [
    ("analysis", "debounce_ms", 0),
    ("analysis", "max_file_size", 1),
    ("analysis", "max_analysis_ms", 1),
    ("analysis", "max_matches_per_rule", 1),
    ("cache", "ttl_seconds", 0),
    ("cache", "capacity", 1),
    ("cache", "sweep_interval_seconds", 0),
    ("presentation", "max_diagnostics_per_file", 0),
    ("presentation", "max_batch_fixes", 1),
]


def _coerce(value: str, default_value: Any) -> Any:
    """Convert an environment string to the type of the default value."""
    if isinstance(default_value, bool):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"expected a boolean, got '{value}'")
    if isinstance(default_value, int):
        return int(value)
    if isinstance(default_value, float):
        return float(value)
    if isinstance(default_value, list):
        return [v.strip() for v in value.split(",") if v.strip()]
    return value


def _accepts(default_value: Any, value: Any) -> bool:
    """Check that a JSON value is usable in place of the default."""
    if isinstance(default_value, bool):
        return isinstance(value, bool)
    if isinstance(default_value, float):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if isinstance(default_value, int):
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, type(default_value))


def load_runtime_config(root: str | Path = ".") -> dict[str, Any]:
    """
    Load runtime configuration from .vibeguard/config.json and environment variables.

    Config priority (highest to lowest):
    1. Environment variables (VIBEGUARD_<SECTION>_<KEY>)
    2. .vibeguard/config.json file
    3. Built-in defaults

    Args:
        root: Root directory to look for config file

    Returns:
        Configuration dictionary with merged values
    """
    cfg = copy.deepcopy(DEFAULTS)

    path = Path(root) / constants.VG_DIR.name / constants.CONFIG_FILE_NAME
    try:
        if path.exists():
            with open(path, encoding="utf-8") as f:
                user = json.load(f)

            if isinstance(user, dict):
                for section in cfg:
                    if section in user and isinstance(user[section], dict):
                        for key, value in user[section].items():
                            if key in cfg[section] and _accepts(cfg[section][key], value):
                                cfg[section][key] = value
                            else:
                                logger.warning(
                                    f"Ignoring config key {section}.{key} in {path}"
                                )
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not load config file from {path}: {e}")
        logger.info("Continuing with default configuration")

    for section in cfg:
        for key in cfg[section]:
            env_var = f"{constants.ENV_PREFIX}_{section.upper()}_{key.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]
                try:
                    cfg[section][key] = _coerce(value, cfg[section][key])
                except (ValueError, AttributeError) as e:
                    logger.warning(
                        f"Invalid value for environment variable {env_var}: '{value}' - {e}"
                    )
                    logger.info(f"Using default value: {cfg[section][key]}")

    return cfg


@dataclass(frozen=True)
class AnalysisSettings:
    """Tunables for the pipeline and the change monitor."""

    enable_realtime: bool = True
    debounce_ms: int = constants.DEFAULT_DEBOUNCE_MS
    max_file_size: int = constants.DEFAULT_MAX_FILE_SIZE
    max_analysis_ms: int = constants.DEFAULT_MAX_ANALYSIS_MS
    max_matches_per_rule: int = constants.DEFAULT_MAX_MATCHES_PER_RULE
    supported_languages: frozenset[str] = field(
        default_factory=lambda: frozenset(constants.SUPPORTED_LANGUAGES)
    )

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @property
    def timeout_seconds(self) -> float:
        return self.max_analysis_ms / 1000.0


@dataclass(frozen=True)
class CacheSettings:
    """Tunables for the analysis cache."""

    ttl_seconds: float = constants.DEFAULT_CACHE_TTL_SECONDS
    capacity: int = constants.DEFAULT_CACHE_CAPACITY
    sweep_interval_seconds: float = constants.DEFAULT_CACHE_SWEEP_SECONDS


@dataclass(frozen=True)
class PresentationSettings:
    """Tunables for the finding presenter."""

    max_diagnostics_per_file: int = constants.DEFAULT_MAX_DIAGNOSTICS_PER_FILE
    group_similar: bool = True
    show_quick_fixes: bool = True
    max_batch_fixes: int = constants.DEFAULT_MAX_BATCH_FIXES


@dataclass(frozen=True)
class VibeGuardSettings:
    """All runtime settings, grouped by consumer."""

    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    cache: CacheSettings = field(default_factory=CacheSettings)
    presentation: PresentationSettings = field(default_factory=PresentationSettings)
    excluded_folders: tuple[str, ...] = tuple(constants.EXCLUDED_FOLDERS)
    rules_file: str = str(constants.VG_DIR / constants.RULES_FILE_NAME)

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "VibeGuardSettings":
        """Build settings from a dictionary returned by load_runtime_config()."""
        for section, key, minimum in _LOWER_BOUNDS:
            value = cfg.get(section, {}).get(key)
            if value is not None and value < minimum:
                raise ConfigError(f"{section}.{key} must be at least {minimum}, got {value}")

        analysis = dict(cfg.get("analysis", {}))
        if "supported_languages" in analysis:
            analysis["supported_languages"] = frozenset(analysis["supported_languages"])
        scan = cfg.get("scan", {})
        return cls(
            analysis=AnalysisSettings(**analysis),
            cache=CacheSettings(**cfg.get("cache", {})),
            presentation=PresentationSettings(**cfg.get("presentation", {})),
            excluded_folders=tuple(scan.get("excluded_folders", constants.EXCLUDED_FOLDERS)),
            rules_file=scan.get("rules_file", str(constants.VG_DIR / constants.RULES_FILE_NAME)),
        )

    @classmethod
    def load(cls, root: str | Path = ".") -> "VibeGuardSettings":
        """Load settings for a project root."""
        return cls.from_config(load_runtime_config(root))
