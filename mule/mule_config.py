"""
Settings for the scanner and the response cache.

Values come from, in increasing order of precedence: built-in defaults, a
YAML settings file and MULE_* environment variables.

    # mule.yaml
    cache-dir: .mule
    cache-bucket: data
    cache-ttl: 300
    log-level: info
    keywords: [get, post, put, delete, patch]
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from mule.mule_scanner import DEFAULT_KEYWORDS

logger = logging.getLogger("mule.config")

DEFAULT_FILE = "mule.yaml"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    cache_dir: str = ".mule"
    cache_bucket: str = "data"
    cache_ttl: float = 300.0
    keywords: Tuple[str, ...] = DEFAULT_KEYWORDS
    log_level: str = "WARNING"


def _normalize_level(value: Any) -> str:
    level = str(value).strip().upper()
    if level not in _LEVELS:
        raise ValueError(f"invalid log level: {value!r}")
    return level


def _apply(settings: Settings, cfg: Mapping[str, Any]):
    for key, value in cfg.items():
        match key:
            case "cache-dir":
                settings.cache_dir = str(value)
            case "cache-bucket":
                settings.cache_bucket = str(value)
            case "cache-ttl":
                settings.cache_ttl = float(value)
            case "log-level":
                settings.log_level = _normalize_level(value)
            case "keywords":
                if not isinstance(value, (list, tuple)):
                    raise ValueError("keywords must be a list of words")
                settings.keywords = tuple(str(k) for k in value)
            case _:
                raise ValueError(f"unknown setting: {key!r}")


def load_settings(path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Builds the effective settings.

    Without an explicit path, `mule.yaml` in the working directory is read
    when it exists. An explicit path that does not exist is an error.
    """
    settings = Settings()
    file = Path(path) if path else Path.cwd() / DEFAULT_FILE
    if path or file.is_file():
        with file.open("r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
        if not isinstance(cfg, dict):
            raise ValueError(f"{file}: settings must be a mapping")
        logger.debug("settings loaded from %s", file)
        _apply(settings, cfg)

    env = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    if env.get("MULE_CACHE_DIR"):
        overrides["cache-dir"] = env["MULE_CACHE_DIR"]
    if env.get("MULE_CACHE_TTL"):
        overrides["cache-ttl"] = env["MULE_CACHE_TTL"]
    if env.get("MULE_LOG_LEVEL"):
        overrides["log-level"] = env["MULE_LOG_LEVEL"]
    _apply(settings, overrides)
    return settings


def configure_logging(settings: Settings):
    logging.basicConfig(level=getattr(logging, settings.log_level))
