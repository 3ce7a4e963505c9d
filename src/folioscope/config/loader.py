import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, List

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path("folioscope.config.yaml")
CONFIG_PATH_ENV = "FOLIOSCOPE_CONFIG"
API_URL_ENV = "FOLIOSCOPE_API_URL"

DEFAULT_SENTINEL_VALUES: Dict[str, float] = {
    "adults": 30,
    "children": 13,
    "babies": 6,
    "pets": 3,
    "person": 40,
    "price": 50000,  # "50k+" means no upper limit
    "duration": 49,
    "flexibility": 35,
}

DEFAULT_CONFIG: Dict[str, Any] = {
    "api": {
        "base_url": "http://localhost:8000/api",
        "timeout_seconds": 20,
        "login_route": "/login",
    },
    "session": {
        "path": None,
    },
    "cache": {
        "default_ttl_seconds": 4 * 60 * 60,
    },
    "filters": {
        "metric_fields": [
            "visScore",
            "globalStars",
            "zonebourseInvestisseur",
            "fintelScore",
            "zonebourseScore",
            "piotrosBeneishSloanScore",
        ],
        "indicator_fields": ["adx", "atrPercent"],
        "range_fields": ["marketcap", "lassoScore"],
        "date_fields": ["dateEnquiry", "arrival", "departure"],
        "sentinel_values": DEFAULT_SENTINEL_VALUES,
    },
}


class FilterConfig(BaseModel):
    """Static tables driving filter key resolution."""

    metric_fields: List[str] = Field(default_factory=list)
    indicator_fields: List[str] = Field(default_factory=list)
    range_fields: List[str] = Field(default_factory=list)
    date_fields: List[str] = Field(default_factory=list)
    sentinel_values: Dict[str, float] = Field(default_factory=dict)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _resolve_path(path: Path | None) -> Path:
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)
    return DEFAULT_CONFIG_PATH


def load_config(path: Path | None = None) -> Dict[str, Any]:
    """
    Load folioscope configuration from YAML, merged over built-in defaults.

    Resolution order for the file: explicit ``path``, then the
    ``FOLIOSCOPE_CONFIG`` environment variable, then ``folioscope.config.yaml``
    in the working directory. A missing default file is not an error; a
    missing explicitly requested file is.

    Args:
        path: Optional path to a config file

    Returns:
        Configuration dictionary with every section present

    Raises:
        FileNotFoundError: If an explicitly requested config file doesn't exist
        ValueError: If config structure is invalid
    """
    explicit = path is not None or bool(os.environ.get(CONFIG_PATH_ENV))
    cfg_path = _resolve_path(path)

    user_config: Dict[str, Any] = {}
    if cfg_path.exists():
        with cfg_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {cfg_path}")

    if not isinstance(user_config, dict):
        raise ValueError("Config must be a dictionary")
    for section in ("api", "session", "cache", "filters"):
        if section in user_config and not isinstance(user_config[section], dict):
            raise ValueError(f"Config section '{section}' must be a dictionary")

    config = _deep_merge(DEFAULT_CONFIG, user_config)

    env_url = os.environ.get(API_URL_ENV)
    if env_url:
        config["api"]["base_url"] = env_url
    config["api"]["base_url"] = str(config["api"]["base_url"]).rstrip("/")

    ttl = config["cache"].get("default_ttl_seconds")
    if not isinstance(ttl, (int, float)) or ttl <= 0:
        raise ValueError("Config 'cache.default_ttl_seconds' must be a positive number")

    return config


def get_filter_config(config: Dict[str, Any] | None = None) -> FilterConfig:
    """
    Build the translator tables from a loaded config.

    Args:
        config: Optional config dict. If None, loads from default path.

    Returns:
        FilterConfig instance
    """
    if config is None:
        config = load_config()

    filters = config.get("filters") or {}
    for list_key in ("metric_fields", "indicator_fields", "range_fields", "date_fields"):
        value = filters.get(list_key, [])
        if not isinstance(value, list):
            raise ValueError(f"Config 'filters.{list_key}' must be a list")
    sentinels = filters.get("sentinel_values", {})
    if not isinstance(sentinels, dict):
        raise ValueError("Config 'filters.sentinel_values' must be a dictionary")

    return FilterConfig(**filters)


def default_filter_config() -> FilterConfig:
    """Translator tables from the built-in defaults, ignoring any config file."""
    return FilterConfig(**deepcopy(DEFAULT_CONFIG["filters"]))
