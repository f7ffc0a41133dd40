"""YAML configuration parser for compactup.

The configuration file is optional. Every key has a default that targets the
public Compact compiler releases.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "GITHUB_TOKEN"

_KNOWN_SECTIONS = ("release_source", "unzip", "http", "lock")


@dataclass
class ReleaseSourceConfig:
    """Where compiler releases are published."""

    owner: str = "midnightntwrk"
    repo: str = "compact"
    tag_prefix: str = "compactc-v"
    api_url: str = "https://api.github.com"
    token: Optional[str] = None


@dataclass
class UnzipConfig:
    """External archive extraction program."""

    program: str = "unzip"
    args: List[str] = field(default_factory=lambda: ["-o"])


@dataclass
class CompactupConfig:
    """Complete compactup configuration."""

    release_source: ReleaseSourceConfig = field(default_factory=ReleaseSourceConfig)
    unzip: UnzipConfig = field(default_factory=UnzipConfig)
    http_timeout: int = 30
    lock_timeout: int = 300


def load_config(config_path: Path, required: bool = False) -> CompactupConfig:
    """
    Load compactup configuration.

    Args:
        config_path: Path to config.yaml
        required: If True, a missing file is an error

    Returns:
        Parsed configuration (defaults if the file doesn't exist)

    Raises:
        ConfigError: If the file is required but missing, or is invalid
    """
    data: Dict[str, Any] = {}

    if config_path.exists():
        logger.debug(f"Loading configuration from {config_path}")
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}")
        if not isinstance(data, dict):
            raise ConfigError(f"Configuration must be a mapping: {config_path}")
    elif required:
        raise ConfigError(f"Configuration file not found: {config_path}")
    else:
        logger.debug(f"Config file not found (optional): {config_path}")

    config = _parse_config(data)

    if config.release_source.token is None:
        config.release_source.token = os.environ.get(TOKEN_ENV_VAR) or None

    return config


def _parse_config(data: Dict[str, Any]) -> CompactupConfig:
    """Validate raw YAML data and build the configuration."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            logger.warning(f"Ignoring unknown configuration key: {key}")

    config = CompactupConfig()

    source = _section(data, "release_source")
    for key in ("owner", "repo", "tag_prefix", "api_url"):
        if key in source:
            setattr(config.release_source, key, _expect(source, key, str))
    # A null token leaves the GITHUB_TOKEN fallback in place.
    if source.get("token") is not None:
        config.release_source.token = _expect(source, "token", str)

    unzip = _section(data, "unzip")
    if "program" in unzip:
        config.unzip.program = _expect(unzip, "program", str)
    if "args" in unzip:
        args = _expect(unzip, "args", list)
        if not all(isinstance(arg, str) for arg in args):
            raise ConfigError("unzip.args must be a list of strings")
        config.unzip.args = list(args)

    http = _section(data, "http")
    if "timeout" in http:
        config.http_timeout = _expect_positive(http, "http.timeout")

    lock = _section(data, "lock")
    if "timeout" in lock:
        config.lock_timeout = _expect_positive(lock, "lock.timeout")

    return config


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping")
    return value


def _expect(section: Dict[str, Any], key: str, kind: type) -> Any:
    value = section[key]
    if not isinstance(value, kind):
        raise ConfigError(
            f"'{key}' must be of type {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _expect_positive(section: Dict[str, Any], name: str) -> int:
    value = section["timeout"]
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{name}' must be a positive integer, got {value!r}")
    return value
