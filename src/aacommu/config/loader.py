"""YAML configuration loader with inheritance support.

Supports:
- Loading YAML config files
- Config inheritance via 'extends' key
- Deep merging of nested config
- Environment overrides (AACOMMU_SERVER_URL, AACOMMU_LOG_LEVEL)
"""

import os
from pathlib import Path
from typing import Any

import yaml

from . import (
    AACConfig,
    AudioConfig,
    ComposerConfig,
    GatewayConfig,
    LoggingConfig,
    TestingConfig,
    TTSConfig,
)

DEFAULT_PROFILE = "dev"
PROFILES = ("dev", "prod", "test")


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries.

    Values from override take precedence. Nested dicts are merged recursively.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_with_inheritance(path: Path) -> dict[str, Any]:
    """Load YAML file with inheritance support.

    If the file contains an 'extends' key, the base config is loaded first
    and merged with the current config.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    if "extends" in config:
        base_name = config.pop("extends")
        base_config = load_yaml_with_inheritance(path.parent / base_name)
        config = deep_merge(base_config, config)

    return config


def dict_to_config(data: dict[str, Any]) -> AACConfig:
    """Convert raw dict to typed AACConfig dataclass."""
    root = data.get("aacommu", {}) or {}

    # YAML sections may be present but empty (None)
    def section(key: str) -> dict[str, Any]:
        value = root.get(key, {})
        return value if value is not None else {}

    return AACConfig(
        gateway=GatewayConfig(**section("gateway")),
        audio=AudioConfig(**section("audio")),
        tts=TTSConfig(**section("tts")),
        composer=ComposerConfig(**section("composer")),
        logging=LoggingConfig(**section("logging")),
        testing=TestingConfig(**section("testing")),
    )


def apply_env_overrides(config: AACConfig, environ: dict[str, str] | None = None) -> AACConfig:
    """Apply environment variable overrides to a loaded config.

    Args:
        config: Config to update in place
        environ: Environment mapping (defaults to os.environ)

    Returns:
        The same config object
    """
    env = os.environ if environ is None else environ

    server_url = env.get("AACOMMU_SERVER_URL", "").strip()
    if server_url:
        config.gateway.base_url = server_url

    log_level = env.get("AACOMMU_LOG_LEVEL", "").strip()
    if log_level:
        config.logging.level = log_level.upper()

    return config


def detect_profile(environ: dict[str, str] | None = None) -> str:
    """Detect the configuration profile from AACOMMU_PROFILE.

    Unknown or missing values fall back to the dev profile.
    """
    env = os.environ if environ is None else environ
    profile = env.get("AACOMMU_PROFILE", "").strip().lower()
    return profile if profile in PROFILES else DEFAULT_PROFILE


class YAMLConfigLoader:
    """YAML configuration loader implementation."""

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize loader with optional config directory.

        Args:
            config_dir: Directory containing config files.
                        Defaults to 'config' relative to project root.
        """
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent.parent / "config"
        self._config_dir = config_dir

    def load(self, path: Path) -> AACConfig:
        """Load configuration from file path.

        Args:
            path: Path to YAML config file

        Returns:
            Parsed AACConfig
        """
        raw_config = load_yaml_with_inheritance(path)
        return dict_to_config(raw_config)

    def load_profile(self, profile: str) -> AACConfig:
        """Load configuration by profile name.

        Args:
            profile: Profile name (e.g., 'dev', 'prod')

        Returns:
            Parsed AACConfig for the profile
        """
        return self.load(self._config_dir / f"{profile}.yaml")

    def get_config_dir(self) -> Path:
        """Get the configuration directory path."""
        return self._config_dir


def load_config(
    path: str | Path | None = None,
    profile: str | None = None,
    config_dir: Path | None = None,
) -> AACConfig:
    """Load AACommu configuration.

    Args:
        path: Direct path to config file (takes precedence)
        profile: Profile name ('dev', 'prod', 'test') if path not given;
                 detected from AACOMMU_PROFILE when omitted
        config_dir: Directory holding profile files

    Returns:
        Parsed AACConfig with environment overrides applied

    Examples:
        >>> config = load_config(profile="dev")
        >>> config = load_config(path="/path/to/config.yaml")
    """
    loader = YAMLConfigLoader(config_dir)

    if path is not None:
        config = loader.load(Path(path))
    else:
        config = loader.load_profile(profile or detect_profile())

    return apply_env_overrides(config)


__all__ = [
    "DEFAULT_PROFILE",
    "PROFILES",
    "YAMLConfigLoader",
    "apply_env_overrides",
    "deep_merge",
    "detect_profile",
    "dict_to_config",
    "load_config",
    "load_yaml_with_inheritance",
]
