"""
Configuration Loader - YAML Loading with Validation.

The engine is embedded in a larger application, so its settings may live in
their own file or under a ``recovery_engine:`` section of a shared app config.
Profiles (``config/profiles/<name>.yaml``) and explicit overrides are deep
merged on top before validation.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from recovery_engine.config.models import EngineConfig

logger = logging.getLogger(__name__)

SECTION_KEY = "recovery_engine"


class ConfigLoader:
    """Loads and validates engine configuration from YAML files."""

    def __init__(self, base_path: Optional[Path] = None) -> None:
        """
        Initialize config loader.

        Args:
            base_path: Base path for relative config and profile paths
        """
        self._base_path = base_path or Path(".")

    def load(
        self,
        config_path: Union[str, Path],
        profile: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> EngineConfig:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML config file
            profile: Optional profile name to merge
            overrides: Optional values merged last (highest precedence)

        Returns:
            Validated EngineConfig object

        Raises:
            FileNotFoundError: If config file or profile doesn't exist
            ValidationError: If config is invalid
        """
        path = self._resolve_path(config_path)
        settings = self._engine_section(self._read_yaml(path))

        if profile:
            profile_settings = self._engine_section(self._read_profile(profile))
            settings = merge_settings(settings, profile_settings)
            logger.debug(f"Applied config profile '{profile}'")

        if overrides:
            settings = merge_settings(settings, overrides)

        return EngineConfig.model_validate(settings)

    def load_from_dict(self, settings: Dict[str, Any]) -> EngineConfig:
        """Validate settings given as a dictionary (section key optional)."""
        return EngineConfig.model_validate(self._engine_section(settings))

    def _resolve_path(self, path: Union[str, Path]) -> Path:
        p = Path(path)
        return p if p.is_absolute() else self._base_path / p

    def _read_yaml(self, path: Path) -> Dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def _read_profile(self, profile: str) -> Dict[str, Any]:
        profile_path = self._base_path / "config" / "profiles" / f"{profile}.yaml"
        if not profile_path.exists():
            raise FileNotFoundError(f"Profile not found: {profile}")
        return self._read_yaml(profile_path)

    @staticmethod
    def _engine_section(document: Dict[str, Any]) -> Dict[str, Any]:
        section = document.get(SECTION_KEY)
        return dict(section) if isinstance(section, dict) else dict(document)


def merge_settings(
    base: Dict[str, Any],
    overlay: Dict[str, Any],
) -> Dict[str, Any]:
    """Deep merge overlay into base; nested dicts merge, other values replace."""
    merged = dict(base)
    for key, value in overlay.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_settings(current, value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_path: Union[str, Path],
    profile: Optional[str] = None,
    base_path: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> EngineConfig:
    """
    Convenience function to load configuration.

    Args:
        config_path: Path to YAML config file
        profile: Optional profile name
        base_path: Base path for resolving relative paths
        overrides: Optional values merged last

    Returns:
        Validated EngineConfig object
    """
    loader = ConfigLoader(base_path=base_path)
    return loader.load(config_path, profile=profile, overrides=overrides)
