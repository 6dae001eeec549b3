"""
Unit Tests for ConfigLoader.

Test Aspects Covered:
    ✅ Business Logic: Config loading, section lookup, profiles, overrides
    ✅ Error Handling: Invalid values, missing files and profiles
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from recovery_engine.config.loader import ConfigLoader, load_config, merge_settings
from recovery_engine.config.models import EngineConfig


class TestConfigLoader:
    """Test cases for ConfigLoader."""

    def test_loads_engine_section(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Shared app config with a recovery_engine section
        EXPECTED: Only that section is validated
        """
        # Arrange
        loader = ConfigLoader(base_path=sample_config_path.parent)

        # Act
        config = loader.load(sample_config_path.name)

        # Assert
        assert isinstance(config, EngineConfig)
        assert config.retry.max_retries == 2
        assert config.retry.base_delay_ms == 500
        assert config.circuit_breaker.failure_threshold == 4
        assert config.history.capacity == 200
        assert config.fallback.install_defaults is False

    def test_loads_top_level_yaml(self, tmp_path: Path) -> None:
        # Arrange
        config_file = tmp_path / "engine.yaml"
        config_file.write_text(
            """
version: "1.0"
circuit_breaker:
  cooldown_seconds: 10
"""
        )
        loader = ConfigLoader(base_path=tmp_path)

        # Act
        config = loader.load("engine.yaml")

        # Assert
        assert config.circuit_breaker.cooldown_seconds == 10
        assert config.circuit_breaker.failure_threshold == 5  # Default

    def test_applies_defaults(self) -> None:
        """
        SCENARIO: Minimal config
        EXPECTED: Defaults applied for missing sections
        """
        # Act
        config = ConfigLoader().load_from_dict({"version": "1.0"})

        # Assert
        assert config.retry.max_retries == 3
        assert config.retry.base_delay_ms == 1000
        assert config.circuit_breaker.failure_threshold == 5
        assert config.circuit_breaker.cooldown_seconds == 30
        assert config.history.capacity == 1000
        assert config.health.critical_penalty == 20

    def test_validates_invalid_config(self, tmp_path: Path) -> None:
        # Arrange
        config_file = tmp_path / "invalid.yaml"
        config_file.write_text(
            """
circuit_breaker:
  failure_threshold: 0  # Invalid: must be >= 1
"""
        )
        loader = ConfigLoader(base_path=tmp_path)

        # Act & Assert
        with pytest.raises(ValidationError):
            loader.load("invalid.yaml")

    def test_file_not_found(self, tmp_path: Path) -> None:
        # Arrange
        loader = ConfigLoader(base_path=tmp_path)

        # Act & Assert
        with pytest.raises(FileNotFoundError):
            loader.load("nonexistent.yaml")

    def test_profile_merged(self, fixtures_path: Path) -> None:
        """
        SCENARIO: Base config plus the strict profile
        EXPECTED: Profile values override, others kept
        """
        # Act
        config = load_config(
            "sample_config.yaml", profile="strict", base_path=fixtures_path
        )

        # Assert
        assert config.retry.max_retries == 1
        assert config.circuit_breaker.failure_threshold == 2
        assert config.retry.base_delay_ms == 500  # From base
        assert config.circuit_breaker.cooldown_seconds == 60  # From base

    def test_missing_profile(self, fixtures_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config("sample_config.yaml", profile="nope", base_path=fixtures_path)

    def test_overrides_win(self, fixtures_path: Path) -> None:
        # Act
        config = load_config(
            "sample_config.yaml",
            profile="strict",
            base_path=fixtures_path,
            overrides={"retry": {"max_retries": 7}},
        )

        # Assert
        assert config.retry.max_retries == 7


class TestMergeSettings:
    """Test deep merge."""

    def test_nested_merge(self) -> None:
        # Arrange
        base = {"retry": {"max_retries": 3, "base_delay_ms": 1000}}
        overlay = {"retry": {"max_retries": 5}}

        # Act
        merged = merge_settings(base, overlay)

        # Assert
        assert merged == {"retry": {"max_retries": 5, "base_delay_ms": 1000}}
        assert base["retry"]["max_retries"] == 3

    def test_scalar_replaces_dict(self) -> None:
        assert merge_settings({"a": {"b": 1}}, {"a": 2}) == {"a": 2}
