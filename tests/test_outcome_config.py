"""Tests for TOML-based outcome engine config loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from domain.outcomes.config import (
    DEFAULT_CONFIG_PATH,
    load_engine_config,
    load_engine_configs,
)


def test_bundled_default_config_matches_parameter_defaults() -> None:
    config = load_engine_config(DEFAULT_CONFIG_PATH)
    assert config.name == "default"
    assert config.rating.base_level_change == pytest.approx(0.05)
    assert config.rating.max_level_change == pytest.approx(0.3)
    assert config.rating.points_per_win == 10
    assert config.social.max_boost_per_relationship == pytest.approx(0.06)
    assert config.social.bar_increment_per_participant == pytest.approx(0.05)


def test_load_engine_configs_from_directory(tmp_path: Path) -> None:
    config_path = tmp_path / "tuned.toml"
    config_path.write_text(
        """
[system]
name = "tuned"
description = "Faster movement"

[rating]
base_level_change = 0.08
max_level_change = 0.4
reliability_increment = 0.2
blowout_threshold = 12

[social]
max_boost_per_relationship = 0.08
min_boost_per_relationship = 0.02
""".strip()
    )

    configs = load_engine_configs(tmp_path)
    assert len(configs) == 1

    config = configs[0]
    assert config.name == "tuned"
    assert config.description == "Faster movement"
    assert config.rating.base_level_change == pytest.approx(0.08)
    assert config.rating.max_level_change == pytest.approx(0.4)
    assert config.rating.reliability_increment == pytest.approx(0.2)
    assert config.rating.blowout_threshold == 12
    assert config.rating.close_match_threshold == 3
    assert config.social.max_boost_per_relationship == pytest.approx(0.08)
    assert config.social.min_boost_per_relationship == pytest.approx(0.02)
    assert config.social.reduction_per_game == pytest.approx(0.005)
    assert config.as_config_json()["rating"]["blowout_threshold"] == 12


def test_all_parameter_defaults_when_omitted(tmp_path: Path) -> None:
    config_path = tmp_path / "defaulted.toml"
    config_path.write_text(
        """
[system]
name = "defaulted"
""".strip()
    )

    config = load_engine_config(config_path)
    assert config.description is None
    assert config.rating.min_multiplier == pytest.approx(0.3)
    assert config.rating.max_multiplier == pytest.approx(3.0)
    assert config.rating.reliability_decay_base == pytest.approx(0.95)
    assert config.social.max_games_for_reduction == 10


def test_missing_name_raises_validation_error(tmp_path: Path) -> None:
    config_path = tmp_path / "nameless.toml"
    config_path.write_text(
        """
[system]
description = "no name"
""".strip()
    )

    with pytest.raises(ValueError, match=r"\[system\]\.name is required"):
        load_engine_config(config_path)


def test_invalid_base_level_change_raises_validation_error(tmp_path: Path) -> None:
    config_path = tmp_path / "invalid.toml"
    config_path.write_text(
        """
[system]
name = "invalid"

[rating]
base_level_change = 0.0
""".strip()
    )

    with pytest.raises(ValueError, match=r"\[rating\]\.base_level_change must be > 0"):
        load_engine_configs(tmp_path)


def test_invalid_boost_bounds_raise_validation_error(tmp_path: Path) -> None:
    config_path = tmp_path / "invalid_social.toml"
    config_path.write_text(
        """
[system]
name = "invalid_social"

[social]
max_boost_per_relationship = 0.01
min_boost_per_relationship = 0.05
""".strip()
    )

    with pytest.raises(ValueError, match=r"min_boost_per_relationship must be <= max_boost_per_relationship"):
        load_engine_configs(tmp_path)


def test_duplicate_names_raise_error(tmp_path: Path) -> None:
    template = """
[system]
name = "dup"
""".strip()
    (tmp_path / "a.toml").write_text(template)
    (tmp_path / "b.toml").write_text(template)

    with pytest.raises(ValueError, match="Duplicate outcome engine config names"):
        load_engine_configs(tmp_path)


def test_missing_directory_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_engine_configs(tmp_path / "missing")
