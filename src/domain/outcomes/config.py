"""Load outcome engine settings from TOML files."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from domain.config_base import (
    BaseSystemConfig,
    load_system_configs,
    parse_system_metadata,
    read_toml,
)
from domain.outcomes.rating import RatingParameters
from domain.outcomes.social import SocialParameters

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[3] / "configs" / "outcomes" / "default.toml"


@dataclass(frozen=True)
class EngineConfig(BaseSystemConfig):
    """Rating and social-level parameters for one engine profile."""

    rating: RatingParameters = field(default_factory=RatingParameters)
    social: SocialParameters = field(default_factory=SocialParameters)

    def as_config_json(self) -> dict[str, Any]:
        return {"rating": asdict(self.rating), "social": asdict(self.social)}


def default_engine_config() -> EngineConfig:
    return EngineConfig(name="default", description=None, file_path=DEFAULT_CONFIG_PATH)


def load_engine_config(file_path: Path) -> EngineConfig:
    """Load and validate one engine TOML config file."""
    return _parse_engine_config(read_toml(file_path), file_path)


def load_engine_configs(config_dir: Path) -> list[EngineConfig]:
    """Load and validate all engine TOML config files in a directory."""
    return load_system_configs(
        config_dir,
        _parse_engine_config,
        duplicate_name_label="outcome engine",
    )


def _parse_engine_config(raw: dict[str, Any], file_path: Path) -> EngineConfig:
    name, description = parse_system_metadata(raw, file_path)
    rating_raw = raw.get("rating", {})
    social_raw = raw.get("social", {})

    defaults = RatingParameters()
    rating = RatingParameters(
        base_level_change=float(rating_raw.get("base_level_change", defaults.base_level_change)),
        max_level_change=float(rating_raw.get("max_level_change", defaults.max_level_change)),
        reliability_increment=float(
            rating_raw.get("reliability_increment", defaults.reliability_increment)
        ),
        points_per_win=int(rating_raw.get("points_per_win", defaults.points_per_win)),
        min_multiplier=float(rating_raw.get("min_multiplier", defaults.min_multiplier)),
        max_multiplier=float(rating_raw.get("max_multiplier", defaults.max_multiplier)),
        close_match_threshold=int(
            rating_raw.get("close_match_threshold", defaults.close_match_threshold)
        ),
        blowout_threshold=int(rating_raw.get("blowout_threshold", defaults.blowout_threshold)),
        endurance_points_divisor=float(
            rating_raw.get("endurance_points_divisor", defaults.endurance_points_divisor)
        ),
        balls_in_games_endurance_factor=float(
            rating_raw.get("balls_in_games_endurance_factor", defaults.balls_in_games_endurance_factor)
        ),
        reliability_decay_base=float(
            rating_raw.get("reliability_decay_base", defaults.reliability_decay_base)
        ),
    )
    _validate_rating_parameters(file_path=file_path, parameters=rating)

    social_defaults = SocialParameters()
    social = SocialParameters(
        max_boost_per_relationship=float(
            social_raw.get("max_boost_per_relationship", social_defaults.max_boost_per_relationship)
        ),
        reduction_per_game=float(social_raw.get("reduction_per_game", social_defaults.reduction_per_game)),
        max_games_for_reduction=int(
            social_raw.get("max_games_for_reduction", social_defaults.max_games_for_reduction)
        ),
        min_boost_per_relationship=float(
            social_raw.get("min_boost_per_relationship", social_defaults.min_boost_per_relationship)
        ),
        bar_increment_per_participant=float(
            social_raw.get("bar_increment_per_participant", social_defaults.bar_increment_per_participant)
        ),
    )
    _validate_social_parameters(file_path=file_path, parameters=social)

    return EngineConfig(
        name=name,
        description=description,
        file_path=file_path,
        rating=rating,
        social=social,
    )


def _validate_rating_parameters(*, file_path: Path, parameters: RatingParameters) -> None:
    if parameters.base_level_change <= 0.0:
        raise ValueError(f"{file_path}: [rating].base_level_change must be > 0")
    if parameters.max_level_change < parameters.base_level_change:
        raise ValueError(f"{file_path}: [rating].max_level_change must be >= base_level_change")
    if parameters.reliability_increment < 0.0:
        raise ValueError(f"{file_path}: [rating].reliability_increment must be >= 0")
    if parameters.points_per_win < 0:
        raise ValueError(f"{file_path}: [rating].points_per_win must be >= 0")
    if parameters.min_multiplier <= 0.0 or parameters.min_multiplier > 1.0:
        raise ValueError(f"{file_path}: [rating].min_multiplier must be between 0 and 1")
    if parameters.max_multiplier < 1.0:
        raise ValueError(f"{file_path}: [rating].max_multiplier must be >= 1")
    if parameters.close_match_threshold <= 0:
        raise ValueError(f"{file_path}: [rating].close_match_threshold must be > 0")
    if parameters.blowout_threshold <= parameters.close_match_threshold:
        raise ValueError(f"{file_path}: [rating].blowout_threshold must be > close_match_threshold")
    if parameters.endurance_points_divisor <= 0.0:
        raise ValueError(f"{file_path}: [rating].endurance_points_divisor must be > 0")
    if parameters.balls_in_games_endurance_factor <= 0.0:
        raise ValueError(f"{file_path}: [rating].balls_in_games_endurance_factor must be > 0")
    if parameters.reliability_decay_base <= 0.0 or parameters.reliability_decay_base > 1.0:
        raise ValueError(f"{file_path}: [rating].reliability_decay_base must be between 0 and 1")


def _validate_social_parameters(*, file_path: Path, parameters: SocialParameters) -> None:
    if parameters.max_boost_per_relationship <= 0.0:
        raise ValueError(f"{file_path}: [social].max_boost_per_relationship must be > 0")
    if parameters.reduction_per_game < 0.0:
        raise ValueError(f"{file_path}: [social].reduction_per_game must be >= 0")
    if parameters.max_games_for_reduction < 0:
        raise ValueError(f"{file_path}: [social].max_games_for_reduction must be >= 0")
    if parameters.min_boost_per_relationship <= 0.0:
        raise ValueError(f"{file_path}: [social].min_boost_per_relationship must be > 0")
    if parameters.min_boost_per_relationship > parameters.max_boost_per_relationship:
        raise ValueError(
            f"{file_path}: [social].min_boost_per_relationship must be <= max_boost_per_relationship"
        )
    if parameters.bar_increment_per_participant < 0.0:
        raise ValueError(f"{file_path}: [social].bar_increment_per_participant must be >= 0")


__all__ = [
    "DEFAULT_CONFIG_PATH",
    "EngineConfig",
    "default_engine_config",
    "load_engine_config",
    "load_engine_configs",
]
