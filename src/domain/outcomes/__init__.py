"""Game outcome, rating and social-level calculation modules."""

from domain.outcomes.aggregator import (
    GameAggregation,
    MatchRatingStep,
    PlayerGameScore,
    aggregate_game,
)
from domain.outcomes.common import (
    FixedTeamRecord,
    GameRecord,
    MatchRecord,
    MatchSide,
    ParticipantRecord,
    PlayerSnapshot,
    RoundRecord,
    SetScore,
)
from domain.outcomes.config import EngineConfig, load_engine_config, load_engine_configs
from domain.outcomes.errors import (
    InvalidConfigurationError,
    InvalidStateError,
    NotFoundError,
    OutcomeError,
    VersionConflictError,
)
from domain.outcomes.explanation import Explanation, explain_player_outcome
from domain.outcomes.match_winner import compute_match_winner, compute_match_winners
from domain.outcomes.rating import RatingParameters, RatingUpdate, calculate_rating_update
from domain.outcomes.social import SocialBoost, SocialParameters, calculate_social_boosts
from domain.outcomes.team_variants import GameRanking, PlayerPlacement, resolve_game_ranking
from domain.outcomes.winner_resolver import RankedEntry, RankingEntry, rank_entries

__all__ = [
    "EngineConfig",
    "Explanation",
    "FixedTeamRecord",
    "GameAggregation",
    "GameRanking",
    "GameRecord",
    "InvalidConfigurationError",
    "InvalidStateError",
    "MatchRatingStep",
    "MatchRecord",
    "MatchSide",
    "NotFoundError",
    "OutcomeError",
    "ParticipantRecord",
    "PlayerGameScore",
    "PlayerPlacement",
    "PlayerSnapshot",
    "RankedEntry",
    "RankingEntry",
    "RatingParameters",
    "RatingUpdate",
    "RoundRecord",
    "SetScore",
    "SocialBoost",
    "SocialParameters",
    "VersionConflictError",
    "aggregate_game",
    "calculate_rating_update",
    "calculate_social_boosts",
    "compute_match_winner",
    "compute_match_winners",
    "explain_player_outcome",
    "load_engine_config",
    "load_engine_configs",
    "rank_entries",
    "resolve_game_ranking",
]
