"""Database repository helpers."""

from repositories.game_repository import (
    delete_results_structure,
    ensure_schema,
    fetch_participants,
    fetch_users,
    find_game,
    get_game,
    load_game_snapshot,
    update_match_winners,
)
from repositories.outcome_repository import (
    count_co_played_games,
    delete_game_outcomes,
    delete_level_change_events,
    delete_round_outcomes,
    fetch_game_outcomes,
    fetch_level_change_events,
    fetch_round_outcomes,
)

__all__ = [
    "count_co_played_games",
    "delete_game_outcomes",
    "delete_level_change_events",
    "delete_results_structure",
    "delete_round_outcomes",
    "ensure_schema",
    "fetch_game_outcomes",
    "fetch_level_change_events",
    "fetch_participants",
    "fetch_round_outcomes",
    "fetch_users",
    "find_game",
    "get_game",
    "load_game_snapshot",
    "update_match_winners",
]
