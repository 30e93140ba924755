"""Apply, undo and recalculate game outcomes as single units of work."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.orm import Session, sessionmaker

from db import unit_of_work
from domain.outcomes.aggregator import GameAggregation, aggregate_game
from domain.outcomes.common import GameRecord
from domain.outcomes.config import EngineConfig, default_engine_config
from domain.outcomes.explanation import Explanation, explain_player_outcome
from domain.outcomes.match_winner import compute_match_winners
from domain.outcomes.protocol import LevelChangeEventType, ResultsStatus
from domain.outcomes.rating import clamp_level, clamp_reliability
from domain.outcomes.state import (
    ResultsTransition,
    check_base_version,
    next_status,
    should_stamp_finished_date,
)
from domain.outcomes.team_variants import GameRanking, resolve_game_ranking
from domain.outcomes.validation import validate_game_for_outcomes
from models import Game, GameOutcome, LevelChangeEvent, RoundOutcome
from repositories.game_repository import (
    delete_results_structure,
    fetch_users,
    find_game,
    get_game,
    load_game_snapshot,
    update_match_winners,
)
from repositories.outcome_repository import (
    delete_game_outcomes,
    delete_level_change_events,
    delete_round_outcomes,
    fetch_game_outcomes,
)
from services.social_level import (
    apply_social_level_changes,
    has_social_level_changes,
    load_social_explanation,
    revert_social_level_changes,
)

logger = logging.getLogger(__name__)

GAME_EVENT_TYPES = (LevelChangeEventType.GAME,)


@dataclass(frozen=True)
class PlayerOutcomeView:
    user_id: int
    position: int | None
    is_winner: bool
    level_before: float
    level_after: float
    level_change: float
    reliability_before: float
    reliability_after: float
    reliability_change: float
    points_earned: int
    wins: int
    ties: int
    losses: int
    scores_made: int
    scores_lost: int


@dataclass(frozen=True)
class FinalGameView:
    """Finalized results of a game as returned to the caller."""

    game_id: int
    results_status: ResultsStatus
    results_version: int
    finished_date: datetime | None
    outcomes: tuple[PlayerOutcomeView, ...]
    winner_ids: tuple[int, ...]
    winning_team_ids: tuple[int, ...]
    display_groups: tuple[tuple[int, ...], ...]
    was_edit: bool
    should_resolve_dependents: bool


@dataclass(frozen=True)
class ResultsChange:
    """Summary of an edit, reset or delete."""

    game_id: int
    results_status: ResultsStatus
    results_version: int
    reverted_outcomes: int
    reverted_social_events: int
    deleted_rounds: int


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def _outcome_view(outcome: GameOutcome) -> PlayerOutcomeView:
    return PlayerOutcomeView(
        user_id=outcome.user_id,
        position=outcome.position,
        is_winner=outcome.is_winner,
        level_before=outcome.level_before,
        level_after=outcome.level_after,
        level_change=outcome.level_change,
        reliability_before=outcome.reliability_before,
        reliability_after=outcome.reliability_after,
        reliability_change=outcome.reliability_change,
        points_earned=outcome.points_earned,
        wins=outcome.wins,
        ties=outcome.ties,
        losses=outcome.losses,
        scores_made=outcome.scores_made,
        scores_lost=outcome.scores_lost,
    )


def _reverted(
    current: float,
    stored_after: float,
    stored_before: float,
    stored_change: float,
    clamp: Callable[[float], float],
) -> float:
    # Untouched since apply: restore the exact prior value.
    if current == stored_after:
        return stored_before
    return clamp(current - stored_change)


def _applied(
    current: float,
    stored_before: float,
    stored_after: float,
    clamp: Callable[[float], float],
) -> float:
    # Moved by a later game since the outcome was first stored: carry the delta only.
    if current == stored_before:
        return stored_after
    return clamp(current + stored_after - stored_before)


def undo_game_outcomes(session: Session, game: Game) -> int:
    """Revert rating effects of the stored outcomes and delete them; returns how many were reverted."""
    outcomes = fetch_game_outcomes(session, game.id)
    if outcomes and game.affects_rating:
        users = fetch_users(session, [outcome.user_id for outcome in outcomes], lock=True)
        for outcome in outcomes:
            user = users.get(outcome.user_id)
            if user is None:
                logger.warning("game_id=%s undo skipped for missing user_id=%s", game.id, outcome.user_id)
                continue
            user.level = _reverted(
                user.level,
                outcome.level_after,
                outcome.level_before,
                outcome.level_change,
                clamp_level,
            )
            user.reliability = _reverted(
                user.reliability,
                outcome.reliability_after,
                outcome.reliability_before,
                outcome.reliability_change,
                clamp_reliability,
            )
            user.total_points -= outcome.points_earned
            user.games_played = max(0, user.games_played - 1)
            if outcome.is_winner:
                user.games_won = max(0, user.games_won - 1)

    delete_round_outcomes(session, game.id)
    delete_game_outcomes(session, game.id)
    delete_level_change_events(session, game.id, GAME_EVENT_TYPES)
    logger.debug("game_id=%s undid outcomes=%s", game.id, len(outcomes))
    return len(outcomes)


def apply_game_outcomes(
    session: Session,
    game: Game,
    aggregation: GameAggregation,
    ranking: GameRanking,
) -> list[GameOutcome]:
    """Store outcomes computed from the aggregation's starting levels.

    For rated games the live player rows move by the stored delta, so a later
    game that already changed a player keeps its effect.
    """
    users = fetch_users(session, aggregation.scores, lock=True)
    outcomes: list[GameOutcome] = []

    for user_id in ranking.ordered_user_ids:
        score = aggregation.scores[user_id]
        placement = ranking.placements[user_id]
        user = users.get(user_id)
        if user is None:
            logger.warning("game_id=%s outcome skipped for missing user_id=%s", game.id, user_id)
            continue

        level_before = score.starting_level
        level_after = clamp_level(level_before + score.level_change)
        reliability_before = score.starting_reliability
        reliability_after = clamp_reliability(reliability_before + score.reliability_change)

        outcome = GameOutcome(
            game_id=game.id,
            user_id=user_id,
            position=placement.position,
            is_winner=placement.is_winner,
            level_before=level_before,
            level_after=level_after,
            level_change=level_after - level_before,
            reliability_before=reliability_before,
            reliability_after=reliability_after,
            reliability_change=reliability_after - reliability_before,
            points_earned=score.points_earned,
            wins=score.wins,
            ties=score.ties,
            losses=score.losses,
            scores_made=score.total_points,
            scores_lost=score.scores_lost,
        )
        session.add(outcome)
        outcomes.append(outcome)

        for round_id in aggregation.round_ids:
            session.add(
                RoundOutcome(
                    round_id=round_id,
                    user_id=user_id,
                    level_change=score.round_level_change(round_id),
                    stats_json=score.round_summary(round_id),
                )
            )

        if not game.affects_rating:
            continue

        live_level_before = user.level
        user.level = _applied(user.level, level_before, level_after, clamp_level)
        user.reliability = _applied(user.reliability, reliability_before, reliability_after, clamp_reliability)
        user.total_points += score.points_earned
        user.games_played += 1
        if placement.is_winner:
            user.games_won += 1
        if outcome.level_change != 0.0:
            session.add(
                LevelChangeEvent(
                    user_id=user_id,
                    game_id=game.id,
                    event_type=LevelChangeEventType.GAME,
                    level_before=live_level_before,
                    level_after=user.level,
                    details_json={"position": placement.position, "is_winner": placement.is_winner},
                )
            )

    return outcomes


def calculate_game_results(
    game: GameRecord,
    config: EngineConfig,
) -> tuple[GameAggregation, GameRanking]:
    aggregation = aggregate_game(game, config.rating)
    return aggregation, resolve_game_ranking(game, aggregation)


def recalculate_game_outcomes(
    session: Session,
    game_id: int,
    *,
    config: EngineConfig | None = None,
) -> FinalGameView:
    """Undo any stored outcomes, recompute from current match data and finalize the game."""
    config = config or default_engine_config()
    game = get_game(session, game_id, lock=True)
    previous_status = game.results_status
    was_edit = previous_status == ResultsStatus.FINAL or game.finished_date is not None

    starting_levels = {
        outcome.user_id: (outcome.level_before, outcome.reliability_before)
        for outcome in fetch_game_outcomes(session, game.id)
    }
    undo_game_outcomes(session, game)
    session.flush()

    record = load_game_snapshot(session, game)
    validate_game_for_outcomes(record)

    winners = compute_match_winners(record)
    changed = update_match_winners(session, winners)
    record = record.with_match_winners(winners).with_starting_levels(starting_levels)

    aggregation, ranking = calculate_game_results(record, config)
    outcomes = apply_game_outcomes(session, game, aggregation, ranking)

    game.results_status = next_status(game.id, previous_status, ResultsTransition.FINALIZE)
    game.results_version += 1
    if should_stamp_finished_date(game.entity_type, game.finished_date):
        game.finished_date = _utcnow()

    # Social boosts are granted once, on the first move into FINAL.
    if previous_status != ResultsStatus.FINAL and not has_social_level_changes(session, game.id):
        apply_social_level_changes(session, record, config.social)
    session.flush()

    logger.info(
        "game_id=%s finalized outcomes=%s winners=%s match_winners_changed=%s version=%s",
        game.id,
        len(outcomes),
        list(ranking.winner_ids),
        changed,
        game.results_version,
    )

    outcomes_by_user = {outcome.user_id: outcome for outcome in outcomes}
    return FinalGameView(
        game_id=game.id,
        results_status=game.results_status,
        results_version=game.results_version,
        finished_date=game.finished_date,
        outcomes=tuple(
            _outcome_view(outcomes_by_user[user_id])
            for user_id in ranking.ordered_user_ids
            if user_id in outcomes_by_user
        ),
        winner_ids=tuple(user_id for user_id in ranking.winner_ids if user_id in outcomes_by_user),
        winning_team_ids=ranking.winning_team_ids,
        display_groups=ranking.display_groups,
        was_edit=was_edit,
        should_resolve_dependents=previous_status != ResultsStatus.FINAL,
    )


def edit_game_results(session: Session, game_id: int, *, base_version: int | None = None) -> ResultsChange:
    """Reopen finalized results: discard outcomes and rating effects, keep match data."""
    game = get_game(session, game_id, lock=True)
    check_base_version(game.id, base_version, game.results_version)
    status = next_status(game.id, game.results_status, ResultsTransition.EDIT)

    reverted = undo_game_outcomes(session, game)
    game.results_status = status
    game.results_version += 1
    session.flush()

    logger.info("game_id=%s reopened for edit reverted_outcomes=%s", game.id, reverted)
    return ResultsChange(
        game_id=game.id,
        results_status=game.results_status,
        results_version=game.results_version,
        reverted_outcomes=reverted,
        reverted_social_events=0,
        deleted_rounds=0,
    )


def _clear_results(
    session: Session,
    game_id: int,
    transition: ResultsTransition,
    base_version: int | None,
) -> ResultsChange:
    game = get_game(session, game_id, lock=True)
    check_base_version(game.id, base_version, game.results_version)
    status = next_status(game.id, game.results_status, transition)

    reverted = undo_game_outcomes(session, game)
    reverted_social = revert_social_level_changes(session, game.id)
    deleted_rounds = delete_results_structure(session, game.id)

    game.results_status = status
    game.fixed_number_of_sets = None
    game.max_total_points_per_set = None
    game.max_points_per_team = None
    if transition == ResultsTransition.DELETE:
        game.results_version = 0
        game.finished_date = None
    else:
        game.results_version += 1
    session.flush()

    logger.info(
        "game_id=%s %s results reverted_outcomes=%s reverted_social_events=%s deleted_rounds=%s",
        game.id,
        transition.value.lower(),
        reverted,
        reverted_social,
        deleted_rounds,
    )
    return ResultsChange(
        game_id=game.id,
        results_status=game.results_status,
        results_version=game.results_version,
        reverted_outcomes=reverted,
        reverted_social_events=reverted_social,
        deleted_rounds=deleted_rounds,
    )


def reset_game_results(session: Session, game_id: int, *, base_version: int | None = None) -> ResultsChange:
    """Undo rating and social effects and discard all round/match/set data."""
    return _clear_results(session, game_id, ResultsTransition.RESET, base_version)


def delete_game_results(session: Session, game_id: int, *, base_version: int | None = None) -> ResultsChange:
    """Like reset, and also forget the results version and finished date."""
    return _clear_results(session, game_id, ResultsTransition.DELETE, base_version)


def explain_game_outcome(
    session: Session,
    game_id: int,
    user_id: int,
    *,
    config: EngineConfig | None = None,
) -> Explanation | None:
    """Replay one participant's level change from the levels captured at finalize time."""
    config = config or default_engine_config()
    game = find_game(session, game_id)
    if game is None:
        return None

    record = load_game_snapshot(session, game)
    if record.participant(user_id) is None:
        return None

    starting_levels = {
        outcome.user_id: (outcome.level_before, outcome.reliability_before)
        for outcome in fetch_game_outcomes(session, game.id)
    }
    record = record.with_starting_levels(starting_levels)
    return explain_player_outcome(
        record,
        user_id,
        params=config.rating,
        social=load_social_explanation(session, game.id, user_id),
    )


class OutcomeService:
    """Entry point for callers; each method runs in its own transaction."""

    def __init__(self, session_factory: sessionmaker[Session], *, config: EngineConfig | None = None) -> None:
        self.session_factory = session_factory
        self.config = config or default_engine_config()

    def recalculate_outcomes(self, game_id: int) -> FinalGameView:
        with unit_of_work(self.session_factory) as session:
            return recalculate_game_outcomes(session, game_id, config=self.config)

    def edit_results(self, game_id: int, *, base_version: int | None = None) -> ResultsChange:
        with unit_of_work(self.session_factory) as session:
            return edit_game_results(session, game_id, base_version=base_version)

    def reset_results(self, game_id: int, *, base_version: int | None = None) -> ResultsChange:
        with unit_of_work(self.session_factory) as session:
            return reset_game_results(session, game_id, base_version=base_version)

    def delete_results(self, game_id: int, *, base_version: int | None = None) -> ResultsChange:
        with unit_of_work(self.session_factory) as session:
            return delete_game_results(session, game_id, base_version=base_version)

    def get_outcome_explanation(self, game_id: int, user_id: int) -> Explanation | None:
        with self.session_factory() as session:
            return explain_game_outcome(session, game_id, user_id, config=self.config)


__all__ = [
    "FinalGameView",
    "OutcomeService",
    "PlayerOutcomeView",
    "ResultsChange",
    "apply_game_outcomes",
    "calculate_game_results",
    "delete_game_results",
    "edit_game_results",
    "explain_game_outcome",
    "recalculate_game_outcomes",
    "reset_game_results",
    "undo_game_outcomes",
]
