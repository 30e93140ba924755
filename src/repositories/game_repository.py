"""Load and lock games, and convert their stored rows into immutable domain records."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping

from sqlalchemy import delete, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

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
from domain.outcomes.errors import NotFoundError
from domain.outcomes.protocol import ParticipantRole
from models import (
    Base,
    FixedTeam,
    FixedTeamPlayer,
    Game,
    GameParticipant,
    Match,
    MatchSet,
    MatchTeam,
    MatchTeamPlayer,
    Round,
    User,
)


def ensure_schema(engine: Engine) -> None:
    """Create all outcome engine tables that do not exist yet."""
    with engine.begin() as connection:
        Base.metadata.create_all(bind=connection, checkfirst=True)


def get_game(session: Session, game_id: int, *, lock: bool = False) -> Game:
    """Fetch a game row; ``lock`` takes a row lock serializing same-game writers."""
    statement = select(Game).where(Game.id == game_id)
    if lock:
        statement = statement.with_for_update()
    game = session.execute(statement).scalar_one_or_none()
    if game is None:
        raise NotFoundError("Game", game_id)
    return game


def find_game(session: Session, game_id: int) -> Game | None:
    return session.get(Game, game_id)


def fetch_participants(session: Session, game_id: int) -> list[GameParticipant]:
    return list(
        session.execute(
            select(GameParticipant)
            .where(GameParticipant.game_id == game_id)
            .order_by(GameParticipant.user_id)
        ).scalars()
    )


def fetch_users(session: Session, user_ids: Iterable[int], *, lock: bool = False) -> dict[int, User]:
    """Fetch users by id; ``lock`` locks rows in id order so concurrent games cannot deadlock."""
    ids = sorted(set(user_ids))
    if not ids:
        return {}
    statement = select(User).where(User.id.in_(ids)).order_by(User.id)
    if lock:
        statement = statement.with_for_update()
    return {user.id: user for user in session.execute(statement).scalars()}


def _parent_roles(session: Session, game: Game, user_ids: list[int]) -> dict[int, ParticipantRole]:
    if game.parent_id is None or not user_ids:
        return {}
    rows = session.execute(
        select(GameParticipant.user_id, GameParticipant.role).where(
            GameParticipant.game_id == game.parent_id,
            GameParticipant.user_id.in_(user_ids),
        )
    ).all()
    return {row.user_id: row.role for row in rows}


def _fixed_teams(session: Session, game_id: int) -> tuple[FixedTeamRecord, ...]:
    teams = list(
        session.execute(
            select(FixedTeam).where(FixedTeam.game_id == game_id).order_by(FixedTeam.team_number, FixedTeam.id)
        ).scalars()
    )
    if not teams:
        return ()

    members: dict[int, list[int]] = defaultdict(list)
    rows = session.execute(
        select(FixedTeamPlayer.game_team_id, FixedTeamPlayer.user_id)
        .where(FixedTeamPlayer.game_team_id.in_([team.id for team in teams]))
        .order_by(FixedTeamPlayer.id)
    ).all()
    for row in rows:
        members[row.game_team_id].append(row.user_id)

    return tuple(
        FixedTeamRecord(team_id=team.id, team_number=team.team_number, player_ids=tuple(members[team.id]))
        for team in teams
    )


def _rounds(session: Session, game_id: int) -> tuple[RoundRecord, ...]:
    rounds = list(
        session.execute(
            select(Round).where(Round.game_id == game_id).order_by(Round.round_number, Round.id)
        ).scalars()
    )
    if not rounds:
        return ()

    matches = list(
        session.execute(
            select(Match)
            .where(Match.round_id.in_([round_row.id for round_row in rounds]))
            .order_by(Match.match_number, Match.id)
        ).scalars()
    )
    match_ids = [match.id for match in matches]

    teams_by_match: dict[int, list[MatchTeam]] = defaultdict(list)
    players_by_team: dict[int, list[int]] = defaultdict(list)
    sets_by_match: dict[int, list[SetScore]] = defaultdict(list)
    if match_ids:
        teams = list(
            session.execute(
                select(MatchTeam).where(MatchTeam.match_id.in_(match_ids)).order_by(MatchTeam.team_number)
            ).scalars()
        )
        for team in teams:
            teams_by_match[team.match_id].append(team)

        if teams:
            player_rows = session.execute(
                select(MatchTeamPlayer.match_team_id, MatchTeamPlayer.user_id)
                .where(MatchTeamPlayer.match_team_id.in_([team.id for team in teams]))
                .order_by(MatchTeamPlayer.id)
            ).all()
            for row in player_rows:
                players_by_team[row.match_team_id].append(row.user_id)

        set_rows = session.execute(
            select(MatchSet).where(MatchSet.match_id.in_(match_ids)).order_by(MatchSet.set_number)
        ).scalars()
        for set_row in set_rows:
            sets_by_match[set_row.match_id].append(
                SetScore(
                    set_number=set_row.set_number,
                    team_a_score=set_row.team_a_score,
                    team_b_score=set_row.team_b_score,
                    is_tie_break=set_row.is_tie_break,
                )
            )

    def side(match_id: int, team_number: int) -> MatchSide | None:
        for team in teams_by_match[match_id]:
            if team.team_number == team_number:
                return MatchSide(
                    team_id=team.id,
                    team_number=team.team_number,
                    player_ids=tuple(players_by_team[team.id]),
                )
        return None

    matches_by_round: dict[int, list[MatchRecord]] = defaultdict(list)
    for match in matches:
        matches_by_round[match.round_id].append(
            MatchRecord(
                match_id=match.id,
                match_number=match.match_number,
                team_a=side(match.id, 1),
                team_b=side(match.id, 2),
                sets=tuple(sets_by_match[match.id]),
                winner_id=match.winner_id,
            )
        )

    return tuple(
        RoundRecord(
            round_id=round_row.id,
            round_number=round_row.round_number,
            matches=tuple(matches_by_round[round_row.id]),
        )
        for round_row in rounds
    )


def load_game_snapshot(session: Session, game: Game) -> GameRecord:
    """Read a game's full round/match/set graph and the players involved."""
    participants = fetch_participants(session, game.id)
    participant_ids = [participant.user_id for participant in participants]
    parent_roles = _parent_roles(session, game, participant_ids)
    rounds = _rounds(session, game.id)
    fixed_teams = _fixed_teams(session, game.id)

    player_ids = set(participant_ids)
    for round_record in rounds:
        for match in round_record.matches:
            player_ids.update(match.player_ids())
    users = fetch_users(session, player_ids)

    return GameRecord(
        game_id=game.id,
        entity_type=game.entity_type,
        start_time=game.start_time,
        winner_rule=game.winner_rule,
        match_winner_rule=game.match_winner_rule,
        points_per_win=game.points_per_win,
        points_per_tie=game.points_per_tie,
        points_per_loose=game.points_per_loose,
        has_fixed_teams=game.has_fixed_teams,
        gender_teams=game.gender_teams,
        affects_rating=game.affects_rating,
        balls_in_games=game.balls_in_games,
        results_status=game.results_status,
        parent_id=game.parent_id,
        rounds=rounds,
        participants=tuple(
            ParticipantRecord(
                user_id=participant.user_id,
                role=participant.role,
                is_playing=participant.is_playing,
                parent_role=parent_roles.get(participant.user_id),
            )
            for participant in participants
        ),
        fixed_teams=fixed_teams,
        players={
            user.id: PlayerSnapshot(
                user_id=user.id,
                level=user.level,
                reliability=user.reliability,
                games_played=user.games_played,
                gender=user.gender,
            )
            for user in users.values()
        },
    )


def update_match_winners(session: Session, winners: Mapping[int, int | None]) -> int:
    """Persist recomputed winners; returns how many matches changed."""
    if not winners:
        return 0
    rows = session.execute(select(Match.id, Match.winner_id).where(Match.id.in_(list(winners)))).all()
    current = {match_id: winner_id for match_id, winner_id in rows}
    changed = 0
    for match_id, winner_id in winners.items():
        if match_id in current and current[match_id] != winner_id:
            session.execute(update(Match).where(Match.id == match_id).values(winner_id=winner_id))
            changed += 1
    return changed


def delete_results_structure(session: Session, game_id: int) -> int:
    """Delete every round, match, match team and set of a game; returns the number of rounds removed."""
    round_ids = list(session.execute(select(Round.id).where(Round.game_id == game_id)).scalars())
    if not round_ids:
        return 0
    match_ids = list(session.execute(select(Match.id).where(Match.round_id.in_(round_ids))).scalars())
    if match_ids:
        team_ids = list(session.execute(select(MatchTeam.id).where(MatchTeam.match_id.in_(match_ids))).scalars())
        if team_ids:
            session.execute(delete(MatchTeamPlayer).where(MatchTeamPlayer.match_team_id.in_(team_ids)))
            session.execute(delete(MatchTeam).where(MatchTeam.id.in_(team_ids)))
        session.execute(delete(MatchSet).where(MatchSet.match_id.in_(match_ids)))
        session.execute(delete(Match).where(Match.id.in_(match_ids)))
    session.execute(delete(Round).where(Round.id.in_(round_ids)))
    return len(round_ids)


__all__ = [
    "delete_results_structure",
    "ensure_schema",
    "fetch_participants",
    "fetch_users",
    "find_game",
    "get_game",
    "load_game_snapshot",
    "update_match_winners",
]
