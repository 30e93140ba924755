"""Database fixtures and row builders for service-level tests."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from db import create_db_engine, create_session_factory
from domain.outcomes.protocol import (
    EntityType,
    Gender,
    MatchWinnerRule,
    ParticipantRole,
    ResultsStatus,
    WinnerRule,
)
from models import (
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
from repositories.game_repository import ensure_schema


@pytest.fixture
def engine(tmp_path: Path) -> Iterator[Engine]:
    engine = create_db_engine(f"sqlite:///{tmp_path / 'outcomes.db'}")
    ensure_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@dataclass
class GameBuilder:
    """Writes users, games and match graphs through one session; commit before calling a service."""

    session: Session

    def commit(self) -> None:
        self.session.commit()

    def user(
        self,
        *,
        level: float = 3.0,
        reliability: float = 0.0,
        gender: Gender | None = None,
    ) -> int:
        user = User(
            level=level,
            reliability=reliability,
            social_level=0.0,
            games_played=0,
            games_won=0,
            total_points=0,
            gender=gender,
        )
        self.session.add(user)
        self.session.flush()
        return user.id

    def game(
        self,
        players: list[int],
        *,
        start_time: datetime = datetime(2026, 3, 1, 18, 0, 0),
        entity_type: EntityType = EntityType.GAME,
        winner_rule: WinnerRule = WinnerRule.BY_MATCHES_WON,
        match_winner_rule: MatchWinnerRule = MatchWinnerRule.BY_SCORES,
        results_status: ResultsStatus = ResultsStatus.IN_PROGRESS,
        has_fixed_teams: bool = False,
        owner: int | None = None,
    ) -> int:
        game = Game(
            entity_type=entity_type,
            start_time=start_time,
            winner_rule=winner_rule,
            match_winner_rule=match_winner_rule,
            results_status=results_status,
            results_version=0,
            has_fixed_teams=has_fixed_teams,
            points_per_win=0,
            points_per_tie=0,
            points_per_loose=0,
            affects_rating=True,
            balls_in_games=False,
        )
        self.session.add(game)
        self.session.flush()
        for user_id in players:
            self.session.add(
                GameParticipant(
                    game_id=game.id,
                    user_id=user_id,
                    role=ParticipantRole.OWNER if user_id == owner else ParticipantRole.PARTICIPANT,
                    is_playing=True,
                )
            )
        self.session.flush()
        return game.id

    def fixed_team(self, game_id: int, team_number: int, players: list[int]) -> int:
        team = FixedTeam(game_id=game_id, team_number=team_number)
        self.session.add(team)
        self.session.flush()
        for user_id in players:
            self.session.add(FixedTeamPlayer(game_team_id=team.id, user_id=user_id))
        self.session.flush()
        return team.id

    def round(self, game_id: int, round_number: int = 1) -> int:
        round_row = Round(game_id=game_id, round_number=round_number)
        self.session.add(round_row)
        self.session.flush()
        return round_row.id

    def match(
        self,
        round_id: int,
        team_a: list[int],
        team_b: list[int],
        scores: list[tuple[int, int]],
        *,
        match_number: int = 1,
    ) -> tuple[int, int, int]:
        """Return (match id, team A id, team B id)."""
        match = Match(round_id=round_id, match_number=match_number)
        self.session.add(match)
        self.session.flush()

        team_ids: list[int] = []
        for team_number, players in ((1, team_a), (2, team_b)):
            team = MatchTeam(match_id=match.id, team_number=team_number)
            self.session.add(team)
            self.session.flush()
            for user_id in players:
                self.session.add(MatchTeamPlayer(match_team_id=team.id, user_id=user_id))
            team_ids.append(team.id)

        for set_number, (team_a_score, team_b_score) in enumerate(scores, start=1):
            self.session.add(
                MatchSet(
                    match_id=match.id,
                    set_number=set_number,
                    team_a_score=team_a_score,
                    team_b_score=team_b_score,
                )
            )
        self.session.flush()
        return match.id, team_ids[0], team_ids[1]


@pytest.fixture
def build(session_factory: sessionmaker[Session]) -> Iterator[GameBuilder]:
    with session_factory() as session:
        yield GameBuilder(session)
