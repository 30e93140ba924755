#!/usr/bin/env python3
"""Finalize, reopen and explain game results from the command line."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import DEFAULT_DB_URL, create_db_engine, create_session_factory
from domain.outcomes.config import DEFAULT_CONFIG_PATH, load_engine_config
from domain.outcomes.errors import OutcomeError
from logging_setup import setup_logging
from repositories.game_repository import ensure_schema
from services.outcome_service import FinalGameView, OutcomeService, ResultsChange

DbUrlOption = Annotated[
    str,
    typer.Option(
        "--db-url",
        help="Database URL. Defaults to the local game_outcomes postgres instance.",
    ),
]
ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        help="Outcome engine TOML config.",
        exists=True,
        dir_okay=False,
    ),
]
BaseVersionOption = Annotated[
    int | None,
    typer.Option(
        "--base-version",
        help="Reject the change unless results_version still equals this value.",
    ),
]
VerboseOption = Annotated[bool, typer.Option("--verbose", help="Log at DEBUG level.")]

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Game outcome jobs.",
)


def _service(db_url: str, config_path: Path, verbose: bool) -> OutcomeService:
    setup_logging(logging.DEBUG if verbose else logging.INFO)
    config = load_engine_config(config_path)
    engine = create_db_engine(db_url)
    ensure_schema(engine)
    return OutcomeService(create_session_factory(engine), config=config)


def _fail(error: OutcomeError) -> typer.Exit:
    typer.echo(error.user_message, err=True)
    return typer.Exit(code=1)


def _echo_change(change: ResultsChange) -> None:
    typer.echo(f"game_id={change.game_id}")
    typer.echo(f"results_status={change.results_status.value}")
    typer.echo(f"results_version={change.results_version}")
    typer.echo(f"reverted_outcomes={change.reverted_outcomes}")
    typer.echo(f"reverted_social_events={change.reverted_social_events}")
    typer.echo(f"deleted_rounds={change.deleted_rounds}")


def _echo_final(view: FinalGameView) -> None:
    typer.echo(f"game_id={view.game_id}")
    typer.echo(f"results_status={view.results_status.value}")
    typer.echo(f"results_version={view.results_version}")
    typer.echo(f"finished_date={view.finished_date.isoformat() if view.finished_date else ''}")
    typer.echo(f"winner_ids={','.join(str(user_id) for user_id in view.winner_ids)}")
    if view.winning_team_ids:
        typer.echo(f"winning_team_ids={','.join(str(team_id) for team_id in view.winning_team_ids)}")
    typer.echo(f"was_edit={view.was_edit}")
    typer.echo(f"should_resolve_dependents={view.should_resolve_dependents}")
    for outcome in view.outcomes:
        position = "-" if outcome.position is None else str(outcome.position)
        typer.echo(
            f"{position:>3}  user_id={outcome.user_id:<8} "
            f"level={outcome.level_before:.3f}->{outcome.level_after:.3f} ({outcome.level_change:+.3f})  "
            f"reliability={outcome.reliability_after:.1f}  "
            f"w/t/l={outcome.wins}/{outcome.ties}/{outcome.losses}  "
            f"scores={outcome.scores_made}:{outcome.scores_lost}  "
            f"points={outcome.points_earned}"
            f"{'  winner' if outcome.is_winner else ''}"
        )


@app.command("init-db")
def init_db(db_url: DbUrlOption = DEFAULT_DB_URL) -> None:
    """Create missing outcome engine tables."""
    setup_logging()
    ensure_schema(create_db_engine(db_url))
    typer.echo("schema=ready")


@app.command("recalculate")
def recalculate(
    game_id: Annotated[int, typer.Argument(help="Game to finalize.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    """Compute winners, outcomes and level changes and mark results FINAL."""
    service = _service(db_url, config_path, verbose)
    try:
        view = service.recalculate_outcomes(game_id)
    except OutcomeError as error:
        raise _fail(error) from error
    _echo_final(view)


@app.command("edit")
def edit(
    game_id: Annotated[int, typer.Argument(help="Game to reopen for editing.")],
    base_version: BaseVersionOption = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    """Reopen FINAL results; match data is kept."""
    service = _service(db_url, config_path, verbose)
    try:
        change = service.edit_results(game_id, base_version=base_version)
    except OutcomeError as error:
        raise _fail(error) from error
    _echo_change(change)


@app.command("reset")
def reset(
    game_id: Annotated[int, typer.Argument(help="Game whose results should be cleared.")],
    base_version: BaseVersionOption = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    """Undo all effects and delete rounds, matches and sets."""
    service = _service(db_url, config_path, verbose)
    try:
        change = service.reset_results(game_id, base_version=base_version)
    except OutcomeError as error:
        raise _fail(error) from error
    _echo_change(change)


@app.command("delete")
def delete(
    game_id: Annotated[int, typer.Argument(help="Game whose results should be removed.")],
    base_version: BaseVersionOption = None,
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    """Like reset, but also zero the version and clear finished_date."""
    service = _service(db_url, config_path, verbose)
    try:
        change = service.delete_results(game_id, base_version=base_version)
    except OutcomeError as error:
        raise _fail(error) from error
    _echo_change(change)


@app.command("explain")
def explain(
    game_id: Annotated[int, typer.Argument(help="Finalized game.")],
    user_id: Annotated[int, typer.Option("--user-id", help="Player to explain.")],
    db_url: DbUrlOption = DEFAULT_DB_URL,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    """Replay one player's level change match by match."""
    service = _service(db_url, config_path, verbose)
    try:
        explanation = service.get_outcome_explanation(game_id, user_id)
    except OutcomeError as error:
        raise _fail(error) from error
    if explanation is None:
        typer.echo(f"No outcome for user_id={user_id} in game_id={game_id}", err=True)
        raise typer.Exit(code=1)

    typer.echo(
        f"level={explanation.level_before:.3f} ({explanation.level_name_before})"
        f" -> {explanation.level_after:.3f} ({explanation.level_name_after})"
        f"  change={explanation.level_change:+.3f}"
    )
    typer.echo(
        f"reliability={explanation.reliability_before:.1f} -> {explanation.reliability_after:.1f}"
        f"  games_played={explanation.games_played}"
    )
    for match in explanation.matches:
        sets = " ".join(f"{item.own_score}:{item.opponent_score}" for item in match.sets)
        typer.echo(
            f"round={match.round_number} match={match.match_number} {match.result.value:<5} "
            f"opp={match.opponents_level:.3f} diff={match.level_difference:+.3f} "
            f"base={match.base_level_change:+.4f} mult={match.multiplier:.3f} "
            f"end={match.endurance_coefficient:.3f} rel={match.reliability_coefficient:.3f} "
            f"change={match.level_change:+.4f} sets=[{sets}]"
        )
    summary = explanation.summary
    typer.echo(
        f"matches={summary.total_matches} wins={summary.wins} draws={summary.draws} "
        f"losses={summary.losses} avg_opponent_level={summary.average_opponent_level:.3f}"
    )
    if explanation.social is not None:
        social = explanation.social
        typer.echo(
            f"social={social.event_type.value} role={social.role.value} "
            f"multiplier={social.multiplier:.2f} boost={social.total:+.4f} "
            f"social_level={social.social_level_before:.3f}->{social.social_level_after:.3f}"
        )


if __name__ == "__main__":
    app()
