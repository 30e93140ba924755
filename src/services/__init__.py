"""Transactional services over the outcome engine."""

from services.outcome_service import FinalGameView, OutcomeService, PlayerOutcomeView, ResultsChange

__all__ = ["FinalGameView", "OutcomeService", "PlayerOutcomeView", "ResultsChange"]
