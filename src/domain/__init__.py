"""Game outcome domain modules."""

from domain.outcomes.protocol import EntityType, ResultsStatus, WinnerRule

__all__ = ["EntityType", "ResultsStatus", "WinnerRule"]
